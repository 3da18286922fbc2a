"""Interactive console session for the ledger."""

from __future__ import annotations

import argparse
import logging
import os
import shlex
import sys
from typing import List, Optional, TextIO

from ledger_core.categories import allowed_categories
from ledger_core.draft import EntryDraft
from ledger_core.exceptions import ValidationError
from ledger_core.models import Entry, EntryFilter, EntryKind
from ledger_core.services import LedgerStore
from ledger_core.validators import parse_amount, validate_filter

logger = logging.getLogger(__name__)

PROMPT = "ledger> "
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class CommandError(Exception):
    """Raised when a session command cannot be parsed."""


class HelpRequested(CommandError):
    """Carries rendered help text back to the session."""


class _SessionParser(argparse.ArgumentParser):
    """Argument parser that reports problems instead of exiting the process."""

    def print_help(self, file: Optional[TextIO] = None) -> None:
        raise HelpRequested(self.format_help())

    def error(self, message: str) -> None:  # type: ignore[override]
        raise CommandError(message)

    def exit(self, status: int = 0, message: Optional[str] = None) -> None:  # type: ignore[override]
        raise CommandError(message or "")


def _parse_amount(value: str) -> str:
    try:
        parse_amount(value.replace(",", ""))
    except ValidationError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc
    return value.replace(",", "")


def _format_entry(entry: Entry) -> str:
    sign = "+" if entry.kind is EntryKind.INCOME else "-"
    created = entry.to_dict()["created_at"]
    return (
        f"[{entry.id}] {created} {sign}{entry.amount:.2f}\n"
        f"  Kind: {entry.kind.value} | Category: {entry.category}\n"
        f"  Description: {entry.description or '-'}"
    )


def build_command_parser() -> argparse.ArgumentParser:
    parser = _SessionParser(prog="", description="Ledger session commands", add_help=False)
    commands = parser.add_subparsers(dest="command", required=True)

    add = commands.add_parser("add", help="Add an income or expense entry")
    add.add_argument("kind", choices=[kind.value for kind in EntryKind])
    add.add_argument("category")
    add.add_argument("amount", type=_parse_amount)
    add.add_argument("-d", "--description", default="")

    delete = commands.add_parser("delete", help="Delete an entry by id")
    delete.add_argument("id")

    listing = commands.add_parser("list", help="List entries (defaults to the current view)")
    listing.add_argument("--kind", choices=[option.value for option in EntryFilter])

    view = commands.add_parser("view", help="Set the default filter for list")
    view.add_argument("kind", choices=[option.value for option in EntryFilter])

    commands.add_parser("balance", help="Show the running balance")

    categories = commands.add_parser("categories", help="Show allowed categories")
    categories.add_argument("kind", nargs="?", choices=[kind.value for kind in EntryKind])

    draft = commands.add_parser("draft", help="Fill in and submit a pending entry")
    draft_sub = draft.add_subparsers(dest="action", required=True)
    draft_sub.add_parser("show", help="Show the pending entry")
    draft_kind = draft_sub.add_parser("kind", help="Set the pending kind")
    draft_kind.add_argument("value", choices=[kind.value for kind in EntryKind])
    draft_category = draft_sub.add_parser("category", help="Set the pending category")
    draft_category.add_argument("value")
    draft_amount = draft_sub.add_parser("amount", help="Set the pending amount")
    draft_amount.add_argument("value")
    draft_description = draft_sub.add_parser("description", help="Set the pending description")
    draft_description.add_argument("words", nargs="*")
    draft_sub.add_parser("submit", help="Add the pending entry to the ledger")
    draft_sub.add_parser("reset", help="Clear the pending entry")

    commands.add_parser("help", help="Show this help")
    commands.add_parser("quit", help="End the session")
    commands.add_parser("exit", help="End the session")

    return parser


class LedgerSession:
    """Line-oriented front end over a :class:`LedgerStore`.

    Session state (entries, the pending draft, the list view) lives only as
    long as the session object.
    """

    def __init__(
        self,
        store: Optional[LedgerStore] = None,
        out: Optional[TextIO] = None,
        err: Optional[TextIO] = None,
    ) -> None:
        self.store = store if store is not None else LedgerStore()
        self.draft = EntryDraft()
        self.view = EntryFilter.ALL
        self._out = out if out is not None else sys.stdout
        self._err = err if err is not None else sys.stderr
        self._parser = build_command_parser()

    def execute(self, line: str) -> bool:
        """Run one command line; return False once the session should end."""
        try:
            tokens = shlex.split(line)
        except ValueError as exc:
            self._error(f"Could not parse command: {exc}")
            return True
        if not tokens:
            return True

        try:
            args = self._parser.parse_args(tokens)
        except HelpRequested as exc:
            self._print(str(exc).rstrip())
            return True
        except CommandError as exc:
            if str(exc):
                self._error(str(exc).strip())
            return True

        if args.command in {"quit", "exit"}:
            return False
        try:
            self._dispatch(args)
        except ValidationError as exc:
            self._error(f"Validation error: {exc}")
        return True

    def run(self, stdin: TextIO, *, interactive: bool = False) -> int:
        while True:
            if interactive:
                self._out.write(PROMPT)
                self._out.flush()
            line = stdin.readline()
            if not line:
                break
            if not self.execute(line):
                break
        return 0

    # Command handlers -----------------------------------------------------
    def _dispatch(self, args: argparse.Namespace) -> None:
        if args.command == "add":
            payload = {
                "kind": args.kind,
                "category": args.category,
                "amount": args.amount,
                "description": args.description,
            }
            entry = self.store.record_entry(payload)
            self._print("Entry added:\n" + _format_entry(entry))
            self._print_balance()
        elif args.command == "delete":
            before = len(self.store)
            balance = self.store.delete_entry(args.id)
            if len(self.store) < before:
                self._print(f"Entry {args.id} deleted.")
            else:
                self._print(f"No entry with id {args.id}.")
            self._print(f"Net balance: {balance:.2f}")
        elif args.command == "list":
            self._handle_list(args.kind)
        elif args.command == "view":
            self.view = validate_filter(args.kind)
            self._print(f"Showing {self.view.value} entries.")
        elif args.command == "balance":
            self._print_balance()
        elif args.command == "categories":
            kinds = [EntryKind(args.kind)] if args.kind else list(EntryKind)
            for kind in kinds:
                self._print(f"{kind.value}: {', '.join(allowed_categories(kind))}")
        elif args.command == "draft":
            self._handle_draft(args)
        elif args.command == "help":
            self._print(self._parser.format_help().rstrip())

    def _handle_list(self, kind: Optional[str]) -> None:
        selector = validate_filter(kind) if kind else self.view
        entries = self.store.filter_entries(selector)
        if not entries:
            self._print("No entries found.")
            return
        self._print(f"Found {len(entries)} {selector.value} entries:")
        for entry in entries:
            self._print(_format_entry(entry))

    def _handle_draft(self, args: argparse.Namespace) -> None:
        draft = self.draft
        if args.action == "kind":
            draft.set_kind(args.value)
        elif args.action == "category":
            draft.category = args.value
        elif args.action == "amount":
            draft.amount = args.value.replace(",", "").strip()
        elif args.action == "description":
            draft.description = " ".join(args.words)
        elif args.action == "reset":
            draft.reset()
        elif args.action == "submit":
            before = len(self.store)
            draft.submit(self.store)
            if len(self.store) > before:
                self._print("Draft submitted.")
                self._print_balance()
            else:
                self._print("Draft not submitted; check amount and category.")
            return
        self._print(_format_draft(draft))

    def _print_balance(self) -> None:
        self._print(f"Net balance: {self.store.balance:.2f}")

    def _print(self, text: str) -> None:
        self._out.write(text + "\n")

    def _error(self, text: str) -> None:
        self._err.write(text + "\n")


def _format_draft(draft: EntryDraft) -> str:
    data = draft.to_dict()
    return (
        f"Draft: {data['kind']} | Category: {data['category'] or '-'} | "
        f"Amount: {data['amount']} | Description: {data['description'] or '-'}"
    )


def _default_log_level() -> str:
    level = os.getenv("LEDGER_LOG_LEVEL", "WARNING").strip().upper()
    if level not in LOG_LEVELS:
        logger.warning("Ignoring unknown LEDGER_LOG_LEVEL %r", level)
        return "WARNING"
    return level


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Personal ledger console")
    parser.add_argument(
        "--log-level",
        default=_default_log_level(),
        type=str.upper,
        choices=LOG_LEVELS,
        help="Logging verbosity (default: $LEDGER_LOG_LEVEL or WARNING)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    session = LedgerSession()
    logger.debug("Ledger session started")
    return session.run(sys.stdin, interactive=sys.stdin.isatty())


if __name__ == "__main__":
    raise SystemExit(main())
