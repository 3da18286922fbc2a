"""Framework-agnostic ledger store."""

from __future__ import annotations

import logging
import threading
from collections import abc
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Set, Tuple, Union
from uuid import uuid4

from .exceptions import RecordNotFoundError, ValidationError
from .models import Entry, EntryFilter, EntryKind
from .validators import validate_candidate, validate_filter

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")

Clock = Callable[[], datetime]
Candidate = Union[Mapping[str, object], object]


def compute_balance(entries: Iterable[Entry]) -> Decimal:
    """Signed sum of ``entries``: income adds, expense subtracts."""
    return sum((entry.signed_amount for entry in entries), start=ZERO)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _candidate_fields(candidate: Candidate) -> Mapping[str, object]:
    if isinstance(candidate, abc.Mapping):
        return candidate
    # Draft-like objects expose the candidate fields as attributes.
    return {
        name: getattr(candidate, name, None)
        for name in ("kind", "category", "amount", "description")
    }


class LedgerStore:
    """Single source of truth for entries, the balance, and filtered views.

    Every mutation recomputes the balance from scratch before releasing the
    lock, so readers never see ``entries`` and ``balance`` disagree.
    """

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self._clock = clock or _utc_now
        self._entries: List[Entry] = []
        self._balance = ZERO
        self._issued_ids: Set[str] = set()
        self._lock = threading.RLock()

    # Public API -----------------------------------------------------------
    def add_entry(self, candidate: Candidate, *, strict: bool = False) -> Decimal:
        """Validate and append ``candidate``; return the resulting balance.

        Invalid candidates leave the ledger untouched. They are dropped
        silently unless ``strict`` is set, in which case the
        :class:`ValidationError` describing the problem propagates.
        """
        try:
            data = validate_candidate(_candidate_fields(candidate))
        except ValidationError as exc:
            if strict:
                raise
            logger.debug("Rejected ledger entry: %s", exc)
            return self.balance
        _, balance = self._append(data)
        return balance

    def record_entry(self, candidate: Candidate) -> Entry:
        """Validate and append ``candidate``, returning the stored entry.

        Raises :class:`ValidationError` for invalid candidates.
        """
        entry, _ = self._append(validate_candidate(_candidate_fields(candidate)))
        return entry

    def delete_entry(self, entry_id: str) -> Decimal:
        """Remove the entry with ``entry_id`` if present; return the balance."""
        with self._lock:
            remaining = [entry for entry in self._entries if entry.id != entry_id]
            if len(remaining) == len(self._entries):
                logger.debug("Delete ignored, no entry with id %s", entry_id)
            else:
                self._entries = remaining
                logger.info("Deleted entry %s", entry_id)
            self._recompute()
            return self._balance

    def filter_entries(
        self, kind_filter: Union[str, EntryFilter, EntryKind, None] = EntryFilter.ALL
    ) -> List[Entry]:
        """Return entries matching ``kind_filter`` in insertion order."""
        selector = validate_filter(kind_filter)
        with self._lock:
            return [entry for entry in self._entries if selector.matches(entry.kind)]

    def get_entry(self, entry_id: str) -> Entry:
        """Return an entry or raise if it does not exist."""
        with self._lock:
            for entry in self._entries:
                if entry.id == entry_id:
                    return entry
        raise RecordNotFoundError(f"Entry {entry_id} not found")

    def totals(self) -> Dict[str, Decimal]:
        """Income and expense sums over the current entries."""
        totals = {kind.value: ZERO for kind in EntryKind}
        for entry in self.entries:
            totals[entry.kind.value] += entry.amount
        return totals

    @property
    def balance(self) -> Decimal:
        with self._lock:
            return self._balance

    @property
    def entries(self) -> Tuple[Entry, ...]:
        with self._lock:
            return tuple(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    # Internal helpers -----------------------------------------------------
    def _append(self, data: Mapping[str, object]) -> Tuple[Entry, Decimal]:
        with self._lock:
            entry = Entry(id=self._next_id(), created_at=self._clock(), **data)
            self._entries.append(entry)
            self._recompute()
            logger.info(
                "Added %s entry %s (%s %s)",
                entry.kind.value,
                entry.id,
                entry.category,
                entry.amount,
            )
            return entry, self._balance

    def _recompute(self) -> None:
        self._balance = compute_balance(self._entries)

    def _next_id(self) -> str:
        # Ids stay unique for the whole session, including deleted entries.
        while True:
            candidate = str(uuid4())
            if candidate not in self._issued_ids:
                self._issued_ids.add(candidate)
                return candidate
