"""Pending entry owned by a ledger collaborator until it is submitted."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict

from .categories import is_allowed
from .exceptions import ValidationError
from .models import EntryKind
from .services import LedgerStore
from .validators import validate_kind

logger = logging.getLogger(__name__)


@dataclass
class EntryDraft:
    """Mutable candidate filled in field by field before submission.

    ``amount`` holds whatever the user typed; it is only parsed when the
    draft is submitted.
    """

    kind: EntryKind = EntryKind.EXPENSE
    category: str = ""
    amount: Any = 0
    description: str = ""

    def reset(self) -> None:
        """Return the draft to its blank state."""
        self.kind = EntryKind.EXPENSE
        self.category = ""
        self.amount = 0
        self.description = ""

    def set_kind(self, value: object) -> None:
        kind = validate_kind(value)
        if self.category and not is_allowed(kind, self.category):
            self.category = ""
        self.kind = kind

    def submit(self, store: LedgerStore) -> Decimal:
        """Add the draft to ``store`` and clear it if accepted.

        A rejected draft keeps its contents so the user can correct it; no
        error is raised.
        """
        try:
            balance = store.add_entry(self, strict=True)
        except ValidationError as exc:
            logger.debug("Draft not submitted: %s", exc)
            return store.balance
        self.reset()
        return balance

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "category": self.category,
            "amount": str(self.amount),
            "description": self.description,
        }
