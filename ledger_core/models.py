"""Data models for the ledger domain."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict

__all__ = ["Entry", "EntryFilter", "EntryKind", "isoformat_utc"]


def isoformat_utc(dt: datetime) -> str:
    """Return an ISO 8601 string with trailing Z for UTC-aware datetimes."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)
    iso = dt.isoformat(timespec="seconds")
    # datetime.isoformat renders +00:00 for UTC; replace with the shorter Z form.
    return iso.replace("+00:00", "Z")


class EntryKind(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class EntryFilter(str, Enum):
    """View selector: every entry, or only one kind."""

    ALL = "all"
    INCOME = "income"
    EXPENSE = "expense"

    def matches(self, kind: EntryKind) -> bool:
        return self is EntryFilter.ALL or self.value == kind.value


@dataclass(frozen=True)
class Entry:
    id: str
    kind: EntryKind
    category: str
    amount: Decimal
    description: str
    created_at: datetime

    @property
    def signed_amount(self) -> Decimal:
        """Amount as it contributes to the balance."""
        return self.amount if self.kind is EntryKind.INCOME else -self.amount

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the entry to JSON-friendly natives."""
        return {
            "id": self.id,
            "kind": self.kind.value,
            "category": self.category,
            "amount": f"{self.amount:.2f}",
            "description": self.description,
            "created_at": isoformat_utc(self.created_at),
        }
