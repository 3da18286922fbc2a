"""Fixed category configuration keyed by entry kind."""

from __future__ import annotations

from typing import FrozenSet, Mapping, Tuple

from .models import EntryKind

__all__ = ["CATEGORIES", "allowed_categories", "is_allowed"]

# Ordered as presented to users; membership checks go through the frozensets below.
_ORDERED: Mapping[EntryKind, Tuple[str, ...]] = {
    EntryKind.INCOME: ("Salary", "Freelance", "Investments", "Other"),
    EntryKind.EXPENSE: (
        "Food",
        "Housing",
        "Transport",
        "Utilities",
        "Entertainment",
        "Other",
    ),
}

CATEGORIES: Mapping[EntryKind, FrozenSet[str]] = {
    kind: frozenset(names) for kind, names in _ORDERED.items()
}


def allowed_categories(kind: EntryKind) -> Tuple[str, ...]:
    """Return the categories for ``kind`` in display order."""
    return _ORDERED[kind]


def is_allowed(kind: EntryKind, category: str) -> bool:
    return category in CATEGORIES[kind]
