"""Core ledger logic: entries, balance derivation, and filtered views."""

from .categories import CATEGORIES, allowed_categories
from .draft import EntryDraft
from .exceptions import (
    InvalidAmountError,
    InvalidCategoryError,
    InvalidKindError,
    RecordNotFoundError,
    ValidationError,
)
from .models import Entry, EntryFilter, EntryKind
from .services import LedgerStore, compute_balance

__all__ = [
    "CATEGORIES",
    "allowed_categories",
    "EntryDraft",
    "Entry",
    "EntryFilter",
    "EntryKind",
    "LedgerStore",
    "compute_balance",
    "InvalidAmountError",
    "InvalidCategoryError",
    "InvalidKindError",
    "RecordNotFoundError",
    "ValidationError",
]
