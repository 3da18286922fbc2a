"""Validation helpers shared by the ledger store and its collaborators."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Mapping, Union

from .categories import allowed_categories, is_allowed
from .exceptions import InvalidAmountError, InvalidCategoryError, InvalidKindError, ValidationError
from .models import EntryFilter, EntryKind


def parse_amount(raw: object, field: str = "amount") -> Decimal:
    """Convert raw input to a finite Decimal strictly greater than zero.

    The value is kept as given; rounding to cents is left to presentation.
    """
    # bool is an int subclass; True must not sneak through as 1.00.
    if raw is None or isinstance(raw, bool):
        raise InvalidAmountError(f"{field} must be a numeric value")
    text = raw.strip() if isinstance(raw, str) else str(raw)
    try:
        amount = Decimal(text)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise InvalidAmountError(f"{field} must be a numeric value") from exc

    if not amount.is_finite():
        raise InvalidAmountError(f"{field} must be a finite number")

    if amount <= 0:
        raise InvalidAmountError(f"{field} must be greater than zero")
    return amount


def validate_kind(value: object, field: str = "kind") -> EntryKind:
    if isinstance(value, EntryKind):
        return value
    if not isinstance(value, str):
        raise InvalidKindError(f"{field} must be a string")
    try:
        return EntryKind(value.strip().lower())
    except ValueError as exc:
        allowed = ", ".join(kind.value for kind in EntryKind)
        raise InvalidKindError(f"{field} must be one of: {allowed}") from exc


def validate_filter(value: Union[str, EntryFilter, EntryKind, None]) -> EntryFilter:
    if value is None:
        return EntryFilter.ALL
    if isinstance(value, EntryFilter):
        return value
    if isinstance(value, EntryKind):
        return EntryFilter(value.value)
    if not isinstance(value, str):
        raise ValidationError("filter must be a string")
    try:
        return EntryFilter(value.strip().lower())
    except ValueError as exc:
        allowed = ", ".join(option.value for option in EntryFilter)
        raise ValidationError(f"filter must be one of: {allowed}") from exc


def validate_category(kind: EntryKind, value: object) -> str:
    if value is None:
        raise InvalidCategoryError("category is required")
    if not isinstance(value, str):
        raise InvalidCategoryError("category must be a string")
    category = value.strip()
    if not category:
        raise InvalidCategoryError("category cannot be empty")
    if not is_allowed(kind, category):
        allowed = ", ".join(allowed_categories(kind))
        raise InvalidCategoryError(
            f"category '{category}' is not valid for {kind.value}; choose one of: {allowed}"
        )
    return category


def normalize_description(value: object) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError("description must be a string")
    return value


def validate_candidate(payload: Mapping[str, object]) -> dict:
    """Validate a raw candidate and return the normalised entry fields.

    The amount is checked first, then the kind and category, so the error
    reported for a candidate that is wrong in several ways is the amount one.
    """
    amount = parse_amount(payload.get("amount"))
    kind = validate_kind(payload.get("kind"))
    return {
        "kind": kind,
        "category": validate_category(kind, payload.get("category")),
        "amount": amount,
        "description": normalize_description(payload.get("description")),
    }

