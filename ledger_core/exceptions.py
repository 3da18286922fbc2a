"""Domain-specific exceptions for the ledger core."""

class ValidationError(ValueError):
    """Raised when a candidate entry does not meet validation requirements."""


class InvalidAmountError(ValidationError):
    """Raised when an amount is non-numeric, non-finite, or not above zero."""


class InvalidKindError(ValidationError):
    """Raised when an entry kind is neither income nor expense."""


class InvalidCategoryError(ValidationError):
    """Raised when a category is missing or not allowed for the entry kind."""


class RecordNotFoundError(LookupError):
    """Raised when a ledger entry cannot be located."""
