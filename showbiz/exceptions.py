"""Domain-specific exceptions for the show-business record keeping services."""

from __future__ import annotations


class ValidationError(ValueError):
    """Raised when provided data does not meet validation requirements."""


class InvalidKindError(ValidationError):
    """Raised when a finance record kind is missing or unknown."""


class InvalidAmountError(ValidationError):
    """Raised when an amount is not a positive number."""


class InvalidDescriptionError(ValidationError):
    """Raised when a description is missing or blank."""


class InvalidDateError(ValidationError):
    """Raised when a date is missing, unparseable or in the future."""


class InvalidCategoryError(ValidationError):
    """Raised when a category is missing, unknown or does not fit the kind."""


class InvalidRangeError(ValidationError):
    """Raised when a date range starts after it ends."""


class RecordNotFoundError(LookupError):
    """Raised when a casting, participant, contract or event cannot be located."""


class DuplicateRecordError(ValueError):
    """Raised when a record with the same identifier is already registered."""


class PersistenceError(IOError):
    """Raised when the persistence layer encounters unrecoverable issues."""


class RecordFileNotFoundError(PersistenceError, FileNotFoundError):
    """Raised when a ledger file to load does not exist."""


class MalformedRecordLineError(PersistenceError):
    """Raised when a ledger file line cannot be turned into a finance record."""

    def __init__(self, line_number: int, reason: str) -> None:
        super().__init__(f"line {line_number}: {reason}")
        self.line_number = line_number
        self.reason = reason
