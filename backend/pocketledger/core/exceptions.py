"""Custom exceptions for the PocketLedger application."""

from __future__ import annotations


class PocketLedgerError(Exception):
    """Base exception for all PocketLedger errors."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(PocketLedgerError):
    """Raised when input validation fails."""

    pass


class NotFoundError(PocketLedgerError):
    """Raised when a transaction or budget does not exist for the caller."""

    pass


class StorageError(PocketLedgerError):
    """Raised when the persistence backend cannot be used."""

    pass


class InvalidSelectionError(PocketLedgerError):
    """Raised when a calendar selection is outside the valid month/year range."""

    def __init__(self, month: object, year: object) -> None:
        super().__init__(
            f"Invalid calendar selection: month={month!r}, year={year!r}",
            {"month": month, "year": year},
        )
        self.month = month
        self.year = year


class FetchFailedError(PocketLedgerError):
    """Raised when the API cannot be reached or answers with an error status."""

    def __init__(self, message: str, status_code: int | None = None, details: dict | None = None) -> None:
        super().__init__(message, details)
        self.status_code = status_code
