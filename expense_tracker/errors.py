"""
Domain errors raised by the expense service.

Each error carries the HTTP status the API layer translates it to, so the
service never imports the web framework.
"""

from typing import Optional


class ExpenseTrackerError(Exception):
    """Base exception for client-facing failures."""

    status_code: int = 500

    def __init__(self, message: str, data: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.data = data


class BadRequestError(ExpenseTrackerError):
    """Missing or malformed input. Nothing was processed."""
    status_code = 400


class AuthenticationError(ExpenseTrackerError):
    """The request did not identify a user."""
    status_code = 401


class ExpenseNotFoundError(ExpenseTrackerError):
    """
    No expense with this id belongs to the caller.

    Deliberately the same error whether the id does not exist or belongs
    to someone else.
    """
    status_code = 404

    def __init__(self, message: str = "Expense not found"):
        super().__init__(message)


class NoValidRecordsError(BadRequestError):
    """A CSV import contained no rows to insert and no row errors."""

    def __init__(self, message: str = "No valid expenses found in CSV"):
        super().__init__(message)


class ImportValidationError(BadRequestError):
    """A CSV import was rejected because at least one row is invalid."""

    def __init__(self, errors: list[str], valid_count: int):
        super().__init__(
            "Validation errors in CSV data",
            data={"errors": errors, "validCount": valid_count},
        )
        self.errors = errors
        self.valid_count = valid_count
