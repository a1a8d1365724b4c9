"""Error taxonomy for transaction operations.

Each error carries the HTTP status the API answers with.
"""

from __future__ import annotations


class TransactionError(Exception):
    """Base error for transaction store and access-control failures."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class TransactionValidationError(TransactionError):
    """A required field is missing or malformed."""

    status_code = 400


class InvalidIdError(TransactionError):
    """The identifier is not a valid store identifier."""

    status_code = 400


class UnauthenticatedError(TransactionError):
    """Missing or unverifiable bearer credential."""

    status_code = 401


class ForbiddenError(TransactionError):
    """Caller email does not own the record."""

    status_code = 403


class NotFoundError(TransactionError):
    status_code = 404


class StoreFailureError(TransactionError):
    """The underlying storage call failed."""

    status_code = 500
