"""
Error taxonomy for the user records manager.

Three kinds of failure reach callers of the service layer:

- ``ValidationError``: input broke a business rule before storage was touched.
- ``NotFoundError``: the input was well-formed but names a user that does not exist.
- ``StorageError``: the transactional operation failed and was rolled back.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class UserRecordsError(Exception):
    """Base exception for all user records errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def with_context(self, context: str) -> "UserRecordsError":
        """
        Return an error of the same class whose message is prefixed by `context`.

        Callers raise the result ``from`` the original error so the cause chain
        keeps the low-level failure.
        """
        wrapped = self.__class__.__new__(self.__class__)
        UserRecordsError.__init__(wrapped, f"{context}: {self.message}", dict(self.details))
        return wrapped


class ValidationError(UserRecordsError):
    """Raised when input fails a business rule (name, email, age or id)."""

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        details: Dict[str, Any] = {}
        if field is not None:
            details = {"field": field, "value": value}
        super().__init__(message=message, details=details)


class NotFoundError(UserRecordsError):
    """Raised when an update or delete targets a user id that does not exist."""

    def __init__(self, user_id: int):
        super().__init__(
            message=f"User not found with ID: {user_id}", details={"user_id": user_id}
        )


class StorageError(UserRecordsError):
    """Raised when a storage operation fails; the transaction has been rolled back."""

    def __init__(self, operation: str, reason: Optional[str] = None):
        message = f"Database operation '{operation}' failed"
        if reason:
            message += f": {reason}"
        super().__init__(
            message=message, details={"operation": operation, "reason": reason}
        )


class DuplicateEmailError(StorageError):
    """Raised when an insert or update conflicts with the unique email constraint."""

    def __init__(self, operation: str, email: Optional[str] = None):
        super().__init__(
            operation=operation,
            reason=f"duplicate email, a user with email '{email}' already exists",
        )
        self.details["email"] = email


__all__ = [
    "UserRecordsError",
    "ValidationError",
    "NotFoundError",
    "StorageError",
    "DuplicateEmailError",
]
