"""
Domain package for the user records manager.

Exports the `User` entity, the partial-update patch, field validators and the
error taxonomy. Keep this package free of storage concerns.
"""

from user_records.domain.exceptions import (
    DuplicateEmailError,
    NotFoundError,
    StorageError,
    UserRecordsError,
    ValidationError,
)
from user_records.domain.models import User, UserUpdate
from user_records.domain.validators import is_blank, is_valid_age, is_valid_email

__all__ = [
    "User",
    "UserUpdate",
    "is_blank",
    "is_valid_age",
    "is_valid_email",
    "UserRecordsError",
    "ValidationError",
    "NotFoundError",
    "StorageError",
    "DuplicateEmailError",
]
