"""
User Records - console-driven user manager backed by PostgreSQL.

This package provides create/read/update/delete for a single `User` entity:

- Field validation (name, email format, age range) before any write
- A service layer translating failures into one error taxonomy
- A repository running each operation in its own transaction
- An interactive menu CLI and a database bootstrap step
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from user_records.config import Settings, get_settings
from user_records.domain import (
    DuplicateEmailError,
    NotFoundError,
    StorageError,
    User,
    UserRecordsError,
    UserUpdate,
    ValidationError,
    is_valid_age,
    is_valid_email,
)
from user_records.repositories import PostgresUserRepository, UserRepository
from user_records.services import UserService
from user_records.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "User",
    "UserUpdate",
    "is_valid_age",
    "is_valid_email",
    # Errors
    "UserRecordsError",
    "ValidationError",
    "NotFoundError",
    "StorageError",
    "DuplicateEmailError",
    # Persistence and service
    "UserRepository",
    "PostgresUserRepository",
    "UserService",
    # Logging
    "configure_logging",
    "get_logger",
]
