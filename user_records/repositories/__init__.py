"""
Repositories package for the user records manager.

Re-exports the repository contract and the PostgreSQL implementation so
callers can import from `user_records.repositories` directly.
"""

from user_records.repositories.abstract import AbstractUserRepository, UserRepository
from user_records.repositories.postgres import PostgresUserRepository

__all__ = [
    "AbstractUserRepository",
    "UserRepository",
    "PostgresUserRepository",
]
