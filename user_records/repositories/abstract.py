"""
Abstract repository interface for the user records manager.

Concrete repositories implement the UserRepository protocol; the service layer
depends only on this contract, so tests can substitute an in-memory double.
"""

from __future__ import annotations

import abc
from typing import List, Optional, Protocol, runtime_checkable

from user_records.domain.models import User


@runtime_checkable
class UserRepository(Protocol):
    """
    Durable CRUD for `User`, one storage transaction per logical operation.

    Failures surface as `StorageError` (or `DuplicateEmailError` for email
    conflicts); "not found" on lookup is a normal `None` result, while
    `update`/`delete` of a missing id raise `NotFoundError`.
    """

    def save(self, user: User) -> User:
        """Insert a transient user and return the persisted copy (id, created_at set)."""
        ...

    def find_by_id(self, user_id: int) -> Optional[User]:
        """Return the user with `user_id`, or None when absent."""
        ...

    def find_all(self) -> List[User]:
        """Return all users in id order, capped at the configured limit."""
        ...

    def update(self, user: User) -> User:
        """Overwrite name, email and age of a persisted user and return the stored row."""
        ...

    def delete(self, user_id: int) -> None:
        """Remove the user with `user_id`; raise NotFoundError when absent."""
        ...


class AbstractUserRepository(abc.ABC):
    """
    Optional ABC helper for class-based implementations.
    """

    @abc.abstractmethod
    def save(self, user: User) -> User:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def find_by_id(self, user_id: int) -> Optional[User]:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    def find_all(self) -> List[User]:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    def update(self, user: User) -> User:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    def delete(self, user_id: int) -> None:  # pragma: no cover
        raise NotImplementedError


__all__ = ["UserRepository", "AbstractUserRepository"]
