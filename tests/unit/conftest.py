"""
Test doubles for unit tests that must not touch PostgreSQL.

- `FakeConnectionPool` mimics the slice of psycopg_pool/psycopg the repository
  uses and records commits, rollbacks and connection releases.
- `InMemoryUserRepository` behaves like the PostgreSQL repository, including
  the unique email constraint.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional, Sequence, Union

import pytest

from user_records.domain.exceptions import DuplicateEmailError, NotFoundError
from user_records.domain.models import User
from user_records.services.user_service import UserService

Response = Union[List[Dict[str, Any]], BaseException]


def user_row(
    user_id: int = 1,
    name: str = "Ann",
    email: str = "ann@x.com",
    age: Optional[int] = 30,
) -> Dict[str, Any]:
    return {
        "id": user_id,
        "name": name,
        "email": email,
        "age": age,
        "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
    }


class FakeCursor:
    def __init__(self, pool: "FakeConnectionPool") -> None:
        self._pool = pool
        self._rows: List[Dict[str, Any]] = []

    def __enter__(self) -> "FakeCursor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        del exc_type, exc, tb

    def execute(self, query: str, params: Optional[Sequence[Any]] = None) -> "FakeCursor":
        self._pool.statements.append((query, tuple(params) if params is not None else None))
        response = self._pool.responses.pop(0) if self._pool.responses else []
        if isinstance(response, BaseException):
            raise response
        self._rows = list(response)
        return self

    def fetchone(self) -> Optional[Dict[str, Any]]:
        return self._rows[0] if self._rows else None

    def fetchall(self) -> List[Dict[str, Any]]:
        return list(self._rows)


class FakeTransaction:
    def __init__(self, pool: "FakeConnectionPool") -> None:
        self._pool = pool

    def __enter__(self) -> "FakeTransaction":
        self._pool.transactions += 1
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        del exc, tb
        if exc_type is None:
            self._pool.commits += 1
        else:
            self._pool.rollbacks += 1
        return False


class FakeConnection:
    def __init__(self, pool: "FakeConnectionPool") -> None:
        self._pool = pool

    def transaction(self) -> FakeTransaction:
        return FakeTransaction(self._pool)

    def cursor(self, row_factory: Any = None) -> FakeCursor:
        del row_factory
        return FakeCursor(self._pool)

    def execute(self, query: str, params: Optional[Sequence[Any]] = None) -> FakeCursor:
        return FakeCursor(self._pool).execute(query, params)


class FakeConnectionPool:
    """
    Records what the repository does with its connections.

    `responses` is consumed one item per executed statement: a list of row
    dicts becomes the result set, an exception instance is raised.
    """

    def __init__(self, responses: Optional[List[Response]] = None) -> None:
        self.responses: List[Response] = list(responses or [])
        self.statements: List[tuple] = []
        self.borrowed = 0
        self.released = 0
        self.transactions = 0
        self.commits = 0
        self.rollbacks = 0
        self.closed = False

    @contextmanager
    def connection(self) -> Iterator[FakeConnection]:
        if self.closed:
            raise RuntimeError("pool is already closed")
        self.borrowed += 1
        try:
            yield FakeConnection(self)
        finally:
            self.released += 1

    def close(self) -> None:
        self.closed = True

    @property
    def executed_sql(self) -> List[str]:
        return [query for query, _ in self.statements]


class InMemoryUserRepository:
    """Dict-backed repository with PostgreSQL-like id and uniqueness behavior."""

    def __init__(self, find_all_limit: int = 100) -> None:
        self.find_all_limit = find_all_limit
        self._rows: Dict[int, User] = {}
        self._next_id = 1
        self.calls: List[str] = []

    def _email_taken(self, email: str, exclude_id: Optional[int] = None) -> bool:
        return any(
            row.email == email and row_id != exclude_id for row_id, row in self._rows.items()
        )

    def save(self, user: User) -> User:
        self.calls.append("save")
        if self._email_taken(user.email):
            raise DuplicateEmailError("save", user.email)
        stored = User(
            id=self._next_id,
            name=user.name,
            email=user.email,
            age=user.age,
            created_at=datetime.now(timezone.utc),
        )
        self._rows[stored.id] = stored
        self._next_id += 1
        return stored.model_copy()

    def find_by_id(self, user_id: int) -> Optional[User]:
        self.calls.append("find_by_id")
        row = self._rows.get(user_id)
        return row.model_copy() if row is not None else None

    def find_all(self) -> List[User]:
        self.calls.append("find_all")
        return [self._rows[key].model_copy() for key in sorted(self._rows)][: self.find_all_limit]

    def update(self, user: User) -> User:
        self.calls.append("update")
        current = self._rows.get(user.id)
        if current is None:
            raise NotFoundError(user.id)
        if self._email_taken(user.email, exclude_id=user.id):
            raise DuplicateEmailError("update", user.email)
        stored = current.model_copy(
            update={"name": user.name, "email": user.email, "age": user.age}
        )
        self._rows[user.id] = stored
        return stored.model_copy()

    def delete(self, user_id: int) -> None:
        self.calls.append("delete")
        if user_id not in self._rows:
            raise NotFoundError(user_id)
        del self._rows[user_id]


@pytest.fixture
def fake_pool() -> FakeConnectionPool:
    return FakeConnectionPool()


@pytest.fixture
def make_fake_pool():
    """Factory fixture: build a fake pool scripted with responses."""
    return FakeConnectionPool


@pytest.fixture
def make_user_row():
    return user_row


@pytest.fixture
def memory_repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def service(memory_repository: InMemoryUserRepository) -> UserService:
    return UserService(memory_repository)
