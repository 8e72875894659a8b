"""
PostgreSQL repository for users, built on a psycopg connection pool.

Every operation borrows one connection from the pool and returns it on every
exit path. Mutating operations run through `run_in_transaction`, which commits
when the unit of work returns and rolls back when it raises.
"""

from __future__ import annotations

from typing import Callable, List, Optional, TypeVar

import psycopg
from psycopg import Cursor, errors
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from user_records.config import get_settings
from user_records.domain.exceptions import (
    DuplicateEmailError,
    NotFoundError,
    StorageError,
    UserRecordsError,
)
from user_records.domain.models import User
from user_records.repositories.abstract import AbstractUserRepository
from user_records.utils.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")

COLUMNS = "id, name, email, age, created_at"

INSERT_SQL = f"INSERT INTO users (name, email, age) VALUES (%s, %s, %s) RETURNING {COLUMNS};"
SELECT_BY_ID_SQL = f"SELECT {COLUMNS} FROM users WHERE id = %s;"
SELECT_ALL_SQL = f"SELECT {COLUMNS} FROM users ORDER BY id LIMIT %s;"
UPDATE_SQL = (
    f"UPDATE users SET name = %s, email = %s, age = %s WHERE id = %s RETURNING {COLUMNS};"
)
LOCK_BY_ID_SQL = "SELECT id FROM users WHERE id = %s FOR UPDATE;"
DELETE_SQL = "DELETE FROM users WHERE id = %s;"


class PostgresUserRepository(AbstractUserRepository):
    """
    User repository backed by PostgreSQL.

    Parameters
    ----------
    pool : ConnectionPool
        Open pool owned by the caller; the repository never closes it.
    find_all_limit : int | None
        Maximum number of rows returned by `find_all`; defaults to settings.
    """

    def __init__(self, pool: ConnectionPool, find_all_limit: Optional[int] = None) -> None:
        self._pool = pool
        if find_all_limit is None:
            find_all_limit = get_settings().find_all_limit
        if find_all_limit < 1:
            raise ValueError(f"find_all_limit must be at least 1, got {find_all_limit}")
        self.find_all_limit = find_all_limit

    def run_in_transaction(
        self,
        operation: str,
        work: Callable[[Cursor], T],
        email: Optional[str] = None,
    ) -> T:
        """
        Run `work` inside one transaction and return its result.

        The transaction commits when `work` returns and rolls back when it
        raises. Domain errors raised by `work` propagate unchanged; driver
        errors are translated to `DuplicateEmailError` or `StorageError` with
        the original as cause.
        """
        try:
            with self._pool.connection() as conn:
                with conn.transaction():
                    with conn.cursor(row_factory=dict_row) as cur:
                        return work(cur)
        except UserRecordsError:
            log.warning(f"[TX ROLLBACK] {operation}", extra={"operation": operation})
            raise
        except errors.UniqueViolation as exc:
            log.warning(
                f"[TX ROLLBACK] {operation}: duplicate email",
                extra={"operation": operation, "email": email},
            )
            raise DuplicateEmailError(operation, email) from exc
        except psycopg.Error as exc:
            log.exception(f"[TX FAILED] {operation}", extra={"operation": operation})
            raise StorageError(operation, str(exc)) from exc

    def _run_read(self, operation: str, work: Callable[[Cursor], T]) -> T:
        try:
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    return work(cur)
        except psycopg.Error as exc:
            log.exception(f"[READ FAILED] {operation}", extra={"operation": operation})
            raise StorageError(operation, str(exc)) from exc

    def save(self, user: User) -> User:
        if user.is_persisted:
            raise StorageError("save", f"user already persisted with id {user.id}")

        def insert(cur: Cursor) -> User:
            cur.execute(INSERT_SQL, (user.name, user.email, user.age))
            return User.model_validate(cur.fetchone())

        saved = self.run_in_transaction("save", insert, email=user.email)
        log.info("User saved", extra={"user_id": saved.id, "email": saved.email})
        return saved

    def find_by_id(self, user_id: int) -> Optional[User]:
        def select(cur: Cursor) -> Optional[User]:
            cur.execute(SELECT_BY_ID_SQL, (user_id,))
            row = cur.fetchone()
            return User.model_validate(row) if row is not None else None

        return self._run_read("find_by_id", select)

    def find_all(self) -> List[User]:
        def select(cur: Cursor) -> List[User]:
            cur.execute(SELECT_ALL_SQL, (self.find_all_limit,))
            return [User.model_validate(row) for row in cur.fetchall()]

        users = self._run_read("find_all", select)
        log.debug("Users listed", extra={"rows": len(users), "limit": self.find_all_limit})
        return users

    def update(self, user: User) -> User:
        if not user.is_persisted:
            raise StorageError("update", "user has no id; save it first")
        user_id = user.id

        def merge(cur: Cursor) -> User:
            cur.execute(UPDATE_SQL, (user.name, user.email, user.age, user_id))
            row = cur.fetchone()
            if row is None:
                raise NotFoundError(user_id)
            return User.model_validate(row)

        updated = self.run_in_transaction("update", merge, email=user.email)
        log.info("User updated", extra={"user_id": updated.id, "email": updated.email})
        return updated

    def delete(self, user_id: int) -> None:
        def remove(cur: Cursor) -> None:
            cur.execute(LOCK_BY_ID_SQL, (user_id,))
            if cur.fetchone() is None:
                raise NotFoundError(user_id)
            cur.execute(DELETE_SQL, (user_id,))

        self.run_in_transaction("delete", remove)
        log.info("User deleted", extra={"user_id": user_id})


__all__ = ["PostgresUserRepository"]
