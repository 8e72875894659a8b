"""
Database connection factory utilities for the user records manager.

The storage handle is a psycopg `ConnectionPool` that the top-level caller
creates explicitly and passes to the repository; nothing here keeps a
process-wide pool. `open_storage` scopes the pool's lifetime to a `with` block.

Includes retry logic for transient connection failures using tenacity.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Generator, Optional
from urllib.parse import quote

import psycopg
from psycopg import Connection
from psycopg_pool import ConnectionPool
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from user_records.config import Settings, get_settings
from user_records.utils.logging import get_logger

log = get_logger(__name__)

POOL_MIN_SIZE = 1


def _dsn_for(settings: Settings, db_name: str) -> str:
    return (
        f"postgresql://{quote(settings.db_user, safe='')}:{quote(settings.db_password, safe='')}"
        f"@{settings.db_host}:{settings.db_port}/{db_name}"
        f"?connect_timeout={settings.db_connect_timeout}"
    )


def build_dsn(settings: Optional[Settings] = None) -> str:
    """Compose the DSN of the application database from settings."""
    settings = settings or get_settings()
    return _dsn_for(settings, settings.db_name)


def build_maintenance_dsn(settings: Optional[Settings] = None) -> str:
    """
    Compose the DSN of the maintenance database.

    Used by the bootstrap step to issue ``CREATE DATABASE`` when the application
    database does not exist yet.
    """
    settings = settings or get_settings()
    return _dsn_for(settings, settings.db_maintenance_name)


def redact_dsn(dsn: str) -> str:
    """Mask the password part of a DSN for display and logs."""
    scheme, sep, rest = dsn.partition("://")
    if not sep or "@" not in rest:
        return dsn
    credentials, _, location = rest.rpartition("@")
    user = credentials.split(":", 1)[0]
    return f"{scheme}://{user}:***@{location}"


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((psycopg.OperationalError, psycopg.InterfaceError)),
    reraise=True,
)
def get_sync_connection(dsn: Optional[str] = None, autocommit: bool = False) -> Connection:
    """
    Acquire a dedicated synchronous connection with automatic retry.

    Retries up to 3 times with exponential backoff for transient connection errors.
    Use this for one-off operations such as bootstrap; repositories use the pool.

    Parameters
    ----------
    dsn : str | None
        Connection string; defaults to the application database.
    autocommit : bool
        Open the connection in autocommit mode (required for CREATE DATABASE).

    Raises
    ------
    psycopg.OperationalError
        If connection fails after all retry attempts.
    """
    return psycopg.connect(dsn or build_dsn(), autocommit=autocommit)


def create_pool(
    settings: Optional[Settings] = None,
    dsn: Optional[str] = None,
    timeout: Optional[float] = None,
) -> ConnectionPool:
    """
    Create and open a synchronous connection pool owned by the caller.

    The pool is opened and waited on, so unreachable storage fails here rather
    than on the first repository call. The caller must `close()` it.

    Parameters
    ----------
    settings : Settings | None
        Source of the DSN and pool size; defaults to the cached settings.
    dsn : str | None
        Explicit connection string overriding the one built from settings.
    timeout : float | None
        Seconds to wait for the first connection; defaults to the connect timeout.

    Raises
    ------
    psycopg_pool.PoolTimeout
        If no connection could be established within `timeout`.
    """
    settings = settings or get_settings()
    conninfo = dsn or build_dsn(settings)
    pool = ConnectionPool(
        conninfo=conninfo,
        min_size=POOL_MIN_SIZE,
        max_size=max(POOL_MIN_SIZE, settings.db_pool_max_size),
        open=False,
    )
    pool.open(wait=True, timeout=timeout or float(settings.db_connect_timeout))
    log.info(
        "Connection pool opened",
        extra={"dsn": redact_dsn(conninfo), "max_size": pool.max_size},
    )
    return pool


@contextmanager
def open_storage(
    settings: Optional[Settings] = None, dsn: Optional[str] = None
) -> Generator[ConnectionPool, None, None]:
    """
    Context manager scoping a connection pool to a block.

    Example
    -------
        with open_storage() as pool:
            repository = PostgresUserRepository(pool)
            ...
    """
    pool = create_pool(settings=settings, dsn=dsn)
    try:
        yield pool
    finally:
        pool.close()
        log.info("Connection pool closed")


__all__ = [
    "build_dsn",
    "build_maintenance_dsn",
    "redact_dsn",
    "get_sync_connection",
    "create_pool",
    "open_storage",
]
