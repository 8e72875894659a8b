"""
Database bootstrap for the user records manager.

Makes sure the application database exists (creating it through the
maintenance database when it does not) and that the `users` table is present.
The repository assumes both have run before it is used.
"""

from __future__ import annotations

from typing import Optional

import psycopg
from psycopg import errors, sql
from psycopg_pool import ConnectionPool

from user_records.config import Settings, get_settings
from user_records.domain.exceptions import StorageError
from user_records.infrastructure.db_factory import (
    build_dsn,
    build_maintenance_dsn,
    get_sync_connection,
)
from user_records.utils.logging import get_logger

log = get_logger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS users (
    id          BIGSERIAL PRIMARY KEY,
    name        VARCHAR(100) NOT NULL,
    email       VARCHAR(100) NOT NULL UNIQUE,
    age         INTEGER CHECK (age BETWEEN 0 AND 150),
    created_at  TIMESTAMPTZ NOT NULL DEFAULT now()
);
"""


def database_reachable(settings: Optional[Settings] = None) -> bool:
    """Return True when a connection to the application database succeeds."""
    try:
        with psycopg.connect(build_dsn(settings)):
            return True
    except psycopg.OperationalError:
        return False


def create_database(settings: Optional[Settings] = None) -> bool:
    """
    Issue ``CREATE DATABASE`` against the maintenance database.

    Returns True when the database was created, False when it already existed.

    Raises
    ------
    StorageError
        If the maintenance database is unreachable or the statement fails.
    """
    settings = settings or get_settings()
    statement = sql.SQL("CREATE DATABASE {}").format(sql.Identifier(settings.db_name))
    try:
        with get_sync_connection(build_maintenance_dsn(settings), autocommit=True) as conn:
            conn.execute(statement)
    except errors.DuplicateDatabase:
        log.info(f"Database '{settings.db_name}' already exists, continuing...")
        return False
    except psycopg.Error as exc:
        log.error(f"Failed to create database '{settings.db_name}'", exc_info=True)
        raise StorageError("create_database", f"Database creation failed: {exc}") from exc
    log.info(f"Database '{settings.db_name}' created successfully")
    return True


def ensure_database(settings: Optional[Settings] = None) -> bool:
    """
    Make sure the application database exists.

    Returns True only when this call created it.
    """
    if database_reachable(settings):
        log.info("Database connection test successful")
        return False
    log.warning("Database connection failed, attempting to create database...")
    return create_database(settings)


def ensure_schema(pool: ConnectionPool) -> None:
    """Create the `users` table if it is missing, in its own transaction."""
    try:
        with pool.connection() as conn:
            with conn.transaction():
                conn.execute(SCHEMA_SQL)
    except psycopg.Error as exc:
        raise StorageError("ensure_schema", str(exc)) from exc
    log.info("Schema ready", extra={"table": "users"})


__all__ = [
    "SCHEMA_SQL",
    "database_reachable",
    "create_database",
    "ensure_database",
    "ensure_schema",
]
