"""
Pytest configuration for the user records manager.

Provides fixtures for:
- Settings override for integration tests
- Database connection management and schema setup
- Table cleanup between integration tests
"""

from __future__ import annotations

import os
from typing import Generator

import psycopg
import pytest
from psycopg_pool import ConnectionPool

from user_records.config import Settings
from user_records.infrastructure.bootstrap import ensure_database, ensure_schema
from user_records.infrastructure.db_factory import build_dsn, create_pool


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "userdb_test"),
        db_connect_timeout=5,
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return build_dsn(test_settings)


@pytest.fixture(scope="session")
def db_connection_available(test_settings: Settings, test_dsn: str) -> bool:
    """
    Check if the database is reachable, creating it when only the server is.

    Used to conditionally skip integration tests when PostgreSQL is not available.
    """
    try:
        ensure_database(test_settings)
        with psycopg.connect(test_dsn) as conn:
            conn.execute("SELECT 1;").fetchone()
        return True
    except Exception:
        return False


@pytest.fixture(scope="session")
def db_pool(
    test_settings: Settings, db_connection_available: bool
) -> Generator[ConnectionPool, None, None]:
    """
    Provide a session-scoped pool with the users table in place.

    Skips tests if the database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    pool = create_pool(settings=test_settings)
    try:
        ensure_schema(pool)
        yield pool
    finally:
        pool.close()


@pytest.fixture(scope="function")
def clean_users_table(db_pool: ConnectionPool) -> Generator[ConnectionPool, None, None]:
    """
    Truncate the users table before and after each test.

    Identity is restarted so the first inserted user gets id 1.
    """
    with db_pool.connection() as conn:
        conn.execute("TRUNCATE TABLE users RESTART IDENTITY CASCADE;")
    yield db_pool
    with db_pool.connection() as conn:
        conn.execute("TRUNCATE TABLE users RESTART IDENTITY CASCADE;")
