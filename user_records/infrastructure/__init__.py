"""
Infrastructure package for the user records manager.

Centralizes database connectivity concerns (connection factory, caller-owned
pool, bootstrap). Keep this layer focused on I/O and resource management,
decoupled from validation and service logic.
"""

from user_records.infrastructure.bootstrap import ensure_database, ensure_schema
from user_records.infrastructure.db_factory import (
    build_dsn,
    create_pool,
    get_sync_connection,
    open_storage,
)

__all__ = [
    "build_dsn",
    "create_pool",
    "get_sync_connection",
    "open_storage",
    "ensure_database",
    "ensure_schema",
]
