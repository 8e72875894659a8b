from __future__ import annotations

import psycopg
import pytest
from psycopg import errors

from user_records.config import Settings
from user_records.domain.exceptions import StorageError
from user_records.infrastructure import bootstrap


@pytest.fixture
def settings() -> Settings:
    return Settings(db_name="userdb", db_password="pw", db_maintenance_name="postgres")


class _FakeMaintenanceConnection:
    def __init__(self, error: BaseException | None = None) -> None:
        self.error = error
        self.executed: list = []
        self.closed = False

    def __enter__(self) -> "_FakeMaintenanceConnection":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.closed = True

    def execute(self, statement) -> None:
        self.executed.append(statement)
        if self.error is not None:
            raise self.error


def _patch_maintenance(monkeypatch, conn: _FakeMaintenanceConnection) -> list:
    calls: list = []

    def fake_get_sync_connection(dsn=None, autocommit=False):
        calls.append({"dsn": dsn, "autocommit": autocommit})
        return conn

    monkeypatch.setattr(bootstrap, "get_sync_connection", fake_get_sync_connection)
    return calls


def _patch_reachable(monkeypatch, reachable: bool) -> None:
    class _Conn:
        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc, tb):
            return None

    def fake_connect(dsn, **kwargs):
        if not reachable:
            raise psycopg.OperationalError('database "userdb" does not exist')
        return _Conn()

    monkeypatch.setattr(bootstrap.psycopg, "connect", fake_connect)


def test_database_reachable_true(monkeypatch, settings) -> None:
    _patch_reachable(monkeypatch, reachable=True)

    assert bootstrap.database_reachable(settings) is True


def test_database_reachable_false(monkeypatch, settings) -> None:
    _patch_reachable(monkeypatch, reachable=False)

    assert bootstrap.database_reachable(settings) is False


def test_create_database_uses_maintenance_db_in_autocommit(monkeypatch, settings) -> None:
    conn = _FakeMaintenanceConnection()
    calls = _patch_maintenance(monkeypatch, conn)

    assert bootstrap.create_database(settings) is True

    assert calls[0]["autocommit"] is True
    assert "/postgres?" in calls[0]["dsn"]
    assert len(conn.executed) == 1
    assert conn.closed is True


def test_create_database_tolerates_existing(monkeypatch, settings) -> None:
    conn = _FakeMaintenanceConnection(errors.DuplicateDatabase('database "userdb" already exists'))
    _patch_maintenance(monkeypatch, conn)

    assert bootstrap.create_database(settings) is False


def test_create_database_failure_raises_storage_error(monkeypatch, settings) -> None:
    conn = _FakeMaintenanceConnection(errors.InsufficientPrivilege("permission denied"))
    _patch_maintenance(monkeypatch, conn)

    with pytest.raises(StorageError, match="Database creation failed") as excinfo:
        bootstrap.create_database(settings)

    assert isinstance(excinfo.value.__cause__, errors.InsufficientPrivilege)


def test_ensure_database_skips_creation_when_reachable(monkeypatch, settings) -> None:
    _patch_reachable(monkeypatch, reachable=True)
    monkeypatch.setattr(
        bootstrap, "create_database", lambda s=None: pytest.fail("should not create")
    )

    assert bootstrap.ensure_database(settings) is False


def test_ensure_database_creates_when_unreachable(monkeypatch, settings) -> None:
    _patch_reachable(monkeypatch, reachable=False)
    created: list = []
    monkeypatch.setattr(bootstrap, "create_database", lambda s=None: created.append(s) or True)

    assert bootstrap.ensure_database(settings) is True
    assert created == [settings]


def test_ensure_schema_runs_in_transaction(fake_pool) -> None:
    bootstrap.ensure_schema(fake_pool)

    assert fake_pool.commits == 1
    assert "CREATE TABLE IF NOT EXISTS users" in fake_pool.executed_sql[0]
    assert "email       VARCHAR(100) NOT NULL UNIQUE" in fake_pool.executed_sql[0]
    assert fake_pool.released == 1


def test_ensure_schema_failure_is_storage_error(make_fake_pool) -> None:
    pool = make_fake_pool([psycopg.OperationalError("connection lost")])

    with pytest.raises(StorageError, match="ensure_schema"):
        bootstrap.ensure_schema(pool)

    assert pool.rollbacks == 1
