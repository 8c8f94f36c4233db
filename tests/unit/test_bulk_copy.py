from __future__ import annotations

from typing import Any

import psycopg
import pytest
from psycopg_pool import PoolTimeout

from insert_throughput.domain.generator import generate_records
from insert_throughput.domain.models import Record
from insert_throughput.errors import (
    CommitError,
    DatabaseConnectionError,
    RollbackError,
    StatementError,
)
from insert_throughput.infrastructure.db_factory import ConnectionOptions
from insert_throughput.strategies.bulk_copy import BulkCopyStrategy

ROWS = 6


class _FakeCopy:
    def __init__(self, conn: _FakeConnection) -> None:
        self._conn = conn

    def write_row(self, row: Record) -> None:
        if self._conn.fail_at_row == len(self._conn.pending):
            raise psycopg.DataError("invalid input syntax for type integer")
        self._conn.pending.append(tuple(row))

    def __enter__(self) -> _FakeCopy:
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        del exc_type, exc, tb
        self._conn.flushes += 1
        return False


class _FakeCursor:
    def __init__(self, conn: _FakeConnection) -> None:
        self._conn = conn

    def copy(self, statement: Any) -> _FakeCopy:
        self._conn.copy_statements.append(statement)
        return _FakeCopy(self._conn)

    def __enter__(self) -> _FakeCursor:
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        del exc_type, exc, tb
        return False


class _FakeConnection:
    def __init__(
        self,
        fail_at_row: int | None = None,
        commit_error: Exception | None = None,
        rollback_error: Exception | None = None,
    ) -> None:
        self.fail_at_row = fail_at_row
        self.commit_error = commit_error
        self.rollback_error = rollback_error
        self.pending: list[tuple[int, str]] = []
        self.table: list[tuple[int, str]] = []
        self.copy_statements: list[Any] = []
        self.flushes = 0
        self.commits = 0
        self.rollbacks = 0

    def cursor(self) -> _FakeCursor:
        return _FakeCursor(self)

    def commit(self) -> None:
        self.commits += 1
        if self.commit_error:
            raise self.commit_error
        self.table.extend(self.pending)
        self.pending.clear()

    def rollback(self) -> None:
        self.rollbacks += 1
        if self.rollback_error:
            raise self.rollback_error
        self.pending.clear()


class _FakePool:
    def __init__(self, conn: _FakeConnection, checkout_error: Exception | None = None) -> None:
        self.conn = conn
        self.checkout_error = checkout_error
        self.checkouts = 0
        self.returns = 0
        self.timeouts: list[float | None] = []

    def getconn(self, timeout: float | None = None) -> _FakeConnection:
        self.timeouts.append(timeout)
        if self.checkout_error is not None:
            raise self.checkout_error
        self.checkouts += 1
        return self.conn

    def putconn(self, conn: _FakeConnection) -> None:
        assert conn is self.conn
        self.returns += 1


def _strategy() -> BulkCopyStrategy:
    return BulkCopyStrategy(ConnectionOptions(dsn="dbname=test"), table="names")


def test_bulk_copy_streams_every_record_in_one_transaction() -> None:
    records = generate_records(ROWS)
    pool = _FakePool(_FakeConnection())

    rows = _strategy().load(pool, records)

    assert rows == ROWS
    assert set(pool.conn.table) == set(records)
    assert pool.conn.commits == 1
    assert pool.conn.rollbacks == 0
    assert pool.conn.flushes == 1
    assert len(pool.conn.copy_statements) == 1
    assert (pool.checkouts, pool.returns) == (1, 1)


def test_bulk_copy_empty_record_set_commits_zero_rows() -> None:
    pool = _FakePool(_FakeConnection())

    assert _strategy().load(pool, []) == 0
    assert pool.conn.table == []
    assert pool.conn.commits == 1


def test_bulk_copy_mid_stream_failure_rolls_back_everything() -> None:
    pool = _FakePool(_FakeConnection(fail_at_row=3))

    with pytest.raises(StatementError) as excinfo:
        _strategy().load(pool, generate_records(ROWS))

    assert isinstance(excinfo.value.__cause__, psycopg.DataError)
    assert pool.conn.table == []
    assert pool.conn.commits == 0
    assert pool.conn.rollbacks == 1
    assert pool.returns == 1


def test_bulk_copy_commit_failure_is_reported_as_commit_error() -> None:
    pool = _FakePool(_FakeConnection(commit_error=psycopg.OperationalError("server closed")))

    with pytest.raises(CommitError):
        _strategy().load(pool, generate_records(ROWS))

    assert pool.conn.rollbacks == 1
    assert pool.conn.table == []


def test_bulk_copy_rollback_failure_takes_precedence() -> None:
    conn = _FakeConnection(
        fail_at_row=0,
        rollback_error=psycopg.InterfaceError("the connection is lost"),
    )

    with pytest.raises(RollbackError) as excinfo:
        _strategy().load(_FakePool(conn), generate_records(ROWS))

    assert isinstance(excinfo.value.original, psycopg.DataError)


def test_bulk_copy_does_not_mutate_records() -> None:
    records = generate_records(ROWS)
    snapshot = list(records)

    _strategy().load(_FakePool(_FakeConnection()), records)

    assert records == snapshot


def test_bulk_copy_checkout_timeout_is_a_connection_error() -> None:
    pool = _FakePool(_FakeConnection(), checkout_error=PoolTimeout("couldn't get a connection"))

    with pytest.raises(DatabaseConnectionError, match="check out") as excinfo:
        _strategy().load(pool, generate_records(ROWS))

    assert isinstance(excinfo.value.__cause__, PoolTimeout)
    assert pool.timeouts == [10.0]
    assert pool.returns == 0
    assert pool.conn.commits == 0
