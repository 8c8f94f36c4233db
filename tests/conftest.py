"""
Pytest configuration for the Insert Throughput benchmark.

Provides fixtures for:
- Settings override for integration tests
- Database connection management
- Target table preparation and cleanup
- A file-backed SQLite handle for exercising the ORM strategies offline
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Generator

import psycopg
import pytest
from psycopg import sql
from sqlalchemy import create_engine

from insert_throughput.config import Settings
from insert_throughput.infrastructure.db_factory import build_dsn, ensure_table
from insert_throughput.infrastructure.orm_factory import OrmHandle, build_session_factory

UNIQUE_TABLE = "names_unique"


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
        db_name=os.getenv("DB_NAME", "insert_throughput"),
        db_dsn=os.getenv("DB_DSN"),
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return build_dsn(test_settings)


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            conn.execute("SELECT 1;").fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture(scope="session")
def db_connection(
    test_dsn: str, db_connection_available: bool
) -> Generator[psycopg.Connection, None, None]:
    """
    Provide a session-scoped autocommit connection for integration tests.

    Skips tests if database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    conn = psycopg.connect(test_dsn, autocommit=True)
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def clean_names_table(db_connection: psycopg.Connection, test_dsn: str):
    """
    Ensure the `names` table exists and is empty before and after each test.
    """
    ensure_table(test_dsn, "names")
    db_connection.execute("TRUNCATE TABLE names;")
    yield "names"
    db_connection.execute("TRUNCATE TABLE names;")


@pytest.fixture(scope="function")
def unique_names_table(db_connection: psycopg.Connection):
    """
    A `(id, name)` table with a primary key, so duplicate ids fail mid-load.
    """
    table = sql.Identifier(UNIQUE_TABLE)
    db_connection.execute(sql.SQL("DROP TABLE IF EXISTS {}").format(table))
    db_connection.execute(
        sql.SQL("CREATE TABLE {} (id integer PRIMARY KEY, name varchar)").format(table)
    )
    yield UNIQUE_TABLE
    db_connection.execute(sql.SQL("DROP TABLE IF EXISTS {}").format(table))


@pytest.fixture()
def sqlite_handle(tmp_path: Path) -> Generator[OrmHandle, None, None]:
    """
    An ORM handle over a throwaway SQLite file with a primary-keyed `names` table.
    """
    engine = create_engine(f"sqlite:///{tmp_path / 'bench.db'}")
    with engine.begin() as conn:
        conn.exec_driver_sql("CREATE TABLE names (id INTEGER PRIMARY KEY, name VARCHAR)")
    try:
        yield OrmHandle(engine=engine, session_factory=build_session_factory(engine))
    finally:
        engine.dispose()
