"""
Direct-protocol connection factory for the Insert Throughput benchmark.

Provides the psycopg connection pool used by the bulk-copy strategy, DSN
composition from settings, and the small DDL helpers the CLI and test suite use
to prepare the target table. Pools are created per strategy run and closed
when the run finishes; nothing here is shared across strategies.

Connection attempts are a single try by default. Raising
`DB_CONNECT_ATTEMPTS` enables tenacity retries with exponential backoff.
"""

from __future__ import annotations

import math
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Generator, Optional, TypeVar

import psycopg
from psycopg import sql
from psycopg.conninfo import conninfo_to_dict, make_conninfo
from psycopg_pool import ConnectionPool, PoolClosed, PoolTimeout
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from insert_throughput.config import Settings, get_settings
from insert_throughput.domain.schema import CREATE_TABLE_SQL
from insert_throughput.errors import DatabaseConnectionError
from insert_throughput.utils.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")

UNLIMITED_LIFETIME = float("inf")


@dataclass(frozen=True)
class ConnectionOptions:
    """
    Everything a connection provider needs to reach the database.

    Attributes
    ----------
    dsn : str
        libpq connection string, treated as opaque.
    pool_size : int
        Upper bound for both idle and open connections.
    max_lifetime : float
        Seconds before a connection is recycled; 0 disables recycling.
    connect_timeout : float
        Seconds to wait for the pool to become ready.
    connect_attempts : int
        Total connection attempts; 1 means no retry.
    """

    dsn: str
    pool_size: int = 10
    max_lifetime: float = 0.0
    connect_timeout: float = 10.0
    connect_attempts: int = 1


def build_dsn(settings: Optional[Settings] = None) -> str:
    """Compose a libpq keyword DSN from settings, honoring an explicit override."""
    settings = settings or get_settings()
    if settings.db_dsn:
        return settings.db_dsn
    return make_conninfo(
        host=settings.db_host,
        port=settings.db_port,
        dbname=settings.db_name,
        user=settings.db_user,
        password=settings.db_password or None,
        sslmode=settings.db_sslmode,
    )


def validate_dsn(dsn: str) -> None:
    """
    Parse the DSN without connecting.

    libpq names the database keyword `dbname`; `database=...` is rejected with
    a hint pointing at it.

    Raises
    ------
    DatabaseConnectionError
        If libpq cannot parse the connection string.
    """
    try:
        conninfo_to_dict(dsn)
    except psycopg.ProgrammingError as exc:
        hint = " (libpq spells the database keyword 'dbname')" if '"database"' in str(exc) else ""
        raise DatabaseConnectionError(f"Malformed DSN: {exc}{hint}") from exc


def lifetime_seconds(max_lifetime: float) -> float:
    """Translate the 0-means-unlimited convention into pool seconds."""
    return UNLIMITED_LIFETIME if max_lifetime <= 0 else float(max_lifetime)


def with_connect_attempts(attempts: int, connect: Callable[[], T]) -> T:
    """
    Run `connect` up to `attempts` times, retrying only connection failures.

    With `attempts == 1` this is a plain call.
    """
    retryer = Retrying(
        stop=stop_after_attempt(max(attempts, 1)),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(DatabaseConnectionError),
        reraise=True,
    )
    return retryer(connect)


def _probe_connection(options: ConnectionOptions) -> None:
    # single dial; a refusal surfaces with the libpq message
    try:
        conn = psycopg.connect(
            options.dsn, connect_timeout=max(1, math.ceil(options.connect_timeout))
        )
    except psycopg.OperationalError as exc:
        raise DatabaseConnectionError(str(exc)) from exc
    conn.close()


def _open_pool(options: ConnectionOptions) -> ConnectionPool:
    validate_dsn(options.dsn)
    _probe_connection(options)
    pool = ConnectionPool(
        conninfo=options.dsn,
        min_size=options.pool_size,
        max_size=options.pool_size,
        max_lifetime=lifetime_seconds(options.max_lifetime),
        open=False,
    )
    try:
        pool.open(wait=True, timeout=options.connect_timeout)
    except PoolTimeout as exc:
        pool.close()
        raise DatabaseConnectionError(
            f"Could not open a connection pool within {options.connect_timeout}s: {exc}"
        ) from exc
    return pool


@contextmanager
def checkout(
    pool: ConnectionPool, timeout: Optional[float] = None
) -> Generator[psycopg.Connection, None, None]:
    """
    Borrow one connection from `pool` and return it on exit.

    Raises
    ------
    DatabaseConnectionError
        If no connection becomes available in time or the pool is closed.
    """
    try:
        conn = pool.getconn(timeout=timeout)
    except (PoolTimeout, PoolClosed) as exc:
        raise DatabaseConnectionError(f"Could not check out a connection: {exc}") from exc
    try:
        yield conn
    finally:
        pool.putconn(conn)


@contextmanager
def direct_pool(options: ConnectionOptions) -> Generator[ConnectionPool, None, None]:
    """
    Open a psycopg connection pool and close it on exit.

    Example
    -------
        with direct_pool(ConnectionOptions(dsn=build_dsn())) as pool:
            with checkout(pool) as conn:
                conn.execute("SELECT 1")

    Raises
    ------
    DatabaseConnectionError
        If the DSN is malformed or the pool cannot connect in time.
    """
    pool = with_connect_attempts(options.connect_attempts, lambda: _open_pool(options))
    log.debug(
        "Connection pool opened",
        extra={"pool_size": options.pool_size, "max_lifetime": options.max_lifetime},
    )
    try:
        yield pool
    finally:
        pool.close()
        log.debug("Connection pool closed")


def _execute_ddl(dsn: str, statement: sql.Composable) -> None:
    validate_dsn(dsn)
    try:
        with psycopg.connect(dsn) as conn:
            conn.execute(statement)
    except psycopg.OperationalError as exc:
        raise DatabaseConnectionError(str(exc)) from exc


def ensure_table(dsn: str, table: str = "names") -> None:
    """Create the `(id integer, name varchar)` target table if it is missing."""
    _execute_ddl(dsn, sql.SQL(CREATE_TABLE_SQL).format(table=sql.Identifier(table)))
    log.info("Target table ensured", extra={"table": table})


def truncate_table(dsn: str, table: str = "names") -> None:
    """Remove every row from the target table."""
    _execute_ddl(dsn, sql.SQL("TRUNCATE TABLE {}").format(sql.Identifier(table)))
    log.info("Target table truncated", extra={"table": table})


__all__ = [
    "ConnectionOptions",
    "UNLIMITED_LIFETIME",
    "build_dsn",
    "checkout",
    "direct_pool",
    "ensure_table",
    "lifetime_seconds",
    "truncate_table",
    "validate_dsn",
    "with_connect_attempts",
]
