"""
Mapping-layer connection factory for the Insert Throughput benchmark.

Builds a SQLAlchemy engine over psycopg connections created from the same
libpq DSN the direct-protocol path uses, plus a configured `sessionmaker`.
Pool bounds mirror the direct pool: `pool_size` kept, no overflow.
"""

from __future__ import annotations

import math
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Generator, Optional

import psycopg
from sqlalchemy import Engine, create_engine
from sqlalchemy.exc import ArgumentError, InvalidRequestError, SQLAlchemyError
from sqlalchemy.orm import Session, SessionTransaction, sessionmaker
from sqlalchemy.pool import QueuePool

from insert_throughput.errors import DatabaseConnectionError
from insert_throughput.infrastructure.db_factory import (
    ConnectionOptions,
    validate_dsn,
    with_connect_attempts,
)
from insert_throughput.utils.logging import configure_orm_logging, get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class OrmOptions:
    """
    Behavior switches for the mapping layer.

    Attributes
    ----------
    prepare_statements : bool
        Prepare every statement server-side on first use and reuse the plan.
    skip_default_transaction : bool
        Sessions never begin implicitly; every unit of work needs `begin()`.
    disable_nested_transaction : bool
        Reject SAVEPOINT requests instead of nesting.
    log_level : str
        Threshold for the `sqlalchemy` logger.
    color_output : bool
        Render ORM logs through rich instead of the plain root handler.
    """

    prepare_statements: bool = False
    skip_default_transaction: bool = True
    disable_nested_transaction: bool = True
    log_level: str = "ERROR"
    color_output: bool = False


@dataclass(frozen=True)
class OrmHandle:
    engine: Engine
    session_factory: sessionmaker

    def session(self) -> Session:
        return self.session_factory()


class FlatSession(Session):
    """Session that refuses SAVEPOINT-backed nested transactions."""

    def begin_nested(self) -> SessionTransaction:
        raise InvalidRequestError("Nested transactions are disabled for this session factory")


def build_session_factory(engine: Engine, orm: Optional[OrmOptions] = None) -> sessionmaker:
    """
    Create the session factory the ORM strategies draw sessions from.

    Kept separate from `orm_engine` so any engine (including a local SQLite one)
    can be paired with the same session behavior.
    """
    orm = orm or OrmOptions()
    return sessionmaker(
        bind=engine,
        class_=FlatSession if orm.disable_nested_transaction else Session,
        autobegin=not orm.skip_default_transaction,
        expire_on_commit=False,
        join_transaction_mode=(
            "control_fully" if orm.disable_nested_transaction else "conservative_savepoint"
        ),
    )


def recycle_seconds(max_lifetime: float) -> int:
    """
    Map the 0-means-unlimited lifetime onto SQLAlchemy's `pool_recycle`.

    SQLAlchemy reads 0 as "recycle on every checkout", so fractions round up
    and unlimited becomes -1.
    """
    return math.ceil(max_lifetime) if max_lifetime > 0 else -1


def _open_engine(options: ConnectionOptions, orm: OrmOptions) -> OrmHandle:
    validate_dsn(options.dsn)
    prepare_threshold: Optional[int] = 0 if orm.prepare_statements else None

    def _connect() -> Any:
        return psycopg.connect(options.dsn, prepare_threshold=prepare_threshold)

    try:
        engine = create_engine(
            "postgresql+psycopg://",
            creator=_connect,
            poolclass=QueuePool,
            pool_size=options.pool_size,
            max_overflow=0,
            pool_recycle=recycle_seconds(options.max_lifetime),
            pool_timeout=options.connect_timeout,
            echo=False,
        )
    except ArgumentError as exc:
        raise DatabaseConnectionError(f"Invalid engine configuration: {exc}") from exc

    try:
        with engine.connect():
            pass
    except SQLAlchemyError as exc:
        engine.dispose()
        raise DatabaseConnectionError(str(exc)) from exc

    return OrmHandle(engine=engine, session_factory=build_session_factory(engine, orm))


@contextmanager
def orm_engine(
    options: ConnectionOptions, orm: Optional[OrmOptions] = None
) -> Generator[OrmHandle, None, None]:
    """
    Open a SQLAlchemy engine plus session factory and dispose it on exit.

    Raises
    ------
    DatabaseConnectionError
        If the DSN is malformed, the engine cannot be configured, or the
        probe connection fails.
    """
    orm = orm or OrmOptions()
    configure_orm_logging(orm.log_level, colorful=orm.color_output)
    handle = with_connect_attempts(options.connect_attempts, lambda: _open_engine(options, orm))
    log.debug(
        "ORM engine opened",
        extra={"pool_size": options.pool_size, "prepare_statements": orm.prepare_statements},
    )
    try:
        yield handle
    finally:
        handle.engine.dispose()
        log.debug("ORM engine disposed")


__all__ = [
    "FlatSession",
    "OrmHandle",
    "OrmOptions",
    "build_session_factory",
    "orm_engine",
    "recycle_seconds",
]
