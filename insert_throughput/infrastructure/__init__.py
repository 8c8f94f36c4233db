"""
Infrastructure package for the Insert Throughput benchmark.

Centralizes database connectivity concerns: the psycopg pool for the
direct-protocol path and the SQLAlchemy engine for the mapping layer. Keep
this layer focused on I/O and resource management, decoupled from
strategy/orchestrator logic.
"""

from insert_throughput.infrastructure.db_factory import (
    ConnectionOptions,
    build_dsn,
    direct_pool,
    ensure_table,
    truncate_table,
)
from insert_throughput.infrastructure.orm_factory import (
    OrmHandle,
    OrmOptions,
    build_session_factory,
    orm_engine,
)

__all__ = [
    "ConnectionOptions",
    "OrmHandle",
    "OrmOptions",
    "build_dsn",
    "build_session_factory",
    "direct_pool",
    "ensure_table",
    "orm_engine",
    "truncate_table",
]
