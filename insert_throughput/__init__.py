"""
Insert Throughput - benchmarking suite for PostgreSQL bulk-insert strategies.

This package compares three ways of loading the same synthetic record set into
a PostgreSQL table, each inside a single transaction:

- Bulk copy (psycopg COPY FROM STDIN)
- ORM row-by-row inserts (SQLAlchemy Session)
- ORM batched multi-row inserts over contiguous chunks

Each strategy gets a fresh pooled connection and is timed end-to-end; any
failure aborts the whole run.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from insert_throughput.config import Settings, get_settings
from insert_throughput.domain import Record, RecordSet, generate_records
from insert_throughput.errors import (
    CommitError,
    DatabaseConnectionError,
    InsertThroughputError,
    RollbackError,
    StatementError,
)
from insert_throughput.orchestrator import RunConfig, available_strategies, run_strategies
from insert_throughput.strategies.abstract import (
    AbstractInsertStrategy,
    InsertStrategy,
    StrategyResult,
)
from insert_throughput.utils.logging import configure_logging, get_logger
from insert_throughput.utils.profiler import ProfileStats, profile_block

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "Record",
    "RecordSet",
    "generate_records",
    # Errors
    "InsertThroughputError",
    "DatabaseConnectionError",
    "StatementError",
    "CommitError",
    "RollbackError",
    # Orchestration
    "RunConfig",
    "available_strategies",
    "run_strategies",
    # Strategy abstractions
    "InsertStrategy",
    "AbstractInsertStrategy",
    "StrategyResult",
    # Logging
    "configure_logging",
    "get_logger",
    # Profiling
    "ProfileStats",
    "profile_block",
]
