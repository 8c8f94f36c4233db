"""
Error hierarchy for the Insert Throughput benchmark.

Every error is raised `from` the driver or ORM exception that caused it, so the
original message and traceback stay reachable through `__cause__`.
"""

from __future__ import annotations


class InsertThroughputError(Exception):
    """Base class for all benchmark failures."""


class DatabaseConnectionError(InsertThroughputError):
    """Dial, authentication, malformed DSN, or pool setup failure."""


class StatementError(InsertThroughputError):
    """A statement or bulk-copy operation was rejected by the database."""


class CommitError(InsertThroughputError):
    """The database rejected the transaction commit."""


class RollbackError(InsertThroughputError):
    """
    Rollback itself failed, leaving the transaction state undefined.

    Takes reporting priority over the error that triggered the rollback; that
    error is kept as `original`.
    """

    def __init__(self, message: str, original: BaseException | None = None) -> None:
        super().__init__(message, original)
        self.original = original

    def __str__(self) -> str:
        return str(self.args[0])


__all__ = [
    "InsertThroughputError",
    "DatabaseConnectionError",
    "StatementError",
    "CommitError",
    "RollbackError",
]
