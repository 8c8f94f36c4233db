"""
Commit/rollback policy shared by every insertion strategy.

A strategy hands its unit of work and its open transaction to
`run_in_transaction`, which guarantees the transaction is committed or rolled
back before control returns. Rollback failures outrank the error that
triggered the rollback.
"""

from __future__ import annotations

from typing import Callable, Protocol, Tuple, Type, TypeVar

from insert_throughput.errors import CommitError, RollbackError, StatementError
from insert_throughput.utils.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")


class Transaction(Protocol):
    """A psycopg `Connection` or a SQLAlchemy `SessionTransaction`."""

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


def _rollback(txn: Transaction, trigger: BaseException) -> None:
    try:
        txn.rollback()
    except Exception as exc:
        log.error(
            "Rollback failed",
            extra={"error": str(exc), "trigger": type(trigger).__name__},
        )
        raise RollbackError(f"Rollback failed: {exc}", trigger) from exc
    log.warning("Transaction rolled back", extra={"trigger": type(trigger).__name__})


def run_in_transaction(
    txn: Transaction,
    work: Callable[[], T],
    db_errors: Tuple[Type[BaseException], ...],
) -> T:
    """
    Run `work` inside `txn` and commit, rolling back on any failure.

    Parameters
    ----------
    txn : Transaction
        An already-open transaction.
    work : callable
        The load itself; its return value is passed through on success.
    db_errors : tuple of exception types
        Driver/ORM exceptions to translate into the benchmark error hierarchy.
        Anything else propagates unchanged after the rollback.

    Raises
    ------
    StatementError
        `work` failed with a database error and the rollback succeeded.
    CommitError
        The commit failed and the rollback succeeded.
    RollbackError
        The rollback itself failed; the triggering error is its `original`.
    """
    try:
        result = work()
    except Exception as exc:
        _rollback(txn, exc)
        if isinstance(exc, db_errors):
            raise StatementError(str(exc)) from exc
        raise

    try:
        txn.commit()
    except Exception as exc:
        _rollback(txn, exc)
        if isinstance(exc, db_errors):
            raise CommitError(str(exc)) from exc
        raise

    return result


__all__ = ["Transaction", "run_in_transaction"]
