"""
Strategies package for the Insert Throughput benchmark.

This module re-exports the abstract interfaces and the concrete strategy classes
so downstream code can import from `insert_throughput.strategies` directly.
"""

from insert_throughput.strategies.abstract import (
    AbstractInsertStrategy,
    InsertStrategy,
    StrategyResult,
)
from insert_throughput.strategies.batched_slice import BatchedSliceStrategy, iter_chunks
from insert_throughput.strategies.bulk_copy import BulkCopyStrategy
from insert_throughput.strategies.row_by_row import RowByRowStrategy
from insert_throughput.strategies.transaction import Transaction, run_in_transaction

__all__ = [
    # Abstracts
    "AbstractInsertStrategy",
    "InsertStrategy",
    "StrategyResult",
    "Transaction",
    "run_in_transaction",
    # Concrete strategies
    "BatchedSliceStrategy",
    "BulkCopyStrategy",
    "RowByRowStrategy",
    "iter_chunks",
]
