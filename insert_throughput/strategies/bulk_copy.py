"""
Bulk-copy strategy: stream every record through PostgreSQL `COPY FROM STDIN`.

The fastest path and the baseline the ORM strategies are compared against.
Rows skip per-statement parsing entirely; psycopg buffers them and flushes
when the copy block exits.
"""

from __future__ import annotations

from typing import ContextManager, Sequence

import psycopg
from psycopg import sql
from psycopg_pool import ConnectionPool

from insert_throughput.domain.models import Record
from insert_throughput.infrastructure.db_factory import ConnectionOptions, checkout, direct_pool
from insert_throughput.strategies.abstract import AbstractInsertStrategy
from insert_throughput.strategies.transaction import run_in_transaction


class BulkCopyStrategy(AbstractInsertStrategy[ConnectionPool]):
    """
    Load records with `COPY <table> (id, name) FROM STDIN` on one pooled connection.

    The connection itself is the transaction: psycopg opens it implicitly on
    the COPY and `run_in_transaction` commits or rolls it back.
    """

    name: str = "bulk_copy"
    label: str = "bulk copy"
    description: str = "psycopg COPY FROM STDIN with write_row streaming (single transaction)."

    def __init__(self, connection: ConnectionOptions, table: str = "names") -> None:
        self.connection = connection
        self.table = table

    def connect(self) -> ContextManager[ConnectionPool]:
        return direct_pool(self.connection)

    def _copy_statement(self) -> sql.Composed:
        return sql.SQL("COPY {} (id, name) FROM STDIN").format(sql.Identifier(self.table))

    def _copy(self, conn: psycopg.Connection, records: Sequence[Record]) -> int:
        with conn.cursor() as cur:
            with cur.copy(self._copy_statement()) as copy:
                for record in records:
                    copy.write_row(record)
        return len(records)

    def load(self, handle: ConnectionPool, records: Sequence[Record]) -> int:
        with checkout(handle, timeout=self.connection.connect_timeout) as conn:
            return run_in_transaction(
                conn,
                lambda: self._copy(conn, records),
                db_errors=(psycopg.Error,),
            )


__all__ = ["BulkCopyStrategy"]
