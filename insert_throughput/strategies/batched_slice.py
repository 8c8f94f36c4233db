"""
Batched slice strategy: multi-row INSERT statements over contiguous chunks.

Intent:
- Cut round-trips by sending `chunk_size` rows per statement.
- Stay under the PostgreSQL bind-parameter ceiling (65535); two columns per row
  makes the default of 30,000 rows per chunk fit comfortably.
"""

from __future__ import annotations

from typing import Any, ContextManager, Dict, Iterator, Optional, Sequence

from sqlalchemy import Table, insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from insert_throughput.domain.models import Record
from insert_throughput.domain.schema import names_table
from insert_throughput.infrastructure.db_factory import ConnectionOptions
from insert_throughput.infrastructure.orm_factory import OrmHandle, OrmOptions, orm_engine
from insert_throughput.strategies.abstract import AbstractInsertStrategy
from insert_throughput.strategies.transaction import run_in_transaction

DEFAULT_CHUNK_SIZE = 30_000


def iter_chunks(records: Sequence[Record], chunk_size: int) -> Iterator[Sequence[Record]]:
    """
    Yield contiguous slices of at most `chunk_size` records; the last may be shorter.
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    for start in range(0, len(records), chunk_size):
        yield records[start : start + chunk_size]


class BatchedSliceStrategy(AbstractInsertStrategy[OrmHandle]):
    """
    Insert each chunk with a single multi-row `INSERT ... VALUES (...), (...)`.
    """

    name: str = "batched_slice"
    label: str = "orm batched"
    description: str = "SQLAlchemy Session, one multi-row INSERT per chunk inside one transaction."

    def __init__(
        self,
        connection: ConnectionOptions,
        orm: Optional[OrmOptions] = None,
        table: str = "names",
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.connection = connection
        self.orm = orm or OrmOptions()
        self.table = table
        self.chunk_size = chunk_size

    def connect(self) -> ContextManager[OrmHandle]:
        return orm_engine(self.connection, self.orm)

    def flags(self) -> Dict[str, Any]:
        return {"prepare": self.orm.prepare_statements, "chunk_size": self.chunk_size}

    def _insert_chunks(self, session: Session, table: Table, records: Sequence[Record]) -> int:
        for chunk in iter_chunks(records, self.chunk_size):
            session.execute(insert(table).values([record._asdict() for record in chunk]))
        return len(records)

    def load(self, handle: OrmHandle, records: Sequence[Record]) -> int:
        table = names_table(self.table)
        with handle.session() as session:
            txn = session.begin()
            return run_in_transaction(
                txn,
                lambda: self._insert_chunks(session, table, records),
                db_errors=(SQLAlchemyError,),
            )


__all__ = ["DEFAULT_CHUNK_SIZE", "BatchedSliceStrategy", "iter_chunks"]
