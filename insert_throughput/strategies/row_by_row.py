from __future__ import annotations

from typing import Any, ContextManager, Dict, Optional, Sequence

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import TextClause

from insert_throughput.domain.models import Record
from insert_throughput.infrastructure.db_factory import ConnectionOptions
from insert_throughput.infrastructure.orm_factory import OrmHandle, OrmOptions, orm_engine
from insert_throughput.strategies.abstract import AbstractInsertStrategy
from insert_throughput.strategies.transaction import run_in_transaction


class RowByRowStrategy(AbstractInsertStrategy[OrmHandle]):
    """
    One parameterized INSERT per record through an ORM session.

    Expected to be the slowest strategy: every row pays a full statement
    round-trip. All rows still share one explicit transaction.
    """

    name: str = "row_by_row"
    label: str = "orm row-by-row"
    description: str = "SQLAlchemy Session, one INSERT per row inside one transaction."

    def __init__(
        self,
        connection: ConnectionOptions,
        orm: Optional[OrmOptions] = None,
        table: str = "names",
    ) -> None:
        self.connection = connection
        self.orm = orm or OrmOptions()
        self.table = table

    def connect(self) -> ContextManager[OrmHandle]:
        return orm_engine(self.connection, self.orm)

    def flags(self) -> Dict[str, Any]:
        return {"prepare": self.orm.prepare_statements}

    def _insert_statement(self, handle: OrmHandle) -> TextClause:
        table = handle.engine.dialect.identifier_preparer.quote(self.table)
        return text(f"insert into {table} (id, name) values (:id, :name)")

    def _insert_rows(self, session: Session, statement: TextClause, records: Sequence[Record]) -> int:
        for record in records:
            session.execute(statement, {"id": record.id, "name": record.name})
        return len(records)

    def load(self, handle: OrmHandle, records: Sequence[Record]) -> int:
        statement = self._insert_statement(handle)
        with handle.session() as session:
            txn = session.begin()
            return run_in_transaction(
                txn,
                lambda: self._insert_rows(session, statement, records),
                db_errors=(SQLAlchemyError,),
            )


__all__ = ["RowByRowStrategy"]
