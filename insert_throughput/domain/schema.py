"""
SQLAlchemy table metadata and DDL for the benchmark target table.
"""

from __future__ import annotations

from sqlalchemy import Column, Integer, MetaData, String, Table

CREATE_TABLE_SQL = "CREATE TABLE IF NOT EXISTS {table} (id integer, name varchar)"


def names_table(table_name: str = "names", metadata: MetaData | None = None) -> Table:
    """Describe the `(id, name)` target table for the mapping layer."""
    return Table(
        table_name,
        metadata if metadata is not None else MetaData(),
        Column("id", Integer),
        Column("name", String),
    )


__all__ = ["CREATE_TABLE_SQL", "names_table"]
