"""
Domain models for the Insert Throughput benchmark.

A record mirrors one row of the `names(id integer, name varchar)` table. Records
are plain named tuples: immutable, cheap enough to hold fifteen million of them
in memory, and accepted as-is by `Copy.write_row`.
"""
from __future__ import annotations

from typing import List, NamedTuple


class Record(NamedTuple):
    """
    Representation of a single row in the target table.
    """

    id: int
    name: str


RecordSet = List[Record]


__all__ = ["Record", "RecordSet"]
