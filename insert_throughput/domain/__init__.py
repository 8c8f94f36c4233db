"""
Domain package for the Insert Throughput benchmark.

Exports the record model, the synthetic data generator, and the target table
description used by the mapping-layer strategies.
"""

from insert_throughput.domain.generator import DEFAULT_NAME_PREFIX, generate_records
from insert_throughput.domain.models import Record, RecordSet
from insert_throughput.domain.schema import CREATE_TABLE_SQL, names_table

__all__ = [
    "CREATE_TABLE_SQL",
    "DEFAULT_NAME_PREFIX",
    "Record",
    "RecordSet",
    "generate_records",
    "names_table",
]
