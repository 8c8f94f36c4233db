"""
Utilities package for the Insert Throughput benchmark.

Exports shared helpers for logging, profiling, and other cross-cutting concerns.
Keep this package lightweight and free of domain-specific logic.
"""

from insert_throughput.utils.logging import configure_logging, configure_orm_logging, get_logger
from insert_throughput.utils.profiler import ProfileStats, profile_block

__all__ = [
    "configure_logging",
    "configure_orm_logging",
    "get_logger",
    "ProfileStats",
    "profile_block",
]
