"""
Deterministic synthetic data for the insert benchmark.
"""

from __future__ import annotations

from insert_throughput.domain.models import Record, RecordSet

DEFAULT_NAME_PREFIX = "Adam"


def generate_records(n: int, prefix: str = DEFAULT_NAME_PREFIX) -> RecordSet:
    """
    Build `n` records with ids `1..n` and names `"<prefix>_<id>"`.

    Parameters
    ----------
    n : int
        Number of records to generate. Zero yields an empty list.
    prefix : str
        Label prepended to every name.

    Returns
    -------
    RecordSet
        A fresh list on every call, ordered by id.

    Raises
    ------
    ValueError
        If `n` is negative.
    """
    if n < 0:
        raise ValueError(f"Record count must be non-negative, got {n}")
    return [Record(i, f"{prefix}_{i}") for i in range(1, n + 1)]


__all__ = ["DEFAULT_NAME_PREFIX", "generate_records"]
