"""
Abstract strategy interfaces and result contracts for the Insert Throughput benchmark.

Concrete strategies (bulk copy, ORM row-by-row, ORM batched slice) implement
AbstractInsertStrategy: `connect` opens a fresh handle for one run and `load`
writes a RecordSet through that handle inside a single transaction. The
orchestrator times `load` and turns the outcome into a StrategyResult.
"""

from __future__ import annotations

import abc
from typing import (
    Any,
    ContextManager,
    Dict,
    Generic,
    Optional,
    Protocol,
    Sequence,
    TypedDict,
    TypeVar,
    runtime_checkable,
)

from insert_throughput.domain.models import Record

H = TypeVar("H")


class StrategyResult(TypedDict, total=False):
    """
    Metrics contract produced for every completed strategy run.

    Only successful runs produce a result; failures abort the whole benchmark.
    """

    strategy: str
    label: str
    rows: int
    duration_seconds: float
    throughput_rows_per_sec: float
    peak_rss_bytes: Optional[int]
    cpu_percent: Optional[float]
    flags: Dict[str, Any]


@runtime_checkable
class InsertStrategy(Protocol):
    """
    Common interface all insertion strategies must implement.

    Attributes
    ----------
    name : str
        A short machine-friendly identifier.
    label : str
        Text used in the benchmark's output line.
    description : str
        A human-friendly summary of the approach.
    """

    name: str
    label: str
    description: str

    def connect(self) -> ContextManager[Any]:
        """Open a connection handle dedicated to one run."""
        ...

    def load(self, handle: Any, records: Sequence[Record]) -> int:
        """
        Load every record transactionally and return the number of rows written.

        Parameters
        ----------
        handle : Any
            The handle yielded by `connect`.
        records : Sequence[Record]
            Read-only input; never mutated.
        """
        ...

    def flags(self) -> Dict[str, Any]:
        """Configuration values worth reporting alongside the timing."""
        ...


class AbstractInsertStrategy(abc.ABC, Generic[H]):
    """
    ABC helper for class-based implementations.

    Subclasses should set `name`, `label` and `description` and implement
    `connect` and `load`.
    """

    name: str
    label: str
    description: str

    @abc.abstractmethod
    def connect(self) -> ContextManager[H]:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def load(self, handle: H, records: Sequence[Record]) -> int:  # pragma: no cover
        raise NotImplementedError

    def flags(self) -> Dict[str, Any]:
        return {}


__all__ = [
    "StrategyResult",
    "InsertStrategy",
    "AbstractInsertStrategy",
]
