"""
Orchestrator for running insert strategies, profiling execution, and persisting results.

Usage (example from CLI):
    from insert_throughput.orchestrator import RunConfig, run_strategies

    results = run_strategies(RunConfig.from_settings(rows=100_000))
    print(results)

The record set is generated once and shared read-only by every strategy. Each
strategy gets its own connection handle, opened before and released after its
timed load. Any failure is fatal: it is logged and re-raised, and no later
strategy runs.

Outputs can be saved to `results/` (opt-in via `RunConfig.persist`):
- `results/latest.json` (last run)
- `results/run-<timestamp>.json` (timestamped archive)
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from insert_throughput.config import Settings, get_settings
from insert_throughput.domain.generator import DEFAULT_NAME_PREFIX, generate_records
from insert_throughput.domain.models import Record
from insert_throughput.infrastructure.db_factory import (
    ConnectionOptions,
    build_dsn,
    truncate_table,
)
from insert_throughput.infrastructure.orm_factory import OrmOptions
from insert_throughput.reporter import format_result_line
from insert_throughput.strategies.abstract import InsertStrategy, StrategyResult
from insert_throughput.strategies.batched_slice import DEFAULT_CHUNK_SIZE, BatchedSliceStrategy
from insert_throughput.strategies.bulk_copy import BulkCopyStrategy
from insert_throughput.strategies.row_by_row import RowByRowStrategy
from insert_throughput.utils.logging import get_logger
from insert_throughput.utils.profiler import ProfileStats, profile_block

log = get_logger(__name__)

STRATEGY_ORDER: Tuple[str, ...] = ("bulk_copy", "row_by_row", "batched_slice")


@dataclass(frozen=True)
class RunConfig:
    """
    Explicit configuration for one benchmark run.

    Built from `Settings` by the CLI, or directly by tests so that runs with
    different configurations never share process-wide state.
    """

    dsn: str
    rows: int = 15_000_000
    pool_size: int = 10
    conn_max_lifetime: float = 0.0
    connect_timeout: float = 10.0
    connect_attempts: int = 1
    chunk_size: int = DEFAULT_CHUNK_SIZE
    table: str = "names"
    name_prefix: str = DEFAULT_NAME_PREFIX
    orm_prepare_statements: bool = False
    strategy_names: Tuple[str, ...] = field(default=("all",))
    truncate_before_each: bool = False
    persist: bool = False
    results_dir: str = "results"

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, **overrides: Any) -> "RunConfig":
        settings = settings or get_settings()
        values: Dict[str, Any] = {
            "dsn": build_dsn(settings),
            "rows": settings.benchmark_rows,
            "pool_size": settings.db_pool_size,
            "conn_max_lifetime": settings.db_conn_max_lifetime,
            "connect_timeout": settings.db_connect_timeout,
            "connect_attempts": settings.db_connect_attempts,
            "chunk_size": settings.benchmark_chunk_size,
            "table": settings.benchmark_table,
            "name_prefix": settings.benchmark_name_prefix,
            "orm_prepare_statements": settings.orm_prepare_statements,
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)

    def connection_options(self) -> ConnectionOptions:
        return ConnectionOptions(
            dsn=self.dsn,
            pool_size=self.pool_size,
            max_lifetime=self.conn_max_lifetime,
            connect_timeout=self.connect_timeout,
            connect_attempts=self.connect_attempts,
        )

    def orm_options(self) -> OrmOptions:
        return OrmOptions(prepare_statements=self.orm_prepare_statements)


def _round_float(value: float, decimals: int = 2) -> float:
    """Round a float to specified decimal places for human-readable output."""
    return round(value, decimals)


def _strategy_factories(config: RunConfig) -> Dict[str, Callable[[], InsertStrategy]]:
    """Registry of available strategies, in execution order."""
    connection = config.connection_options()
    orm = config.orm_options()
    return {
        "bulk_copy": lambda: BulkCopyStrategy(connection, table=config.table),
        "row_by_row": lambda: RowByRowStrategy(connection, orm=orm, table=config.table),
        "batched_slice": lambda: BatchedSliceStrategy(
            connection, orm=orm, table=config.table, chunk_size=config.chunk_size
        ),
    }


def available_strategies() -> List[str]:
    """List available strategy names in execution order."""
    return list(STRATEGY_ORDER)


def _resolve_names(
    requested: Iterable[str], factories: Dict[str, Callable[[], InsertStrategy]]
) -> List[str]:
    """
    Validate requested names and return them in registry order.

    Raises
    ------
    ValueError
        If a name is not registered.
    """
    names = set(requested)
    if "all" in names:
        return list(factories)
    unknown = sorted(names - set(factories))
    if unknown:
        raise ValueError(
            f"Unknown strategy '{', '.join(unknown)}'. Available: {', '.join(factories)}"
        )
    return [name for name in factories if name in names]


def _persist_results(payload: dict, results_dir: Path) -> None:
    results_dir.mkdir(parents=True, exist_ok=True)
    latest_path = results_dir / "latest.json"
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    archive_path = results_dir / f"run-{timestamp}.json"

    with latest_path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, sort_keys=True)
    with archive_path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, sort_keys=True)

    log.info("Results persisted", extra={"latest": str(latest_path), "archive": str(archive_path)})


def _merge_result(strategy: InsertStrategy, rows: int, stats: ProfileStats) -> StrategyResult:
    """Combine the row count with profiler stats, rounding floats for readability."""
    duration = stats.duration_seconds
    return StrategyResult(
        strategy=strategy.name,
        label=strategy.label,
        rows=rows,
        duration_seconds=duration,
        throughput_rows_per_sec=_round_float(rows / duration) if duration > 0 else 0.0,
        peak_rss_bytes=stats.peak_rss_bytes,
        cpu_percent=_round_float(stats.cpu_percent, 1) if stats.cpu_percent else None,
        flags=strategy.flags(),
    )


def _profiled_load(strategy: InsertStrategy, records: Sequence[Record]) -> StrategyResult:
    log.info(f"[STRATEGY START] {strategy.name}", extra={"strategy": strategy.name})
    try:
        with strategy.connect() as handle:
            with profile_block(strategy.name) as stats:
                rows = strategy.load(handle, records)
    except Exception:
        log.exception(f"[STRATEGY FAILED] {strategy.name}", extra={"strategy": strategy.name})
        raise

    result = _merge_result(strategy, rows, stats)
    log.info(
        f"[STRATEGY SUCCESS] {strategy.name}",
        extra={
            "strategy": strategy.name,
            "rows": rows,
            "duration": _round_float(stats.duration_seconds, 3),
            "throughput_rps": result["throughput_rows_per_sec"],
        },
    )
    return result


def run_strategies(
    config: RunConfig,
    emit: Callable[[str], None] = print,
) -> List[StrategyResult]:
    """
    Generate the record set once and run each selected strategy against it.

    Parameters
    ----------
    config : RunConfig
        Explicit run configuration.
    emit : callable
        Receives the `rows: <n>` line and one line per completed strategy.

    Returns
    -------
    List[StrategyResult]
        One result per strategy, in execution order.

    Raises
    ------
    ValueError
        If an unknown strategy name is requested; raised before any work.
    InsertThroughputError
        The first connection or load failure; the run stops there.
    """
    factories = _strategy_factories(config)
    names = _resolve_names(config.strategy_names, factories)

    records = generate_records(config.rows, config.name_prefix)
    log.info("Record set generated", extra={"rows": len(records)})
    emit(f"rows: {len(records)}")

    results: List[StrategyResult] = []
    for index, name in enumerate(names, start=1):
        log.info(f"{'=' * 60}")
        log.info(f"[STRATEGY {index}/{len(names)}] {name.upper()}", extra={"strategy": name})
        log.info(f"{'=' * 60}")

        if config.truncate_before_each:
            truncate_table(config.dsn, config.table)

        strategy = factories[name]()
        result = _profiled_load(strategy, records)
        results.append(result)
        emit(format_result_line(result))

    if config.persist:
        config_payload = asdict(config)
        config_payload.pop("dsn")
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "config": config_payload,
            "strategies": names,
            "results": results,
        }
        _persist_results(payload, Path(config.results_dir))

    log.info(
        f"[ORCHESTRATOR COMPLETE] All {len(names)} strategy/strategies executed successfully",
        extra={"strategies": names, "total_strategies": len(names)},
    )

    return results


__all__ = [
    "RunConfig",
    "STRATEGY_ORDER",
    "available_strategies",
    "run_strategies",
]
