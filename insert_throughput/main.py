from __future__ import annotations

import json
import sys
from typing import List, Optional

import typer

from insert_throughput.config import get_settings
from insert_throughput.errors import InsertThroughputError
from insert_throughput.infrastructure.db_factory import build_dsn, ensure_table
from insert_throughput.orchestrator import RunConfig, available_strategies, run_strategies
from insert_throughput.reporter import print_results
from insert_throughput.utils.logging import configure_logging, get_logger

app = typer.Typer(help="Insert Throughput benchmark CLI.")
log = get_logger(__name__)


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    target = (
        "<DB_DSN override>"
        if settings.db_dsn
        else f"{settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name}"
        f" sslmode={settings.db_sslmode}"
    )
    typer.echo(
        f"DB={target} | pool={settings.db_pool_size} lifetime={settings.db_conn_max_lifetime} | "
        f"rows={settings.benchmark_rows} chunk={settings.benchmark_chunk_size} "
        f"table={settings.benchmark_table} prepare={settings.orm_prepare_statements}"
    )


@app.command("list")
def list_strategies() -> None:
    """
    List strategies in execution order.
    """
    typer.echo("Available strategies: " + ", ".join(available_strategies()))


@app.command("init-db")
def init_db() -> None:
    """
    Create the target table if it does not exist yet.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    try:
        ensure_table(build_dsn(settings), settings.benchmark_table)
    except InsertThroughputError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Table '{settings.benchmark_table}' is ready.")


@app.command()
def run(
    strategy: List[str] = typer.Option(
        ["all"],
        "--strategy",
        "-s",
        help="Strategy to run (bulk_copy, row_by_row, batched_slice, all). Repeatable.",
    ),
    rows: Optional[int] = typer.Option(
        None,
        "--rows",
        "-r",
        min=0,
        help="Override number of rows to generate (default from settings).",
    ),
    chunk_size: Optional[int] = typer.Option(
        None,
        "--chunk-size",
        "-c",
        min=1,
        help="Rows per multi-row INSERT for batched_slice.",
    ),
    prepare: Optional[bool] = typer.Option(
        None,
        "--prepare/--no-prepare",
        help="Prepare ORM statements server-side (default from settings).",
    ),
    truncate: bool = typer.Option(
        False,
        "--truncate",
        help="Truncate the target table before each strategy (not timed).",
    ),
    save: bool = typer.Option(
        False,
        "--save",
        help="Persist results to results/latest.json and a timestamped archive.",
    ),
    show_table: bool = typer.Option(
        False,
        "--table",
        help="Render a summary table after the run.",
    ),
) -> None:
    """
    Run the insert strategies in order and print one timing line per strategy.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)

    config = RunConfig.from_settings(
        settings,
        rows=rows,
        chunk_size=chunk_size,
        orm_prepare_statements=prepare,
        strategy_names=tuple(strategy),
        truncate_before_each=truncate,
        persist=save,
    )

    try:
        results = run_strategies(config, emit=typer.echo)
    except (InsertThroughputError, ValueError) as exc:
        log.error("Benchmark aborted", extra={"error": str(exc), "error_type": type(exc).__name__})
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)

    if show_table:
        print_results(results)
    elif save:
        typer.echo(json.dumps(results, indent=2))


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
