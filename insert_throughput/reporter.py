from __future__ import annotations

from typing import Any, Dict, List, Mapping

from rich import box
from rich.console import Console
from rich.table import Table


def format_duration(seconds: float) -> str:
    """
    Render an elapsed time the way a stopwatch would read it.

    Sub-second values are shown in milliseconds ("512.000ms"); longer values as
    hours/minutes/seconds with leading zero units dropped ("1h2m5.250s").
    """
    if seconds < 1:
        return f"{seconds * 1000:.3f}ms"
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    parts = []
    if hours:
        parts.append(f"{int(hours)}h")
    if hours or minutes:
        parts.append(f"{int(minutes)}m")
    parts.append(f"{secs:.3f}s")
    return "".join(parts)


def format_flags(flags: Mapping[str, Any]) -> str:
    return ", ".join(f"{key}: {value}" for key, value in flags.items())


def format_result_line(result: Mapping[str, Any]) -> str:
    """
    One output line per strategy: label, configuration flags, elapsed time.

    Example: "orm row-by-row (prepare: False): 1m2.345s"
    """
    label = result.get("label") or result.get("strategy", "unknown")
    flags = result.get("flags") or {}
    prefix = f"{label} ({format_flags(flags)})" if flags else label
    return f"{prefix}: {format_duration(result.get('duration_seconds', 0.0))}"


def print_results(results: List[Dict[str, Any]], console: Console | None = None) -> None:
    """
    Render benchmark results as a rich table, fastest strategy first.
    """
    console = console or Console()

    if not results:
        console.print("[yellow]No results to display.[/yellow]")
        return

    table = Table(
        title="Insert Throughput Results",
        box=box.ROUNDED,
        caption="Sorted by Throughput (descending)",
    )

    table.add_column("Strategy", style="cyan", no_wrap=True)
    table.add_column("Flags", style="blue")
    table.add_column("Rows", justify="right", style="magenta")
    table.add_column("Duration", justify="right", style="green")
    table.add_column("Throughput (rows/s)", justify="right", style="bold green")
    table.add_column("Peak Memory (MB)", justify="right", style="yellow")
    table.add_column("CPU %", justify="right", style="red")

    sorted_results = sorted(
        results, key=lambda r: r.get("throughput_rows_per_sec", 0.0), reverse=True
    )

    for res in sorted_results:
        mem_bytes = res.get("peak_rss_bytes") or 0
        cpu = res.get("cpu_percent") or 0.0
        table.add_row(
            res.get("label") or res.get("strategy", "Unknown"),
            format_flags(res.get("flags") or {}) or "-",
            f"{res.get('rows', 0):,}",
            format_duration(res.get("duration_seconds", 0.0)),
            f"{res.get('throughput_rows_per_sec', 0.0):,.2f}",
            f"{mem_bytes / (1024 * 1024):.2f}",
            f"{cpu:.1f}",
        )

    console.print(table)


__all__ = ["format_duration", "format_flags", "format_result_line", "print_results"]
