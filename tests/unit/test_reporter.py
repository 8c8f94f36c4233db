from __future__ import annotations

import io

import pytest
from rich.console import Console

from insert_throughput.reporter import format_duration, format_result_line, print_results


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [
        (0.0, "0.000ms"),
        (0.5, "500.000ms"),
        (2.0, "2.000s"),
        (75.5, "1m15.500s"),
        (3725.25, "1h2m5.250s"),
        (3600.0, "1h0m0.000s"),
    ],
)
def test_format_duration(seconds: float, expected: str) -> None:
    assert format_duration(seconds) == expected


def test_format_result_line_without_flags() -> None:
    line = format_result_line({"strategy": "bulk_copy", "label": "bulk copy", "duration_seconds": 1.5})
    assert line == "bulk copy: 1.500s"


def test_format_result_line_with_flags() -> None:
    line = format_result_line(
        {
            "strategy": "row_by_row",
            "label": "orm row-by-row",
            "duration_seconds": 62.345,
            "flags": {"prepare": False},
        }
    )
    assert line == "orm row-by-row (prepare: False): 1m2.345s"


def test_print_results_renders_every_strategy() -> None:
    buffer = io.StringIO()
    console = Console(file=buffer, width=160)
    print_results(
        [
            {"strategy": "bulk_copy", "label": "bulk copy", "rows": 10, "duration_seconds": 0.1,
             "throughput_rows_per_sec": 100.0, "flags": {}},
            {"strategy": "batched_slice", "label": "orm batched", "rows": 10, "duration_seconds": 0.5,
             "throughput_rows_per_sec": 20.0, "flags": {"prepare": False, "chunk_size": 2}},
        ],
        console=console,
    )
    output = buffer.getvalue()

    assert "bulk copy" in output
    assert "orm batched" in output
    assert output.index("bulk copy") < output.index("orm batched")


def test_print_results_handles_empty_list() -> None:
    buffer = io.StringIO()
    print_results([], console=Console(file=buffer))
    assert "No results" in buffer.getvalue()
