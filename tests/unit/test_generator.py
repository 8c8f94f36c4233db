from __future__ import annotations

import pytest

from insert_throughput.domain.generator import generate_records
from insert_throughput.domain.models import Record

SCENARIO_ROWS = 5


def test_generate_records_concrete_scenario() -> None:
    assert generate_records(SCENARIO_ROWS) == [
        (1, "Adam_1"),
        (2, "Adam_2"),
        (3, "Adam_3"),
        (4, "Adam_4"),
        (5, "Adam_5"),
    ]


@pytest.mark.parametrize("n", [0, 1, 7, 1_000])
def test_generate_records_ids_are_contiguous_and_names_injective(n: int) -> None:
    records = generate_records(n)

    assert len(records) == n
    assert [record.id for record in records] == list(range(1, n + 1))
    assert len({record.name for record in records}) == n
    assert all(record.name == f"Adam_{record.id}" for record in records)


def test_generate_records_zero_is_empty() -> None:
    assert generate_records(0) == []


def test_generate_records_rejects_negative_counts() -> None:
    with pytest.raises(ValueError, match="non-negative"):
        generate_records(-1)


def test_generate_records_returns_fresh_lists() -> None:
    first = generate_records(3)
    second = generate_records(3)

    assert first == second
    assert first is not second
    first.append(Record(99, "Adam_99"))
    assert len(second) == 3


def test_generate_records_honors_prefix() -> None:
    assert generate_records(2, prefix="Eve") == [Record(1, "Eve_1"), Record(2, "Eve_2")]


def test_records_are_immutable() -> None:
    record = generate_records(1)[0]
    with pytest.raises(AttributeError):
        record.id = 2  # type: ignore[misc]
