from __future__ import annotations

import pytest

from kvedge.core.grammar import (
    DataMovementType,
    DataSourceType,
    PayloadKind,
    SchedulingType,
    assert_lower_snake,
    data_movement_from_value,
    data_source_from_value,
    ensure_all_enum_values_lower_snake,
    is_lower_snake,
    payload_kind_from_value,
    scheduling_from_value,
)


def test_all_enum_values_are_lower_snake() -> None:
    ensure_all_enum_values_lower_snake(
        [DataMovementType, DataSourceType, SchedulingType, PayloadKind]
    )


@pytest.mark.parametrize(
    "value,expected",
    [
        ("scatter_gather", True),
        ("one_to_one", True),
        ("ScatterGather", False),
        ("scatter-gather", False),
        ("_leading", False),
        ("", False),
    ],
)
def test_is_lower_snake(value: str, expected: bool) -> None:
    assert is_lower_snake(value) is expected


def test_assert_lower_snake_names_the_field() -> None:
    with pytest.raises(ValueError, match="scheduling_type"):
        assert_lower_snake("Sequential", "scheduling_type")


@pytest.mark.parametrize("raw", ["scatter_gather", "SCATTER_GATHER", " Scatter-Gather "])
def test_data_movement_parsing_is_case_insensitive(raw: str) -> None:
    assert data_movement_from_value(raw) is DataMovementType.SCATTER_GATHER


def test_other_parsers_round_trip_values() -> None:
    for member in DataSourceType:
        assert data_source_from_value(member.value.upper()) is member
    for member in SchedulingType:
        assert scheduling_from_value(member.value) is member
    for member in PayloadKind:
        assert payload_kind_from_value(member.value) is member


def test_unknown_token_lists_allowed_values() -> None:
    with pytest.raises(ValueError) as excinfo:
        data_movement_from_value("round_robin")
    msg = str(excinfo.value)
    assert "round_robin" in msg
    assert "scatter_gather" in msg
