"""
Canonical edge-policy vocabulary and normalization helpers.

Defines how data moves across an edge, how long produced data lives, and how the
consumer schedules its inputs, plus the payload kinds written by the side
configurations. Includes zero-IO validators used by descriptors and payload decoding.

Design principles
-----------------
1) One naming standard:
   - Enum classes: PascalCase
   - Enum member names: UPPER_SNAKE (Python constants)
   - Enum serialized values (payloads/JSON): lower_snake
2) Parsing is case-insensitive; serialization is always lower_snake.

Examples
--------
>>> from kvedge.core.grammar import DataMovementType, data_movement_from_value
>>> data_movement_from_value("SCATTER_GATHER") is DataMovementType.SCATTER_GATHER
True
>>> DataMovementType.SCATTER_GATHER.value
'scatter_gather'
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from enum import Enum
from typing import Final

__all__ = [
    "DataMovementType",
    "DataSourceType",
    "SchedulingType",
    "PayloadKind",
    "is_lower_snake",
    "assert_lower_snake",
    "data_movement_from_value",
    "data_source_from_value",
    "scheduling_from_value",
    "payload_kind_from_value",
    "ensure_all_enum_values_lower_snake",
]


class DataMovementType(Enum):
    """
    Routing pattern between producer partitions and consumer tasks.

    Notes:
      SCATTER_GATHER is the default for ordered/partitioned edges; CUSTOM means the
      routing is delegated to a caller-supplied edge manager.
    """

    ONE_TO_ONE = "one_to_one"
    BROADCAST = "broadcast"
    SCATTER_GATHER = "scatter_gather"
    CUSTOM = "custom"


class DataSourceType(Enum):
    """Lifetime of the data produced on the edge."""

    PERSISTED = "persisted"
    PERSISTED_RELIABLE = "persisted_reliable"
    EPHEMERAL = "ephemeral"


class SchedulingType(Enum):
    """Order in which the consumer processes inputs from its sources."""

    SEQUENTIAL = "sequential"
    CONCURRENT = "concurrent"


class PayloadKind(Enum):
    """Discriminator embedded in every serialized side configuration."""

    SORTED_OUTPUT = "sorted_output"
    SHUFFLED_MERGED_INPUT = "shuffled_merged_input"


_LOWER_SNAKE_RE: Final[re.Pattern[str]] = re.compile(r"^[a-z0-9]+(?:_[a-z0-9]+)*$")


def is_lower_snake(value: str) -> bool:
    """
    Check whether a string is lower_snake.

    Examples:
      >>> is_lower_snake("scatter_gather")
      True
      >>> is_lower_snake("ScatterGather")
      False
    """
    return bool(_LOWER_SNAKE_RE.match(value or ""))


def assert_lower_snake(value: str, what: str = "value") -> None:
    """
    Validate that a string is lower_snake.

    Raises:
      ValueError: If value is not lower_snake.
    """
    if not is_lower_snake(value):
        raise ValueError(f"{what} must be lower_snake (got: {value!r})")


def _enum_from_value(enum_cls: type[Enum], value: str, what: str) -> Enum:
    norm = (value or "").strip().lower().replace("-", "_")
    assert_lower_snake(norm, what)
    try:
        return enum_cls(norm)
    except ValueError as exc:
        allowed = sorted(m.value for m in enum_cls)
        raise ValueError(f"{what} must be one of {allowed} (got {value!r})") from exc


def data_movement_from_value(s: str) -> DataMovementType:
    """
    Parse a data movement token (any case) into a DataMovementType.

    Raises:
      ValueError: If s is not a known data movement type.
    """
    return _enum_from_value(DataMovementType, s, "data_movement_type")  # type: ignore[return-value]


def data_source_from_value(s: str) -> DataSourceType:
    """Parse a data source token (any case) into a DataSourceType."""
    return _enum_from_value(DataSourceType, s, "data_source_type")  # type: ignore[return-value]


def scheduling_from_value(s: str) -> SchedulingType:
    """Parse a scheduling token (any case) into a SchedulingType."""
    return _enum_from_value(SchedulingType, s, "scheduling_type")  # type: ignore[return-value]


def payload_kind_from_value(s: str) -> PayloadKind:
    """Parse a payload kind discriminator into a PayloadKind."""
    return _enum_from_value(PayloadKind, s, "payload kind")  # type: ignore[return-value]


def ensure_all_enum_values_lower_snake(enums: Iterable[type[Enum]]) -> None:
    """
    Assert that every enum member's value is lower_snake.

    Raises:
      AssertionError: If any enum member has a non-lower_snake value.

    Examples:
      >>> ensure_all_enum_values_lower_snake(
      ...     [DataMovementType, DataSourceType, SchedulingType, PayloadKind]
      ... )
    """
    for E in enums:
        for m in E:
            if not is_lower_snake(m.value):
                raise AssertionError(
                    f"{E.__name__}.{m.name} has non-lower_snake value: {m.value!r}"
                )
