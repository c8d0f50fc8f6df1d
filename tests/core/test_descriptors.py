from __future__ import annotations

import base64

import pytest
from pydantic import ValidationError

from kvedge.core.descriptors import (
    EdgeManagerDescriptor,
    EdgeProperty,
    InputDescriptor,
    OutputDescriptor,
)
from kvedge.core.errors import NullArgument
from kvedge.core.grammar import DataMovementType, DataSourceType, SchedulingType


def _ends() -> tuple[OutputDescriptor, InputDescriptor]:
    return (
        OutputDescriptor(class_name="Out", user_payload=b"\x00out"),
        InputDescriptor(class_name="In", user_payload=None),
    )


def test_create_parses_string_tokens() -> None:
    src, dst = _ends()
    prop = EdgeProperty.create("SCATTER_GATHER", "persisted", "Sequential", src, dst)

    assert prop.data_movement_type is DataMovementType.SCATTER_GATHER
    assert prop.data_source_type is DataSourceType.PERSISTED
    assert prop.scheduling_type is SchedulingType.SEQUENTIAL
    assert prop.edge_manager is None


def test_unknown_token_fails_validation() -> None:
    src, dst = _ends()
    with pytest.raises(ValidationError):
        EdgeProperty.create("round_robin", "persisted", "sequential", src, dst)


def test_custom_routing_requires_edge_manager() -> None:
    src, dst = _ends()
    with pytest.raises(ValidationError, match="edge manager"):
        EdgeProperty.create(DataMovementType.CUSTOM, "persisted", "sequential", src, dst)


def test_edge_manager_only_valid_with_custom_routing() -> None:
    src, dst = _ends()
    with pytest.raises(ValidationError):
        EdgeProperty(
            data_movement_type=DataMovementType.BROADCAST,
            data_source_type=DataSourceType.PERSISTED,
            scheduling_type=SchedulingType.SEQUENTIAL,
            edge_source=src,
            edge_destination=dst,
            edge_manager=EdgeManagerDescriptor(class_name="Mgr"),
        )


def test_create_custom_rejects_none() -> None:
    src, dst = _ends()
    with pytest.raises(NullArgument):
        EdgeProperty.create_custom(None, "persisted", "sequential", src, dst)


def test_create_custom_sets_custom_routing() -> None:
    src, dst = _ends()
    mgr = EdgeManagerDescriptor(class_name="Mgr", user_payload=b"m")
    prop = EdgeProperty.create_custom(mgr, DataSourceType.EPHEMERAL, "concurrent", src, dst)

    assert prop.data_movement_type is DataMovementType.CUSTOM
    assert prop.edge_manager == mgr
    assert prop.scheduling_type is SchedulingType.CONCURRENT


def test_descriptor_requires_class_name() -> None:
    with pytest.raises(ValidationError):
        OutputDescriptor(class_name="")


def test_descriptors_are_frozen() -> None:
    src, _ = _ends()
    with pytest.raises(ValidationError):
        src.class_name = "Other"  # type: ignore[misc]


def test_to_dict_encodes_payloads_as_base64() -> None:
    src, dst = _ends()
    d = EdgeProperty.create("scatter_gather", "persisted", "sequential", src, dst).to_dict()

    assert d["data_movement_type"] == "scatter_gather"
    assert d["edge_source"] == {
        "class_name": "Out",
        "user_payload": base64.b64encode(b"\x00out").decode("ascii"),
    }
    assert d["edge_destination"] == {"class_name": "In", "user_payload": None}
    assert d["edge_manager"] is None
