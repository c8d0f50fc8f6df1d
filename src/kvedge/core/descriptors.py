"""
Frozen descriptors handed to the DAG-assembly layer.

Pydantic v2 models describing one edge of a dataflow graph: the producer-side output
(class identifier + payload), the consumer-side input, an optional custom edge
manager, and the edge property tying them together with a routing, persistence, and
scheduling policy.

Responsibilities
- Carry (class_name, payload) pairs opaquely; nothing here loads or checks classes.
- Normalize enum-like strings via grammar helpers.
- Enforce that CUSTOM routing and an edge manager always come together.

Style
- Zero-IO (stdlib + pydantic only).
- Models are frozen; instances are safe to share across threads.
"""

from __future__ import annotations

import base64
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .errors import NullArgument
from .grammar import (
    DataMovementType,
    DataSourceType,
    SchedulingType,
    data_movement_from_value,
    data_source_from_value,
    scheduling_from_value,
)

__all__ = [
    "EntityDescriptor",
    "OutputDescriptor",
    "InputDescriptor",
    "EdgeManagerDescriptor",
    "EdgeProperty",
]


def _b64(data: bytes | None) -> str | None:
    return None if data is None else base64.b64encode(data).decode("ascii")


class EntityDescriptor(BaseModel):
    """
    Class identifier plus opaque user payload for a runtime-loaded component.

    Attributes:
        class_name (str): Identifier the runtime loader resolves to an implementation.
        user_payload (bytes | None): Serialized configuration handed to the implementation.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    class_name: str = Field(..., min_length=1)
    user_payload: bytes | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"class_name": self.class_name, "user_payload": _b64(self.user_payload)}


class OutputDescriptor(EntityDescriptor):
    """Producer-side output component of an edge."""


class InputDescriptor(EntityDescriptor):
    """Consumer-side input component of an edge."""


class EdgeManagerDescriptor(EntityDescriptor):
    """Caller-supplied routing strategy for CUSTOM edges."""


class EdgeProperty(BaseModel):
    """
    Complete wiring policy for one producer → consumer edge.

    Attributes:
        data_movement_type (DataMovementType): Routing pattern (CUSTOM when edge_manager is set).
        data_source_type (DataSourceType): Lifetime of produced data.
        scheduling_type (SchedulingType): Consumer input scheduling order.
        edge_source (OutputDescriptor): Producer-side output.
        edge_destination (InputDescriptor): Consumer-side input.
        edge_manager (EdgeManagerDescriptor | None): Custom routing strategy.

    Raises:
        pydantic.ValidationError: If CUSTOM routing lacks an edge manager, or an edge
            manager is supplied with a non-CUSTOM routing type.

    Examples:
        >>> from kvedge.core.descriptors import EdgeProperty, InputDescriptor, OutputDescriptor
        >>> prop = EdgeProperty.create(
        ...     "scatter_gather", "persisted", "sequential",
        ...     OutputDescriptor(class_name="Out"), InputDescriptor(class_name="In"),
        ... )
        >>> prop.data_movement_type.value
        'scatter_gather'
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    data_movement_type: DataMovementType
    data_source_type: DataSourceType
    scheduling_type: SchedulingType
    edge_source: OutputDescriptor
    edge_destination: InputDescriptor
    edge_manager: EdgeManagerDescriptor | None = None

    @field_validator("data_movement_type", mode="before")
    @classmethod
    def _parse_movement(cls, v: Any) -> Any:
        return data_movement_from_value(v) if isinstance(v, str) else v

    @field_validator("data_source_type", mode="before")
    @classmethod
    def _parse_source(cls, v: Any) -> Any:
        return data_source_from_value(v) if isinstance(v, str) else v

    @field_validator("scheduling_type", mode="before")
    @classmethod
    def _parse_scheduling(cls, v: Any) -> Any:
        return scheduling_from_value(v) if isinstance(v, str) else v

    @model_validator(mode="after")
    def _check_routing(self) -> EdgeProperty:
        custom = self.data_movement_type is DataMovementType.CUSTOM
        if custom and self.edge_manager is None:
            raise ValueError("custom data movement requires an edge manager descriptor")
        if not custom and self.edge_manager is not None:
            raise ValueError(
                f"edge manager descriptor is only valid with custom data movement, "
                f"got {self.data_movement_type.value!r}"
            )
        return self

    @classmethod
    def create(
        cls,
        data_movement_type: DataMovementType | str,
        data_source_type: DataSourceType | str,
        scheduling_type: SchedulingType | str,
        edge_source: OutputDescriptor,
        edge_destination: InputDescriptor,
    ) -> EdgeProperty:
        """Build an edge property with one of the built-in routing patterns."""
        return cls(
            data_movement_type=data_movement_type,
            data_source_type=data_source_type,
            scheduling_type=scheduling_type,
            edge_source=edge_source,
            edge_destination=edge_destination,
        )

    @classmethod
    def create_custom(
        cls,
        edge_manager: EdgeManagerDescriptor | None,
        data_source_type: DataSourceType | str,
        scheduling_type: SchedulingType | str,
        edge_source: OutputDescriptor,
        edge_destination: InputDescriptor,
    ) -> EdgeProperty:
        """
        Build an edge property routed by a caller-supplied edge manager.

        Raises:
            NullArgument: If edge_manager is None.
        """
        if edge_manager is None:
            raise NullArgument("edge manager descriptor cannot be None")
        return cls(
            data_movement_type=DataMovementType.CUSTOM,
            data_source_type=data_source_type,
            scheduling_type=scheduling_type,
            edge_source=edge_source,
            edge_destination=edge_destination,
            edge_manager=edge_manager,
        )

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready mapping with enum values and base64 payloads."""
        return {
            "data_movement_type": self.data_movement_type.value,
            "data_source_type": self.data_source_type.value,
            "scheduling_type": self.scheduling_type.value,
            "edge_source": self.edge_source.to_dict(),
            "edge_destination": self.edge_destination.to_dict(),
            "edge_manager": None if self.edge_manager is None else self.edge_manager.to_dict(),
        }
