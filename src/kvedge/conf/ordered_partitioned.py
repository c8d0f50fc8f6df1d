"""
Ordered, partitioned key/value edge: unified builder and configurer facade.

The unified builder owns one sorted-output builder and one shuffled-input builder and
forwards every shared setter (key type, value type, comparator, compression, settings,
external source) to both within the same call, so the two sides never disagree.
Side-only tuning goes through configure_output() / configure_input(), whose done()
returns to the unified builder.

Examples:
    >>> from kvedge.conf.ordered_partitioned import OrderedPartitionedKVEdgeConfigurer
    >>> edge = (
    ...     OrderedPartitionedKVEdgeConfigurer.new_builder("Text", "IntWritable", "HashPartitioner")
    ...     .set_comparator("TextComparator")
    ...     .enable_compression("SnappyCodec")
    ...     .configure_output().set_sort_buffer_size_mb(256).done()
    ...     .build()
    ... )
    >>> edge.create_default_edge_property().data_movement_type.value
    'scatter_gather'
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from kvedge.core.descriptors import (
    EdgeManagerDescriptor,
    EdgeProperty,
    InputDescriptor,
    OutputDescriptor,
)
from kvedge.core.errors import BuilderReuseError, ConfigurationError, NullArgument
from kvedge.core.grammar import DataMovementType, DataSourceType, SchedulingType
from kvedge.core.hashing import hash_parts
from kvedge.core.serde import DEFAULT_SERIALIZER, PayloadSerializer
from kvedge.core.typing import SettingsMap
from kvedge.core.utils import get_logger

from .settings import SettingsBag
from .shuffled_input import (
    ShuffledMergedInputConfiguration,
    ShuffledMergedInputConfigurationBuilder,
    ShuffledMergedInputSpecificBuilder,
)
from .sorted_output import (
    SortedOutputConfiguration,
    SortedOutputConfigurationBuilder,
    SortedOutputSpecificBuilder,
)

__all__ = [
    "OrderedPartitionedKVEdgeConfigurer",
    "OrderedPartitionedKVEdgeBuilder",
]

logger = get_logger(__name__)


class OrderedPartitionedKVEdgeConfigurer:
    """
    Frozen pair of side configurations plus their serialized payloads.

    Payloads are serialized once at construction; all accessors are pure.

    Notes:
        Instances hold no mutable state and are safe to share across threads.
    """

    __slots__ = ("_output_conf", "_input_conf", "_output_payload", "_input_payload")

    def __init__(
        self,
        output_configuration: SortedOutputConfiguration,
        input_configuration: ShuffledMergedInputConfiguration,
        serializer: PayloadSerializer | None = None,
    ) -> None:
        ser = serializer or DEFAULT_SERIALIZER
        self._output_conf = output_configuration
        self._input_conf = input_configuration
        self._output_payload = output_configuration.to_bytes(ser)
        self._input_payload = input_configuration.to_bytes(ser)

    @classmethod
    def new_builder(
        cls,
        key_class_name: str,
        value_class_name: str,
        partitioner_class_name: str,
        partitioner_settings: SettingsMap | None = None,
        *,
        serializer: PayloadSerializer | None = None,
    ) -> OrderedPartitionedKVEdgeBuilder:
        """
        Create a builder to configure the output and input of the edge.

        Args:
            key_class_name: Key type identifier, applied to both sides.
            value_class_name: Value type identifier, applied to both sides.
            partitioner_class_name: Partitioner identifier (output side).
            partitioner_settings: Partitioner settings; may be None.
            serializer: Payload serializer; canonical JSON when None.

        Raises:
            MissingRequiredField: If partitioner_class_name is None or empty.
        """
        return OrderedPartitionedKVEdgeBuilder(
            key_class_name,
            value_class_name,
            partitioner_class_name,
            partitioner_settings,
            serializer=serializer,
        )

    @property
    def output_configuration(self) -> SortedOutputConfiguration:
        return self._output_conf

    @property
    def input_configuration(self) -> ShuffledMergedInputConfiguration:
        return self._input_conf

    def get_output_payload(self) -> bytes:
        return self._output_payload

    def get_output_class_name(self) -> str:
        return self._output_conf.output_class_name

    def get_input_payload(self) -> bytes:
        return self._input_payload

    def get_input_class_name(self) -> str:
        return self._input_conf.input_class_name

    def fingerprint(self) -> str:
        """SHA-256 over both class names and payloads, for plan caching and logs."""
        return hash_parts(
            (
                self.get_output_class_name(),
                self._output_payload,
                self.get_input_class_name(),
                self._input_payload,
            )
        )

    def _descriptors(self) -> tuple[OutputDescriptor, InputDescriptor]:
        return (
            OutputDescriptor(class_name=self.get_output_class_name(), user_payload=self._output_payload),
            InputDescriptor(class_name=self.get_input_class_name(), user_payload=self._input_payload),
        )

    def create_default_edge_property(self) -> EdgeProperty:
        """
        Edge property for the typical use of this edge: scatter-gather routing,
        persisted data, sequential scheduling.
        """
        source, destination = self._descriptors()
        return EdgeProperty.create(
            DataMovementType.SCATTER_GATHER,
            DataSourceType.PERSISTED,
            SchedulingType.SEQUENTIAL,
            source,
            destination,
        )

    def create_default_custom_edge_property(
        self, edge_manager_descriptor: EdgeManagerDescriptor | None
    ) -> EdgeProperty:
        """
        Edge property routed by a caller-supplied edge manager, persisted and sequential.

        Raises:
            NullArgument: If edge_manager_descriptor is None.
        """
        if edge_manager_descriptor is None:
            raise NullArgument("EdgeManagerDescriptor cannot be None")
        source, destination = self._descriptors()
        return EdgeProperty.create_custom(
            edge_manager_descriptor,
            DataSourceType.PERSISTED,
            SchedulingType.SEQUENTIAL,
            source,
            destination,
        )

    def __repr__(self) -> str:
        return (
            f"OrderedPartitionedKVEdgeConfigurer(key={self._output_conf.key_class_name!r}, "
            f"value={self._output_conf.value_class_name!r}, "
            f"partitioner={self._output_conf.partitioner.class_name!r})"
        )


class OrderedPartitionedKVEdgeBuilder:
    """
    Fluent builder keeping both sides of the edge in sync.

    A failed build() leaves the builder unusable; later build() calls raise
    BuilderReuseError. A successful build() may be repeated and yields independent
    frozen snapshots.
    """

    def __init__(
        self,
        key_class_name: str,
        value_class_name: str,
        partitioner_class_name: str,
        partitioner_settings: SettingsMap | None = None,
        *,
        serializer: PayloadSerializer | None = None,
    ) -> None:
        self._serializer = serializer or DEFAULT_SERIALIZER
        self._failed = False
        self._output = SortedOutputConfigurationBuilder()
        self._input = ShuffledMergedInputConfigurationBuilder()
        self._output.set_partitioner(partitioner_class_name, partitioner_settings)
        self._output.set_key_type(key_class_name).set_value_type(value_class_name)
        self._input.set_key_type(key_class_name).set_value_type(value_class_name)
        self._specific_output: SortedOutputSpecificBuilder[OrderedPartitionedKVEdgeBuilder] = (
            SortedOutputSpecificBuilder(self, self._output)
        )
        self._specific_input: ShuffledMergedInputSpecificBuilder[OrderedPartitionedKVEdgeBuilder] = (
            ShuffledMergedInputSpecificBuilder(self, self._input)
        )

    def set_comparator(self, class_name: str | None) -> OrderedPartitionedKVEdgeBuilder:
        """Set the key comparator on both sides; None means natural key ordering."""
        self._output.set_comparator(class_name)
        self._input.set_comparator(class_name)
        return self

    def enable_compression(self, codec_class_name: str) -> OrderedPartitionedKVEdgeBuilder:
        """
        Enable compression with the same codec on both sides.

        Raises:
            NullArgument: If codec_class_name is None.
            ConfigurationError: If codec_class_name is empty.
        """
        self._output.enable_compression(codec_class_name)
        self._input.enable_compression(codec_class_name)
        return self

    def set_setting(self, key: str, value: str) -> OrderedPartitionedKVEdgeBuilder:
        self._output.set_setting(key, value)
        self._input.set_setting(key, value)
        return self

    def set_settings(self, settings: SettingsMap) -> OrderedPartitionedKVEdgeBuilder:
        """
        Merge settings into both sides.

        Raises:
            NullArgument: If settings is None or holds a None value.
            ConfigurationError: If an entry is not a non-empty string key with a string value.
        """
        shared = SettingsBag().merge(settings)
        self._output.set_settings(shared)
        self._input.set_settings(shared)
        return self

    def configure_from_external_source(
        self, source: Mapping[str, Any] | None
    ) -> OrderedPartitionedKVEdgeBuilder:
        """
        Import an external source into both sides; each side takes the keys it recognizes.

        Both imports are validated before either is applied, so an InvalidOverride on
        either side leaves both builders unchanged.

        Raises:
            InvalidOverride: If a recognized key carries an unparseable value.
        """
        apply_output = self._output.plan_external_source(source)
        apply_input = self._input.plan_external_source(source)
        apply_output()
        apply_input()
        return self

    def configure_output(self) -> SortedOutputSpecificBuilder[OrderedPartitionedKVEdgeBuilder]:
        """Output-only settings; done() returns to this builder."""
        return self._specific_output

    def configure_input(self) -> ShuffledMergedInputSpecificBuilder[OrderedPartitionedKVEdgeBuilder]:
        """Input-only settings; done() returns to this builder."""
        return self._specific_input

    def build(self) -> OrderedPartitionedKVEdgeConfigurer:
        """
        Freeze both sides and return the configurer.

        Raises:
            MissingRequiredField: Propagated unchanged from either side.
            BuilderReuseError: If a previous build() on this builder failed.
        """
        if self._failed:
            raise BuilderReuseError("builder cannot be reused after a failed build()")
        try:
            output_conf = self._output.build()
            input_conf = self._input.build()
        except ConfigurationError:
            self._failed = True
            raise
        edge = OrderedPartitionedKVEdgeConfigurer(output_conf, input_conf, self._serializer)
        logger.debug("Built ordered partitioned edge %s fingerprint=%s", edge, edge.fingerprint()[:12])
        return edge

