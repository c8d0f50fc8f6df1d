"""
Sorted, partitioned output side of an ordered edge.

Defines the frozen SortedOutputConfiguration, the builder that accumulates it, and the
narrow SortedOutputSpecificBuilder view that the unified edge builder exposes through
configure_output().

Notes:
    - The partitioner belongs only to this side; consumers never partition.
    - Tuning setters write normalized strings into the settings bag, layered on top of
      any shared settings (last call wins per key).
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from kvedge.core.constants import (
    COMBINER_CLASS,
    COMMON_KEYS,
    IO_SORT_FACTOR,
    IO_SORT_MB,
    PARTITIONER_CLASS,
    PARTITIONER_SETTINGS_PREFIX,
    SORT_SPILL_PERCENT,
    SORT_THREADS,
    SORTED_OUTPUT_CLASS_NAME,
    SORTED_OUTPUT_KEYS,
)
from kvedge.core.errors import ConfigurationError, InvalidOverride, MissingRequiredField
from kvedge.core.grammar import PayloadKind
from kvedge.core.typing import SettingsMap
from kvedge.core.utils import get_logger

from .base import (
    KeyValueFields,
    SideConfiguration,
    Tunable,
    check_class_name,
    check_optional_class_name,
    class_name_tunable,
    fraction_tunable,
    freeze_settings,
    int_tunable,
    normalize_tunables,
    parse_common_overrides,
)
from .settings import SettingsBag
from .sources import config_from_source

__all__ = [
    "PartitionerSpec",
    "SortedOutputConfiguration",
    "SortedOutputConfigurationBuilder",
    "SortedOutputSpecificBuilder",
]

logger = get_logger(__name__)

_TUNABLES: dict[str, Tunable] = {
    IO_SORT_MB: int_tunable(1),
    SORT_SPILL_PERCENT: fraction_tunable(),
    SORT_THREADS: int_tunable(1),
    IO_SORT_FACTOR: int_tunable(2),
    COMBINER_CLASS: class_name_tunable,
}

P = TypeVar("P")


class PartitionerSpec(BaseModel):
    """
    Partitioner identifier and its own settings.

    Attributes:
        class_name (str): Partitioner identifier.
        settings (Mapping[str, str] | None): Read-only partitioner settings; None when not
            supplied.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    class_name: str = Field(..., min_length=1)
    settings: Mapping[str, str] | None = None

    @field_validator("settings", mode="after")
    @classmethod
    def _freeze_settings(cls, v: Mapping[str, str] | None) -> Mapping[str, str] | None:
        return None if v is None else freeze_settings(v)

    @field_serializer("settings")
    def _dump_settings(self, v: Mapping[str, str] | None) -> dict[str, str] | None:
        return None if v is None else dict(v)


class SortedOutputConfiguration(SideConfiguration):
    """
    Frozen configuration for the sorted, partitioned output.

    Attributes:
        partitioner (PartitionerSpec): Partitioner used to route keys to consumers.
        output_class_name (str): Implementation identifier for the runtime loader.

    Examples:
        >>> from kvedge.conf.sorted_output import SortedOutputConfigurationBuilder
        >>> conf = (
        ...     SortedOutputConfigurationBuilder()
        ...     .set_key_type("Text")
        ...     .set_value_type("IntWritable")
        ...     .set_partitioner("HashPartitioner")
        ...     .build()
        ... )
        >>> conf.partitioner.class_name
        'HashPartitioner'
    """

    kind: ClassVar[PayloadKind] = PayloadKind.SORTED_OUTPUT

    partitioner: PartitionerSpec
    output_class_name: str = SORTED_OUTPUT_CLASS_NAME


class SortedOutputConfigurationBuilder:
    """
    Accumulates sorted-output configuration until build().

    Every setter returns the builder so calls can be chained. Not safe for concurrent
    mutation; the frozen result of build() is.
    """

    def __init__(self) -> None:
        self._fields = KeyValueFields()
        self._partitioner_class_name: str | None = None
        self._partitioner_settings: dict[str, str] | None = None

    # -- shared fields ------------------------------------------------------

    def set_key_type(self, class_name: str) -> SortedOutputConfigurationBuilder:
        self._fields.key_class_name = class_name
        return self

    def set_value_type(self, class_name: str) -> SortedOutputConfigurationBuilder:
        self._fields.value_class_name = class_name
        return self

    def set_partitioner(
        self, class_name: str, settings: SettingsMap | None = None
    ) -> SortedOutputConfigurationBuilder:
        """
        Set the partitioner and, optionally, its own settings.

        Raises:
            MissingRequiredField: If class_name is None or empty.
            ConfigurationError: If class_name is not a string.
        """
        if not class_name:
            raise MissingRequiredField("partitioner class name must be non-empty")
        self._partitioner_class_name = check_class_name("partitioner class name", class_name)
        self._partitioner_settings = None if settings is None else SettingsBag(settings).to_dict()
        return self

    def set_comparator(self, class_name: str | None) -> SortedOutputConfigurationBuilder:
        """Set the key comparator; None restores the key type's natural ordering."""
        self._fields.key_comparator_class_name = check_optional_class_name(
            "comparator class name", class_name
        )
        return self

    def enable_compression(self, codec_class_name: str) -> SortedOutputConfigurationBuilder:
        self._fields.compression_codec = check_class_name("compression codec", codec_class_name)
        return self

    def set_setting(self, key: str, value: str) -> SortedOutputConfigurationBuilder:
        self._fields.settings.set(key, value)
        return self

    def set_settings(self, settings: SettingsMap) -> SortedOutputConfigurationBuilder:
        self._fields.settings.merge(settings)
        return self

    def plan_external_source(
        self, source: Mapping[str, Any] | None, *, include_common: bool = True
    ) -> Callable[[], None]:
        """
        Validate an external source import without applying it.

        With include_common=False the keys shared by both sides of an edge (key, value,
        comparator, compression) are skipped, leaving only side-specific keys.

        Returns:
            Callable[[], None]: Applies the validated import when called.

        Raises:
            InvalidOverride: If a recognized key carries an unparseable value.
        """
        picked = config_from_source(
            source, SORTED_OUTPUT_KEYS, prefixes=(PARTITIONER_SETTINGS_PREFIX,)
        )
        if not include_common:
            picked = {k: v for k, v in picked.items() if k not in COMMON_KEYS}
        common = parse_common_overrides(picked, self._fields.compression_codec)
        tunables = normalize_tunables(picked, _TUNABLES)
        partitioner_class = picked.get(PARTITIONER_CLASS)
        if partitioner_class is not None and not partitioner_class.strip():
            raise InvalidOverride(f"{PARTITIONER_CLASS} must be non-empty")
        partitioner_settings = {
            k[len(PARTITIONER_SETTINGS_PREFIX) :]: v
            for k, v in picked.items()
            if k.startswith(PARTITIONER_SETTINGS_PREFIX) and len(k) > len(PARTITIONER_SETTINGS_PREFIX)
        }

        def apply() -> None:
            if not picked:
                return
            common.apply_to(self._fields)
            self._fields.settings.merge(tunables)
            if partitioner_class is not None:
                self._partitioner_class_name = partitioner_class
            if partitioner_settings:
                merged = dict(self._partitioner_settings or {})
                merged.update(partitioner_settings)
                self._partitioner_settings = merged
            logger.debug("Applied external overrides to sorted output: %s", sorted(picked))

        return apply

    def configure_from_external_source(
        self, source: Mapping[str, Any] | None
    ) -> SortedOutputConfigurationBuilder:
        """
        Import recognized keys from an external source, overwriting fields it carries.

        Unrecognized keys are ignored. The import is validated as a whole before any
        field changes; setters called afterwards override imported values.

        Raises:
            InvalidOverride: If a recognized key carries an unparseable value.
        """
        self.plan_external_source(source)()
        return self

    # -- output tuning --------------------------------------------------------

    def _set_tunable(self, key: str, value: Any) -> SortedOutputConfigurationBuilder:
        self._fields.settings.set(key, _TUNABLES[key](key, value, ConfigurationError))
        return self

    def set_sort_buffer_size_mb(self, size_mb: int) -> SortedOutputConfigurationBuilder:
        return self._set_tunable(IO_SORT_MB, size_mb)

    def set_sort_spill_percent(self, fraction: float) -> SortedOutputConfigurationBuilder:
        return self._set_tunable(SORT_SPILL_PERCENT, fraction)

    def set_sort_factor(self, factor: int) -> SortedOutputConfigurationBuilder:
        return self._set_tunable(IO_SORT_FACTOR, factor)

    def set_sorter_num_threads(self, threads: int) -> SortedOutputConfigurationBuilder:
        return self._set_tunable(SORT_THREADS, threads)

    def set_combiner(
        self, class_name: str, combiner_settings: SettingsMap | None = None
    ) -> SortedOutputConfigurationBuilder:
        """Set the combiner; its settings are merged into this side's settings bag."""
        value = check_class_name(COMBINER_CLASS, class_name)
        bag = SettingsBag({COMBINER_CLASS: value})
        if combiner_settings:
            bag.merge(combiner_settings)
        self._fields.settings.merge(bag)
        return self

    # -- freeze ---------------------------------------------------------------

    def build(self) -> SortedOutputConfiguration:
        """
        Freeze the accumulated fields.

        Raises:
            MissingRequiredField: If key type, value type, or partitioner class is unset or empty.
        """
        key, value = self._fields.require_types("sorted output")
        if not self._partitioner_class_name:
            raise MissingRequiredField("sorted output: partitioner class name must be set")
        conf = SortedOutputConfiguration(
            key_class_name=key,
            value_class_name=value,
            key_comparator_class_name=self._fields.key_comparator_class_name,
            compression_codec=self._fields.compression_codec,
            settings=self._fields.settings.to_dict(),
            partitioner=PartitionerSpec(
                class_name=self._partitioner_class_name,
                settings=None
                if self._partitioner_settings is None
                else dict(self._partitioner_settings),
            ),
        )
        logger.debug(
            "Froze sorted output configuration key=%s value=%s partitioner=%s",
            key,
            value,
            self._partitioner_class_name,
        )
        return conf


class SortedOutputSpecificBuilder(Generic[P]):
    """
    Output-only view handed out by a parent builder.

    Setters apply to the output side alone and return this view; done() returns the
    parent so shared and side-specific calls can interleave in one chain.
    """

    def __init__(self, parent: P, builder: SortedOutputConfigurationBuilder) -> None:
        self._parent = parent
        self._builder = builder

    def set_sort_buffer_size_mb(self, size_mb: int) -> SortedOutputSpecificBuilder[P]:
        self._builder.set_sort_buffer_size_mb(size_mb)
        return self

    def set_sort_spill_percent(self, fraction: float) -> SortedOutputSpecificBuilder[P]:
        self._builder.set_sort_spill_percent(fraction)
        return self

    def set_sort_factor(self, factor: int) -> SortedOutputSpecificBuilder[P]:
        self._builder.set_sort_factor(factor)
        return self

    def set_sorter_num_threads(self, threads: int) -> SortedOutputSpecificBuilder[P]:
        self._builder.set_sorter_num_threads(threads)
        return self

    def set_combiner(
        self, class_name: str, combiner_settings: SettingsMap | None = None
    ) -> SortedOutputSpecificBuilder[P]:
        self._builder.set_combiner(class_name, combiner_settings)
        return self

    def set_setting(self, key: str, value: str) -> SortedOutputSpecificBuilder[P]:
        self._builder.set_setting(key, value)
        return self

    def set_settings(self, settings: SettingsMap) -> SortedOutputSpecificBuilder[P]:
        self._builder.set_settings(settings)
        return self

    def configure_from_external_source(
        self, source: Mapping[str, Any] | None
    ) -> SortedOutputSpecificBuilder[P]:
        """Import side-specific keys only; shared keys are set through the parent."""
        self._builder.plan_external_source(source, include_common=False)()
        return self

    def done(self) -> P:
        return self._parent
