"""
Shuffled, merged input side of an ordered edge.

Defines the frozen ShuffledMergedInputConfiguration, its builder, and the
ShuffledMergedInputSpecificBuilder view exposed through configure_input().

Notes:
    - No partitioner on this side.
    - Used standalone, comparator and compression need not match any output side;
      keeping both sides identical is the unified edge builder's job.
    - The implementation identifier is resolved at build(): the legacy input when
      use_legacy_input() was called, the regular input otherwise.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, ClassVar, Generic, TypeVar

from kvedge.core.constants import (
    COMBINER_CLASS,
    COMMON_KEYS,
    INPUT_POST_MERGE_BUFFER_PERCENT,
    IO_SORT_FACTOR,
    SHUFFLE_FETCH_BUFFER_PERCENT,
    SHUFFLE_MEMORY_LIMIT_PERCENT,
    SHUFFLE_MERGE_PERCENT,
    SHUFFLED_INPUT_KEYS,
    SHUFFLED_MERGED_INPUT_CLASS_NAME,
    SHUFFLED_MERGED_INPUT_LEGACY_CLASS_NAME,
)
from kvedge.core.errors import ConfigurationError
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
    int_tunable,
    normalize_tunables,
    parse_common_overrides,
)
from .settings import SettingsBag
from .sources import config_from_source

__all__ = [
    "ShuffledMergedInputConfiguration",
    "ShuffledMergedInputConfigurationBuilder",
    "ShuffledMergedInputSpecificBuilder",
]

logger = get_logger(__name__)

_TUNABLES: dict[str, Tunable] = {
    SHUFFLE_FETCH_BUFFER_PERCENT: fraction_tunable(),
    SHUFFLE_MEMORY_LIMIT_PERCENT: fraction_tunable(),
    SHUFFLE_MERGE_PERCENT: fraction_tunable(),
    INPUT_POST_MERGE_BUFFER_PERCENT: fraction_tunable(allow_zero=True),
    IO_SORT_FACTOR: int_tunable(2),
    COMBINER_CLASS: class_name_tunable,
}

P = TypeVar("P")


class ShuffledMergedInputConfiguration(SideConfiguration):
    """
    Frozen configuration for the shuffled, merged input.

    Attributes:
        input_class_name (str): Resolved implementation identifier for the runtime loader.
    """

    kind: ClassVar[PayloadKind] = PayloadKind.SHUFFLED_MERGED_INPUT

    input_class_name: str = SHUFFLED_MERGED_INPUT_CLASS_NAME

    @property
    def legacy(self) -> bool:
        return self.input_class_name == SHUFFLED_MERGED_INPUT_LEGACY_CLASS_NAME


class ShuffledMergedInputConfigurationBuilder:
    """Accumulates shuffled-input configuration until build()."""

    def __init__(self) -> None:
        self._fields = KeyValueFields()
        self._legacy = False

    def set_key_type(self, class_name: str) -> ShuffledMergedInputConfigurationBuilder:
        self._fields.key_class_name = class_name
        return self

    def set_value_type(self, class_name: str) -> ShuffledMergedInputConfigurationBuilder:
        self._fields.value_class_name = class_name
        return self

    def set_comparator(self, class_name: str | None) -> ShuffledMergedInputConfigurationBuilder:
        self._fields.key_comparator_class_name = check_optional_class_name(
            "comparator class name", class_name
        )
        return self

    def enable_compression(self, codec_class_name: str) -> ShuffledMergedInputConfigurationBuilder:
        self._fields.compression_codec = check_class_name("compression codec", codec_class_name)
        return self

    def set_setting(self, key: str, value: str) -> ShuffledMergedInputConfigurationBuilder:
        self._fields.settings.set(key, value)
        return self

    def set_settings(self, settings: SettingsMap) -> ShuffledMergedInputConfigurationBuilder:
        self._fields.settings.merge(settings)
        return self

    def plan_external_source(
        self, source: Mapping[str, Any] | None, *, include_common: bool = True
    ) -> Callable[[], None]:
        """
        Validate an external source import without applying it.

        With include_common=False the keys shared by both sides of an edge (key, value,
        comparator, compression) are skipped, leaving only side-specific keys.

        Raises:
            InvalidOverride: If a recognized key carries an unparseable value.
        """
        picked = config_from_source(source, SHUFFLED_INPUT_KEYS)
        if not include_common:
            picked = {k: v for k, v in picked.items() if k not in COMMON_KEYS}
        common = parse_common_overrides(picked, self._fields.compression_codec)
        tunables = normalize_tunables(picked, _TUNABLES)

        def apply() -> None:
            if not picked:
                return
            common.apply_to(self._fields)
            self._fields.settings.merge(tunables)
            logger.debug("Applied external overrides to shuffled input: %s", sorted(picked))

        return apply

    def configure_from_external_source(
        self, source: Mapping[str, Any] | None
    ) -> ShuffledMergedInputConfigurationBuilder:
        """
        Import recognized keys from an external source; see
        SortedOutputConfigurationBuilder.configure_from_external_source.

        Raises:
            InvalidOverride: If a recognized key carries an unparseable value.
        """
        self.plan_external_source(source)()
        return self

    # -- input tuning ---------------------------------------------------------

    def _set_tunable(self, key: str, value: Any) -> ShuffledMergedInputConfigurationBuilder:
        self._fields.settings.set(key, _TUNABLES[key](key, value, ConfigurationError))
        return self

    def set_shuffle_buffer_fraction(self, fraction: float) -> ShuffledMergedInputConfigurationBuilder:
        return self._set_tunable(SHUFFLE_FETCH_BUFFER_PERCENT, fraction)

    def set_max_single_memory_segment_fraction(
        self, fraction: float
    ) -> ShuffledMergedInputConfigurationBuilder:
        return self._set_tunable(SHUFFLE_MEMORY_LIMIT_PERCENT, fraction)

    def set_merge_fraction(self, fraction: float) -> ShuffledMergedInputConfigurationBuilder:
        return self._set_tunable(SHUFFLE_MERGE_PERCENT, fraction)

    def set_post_merge_buffer_fraction(
        self, fraction: float
    ) -> ShuffledMergedInputConfigurationBuilder:
        return self._set_tunable(INPUT_POST_MERGE_BUFFER_PERCENT, fraction)

    def set_merge_factor(self, factor: int) -> ShuffledMergedInputConfigurationBuilder:
        return self._set_tunable(IO_SORT_FACTOR, factor)

    def set_combiner(
        self, class_name: str, combiner_settings: SettingsMap | None = None
    ) -> ShuffledMergedInputConfigurationBuilder:
        bag = SettingsBag({COMBINER_CLASS: check_class_name(COMBINER_CLASS, class_name)})
        if combiner_settings:
            bag.merge(combiner_settings)
        self._fields.settings.merge(bag)
        return self

    def use_legacy_input(self) -> ShuffledMergedInputConfigurationBuilder:
        self._legacy = True
        return self

    def build(self) -> ShuffledMergedInputConfiguration:
        """
        Freeze the accumulated fields.

        Raises:
            MissingRequiredField: If key type or value type is unset or empty.
        """
        key, value = self._fields.require_types("shuffled input")
        conf = ShuffledMergedInputConfiguration(
            key_class_name=key,
            value_class_name=value,
            key_comparator_class_name=self._fields.key_comparator_class_name,
            compression_codec=self._fields.compression_codec,
            settings=self._fields.settings.to_dict(),
            input_class_name=SHUFFLED_MERGED_INPUT_LEGACY_CLASS_NAME
            if self._legacy
            else SHUFFLED_MERGED_INPUT_CLASS_NAME,
        )
        logger.debug("Froze shuffled input configuration key=%s value=%s", key, value)
        return conf


class ShuffledMergedInputSpecificBuilder(Generic[P]):
    """Input-only view handed out by a parent builder; done() returns the parent."""

    def __init__(self, parent: P, builder: ShuffledMergedInputConfigurationBuilder) -> None:
        self._parent = parent
        self._builder = builder

    def set_shuffle_buffer_fraction(self, fraction: float) -> ShuffledMergedInputSpecificBuilder[P]:
        self._builder.set_shuffle_buffer_fraction(fraction)
        return self

    def set_max_single_memory_segment_fraction(
        self, fraction: float
    ) -> ShuffledMergedInputSpecificBuilder[P]:
        self._builder.set_max_single_memory_segment_fraction(fraction)
        return self

    def set_merge_fraction(self, fraction: float) -> ShuffledMergedInputSpecificBuilder[P]:
        self._builder.set_merge_fraction(fraction)
        return self

    def set_post_merge_buffer_fraction(
        self, fraction: float
    ) -> ShuffledMergedInputSpecificBuilder[P]:
        self._builder.set_post_merge_buffer_fraction(fraction)
        return self

    def set_merge_factor(self, factor: int) -> ShuffledMergedInputSpecificBuilder[P]:
        self._builder.set_merge_factor(factor)
        return self

    def set_combiner(
        self, class_name: str, combiner_settings: SettingsMap | None = None
    ) -> ShuffledMergedInputSpecificBuilder[P]:
        self._builder.set_combiner(class_name, combiner_settings)
        return self

    def use_legacy_input(self) -> ShuffledMergedInputSpecificBuilder[P]:
        self._builder.use_legacy_input()
        return self

    def set_setting(self, key: str, value: str) -> ShuffledMergedInputSpecificBuilder[P]:
        self._builder.set_setting(key, value)
        return self

    def set_settings(self, settings: SettingsMap) -> ShuffledMergedInputSpecificBuilder[P]:
        self._builder.set_settings(settings)
        return self

    def configure_from_external_source(
        self, source: Mapping[str, Any] | None
    ) -> ShuffledMergedInputSpecificBuilder[P]:
        """Import side-specific keys only; shared keys are set through the parent."""
        self._builder.plan_external_source(source, include_common=False)()
        return self

    def done(self) -> P:
        return self._parent
