from __future__ import annotations

import pytest

from kvedge.conf.shuffled_input import (
    ShuffledMergedInputConfiguration,
    ShuffledMergedInputConfigurationBuilder,
)
from kvedge.core.constants import (
    COMBINER_CLASS,
    INPUT_POST_MERGE_BUFFER_PERCENT,
    IO_SORT_FACTOR,
    IO_SORT_MB,
    PARTITIONER_CLASS,
    SHUFFLE_FETCH_BUFFER_PERCENT,
    SHUFFLE_MEMORY_LIMIT_PERCENT,
    SHUFFLE_MERGE_PERCENT,
    SHUFFLED_MERGED_INPUT_CLASS_NAME,
    SHUFFLED_MERGED_INPUT_LEGACY_CLASS_NAME,
    VALUE_CLASS,
)
from kvedge.core.errors import ConfigurationError, InvalidOverride, MissingRequiredField


def _builder() -> ShuffledMergedInputConfigurationBuilder:
    return ShuffledMergedInputConfigurationBuilder().set_key_type("Text").set_value_type("IntWritable")


def test_minimal_build_uses_regular_input() -> None:
    conf = _builder().build()

    assert conf.input_class_name == SHUFFLED_MERGED_INPUT_CLASS_NAME
    assert not conf.legacy
    assert conf.settings == {}


def test_legacy_input_resolved_at_build() -> None:
    conf = _builder().use_legacy_input().build()

    assert conf.input_class_name == SHUFFLED_MERGED_INPUT_LEGACY_CLASS_NAME
    assert conf.legacy


def test_missing_value_type_raises() -> None:
    with pytest.raises(MissingRequiredField, match="value"):
        ShuffledMergedInputConfigurationBuilder().set_key_type("Text").build()


def test_standalone_comparator_and_codec_are_free() -> None:
    conf = _builder().set_comparator("Reverse").enable_compression("Lz4Codec").build()

    assert conf.key_comparator_class_name == "Reverse"
    assert conf.compression_codec == "Lz4Codec"


def test_tuning_setters_write_normalized_settings() -> None:
    conf = (
        _builder()
        .set_shuffle_buffer_fraction(0.7)
        .set_max_single_memory_segment_fraction(0.25)
        .set_merge_fraction(1)
        .set_post_merge_buffer_fraction(0)
        .set_merge_factor(100)
        .build()
    )

    assert conf.settings == {
        SHUFFLE_FETCH_BUFFER_PERCENT: "0.7",
        SHUFFLE_MEMORY_LIMIT_PERCENT: "0.25",
        SHUFFLE_MERGE_PERCENT: "1.0",
        INPUT_POST_MERGE_BUFFER_PERCENT: "0.0",
        IO_SORT_FACTOR: "100",
    }


@pytest.mark.parametrize(
    "call",
    [
        lambda b: b.set_shuffle_buffer_fraction(0),
        lambda b: b.set_max_single_memory_segment_fraction(-0.1),
        lambda b: b.set_merge_fraction(1.01),
        lambda b: b.set_post_merge_buffer_fraction(2),
        lambda b: b.set_merge_factor(0),
    ],
)
def test_tuning_setters_reject_out_of_range(call) -> None:
    with pytest.raises(ConfigurationError):
        call(_builder())


def test_combiner_settings_merge_into_bag() -> None:
    conf = _builder().set_combiner("SumCombiner", {"combine.batch": "10"}).build()
    assert conf.settings == {COMBINER_CLASS: "SumCombiner", "combine.batch": "10"}


def test_external_source_takes_only_input_keys() -> None:
    conf = _builder().configure_from_external_source(
        {
            VALUE_CLASS: "LongWritable",
            SHUFFLE_MERGE_PERCENT: 0.66,
            INPUT_POST_MERGE_BUFFER_PERCENT: "0",
            IO_SORT_MB: "512",
            PARTITIONER_CLASS: "Ignored",
            "tez.runtime.partitioner.conf.seed": "1",
        }
    ).build()

    assert conf.value_class_name == "LongWritable"
    assert conf.settings == {SHUFFLE_MERGE_PERCENT: "0.66", INPUT_POST_MERGE_BUFFER_PERCENT: "0.0"}


def test_invalid_override_leaves_builder_unchanged() -> None:
    b = _builder().set_merge_fraction(0.5)
    before = b.build()

    with pytest.raises(InvalidOverride):
        b.configure_from_external_source({VALUE_CLASS: "LongWritable", SHUFFLE_MERGE_PERCENT: "0"})
    assert b.build() == before


def test_payload_round_trip() -> None:
    conf = _builder().use_legacy_input().set_setting("a", "1").build()

    assert conf.to_payload()["kind"] == "shuffled_merged_input"
    assert ShuffledMergedInputConfiguration.from_bytes(conf.to_bytes()) == conf


@pytest.mark.parametrize("comparator", [5, " ", ["Reverse"]])
def test_set_comparator_rejects_non_class_names(comparator) -> None:
    b = _builder()
    with pytest.raises(ConfigurationError):
        b.set_comparator(comparator)
    assert b.build().key_comparator_class_name is None


def test_built_settings_are_read_only() -> None:
    conf = _builder().set_setting("a", "1").build()
    with pytest.raises(TypeError):
        conf.settings["a"] = "2"  # type: ignore[index]
    assert conf.settings == {"a": "1"}
