"""
Class identifiers and recognized configuration keys for ordered/partitioned edges.

Defines the implementation identifiers handed to the runtime loader and the keys an
external configuration source may use to override builder fields. This module is
zero-IO and uses only the Python standard library.

Notes:
    - Class identifiers are opaque to this package; nothing here checks that they load.
    - Tunable keys are stored in the side's settings bag in normalized string form.
    - Keys under PARTITIONER_SETTINGS_PREFIX are routed to the partitioner settings
      with the prefix stripped.
"""

from __future__ import annotations

from typing import Final

__all__ = [
    "SORTED_OUTPUT_CLASS_NAME",
    "SHUFFLED_MERGED_INPUT_CLASS_NAME",
    "SHUFFLED_MERGED_INPUT_LEGACY_CLASS_NAME",
    "KEY_CLASS",
    "VALUE_CLASS",
    "KEY_COMPARATOR_CLASS",
    "COMPRESS",
    "COMPRESS_CODEC",
    "PARTITIONER_CLASS",
    "PARTITIONER_SETTINGS_PREFIX",
    "COMBINER_CLASS",
    "IO_SORT_MB",
    "SORT_SPILL_PERCENT",
    "SORT_THREADS",
    "IO_SORT_FACTOR",
    "SHUFFLE_FETCH_BUFFER_PERCENT",
    "SHUFFLE_MEMORY_LIMIT_PERCENT",
    "SHUFFLE_MERGE_PERCENT",
    "INPUT_POST_MERGE_BUFFER_PERCENT",
    "COMMON_KEYS",
    "SORTED_OUTPUT_KEYS",
    "SHUFFLED_INPUT_KEYS",
]

# Implementation identifiers resolved by the runtime loader.
SORTED_OUTPUT_CLASS_NAME: Final[str] = "org.apache.tez.runtime.library.output.OnFileSortedOutput"
SHUFFLED_MERGED_INPUT_CLASS_NAME: Final[str] = (
    "org.apache.tez.runtime.library.input.ShuffledMergedInput"
)
SHUFFLED_MERGED_INPUT_LEGACY_CLASS_NAME: Final[str] = (
    "org.apache.tez.runtime.library.input.ShuffledMergedInputLegacy"
)

# Shared by both sides of the edge.
KEY_CLASS: Final[str] = "tez.runtime.key.class"
VALUE_CLASS: Final[str] = "tez.runtime.value.class"
KEY_COMPARATOR_CLASS: Final[str] = "tez.runtime.key.comparator.class"
COMPRESS: Final[str] = "tez.runtime.compress"
COMPRESS_CODEC: Final[str] = "tez.runtime.compress.codec"
COMBINER_CLASS: Final[str] = "tez.runtime.combiner.class"
IO_SORT_FACTOR: Final[str] = "tez.runtime.io.sort.factor"

# Output side only.
PARTITIONER_CLASS: Final[str] = "tez.runtime.partitioner.class"
PARTITIONER_SETTINGS_PREFIX: Final[str] = "tez.runtime.partitioner.conf."
IO_SORT_MB: Final[str] = "tez.runtime.io.sort.mb"
SORT_SPILL_PERCENT: Final[str] = "tez.runtime.sort.spill.percent"
SORT_THREADS: Final[str] = "tez.runtime.sort.threads"

# Input side only.
SHUFFLE_FETCH_BUFFER_PERCENT: Final[str] = "tez.runtime.shuffle.fetch.buffer.percent"
SHUFFLE_MEMORY_LIMIT_PERCENT: Final[str] = "tez.runtime.shuffle.memory.limit.percent"
SHUFFLE_MERGE_PERCENT: Final[str] = "tez.runtime.shuffle.merge.percent"
INPUT_POST_MERGE_BUFFER_PERCENT: Final[str] = "tez.runtime.task.input.post-merge.buffer.percent"

COMMON_KEYS: Final[tuple[str, ...]] = (
    KEY_CLASS,
    VALUE_CLASS,
    KEY_COMPARATOR_CLASS,
    COMPRESS,
    COMPRESS_CODEC,
)

SORTED_OUTPUT_KEYS: Final[tuple[str, ...]] = (
    *COMMON_KEYS,
    PARTITIONER_CLASS,
    IO_SORT_MB,
    SORT_SPILL_PERCENT,
    SORT_THREADS,
    IO_SORT_FACTOR,
    COMBINER_CLASS,
)

SHUFFLED_INPUT_KEYS: Final[tuple[str, ...]] = (
    *COMMON_KEYS,
    SHUFFLE_FETCH_BUFFER_PERCENT,
    SHUFFLE_MEMORY_LIMIT_PERCENT,
    SHUFFLE_MERGE_PERCENT,
    INPUT_POST_MERGE_BUFFER_PERCENT,
    IO_SORT_FACTOR,
    COMBINER_CLASS,
)
