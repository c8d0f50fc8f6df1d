"""
kvedge.conf — Builders and frozen configurations for ordered/partitioned edges.

## Public API
- SettingsBag — ordered string settings carried to the runtime implementation.
- SortedOutputConfiguration / SortedOutputConfigurationBuilder — producer side.
- ShuffledMergedInputConfiguration / ShuffledMergedInputConfigurationBuilder — consumer side.
- OrderedPartitionedKVEdgeConfigurer / OrderedPartitionedKVEdgeBuilder — both sides in sync.
- load_source / source_from_env / source_from_toml / source_from_yaml — external overrides.

## Import DAG discipline
- Depends only on stdlib, pydantic, PyYAML, and kvedge.core.*.
"""

from __future__ import annotations

from .ordered_partitioned import OrderedPartitionedKVEdgeBuilder, OrderedPartitionedKVEdgeConfigurer
from .settings import SettingsBag
from .shuffled_input import (
    ShuffledMergedInputConfiguration,
    ShuffledMergedInputConfigurationBuilder,
    ShuffledMergedInputSpecificBuilder,
)
from .sorted_output import (
    PartitionerSpec,
    SortedOutputConfiguration,
    SortedOutputConfigurationBuilder,
    SortedOutputSpecificBuilder,
)
from .sources import (
    config_from_source,
    load_source,
    source_from_env,
    source_from_toml,
    source_from_yaml,
)

__all__ = [
    "SettingsBag",
    "PartitionerSpec",
    "SortedOutputConfiguration",
    "SortedOutputConfigurationBuilder",
    "SortedOutputSpecificBuilder",
    "ShuffledMergedInputConfiguration",
    "ShuffledMergedInputConfigurationBuilder",
    "ShuffledMergedInputSpecificBuilder",
    "OrderedPartitionedKVEdgeConfigurer",
    "OrderedPartitionedKVEdgeBuilder",
    "config_from_source",
    "load_source",
    "source_from_env",
    "source_from_toml",
    "source_from_yaml",
]
