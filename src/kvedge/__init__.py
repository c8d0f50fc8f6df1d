"""
kvedge — Configuration assembly for ordered, partitioned key/value dataflow edges.

## Responsibilities
- Collect key type, value type, partitioner, comparator, compression, and free-form
  settings for one producer → consumer edge.
- Keep the sorted-output side and the shuffled-input side identical for everything
  that must match, while allowing side-specific tuning.
- Emit (class identifier, opaque payload) pairs for the runtime loader, and ready-made
  edge properties for the DAG-assembly layer.

## Examples
```python
from kvedge import OrderedPartitionedKVEdgeConfigurer

edge = (
    OrderedPartitionedKVEdgeConfigurer.new_builder("Text", "IntWritable", "HashPartitioner")
    .set_comparator("TextComparator")
    .enable_compression("SnappyCodec")
    .build()
)
prop = edge.create_default_edge_property()
```
"""

from __future__ import annotations

from .conf import (
    OrderedPartitionedKVEdgeBuilder,
    OrderedPartitionedKVEdgeConfigurer,
    SettingsBag,
    ShuffledMergedInputConfiguration,
    ShuffledMergedInputConfigurationBuilder,
    SortedOutputConfiguration,
    SortedOutputConfigurationBuilder,
    load_source,
)
from .core.descriptors import EdgeManagerDescriptor, EdgeProperty, InputDescriptor, OutputDescriptor
from .core.errors import (
    BuilderReuseError,
    ConfigurationError,
    InvalidOverride,
    MissingRequiredField,
    NullArgument,
    VersionMismatch,
)
from .core.grammar import DataMovementType, DataSourceType, SchedulingType

__all__ = [
    "OrderedPartitionedKVEdgeConfigurer",
    "OrderedPartitionedKVEdgeBuilder",
    "SortedOutputConfiguration",
    "SortedOutputConfigurationBuilder",
    "ShuffledMergedInputConfiguration",
    "ShuffledMergedInputConfigurationBuilder",
    "SettingsBag",
    "load_source",
    "EdgeProperty",
    "EdgeManagerDescriptor",
    "OutputDescriptor",
    "InputDescriptor",
    "DataMovementType",
    "DataSourceType",
    "SchedulingType",
    "ConfigurationError",
    "MissingRequiredField",
    "NullArgument",
    "InvalidOverride",
    "BuilderReuseError",
    "VersionMismatch",
]
