"""
Core contracts for kvedge (errors, constants, grammar, descriptors, serde, versioning).

## Contracts (single source of truth)
- Errors — ConfigurationError taxonomy raised by builders and sources.
- Constants — implementation identifiers and recognized configuration keys.
- Grammar — data movement / data source / scheduling enums and normalization.
- Descriptors — frozen EdgeProperty and component descriptors for DAG assembly.
- Hashing/Serde — canonical JSON, payload serializer protocol, digests.
- Versioning — payload format version stamped into every side payload.

## Notes
- Zero-IO policy: stdlib + pydantic only; no file/network IO.
- Naming policy: enum `.value` and payload field names are lower_snake.
"""
