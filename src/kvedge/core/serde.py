"""
Payload serialization strategy for side configurations.

Provides the PayloadSerializer protocol that builders accept as an injected
collaborator, and CanonicalJsonSerializer, the default implementation that encodes
payload mappings as UTF-8 canonical JSON. Re-exports `json_dumps_canonical` from
`kvedge.core.hashing` to keep a single canonical JSON policy. This module is zero-IO.

Notes:
    - The byte layout is opaque to the rest of the package; only a faithful round
      trip is required (deserialize(serialize(d)) == d).
    - Malformed bytes surface as ConfigurationError, never as a bare json error.
"""

from __future__ import annotations

import json
from typing import Any, Protocol, runtime_checkable

from .errors import ConfigurationError
from .hashing import json_dumps_canonical
from .typing import JsonDict

__all__ = [
    "PayloadSerializer",
    "CanonicalJsonSerializer",
    "DEFAULT_SERIALIZER",
    "json_loads",
    "json_dumps_canonical",
]


@runtime_checkable
class PayloadSerializer(Protocol):
    """Encodes payload mappings to bytes and back."""

    def serialize(self, payload: JsonDict) -> bytes: ...

    def deserialize(self, data: bytes) -> JsonDict: ...


def json_loads(s: str | bytes) -> Any:
    """
    Deserialize a JSON string (or UTF-8 bytes) using the stdlib json module.

    Notes:
        No custom hooks; payloads only carry strings, booleans, nulls, and mappings.
    """
    return json.loads(s)


class CanonicalJsonSerializer:
    """
    Default serializer: canonical JSON encoded as UTF-8.

    Examples:
        >>> from kvedge.core.serde import CanonicalJsonSerializer
        >>> s = CanonicalJsonSerializer()
        >>> s.serialize({"b": "2", "a": "1"})
        b'{"a":"1","b":"2"}'
        >>> s.deserialize(b'{"a":"1"}')
        {'a': '1'}
    """

    def serialize(self, payload: JsonDict) -> bytes:
        return json_dumps_canonical(payload).encode("utf-8")

    def deserialize(self, data: bytes) -> JsonDict:
        try:
            obj = json_loads(data)
        except (UnicodeDecodeError, ValueError) as exc:
            raise ConfigurationError(f"payload is not valid JSON: {exc}") from exc
        if not isinstance(obj, dict):
            raise ConfigurationError(f"payload must decode to a mapping, got {type(obj).__name__}")
        return obj


DEFAULT_SERIALIZER: PayloadSerializer = CanonicalJsonSerializer()
