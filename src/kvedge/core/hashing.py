"""
Canonical JSON serialization and hashing helpers for configuration payloads.

Provides a single canonical JSON policy and SHA-256 helpers so that payload bytes
and edge fingerprints are stable across runs and processes. This module is zero-IO
and uses only the Python standard library.

Notes:
    - Canonical JSON:
        - sort_keys=True
        - separators=(",", ":")
        - ensure_ascii=False
    - Payload content is a pure function of the frozen fields: equal configurations
      always produce equal bytes and equal digests.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Iterable
from typing import Any

__all__ = [
    "json_dumps_canonical",
    "hash_payload",
    "hash_parts",
]


def json_dumps_canonical(obj: Any) -> str:
    """
    Serialize an object to a canonical JSON string.

    Args:
        obj (Any): JSON-serializable object.

    Returns:
        str: Canonical JSON string with sort_keys=True, compact separators,
        and ensure_ascii=False.
    """
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def hash_payload(payload: bytes) -> str:
    """
    Compute the SHA-256 hex digest of a serialized payload.

    Examples:
        >>> from kvedge.core.hashing import hash_payload
        >>> hash_payload(b"{}") == hash_payload(b"{}")
        True
    """
    return hashlib.sha256(payload).hexdigest()


def hash_parts(parts: Iterable[bytes | str]) -> str:
    """
    Hash an ordered sequence of byte/str parts into one digest.

    Each part is length-prefixed so that ("ab", "c") and ("a", "bc") differ.
    """
    h = hashlib.sha256()
    for part in parts:
        raw = part.encode("utf-8") if isinstance(part, str) else part
        h.update(len(raw).to_bytes(8, "big"))
        h.update(raw)
    return h.hexdigest()
