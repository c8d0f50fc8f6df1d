"""
Lightweight typing aliases used across configurations and builders.

Notes:
    - Intended for annotations; no runtime logic and zero-IO.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

__all__ = [
    "SettingsMap",
    "JsonDict",
]

# Free-form settings understood only by the runtime implementation.
SettingsMap = Mapping[str, str]

# Convenient JSON-like mapping alias. Kept intentionally broad for serde boundaries.
JsonDict = dict[str, Any]
