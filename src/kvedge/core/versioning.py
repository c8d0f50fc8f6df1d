"""
Payload format version metadata and helpers.

Exposes the canonical payload version (PAYLOAD_V) embedded in every serialized side
configuration and the compatibility check applied when payloads are decoded.
This module is zero-IO.

Notes:
    - Side configurations write {"major": .., "minor": ..} under "version".
    - Decoders reject payloads whose major differs from PAYLOAD_V or whose minor is newer.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any

from .errors import VersionMismatch

__all__ = [
    "PayloadVersion",
    "PAYLOAD_V",
    "is_compatible",
    "version_from_payload",
]


@dataclass(frozen=True)
class PayloadVersion:
    """
    Immutable semantic version with ISO release date for side payloads.

    Attributes:
        major (int): Non-negative major component signalling breaking layout changes.
        minor (int): Non-negative minor component for additive fields.
        date (str): ISO YYYY-MM-DD release date.

    Raises:
        ValueError: If any component is negative or the date is not ISO compliant.
    """

    major: int
    minor: int
    date: str  # ISO YYYY-MM-DD

    def __post_init__(self) -> None:
        if self.major < 0:
            raise ValueError(f"PayloadVersion major must be non-negative, got {self.major}")
        if self.minor < 0:
            raise ValueError(f"PayloadVersion minor must be non-negative, got {self.minor}")
        try:
            date.fromisoformat(self.date)
        except ValueError as exc:
            raise ValueError(
                f"PayloadVersion date must be ISO YYYY-MM-DD, got {self.date!r}"
            ) from exc

    def to_dict(self) -> dict[str, int]:
        return {"major": self.major, "minor": self.minor}


PAYLOAD_V = PayloadVersion(1, 0, "2026-10-18")


def is_compatible(major: int, minor: int) -> bool:
    """
    Check whether a payload version can be decoded by this package.

    Examples:
        >>> from kvedge.core.versioning import PAYLOAD_V, is_compatible
        >>> is_compatible(PAYLOAD_V.major, PAYLOAD_V.minor)
        True
        >>> is_compatible(PAYLOAD_V.major + 1, 0)
        False
    """
    return major == PAYLOAD_V.major and minor <= PAYLOAD_V.minor


def version_from_payload(raw: Any) -> tuple[int, int]:
    """
    Extract and check the version stamp of a decoded payload.

    Raises:
        VersionMismatch: If the stamp is missing, malformed, or incompatible.
    """
    if not isinstance(raw, dict):
        raise VersionMismatch(f"payload version stamp missing or malformed: {raw!r}")
    try:
        major = int(raw["major"])
        minor = int(raw["minor"])
    except (KeyError, TypeError, ValueError) as exc:
        raise VersionMismatch(f"payload version stamp malformed: {raw!r}") from exc
    if not is_compatible(major, minor):
        raise VersionMismatch(
            f"payload version {major}.{minor} is not compatible with "
            f"{PAYLOAD_V.major}.{PAYLOAD_V.minor}"
        )
    return major, minor
