"""
Ordered string → string settings carried opaquely to the runtime implementation.

Notes:
    - set() and merge() overwrite existing keys in place; first-insertion order is kept.
    - Serialization delegates to a PayloadSerializer; only a faithful round trip of the
      key → value mapping is guaranteed, not byte order of entries.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping

from kvedge.core.errors import ConfigurationError, NullArgument
from kvedge.core.serde import DEFAULT_SERIALIZER, PayloadSerializer

__all__ = ["SettingsBag"]


def _check_entry(key: object, value: object) -> tuple[str, str]:
    if not isinstance(key, str) or not key:
        raise ConfigurationError(f"setting key must be a non-empty string, got {key!r}")
    if value is None:
        raise NullArgument(f"setting {key!r} cannot be None")
    if not isinstance(value, str):
        raise ConfigurationError(
            f"setting {key!r} must be a string, got {type(value).__name__}"
        )
    return key, value


class SettingsBag(Mapping[str, str]):
    """
    Mutable ordered mapping of free-form settings.

    Examples:
        >>> from kvedge.conf.settings import SettingsBag
        >>> bag = SettingsBag({"a": "1"}).set("b", "2").merge({"a": "3"})
        >>> list(bag.items())
        [('a', '3'), ('b', '2')]
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[str, str] | Iterable[tuple[str, str]] | None = None) -> None:
        self._entries: dict[str, str] = {}
        if entries is not None:
            self.merge(entries)

    def __getitem__(self, key: str) -> str:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"SettingsBag({self._entries!r})"

    def set(self, key: str, value: str) -> SettingsBag:
        """Set one entry, overwriting any prior value for key."""
        k, v = _check_entry(key, value)
        self._entries[k] = v
        return self

    def merge(self, other: Mapping[str, str] | Iterable[tuple[str, str]]) -> SettingsBag:
        """Overwrite matching keys from other; non-overlapping entries of both are kept."""
        if other is None:
            raise NullArgument("settings to merge cannot be None")
        items = other.items() if isinstance(other, Mapping) else other
        checked = [_check_entry(k, v) for k, v in items]
        for k, v in checked:
            self._entries[k] = v
        return self

    def is_empty(self) -> bool:
        return not self._entries

    def copy(self) -> SettingsBag:
        return SettingsBag(self._entries)

    def to_dict(self) -> dict[str, str]:
        return dict(self._entries)

    def to_bytes(self, serializer: PayloadSerializer | None = None) -> bytes:
        return (serializer or DEFAULT_SERIALIZER).serialize(self.to_dict())

    @classmethod
    def from_bytes(cls, data: bytes, serializer: PayloadSerializer | None = None) -> SettingsBag:
        """
        Rebuild a bag from serialized bytes.

        Raises:
            ConfigurationError: If the decoded mapping holds non-string entries.
        """
        raw = (serializer or DEFAULT_SERIALIZER).deserialize(data)
        return cls(raw)
