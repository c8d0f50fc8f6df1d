"""
Shared pieces of the sorted-output and shuffled-input configurations.

Provides:
- SideConfiguration, the frozen pydantic base both side configurations extend, with
  payload encoding/decoding (kind + version stamped, self-describing).
- KeyValueFields, the mutable accumulator each side builder owns.
- Value checks used by programmatic tuning setters (ConfigurationError) and by
  external-source imports (InvalidOverride).
- parse_common_overrides, which turns the shared recognized keys of a source into
  field updates without touching the builder, so a failed import changes nothing.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_serializer, field_validator

from kvedge.core.constants import COMPRESS, COMPRESS_CODEC, KEY_CLASS, KEY_COMPARATOR_CLASS, VALUE_CLASS
from kvedge.core.errors import ConfigurationError, InvalidOverride, MissingRequiredField, NullArgument
from kvedge.core.grammar import PayloadKind, payload_kind_from_value
from kvedge.core.serde import DEFAULT_SERIALIZER, PayloadSerializer
from kvedge.core.typing import JsonDict
from kvedge.core.versioning import PAYLOAD_V, version_from_payload

from .settings import SettingsBag

__all__ = [
    "SideConfiguration",
    "KeyValueFields",
    "CommonOverrides",
    "Tunable",
    "check_int",
    "check_fraction",
    "check_bool",
    "check_class_name",
    "check_optional_class_name",
    "freeze_settings",
    "parse_common_overrides",
    "normalize_tunables",
    "int_tunable",
    "fraction_tunable",
    "class_name_tunable",
]

_TRUE = {"1", "true", "t", "yes", "y", "on"}
_FALSE = {"0", "false", "f", "no", "n", "off"}


class SideConfiguration(BaseModel):
    """
    Frozen configuration of one side of an ordered/partitioned edge.

    Attributes:
        key_class_name (str): Key type identifier.
        value_class_name (str): Value type identifier.
        key_comparator_class_name (str | None): Comparator; None means the key type's
            natural ordering, resolved by the runtime loader.
        compression_codec (str | None): Codec identifier; None means uncompressed.
        settings (Mapping[str, str]): Free-form settings; a read-only copy of the builder's bag.

    Notes:
        Subclasses set `kind` and add side-specific fields. Payload content is a pure
        function of the fields.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: ClassVar[PayloadKind]

    key_class_name: str = Field(..., min_length=1)
    value_class_name: str = Field(..., min_length=1)
    key_comparator_class_name: str | None = None
    compression_codec: str | None = None
    settings: Mapping[str, str] = Field(default_factory=dict, validate_default=True)

    @field_validator("settings", mode="after")
    @classmethod
    def _freeze_settings(cls, v: Mapping[str, str]) -> Mapping[str, str]:
        return freeze_settings(v)

    @field_serializer("settings")
    def _dump_settings(self, v: Mapping[str, str]) -> dict[str, str]:
        return dict(v)

    @property
    def compression_enabled(self) -> bool:
        return self.compression_codec is not None

    def to_payload(self) -> JsonDict:
        """Self-describing payload mapping (kind, version, then all fields)."""
        return {
            "kind": self.kind.value,
            "version": PAYLOAD_V.to_dict(),
            **self.model_dump(mode="json"),
        }

    def to_bytes(self, serializer: PayloadSerializer | None = None) -> bytes:
        return (serializer or DEFAULT_SERIALIZER).serialize(self.to_payload())

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> SideConfiguration:
        """
        Rebuild a frozen configuration from a decoded payload.

        Raises:
            ConfigurationError: If the payload kind does not match or fields are invalid.
            VersionMismatch: If the payload version is incompatible.
        """
        data = dict(payload)
        try:
            kind = payload_kind_from_value(str(data.pop("kind", "")))
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc
        if kind is not cls.kind:
            raise ConfigurationError(
                f"payload kind {kind.value!r} cannot be decoded as {cls.kind.value!r}"
            )
        version_from_payload(data.pop("version", None))
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ConfigurationError(f"invalid {cls.kind.value} payload: {exc}") from exc

    @classmethod
    def from_bytes(cls, data: bytes, serializer: PayloadSerializer | None = None) -> SideConfiguration:
        return cls.from_payload((serializer or DEFAULT_SERIALIZER).deserialize(data))


def freeze_settings(settings: Mapping[str, str]) -> Mapping[str, str]:
    """Read-only view over a private copy of settings."""
    return MappingProxyType(dict(settings))


@dataclass
class KeyValueFields:
    """Mutable fields shared by both side builders."""

    key_class_name: str | None = None
    value_class_name: str | None = None
    key_comparator_class_name: str | None = None
    compression_codec: str | None = None
    settings: SettingsBag = field(default_factory=SettingsBag)

    def require_types(self, side: str) -> tuple[str, str]:
        """
        Return (key, value) class names.

        Raises:
            MissingRequiredField: If either is unset or empty.
        """
        for what, v in (("key", self.key_class_name), ("value", self.value_class_name)):
            if not v:
                raise MissingRequiredField(f"{side}: {what} class name must be set")
            if not isinstance(v, str):
                raise ConfigurationError(f"{side}: {what} class name must be a string, got {v!r}")
        return self.key_class_name, self.value_class_name  # type: ignore[return-value]


# ---------------------------------------------------------------------------
# Value checks
# ---------------------------------------------------------------------------


def check_int(
    key: str, value: Any, minimum: int, error: type[ConfigurationError] = ConfigurationError
) -> int:
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError as exc:
            raise error(f"{key}: expected an integer, got {value!r}") from exc
    if isinstance(value, bool) or not isinstance(value, int):
        raise error(f"{key}: expected an integer, got {value!r}")
    if value < minimum:
        raise error(f"{key} must be >= {minimum}, got {value}")
    return value


def check_fraction(
    key: str,
    value: Any,
    *,
    allow_zero: bool = False,
    error: type[ConfigurationError] = ConfigurationError,
) -> float:
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError as exc:
            raise error(f"{key}: expected a number, got {value!r}") from exc
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise error(f"{key}: expected a number, got {value!r}")
    value = float(value)
    ok = 0.0 <= value <= 1.0 if allow_zero else 0.0 < value <= 1.0
    if not ok:
        bounds = "[0, 1]" if allow_zero else "(0, 1]"
        raise error(f"{key} must be in {bounds}, got {value}")
    return value


def check_bool(key: str, value: str, error: type[ConfigurationError] = InvalidOverride) -> bool:
    lo = value.strip().lower()
    if lo in _TRUE:
        return True
    if lo in _FALSE:
        return False
    raise error(f"{key}: expected a boolean, got {value!r}")


def check_class_name(
    key: str, value: Any, error: type[ConfigurationError] = ConfigurationError
) -> str:
    if value is None:
        raise NullArgument(f"{key} cannot be None")
    if not isinstance(value, str) or not value.strip():
        raise error(f"{key} must be a non-empty string, got {value!r}")
    return value


def check_optional_class_name(
    key: str, value: Any, error: type[ConfigurationError] = ConfigurationError
) -> str | None:
    """Like check_class_name, but None or "" mean absent."""
    if value is None or value == "":
        return None
    return check_class_name(key, value, error)


# ---------------------------------------------------------------------------
# External overrides
# ---------------------------------------------------------------------------

# A tunable normalizer validates a raw value and returns its stored string form.
Tunable = Callable[[str, Any, type[ConfigurationError]], str]


@dataclass(frozen=True)
class CommonOverrides:
    """Validated updates for KeyValueFields taken from an external source."""

    updates: dict[str, str | None]

    def apply_to(self, fields: KeyValueFields) -> None:
        for name, value in self.updates.items():
            setattr(fields, name, value)


def parse_common_overrides(picked: Mapping[str, str], current_codec: str | None) -> CommonOverrides:
    """
    Translate shared recognized keys into field updates.

    Compression:
        - COMPRESS_CODEC present: codec is set (compression on).
        - COMPRESS=false: codec cleared, regardless of COMPRESS_CODEC.
        - COMPRESS=true with no codec in the source or on the builder: InvalidOverride.

    Raises:
        InvalidOverride: On unparseable values.
    """
    updates: dict[str, str | None] = {}
    if KEY_CLASS in picked:
        updates["key_class_name"] = picked[KEY_CLASS]
    if VALUE_CLASS in picked:
        updates["value_class_name"] = picked[VALUE_CLASS]
    if KEY_COMPARATOR_CLASS in picked:
        updates["key_comparator_class_name"] = picked[KEY_COMPARATOR_CLASS] or None

    codec = picked.get(COMPRESS_CODEC) or None
    if codec is not None:
        updates["compression_codec"] = codec
    if COMPRESS in picked:
        if check_bool(COMPRESS, picked[COMPRESS]):
            if codec is None and current_codec is None:
                raise InvalidOverride(f"{COMPRESS}=true requires {COMPRESS_CODEC}")
        else:
            updates["compression_codec"] = None
    return CommonOverrides(updates)


def normalize_tunables(picked: Mapping[str, str], tunables: Mapping[str, Tunable]) -> dict[str, str]:
    """
    Validate side-specific tunables of a source, returning their stored string forms.

    Raises:
        InvalidOverride: On unparseable or out-of-range values.
    """
    return {k: tunables[k](k, v, InvalidOverride) for k, v in picked.items() if k in tunables}


def int_tunable(minimum: int) -> Tunable:
    def _norm(key: str, value: Any, error: type[ConfigurationError]) -> str:
        return str(check_int(key, value, minimum, error))

    return _norm


def fraction_tunable(*, allow_zero: bool = False) -> Tunable:
    def _norm(key: str, value: Any, error: type[ConfigurationError]) -> str:
        return str(check_fraction(key, value, allow_zero=allow_zero, error=error))

    return _norm


def class_name_tunable(key: str, value: Any, error: type[ConfigurationError]) -> str:
    return check_class_name(key, value, error)
