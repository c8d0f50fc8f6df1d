"""
External configuration sources for edge builders.

Turns environment variables, TOML files, YAML files, or plain mappings into the flat
key → value mapping that `configure_from_external_source` consumes, and filters such
a mapping down to the keys a given side recognizes.

Precedence (load_source): environment > file > nothing.

Recognized variables:
    - Every key in kvedge.core.constants.SORTED_OUTPUT_KEYS / SHUFFLED_INPUT_KEYS, spelled
      upper-case with "." and "-" replaced by "_" and the prefix prepended, e.g.
      KVEDGE_TEZ_RUNTIME_KEY_CLASS for tez.runtime.key.class.
    - Partitioner settings (tez.runtime.partitioner.conf.*) are file-only; their names
      cannot be recovered from an env var spelling.

File search order when `path` is None:
    1) ./kvedge.toml (with either a top-level [runtime] table or direct keys)
    2) ./pyproject.toml under [tool.kvedge.runtime]

Notes:
    - Nested tables/mappings flatten to dotted keys, so both
      `"tez.runtime.key.class" = "Text"` and nested tables are accepted.
    - tez.runtime.compress is both a value and the parent of tez.runtime.compress.codec,
      so a file setting both must spell them as quoted keys (`"tez.runtime.compress" =
      true` / `"tez.runtime.compress.codec" = "SnappyCodec"` in TOML, one flat
      `tez.runtime.compress.codec:` key in YAML). Unquoted dotted TOML keys for the
      pair are a TOML error.
    - Values are coerced to strings; booleans become "true"/"false".
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import yaml

from kvedge.core.constants import SHUFFLED_INPUT_KEYS, SORTED_OUTPUT_KEYS
from kvedge.core.errors import ConfigurationError, InvalidOverride
from kvedge.core.utils import get_logger

__all__ = [
    "ALL_RECOGNIZED_KEYS",
    "config_from_source",
    "flatten_mapping",
    "env_var_name",
    "source_from_env",
    "source_from_toml",
    "source_from_yaml",
    "load_source",
]

logger = get_logger(__name__)

ALL_RECOGNIZED_KEYS: tuple[str, ...] = tuple(dict.fromkeys((*SORTED_OUTPUT_KEYS, *SHUFFLED_INPUT_KEYS)))

DEFAULT_ENV_PREFIX = "KVEDGE_"


def _coerce(key: str, value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float, str)):
        return str(value)
    raise InvalidOverride(f"{key}: expected a scalar value, got {type(value).__name__}")


def flatten_mapping(data: Mapping[str, Any], parent: str = "") -> dict[str, Any]:
    """Flatten nested mappings into dotted keys, keeping leaf values as-is."""
    flat: dict[str, Any] = {}
    for k, v in data.items():
        key = f"{parent}.{k}" if parent else str(k)
        if isinstance(v, Mapping):
            flat.update(flatten_mapping(v, key))
        else:
            flat[key] = v
    return flat


def config_from_source(
    source: Mapping[str, Any] | None,
    recognized_keys: Iterable[str],
    prefixes: Iterable[str] = (),
) -> dict[str, str]:
    """
    Select the recognized subset of a configuration source.

    Args:
        source: Flat key → value mapping (None is treated as empty).
        recognized_keys: Exact keys to keep.
        prefixes: Key prefixes to keep (e.g., partitioner settings).

    Returns:
        dict[str, str]: Recognized entries in source order, values coerced to strings.

    Raises:
        InvalidOverride: If a recognized key carries a non-scalar value.
    """
    if not source:
        return {}
    wanted = set(recognized_keys)
    prefixes = tuple(prefixes)
    picked: dict[str, str] = {}
    for k, v in source.items():
        if v is None:
            continue
        if k in wanted or (prefixes and k.startswith(prefixes)):
            picked[k] = _coerce(k, v)
    return picked


def env_var_name(key: str, prefix: str = DEFAULT_ENV_PREFIX) -> str:
    """
    Environment spelling of a configuration key.

    Examples:
        >>> env_var_name("tez.runtime.task.input.post-merge.buffer.percent")
        'KVEDGE_TEZ_RUNTIME_TASK_INPUT_POST_MERGE_BUFFER_PERCENT'
    """
    return prefix + key.replace(".", "_").replace("-", "_").upper()


def source_from_env(
    prefix: str = DEFAULT_ENV_PREFIX, environ: Mapping[str, str] | None = None
) -> dict[str, str]:
    """
    Build a configuration source from environment variables.

    Args:
        prefix: Variable name prefix.
        environ: Mapping to read instead of os.environ.

    Returns:
        dict[str, str]: Recognized keys whose variables are set and non-empty.
    """
    env = os.environ if environ is None else environ
    mapping: dict[str, str] = {}
    for key in ALL_RECOGNIZED_KEYS:
        v = env.get(env_var_name(key, prefix))
        if v:
            mapping[key] = v
    return mapping


def _read_toml(p: Path) -> dict[str, Any]:
    try:
        with p.open("rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"{p}: invalid TOML: {exc}") from exc


def source_from_toml(path: str | os.PathLike[str] | None = None) -> dict[str, Any]:
    """
    Build a configuration source from a TOML file.

    Returns an empty mapping if no default candidate file exists.

    Raises:
        ConfigurationError: If an explicit path is missing, or a candidate file is not valid TOML.
    """
    cand: list[Path] = []
    if path is not None:
        if not Path(path).exists():
            raise ConfigurationError(f"configuration file not found: {path}")
        cand.append(Path(path))
    else:
        cand.append(Path.cwd() / "kvedge.toml")
        cand.append(Path.cwd() / "pyproject.toml")

    for p in cand:
        if not p.exists():
            continue
        data = _read_toml(p)
        if p.name == "pyproject.toml":
            # Expect [tool.kvedge.runtime]
            tool = data.get("tool", {})
            cfg = tool.get("kvedge", {}).get("runtime", {}) if isinstance(tool, dict) else {}
        elif isinstance(data.get("runtime"), dict):
            cfg = data["runtime"]
        else:
            cfg = data
        if cfg:
            logger.info("Loaded edge configuration source from %s", p)
            return flatten_mapping(cfg)
    return {}


def source_from_yaml(path: str | os.PathLike[str]) -> dict[str, Any]:
    """
    Build a configuration source from a YAML mapping.

    Raises:
        ConfigurationError: If the file is missing, not valid YAML, or not a mapping.
    """
    p = Path(path)
    if not p.exists():
        raise ConfigurationError(f"configuration file not found: {p}")
    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"{p}: invalid YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"{p}: expected a mapping at top level")
    if isinstance(data.get("runtime"), dict):
        data = data["runtime"]
    logger.info("Loaded edge configuration source from %s", p)
    return flatten_mapping(data)


def load_source(
    path: str | os.PathLike[str] | None = None,
    *,
    prefix: str = DEFAULT_ENV_PREFIX,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """
    Load a configuration source applying precedence: environment > file.

    Args:
        path: Optional explicit file. ".yaml"/".yml" use the YAML loader, anything else TOML.
            If None, search defaults (kvedge.toml, pyproject.toml).
        prefix: Environment variable prefix.
        environ: Mapping to read instead of os.environ.
    """
    if path is not None and Path(path).suffix.lower() in (".yaml", ".yml"):
        merged = source_from_yaml(path)
    else:
        merged = source_from_toml(path)
    merged.update(source_from_env(prefix=prefix, environ=environ))
    return merged
