"""
Exception types raised while assembling edge configuration.

Provides typed exceptions for configuration-assembly failures:
- ConfigurationError as the catch-all base for builder and source failures.
- MissingRequiredField when key type, value type, or partitioner class is absent at build().
- NullArgument when a required argument is None (e.g., a custom routing descriptor).
- InvalidOverride when an external source supplies a recognized key that does not parse.
- BuilderReuseError when a unified builder is built again after a failed build().
- VersionMismatch when a payload carries an incompatible payload format version.

Notes:
    - This module uses only the Python standard library and has no side effects.
    - All errors are raised synchronously at the offending call or at build(); nothing
      is deferred to serialization or to use of a frozen configuration.

Examples:
    Catch any assembly failure through the base class.

    >>> from kvedge.core.errors import ConfigurationError, MissingRequiredField
    >>> try:
    ...     raise MissingRequiredField("key class name must be set")
    ... except ConfigurationError as e:
    ...     msg = str(e)
    >>> "key class" in msg
    True
"""

from __future__ import annotations

__all__ = [
    "ConfigurationError",
    "MissingRequiredField",
    "NullArgument",
    "InvalidOverride",
    "BuilderReuseError",
    "VersionMismatch",
]


class ConfigurationError(ValueError):
    """
    Base class for edge configuration failures.

    Notes:
        Use this as a catch-all for builder, source, and payload decoding failures.
    """


class MissingRequiredField(ConfigurationError):
    """
    Raised when a required field is absent or empty.

    Examples:
        - Key or value class name unset at build()
        - Partitioner class name unset (output side) or passed as ""
    """


class NullArgument(ConfigurationError):
    """
    Raised when an argument that must carry a value is None.

    Notes:
        No default is substituted; a silently defaulted routing strategy or codec would
        change the data-movement policy of the edge.
    """


class InvalidOverride(ConfigurationError):
    """
    Raised when an external configuration source supplies an unparseable value
    for a recognized key.

    Notes:
        Aborts only the import call that received the source; builder fields set
        before the call are left untouched.
    """


class BuilderReuseError(ConfigurationError):
    """Unified builder used again after a failed build()."""


class VersionMismatch(RuntimeError):
    """Incompatible or unexpected payload format version encountered."""
