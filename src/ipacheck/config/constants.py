"""Common constants and coercion helpers for ipacheck configuration."""

from __future__ import annotations

TRUTHY_STRINGS = {"1", "true", "yes", "on"}
FALSY_STRINGS = {"0", "false", "no", "off"}


CONFIG_BASENAME = "ipacheck"
DEFAULT_CONFIG_FILENAME = f"{CONFIG_BASENAME}.toml"
LOCAL_CONFIG_FILENAME = f"{CONFIG_BASENAME}.local.toml"

ENVVAR_PREFIX = "IPACHECK"

DEFAULT_BINDDN = "cn=Directory Manager"
DEFAULT_WARNING_THRESHOLD = 1
DEFAULT_CRITICAL_THRESHOLD = 2


def coerce_bool(value: object | None, *, default: bool = False) -> bool:
    """Convert common truthy/falsey string markers into booleans.

    Falls back to ``default`` when the value is ``None`` or ambiguous.
    """

    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if not normalized:
            return default
        if normalized in TRUTHY_STRINGS:
            return True
        if normalized in FALSY_STRINGS:
            return False
        return default
    if isinstance(value, (int, float)):
        return bool(value)
    return default


def coerce_int(candidate: object | None) -> int:
    """Coerce ``candidate`` into an integer, rejecting floats and free text."""

    if isinstance(candidate, bool):
        raise ValueError(f"Invalid integer value: {candidate}")
    if isinstance(candidate, int):
        return candidate
    if isinstance(candidate, str):
        text = candidate.strip()
        if text.lstrip("-").isdecimal():
            return int(text)
    raise ValueError(f"Invalid integer value: {candidate!r}")


__all__ = [
    "CONFIG_BASENAME",
    "DEFAULT_BINDDN",
    "DEFAULT_CONFIG_FILENAME",
    "DEFAULT_CRITICAL_THRESHOLD",
    "DEFAULT_WARNING_THRESHOLD",
    "ENVVAR_PREFIX",
    "FALSY_STRINGS",
    "LOCAL_CONFIG_FILENAME",
    "TRUTHY_STRINGS",
    "coerce_bool",
    "coerce_int",
]
