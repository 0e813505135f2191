"""Typer option declarations and normalization helpers."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Final

import typer

from ipacheck.infrastructure.errors import ConfigurationError

LOG_FORMAT_CHOICES: Final[set[str]] = {"text", "json"}
LOG_LEVEL_CHOICES: Final[list[str]] = sorted(
    name
    for name, value in logging.getLevelNamesMapping().items()
    if isinstance(name, str) and not name.isdigit()
)
LOG_LEVEL_SET: Final[set[str]] = {choice.upper() for choice in LOG_LEVEL_CHOICES}

ConfigPathOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        help="Path to an ipacheck configuration TOML file to load",
        envvar="IPACHECK_CONFIG",
        show_envvar=True,
        rich_help_panel="Configuration",
    ),
]

HostsOption = Annotated[
    list[str] | None,
    typer.Option(
        "--hosts",
        "-H",
        help="Directory servers to compare (comma separated or repeated); "
        "short names get the domain appended",
        show_default=False,
        rich_help_panel="Directory",
    ),
]

DomainOption = Annotated[
    str | None,
    typer.Option(
        "--domain",
        "-d",
        help="DNS domain of the directory servers",
        rich_help_panel="Directory",
    ),
]

SuffixOption = Annotated[
    str | None,
    typer.Option(
        "--suffix",
        "-s",
        help="LDAP search suffix (derived from the domain when omitted)",
        rich_help_panel="Directory",
    ),
]

BindDnOption = Annotated[
    str | None,
    typer.Option(
        "--binddn",
        "-D",
        help="Bind DN (default: cn=Directory Manager)",
        rich_help_panel="Authentication",
    ),
]

PasswordOption = Annotated[
    str | None,
    typer.Option(
        "--password",
        "-W",
        help="Bind password (prompted for when neither password nor file is given)",
        show_default=False,
        rich_help_panel="Authentication",
    ),
]

PasswordFileOption = Annotated[
    str | None,
    typer.Option(
        "--password-file",
        "-p",
        help="File containing the bind password",
        rich_help_panel="Authentication",
    ),
]

StartTlsOption = Annotated[
    bool | None,
    typer.Option(
        "--starttls/--no-starttls",
        help="Require StartTLS on every LDAP connection",
        rich_help_panel="Directory",
    ),
]

TimeoutOption = Annotated[
    float | None,
    typer.Option(
        "--timeout",
        help="Per-query timeout in seconds (default: wait indefinitely)",
        rich_help_panel="Directory",
    ),
]

NagiosOption = Annotated[
    bool | None,
    typer.Option(
        "--nagios/--table",
        "-n",
        help="Print a single Nagios/Icinga status line instead of the table",
        rich_help_panel="Alerting",
    ),
]

WarningOption = Annotated[
    str | None,
    typer.Option(
        "--warning",
        "-w",
        help="Failed checks at which the status becomes WARNING (default: 1)",
        rich_help_panel="Alerting",
    ),
]

CriticalOption = Annotated[
    str | None,
    typer.Option(
        "--critical",
        "-c",
        help="Failed checks at which the status becomes CRITICAL (default: 2)",
        rich_help_panel="Alerting",
    ),
]

DebugOption = Annotated[
    bool | None,
    typer.Option(
        "--debug/--no-debug",
        help="Enable verbose diagnostics",
        envvar="IPACHECK_DEBUG",
        show_envvar=True,
        rich_help_panel="Diagnostics",
    ),
]

LogLevelOption = Annotated[
    str | None,
    typer.Option(
        "--log-level",
        help="Logging level (e.g. INFO, DEBUG)",
        rich_help_panel="Logging",
    ),
]

LogFormatOption = Annotated[
    str | None,
    typer.Option(
        "--log-format",
        help="Logging format (text or json)",
        rich_help_panel="Logging",
    ),
]

LogFileOption = Annotated[
    str | None,
    typer.Option(
        "--log-file",
        help="Path to a log file (use '-', none, stderr to disable)",
        rich_help_panel="Logging",
    ),
]


def clean_string(value: str | None) -> str | None:
    """Normalize optional string input."""

    if value is None:
        return None
    candidate = value.strip()
    return candidate or None


def normalize_threshold(name: str, value: str | None) -> int | None:
    """Parse a threshold option, raising :class:`ConfigurationError` on bad input."""

    candidate = clean_string(value)
    if candidate is None:
        return None
    if not candidate.lstrip("-").isdecimal():
        raise ConfigurationError(f"{name} threshold must be an integer, got {value!r}")
    return int(candidate)


def normalize_log_format(value: str | None) -> str | None:
    """Normalize the log format option."""

    candidate = clean_string(value)
    if candidate is None:
        return None
    candidate = candidate.lower()
    if candidate not in LOG_FORMAT_CHOICES:
        raise ConfigurationError("Log format must be either 'text' or 'json'")
    return candidate


def normalize_log_level(value: str | None) -> str | None:
    """Normalize the log level option."""

    candidate = clean_string(value)
    if candidate is None:
        return None
    candidate = candidate.upper()
    if candidate not in LOG_LEVEL_SET:
        raise ConfigurationError(f"Log level must be one of: {', '.join(LOG_LEVEL_CHOICES)}")
    return candidate


__all__ = [
    "BindDnOption",
    "ConfigPathOption",
    "CriticalOption",
    "DebugOption",
    "DomainOption",
    "HostsOption",
    "LOG_FORMAT_CHOICES",
    "LOG_LEVEL_CHOICES",
    "LogFileOption",
    "LogFormatOption",
    "LogLevelOption",
    "NagiosOption",
    "PasswordFileOption",
    "PasswordOption",
    "StartTlsOption",
    "SuffixOption",
    "TimeoutOption",
    "WarningOption",
    "clean_string",
    "normalize_log_format",
    "normalize_log_level",
    "normalize_threshold",
]
