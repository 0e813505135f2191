"""Dynaconf-backed configuration helpers for ipacheck."""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from dynaconf import Dynaconf

from ipacheck.config.constants import (
    DEFAULT_BINDDN,
    DEFAULT_CONFIG_FILENAME,
    DEFAULT_CRITICAL_THRESHOLD,
    DEFAULT_WARNING_THRESHOLD,
    ENVVAR_PREFIX,
    LOCAL_CONFIG_FILENAME,
    coerce_bool,
    coerce_int,
)
from ipacheck.domain.alerting import validate_thresholds
from ipacheck.domain.checks import CONTRIBUTING_CHECKS
from ipacheck.infrastructure.errors import ConfigurationError

LOG_FORMAT_TEXT = "text"
LOG_FORMAT_JSON = "json"
DEFAULT_LOG_FORMAT = LOG_FORMAT_TEXT
DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_MAX_BYTES = 10_000_000
DEFAULT_BACKUP_COUNT = 5

_LOGFILE_DISABLED_VALUES = {"", "-", "none", "stderr", "stdout"}
_SERVER_SPLIT = re.compile(r"[,\s]+")

DIRECTORY_SERVERS_KEY = "directory.servers"
DIRECTORY_DOMAIN_KEY = "directory.domain"
DIRECTORY_SUFFIX_KEY = "directory.suffix"
DIRECTORY_BINDDN_KEY = "directory.binddn"
DIRECTORY_PASSWORD_KEY = "directory.password"
DIRECTORY_PASSWORD_FILE_KEY = "directory.password_file"
DIRECTORY_STARTTLS_KEY = "directory.starttls"
DIRECTORY_TIMEOUT_KEY = "directory.timeout"

ALERTING_WARNING_KEY = "alerting.warning"
ALERTING_CRITICAL_KEY = "alerting.critical"
ALERTING_NAGIOS_KEY = "alerting.nagios"

RUNTIME_DEBUG_KEY = "runtime.debug"

LOGGING_LEVEL_KEY = "logging.level"
LOGGING_FORMAT_KEY = "logging.format"
LOGGING_FILE_KEY = "logging.file"
LOGGING_MAX_BYTES_KEY = "logging.max_bytes"
LOGGING_BACKUP_COUNT_KEY = "logging.backup_count"

_ENVIRONMENT_MAP = {
    "IPACHECK_SERVERS": DIRECTORY_SERVERS_KEY,
    "IPACHECK_DOMAIN": DIRECTORY_DOMAIN_KEY,
    "IPACHECK_SUFFIX": DIRECTORY_SUFFIX_KEY,
    "IPACHECK_BINDDN": DIRECTORY_BINDDN_KEY,
    "IPACHECK_PASSWORD": DIRECTORY_PASSWORD_KEY,
    "IPACHECK_PASSWORD_FILE": DIRECTORY_PASSWORD_FILE_KEY,
    "IPACHECK_STARTTLS": DIRECTORY_STARTTLS_KEY,
    "IPACHECK_TIMEOUT": DIRECTORY_TIMEOUT_KEY,
    "IPACHECK_WARNING": ALERTING_WARNING_KEY,
    "IPACHECK_CRITICAL": ALERTING_CRITICAL_KEY,
    "IPACHECK_NAGIOS": ALERTING_NAGIOS_KEY,
    "IPACHECK_DEBUG": RUNTIME_DEBUG_KEY,
    "IPACHECK_LOG_LEVEL": LOGGING_LEVEL_KEY,
    "IPACHECK_LOG_FORMAT": LOGGING_FORMAT_KEY,
    "IPACHECK_LOG_FILE": LOGGING_FILE_KEY,
    "IPACHECK_LOG_MAX_BYTES": LOGGING_MAX_BYTES_KEY,
    "IPACHECK_LOG_BACKUP_COUNT": LOGGING_BACKUP_COUNT_KEY,
}


@dataclass(frozen=True)
class DirectoryInputs:
    servers: Sequence[str] | None = None
    domain: str | None = None
    suffix: str | None = None
    binddn: str | None = None
    password: str | None = None
    password_file: str | None = None
    starttls: bool | None = None
    timeout: float | None = None


@dataclass(frozen=True)
class AlertingInputs:
    warning: int | str | None = None
    critical: int | str | None = None
    nagios: bool | None = None


@dataclass(frozen=True)
class RuntimeInputs:
    debug: bool | None = None


@dataclass(frozen=True)
class LoggingInputs:
    level: str | None = None
    format: str | None = None
    file_path: str | None = None
    max_bytes: int | None = None
    backup_count: int | None = None


@dataclass(frozen=True)
class RuntimeSettings:
    servers: tuple[str, ...]
    domain: str
    suffix: str
    binddn: str
    password: str | None
    password_file: str | None
    starttls: bool
    timeout: float | None
    warning: int
    critical: int
    nagios: bool
    debug: bool
    warnings: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class LoggingSettings:
    level: int
    format: str
    file_path: str | None
    max_bytes: int
    backup_count: int

    @property
    def level_name(self) -> str:
        return logging.getLevelName(self.level)


def is_logfile_disabled_value(value: str | None) -> bool:
    if value is None:
        return True
    return value.strip().lower() in _LOGFILE_DISABLED_VALUES


def domain_to_suffix(domain: str) -> str:
    """Translate ``example.com`` into ``dc=example,dc=com``."""

    labels = [label for label in domain.strip().strip(".").split(".") if label]
    return ",".join(f"dc={label}" for label in labels)


def split_server_names(value: Any) -> tuple[str, ...]:
    """Split a server list from config, env or CLI into individual names."""

    if value is None:
        return ()
    if isinstance(value, str):
        items: list[Any] = [value]
    else:
        items = list(value)
    names: list[str] = []
    for item in items:
        for candidate in _SERVER_SPLIT.split(str(item)):
            candidate = candidate.strip()
            if candidate:
                names.append(candidate)
    return tuple(names)


def _default_settings_files(config_path: str | None) -> list[str]:
    if config_path:
        config_file = Path(config_path)
        local_file = config_file.with_name(f"{config_file.stem}.local{config_file.suffix}")
        files: list[str] = []
        if config_file.exists():
            files.append(str(config_file))
        if local_file.exists():
            files.append(str(local_file))
        return files or [str(config_file)]
    return [DEFAULT_CONFIG_FILENAME, LOCAL_CONFIG_FILENAME]


def _coerce_str(value: Any | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        candidate = value.strip()
        return candidate or None
    return str(value)


def _coerce_optional_int(value: Any | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _apply_environment_overrides(settings: Dynaconf) -> None:
    for env_var, key in _ENVIRONMENT_MAP.items():
        raw = os.getenv(env_var)
        if raw is None:
            continue
        if not raw.strip():
            continue
        settings.set(key, raw)


def _apply_directory_inputs(settings: Dynaconf, inputs: DirectoryInputs | None) -> None:
    if inputs is None:
        return

    if inputs.servers:
        settings.set(DIRECTORY_SERVERS_KEY, ",".join(inputs.servers))
    if inputs.domain is not None:
        settings.set(DIRECTORY_DOMAIN_KEY, inputs.domain.strip())
    if inputs.suffix is not None:
        settings.set(DIRECTORY_SUFFIX_KEY, inputs.suffix.strip())
    if inputs.binddn is not None:
        settings.set(DIRECTORY_BINDDN_KEY, inputs.binddn.strip())
    if inputs.password is not None:
        settings.set(DIRECTORY_PASSWORD_KEY, inputs.password)
    if inputs.password_file is not None:
        settings.set(DIRECTORY_PASSWORD_FILE_KEY, inputs.password_file.strip())
    if inputs.starttls is not None:
        settings.set(DIRECTORY_STARTTLS_KEY, inputs.starttls)
    if inputs.timeout is not None:
        settings.set(DIRECTORY_TIMEOUT_KEY, inputs.timeout)


def _apply_alerting_inputs(settings: Dynaconf, inputs: AlertingInputs | None) -> None:
    if inputs is None:
        return

    if inputs.warning is not None:
        settings.set(ALERTING_WARNING_KEY, inputs.warning)
    if inputs.critical is not None:
        settings.set(ALERTING_CRITICAL_KEY, inputs.critical)
    if inputs.nagios is not None:
        settings.set(ALERTING_NAGIOS_KEY, inputs.nagios)


def _apply_runtime_inputs(settings: Dynaconf, inputs: RuntimeInputs | None) -> None:
    if inputs is None:
        return

    if inputs.debug is not None:
        settings.set(RUNTIME_DEBUG_KEY, inputs.debug)


def _apply_logging_inputs(settings: Dynaconf, inputs: LoggingInputs | None) -> None:
    if inputs is None:
        return

    if inputs.level is not None:
        settings.set(LOGGING_LEVEL_KEY, inputs.level.strip())
    if inputs.format is not None:
        settings.set(LOGGING_FORMAT_KEY, inputs.format.strip())
    if inputs.file_path is not None:
        settings.set(LOGGING_FILE_KEY, inputs.file_path.strip())
    if inputs.max_bytes is not None:
        settings.set(LOGGING_MAX_BYTES_KEY, inputs.max_bytes)
    if inputs.backup_count is not None:
        settings.set(LOGGING_BACKUP_COUNT_KEY, inputs.backup_count)


def load_settings(config_path: str | None = None) -> Dynaconf:
    """Create a Dynaconf instance configured for the supplied path."""

    settings = Dynaconf(
        settings_files=_default_settings_files(config_path),
        envvar_prefix=ENVVAR_PREFIX,
        environments=False,
        load_dotenv=True,
        merge_enabled=True,
    )
    _apply_environment_overrides(settings)
    return settings


def apply_cli_overrides(
    settings: Dynaconf,
    *,
    directory_inputs: DirectoryInputs | None = None,
    alerting_inputs: AlertingInputs | None = None,
    runtime_inputs: RuntimeInputs | None = None,
    logging_inputs: LoggingInputs | None = None,
) -> None:
    """Apply CLI overrides to the provided settings instance."""

    _apply_directory_inputs(settings, directory_inputs)
    _apply_alerting_inputs(settings, alerting_inputs)
    _apply_runtime_inputs(settings, runtime_inputs)
    _apply_logging_inputs(settings, logging_inputs)


def _resolve_threshold(settings: Dynaconf, key: str, default: int) -> int:
    raw = settings.get(key)
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return default
    try:
        return coerce_int(raw)
    except ValueError as exc:
        name = key.split(".")[-1]
        raise ConfigurationError(f"{name} threshold must be an integer, got {raw!r}") from exc


def _resolve_timeout(settings: Dynaconf, warnings: list[str]) -> float | None:
    raw = settings.get(DIRECTORY_TIMEOUT_KEY)
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        warnings.append(f"Invalid timeout {raw!r}; queries will wait indefinitely")
        return None
    if value <= 0:
        return None
    return value


def _resolve_password_file(settings: Dynaconf) -> str | None:
    password_file = _coerce_str(settings.get(DIRECTORY_PASSWORD_FILE_KEY))
    if password_file is None:
        return None
    path = Path(password_file).expanduser()
    if not path.is_file():
        raise ConfigurationError(f"Password file not found: {password_file}")
    return str(path)


def runtime_from_settings(settings: Dynaconf) -> RuntimeSettings:
    """Extract runtime settings and validation messages from Dynaconf."""

    warnings: list[str] = []

    servers = split_server_names(settings.get(DIRECTORY_SERVERS_KEY))
    if not servers:
        raise ConfigurationError("No servers configured (use --hosts or IPACHECK_SERVERS)")

    domain = _coerce_str(settings.get(DIRECTORY_DOMAIN_KEY))
    if not domain:
        raise ConfigurationError("No domain configured (use --domain or IPACHECK_DOMAIN)")
    domain = domain.strip(".").lower()

    suffix = _coerce_str(settings.get(DIRECTORY_SUFFIX_KEY)) or domain_to_suffix(domain)
    binddn = _coerce_str(settings.get(DIRECTORY_BINDDN_KEY)) or DEFAULT_BINDDN

    password = settings.get(DIRECTORY_PASSWORD_KEY)
    password = password if isinstance(password, str) and password else None
    password_file = _resolve_password_file(settings)
    if password is not None and password_file is not None:
        warnings.append("Both password and password_file supplied; using password_file")
        password = None

    warning = _resolve_threshold(settings, ALERTING_WARNING_KEY, DEFAULT_WARNING_THRESHOLD)
    critical = _resolve_threshold(settings, ALERTING_CRITICAL_KEY, DEFAULT_CRITICAL_THRESHOLD)
    validate_thresholds(warning, critical, total=CONTRIBUTING_CHECKS)

    return RuntimeSettings(
        servers=servers,
        domain=domain,
        suffix=suffix,
        binddn=binddn,
        password=password,
        password_file=password_file,
        starttls=coerce_bool(settings.get(DIRECTORY_STARTTLS_KEY), default=True),
        timeout=_resolve_timeout(settings, warnings),
        warning=warning,
        critical=critical,
        nagios=coerce_bool(settings.get(ALERTING_NAGIOS_KEY), default=False),
        debug=coerce_bool(settings.get(RUNTIME_DEBUG_KEY), default=False),
        warnings=tuple(warnings),
    )


def logging_from_settings(settings: Dynaconf) -> LoggingSettings:
    """Extract logging configuration from Dynaconf."""

    level_value = _coerce_str(settings.get(LOGGING_LEVEL_KEY)) or DEFAULT_LOG_LEVEL
    format_value = (_coerce_str(settings.get(LOGGING_FORMAT_KEY)) or DEFAULT_LOG_FORMAT).lower()
    if format_value not in {LOG_FORMAT_TEXT, LOG_FORMAT_JSON}:
        raise ConfigurationError(f"Unsupported log format: {format_value}")

    file_path = _coerce_str(settings.get(LOGGING_FILE_KEY))
    if is_logfile_disabled_value(file_path):
        file_path = None

    max_bytes_value = _coerce_optional_int(settings.get(LOGGING_MAX_BYTES_KEY))
    if max_bytes_value is None or max_bytes_value <= 0:
        max_bytes_value = DEFAULT_MAX_BYTES

    backup_count_value = _coerce_optional_int(settings.get(LOGGING_BACKUP_COUNT_KEY))
    if backup_count_value is None or backup_count_value <= 0:
        backup_count_value = DEFAULT_BACKUP_COUNT

    mapping = logging.getLevelNamesMapping()
    level_upper = level_value.upper()
    if level_upper.isdecimal():
        resolved_level = int(level_upper)
    else:
        resolved_level = mapping.get(level_upper, logging.WARNING)

    return LoggingSettings(
        level=resolved_level,
        format=format_value,
        file_path=file_path,
        max_bytes=max_bytes_value,
        backup_count=backup_count_value,
    )


__all__ = [
    "AlertingInputs",
    "DEFAULT_BACKUP_COUNT",
    "DEFAULT_LOG_FORMAT",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_MAX_BYTES",
    "DirectoryInputs",
    "LOG_FORMAT_JSON",
    "LOG_FORMAT_TEXT",
    "LoggingInputs",
    "LoggingSettings",
    "RuntimeInputs",
    "RuntimeSettings",
    "apply_cli_overrides",
    "domain_to_suffix",
    "is_logfile_disabled_value",
    "load_settings",
    "logging_from_settings",
    "runtime_from_settings",
    "split_server_names",
]
