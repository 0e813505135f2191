"""Reusable helper utilities for the ipacheck CLI."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import replace
from pathlib import Path

from ipacheck.cli import options as cli_options
from ipacheck.cli.models import CliInvocation
from ipacheck.config.settings import (
    AlertingInputs,
    DirectoryInputs,
    LoggingInputs,
    LoggingSettings,
    RuntimeInputs,
    RuntimeSettings,
    apply_cli_overrides,
    load_settings,
    logging_from_settings,
    runtime_from_settings,
    split_server_names,
)
from ipacheck.infrastructure.logging import (
    BoundLogger,
    attach_run_context,
    configure_logging,
    get_logger,
)

PROJECT_ROOT = Path(__file__).resolve().parents[3]
DISTRIBUTION_NAME = "ipacheck"


def resolve_version() -> str:
    """Return the installed version, falling back to ``pyproject.toml``."""

    from importlib import metadata

    try:
        return metadata.version(DISTRIBUTION_NAME)
    except metadata.PackageNotFoundError:
        pyproject = PROJECT_ROOT / "pyproject.toml"
        if not pyproject.exists():
            return "unknown"
        import tomllib

        data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
        return data.get("project", {}).get("version", "unknown")


def build_invocation(
    *,
    config_path: Path | str | None,
    hosts: Sequence[str] | None,
    domain: str | None,
    suffix: str | None,
    binddn: str | None,
    password: str | None,
    password_file: str | None,
    starttls: bool | None,
    timeout: float | None,
    nagios: bool | None,
    warning: str | None,
    critical: str | None,
    debug: bool | None,
    log_level: str | None,
    log_format: str | None,
    log_file: str | None,
) -> CliInvocation:
    """Construct a :class:`CliInvocation` with normalized CLI parameters."""

    servers = split_server_names(hosts) if hosts else None

    return CliInvocation(
        config_path=str(config_path) if config_path is not None else None,
        directory=DirectoryInputs(
            servers=servers or None,
            domain=cli_options.clean_string(domain),
            suffix=cli_options.clean_string(suffix),
            binddn=cli_options.clean_string(binddn),
            password=password if password else None,
            password_file=cli_options.clean_string(password_file),
            starttls=starttls,
            timeout=timeout,
        ),
        alerting=AlertingInputs(
            warning=cli_options.normalize_threshold("warning", warning),
            critical=cli_options.normalize_threshold("critical", critical),
            nagios=nagios,
        ),
        runtime=RuntimeInputs(debug=debug),
        logging=LoggingInputs(
            level=cli_options.normalize_log_level(log_level),
            format=cli_options.normalize_log_format(log_format),
            file_path=cli_options.clean_string(log_file),
        ),
    )


def resolve_runtime_and_logging(
    invocation: CliInvocation,
) -> tuple[RuntimeSettings, LoggingSettings]:
    """Load settings, apply CLI overrides and resolve both settings objects."""

    settings = load_settings(invocation.config_path)
    apply_cli_overrides(
        settings,
        directory_inputs=invocation.directory,
        alerting_inputs=invocation.alerting,
        runtime_inputs=invocation.runtime,
        logging_inputs=invocation.logging,
    )
    logging_settings = logging_from_settings(settings)
    runtime_settings = runtime_from_settings(settings)
    if runtime_settings.debug and logging_settings.level > logging.DEBUG:
        logging_settings = replace(logging_settings, level=logging.DEBUG)
    return runtime_settings, logging_settings


def emit_runtime_messages(runtime_settings: RuntimeSettings, logger: BoundLogger) -> None:
    """Emit runtime warning messages."""

    for message in runtime_settings.warnings:
        logger.warning(message)


def initialize_logging(
    runtime_settings: RuntimeSettings,
    logging_settings: LoggingSettings,
) -> BoundLogger:
    """Configure logging, bind a run id and emit runtime messages."""

    configure_logging(logging_settings)
    logger = attach_run_context(get_logger("ipacheck"))
    emit_runtime_messages(runtime_settings, logger)
    return logger


def resolve_password(
    runtime_settings: RuntimeSettings,
    prompt: Callable[[], str],
) -> str | None:
    """Return the inline password, prompting when no password source exists."""

    if runtime_settings.password_file is not None:
        return None
    if runtime_settings.password is not None:
        return runtime_settings.password
    return prompt()


__all__ = [
    "build_invocation",
    "emit_runtime_messages",
    "initialize_logging",
    "resolve_password",
    "resolve_runtime_and_logging",
    "resolve_version",
]
