"""Normalized CLI invocation passed from Typer commands to the helpers."""

from __future__ import annotations

from dataclasses import dataclass, field

from ipacheck.config.settings import (
    AlertingInputs,
    DirectoryInputs,
    LoggingInputs,
    RuntimeInputs,
)


@dataclass(frozen=True)
class CliInvocation:
    config_path: str | None
    directory: DirectoryInputs = field(default_factory=DirectoryInputs)
    alerting: AlertingInputs = field(default_factory=AlertingInputs)
    runtime: RuntimeInputs = field(default_factory=RuntimeInputs)
    logging: LoggingInputs = field(default_factory=LoggingInputs)


__all__ = ["CliInvocation"]
