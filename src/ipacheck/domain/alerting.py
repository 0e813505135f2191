"""Map a failed-check count onto a Nagios-style severity."""

from __future__ import annotations

from dataclasses import dataclass

from ipacheck.domain.models import Severity
from ipacheck.infrastructure.errors import ConfigurationError


@dataclass(frozen=True)
class AlertDecision:
    severity: Severity
    exit_code: int


def validate_thresholds(warning: object, critical: object, *, total: int) -> None:
    """Require integers with ``0 <= warning <= critical <= total``."""

    for name, value in (("warning", warning), ("critical", critical)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigurationError(f"{name} threshold must be an integer, got {value!r}")
    if not 0 <= warning <= critical <= total:  # type: ignore[operator]
        raise ConfigurationError(
            "Thresholds must satisfy 0 <= warning <= critical <= "
            f"{total} (got warning={warning}, critical={critical})"
        )


def decide(failed: int, warning: int, critical: int, *, total: int) -> AlertDecision:
    validate_thresholds(warning, critical, total=total)

    if 0 <= failed < warning:
        severity = Severity.OK
    elif warning <= failed < critical:
        severity = Severity.WARNING
    elif failed >= critical:
        severity = Severity.CRITICAL
    else:
        severity = Severity.UNKNOWN
    return AlertDecision(severity=severity, exit_code=severity.exit_code)


__all__ = ["AlertDecision", "decide", "validate_thresholds"]
