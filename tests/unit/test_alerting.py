from __future__ import annotations

import pytest

from ipacheck.domain.alerting import AlertDecision, decide, validate_thresholds
from ipacheck.domain.models import Severity
from ipacheck.infrastructure.errors import ConfigurationError


def test_all_checks_passed_is_ok() -> None:
    assert decide(0, 1, 2, total=11) == AlertDecision(Severity.OK, 0)


def test_three_failures_over_critical() -> None:
    decision = decide(3, 1, 2, total=11)
    assert decision.severity is Severity.CRITICAL
    assert decision.exit_code == 2


def test_failures_between_thresholds_warn() -> None:
    decision = decide(2, 1, 3, total=11)
    assert decision.severity is Severity.WARNING
    assert decision.exit_code == 1


def test_equal_thresholds_skip_warning() -> None:
    assert decide(2, 2, 2, total=11).severity is Severity.CRITICAL
    assert decide(1, 2, 2, total=11).severity is Severity.OK


def test_zero_warning_threshold_warns_on_clean_run() -> None:
    assert decide(0, 0, 1, total=11).severity is Severity.WARNING


def test_negative_failed_count_is_unknown() -> None:
    decision = decide(-1, 1, 2, total=11)
    assert decision.severity is Severity.UNKNOWN
    assert decision.exit_code == 3


@pytest.mark.parametrize(
    ("warning", "critical"),
    [(-1, 2), (3, 2), (1, 12), ("1", 2), (1, 2.5), (True, 2)],
)
def test_invalid_thresholds_rejected(warning: object, critical: object) -> None:
    with pytest.raises(ConfigurationError):
        validate_thresholds(warning, critical, total=11)


def test_decide_validates_before_deciding() -> None:
    with pytest.raises(ConfigurationError):
        decide(0, 5, 4, total=11)
