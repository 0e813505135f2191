"""Domain layer: check catalogue, value types, verdict and severity rules."""

from ipacheck.domain.alerting import AlertDecision, decide, validate_thresholds
from ipacheck.domain.checks import CHECKS, CHECKS_BY_NAME, CONTRIBUTING_CHECKS, Check
from ipacheck.domain.evaluator import evaluate
from ipacheck.domain.models import (
    ERROR,
    AuditReport,
    CheckOutcome,
    ReplicationRecord,
    Scope,
    Server,
    Severity,
    Verdict,
    build_servers,
)

__all__ = [
    "AlertDecision",
    "AuditReport",
    "CHECKS",
    "CHECKS_BY_NAME",
    "CONTRIBUTING_CHECKS",
    "Check",
    "CheckOutcome",
    "ERROR",
    "ReplicationRecord",
    "Scope",
    "Server",
    "Severity",
    "Verdict",
    "build_servers",
    "decide",
    "evaluate",
    "validate_thresholds",
]
