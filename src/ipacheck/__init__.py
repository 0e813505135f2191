"""Consistency auditing for FreeIPA / 389 Directory Server replicas."""

from ipacheck.application.audit import AuditResult, run_audit
from ipacheck.domain import CHECKS, AuditReport, Severity, Verdict

__all__ = [
    "AuditReport",
    "AuditResult",
    "CHECKS",
    "Severity",
    "Verdict",
    "run_audit",
]
