"""Concurrent execution of the check catalogue against every server.

Two fan-out levels: :class:`ChecklistScheduler` starts one task per check and
each :class:`CheckRunner` starts one task per server. Every task returns its
own result and is joined before the result is read, so no state is shared.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from ipacheck.application.report import ColumnWidths, render_check_rows
from ipacheck.domain.checks import CHECKS, Check
from ipacheck.domain.evaluator import evaluate
from ipacheck.domain.models import ERROR, AuditReport, CheckOutcome, ComparableUnit, Server
from ipacheck.infrastructure.errors import IpaCheckError, QueryError
from ipacheck.infrastructure.logging import BoundLogger, get_logger, log_check_event
from ipacheck.integrations.ldap.client import DirectoryClient


class CheckRunner:
    def __init__(
        self,
        client: DirectoryClient,
        *,
        suffix: str,
        widths: ColumnWidths,
        logger: BoundLogger | None = None,
    ) -> None:
        self._client = client
        self._suffix = suffix
        self._widths = widths
        self._logger = logger or get_logger("ipacheck.runner")

    async def query(self, check: Check, server: Server) -> ComparableUnit:
        """Query one server and normalize its answer, or return ``ERROR``."""

        try:
            entries = await self._client.search(
                server,
                check.base_dn(self._suffix),
                check.search_filter,
                check.attributes,
                check.scope,
            )
        except QueryError as exc:
            log_check_event(
                self._logger,
                "query_failed",
                check=check.name,
                server=server.fqdn,
                level=logging.WARNING,
                error=exc.detail,
                returncode=exc.returncode,
            )
            return ERROR
        unit = check.normalize(entries)
        log_check_event(self._logger, "query_done", check=check.name, server=server.fqdn)
        return unit

    async def run(self, check: Check, servers: Sequence[Server]) -> CheckOutcome:
        tasks = [
            asyncio.create_task(self.query(check, server), name=f"{check.name}@{server.fqdn}")
            for server in servers
        ]
        units = await asyncio.gather(*tasks)

        values = dict(zip(servers, units))
        if len(values) != len(servers) or len(units) != len(servers):
            raise IpaCheckError(
                f"check {check.name} returned {len(values)} results for {len(servers)} servers"
            )

        verdict = (
            evaluate(values, reference_value=check.reference_value)
            if check.contributes
            else None
        )
        log_check_event(
            self._logger,
            "evaluated",
            check=check.name,
            verdict=verdict.value if verdict is not None else None,
        )
        return CheckOutcome(
            check=check,
            values=values,
            verdict=verdict,
            rows=render_check_rows(check, values, verdict, self._widths),
        )


class ChecklistScheduler:
    def __init__(self, runner: CheckRunner, checks: Sequence[Check] = CHECKS) -> None:
        names = [check.name for check in checks]
        if len(set(names)) != len(names):
            raise ValueError("check names must be unique")
        self._runner = runner
        self._checks = tuple(checks)

    @property
    def checks(self) -> tuple[Check, ...]:
        return self._checks

    async def run_all(self, servers: Sequence[Server]) -> AuditReport:
        ordered = tuple(servers)
        tasks = {
            check.name: asyncio.create_task(self._runner.run(check, ordered), name=check.name)
            for check in self._checks
        }
        await asyncio.gather(*tasks.values())
        # declaration order, not completion order
        outcomes = tuple(tasks[check.name].result() for check in self._checks)
        return AuditReport(servers=ordered, outcomes=outcomes)


__all__ = ["CheckRunner", "ChecklistScheduler"]
