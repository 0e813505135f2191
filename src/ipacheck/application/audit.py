"""End-to-end audit: credentials, bind probe, checks, rendering, verdict."""

from __future__ import annotations

import asyncio
import os
import signal
import tempfile
import threading
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from ipacheck.application.report import (
    ColumnWidths,
    column_widths,
    render_human,
    render_machine,
)
from ipacheck.application.runner import CheckRunner, ChecklistScheduler
from ipacheck.config.settings import RuntimeSettings
from ipacheck.domain.alerting import AlertDecision, decide
from ipacheck.domain.checks import CHECKS, CONTRIBUTING_CHECKS
from ipacheck.domain.models import AuditReport, Server, build_servers
from ipacheck.infrastructure.errors import (
    ConfigurationError,
    CredentialError,
    ErrorCode,
    QueryError,
)
from ipacheck.infrastructure.logging import BoundLogger, get_logger, log_event
from ipacheck.integrations.ldap.client import (
    BindCredentials,
    DirectoryClient,
    LdapClient,
)

ClientFactory = Callable[[RuntimeSettings, BindCredentials], DirectoryClient]

WORKDIR_PREFIX = "ipacheck-"
PASSWORD_FILENAME = "bindpw"
TERMINATING_SIGNALS = ("SIGTERM", "SIGHUP")


@dataclass(frozen=True)
class AuditResult:
    report: AuditReport
    widths: ColumnWidths
    decision: AlertDecision | None
    output: str
    exit_code: int


def default_client_factory(
    runtime_settings: RuntimeSettings, credentials: BindCredentials
) -> DirectoryClient:
    return LdapClient(
        credentials,
        starttls=runtime_settings.starttls,
        timeout=runtime_settings.timeout,
    )


def _exit_on_signal(signum: int, frame: object) -> None:
    raise SystemExit(128 + signum)


@contextmanager
def exit_on_termination() -> Iterator[None]:
    """Turn SIGTERM and SIGHUP into ``SystemExit`` so ``finally`` blocks run.

    Handlers can only be installed from the main thread; elsewhere this is a
    no-op. Previous handlers are restored on exit.
    """

    if threading.current_thread() is not threading.main_thread():
        yield
        return
    previous: dict[int, object] = {}
    for name in TERMINATING_SIGNALS:
        signum = getattr(signal, name, None)
        if signum is None:
            continue
        previous[signum] = signal.signal(signum, _exit_on_signal)
    try:
        yield
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler if handler is not None else signal.SIG_DFL)


def read_password_file(path: str) -> str:
    """Read a bind password, dropping the single trailing newline editors add."""

    try:
        secret = Path(path).expanduser().read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigurationError(f"Unable to read password file {path}: {exc}") from exc
    if secret.endswith("\r\n"):
        return secret[:-2]
    if secret.endswith("\n"):
        return secret[:-1]
    return secret


@contextmanager
def scoped_workdir(
    *, password: str | None = None, password_file: str | None = None
) -> Iterator[tuple[Path, str]]:
    """Yield a private work directory and the password file to bind with.

    The secret, inline or read from *password_file*, is written inside the
    directory with mode 0600. The directory is removed on every exit path,
    including termination by SIGTERM or SIGHUP.
    """

    if password_file is None and password is None:
        raise ConfigurationError("A bind password or password file is required")
    secret = read_password_file(password_file) if password_file is not None else password
    with exit_on_termination(), tempfile.TemporaryDirectory(prefix=WORKDIR_PREFIX) as workdir:
        root = Path(workdir)
        target = root / PASSWORD_FILENAME
        descriptor = os.open(target, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
        with os.fdopen(descriptor, "w", encoding="utf-8") as handle:
            handle.write(secret or "")
        yield root, str(target)


async def verify_credentials(
    client: DirectoryClient,
    servers: Sequence[Server],
    logger: BoundLogger,
) -> tuple[Server, ...]:
    """Probe a bind on every server; fail only when none accepts it.

    A failure caused by local setup rather than by the server ends the run as
    a configuration error whatever the other servers answered.
    """

    async def _probe(server: Server) -> QueryError | None:
        try:
            await client.verify_bind(server)
        except QueryError as exc:
            return exc
        return None

    tasks = [asyncio.create_task(_probe(server)) for server in servers]
    problems = await asyncio.gather(*tasks)

    failures = {
        server.fqdn: problem
        for server, problem in zip(servers, problems)
        if problem is not None
    }
    for fqdn, problem in failures.items():
        logger.warning("bind.failed", server=fqdn, error=problem.detail, code=problem.code.value)

    local = [problem for problem in failures.values() if problem.code is ErrorCode.CONFIGURATION]
    if local:
        raise ConfigurationError(f"Unable to query {local[0]}")
    if servers and len(failures) == len(servers):
        details = {fqdn: problem.detail for fqdn, problem in failures.items()}
        rejected = any(p.code is ErrorCode.CREDENTIALS for p in failures.values())
        prefix = "Unable to bind to any server" if rejected else "Unable to reach any server"
        raise CredentialError(
            prefix + ": " + "; ".join(f"{k}: {v}" for k, v in details.items()),
            failures=details,
        )
    return tuple(server for server in servers if server.fqdn not in failures)


async def run_audit(
    runtime_settings: RuntimeSettings,
    *,
    password_file: str,
    client_factory: ClientFactory = default_client_factory,
    logger: BoundLogger | None = None,
) -> AuditResult:
    logger = logger or get_logger("ipacheck.audit")
    servers = build_servers(runtime_settings.servers, runtime_settings.domain)
    widths = column_widths(servers)
    client = client_factory(
        runtime_settings,
        BindCredentials(binddn=runtime_settings.binddn, password_file=password_file),
    )

    log_event(
        logger,
        "audit.start",
        servers=[server.fqdn for server in servers],
        suffix=runtime_settings.suffix,
        checks=len(CHECKS),
    )
    await verify_credentials(client, servers, logger)

    runner = CheckRunner(client, suffix=runtime_settings.suffix, widths=widths, logger=logger)
    report = await ChecklistScheduler(runner, CHECKS).run_all(servers)

    log_event(
        logger,
        "audit.done",
        passed=report.passed,
        total=report.total,
    )

    if not runtime_settings.nagios:
        return AuditResult(
            report=report,
            widths=widths,
            decision=None,
            output=render_human(report, widths),
            exit_code=0,
        )

    decision = decide(
        report.failed,
        runtime_settings.warning,
        runtime_settings.critical,
        total=CONTRIBUTING_CHECKS,
    )
    return AuditResult(
        report=report,
        widths=widths,
        decision=decision,
        output=render_machine(report, decision.severity),
        exit_code=decision.exit_code,
    )


__all__ = [
    "AuditResult",
    "ClientFactory",
    "default_client_factory",
    "exit_on_termination",
    "read_password_file",
    "run_audit",
    "scoped_workdir",
    "verify_credentials",
]
