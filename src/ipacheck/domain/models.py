"""Value types shared by the check engine, the renderer and the alerting layer."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Final, Union

from ipacheck.infrastructure.errors import ConfigurationError

if TYPE_CHECKING:
    from ipacheck.domain.checks import Check


class Scope(str, Enum):
    BASE = "base"
    ONE = "one"
    SUB = "sub"


class Verdict(str, Enum):
    OK = "OK"
    FAIL = "FAIL"


class Severity(str, Enum):
    OK = "OK"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"
    UNKNOWN = "UNKNOWN"

    @property
    def exit_code(self) -> int:
        return _SEVERITY_EXIT_CODES[self]


_SEVERITY_EXIT_CODES: Final[dict[Severity, int]] = {
    Severity.OK: 0,
    Severity.WARNING: 1,
    Severity.CRITICAL: 2,
    Severity.UNKNOWN: 3,
}


class _QueryErrorMarker:
    """Stands in for the value of a server whose query failed."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "ERROR"

    __str__ = __repr__

    def __reduce__(self) -> str:
        return "ERROR"


ERROR: Final = _QueryErrorMarker()


@dataclass(frozen=True, order=True)
class ReplicationRecord:
    peer: str
    status: str

    def __str__(self) -> str:
        return f"{self.peer} {self.status}".strip()


ComparableUnit = Union[int, str, tuple[ReplicationRecord, ...], _QueryErrorMarker]
Entry = dict[str, list[str]]


@dataclass(frozen=True)
class Server:
    fqdn: str

    @classmethod
    def from_name(cls, name: str, domain: str) -> Server:
        """Build a server, appending *domain* to names without a dot."""

        candidate = name.strip().rstrip(".").lower()
        if not candidate:
            raise ConfigurationError(f"Invalid server name: {name!r}")
        if "." not in candidate:
            candidate = f"{candidate}.{domain.strip('.').lower()}"
        return cls(fqdn=candidate)

    @property
    def short_name(self) -> str:
        return self.fqdn.split(".", 1)[0]

    def __str__(self) -> str:
        return self.fqdn


def build_servers(names: Iterable[str], domain: str) -> tuple[Server, ...]:
    """Expand *names* into servers, keeping input order and dropping duplicates."""

    seen: set[Server] = set()
    servers: list[Server] = []
    for name in names:
        server = Server.from_name(name, domain)
        if server in seen:
            continue
        seen.add(server)
        servers.append(server)
    return tuple(servers)


@dataclass(frozen=True)
class CheckOutcome:
    check: Check
    values: Mapping[Server, ComparableUnit]
    verdict: Verdict | None
    rows: tuple[str, ...]

    @property
    def contributes(self) -> bool:
        return self.verdict is not None

    @property
    def passed(self) -> bool:
        return self.verdict is Verdict.OK


@dataclass(frozen=True)
class AuditReport:
    servers: tuple[Server, ...]
    outcomes: tuple[CheckOutcome, ...]

    @property
    def total(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.contributes)

    @property
    def passed(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.passed)

    @property
    def failed(self) -> int:
        return self.total - self.passed

    def outcome(self, name: str) -> CheckOutcome:
        for outcome in self.outcomes:
            if outcome.check.name == name:
                return outcome
        raise KeyError(name)


__all__ = [
    "AuditReport",
    "CheckOutcome",
    "ComparableUnit",
    "Entry",
    "ERROR",
    "ReplicationRecord",
    "Scope",
    "Server",
    "Severity",
    "Verdict",
    "build_servers",
]
