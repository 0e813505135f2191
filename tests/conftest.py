from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

import pytest

from ipacheck.config.settings import LOG_FORMAT_TEXT, LoggingSettings
from ipacheck.domain.models import Entry, Scope, Server
from ipacheck.infrastructure.errors import ErrorCode, QueryError
from ipacheck.infrastructure.logging import configure_logging


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("ipacheck")
    group.addoption(
        "--offline",
        action="store_true",
        dest="ipacheck_offline",
        help="Run offline tests only (deselect tests marked 'online').",
    )
    group.addoption(
        "--online-only",
        action="store_true",
        dest="ipacheck_online_only",
        help="Run only tests marked 'online' (deselect offline).",
    )


def _is_integration_path(s: str) -> bool:
    s = s.replace("\\", "/")
    return s.startswith("tests/integration/") or "/tests/integration/" in s


def _mark_by_path(items: list[pytest.Item]) -> None:
    for item in items:
        node_str = str(getattr(item, "fspath", item.nodeid))
        marker = pytest.mark.online if _is_integration_path(node_str) else pytest.mark.offline
        item.add_marker(marker)


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    _mark_by_path(items)

    offline_only = bool(config.getoption("ipacheck_offline"))
    online_only = bool(config.getoption("ipacheck_online_only"))

    if offline_only and online_only:
        raise pytest.UsageError("--offline and --online-only are mutually exclusive")

    deselect: list[pytest.Item] = []
    if online_only:
        deselect = [i for i in items if "online" not in i.keywords]
    elif offline_only:
        deselect = [i for i in items if "online" in i.keywords]

    if not deselect:
        return

    config.hook.pytest_deselected(items=deselect)
    items[:] = [i for i in items if i not in deselect]


class FakeDirectoryClient:
    """In-memory directory keyed by (server short name, base DN)."""

    def __init__(
        self,
        responses: Mapping[tuple[str, str], Any] | None = None,
        *,
        default: Any = (),
        bind_failures: Mapping[str, str | QueryError] | None = None,
    ) -> None:
        self._responses = dict(responses or {})
        self._default = default
        self._bind_failures = dict(bind_failures or {})
        self.calls: list[tuple[str, str, str, tuple[str, ...], Scope]] = []
        self.bind_calls: list[str] = []

    async def search(
        self,
        server: Server,
        base: str,
        search_filter: str,
        attributes: Sequence[str],
        scope: Scope,
    ) -> list[Entry]:
        self.calls.append((server.short_name, base, search_filter, tuple(attributes), scope))
        response = self._responses.get((server.short_name, base), self._default)
        if isinstance(response, Exception):
            raise response
        return [dict(entry) for entry in response]

    async def verify_bind(self, server: Server) -> None:
        self.bind_calls.append(server.short_name)
        problem = self._bind_failures.get(server.short_name)
        if isinstance(problem, QueryError):
            raise problem
        if problem is not None:
            raise QueryError(server.fqdn, problem, returncode=49, code=ErrorCode.CREDENTIALS)


def subordinates(count: int) -> list[Entry]:
    return [{"numsubordinates": [str(count)]}]


@pytest.fixture
def servers() -> tuple[Server, ...]:
    return (
        Server("ipa01.example.com"),
        Server("ipa02.example.com"),
        Server("ipa03.example.com"),
    )


@pytest.fixture
def quiet_logging() -> None:
    configure_logging(
        LoggingSettings(
            level=logging.WARNING,
            format=LOG_FORMAT_TEXT,
            file_path=None,
            max_bytes=1024,
            backup_count=1,
        )
    )


@pytest.fixture
def make_client() -> type[FakeDirectoryClient]:
    return FakeDirectoryClient
