"""Directory access through python-ldap.

The check engine only depends on :class:`DirectoryClient`; the concrete
:class:`LdapClient` opens one bound connection per query and hands the decoded
entries back to the per-check normalizers. python-ldap is blocking, so every
connection runs in a worker thread via :func:`asyncio.to_thread`.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from contextlib import suppress
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final, Protocol, TypeVar

import ldap

from ipacheck.domain.models import Entry, Scope, Server
from ipacheck.infrastructure.errors import ConfigurationError, ErrorCode, QueryError
from ipacheck.infrastructure.logging import BoundLogger, get_logger

ROOT_DSE_ATTRIBUTE: Final = "namingContexts"

_SCOPES: Final[dict[Scope, int]] = {
    Scope.BASE: ldap.SCOPE_BASE,
    Scope.ONE: ldap.SCOPE_ONELEVEL,
    Scope.SUB: ldap.SCOPE_SUBTREE,
}

_CREDENTIAL_ERRORS: Final = (
    ldap.INVALID_CREDENTIALS,
    ldap.INAPPROPRIATE_AUTH,
    ldap.STRONG_AUTH_REQUIRED,
    ldap.CONFIDENTIALITY_REQUIRED,
)
_LOCAL_ERRORS: Final = (ldap.PARAM_ERROR, ldap.FILTER_ERROR)

T = TypeVar("T")


class DirectoryClient(Protocol):
    async def search(
        self,
        server: Server,
        base: str,
        search_filter: str,
        attributes: Sequence[str],
        scope: Scope,
    ) -> list[Entry]: ...

    async def verify_bind(self, server: Server) -> None: ...


@dataclass(frozen=True)
class BindCredentials:
    binddn: str
    password_file: str

    def read_password(self) -> str:
        try:
            return Path(self.password_file).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigurationError(
                f"Unable to read bind password from {self.password_file}: {exc}"
            ) from exc


def decode_entry(attributes: dict[str, list[bytes]]) -> Entry:
    """Decode raw attribute values and lower-case the attribute names."""

    entry: Entry = {}
    for name, values in attributes.items():
        entry.setdefault(name.lower(), []).extend(
            value.decode("utf-8", errors="replace") if isinstance(value, bytes) else str(value)
            for value in values
        )
    return entry


def describe_error(exc: ldap.LDAPError) -> tuple[str, int | None]:
    """Return a readable message and the LDAP result code of *exc*."""

    info: dict[str, Any] = {}
    if exc.args and isinstance(exc.args[0], dict):
        info = exc.args[0]
    message = str(info.get("desc") or type(exc).__name__)
    extra = info.get("info")
    if extra:
        message = f"{message}: {extra}"
    result = info.get("result")
    return message, result if isinstance(result, int) else None


def _error_code(exc: ldap.LDAPError) -> ErrorCode:
    if isinstance(exc, ldap.TIMEOUT):
        return ErrorCode.QUERY_TIMEOUT
    if isinstance(exc, _CREDENTIAL_ERRORS):
        return ErrorCode.CREDENTIALS
    if isinstance(exc, _LOCAL_ERRORS):
        return ErrorCode.CONFIGURATION
    return ErrorCode.QUERY_FAILED


class LdapClient:
    """Bind and search with python-ldap, one connection per call."""

    def __init__(
        self,
        credentials: BindCredentials,
        *,
        starttls: bool = True,
        timeout: float | None = None,
        logger: BoundLogger | None = None,
    ) -> None:
        self._binddn = credentials.binddn
        self._password = credentials.read_password()
        self._starttls = starttls
        self._timeout = timeout
        self._logger = logger or get_logger("ipacheck.ldap")

    @staticmethod
    def uri(server: Server) -> str:
        return f"ldap://{server.fqdn}"

    async def search(
        self,
        server: Server,
        base: str,
        search_filter: str,
        attributes: Sequence[str],
        scope: Scope,
    ) -> list[Entry]:
        self._logger.debug(
            "ldap.search",
            server=server.fqdn,
            base=base,
            scope=Scope(scope).value,
            attributes=list(attributes),
        )
        try:
            return await asyncio.to_thread(
                self._with_connection,
                server,
                lambda conn: self._search(conn, base, search_filter, attributes, scope),
            )
        except ldap.NO_SUCH_OBJECT:
            self._logger.debug("ldap.search.no_such_object", server=server.fqdn, base=base)
            return []
        except ldap.LDAPError as exc:
            raise self._query_error(server, exc) from exc

    async def verify_bind(self, server: Server) -> None:
        """Bind and read the root DSE; raise :class:`QueryError` on failure."""

        try:
            await asyncio.to_thread(
                self._with_connection,
                server,
                lambda conn: self._search(
                    conn, "", "(objectClass=*)", (ROOT_DSE_ATTRIBUTE,), Scope.BASE
                ),
            )
        except ldap.LDAPError as exc:
            raise self._query_error(server, exc) from exc

    def _with_connection(self, server: Server, operation: Callable[[Any], T]) -> T:
        conn = ldap.initialize(self.uri(server))
        try:
            conn.protocol_version = ldap.VERSION3
            conn.set_option(ldap.OPT_REFERRALS, 0)
            if self._timeout is not None:
                conn.set_option(ldap.OPT_NETWORK_TIMEOUT, self._timeout)
                conn.timeout = self._timeout
            if self._starttls:
                conn.start_tls_s()
            conn.simple_bind_s(self._binddn, self._password)
            return operation(conn)
        finally:
            with suppress(ldap.LDAPError):
                conn.unbind_s()

    def _search(
        self,
        conn: Any,
        base: str,
        search_filter: str,
        attributes: Sequence[str],
        scope: Scope,
    ) -> list[Entry]:
        results = conn.search_ext_s(
            base,
            _SCOPES[Scope(scope)],
            search_filter,
            list(attributes) or None,
            timeout=self._timeout if self._timeout is not None else -1,
        )
        # referral continuations carry no dn
        return [decode_entry(attrs) for dn, attrs in results if dn is not None]

    def _query_error(self, server: Server, exc: ldap.LDAPError) -> QueryError:
        message, result = describe_error(exc)
        code = _error_code(exc)
        self._logger.debug(
            "ldap.failed",
            server=server.fqdn,
            error=message,
            result=result,
            code=code.value,
        )
        return QueryError(server.fqdn, message, returncode=result, code=code)


__all__ = [
    "BindCredentials",
    "DirectoryClient",
    "LdapClient",
    "ROOT_DSE_ATTRIBUTE",
    "decode_entry",
    "describe_error",
]
