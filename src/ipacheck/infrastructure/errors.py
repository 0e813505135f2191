"""Error taxonomy shared by the ipacheck layers.

Only :class:`ConfigurationError` and :class:`CredentialError` end a run.
:class:`QueryError` is always recovered by the check runner and turned into
the ``ERROR`` sentinel for the affected server.
"""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    CONFIGURATION = "IPACHECK_CONFIGURATION"
    CREDENTIALS = "IPACHECK_CREDENTIALS"
    QUERY_FAILED = "IPACHECK_QUERY_FAILED"
    QUERY_TIMEOUT = "IPACHECK_QUERY_TIMEOUT"
    INTERNAL = "IPACHECK_INTERNAL"


EXIT_CONFIGURATION = 1
EXIT_CREDENTIALS = 4


class IpaCheckError(Exception):
    """Base class for errors raised by ipacheck."""

    code: ErrorCode = ErrorCode.INTERNAL
    exit_code: int = 1

    def __init__(self, message: str, *, code: ErrorCode | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def __str__(self) -> str:
        return self.message


class ConfigurationError(IpaCheckError):
    """Missing or invalid input detected before any query runs."""

    code = ErrorCode.CONFIGURATION
    exit_code = EXIT_CONFIGURATION


class CredentialError(IpaCheckError):
    """The bind probe failed against every configured server."""

    code = ErrorCode.CREDENTIALS
    exit_code = EXIT_CREDENTIALS

    def __init__(self, message: str, *, failures: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.failures = dict(failures or {})


class QueryError(IpaCheckError):
    """A single directory query against a single server failed."""

    code = ErrorCode.QUERY_FAILED

    def __init__(
        self,
        server: str,
        message: str,
        *,
        returncode: int | None = None,
        code: ErrorCode | None = None,
    ) -> None:
        super().__init__(f"{server}: {message}", code=code)
        self.server = server
        self.returncode = returncode
        self.detail = message


__all__ = [
    "ConfigurationError",
    "CredentialError",
    "EXIT_CONFIGURATION",
    "EXIT_CREDENTIALS",
    "ErrorCode",
    "IpaCheckError",
    "QueryError",
]
