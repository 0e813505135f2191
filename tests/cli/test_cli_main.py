from __future__ import annotations

import importlib
from types import SimpleNamespace

import pytest

from ipacheck.cli.main import route_arguments


def test_route_defaults_to_check() -> None:
    assert route_arguments([]) == ["check"]
    assert route_arguments(["-H", "ipa01", "-d", "example.com"]) == [
        "check",
        "-H",
        "ipa01",
        "-d",
        "example.com",
    ]


def test_route_keeps_explicit_subcommands() -> None:
    assert route_arguments(["version"]) == ["version"]
    assert route_arguments(["check", "-n"]) == ["check", "-n"]


def test_route_passes_help_through() -> None:
    assert route_arguments(["--help"]) == ["--help"]
    assert route_arguments(["-h"]) == ["-h"]


def test_main_invokes_command_with_routed_args(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[dict] = []

    def fake_main(*, args: list[str], prog_name: str) -> None:  # click.Command.main signature
        calls.append({"args": args, "prog": prog_name})

    fake_get_command = lambda app: SimpleNamespace(main=fake_main)  # noqa: E731

    mod = importlib.import_module("ipacheck.cli.main")
    monkeypatch.setattr(mod, "get_command", fake_get_command)

    mod.main(["-n", "-H", "ipa01"])

    assert calls == [{"args": ["check", "-n", "-H", "ipa01"], "prog": "ipacheck"}]
