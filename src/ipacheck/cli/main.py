"""CLI entry point.

Arguments that do not name a subcommand are routed to ``check`` so that
``ipacheck -H ipa01,ipa02 -d example.com`` works without spelling it out.
"""

from __future__ import annotations

import sys

from typer.main import get_command

from ipacheck.cli.app import app

PROG_NAME = "ipacheck"
DEFAULT_COMMAND = "check"
SUBCOMMANDS = frozenset({"check", "version"})
TOP_LEVEL_HELP = frozenset({"-h", "--help"})


def route_arguments(argv: list[str]) -> list[str]:
    if argv and (argv[0] in SUBCOMMANDS or argv[0] in TOP_LEVEL_HELP):
        return argv
    return [DEFAULT_COMMAND, *argv]


def main(argv: list[str] | None = None) -> None:
    """Run the Typer application.

    Parameters
    ----------
    argv:
        Optional list of arguments. When ``None`` the process arguments are
        used.
    """

    args = list(sys.argv[1:] if argv is None else argv)
    command = get_command(app)
    command.main(args=route_arguments(args), prog_name=PROG_NAME)


if __name__ == "__main__":
    main()


__all__ = ["main", "route_arguments"]
