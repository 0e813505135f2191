"""ipacheck Typer CLI application."""

from __future__ import annotations

import typer
from rich.console import Console

from ipacheck.cli.commands import check as check_command
from ipacheck.cli.helpers import resolve_version

stderr_console = Console(stderr=True)
stdout_console = Console(stderr=False)

app = typer.Typer(
    help="Check FreeIPA / 389-DS replicas for consistent directory data",
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
    no_args_is_help=False,
)


check_command.register(
    app,
    stdout_console=stdout_console,
    stderr_console=stderr_console,
)


@app.command(help="Show the installed ipacheck version.")
def version() -> None:
    """Print the version discovered from the package metadata."""

    stdout_console.print(resolve_version(), markup=False, highlight=False)


__all__ = ["app", "stderr_console", "stdout_console"]
