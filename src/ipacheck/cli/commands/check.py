"""The ``check`` command: run the audit and print the report."""

from typing import Annotated

import typer
from rich.console import Console
from rich.text import Text

from ipacheck.application.audit import run_audit, scoped_workdir
from ipacheck.cli import options as cli_options
from ipacheck.cli.helpers import (
    build_invocation,
    initialize_logging,
    resolve_password,
    resolve_runtime_and_logging,
    resolve_version,
)
from ipacheck.cli.sync_bridge import await_sync
from ipacheck.infrastructure.errors import IpaCheckError


def register(
    app: typer.Typer,
    *,
    stdout_console: Console,
    stderr_console: Console,
) -> None:
    """Register the check command with the app."""

    def _version_callback(value: bool) -> None:
        if value:
            stdout_console.print(resolve_version(), markup=False, highlight=False)
            raise typer.Exit()

    @app.command(
        "check",
        help="Compare directory metrics across every server and report consistency.",
    )
    def check(
        hosts: cli_options.HostsOption = None,
        domain: cli_options.DomainOption = None,
        suffix: cli_options.SuffixOption = None,
        binddn: cli_options.BindDnOption = None,
        password: cli_options.PasswordOption = None,
        password_file: cli_options.PasswordFileOption = None,
        starttls: cli_options.StartTlsOption = None,
        timeout: cli_options.TimeoutOption = None,
        nagios: cli_options.NagiosOption = None,
        warning: cli_options.WarningOption = None,
        critical: cli_options.CriticalOption = None,
        config_path: cli_options.ConfigPathOption = None,
        debug: cli_options.DebugOption = None,
        log_level: cli_options.LogLevelOption = None,
        log_format: cli_options.LogFormatOption = None,
        log_file: cli_options.LogFileOption = None,
        version: Annotated[
            bool,
            typer.Option(
                "--version",
                "-v",
                callback=_version_callback,
                is_eager=True,
                help="Show the version and exit",
            ),
        ] = False,
    ) -> None:
        """Run every consistency check against every configured server."""

        try:
            invocation = build_invocation(
                config_path=config_path,
                hosts=hosts,
                domain=domain,
                suffix=suffix,
                binddn=binddn,
                password=password,
                password_file=password_file,
                starttls=starttls,
                timeout=timeout,
                nagios=nagios,
                warning=warning,
                critical=critical,
                debug=debug,
                log_level=log_level,
                log_format=log_format,
                log_file=log_file,
            )
            runtime_settings, logging_settings = resolve_runtime_and_logging(invocation)
            logger = initialize_logging(runtime_settings, logging_settings)
            inline_password = resolve_password(
                runtime_settings,
                lambda: typer.prompt(
                    f"Password for {runtime_settings.binddn}", hide_input=True, err=True
                ),
            )
            with scoped_workdir(
                password=inline_password,
                password_file=runtime_settings.password_file,
            ) as (_, bind_password_file):
                result = await_sync(
                    run_audit(
                        runtime_settings,
                        password_file=bind_password_file,
                        logger=logger,
                    )
                )
        except IpaCheckError as exc:
            stderr_console.print(Text.assemble(("Error: ", "bold red"), str(exc)))
            raise typer.Exit(code=exc.exit_code) from exc

        stdout_console.print(
            result.output, markup=False, highlight=False, emoji=False, soft_wrap=True
        )
        raise typer.Exit(code=result.exit_code)


__all__ = ["register"]
