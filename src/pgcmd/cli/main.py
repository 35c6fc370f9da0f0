"""pgcmd main entry point and command registration."""

from __future__ import annotations

import atexit
from pathlib import Path  # noqa: TC003
from typing import Annotated

import sentry_sdk
import typer

from pgcmd.__about__ import __version__
from pgcmd.cli.commands._shared import get_resolved_config, get_tool_paths
from pgcmd.cli.commands.config import config_app
from pgcmd.cli.output import OutputFormat, write_output
from pgcmd.core.config import MAX_CONNECT_TIMEOUT, MIN_CONNECT_TIMEOUT
from pgcmd.core.exceptions import PgCmdError
from pgcmd.core.exit_codes import ExitCode
from pgcmd.core.logging import setup_logging
from pgcmd.core.monitoring import setup_sentry
from pgcmd.core.pgdump import DumpSection, dump_section
from pgcmd.core.search import (
    deduplicate_by_realpath,
    find_all_on_path,
    find_first_on_path,
)
from pgcmd.core.version import probe_version

app = typer.Typer(
    help="pgcmd - locate and run PostgreSQL client tools",
    no_args_is_help=True,
)

app.add_typer(config_app, name="config")


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"pgcmd {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Enable verbose logging"),
    ] = False,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config file"),
    ] = None,
    pg_config: Annotated[
        str | None,
        typer.Option("--pg-config", help="pg_config of the installation to use"),
    ] = None,
) -> None:
    """pgcmd - locate and run PostgreSQL client tools."""
    setup_logging(verbose)
    setup_sentry()

    transaction = sentry_sdk.start_transaction(
        op="cli", name=ctx.invoked_subcommand or "pgcmd"
    )
    transaction.__enter__()

    def cleanup() -> None:
        transaction.__exit__(None, None, None)
        sentry_sdk.flush(timeout=2)

    atexit.register(cleanup)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_file"] = config_file
    ctx.obj["pg_config"] = pg_config


def run() -> None:
    """Entry point with global error handling.

    This is the only place where a failure to find the PostgreSQL tools
    terminates the process.
    """
    try:
        app()
    except PgCmdError as e:
        sentry_sdk.capture_exception(e)
        typer.echo(f"Error: {e.message}", err=True)
        raise SystemExit(e.exit_code) from None
    except SystemExit:
        raise
    except KeyboardInterrupt:
        raise SystemExit(130) from None
    except Exception as e:
        sentry_sdk.capture_exception(e)
        typer.echo(f"Error: {e}", err=True)
        raise SystemExit(ExitCode.GENERAL_ERROR) from None


@app.command("find")
def find_command(
    ctx: typer.Context,
    format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format: text|json"),
    ] = OutputFormat.TEXT,
) -> None:
    """
    Locate psql, pg_dump and pg_restore from one installation.

    Uses PG_CONFIG (or --pg-config) when set, then psql from PATH, then
    pg_config from PATH when exactly one is found.
    """
    resolved = get_resolved_config(ctx)
    tool_paths = get_tool_paths(resolved)
    write_output(tool_paths, format)


@app.command("which")
def which_command(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Program name to look for")],
    all_matches: Annotated[
        bool,
        typer.Option("--all", "-a", help="List every match in PATH order"),
    ] = False,
    dedupe: Annotated[
        bool,
        typer.Option("--dedupe", help="With --all, list each real file once"),
    ] = False,
    format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format: text|json"),
    ] = OutputFormat.TEXT,
) -> None:
    """Show where NAME is found in PATH."""
    resolved = get_resolved_config(ctx)

    if not all_matches:
        path = find_first_on_path(name, resolved.search_path)
        if path is None:
            typer.echo(f"Error: {name} not found in PATH", err=True)
            raise typer.Exit(ExitCode.GENERAL_ERROR)
        typer.echo(path)
        return

    result = find_all_on_path(name, resolved.search_path)
    if dedupe:
        result = deduplicate_by_realpath(result)
    write_output(result, format)


@app.command("version")
def version_command(
    program: Annotated[str, typer.Argument(help="Path of a psql executable")],
    format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format: text|json"),
    ] = OutputFormat.TEXT,
) -> None:
    """Run PROGRAM --version and show the parsed PostgreSQL version."""
    write_output(probe_version(program), format)


@app.command("dump")
def dump_command(
    ctx: typer.Context,
    conninfo: Annotated[
        str, typer.Argument(help="Connection string or URI of the source database")
    ],
    section: Annotated[
        DumpSection,
        typer.Option("--section", "-s", help="pre-data|data|post-data"),
    ],
    file: Annotated[
        Path,
        typer.Option("--file", "-o", help="Output file (custom format)"),
    ],
    connect_timeout: Annotated[
        int | None,
        typer.Option(
            "--connect-timeout",
            min=MIN_CONNECT_TIMEOUT,
            max=MAX_CONNECT_TIMEOUT,
            help="PGCONNECT_TIMEOUT for pg_dump",
        ),
    ] = None,
) -> None:
    """
    Dump one section of a database with pg_dump -Fc.

    pg_dump is taken from the same installation as the psql found by
    'pgcmd find'. Its output is logged when it fails.
    """
    resolved = get_resolved_config(ctx, connect_timeout=connect_timeout)
    tool_paths = get_tool_paths(resolved)

    dump_section(
        tool_paths,
        conninfo,
        section,
        str(file),
        connect_timeout=resolved.connect_timeout,
        display_size=resolved.command_display_size,
    )
    typer.echo(f"Dumped section {section.value} to {file}")
