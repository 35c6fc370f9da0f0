"""Configuration management CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

import typer

from pgcmd.cli.commands._shared import get_resolved_config
from pgcmd.core.config import DEFAULT_CONFIG_PATH

if TYPE_CHECKING:
    from pathlib import Path

config_app = typer.Typer(help="Configuration management commands")


@config_app.callback(invoke_without_command=True)
def config_callback(ctx: typer.Context) -> None:
    if not ctx.invoked_subcommand:
        typer.echo(ctx.get_help())
        raise typer.Exit()


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Display resolved configuration with source attribution."""
    resolved = get_resolved_config(ctx)
    sources = resolved.sources

    typer.echo("Tool Discovery (resolved):")
    typer.echo(
        f"  pg_config: {resolved.pg_config or 'not set'} "
        f"({sources.get('pg_config', 'default')})"
    )
    search_path = resolved.search_path or "empty"
    typer.echo(f"  search_path: {search_path} ({sources.get('search_path', 'default')})")

    typer.echo("")
    typer.echo("pg_dump:")
    typer.echo(
        f"  connect_timeout: {resolved.connect_timeout}s "
        f"({sources.get('connect_timeout', 'default')})"
    )
    typer.echo(
        f"  command_display_size: {resolved.command_display_size} "
        f"({sources.get('command_display_size', 'default')})"
    )

    typer.echo("")
    config_path: Path | None = ctx.ensure_object(dict).get("config_file")
    typer.echo(f"Config File: {config_path or DEFAULT_CONFIG_PATH}")
