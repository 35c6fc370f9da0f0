"""Shared CLI plumbing for command modules.

Config resolution and tool lookup from the global options in ctx.obj.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pgcmd.core.config import load_config, resolve_config
from pgcmd.core.resolver import ToolResolver

if TYPE_CHECKING:
    import typer

    from pgcmd.core.config import ResolvedConfig
    from pgcmd.core.models import ToolPaths


def get_resolved_config(ctx: typer.Context, **overrides: Any) -> ResolvedConfig:
    obj = ctx.ensure_object(dict)
    config = load_config(obj.get("config_file"))

    cli_overrides: dict[str, Any] = {}
    pg_config = obj.get("pg_config")
    if pg_config is not None:
        cli_overrides["pg_config"] = pg_config
    for key, val in overrides.items():
        if val is not None:
            cli_overrides[key] = val

    return resolve_config(config, **cli_overrides)


def get_tool_paths(resolved: ResolvedConfig) -> ToolPaths:
    resolver = ToolResolver(
        pg_config=resolved.pg_config,
        search_path=resolved.search_path,
    )
    return resolver.resolve()
