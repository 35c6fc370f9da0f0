"""Configuration management for pgcmd.

Handles the TOML config file, environment variables and CLI overrides.

Precedence order (highest to lowest):
1. CLI flags (--pg-config, --connect-timeout)
2. Environment variables (PG_CONFIG, PATH)
3. Config file
4. Built-in defaults
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError, field_validator

from pgcmd.core.exceptions import ConfigError
from pgcmd.core.pgdump import POSTGRES_CONNECT_TIMEOUT
from pgcmd.core.runner import BUFSIZE

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "pgcmd" / "config.toml"

PG_CONFIG_ENV = "PG_CONFIG"

# libpq reads 0 as "wait forever".
MIN_CONNECT_TIMEOUT = 1
MAX_CONNECT_TIMEOUT = 3600


def _check_connect_timeout(v: int) -> int:
    if not (MIN_CONNECT_TIMEOUT <= v <= MAX_CONNECT_TIMEOUT):
        msg = (
            f"Invalid connect_timeout: {v}. "
            f"Must be {MIN_CONNECT_TIMEOUT}-{MAX_CONNECT_TIMEOUT}"
        )
        raise ValueError(msg)
    return v


class AppConfig(BaseModel):
    pg_config: str | None = None
    connect_timeout: int = POSTGRES_CONNECT_TIMEOUT
    command_display_size: int = BUFSIZE

    @field_validator("connect_timeout")
    @classmethod
    def validate_connect_timeout(cls, v: int) -> int:
        return _check_connect_timeout(v)

    @field_validator("command_display_size")
    @classmethod
    def validate_display_size(cls, v: int) -> int:
        if v < 16:
            msg = f"Invalid command_display_size: {v}. Must be at least 16"
            raise ValueError(msg)
        return v


class ResolvedConfig(BaseModel):
    pg_config: str | None = None
    search_path: str = ""
    connect_timeout: int = POSTGRES_CONNECT_TIMEOUT
    command_display_size: int = BUFSIZE
    sources: dict[str, str] = {}

    @field_validator("connect_timeout")
    @classmethod
    def validate_connect_timeout(cls, v: int) -> int:
        return _check_connect_timeout(v)


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load configuration from TOML file.

    Returns default AppConfig if file doesn't exist.
    Raises ConfigError on malformed TOML or invalid config.
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    if not config_path.exists():
        return AppConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Malformed TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return AppConfig.model_validate(data)
    except Exception as e:
        msg = f"Invalid configuration in {config_path}: {e}"
        raise ConfigError(msg) from e


def resolve_config(config: AppConfig, **cli_overrides: Any) -> ResolvedConfig:
    """Resolve configuration using precedence chain.

    CLI > env > config file > built-in defaults. An empty PG_CONFIG is
    treated as unset.
    """
    sources: dict[str, str] = {}
    resolved: dict[str, Any] = {
        "pg_config": None,
        "search_path": "",
        "connect_timeout": POSTGRES_CONNECT_TIMEOUT,
        "command_display_size": BUFSIZE,
    }
    for key in resolved:
        sources[key] = "default"

    # Layer 1: Config file
    for key in config.model_fields_set:
        resolved[key] = getattr(config, key)
        sources[key] = "config"

    # Layer 2: Environment variables
    pg_config_env = os.environ.get(PG_CONFIG_ENV)
    if pg_config_env:
        resolved["pg_config"] = pg_config_env
        sources["pg_config"] = f"env: {PG_CONFIG_ENV}"

    path_env = os.environ.get("PATH")
    if path_env is not None:
        resolved["search_path"] = path_env
        sources["search_path"] = "env: PATH"

    # Layer 3: CLI flags (highest priority)
    cli_to_field = {
        "pg_config": "pg_config",
        "connect_timeout": "connect_timeout",
    }
    for cli_name, field_name in cli_to_field.items():
        value = cli_overrides.get(cli_name)
        if value is not None:
            resolved[field_name] = value
            sources[field_name] = f"cli: --{cli_name.replace('_', '-')}"

    resolved["sources"] = sources
    try:
        return ResolvedConfig(**resolved)
    except ValidationError as e:
        msg = f"Invalid configuration: {e}"
        raise ConfigError(msg) from e
