"""Shared test fixtures for pgcmd.

Executable /bin/sh stubs stand in for psql, pg_config and pg_dump.
"""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from pgcmd.cli.main import app


@pytest.fixture
def runner():
    """Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def cli_runner(runner):
    """Invoke the CLI app with the given arguments."""

    def invoke(*args: str, **kwargs):
        return runner.invoke(app, list(args), **kwargs)

    return invoke


@pytest.fixture
def make_program():
    """Write an executable shell script ``directory/name``."""

    def make(directory: Path, name: str, script: str) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / name
        path.write_text(f"#!/bin/sh\n{script}\n")
        path.chmod(0o755)
        return path

    return make


@pytest.fixture
def make_install(tmp_path, make_program):
    """Create a fake PostgreSQL bindir with psql, pg_dump, pg_restore and pg_config."""

    def make(name: str = "pg14", version: str = "14.2") -> Path:
        bindir = tmp_path / name / "bin"
        make_program(bindir, "psql", f'echo "psql (PostgreSQL) {version}"')
        make_program(bindir, "pg_dump", "exit 0")
        make_program(bindir, "pg_restore", "exit 0")
        make_program(bindir, "pg_config", f'echo "{bindir}"')
        return bindir

    return make


@pytest.fixture
def make_pg_config(tmp_path, make_program):
    """Create a pg_config outside the bindir it reports, like Debian's /usr/bin."""

    def make(directory: str, bindir: Path) -> Path:
        return make_program(tmp_path / directory, "pg_config", f'echo "{bindir}"')

    return make
