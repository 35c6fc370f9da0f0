"""Find the PostgreSQL client tools to use on this host.

Strategies, in order, first success wins:

1. An explicit pg_config (PG_CONFIG, --pg-config or the config file):
   psql is taken from ``$(pg_config --bindir)/psql``. Any failure is final.
2. The first psql found in PATH.
3. ``pg_config --bindir`` for the pg_config found in PATH, provided there
   is exactly one. Debian and Ubuntu install pg_config in /usr/bin and
   psql in /usr/lib/postgresql/<major>/bin, which is not in PATH.

Several different pg_config entries in PATH are never disambiguated
automatically, even when only one of them works: the user has to pick
one with PG_CONFIG.
"""

from __future__ import annotations

import os

import structlog

from pgcmd.core.exceptions import PgCmdError, ResolutionError, VersionError
from pgcmd.core.models import PG_CONFIG, PSQL, PgVersion, ToolPaths
from pgcmd.core.runner import SubprocessRunner
from pgcmd.core.search import (
    deduplicate_by_realpath,
    find_all_on_path,
    find_first_on_path,
)
from pgcmd.core.version import probe_version


class ToolResolver:
    """Locate psql, pg_dump and pg_restore from a single installation."""

    def __init__(
        self,
        pg_config: str | None = None,
        search_path: str | None = None,
        runner: SubprocessRunner | None = None,
    ) -> None:
        self.pg_config = pg_config or None
        self.search_path = search_path
        self.runner = runner or SubprocessRunner()

    def resolve(self) -> ToolPaths:
        """Return the tool set or raise ResolutionError.

        The caller decides whether to exit; nothing here terminates the
        process.
        """
        if self.pg_config is not None:
            return self._from_explicit_pg_config(self.pg_config)

        psql = find_first_on_path(PSQL, self.search_path)
        if psql is not None:
            return self._from_psql_in_path(psql)

        return self._from_pg_config_in_path()

    def _from_explicit_pg_config(self, pg_config: str) -> ToolPaths:
        log = structlog.get_logger()

        if not os.path.isfile(pg_config):
            log.error("pg_config not found", pg_config=pg_config)
            msg = f"Failed to find a file for PG_CONFIG value \"{pg_config}\""
            raise ResolutionError(msg)

        psql, version = self._verified_psql_from_pg_config(pg_config)
        log.debug(
            "found psql following PG_CONFIG",
            psql=psql,
            pg_version=version.text,
        )
        return ToolPaths.from_psql(psql, version)

    def _from_psql_in_path(self, psql: str) -> ToolPaths:
        log = structlog.get_logger()
        try:
            version = probe_version(psql, self.runner)
        except VersionError as e:
            log.critical("failed to get version info", psql=psql)
            msg = f"Failed to get version info from {psql} --version"
            raise ResolutionError(msg) from e

        log.debug("found psql in PATH", psql=psql, pg_version=version.text)
        return ToolPaths.from_psql(psql, version)

    def _from_pg_config_in_path(self) -> ToolPaths:
        log = structlog.get_logger()

        try:
            pg_configs = deduplicate_by_realpath(
                find_all_on_path(PG_CONFIG, self.search_path)
            )
        except ResolutionError as e:
            log.error("failed to resolve symlinks found in PATH entries")
            msg = f"Failed to resolve symlinks found in PATH entries: {e.message}"
            raise ResolutionError(msg) from e

        if pg_configs.count == 0:
            log.warning("failed to find either psql or pg_config in PATH")
            raise ResolutionError("Failed to find either psql or pg_config in PATH")

        if pg_configs.count == 1:
            pg_config = pg_configs.candidates[0]
            psql, version = self._verified_psql_from_pg_config(pg_config)
            log.debug(
                "found psql from pg_config in PATH",
                psql=psql,
                pg_version=version.text,
                pg_config=pg_config,
            )
            return ToolPaths.from_psql(psql, version)

        log.info("found more than one pg_config entry in current PATH")
        for pg_config in pg_configs.candidates:
            try:
                psql, version = self._psql_from_pg_config(pg_config)
            except PgCmdError as e:
                log.warning(
                    "skipping pg_config entry",
                    pg_config=pg_config,
                    error=e.message,
                )
                continue
            log.info(
                "found pg_config entry",
                pg_config=pg_config,
                psql=psql,
                pg_version=version.text,
            )
        log.info("HINT: export PG_CONFIG to a specific pg_config entry")

        msg = (
            f"Found {pg_configs.count} pg_config entries in PATH: "
            f"{', '.join(pg_configs.candidates)}\n"
            "Export PG_CONFIG to a specific pg_config entry."
        )
        raise ResolutionError(msg)

    def _psql_from_pg_config(self, pg_config: str) -> tuple[str, PgVersion]:
        """Derive ``$(pg_config --bindir)/psql`` and check its version.

        Raises ResolutionError for a bad pg_config or bindir and
        VersionError when psql itself does not answer.
        """
        log = structlog.get_logger()

        result = self.runner.run(pg_config, ["--bindir"])
        if not result.ok:
            reason = result.io_error or f"exit code {result.return_code}"
            log.error(
                "failed to run pg_config --bindir", pg_config=pg_config, error=reason
            )
            msg = (
                f"Failed to run \"pg_config --bindir\" using program "
                f"\"{pg_config}\": {reason}"
            )
            raise ResolutionError(msg)

        lines = result.stdout.splitlines()
        bindir = lines[0].strip() if lines else ""
        if not bindir:
            log.error("unable to parse pg_config --bindir output", pg_config=pg_config)
            msg = f"Unable to parse output from {pg_config} --bindir"
            raise ResolutionError(msg)

        psql = os.path.join(bindir, PSQL)
        if not os.path.isfile(psql):
            log.error("psql not found in bindir", psql=psql, pg_config=pg_config)
            msg = f"Failed to find psql at \"{psql}\" from pg_config at \"{pg_config}\""
            raise ResolutionError(msg)

        return psql, probe_version(psql, self.runner)

    def _verified_psql_from_pg_config(self, pg_config: str) -> tuple[str, PgVersion]:
        """Same as _psql_from_pg_config, for a pg_config the user is committed to."""
        log = structlog.get_logger()
        try:
            return self._psql_from_pg_config(pg_config)
        except VersionError as e:
            log.critical("failed to get version info", pg_config=pg_config)
            msg = f"Failed to get version info from psql found by {pg_config}"
            raise ResolutionError(msg) from e


def find_pg_commands(
    pg_config: str | None = None,
    search_path: str | None = None,
    runner: SubprocessRunner | None = None,
) -> ToolPaths:
    """Resolve the tool set with the default strategies."""
    return ToolResolver(pg_config, search_path, runner).resolve()
