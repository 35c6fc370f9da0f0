"""Version detection through ``psql --version``.

psql prints e.g. "psql (PostgreSQL) 14.2 (Ubuntu 14.2-1.pgdg20.04+1)";
the first version-looking token of the first line is the one that counts.
"""

from __future__ import annotations

import re

import structlog

from pgcmd.core.exceptions import VersionError, VersionErrorKind
from pgcmd.core.models import PG_VERSION_STRING_MAX, PgVersion
from pgcmd.core.runner import SubprocessRunner

_VERSION_RE = re.compile(r"(?<![\w.])(\d+)(?:\.(\d+))?(?:\.(\d+))?")


def version_number(major: int, minor: int = 0, patch: int = 0) -> int:
    """Encode a version so that integer order matches version order."""
    return major * 10000 + minor * 100 + patch


def parse_version_number(output: str) -> PgVersion:
    """Extract the version from the first line of ``output``."""
    lines = output.splitlines()
    first_line = lines[0] if lines else ""

    match = _VERSION_RE.search(first_line)
    if match is None:
        msg = f"Failed to parse PostgreSQL version from \"{first_line}\""
        raise VersionError(msg, VersionErrorKind.UNPARSEABLE_OUTPUT)

    major, minor, patch = (int(g) if g else 0 for g in match.groups())
    return PgVersion(
        text=match.group(0)[:PG_VERSION_STRING_MAX],
        number=version_number(major, minor, patch),
    )


def probe_version(psql: str, runner: SubprocessRunner | None = None) -> PgVersion:
    """Run ``psql --version`` and parse its output."""
    log = structlog.get_logger()
    runner = runner or SubprocessRunner()

    result = runner.run(psql, ["--version"])
    if not result.ok:
        reason = result.io_error or f"exit code {result.return_code}"
        log.error(
            "failed to run psql --version",
            program=psql,
            error=reason,
        )
        msg = f"Failed to run \"psql --version\" using program \"{psql}\": {reason}"
        raise VersionError(msg, VersionErrorKind.LAUNCH_FAILED)

    try:
        version = parse_version_number(result.stdout)
    except VersionError as e:
        log.error("unparseable version output", program=psql, error=e.message)
        raise

    log.debug("psql version", program=psql, version=version.text)
    return version
