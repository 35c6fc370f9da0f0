"""Run pg_dump for one section of a database."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

import structlog

from pgcmd.core.conninfo import mask_password
from pgcmd.core.exceptions import DumpError, InputError, SubprocessIOError
from pgcmd.core.runner import (
    BUFSIZE,
    SubprocessRunner,
    format_command_line,
    log_program_output,
)

if TYPE_CHECKING:
    from pgcmd.core.models import ToolPaths

POSTGRES_CONNECT_TIMEOUT = 10


class DumpSection(StrEnum):
    PRE_DATA = "pre-data"
    DATA = "data"
    POST_DATA = "post-data"


def pg_dump_args(conninfo: str, section: str, filename: str) -> list[str]:
    """Arguments for a custom-format dump of one section into ``filename``."""
    return ["-Fc", "-d", conninfo, "--section", section, "--file", filename]


def dump_section(
    tool_paths: ToolPaths,
    conninfo: str,
    section: DumpSection | str,
    filename: str,
    *,
    connect_timeout: int = POSTGRES_CONNECT_TIMEOUT,
    display_size: int = BUFSIZE,
    runner: SubprocessRunner | None = None,
) -> None:
    """Dump ``section`` of the database at ``conninfo`` into ``filename``.

    Raises SubprocessIOError when pg_dump can't be run and DumpError when
    it exits non-zero; in the latter case everything pg_dump printed is
    logged at error level first.
    """
    log = structlog.get_logger()
    runner = runner or SubprocessRunner()
    try:
        section = DumpSection(section)
    except ValueError:
        valid = ", ".join(s.value for s in DumpSection)
        msg = f"Invalid section: '{section}'. Must be one of: {valid}"
        raise InputError(msg) from None

    args = pg_dump_args(conninfo, section.value, filename)
    display_args = pg_dump_args(mask_password(conninfo), section.value, filename)
    log.info(format_command_line([tool_paths.pg_dump, *display_args], display_size))

    result = runner.run(
        tool_paths.pg_dump,
        args,
        env={"PGCONNECT_TIMEOUT": str(connect_timeout)},
    )

    if result.io_error is not None:
        log.error(
            "failed to run pg_dump", program=tool_paths.pg_dump, error=result.io_error
        )
        msg = f"Failed to run pg_dump \"{tool_paths.pg_dump}\": {result.io_error}"
        raise SubprocessIOError(msg)

    if result.return_code != 0:
        log.error(f"Failed to run pg_dump: exit code {result.return_code}")
        log_program_output(result, "error", "error")
        msg = f"pg_dump failed for section {section.value}: exit code {result.return_code}"
        raise DumpError(msg, result.return_code)

    log.debug("pg_dump complete", section=section.value, file=filename)
