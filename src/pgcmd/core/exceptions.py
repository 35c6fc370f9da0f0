"""Exception hierarchy for pgcmd.

All exceptions carry an exit_code for CLI return value mapping.
"""

from enum import StrEnum

from pgcmd.core.exit_codes import ExitCode


class PgCmdError(Exception):
    """Base exception for all pgcmd errors."""

    exit_code: int = ExitCode.GENERAL_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ResolutionError(PgCmdError):
    """No usable psql/pg_dump/pg_restore set, or more than one candidate."""

    exit_code: int = ExitCode.PGCTL_ERROR


class VersionErrorKind(StrEnum):
    LAUNCH_FAILED = "launch_failed"
    UNPARSEABLE_OUTPUT = "unparseable_output"


class VersionError(PgCmdError):
    """psql --version could not be run or its output could not be parsed."""

    exit_code: int = ExitCode.PGCTL_ERROR

    def __init__(self, message: str, kind: VersionErrorKind) -> None:
        self.kind = kind
        super().__init__(message)


class SubprocessIOError(PgCmdError):
    """Program could not be launched or its output could not be read."""

    exit_code: int = ExitCode.SUBPROCESS_ERROR


class DumpError(PgCmdError):
    """pg_dump ran and exited with a non-zero status."""

    exit_code: int = ExitCode.SUBPROCESS_ERROR

    def __init__(self, message: str, return_code: int) -> None:
        self.return_code = return_code
        super().__init__(message)


class InputError(PgCmdError):
    """Invalid connection string, invalid parameters."""

    exit_code: int = ExitCode.INPUT_ERROR


class ConfigError(PgCmdError):
    """Malformed config file, invalid config values."""

    exit_code: int = ExitCode.CONFIG_ERROR
