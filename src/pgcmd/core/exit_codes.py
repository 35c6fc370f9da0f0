"""Standard exit codes for pgcmd.

Exit codes follow Unix conventions. PGCTL_ERROR is reserved for a failure
to find a usable set of PostgreSQL client tools.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes for pgcmd commands."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    USAGE_ERROR = 2
    INPUT_ERROR = 3
    OUTPUT_ERROR = 4
    PGCTL_ERROR = 5
    SUBPROCESS_ERROR = 6
    CONFIG_ERROR = 7
