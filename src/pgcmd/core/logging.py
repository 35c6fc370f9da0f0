"""Logging configuration using structlog.

Logs go to stderr to keep stdout clean for tool paths and JSON output.
Program output surfaced after a failed subprocess is logged here too,
one event per line.
"""

import logging
import sys
from typing import Any

import structlog

_LOG_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


class _LazyStderrFactory:
    """Resolve sys.stderr at logger creation time, not at configure() time.

    PrintLoggerFactory(file=sys.stderr) captures the file handle once.
    Under CliRunner tests the captured handle becomes stale when stderr
    is closed between invocations.
    """

    def __call__(self, *args: Any, **kwargs: Any) -> structlog.PrintLogger:
        return structlog.PrintLogger(file=sys.stderr)


def setup_logging(verbose: bool = False) -> None:
    """Configure structlog for pgcmd.

    Args:
        verbose: If True, set log level to DEBUG. Otherwise INFO.
    """
    level_name = "debug" if verbose else "info"

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_LOG_LEVELS[level_name]),
        context_class=dict,
        logger_factory=_LazyStderrFactory(),
        cache_logger_on_first_use=False,
    )


def log_level(level: str, event: str, **kw: Any) -> None:
    """Log an event at a level chosen at runtime ("debug" .. "critical")."""
    if level not in _LOG_LEVELS:
        msg = f"Unknown log level: '{level}'"
        raise ValueError(msg)
    log = structlog.get_logger()
    getattr(log, level)(event, **kw)

