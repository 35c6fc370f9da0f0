"""Sentry integration for error tracking and performance monitoring.

Sentry is initialized early in main() after logging setup. Reporting is
disabled unless PGCMD_SENTRY_DSN is set.
"""

import os

import sentry_sdk

from pgcmd.__about__ import __version__

SENTRY_DSN_ENV = "PGCMD_SENTRY_DSN"


def setup_sentry(environment: str = "local") -> None:
    """Initialize Sentry from the environment for error tracking."""
    sentry_sdk.init(
        dsn=os.environ.get(SENTRY_DSN_ENV) or None,
        traces_sample_rate=0.03,
        environment=environment,
        release=__version__,
        attach_stacktrace=True,
        send_default_pii=False,
    )
