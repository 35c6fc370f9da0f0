"""Data models for pgcmd.

Pydantic models for the located tool set, PATH scan results and
captured subprocess outcomes.
"""

from __future__ import annotations

import os

from pydantic import BaseModel, computed_field

PSQL = "psql"
PG_DUMP = "pg_dump"
PG_RESTORE = "pg_restore"
PG_CONFIG = "pg_config"

# Longest version display string kept, e.g. "16.10" or "17beta1".
PG_VERSION_STRING_MAX = 12


class PgVersion(BaseModel):
    """Version reported by ``psql --version``."""

    text: str
    number: int


class ToolPaths(BaseModel):
    """One consistent installation of the PostgreSQL client tools.

    pg_dump and pg_restore always live next to psql; they are derived from
    its location and never searched for on their own.
    """

    psql: str
    pg_dump: str
    pg_restore: str
    pg_version: str
    pg_version_num: int

    @classmethod
    def from_psql(cls, psql: str, version: PgVersion) -> ToolPaths:
        bindir = os.path.dirname(psql)
        return cls(
            psql=psql,
            pg_dump=os.path.join(bindir, PG_DUMP),
            pg_restore=os.path.join(bindir, PG_RESTORE),
            pg_version=version.text,
            pg_version_num=version.number,
        )


class SearchResult(BaseModel):
    """Executables found for one program name, in PATH scan order."""

    candidates: list[str] = []

    @computed_field  # type: ignore[prop-decorator]
    @property
    def count(self) -> int:
        return len(self.candidates)


class SubprocessResult(BaseModel):
    """Outcome of one program run.

    io_error is set when the program could not be launched or read from;
    return_code is meaningless in that case.
    """

    program: str
    args: list[str] = []
    return_code: int = -1
    stdout: str = ""
    stderr: str = ""
    io_error: str | None = None

    @property
    def ok(self) -> bool:
        return self.io_error is None and self.return_code == 0
