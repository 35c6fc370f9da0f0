"""Connection string checks for commands passed to pg_dump.

Both URIs (postgresql://...) and key=value strings are accepted, parsed
with libpq through psycopg so pgcmd rejects exactly what pg_dump would.
"""

from __future__ import annotations

from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

import psycopg
from psycopg.conninfo import conninfo_to_dict, make_conninfo

from pgcmd.core.exceptions import InputError

_MASK = "****"


def validate_conninfo(conninfo: str) -> dict[str, object]:
    """Parse ``conninfo`` and return its parameters.

    Raises InputError when libpq refuses the string.
    """
    try:
        return conninfo_to_dict(conninfo)
    except psycopg.ProgrammingError as e:
        msg = f"Invalid connection string: {e}"
        raise InputError(msg) from e


def _is_uri(conninfo: str) -> bool:
    return urlparse(conninfo).scheme in ("postgresql", "postgres")


def mask_password(conninfo: str) -> str:
    """Return ``conninfo`` with any password replaced, for display only."""
    params = validate_conninfo(conninfo)
    if "password" not in params:
        return conninfo

    if not _is_uri(conninfo):
        params["password"] = _MASK
        return make_conninfo(**params)

    parsed = urlparse(conninfo)
    netloc = parsed.netloc
    if parsed.password is not None:
        userinfo, hostinfo = netloc.rsplit("@", 1)
        user = userinfo.split(":", 1)[0]
        netloc = f"{user}:{_MASK}@{hostinfo}"

    query = parsed.query
    if query:
        pairs = [
            (key, _MASK if key == "password" else value)
            for key, value in parse_qsl(query, keep_blank_values=True)
        ]
        query = urlencode(pairs, safe="*")

    return urlunparse(parsed._replace(netloc=netloc, query=query))
