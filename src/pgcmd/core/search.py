"""PATH scanning for executables.

find_first_on_path() and find_all_on_path() share the same scan so the
first match of one is always the first candidate of the other.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import structlog

from pgcmd.core.exceptions import ResolutionError
from pgcmd.core.models import SearchResult

if TYPE_CHECKING:
    from collections.abc import Iterator


def _is_executable_file(path: str) -> bool:
    return os.path.isfile(path) and os.access(path, os.X_OK)


def _iter_path_matches(name: str, search_path: str | None) -> Iterator[str]:
    if search_path is None:
        search_path = os.environ.get("PATH", "")

    for directory in search_path.split(os.pathsep):
        # Empty entries would mean the current directory; never search it.
        if not directory or not os.path.isdir(directory):
            continue
        candidate = os.path.abspath(os.path.join(directory, name))
        if _is_executable_file(candidate):
            yield candidate


def find_first_on_path(name: str, search_path: str | None = None) -> str | None:
    """Return the first executable called ``name`` on the search path."""
    log = structlog.get_logger()
    match = next(_iter_path_matches(name, search_path), None)
    if match is None:
        log.debug("program not found in PATH", program=name)
    else:
        log.debug("found program in PATH", program=name, path=match)
    return match


def find_all_on_path(name: str, search_path: str | None = None) -> SearchResult:
    """Collect every executable called ``name`` on the search path.

    Directories that don't exist or can't be read are skipped.
    """
    return SearchResult(candidates=list(_iter_path_matches(name, search_path)))


def deduplicate_by_realpath(result: SearchResult) -> SearchResult:
    """Collapse candidates that are the same file under different names.

    Symlinks and hard links to one file count once; the first occurrence
    is kept and the order of the remaining entries is unchanged.
    Raises ResolutionError when any candidate can't be resolved.
    """
    log = structlog.get_logger()
    seen: set[tuple[int, int]] = set()
    unique: list[str] = []

    for candidate in result.candidates:
        try:
            realpath = os.path.realpath(candidate, strict=True)
            st = os.stat(realpath)
        except OSError as e:
            log.error(
                "failed to resolve real path", candidate=candidate, error=str(e)
            )
            msg = f"Failed to resolve real path of \"{candidate}\": {e}"
            raise ResolutionError(msg) from e

        key = (st.st_dev, st.st_ino)
        if key in seen:
            log.debug("skipping duplicate entry", candidate=candidate, realpath=realpath)
            continue
        seen.add(key)
        unique.append(candidate)

    return SearchResult(candidates=unique)
