"""Tests for PATH scanning and link deduplication."""

import os

import pytest

from pgcmd.core.exceptions import ResolutionError
from pgcmd.core.models import SearchResult
from pgcmd.core.search import (
    deduplicate_by_realpath,
    find_all_on_path,
    find_first_on_path,
)


def _path(*dirs) -> str:
    return os.pathsep.join(str(d) for d in dirs)


# -- find_all_on_path --


@pytest.mark.unit
def test_no_match_returns_empty_result(tmp_path):
    (tmp_path / "empty").mkdir()
    result = find_all_on_path("pg_config", _path(tmp_path / "empty"))
    assert result.count == 0
    assert result.candidates == []


@pytest.mark.unit
def test_missing_directories_are_skipped(tmp_path, make_program):
    found = make_program(tmp_path / "b", "pg_config", "exit 0")
    result = find_all_on_path(
        "pg_config", _path(tmp_path / "does-not-exist", tmp_path / "b")
    )
    assert result.candidates == [str(found)]


@pytest.mark.unit
def test_empty_search_path(tmp_path):
    assert find_all_on_path("psql", "").count == 0


@pytest.mark.unit
def test_matches_keep_path_order(tmp_path, make_program):
    second = make_program(tmp_path / "z", "pg_config", "exit 0")
    first = make_program(tmp_path / "a", "pg_config", "exit 0")
    result = find_all_on_path("pg_config", _path(tmp_path / "z", tmp_path / "a"))
    assert result.candidates == [str(second), str(first)]
    assert result.count == 2


@pytest.mark.unit
def test_non_executable_files_are_skipped(tmp_path, make_program):
    plain = tmp_path / "a" / "psql"
    plain.parent.mkdir()
    plain.write_text("not a program")
    plain.chmod(0o644)
    exe = make_program(tmp_path / "b", "psql", "exit 0")
    result = find_all_on_path("psql", _path(tmp_path / "a", tmp_path / "b"))
    assert result.candidates == [str(exe)]


@pytest.mark.unit
def test_directories_with_program_name_are_skipped(tmp_path):
    (tmp_path / "a" / "psql").mkdir(parents=True)
    assert find_all_on_path("psql", _path(tmp_path / "a")).count == 0


@pytest.mark.unit
def test_empty_path_entries_are_not_current_directory(tmp_path, make_program, monkeypatch):
    make_program(tmp_path, "psql", "exit 0")
    monkeypatch.chdir(tmp_path)
    assert find_all_on_path("psql", os.pathsep).count == 0


@pytest.mark.unit
def test_default_search_path_is_environment(tmp_path, make_program, monkeypatch):
    exe = make_program(tmp_path / "bin", "psql", "exit 0")
    monkeypatch.setenv("PATH", str(tmp_path / "bin"))
    assert find_all_on_path("psql").candidates == [str(exe)]
    assert find_first_on_path("psql") == str(exe)


# -- find_first_on_path --


@pytest.mark.unit
def test_first_match_wins(tmp_path, make_program):
    first = make_program(tmp_path / "a", "psql", "exit 0")
    make_program(tmp_path / "b", "psql", "exit 0")
    assert find_first_on_path("psql", _path(tmp_path / "a", tmp_path / "b")) == str(first)


@pytest.mark.unit
def test_first_match_not_found(tmp_path):
    assert find_first_on_path("psql", _path(tmp_path)) is None


@pytest.mark.unit
def test_first_agrees_with_all(tmp_path, make_program):
    make_program(tmp_path / "b", "psql", "exit 0")
    make_program(tmp_path / "c", "psql", "exit 0")
    search_path = _path(tmp_path / "a", tmp_path / "b", tmp_path / "c")
    assert find_first_on_path("psql", search_path) == find_all_on_path(
        "psql", search_path
    ).candidates[0]


# -- deduplicate_by_realpath --


@pytest.mark.unit
def test_symlinks_to_same_file_collapse(tmp_path, make_program):
    real = make_program(tmp_path / "real", "pg_config", "exit 0")
    link_dir = tmp_path / "links"
    link_dir.mkdir()
    (link_dir / "pg_config").symlink_to(real)

    result = find_all_on_path("pg_config", _path(link_dir, tmp_path / "real"))
    assert result.count == 2

    deduped = deduplicate_by_realpath(result)
    assert deduped.count == 1
    assert deduped.candidates == [str(link_dir / "pg_config")]


@pytest.mark.unit
def test_hard_links_collapse(tmp_path, make_program):
    real = make_program(tmp_path / "a", "pg_config", "exit 0")
    (tmp_path / "b").mkdir()
    os.link(real, tmp_path / "b" / "pg_config")

    result = find_all_on_path("pg_config", _path(tmp_path / "a", tmp_path / "b"))
    assert deduplicate_by_realpath(result).candidates == [str(real)]


@pytest.mark.unit
def test_dedup_preserves_order_of_distinct_files(tmp_path, make_program):
    a = make_program(tmp_path / "a", "pg_config", "exit 0")
    b = make_program(tmp_path / "b", "pg_config", "exit 0")
    c_dir = tmp_path / "c"
    c_dir.mkdir()
    (c_dir / "pg_config").symlink_to(a)
    d = make_program(tmp_path / "d", "pg_config", "exit 0")

    result = find_all_on_path(
        "pg_config", _path(tmp_path / "a", tmp_path / "b", c_dir, tmp_path / "d")
    )
    assert deduplicate_by_realpath(result).candidates == [str(a), str(b), str(d)]


@pytest.mark.unit
def test_dedup_of_empty_result():
    assert deduplicate_by_realpath(SearchResult()).count == 0


@pytest.mark.unit
def test_broken_symlink_is_an_error(tmp_path, make_program):
    good = make_program(tmp_path / "a", "pg_config", "exit 0")
    broken = tmp_path / "b" / "pg_config"
    broken.parent.mkdir()
    broken.symlink_to(tmp_path / "nowhere" / "pg_config")

    result = SearchResult(candidates=[str(good), str(broken)])
    with pytest.raises(ResolutionError, match="Failed to resolve real path"):
        deduplicate_by_realpath(result)
