"""Tests for exception hierarchy and exit codes."""

import pytest

from pgcmd.core.exceptions import (
    ConfigError,
    DumpError,
    InputError,
    PgCmdError,
    ResolutionError,
    SubprocessIOError,
    VersionError,
    VersionErrorKind,
)
from pgcmd.core.exit_codes import ExitCode


@pytest.mark.unit
class TestExitCodes:
    def test_exit_code_values(self):
        assert ExitCode.SUCCESS == 0
        assert ExitCode.GENERAL_ERROR == 1
        assert ExitCode.USAGE_ERROR == 2
        assert ExitCode.INPUT_ERROR == 3
        assert ExitCode.OUTPUT_ERROR == 4
        assert ExitCode.PGCTL_ERROR == 5
        assert ExitCode.SUBPROCESS_ERROR == 6
        assert ExitCode.CONFIG_ERROR == 7

    def test_exit_code_is_int(self):
        for code in ExitCode:
            assert isinstance(code, int)


@pytest.mark.unit
class TestPgCmdError:
    def test_base_exception(self):
        err = PgCmdError("test error")
        assert str(err) == "test error"
        assert err.message == "test error"
        assert err.exit_code == ExitCode.GENERAL_ERROR

    def test_is_exception(self):
        assert issubclass(PgCmdError, Exception)


@pytest.mark.unit
class TestResolutionError:
    def test_exit_code(self):
        assert ResolutionError("no psql").exit_code == ExitCode.PGCTL_ERROR

    def test_distinct_from_general_error(self):
        assert ResolutionError("no psql").exit_code != ExitCode.GENERAL_ERROR


@pytest.mark.unit
class TestVersionError:
    def test_kind(self):
        err = VersionError("bad output", VersionErrorKind.UNPARSEABLE_OUTPUT)
        assert err.kind == VersionErrorKind.UNPARSEABLE_OUTPUT
        assert err.message == "bad output"

    def test_exit_code(self):
        err = VersionError("no run", VersionErrorKind.LAUNCH_FAILED)
        assert err.exit_code == ExitCode.PGCTL_ERROR


@pytest.mark.unit
class TestSubprocessErrors:
    def test_io_error_exit_code(self):
        assert SubprocessIOError("exec failed").exit_code == ExitCode.SUBPROCESS_ERROR

    def test_dump_error_keeps_return_code(self):
        err = DumpError("pg_dump failed", 1)
        assert err.return_code == 1
        assert err.exit_code == ExitCode.SUBPROCESS_ERROR


@pytest.mark.unit
class TestOtherErrors:
    def test_input_error(self):
        assert InputError("bad").exit_code == ExitCode.INPUT_ERROR

    def test_config_error(self):
        assert ConfigError("bad").exit_code == ExitCode.CONFIG_ERROR


@pytest.mark.unit
def test_catch_all_by_base():
    for exc in [
        ResolutionError("x"),
        VersionError("x", VersionErrorKind.LAUNCH_FAILED),
        SubprocessIOError("x"),
        DumpError("x", 2),
        InputError("x"),
        ConfigError("x"),
    ]:
        with pytest.raises(PgCmdError):
            raise exc
