"""Synchronous subprocess execution with output capture.

Programs run in the caller's process group so signals sent to pgcmd reach
them too. stdout and stderr are drained together through a selector;
reading one pipe to EOF before the other can deadlock once the child
fills the second pipe buffer.
"""

from __future__ import annotations

import codecs
import os
import selectors
import shlex
import subprocess
import time
from collections.abc import Callable
from typing import IO, TYPE_CHECKING

import sentry_sdk
import structlog

from pgcmd.core.logging import log_level
from pgcmd.core.models import SubprocessResult

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

OutputSink = Callable[[str, str], None]

# Size of the display buffer used when logging command lines.
BUFSIZE = 1024

_READ_SIZE = 8192


class SubprocessRunner:
    """Run a program to completion and capture what it prints."""

    def run(
        self,
        program: str,
        args: Sequence[str] = (),
        *,
        env: Mapping[str, str] | None = None,
        on_output: OutputSink | None = None,
        buffer_output: bool = True,
    ) -> SubprocessResult:
        """Run ``program`` with ``args`` and wait for it to exit.

        Args:
            program: Path of the executable, used as argv[0].
            args: Remaining arguments, passed unchanged.
            env: Variables added to a copy of the current environment for
                this child only.
            on_output: Called as ``on_output(stream, text)`` with stream
                "stdout" or "stderr" each time output arrives.
            buffer_output: Keep output in the result. Only honoured when
                a sink is given; without one output is always kept.
        """
        log = structlog.get_logger()
        argv = [program, *args]
        child_env = dict(os.environ)
        if env:
            child_env.update(env)
        keep = buffer_output or on_output is None

        log.debug("running program", program=program, arg_count=len(args))
        with sentry_sdk.start_span(
            op="subprocess", description=os.path.basename(program)
        ) as span:
            start_time = time.monotonic()
            try:
                proc = subprocess.Popen(
                    argv,
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE,
                    env=child_env,
                    start_new_session=False,
                )
            except OSError as e:
                span.set_status("internal_error")
                log.debug("failed to launch program", program=program, error=str(e))
                return SubprocessResult(
                    program=program, args=list(args), io_error=str(e)
                )

            with proc:
                try:
                    stdout, stderr = _drain(proc, on_output, keep)
                except OSError as e:
                    proc.kill()
                    proc.wait()
                    span.set_status("internal_error")
                    log.debug(
                        "failed to read program output",
                        program=program,
                        error=str(e),
                    )
                    return SubprocessResult(
                        program=program,
                        args=list(args),
                        return_code=proc.returncode,
                        io_error=str(e),
                    )
                return_code = proc.wait()

            duration_ms = (time.monotonic() - start_time) * 1000
            span.set_data("return_code", return_code)
            span.set_data("duration_ms", duration_ms)
            log.debug(
                "program exited",
                program=program,
                return_code=return_code,
                duration_ms=f"{duration_ms:.1f}",
            )

        return SubprocessResult(
            program=program,
            args=list(args),
            return_code=return_code,
            stdout=stdout,
            stderr=stderr,
        )


def _drain(
    proc: subprocess.Popen[bytes], on_output: OutputSink | None, keep: bool
) -> tuple[str, str]:
    if proc.stdout is None or proc.stderr is None:
        raise ValueError("stdout and stderr must be pipes")

    decoders = {
        "stdout": codecs.getincrementaldecoder("utf-8")(errors="replace"),
        "stderr": codecs.getincrementaldecoder("utf-8")(errors="replace"),
    }
    chunks: dict[str, list[str]] = {"stdout": [], "stderr": []}

    def emit(name: str, text: str) -> None:
        if not text:
            return
        if on_output is not None:
            on_output(name, text)
        if keep:
            chunks[name].append(text)

    with selectors.DefaultSelector() as sel:
        streams: dict[str, IO[bytes]] = {"stdout": proc.stdout, "stderr": proc.stderr}
        for name, stream in streams.items():
            sel.register(stream, selectors.EVENT_READ, name)

        while sel.get_map():
            for key, _ in sel.select():
                name = key.data
                data = os.read(key.fd, _READ_SIZE)
                if not data:
                    sel.unregister(key.fileobj)
                    emit(name, decoders[name].decode(b"", final=True))
                    continue
                emit(name, decoders[name].decode(data))

    return "".join(chunks["stdout"]), "".join(chunks["stderr"])


def format_command_line(argv: Sequence[str], max_size: int = BUFSIZE) -> str:
    """Render ``argv`` for display, cut to ``max_size`` with a "..." marker.

    Truncation only affects the returned string.
    """
    command = shlex.join(argv)
    if len(command) >= max_size:
        return command[: max_size - 1] + "..."
    return command


def log_program_output(
    result: SubprocessResult,
    out_level: str = "error",
    err_level: str = "error",
) -> None:
    """Log every captured stdout line, then every stderr line."""
    for line in result.stdout.splitlines():
        log_level(out_level, line)
    for line in result.stderr.splitlines():
        log_level(err_level, line)
