"""Subprocess-based runner that tees assistant output to the terminal."""

from __future__ import annotations

import subprocess
import sys
from contextlib import suppress
from typing import IO

from ralph_loop.backend.base import ToolRunError, ToolRunRequest, ToolRunResult
from ralph_loop.backend.tee import (
    CaptureBuffer,
    TeeSink,
    TerminalDestination,
    start_forwarding,
)


class SubprocessToolRunner:
    """Spawn the assistant with the prompt on stdin and capture what it prints.

    stdout and stderr are forwarded live to the terminal while a copy of both
    is collected into one buffer, interleaved in arrival order.
    """

    def __init__(self, *, stdout: IO[str] | None = None, stderr: IO[str] | None = None) -> None:
        self._stdout = stdout
        self._stderr = stderr

    def run(self, request: ToolRunRequest) -> ToolRunResult:
        stdout = self._stdout or sys.stdout
        stderr = self._stderr or sys.stderr

        input_path = request.run_dir / request.input_file
        try:
            prompt = input_path.read_bytes()
        except OSError as error:
            message = f"Error reading {request.input_file}: {error}"
            _report(stderr, message)
            return ToolRunResult(
                output="",
                exit_code=None,
                error=ToolRunError(message, recoverable=True),
            )

        try:
            process = subprocess.Popen(  # noqa: S603
                [request.executable, *request.args],
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except FileNotFoundError:
            message = f"Tool command not found: {request.executable}"
            _report(stderr, message)
            return ToolRunResult(
                output="",
                exit_code=None,
                error=ToolRunError(message, recoverable=True),
            )
        except OSError as error:
            message = f"Tool failed to start: {error}"
            _report(stderr, message)
            return ToolRunResult(
                output="",
                exit_code=None,
                error=ToolRunError(message, recoverable=True),
            )

        capture = CaptureBuffer()
        forwarders = [
            start_forwarding(
                process.stdout,
                TeeSink(TerminalDestination(stdout), capture),
                name="ralph-stdout",
            ),
            start_forwarding(
                process.stderr,
                TeeSink(TerminalDestination(stderr), capture),
                name="ralph-stderr",
            ),
        ]
        _feed_stdin(process, prompt)
        exit_code = process.wait()
        for forwarder in forwarders:
            forwarder.join()

        error = None
        if exit_code != 0:
            error = ToolRunError(
                f"{request.executable} exited with status {exit_code}",
                recoverable=True,
            )
        return ToolRunResult(output=capture.text(), exit_code=exit_code, error=error)


def _feed_stdin(process: subprocess.Popen[bytes], payload: bytes) -> None:
    if process.stdin is None:
        return
    # The tool may exit or close stdin before reading the whole prompt.
    with suppress(BrokenPipeError):
        process.stdin.write(payload)
    with suppress(BrokenPipeError):
        process.stdin.close()


def _report(stream: IO[str], message: str) -> None:
    stream.write(message + "\n")
    stream.flush()
