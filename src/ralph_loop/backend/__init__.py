"""Assistant runner implementations."""

from ralph_loop.backend.base import ToolRunError, ToolRunner, ToolRunRequest, ToolRunResult
from ralph_loop.backend.subprocess_backend import SubprocessToolRunner
from ralph_loop.backend.tee import CaptureBuffer, TeeSink

__all__ = [
    "CaptureBuffer",
    "SubprocessToolRunner",
    "TeeSink",
    "ToolRunError",
    "ToolRunRequest",
    "ToolRunResult",
    "ToolRunner",
]
