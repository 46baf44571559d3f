"""Backend interface for running the assistant once per iteration."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol


class ToolRunError(RuntimeError):
    """Tool invocation error with a hint on whether the loop may continue."""

    def __init__(self, message: str, *, recoverable: bool) -> None:
        super().__init__(message)
        self.recoverable = recoverable


@dataclass(slots=True)
class ToolRunRequest:
    """Inputs required to run the assistant for one iteration."""

    run_dir: Path
    executable: str
    args: list[str] = field(default_factory=list)
    input_file: str = "prompt.md"


@dataclass(slots=True)
class ToolRunResult:
    """Captured output and exit outcome of one assistant run."""

    output: str
    exit_code: int | None
    error: ToolRunError | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.exit_code == 0


class ToolRunner(Protocol):
    """Protocol implemented by assistant runners."""

    def run(self, request: ToolRunRequest) -> ToolRunResult:
        """Run the assistant once and return everything it printed."""
