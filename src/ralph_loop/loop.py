"""Iteration loop: run the assistant until it reports completion."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from ralph_loop.backend.base import ToolRunError, ToolRunner, ToolRunRequest
from ralph_loop.config import RalphConfig, RunPaths

logger = logging.getLogger(__name__)

COMPLETION_MARKER = "<promise>COMPLETE</promise>"
ITERATION_PAUSE_SECONDS = 2.0
_RULE = "=" * 63


class LoopState(str, Enum):
    """Lifecycle of one loop invocation."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    EXHAUSTED = "exhausted"


class FatalRunError(RuntimeError):
    """Runner failure that must stop the loop."""


@dataclass(slots=True)
class LoopSummary:
    """Terminal state of the loop and how far it got."""

    state: LoopState
    iterations: int
    max_iterations: int

    @property
    def completed(self) -> bool:
        return self.state is LoopState.COMPLETED


def output_signals_completion(output: str) -> bool:
    return COMPLETION_MARKER in output


class IterationLoop:
    """Invokes the assistant up to `max_iterations` times, one at a time."""

    def __init__(  # noqa: PLR0913
        self,
        *,
        runner: ToolRunner,
        config: RalphConfig,
        paths: RunPaths,
        emit: Callable[[str], None] = print,
        pause_seconds: float | None = None,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        self.runner = runner
        self.config = config
        self.paths = paths
        self.emit = emit
        self.pause_seconds = ITERATION_PAUSE_SECONDS if pause_seconds is None else pause_seconds
        self.sleep = sleep or time.sleep
        self.state = LoopState.IDLE
        self.iteration = 0

    def run(self) -> LoopSummary:
        tool = self.config.tool
        max_iterations = self.config.max_iterations
        self.emit(f"Starting Ralph - Tool: {tool} - Max iterations: {max_iterations}")

        for iteration in range(1, max_iterations + 1):
            self.state = LoopState.RUNNING
            self.iteration = iteration
            self._emit_banner(iteration)

            result = self.runner.run(
                ToolRunRequest(
                    run_dir=self.paths.run_dir,
                    executable=tool,
                    args=self.config.args_for(tool),
                    input_file=self.config.prompt_file,
                ),
            )
            if result.error is not None:
                self._handle_runner_error(result.error, iteration)

            if output_signals_completion(result.output):
                self.state = LoopState.COMPLETED
                self.emit("")
                self.emit("Ralph completed all tasks!")
                self.emit(f"Completed at iteration {iteration} of {max_iterations}")
                return self._summary()

            self.emit(f"Iteration {iteration} complete. Continuing...")
            if iteration < max_iterations:
                self.sleep(self.pause_seconds)

        self.state = LoopState.EXHAUSTED
        self.emit("")
        self.emit(
            f"Ralph reached max iterations ({max_iterations}) without completing all tasks.",
        )
        self.emit(f"Check {self.paths.progress_file} for status.")
        return self._summary()

    def _handle_runner_error(self, error: ToolRunError, iteration: int) -> None:
        if not error.recoverable:
            raise FatalRunError(f"Iteration {iteration} failed: {error}") from error
        # Already visible to the operator through the forwarded tool output.
        logger.info("Iteration %d: %s; continuing", iteration, error)

    def _emit_banner(self, iteration: int) -> None:
        self.emit("")
        self.emit(_RULE)
        self.emit(
            f"  Ralph Iteration {iteration} of {self.config.max_iterations} ({self.config.tool})",
        )
        self.emit(_RULE)

    def _summary(self) -> LoopSummary:
        return LoopSummary(
            state=self.state,
            iterations=self.iteration,
            max_iterations=self.config.max_iterations,
        )
