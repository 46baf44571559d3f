"""Controllers for the ralph CLI commands."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from ralph_loop.archiver import Archiver
from ralph_loop.backend import SubprocessToolRunner, ToolRunner
from ralph_loop.config import SUPPORTED_TOOLS, ConfigError, RalphConfig, RunPaths
from ralph_loop.loop import IterationLoop, LoopSummary
from ralph_loop.provisioner import ConfirmOverwrite, TemplateProvisioner, prompt_overwrite
from ralph_loop.state import RunStateStore
from ralph_loop.templates import TemplateBundle

logger = logging.getLogger(__name__)

TOOL_CHOICES = "|".join(SUPPORTED_TOOLS)
INIT_HINT = f"Run 'ralph --init --tool=<{TOOL_CHOICES}>' first to initialize"


class RalphCliError(RuntimeError):
    """Fatal startup error; the CLI prints it to stderr and exits with 1."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint

    def render(self) -> str:
        message = str(self)
        return f"{message}\n{self.hint}" if self.hint else message


@dataclass(slots=True)
class InitCommand:
    """CLI input for scaffolding a project."""

    project_root: Path
    tool: str | None


@dataclass(slots=True)
class RunCommand:
    """CLI input for the iteration loop."""

    project_root: Path
    max_iterations: int | None = None


@dataclass(slots=True)
class RunResult:
    """Loop outcome mapped to a process exit code."""

    summary: LoopSummary

    @property
    def exit_code(self) -> int:
        return 0 if self.summary.completed else 1


class RalphCliController:
    """Coordinates init and run operations for the click layer."""

    def __init__(
        self,
        *,
        emit: Callable[[str], None],
        runner_factory: Callable[[], ToolRunner] = SubprocessToolRunner,
        confirm: ConfirmOverwrite = prompt_overwrite,
    ) -> None:
        self.emit = emit
        self.runner_factory = runner_factory
        self.confirm = confirm

    def init(self, command: InitCommand) -> list[Path]:
        tool = (command.tool or "").strip()
        if not tool:
            raise RalphCliError(
                "--tool flag is required for --init",
                hint=f"Usage: ralph --init --tool=<{TOOL_CHOICES}>",
            )
        if tool not in SUPPORTED_TOOLS:
            quoted = ", ".join(f"'{name}'" for name in SUPPORTED_TOOLS)
            raise RalphCliError(f"Invalid tool '{tool}'. Must be one of {quoted}.")

        provisioner = TemplateProvisioner(
            paths=RunPaths.for_project(command.project_root),
            confirm=self.confirm,
            emit=self.emit,
        )
        return provisioner.provision(TemplateBundle.for_tool(tool))

    def run(self, command: RunCommand) -> RunResult:
        paths = RunPaths.for_project(command.project_root)
        config = _load_config(paths, max_iterations=command.max_iterations)

        store = RunStateStore(paths)
        try:
            lines = Archiver(store).prepare_run(auto_archive=config.auto_archive)
        except OSError as error:
            raise RalphCliError(
                f"Cannot prepare run directory {paths.run_dir}: {error}",
            ) from error
        for line in lines:
            self.emit(line)

        loop = IterationLoop(
            runner=self.runner_factory(),
            config=config,
            paths=paths,
            emit=self.emit,
        )
        summary = loop.run()
        logger.debug(
            "Loop finished: %s after %d iteration(s)",
            summary.state.value,
            summary.iterations,
        )
        return RunResult(summary=summary)


def _load_config(paths: RunPaths, *, max_iterations: int | None) -> RalphConfig:
    if not paths.config_file.is_file():
        raise RalphCliError(
            f"{paths.config_file.parent.name}/{paths.config_file.name} not found",
            hint=INIT_HINT,
        )
    try:
        config = RalphConfig.from_file(paths.config_file).with_max_iterations(max_iterations)
        config.validate()
    except ConfigError as error:
        raise RalphCliError(f"Error loading config: {error}", hint=INIT_HINT) from error
    return config
