"""Run configuration and resolved run-directory paths."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

SUPPORTED_TOOLS = ("amp", "claude", "copilot")
RUN_DIR_NAME = "ralph"
DEFAULT_MAX_ITERATIONS = 10
DEFAULT_PROMPT_FILE = "prompt.md"


class ConfigError(ValueError):
    """Configuration file is missing, unreadable, or malformed."""


@dataclass(frozen=True, slots=True)
class RunPaths:
    """Every on-disk location used by one run, resolved once at startup."""

    project_root: Path
    run_dir: Path
    config_file: Path
    prd_file: Path
    progress_file: Path
    archive_dir: Path
    last_branch_file: Path

    @classmethod
    def for_project(cls, project_root: Path) -> RunPaths:
        run_dir = project_root / RUN_DIR_NAME
        return cls(
            project_root=project_root,
            run_dir=run_dir,
            config_file=run_dir / "config.yaml",
            prd_file=run_dir / "prd.json",
            progress_file=run_dir / "progress.txt",
            archive_dir=run_dir / "archive",
            last_branch_file=run_dir / ".last-branch",
        )


@dataclass(frozen=True, slots=True)
class RalphConfig:
    """Settings loaded from `ralph/config.yaml`; immutable for a run."""

    tool: str
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    auto_archive: bool = True
    prompt_file: str = DEFAULT_PROMPT_FILE
    tool_args: dict[str, tuple[str, ...]] = field(default_factory=dict)

    @classmethod
    def from_file(cls, path: Path) -> RalphConfig:
        """Load configuration from a YAML document."""

        try:
            text = path.read_text("utf-8")
        except OSError as error:
            raise ConfigError(f"Cannot read {path}: {error}") from error
        try:
            raw = yaml.safe_load(text)
        except yaml.YAMLError as error:
            raise ConfigError(f"Invalid YAML in {path}: {error}") from error
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ConfigError(f"Expected a mapping at the top of {path}")
        return cls.from_mapping(raw)

    @classmethod
    def from_mapping(cls, raw: dict[str, Any]) -> RalphConfig:
        tool = raw.get("tool", "")
        if not isinstance(tool, str):
            raise ConfigError("config.tool must be a string")

        max_iterations = raw.get("max_iterations", DEFAULT_MAX_ITERATIONS)
        if isinstance(max_iterations, bool) or not isinstance(max_iterations, int):
            raise ConfigError("config.max_iterations must be an integer")

        auto_archive = raw.get("auto_archive", True)
        if not isinstance(auto_archive, bool):
            raise ConfigError("config.auto_archive must be a boolean")

        prompt_file = raw.get("prompt_file", DEFAULT_PROMPT_FILE)
        if not isinstance(prompt_file, str):
            raise ConfigError("config.prompt_file must be a string")

        return cls(
            tool=tool.strip(),
            max_iterations=max_iterations,
            auto_archive=auto_archive,
            prompt_file=prompt_file.strip(),
            tool_args=_parse_tool_args(raw.get("tool_args")),
        )

    def validate(self) -> None:
        """Raise configuration error if the loaded values cannot drive a run."""

        if not self.tool:
            raise ConfigError("config.tool must be set, for example: tool: claude")
        if self.max_iterations < 1:
            raise ConfigError("config.max_iterations must be >= 1.")
        if not self.prompt_file:
            raise ConfigError("config.prompt_file must be a non-empty file name.")

    def with_max_iterations(self, override: int | None) -> RalphConfig:
        if override is None or override <= 0:
            return self
        return replace(self, max_iterations=override)

    def args_for(self, tool: str) -> list[str]:
        return list(self.tool_args.get(tool, ()))


def _parse_tool_args(value: object) -> dict[str, tuple[str, ...]]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError("config.tool_args must be a mapping of tool name to argument list")

    parsed: dict[str, tuple[str, ...]] = {}
    for tool, args in value.items():
        if args is None:
            parsed[str(tool)] = ()
            continue
        if not isinstance(args, list):
            raise ConfigError(f"config.tool_args.{tool} must be a list")
        parsed[str(tool)] = tuple(str(arg) for arg in args)
    return parsed
