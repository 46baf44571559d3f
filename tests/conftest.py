"""Shared test fixtures."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
import yaml

from ralph_loop.config import RunPaths
from ralph_loop.state import RunStateStore

ECHO_AGENT_ARGS = ["-m", "ralph_loop.backend.echo_agent"]


@pytest.fixture()
def paths(tmp_path: Path) -> RunPaths:
    run_paths = RunPaths.for_project(tmp_path)
    run_paths.run_dir.mkdir(parents=True)
    return run_paths


@pytest.fixture()
def store(paths: RunPaths) -> RunStateStore:
    return RunStateStore(paths)


@pytest.fixture()
def no_pause(monkeypatch) -> None:
    """Drop the pause between iterations."""
    monkeypatch.setattr("ralph_loop.loop.ITERATION_PAUSE_SECONDS", 0.0)


def _write_echo_agent_config(
    paths: RunPaths,
    *,
    max_iterations: int = 3,
    complete_on: int = 0,
    exit_code: int = 0,
    auto_archive: bool = True,
) -> Path:
    """Point the config at the local echo agent, run via the current interpreter."""

    counter_file = paths.project_root / "invocations.txt"
    args = [
        *ECHO_AGENT_ARGS,
        "--counter-file",
        str(counter_file),
        "--complete-on",
        str(complete_on),
        "--exit-code",
        str(exit_code),
    ]
    payload = {
        "tool": sys.executable,
        "max_iterations": max_iterations,
        "auto_archive": auto_archive,
        "prompt_file": "prompt.md",
        "tool_args": {sys.executable: args},
    }
    paths.config_file.write_text(yaml.safe_dump(payload), "utf-8")
    (paths.run_dir / "prompt.md").write_text("Implement the next story.\n", "utf-8")
    return counter_file


@pytest.fixture()
def echo_agent_config():
    """Factory that points ralph/config.yaml at the local echo agent."""
    return _write_echo_agent_config
