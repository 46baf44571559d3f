from __future__ import annotations

from pathlib import Path

import allure
import pytest
from click.testing import CliRunner

from ralph_loop.config import RalphConfig, RunPaths
from ralph_loop.main import _effective_max_iterations, ralph
from ralph_loop.prd import Prd, write_prd

pytestmark = [
    allure.epic("Ralph Loop"),
    allure.feature("Command Line"),
]


@pytest.fixture()
def project(tmp_path: Path, monkeypatch) -> RunPaths:
    monkeypatch.chdir(tmp_path)
    return RunPaths.for_project(tmp_path)


def test_init_requires_tool(project: RunPaths) -> None:
    result = CliRunner().invoke(ralph, ["--init"])

    assert result.exit_code == 1
    assert "--tool flag is required for --init" in result.output
    assert "ralph --init --tool=<amp|claude|copilot>" in result.output
    assert not project.run_dir.exists()


def test_init_rejects_unknown_tool(project: RunPaths) -> None:
    result = CliRunner().invoke(ralph, ["--init", "--tool", "gpt"])

    assert result.exit_code == 1
    assert "Invalid tool 'gpt'" in result.output
    assert not project.run_dir.exists()


def test_init_scaffolds_claude_project(project: RunPaths) -> None:
    result = CliRunner().invoke(ralph, ["--init", "--tool=claude"])

    assert result.exit_code == 0, result.output
    skills = project.project_root / ".claude" / "skills"
    assert "✓ Created ralph/config.yaml" in result.output
    assert "✓ Created ralph/prompt.md" in result.output
    assert "✓ Created .claude/skills/prd-generator.md" in result.output
    assert "✓ Created .claude/skills/prd-converter.md" in result.output
    assert "Ralph initialization complete!" in result.output
    assert (skills / "prd-generator.md").read_text("utf-8").startswith("---\nname: prd-generator")
    assert "<promise>COMPLETE</promise>" in (project.run_dir / "prompt.md").read_text("utf-8")

    config = RalphConfig.from_file(project.config_file)
    config.validate()
    assert config.tool == "claude"


@pytest.mark.parametrize("tool", ["amp", "copilot"])
def test_init_puts_skills_under_github_for_other_tools(project: RunPaths, tool: str) -> None:
    result = CliRunner().invoke(ralph, ["--init", "--tool", tool])

    assert result.exit_code == 0, result.output
    assert (project.project_root / ".github" / "skills" / "prd-converter.md").exists()
    assert RalphConfig.from_file(project.config_file).tool == tool


def test_init_keeps_existing_files_unless_confirmed(project: RunPaths) -> None:
    runner = CliRunner()
    runner.invoke(ralph, ["--init", "--tool=claude"])
    project.config_file.write_text("tool: amp\n", "utf-8")
    (project.run_dir / "prompt.md").write_text("custom prompt", "utf-8")

    result = runner.invoke(ralph, ["--init", "--tool=claude"], input=" YES \nn\n\nnope\n")

    assert result.exit_code == 0, result.output
    assert "config.yaml already exists. Overwrite? (y/n)" in result.output
    assert "tool: claude" in project.config_file.read_text("utf-8")
    assert (project.run_dir / "prompt.md").read_text("utf-8") == "custom prompt"
    assert "Skipped prompt.md" in result.output
    assert "Skipped prd-generator.md" in result.output
    assert "Skipped prd-converter.md" in result.output


def test_init_treats_closed_input_as_refusal(project: RunPaths) -> None:
    runner = CliRunner()
    runner.invoke(ralph, ["--init", "--tool=amp"])
    project.config_file.write_text("tool: copilot\n", "utf-8")

    result = runner.invoke(ralph, ["--init", "--tool=amp"], input="")

    assert result.exit_code == 0, result.output
    assert project.config_file.read_text("utf-8") == "tool: copilot\n"


def test_run_without_config_points_at_init(project: RunPaths) -> None:
    result = CliRunner().invoke(ralph, [])

    assert result.exit_code == 1
    assert "ralph/config.yaml not found" in result.output
    assert "Run 'ralph --init --tool=<amp|claude|copilot>' first" in result.output


def test_run_with_broken_config_fails(project: RunPaths) -> None:
    project.run_dir.mkdir()
    project.config_file.write_text("tool: claude\nmax_iterations: lots\n", "utf-8")

    result = CliRunner().invoke(ralph, [])

    assert result.exit_code == 1
    assert "Error loading config" in result.output


def test_run_completes_when_agent_prints_marker(
    project: RunPaths,
    no_pause,
    echo_agent_config,
) -> None:
    project.run_dir.mkdir()
    counter = echo_agent_config(project, max_iterations=3, complete_on=2)

    result = CliRunner().invoke(ralph, [])

    assert result.exit_code == 0, result.output
    assert counter.read_text("utf-8") == "2"
    assert "Ralph Iteration 1 of 3" in result.output
    assert "Implement the next story." in result.output
    assert "Completed at iteration 2 of 3" in result.output
    assert project.progress_file.read_text("utf-8").startswith("# Ralph Progress Log\n")


def test_run_exhausts_and_exits_with_failure(
    project: RunPaths,
    no_pause,
    echo_agent_config,
) -> None:
    project.run_dir.mkdir()
    counter = echo_agent_config(project, max_iterations=2)

    result = CliRunner().invoke(ralph, [])

    assert result.exit_code == 1
    assert counter.read_text("utf-8") == "2"
    assert "Ralph reached max iterations (2) without completing all tasks." in result.output
    assert f"Check {project.progress_file} for status." in result.output


def test_run_continues_past_failing_agent(
    project: RunPaths,
    no_pause,
    echo_agent_config,
) -> None:
    project.run_dir.mkdir()
    counter = echo_agent_config(project, max_iterations=3, complete_on=3, exit_code=1)

    result = CliRunner().invoke(ralph, [])

    assert result.exit_code == 0, result.output
    assert counter.read_text("utf-8") == "3"


@pytest.mark.parametrize(
    ("args", "expected"),
    [
        (["--max-iterations", "1"], "1"),
        (["1"], "1"),
        (["--max-iterations", "2", "1"], "2"),
        (["not-a-number"], "4"),
    ],
)
def test_run_iteration_overrides(
    project: RunPaths,
    no_pause,
    echo_agent_config,
    args: list[str],
    expected: str,
) -> None:
    project.run_dir.mkdir()
    counter = echo_agent_config(project, max_iterations=4)

    result = CliRunner().invoke(ralph, args)

    assert result.exit_code == 1
    assert counter.read_text("utf-8") == expected


def test_run_archives_previous_branch(
    project: RunPaths,
    no_pause,
    echo_agent_config,
) -> None:
    project.run_dir.mkdir()
    echo_agent_config(project, max_iterations=1, complete_on=1)
    write_prd(project.prd_file, Prd(project="Demo", branch_name="ralph/new-feature"))
    project.last_branch_file.write_text("ralph/old-feature\n", "utf-8")
    project.progress_file.write_text("# Ralph Progress Log\nStarted: x\n---\n## old\n", "utf-8")

    result = CliRunner().invoke(ralph, [])

    assert result.exit_code == 0, result.output
    assert "Archiving previous run: ralph/old-feature" in result.output
    archived = list(project.archive_dir.glob("*-old-feature"))
    assert len(archived) == 1
    assert "## old" in (archived[0] / "progress.txt").read_text("utf-8")
    assert "## old" not in project.progress_file.read_text("utf-8")
    assert project.last_branch_file.read_text("utf-8") == "ralph/new-feature"


def test_effective_max_iterations_prefers_flag() -> None:
    assert _effective_max_iterations(5, "9") == 5
    assert _effective_max_iterations(0, "9") == 9
    assert _effective_max_iterations(0, "x") is None
    assert _effective_max_iterations(0, None) is None


def test_run_ignores_extra_positional_counts(
    project: RunPaths,
    no_pause,
    echo_agent_config,
) -> None:
    project.run_dir.mkdir()
    counter = echo_agent_config(project, max_iterations=4)

    result = CliRunner().invoke(ralph, ["1", "4"])

    assert result.exit_code == 1
    assert "unexpected extra argument" not in result.output
    assert counter.read_text("utf-8") == "1"
