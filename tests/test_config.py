from __future__ import annotations

from pathlib import Path

import allure
import pytest

from ralph_loop.config import ConfigError, RalphConfig, RunPaths

pytestmark = [
    allure.epic("Ralph Loop"),
    allure.feature("Configuration"),
]

_VALID_CONFIG = """\
tool: claude
max_iterations: 5
auto_archive: true
prompt_file: prompt.md
tool_args:
  claude:
    - --arg1
    - --arg2
"""


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(text, "utf-8")
    return path


def test_from_file_reads_every_field(tmp_path: Path) -> None:
    config = RalphConfig.from_file(_write(tmp_path, _VALID_CONFIG))

    assert config.tool == "claude"
    assert config.max_iterations == 5
    assert config.auto_archive is True
    assert config.prompt_file == "prompt.md"
    assert config.args_for("claude") == ["--arg1", "--arg2"]


def test_from_file_applies_defaults_for_missing_keys(tmp_path: Path) -> None:
    config = RalphConfig.from_file(_write(tmp_path, "tool: amp\n"))

    assert config.max_iterations == 10
    assert config.auto_archive is True
    assert config.prompt_file == "prompt.md"
    assert config.args_for("amp") == []


def test_from_file_rejects_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Cannot read"):
        RalphConfig.from_file(tmp_path / "absent.yaml")


def test_from_file_rejects_invalid_yaml(tmp_path: Path) -> None:
    path = _write(tmp_path, "invalid: yaml: content:\n  bad indentation")

    with pytest.raises(ConfigError, match="Invalid YAML"):
        RalphConfig.from_file(path)


def test_from_file_rejects_non_mapping_document(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="mapping"):
        RalphConfig.from_file(_write(tmp_path, "- claude\n- amp\n"))


@pytest.mark.parametrize(
    ("text", "message"),
    [
        ("tool: claude\nmax_iterations: many\n", "max_iterations"),
        ("tool: claude\nauto_archive: sometimes\n", "auto_archive"),
        ("tool: claude\ntool_args: [--x]\n", "tool_args"),
        ("tool: claude\ntool_args:\n  claude: --x\n", "tool_args.claude"),
    ],
)
def test_from_file_rejects_wrongly_typed_fields(tmp_path: Path, text: str, message: str) -> None:
    with pytest.raises(ConfigError, match=message):
        RalphConfig.from_file(_write(tmp_path, text))


def test_config_error_is_a_value_error() -> None:
    assert issubclass(ConfigError, ValueError)


def test_validate_requires_tool() -> None:
    with pytest.raises(ConfigError, match="config.tool"):
        RalphConfig(tool="").validate()


def test_validate_requires_positive_max_iterations() -> None:
    with pytest.raises(ConfigError, match="max_iterations"):
        RalphConfig(tool="claude", max_iterations=0).validate()


def test_with_max_iterations_only_applies_positive_override() -> None:
    config = RalphConfig(tool="claude", max_iterations=10)

    assert config.with_max_iterations(3).max_iterations == 3
    assert config.with_max_iterations(0) is config
    assert config.with_max_iterations(None) is config


def test_run_paths_resolve_inside_ralph_directory(tmp_path: Path) -> None:
    paths = RunPaths.for_project(tmp_path)

    assert paths.run_dir == tmp_path / "ralph"
    assert paths.config_file == tmp_path / "ralph" / "config.yaml"
    assert paths.prd_file == tmp_path / "ralph" / "prd.json"
    assert paths.progress_file == tmp_path / "ralph" / "progress.txt"
    assert paths.archive_dir == tmp_path / "ralph" / "archive"
    assert paths.last_branch_file == tmp_path / "ralph" / ".last-branch"
