"""Scaffolding of the run directory and assistant skill files."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

import click

from ralph_loop.config import RunPaths
from ralph_loop.templates import TemplateBundle

logger = logging.getLogger(__name__)

ConfirmOverwrite = Callable[[Path], bool]


class ProvisionError(RuntimeError):
    """A scaffold file or directory could not be written."""


def is_affirmative(answer: str) -> bool:
    return answer.strip().lower() in {"y", "yes"}


def prompt_overwrite(path: Path) -> bool:
    """Ask the operator before replacing an existing file."""

    try:
        answer = click.prompt(
            f"{path.name} already exists. Overwrite? (y/n)",
            default="",
            show_default=False,
        )
    except click.Abort:
        return False
    return is_affirmative(answer)


class TemplateProvisioner:
    """Writes config, prompt and skill templates for one tool."""

    def __init__(
        self,
        *,
        paths: RunPaths,
        confirm: ConfirmOverwrite = prompt_overwrite,
        emit: Callable[[str], None] = print,
    ) -> None:
        self.paths = paths
        self.confirm = confirm
        self.emit = emit

    def provision(self, bundle: TemplateBundle) -> list[Path]:
        """Write every template, returning the files actually written."""

        self.emit(f"Initializing Ralph for tool: {bundle.tool}\n")
        _make_dir(self.paths.run_dir)

        written: list[Path] = []
        self._write(self.paths.config_file, bundle.config, written)
        self._write(self.paths.run_dir / "prompt.md", bundle.prompt, written)

        skills_dir = self.paths.project_root / bundle.skills_dir
        _make_dir(skills_dir)
        self._write(skills_dir / "prd-generator.md", bundle.prd_generator, written)
        self._write(skills_dir / "prd-converter.md", bundle.prd_converter, written)

        self.emit("\n✅ Ralph initialization complete!")
        self.emit("\nNext steps:")
        self.emit(f"1. Create your PRD in {self._relative(self.paths.prd_file)}")
        self.emit("2. Run: ralph")
        return written

    def _write(self, path: Path, content: str, written: list[Path]) -> None:
        if path.exists() and not self.confirm(path):
            self.emit(f"Skipped {path.name}")
            return
        try:
            path.write_text(content, "utf-8")
        except OSError as error:
            raise ProvisionError(f"Error writing {path.name}: {error}") from error
        logger.debug("Wrote template %s", path)
        written.append(path)
        self.emit(f"✓ Created {self._relative(path)}")

    def _relative(self, path: Path) -> str:
        try:
            return path.relative_to(self.paths.project_root).as_posix()
        except ValueError:
            return str(path)


def _make_dir(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as error:
        raise ProvisionError(f"Error creating {path}: {error}") from error
