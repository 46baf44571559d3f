"""File-backed run state: progress log, last-branch marker, copies."""

from __future__ import annotations

import shutil
from datetime import datetime
from email.utils import format_datetime
from pathlib import Path

from ralph_loop.config import RunPaths

PROGRESS_TITLE = "# Ralph Progress Log"
PROGRESS_SEPARATOR = "---"


def progress_header(started_at: datetime | None = None) -> str:
    """Three-line header every fresh progress log starts with."""

    moment = started_at or datetime.now().astimezone()
    return f"{PROGRESS_TITLE}\nStarted: {format_datetime(moment)}\n{PROGRESS_SEPARATOR}\n"


class RunStateStore:
    """Owns the artifacts inside the run directory."""

    def __init__(self, paths: RunPaths) -> None:
        self.paths = paths

    def has_prd(self) -> bool:
        return self.paths.prd_file.is_file()

    def has_last_branch(self) -> bool:
        return self.paths.last_branch_file.is_file()

    def has_progress_log(self) -> bool:
        return self.paths.progress_file.is_file()

    def read_last_branch(self) -> str:
        try:
            return self.paths.last_branch_file.read_text("utf-8").strip()
        except OSError:
            return ""

    def write_last_branch(self, branch: str) -> None:
        self.paths.last_branch_file.write_text(branch, "utf-8")

    def init_progress_log(self, started_at: datetime | None = None) -> None:
        self.paths.progress_file.parent.mkdir(parents=True, exist_ok=True)
        self.paths.progress_file.write_text(progress_header(started_at), "utf-8")

    def copy_into(self, source: Path, target_dir: Path) -> Path:
        """Copy one file into `target_dir` under its base name, overwriting."""

        destination = target_dir / source.name
        shutil.copyfile(source, destination)
        return destination
