"""Rotation of previous run artifacts when the tracked branch changes."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

from ralph_loop.prd import read_branch_name
from ralph_loop.state import RunStateStore

logger = logging.getLogger(__name__)

BRANCH_PREFIX = "ralph/"


@dataclass(slots=True)
class ArchiveResult:
    """What one rotation attempt did."""

    rotated: bool
    archive_dir: Path | None = None
    copied: list[Path] = field(default_factory=list)
    lines: list[str] = field(default_factory=list)


def archive_folder_name(last_branch: str, today: date) -> str:
    """Dated folder name for the run being rotated out."""

    return f"{today.isoformat()}-{last_branch.removeprefix(BRANCH_PREFIX)}"


class Archiver:
    """Moves the previous run into `archive/` and resets the progress log."""

    def __init__(self, store: RunStateStore) -> None:
        self.store = store

    def rotate(
        self,
        *,
        current_branch: str,
        last_branch: str,
        today: date | None = None,
    ) -> ArchiveResult:
        if not current_branch or not last_branch or current_branch == last_branch:
            return ArchiveResult(rotated=False)

        paths = self.store.paths
        archive_dir = paths.archive_dir / archive_folder_name(last_branch, today or date.today())
        result = ArchiveResult(rotated=True)
        result.lines.append(f"Archiving previous run: {last_branch}")

        try:
            archive_dir.mkdir(parents=True, exist_ok=True)
        except OSError as error:
            logger.warning("Failed to create archive folder %s: %s", archive_dir, error)
        else:
            result.archive_dir = archive_dir
            for source in (paths.prd_file, paths.progress_file):
                try:
                    result.copied.append(self.store.copy_into(source, archive_dir))
                except OSError as error:
                    logger.warning("Failed to archive %s: %s", source.name, error)
            result.lines.append(f"   Archived to: {archive_dir}")

        self.store.init_progress_log()
        return result

    def prepare_run(self, *, auto_archive: bool = True, today: date | None = None) -> list[str]:
        """Rotate if needed, record the current branch, ensure a progress log.

        Runs once per invocation, before the first iteration.
        """

        lines: list[str] = []
        current_branch = read_branch_name(self.store.paths.prd_file) if self.store.has_prd() else ""

        if auto_archive and current_branch and self.store.has_last_branch():
            result = self.rotate(
                current_branch=current_branch,
                last_branch=self.store.read_last_branch(),
                today=today,
            )
            lines.extend(result.lines)

        if current_branch:
            self.store.write_last_branch(current_branch)

        if not self.store.has_progress_log():
            self.store.init_progress_log()
        return lines
