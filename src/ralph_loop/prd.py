"""Task descriptor (`prd.json`) contract."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class UserStory:
    """One unit of work the assistant picks up across iterations."""

    id: str
    title: str
    description: str = ""
    acceptance_criteria: list[str] = field(default_factory=list)
    priority: int = 0
    passes: bool = False
    notes: str = ""

    def to_json(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "acceptanceCriteria": list(self.acceptance_criteria),
            "priority": self.priority,
            "passes": self.passes,
            "notes": self.notes,
        }


@dataclass(slots=True)
class Prd:
    """Task descriptor; only `branch_name` drives run bookkeeping."""

    project: str
    branch_name: str
    description: str = ""
    user_stories: list[UserStory] = field(default_factory=list)

    def to_json(self) -> dict[str, Any]:
        return {
            "project": self.project,
            "branchName": self.branch_name,
            "description": self.description,
            "userStories": [story.to_json() for story in self.user_stories],
        }


def write_prd(path: Path, prd: Prd) -> None:
    """Persist task descriptor with the camelCase keys assistants expect."""

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(prd.to_json(), ensure_ascii=False, indent=2) + "\n", "utf-8")


def read_prd(path: Path) -> Prd:
    """Deserialize and validate task descriptor."""

    raw = json.loads(path.read_text("utf-8"))
    if not isinstance(raw, dict):
        raise TypeError(f"Expected JSON object in {path}")

    project = _field(raw, "project", "")
    branch_name = _field(raw, "branchName", "")
    description = _field(raw, "description", "")
    raw_stories = _field(raw, "userStories", [])
    if not isinstance(project, str):
        raise TypeError("prd.project must be a string")
    if not isinstance(branch_name, str):
        raise TypeError("prd.branchName must be a string")
    if not isinstance(description, str):
        raise TypeError("prd.description must be a string")
    if not isinstance(raw_stories, list):
        raise TypeError("prd.userStories must be an array")

    return Prd(
        project=project,
        branch_name=branch_name,
        description=description,
        user_stories=[_read_story(item) for item in raw_stories],
    )


def _read_story(item: object) -> UserStory:
    if not isinstance(item, dict):
        raise TypeError("prd.userStories entry must be an object")
    story_id = _field(item, "id", "")
    title = _field(item, "title", "")
    criteria = _field(item, "acceptanceCriteria", [])
    priority = _field(item, "priority", 0)
    if not isinstance(story_id, str) or not isinstance(title, str):
        raise TypeError("prd story id and title must be strings")
    if not isinstance(criteria, list):
        raise TypeError("prd story acceptanceCriteria must be an array")
    if isinstance(priority, bool) or not isinstance(priority, int):
        raise TypeError("prd story priority must be an integer")
    return UserStory(
        id=story_id,
        title=title,
        description=str(_field(item, "description", "")),
        acceptance_criteria=[str(entry) for entry in criteria],
        priority=priority,
        passes=bool(_field(item, "passes", False)),
        notes=str(_field(item, "notes", "")),
    )


def _field(raw: dict[str, Any], key: str, default: Any) -> Any:
    # JSON null reads as the zero value, like an absent key.
    value = raw.get(key)
    return default if value is None else value


def read_branch_name(path: Path) -> str:
    """Return the descriptor's branch name, or "" when it cannot be read."""

    try:
        return read_prd(path).branch_name
    except (OSError, ValueError, TypeError) as error:
        logger.debug("Ignoring unreadable task descriptor %s: %s", path, error)
        return ""
