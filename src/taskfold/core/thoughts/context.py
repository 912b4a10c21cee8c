"""
Project context for thought processing.

A snapshot of the surrounding project documents, built fresh for every
processing run so that edits to the roadmap or decisions are always seen.
"""

import logging
import re
from collections.abc import Iterable
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from taskfold.core.errors import StorageIOError
from taskfold.core.tasks.models import Task

logger = logging.getLogger(__name__)

ROADMAP_FILENAME = "ROADMAP.md"
DECISIONS_FILENAME = "DECISIONS.md"
STATUS_FILENAME = "STATUS.md"

ROADMAP_CHARS = 2000
STATUS_CHARS = 1000

_ADR_HEADING = re.compile(r"^##\s+(ADR-\d+:.*?)\s*$", re.MULTILINE)


@dataclass
class TaskSummary:
    """Compact view of an existing task."""

    id: str
    title: str
    status: str
    priority: str


@dataclass
class ProjectContext:
    """Existing tasks plus excerpts of the project's planning documents."""

    tasks: list[TaskSummary] = field(default_factory=list)
    roadmap: str = ""
    decisions: list[str] = field(default_factory=list)
    status: str = ""

    @classmethod
    def build(cls, project_root: Path, tasks: Iterable[Task] = ()) -> "ProjectContext":
        """
        Read the planning documents under ``project_root``.

        Missing documents leave their fields empty.

        Raises:
            StorageIOError: If a document exists but cannot be read
        """
        root = Path(project_root)
        decisions_text = _read_optional(root / DECISIONS_FILENAME)
        return cls(
            tasks=[
                TaskSummary(t.id, t.title, t.status.value, t.priority.value) for t in tasks
            ],
            roadmap=_read_optional(root / ROADMAP_FILENAME)[:ROADMAP_CHARS],
            decisions=_ADR_HEADING.findall(decisions_text),
            status=_read_optional(root / STATUS_FILENAME)[:STATUS_CHARS],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "tasks": [asdict(t) for t in self.tasks],
            "roadmap": self.roadmap,
            "decisions": list(self.decisions),
            "status": self.status,
        }


def _read_optional(path: Path) -> str:
    if not path.is_file():
        logger.debug("No %s in project", path.name)
        return ""
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise StorageIOError("read", path, e) from e
