"""
Data models for thought processing.

Candidates and analyses are ephemeral, produced fresh on every extraction
call and never persisted. Notes and archive entries describe files on disk.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from taskfold.core.tasks.models import TaskPriority


@dataclass(frozen=True)
class TodoCandidate:
    """
    A line-level extraction of a possible task, before scoring.

    Has no identity beyond its position in the current extraction run.
    """

    raw: str
    """Verbatim source line."""

    text: str
    """Item text with list, number and checkbox markers removed."""

    section: str | None
    """Nearest enclosing heading text, if any."""

    context: tuple[str, ...]
    """Up to three preceding non-candidate lines, oldest first."""

    line_number: int
    """1-based line number within the extracted text."""

    is_explicit_checklist_item: bool = False
    """True when the line carried a ``[ ]``/``[x]`` box."""

    is_checked: bool = False
    """True when the checklist box was ticked."""


@dataclass(frozen=True)
class IntentAnalysis:
    """Three intent layers plus the derived scores for one candidate."""

    explicit_statement: str
    shadow_rationale: str | None
    practical_note: str | None
    priority: TaskPriority
    confidence: int
    tags: list[str] = field(default_factory=list)


@dataclass
class ThoughtNote:
    """A thought file: opaque frontmatter metadata plus free-text body."""

    filename: str
    content: str
    metadata: dict[str, Any] = field(default_factory=dict)
    archived: bool = False

    @property
    def line_count(self) -> int:
        return len(self.content.splitlines())


@dataclass
class ThoughtSummary:
    """Listing row for a thought file."""

    name: str
    lines: int
    checkbox_count: int


@dataclass
class ArchiveEntry:
    """One entry of the archive log: which note produced which tasks."""

    filename: str
    archived: datetime
    line_count: int
    task_ids: list[str] = field(default_factory=list)
    notes: str | None = None


@dataclass
class ArchiveListing:
    """Archive history: parsed log entries and the archived files on disk."""

    entries: list[ArchiveEntry] = field(default_factory=list)
    files: list[ThoughtSummary] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.entries and not self.files
