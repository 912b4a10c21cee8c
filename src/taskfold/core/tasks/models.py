"""
Task data models for taskfold.

Defines the fixed-schema Task record and its enums. Records are validated
with Pydantic at the store boundary, so anything that reaches the graph or
the duplicate detector is known to be well formed.
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from taskfold.core.errors import MalformedRecordError

TASK_ID_PATTERN = re.compile(r"^([A-Z][A-Z0-9_]*)-(\d{3,})$")
PROJECT_PATTERN = re.compile(r"^[A-Z][A-Z0-9_]*$")

DEFAULT_OWNER = "unassigned"


class TaskStatus(str, Enum):
    """Task status values.

    Only DONE satisfies a dependency and only TODO is ever actionable.
    """

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    BLOCKED = "blocked"
    DONE = "done"


class TaskPriority(str, Enum):
    """Task priority levels.

    P0 = Critical (highest priority)
    P1 = High
    P2 = Medium (default)
    P3 = Low
    """

    P0 = "P0"
    P1 = "P1"
    P2 = "P2"
    P3 = "P3"

    @property
    def numeric_value(self) -> int:
        """Get numeric value for sorting (0 = highest priority)."""
        return int(self.value[1])

    def upgraded_to(self, other: "TaskPriority") -> "TaskPriority":
        """Return the more urgent of the two priorities."""
        return other if other.numeric_value < self.numeric_value else self


class Subtask(BaseModel):
    """A single checklist line in a task body."""

    text: str = Field(..., min_length=1)
    done: bool = False


def format_task_id(project: str, sequence: int) -> str:
    """Build a task id, zero padding the sequence to three digits."""
    return f"{project}-{sequence:03d}"


def parse_task_id(task_id: str) -> tuple[str, int] | None:
    """Split a task id into (prefix, sequence), or None if it is not one."""
    match = TASK_ID_PATTERN.match(task_id)
    if not match:
        return None
    return match.group(1), int(match.group(2))


def _unique(values: list[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


class Task(BaseModel):
    """
    A unit of trackable work.

    Example:
        >>> task = Task(
        ...     id="AUTH-001",
        ...     title="Fix login bug",
        ...     project="AUTH",
        ...     priority=TaskPriority.P0,
        ...     created=datetime(2026, 1, 16, 14, 32),
        ...     updated=datetime(2026, 1, 16, 14, 32),
        ... )
        >>> task.sequence
        1
        >>> task.status
        <TaskStatus.TODO: 'todo'>
    """

    # Identity
    id: str = Field(..., description="Task identifier (e.g., 'AUTH-001')")
    title: str = Field(..., min_length=1, description="Task title")
    project: str = Field(..., min_length=1, description="Uppercased project prefix")

    # Workflow
    priority: TaskPriority = Field(default=TaskPriority.P2, description="Task priority level")
    status: TaskStatus = Field(default=TaskStatus.TODO, description="Current task status")
    owner: str = Field(default=DEFAULT_OWNER, description="Free-form owner name")

    # Graph edges
    depends_on: list[str] = Field(
        default_factory=list,
        description="Task IDs that must be done before this task is actionable",
    )
    blocked_by: list[str] = Field(
        default_factory=list,
        description="Manual blockers; any entry makes the task non-actionable",
    )
    tags: list[str] = Field(default_factory=list, description="Task tags")

    # Timestamps
    created: datetime = Field(..., description="When the task was created")
    updated: datetime = Field(..., description="When the task was last changed")

    estimate: str | None = Field(default=None, description="Free-form estimate (e.g., '2h')")
    description: str = Field(default="", description="Markdown body")
    subtasks: list[Subtask] = Field(default_factory=list, description="Checklist items")

    model_config = ConfigDict(
        validate_assignment=True,
    )

    @field_validator("id", mode="before")
    @classmethod
    def validate_id(cls, v: Any) -> str:
        """Validate ID format: PREFIX-NNN."""
        if not isinstance(v, str):
            raise ValueError("ID must be a string")
        v = v.strip()
        if not TASK_ID_PATTERN.match(v):
            raise ValueError(f"ID must look like PREFIX-001, got {v!r}")
        return v

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("project", mode="before")
    @classmethod
    def normalize_project(cls, v: Any) -> str:
        """Uppercase the project prefix and check its shape."""
        if not isinstance(v, str):
            raise ValueError("project must be a string")
        v = v.strip().upper()
        if v and not PROJECT_PATTERN.match(v):
            raise ValueError(f"project must be alphanumeric and start with a letter, got {v!r}")
        return v

    @field_validator("priority", mode="before")
    @classmethod
    def validate_priority(cls, v: int | str | TaskPriority) -> TaskPriority:
        """Accept P0..P3 as well as bare 0..3."""
        if isinstance(v, TaskPriority):
            return v
        if isinstance(v, int):
            return TaskPriority(f"P{v}")
        if isinstance(v, str):
            v = v.strip().upper()
            if v.startswith("P"):
                return TaskPriority(v)
            return TaskPriority(f"P{v}")
        return v

    @field_validator("owner", mode="before")
    @classmethod
    def default_owner(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_OWNER
        return v

    @field_validator("depends_on", "blocked_by", "tags", mode="before")
    @classmethod
    def normalize_list(cls, v: Any) -> list[str]:
        """Accept a scalar or list; strip entries and drop duplicates."""
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        if not isinstance(v, (list, tuple, set)):
            raise ValueError("expected a list of strings")
        return _unique([str(item).strip() for item in v if str(item).strip()])

    @field_validator("created", "updated", mode="before")
    @classmethod
    def coerce_date(cls, v: Any) -> Any:
        # YAML turns bare 2026-01-16 into a date, which datetime fields reject
        if isinstance(v, date) and not isinstance(v, datetime):
            return datetime.combine(v, time.min)
        return v

    @field_validator("created", "updated")
    @classmethod
    def to_naive_local(cls, v: datetime) -> datetime:
        # Records hold naive local time; offsets such as Z are converted away
        if v.tzinfo is not None:
            return v.astimezone().replace(tzinfo=None)
        return v

    @property
    def sequence(self) -> int:
        """Sequence number part of the id."""
        parsed = parse_task_id(self.id)
        return parsed[1] if parsed else 0

    @property
    def is_done(self) -> bool:
        return self.status == TaskStatus.DONE

    def has_tag(self, tag: str) -> bool:
        """Check if task has a specific tag (case-insensitive)."""
        return tag.lower() in (t.lower() for t in self.tags)


@dataclass
class LoadResult:
    """
    Outcome of a bulk load.

    Malformed records are reported alongside the tasks that did load, so a
    single corrupt file never hides the rest of the project.
    """

    tasks: list[Task] = field(default_factory=list)
    malformed: list[MalformedRecordError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.malformed
