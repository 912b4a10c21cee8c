"""
Task storage layer.

Tasks are stored one per Markdown file under the tasks directory:

    tasks/AUTH-001.md            active records
    tasks/.archive/AUTH-001.md   archived records (history, never reused)
    tasks/.counters.json         highest sequence ever allocated per prefix

ID allocation scans every known id for a prefix (active, archived and the
persisted high-water mark) and takes max + 1. The store assumes a single
writer: two processes creating tasks for the same prefix at the same time
must be serialized by the caller.
"""

import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from taskfold.core.errors import (
    MalformedRecordError,
    NotFoundError,
    StorageIOError,
    ValidationError,
)
from taskfold.core.tasks.models import (
    PROJECT_PATTERN,
    LoadResult,
    Subtask,
    Task,
    TaskStatus,
    format_task_id,
    parse_task_id,
)
from taskfold.core.tasks.records import dump_task, parse_task

logger = logging.getLogger(__name__)

ARCHIVE_DIRNAME = ".archive"
COUNTERS_FILENAME = ".counters.json"

# Fields that may never change once a task exists
IMMUTABLE_FIELDS = frozenset({"id", "created", "project", "updated"})

UPDATABLE_FIELDS = frozenset(
    {
        "title",
        "priority",
        "status",
        "owner",
        "depends_on",
        "blocked_by",
        "tags",
        "estimate",
        "description",
        "subtasks",
    }
)


def _now() -> datetime:
    # Records keep second precision, so drop microseconds up front
    return datetime.now().replace(microsecond=0)


def _validation_message(error: PydanticValidationError) -> tuple[str, str | None]:
    first = error.errors()[0]
    field = ".".join(str(p) for p in first["loc"]) or None
    return f"Invalid value for '{field}': {first['msg']}", field


def atomic_write(path: Path, content: str) -> None:
    """
    Write a text file atomically.

    Writes to a temporary file in the same directory, then renames it
    over the target so readers never see a half-written record.

    Raises:
        StorageIOError: If the write or rename fails
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=".tmp_", suffix=".md")
    except OSError as e:
        raise StorageIOError("write", path, e) from e

    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(temp_path, path)
    except OSError as e:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise StorageIOError("write", path, e) from e


class TaskStore:
    """
    Storage layer for task records.

    Example:
        store = TaskStore(Path(".project/tasks"))
        task = store.create_task("Fix login bug", project="auth", priority="P0")
        task.id  # 'AUTH-001'
        store.update_task(task.id, status="done")
        result = store.load_all_tasks()
    """

    def __init__(self, tasks_dir: Path):
        """
        Initialize store with a tasks directory.

        Args:
            tasks_dir: Directory containing task record files
        """
        self.tasks_dir = Path(tasks_dir)

    @property
    def archive_dir(self) -> Path:
        return self.tasks_dir / ARCHIVE_DIRNAME

    @property
    def counters_file(self) -> Path:
        return self.tasks_dir / COUNTERS_FILENAME

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def load_all_tasks(self, include_archived: bool = False) -> LoadResult:
        """
        Load every active task.

        A record that cannot be read or parsed is reported in
        ``LoadResult.malformed`` and skipped; it never aborts the load.

        Args:
            include_archived: Also load records from the archive directory

        Returns:
            LoadResult with tasks sorted by id
        """
        result = LoadResult()
        directories = [self.tasks_dir]
        if include_archived:
            directories.append(self.archive_dir)

        for directory in directories:
            for record_file in self._record_files(directory):
                try:
                    result.tasks.append(self._read_record(record_file))
                except MalformedRecordError as e:
                    logger.warning("Skipping malformed task record: %s", e)
                    result.malformed.append(e)

        result.tasks.sort(key=lambda t: (t.project, t.sequence))
        logger.debug(
            "Loaded %d task(s) from %s (%d malformed)",
            len(result.tasks),
            self.tasks_dir,
            len(result.malformed),
        )
        return result

    def load_archived_tasks(self) -> LoadResult:
        """Load only archived records."""
        result = LoadResult()
        for record_file in self._record_files(self.archive_dir):
            try:
                result.tasks.append(self._read_record(record_file))
            except MalformedRecordError as e:
                logger.warning("Skipping malformed archived record: %s", e)
                result.malformed.append(e)
        result.tasks.sort(key=lambda t: (t.project, t.sequence))
        return result

    def get_task(self, task_id: str) -> Task:
        """
        Get a single active task by ID.

        Raises:
            NotFoundError: If no active record exists for the id
            MalformedRecordError: If the record exists but cannot be parsed
        """
        record_file = self._record_path(task_id)
        if not record_file.exists():
            raise NotFoundError("Task", task_id)
        return self._read_record(record_file)

    def next_id(self, project: str) -> str:
        """
        Compute the id the next task for ``project`` would receive.

        Args:
            project: Project prefix (case-insensitive)

        Returns:
            Task id such as 'AUTH-004'
        """
        prefix = self.normalize_project(project)
        return format_task_id(prefix, self._highest_sequence(prefix) + 1)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_task(
        self,
        title: str,
        project: str,
        *,
        priority: str | int = "P2",
        owner: str | None = None,
        depends_on: list[str] | None = None,
        blocked_by: list[str] | None = None,
        tags: list[str] | None = None,
        estimate: str | None = None,
        description: str = "",
        subtasks: list[str] | list[Subtask] | None = None,
    ) -> Task:
        """
        Create and persist a new task with status ``todo``.

        Args:
            title: Task title (required, non-empty)
            project: Project prefix (required, uppercased)
            priority: P0..P3 or 0..3
            owner: Owner name (defaults to 'unassigned')
            depends_on: Ids that must be done first
            blocked_by: Manual blockers
            tags: Tags
            estimate: Free-form estimate
            description: Markdown description
            subtasks: Checklist items (strings or Subtask objects)

        Returns:
            The created Task

        Raises:
            ValidationError: If title or project is missing, a field is invalid,
                or depends_on names a task that does not exist
            StorageIOError: If the record cannot be written
        """
        if not title or not title.strip():
            raise ValidationError("Task title is required", field="title")
        prefix = self.normalize_project(project)

        sequence = self._highest_sequence(prefix) + 1
        task_id = format_task_id(prefix, sequence)
        now = _now()

        try:
            task = Task(
                id=task_id,
                title=title,
                project=prefix,
                priority=priority,
                status=TaskStatus.TODO,
                owner=owner,
                depends_on=depends_on or [],
                blocked_by=blocked_by or [],
                tags=tags or [],
                created=now,
                updated=now,
                estimate=estimate,
                description=description,
                subtasks=[self._coerce_subtask(s) for s in subtasks or []],
            )
        except PydanticValidationError as e:
            message, field = _validation_message(e)
            raise ValidationError(message, field=field) from e

        self._check_dependencies(task)
        atomic_write(self._record_path(task_id), dump_task(task))
        self._record_sequence(prefix, sequence)
        logger.info("Created task %s", task_id)
        return task

    def update_task(self, task_id: str, **changes: Any) -> Task:
        """
        Merge field changes into an existing task.

        ``updated`` is always refreshed.

        Raises:
            NotFoundError: If the task is not in the active set
            ValidationError: For immutable or unknown fields, invalid values,
                or depends_on ids that do not exist
            StorageIOError: If the record cannot be written
        """
        immutable = sorted(IMMUTABLE_FIELDS & changes.keys())
        if immutable:
            raise ValidationError(
                f"Cannot change immutable field(s): {', '.join(immutable)}",
                field=immutable[0],
            )
        unknown = sorted(changes.keys() - UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown task field(s): {', '.join(unknown)}", field=unknown[0])

        task = self.get_task(task_id)

        if "subtasks" in changes and changes["subtasks"] is not None:
            changes["subtasks"] = [self._coerce_subtask(s) for s in changes["subtasks"]]

        data = task.model_dump()
        data.update(changes)
        data["updated"] = max(_now(), task.updated)
        try:
            updated = Task.model_validate(data)
        except PydanticValidationError as e:
            message, field = _validation_message(e)
            raise ValidationError(message, field=field) from e

        if "depends_on" in changes:
            self._check_dependencies(updated)
        atomic_write(self._record_path(task_id), dump_task(updated))
        logger.debug("Updated task %s: %s", task_id, ", ".join(sorted(changes)))
        return updated

    def archive_task(self, task_id: str) -> Path:
        """
        Move a task out of the active set into the archive directory.

        Archiving is not idempotent: a second call for the same id fails.

        Returns:
            Path of the archived record

        Raises:
            NotFoundError: If the task is not in the active set
            StorageIOError: If the move fails
        """
        source = self._record_path(task_id)
        if not source.exists():
            raise NotFoundError("Task", task_id)

        destination = self.archive_dir / source.name
        try:
            self.archive_dir.mkdir(parents=True, exist_ok=True)
            os.replace(source, destination)
        except OSError as e:
            raise StorageIOError("archive", source, e) from e

        # Keep the number retired even if the archive is later cleaned out
        parsed = parse_task_id(task_id)
        if parsed:
            self._record_sequence(*parsed)

        logger.info("Archived task %s", task_id)
        return destination

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def normalize_project(project: str | None) -> str:
        """Uppercase and validate a project prefix such as ``auth``."""
        if not project or not project.strip():
            raise ValidationError("Project prefix is required", field="project")
        prefix = project.strip().upper()
        if not PROJECT_PATTERN.match(prefix):
            raise ValidationError(
                f"Project prefix must be alphanumeric and start with a letter: {project!r}",
                field="project",
            )
        return prefix

    @staticmethod
    def _coerce_subtask(value: str | Subtask | dict[str, Any]) -> Subtask:
        if isinstance(value, Subtask):
            return value
        if isinstance(value, dict):
            return Subtask(**value)
        return Subtask(text=str(value))

    def _record_path(self, task_id: str) -> Path:
        if not parse_task_id(task_id):
            raise NotFoundError("Task", task_id)
        return self.tasks_dir / f"{task_id}.md"

    @staticmethod
    def _record_files(directory: Path) -> list[Path]:
        if not directory.exists():
            return []
        return sorted(p for p in directory.glob("*.md") if not p.name.startswith("."))

    def _read_record(self, record_file: Path) -> Task:
        try:
            text = record_file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise MalformedRecordError(record_file, f"unreadable: {e}") from e
        return parse_task(text, record_file)

    def _known_ids(self) -> set[str]:
        """Ids of every active and archived record, taken from filenames."""
        return {
            record_file.stem
            for directory in (self.tasks_dir, self.archive_dir)
            for record_file in self._record_files(directory)
            if parse_task_id(record_file.stem)
        }

    def _check_dependencies(self, task: Task) -> None:
        if task.id in task.depends_on:
            raise ValidationError(f"Task {task.id} cannot depend on itself", field="depends_on")
        known = self._known_ids()
        unknown = [dep for dep in task.depends_on if dep not in known]
        if unknown:
            raise ValidationError(
                f"Unknown task id(s) in depends_on: {', '.join(unknown)}",
                field="depends_on",
            )

    def _highest_sequence(self, prefix: str) -> int:
        """Highest sequence ever seen for a prefix, across all sources."""
        highest = self._read_counters().get(prefix, 0)
        for directory in (self.tasks_dir, self.archive_dir):
            for record_file in self._record_files(directory):
                # Filenames are authoritative for allocation, even for
                # records whose contents are malformed.
                parsed = parse_task_id(record_file.stem)
                if parsed and parsed[0] == prefix:
                    highest = max(highest, parsed[1])
        return highest

    def _read_counters(self) -> dict[str, int]:
        if not self.counters_file.exists():
            return {}
        try:
            data = json.loads(self.counters_file.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Ignoring unreadable counters file %s: %s", self.counters_file, e)
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): int(v) for k, v in data.items() if isinstance(v, int)}

    def _record_sequence(self, prefix: str, sequence: int) -> None:
        counters = self._read_counters()
        if counters.get(prefix, 0) >= sequence:
            return
        counters[prefix] = sequence
        atomic_write(self.counters_file, json.dumps(counters, indent=2, sort_keys=True) + "\n")
