"""
Thought storage layer.

Thought notes are free-form Markdown files, optionally with YAML
frontmatter, dropped into an inbox directory:

    thoughts/todos/ideas.md                    inbox
    thoughts/todos/.archive/ideas.md           processed notes
    thoughts/todos/.archive/.archive-log.md    archive history

Uses python-frontmatter for splitting metadata from the body. Metadata is
passed through untouched; nothing in it is interpreted.
"""

import logging
import os
import re
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

import frontmatter
import yaml

from taskfold.core.errors import (
    MalformedRecordError,
    NotFoundError,
    StorageIOError,
    ValidationError,
)
from taskfold.core.tasks.store import atomic_write
from taskfold.core.thoughts.archive import ARCHIVE_LOG_FILENAME, parse_log, prepend_entry
from taskfold.core.thoughts.models import (
    ArchiveEntry,
    ArchiveListing,
    ThoughtNote,
    ThoughtSummary,
)

logger = logging.getLogger(__name__)

ARCHIVE_DIRNAME = ".archive"
DEFAULT_ARCHIVE_LIMIT = 20

_CHECKBOX = re.compile(r"^\s*[-*]\s*\[[ xX]\]", re.MULTILINE)


def count_checkboxes(content: str) -> int:
    """Number of checklist boxes, ticked or not."""
    return len(_CHECKBOX.findall(content))


class ThoughtStore:
    """
    Storage layer for thought notes.

    Example:
        store = ThoughtStore(Path(".project/thoughts/todos"))
        for summary in store.list_thoughts():
            note = store.read_thought(summary.name)
        store.archive_thought("ideas.md", ["AUTH-001"])
    """

    def __init__(self, inbox_dir: Path):
        """
        Initialize store with an inbox directory.

        Args:
            inbox_dir: Directory holding unprocessed thought notes
        """
        self.inbox_dir = Path(inbox_dir)

    @property
    def archive_dir(self) -> Path:
        return self.inbox_dir / ARCHIVE_DIRNAME

    @property
    def log_file(self) -> Path:
        return self.archive_dir / ARCHIVE_LOG_FILENAME

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def list_thoughts(self) -> list[ThoughtSummary]:
        """
        Summarize every note in the inbox.

        Returns:
            ThoughtSummary per visible ``.md`` file, sorted by name. Empty
            when the inbox does not exist yet.
        """
        return self._summaries(self._note_files(self.inbox_dir))

    def list_archived_thoughts(self, limit: int = DEFAULT_ARCHIVE_LIMIT) -> ArchiveListing:
        """
        Archive history, newest log entries first, plus the archived files.

        Both lists are cut to ``limit`` items.
        """
        entries: list[ArchiveEntry] = []
        if self.log_file.exists():
            entries = parse_log(self._read_text(self.log_file))
        files = self._summaries(self._note_files(self.archive_dir))
        return ArchiveListing(entries=entries[:limit], files=files[:limit])

    def for_category(self, category: str | None) -> "ThoughtStore":
        """
        Store for a sibling folder such as ``thoughts/meetings``.

        None or the inbox's own folder name returns this store.

        Raises:
            ValidationError: If the category is not a plain folder name
        """
        if not category or category == self.inbox_dir.name:
            return self
        if "/" in category or "\\" in category or category.startswith("."):
            raise ValidationError(
                f"Thought category must be a plain folder name: {category!r}",
                field="category",
            )
        return ThoughtStore(self.inbox_dir.parent / category)

    def archived_count(self) -> int:
        return len(self._note_files(self.archive_dir))

    def read_thought(self, filename: str, from_archive: bool = False) -> ThoughtNote:
        """
        Read a note with its frontmatter split off.

        Args:
            filename: Note filename, e.g. ``ideas.md``
            from_archive: Read from the archive instead of the inbox

        Raises:
            ValidationError: If the filename is not a plain file name
            NotFoundError: If the note does not exist
            MalformedRecordError: If the frontmatter cannot be parsed
        """
        self.validate_filename(filename)
        directory = self.archive_dir if from_archive else self.inbox_dir
        path = directory / filename
        if not path.is_file():
            raise NotFoundError("Thought", filename)

        text = self._read_text(path)
        try:
            post = frontmatter.loads(text)
        except (yaml.YAMLError, ValueError) as e:
            raise MalformedRecordError(path, f"invalid frontmatter: {e}") from e

        metadata = post.metadata if isinstance(post.metadata, dict) else {}
        return ThoughtNote(
            filename=filename,
            content=post.content,
            metadata=dict(metadata),
            archived=from_archive,
        )

    def load_thoughts(self, filenames: Iterable[str] | None = None) -> list[ThoughtNote]:
        """Read the given notes, or every inbox note when none are named."""
        if filenames is None:
            filenames = [p.name for p in self._note_files(self.inbox_dir)]
        return [self.read_thought(name) for name in filenames]

    # ------------------------------------------------------------------
    # Archiving
    # ------------------------------------------------------------------

    def archive_thought(
        self,
        filename: str,
        task_ids: Iterable[str] = (),
        notes: str | None = None,
        archived_at: datetime | None = None,
    ) -> ArchiveEntry:
        """
        Move a processed note into the archive and log it.

        The move and the log update succeed or fail together: if the log
        cannot be written, the note is moved back into the inbox.

        Args:
            filename: Inbox note to archive
            task_ids: Ids of tasks created from the note
            notes: Free-text remark for the log
            archived_at: Timestamp for the log entry (defaults to now)

        Returns:
            The ArchiveEntry that was logged

        Raises:
            ValidationError: If the filename is not a plain file name
            NotFoundError: If the note is not in the inbox
            StorageIOError: If an archived note of the same name exists,
                or the move or log write fails
        """
        self.validate_filename(filename)
        source = self.inbox_dir / filename
        if not source.is_file():
            raise NotFoundError("Thought", filename)

        destination = self.archive_dir / filename
        if destination.exists():
            raise StorageIOError(
                "archive", source, FileExistsError(f"{destination} already exists")
            )

        entry = ArchiveEntry(
            filename=filename,
            archived=(archived_at or datetime.now()).replace(microsecond=0),
            line_count=len(self._read_text(source).splitlines()),
            task_ids=list(task_ids),
            notes=notes.strip() if notes and notes.strip() else None,
        )

        try:
            self.archive_dir.mkdir(parents=True, exist_ok=True)
            os.replace(source, destination)
        except OSError as e:
            raise StorageIOError("archive", source, e) from e

        try:
            existing = self._read_text(self.log_file) if self.log_file.exists() else ""
            atomic_write(self.log_file, prepend_entry(existing, entry))
        except StorageIOError as e:
            logger.warning("Archive log update failed, restoring %s to inbox", filename)
            try:
                os.replace(destination, source)
            except OSError as restore_error:
                raise StorageIOError(
                    "restore",
                    destination,
                    OSError(f"{restore_error} (after archive log failure: {e.message})"),
                ) from e
            raise

        logger.info("Archived thought %s (%d task(s))", filename, len(entry.task_ids))
        return entry

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def validate_filename(filename: str) -> None:
        """Reject anything that is not a plain, visible file name."""
        if not filename or not filename.strip():
            raise ValidationError("Thought filename is required", field="filename")
        if "/" in filename or "\\" in filename or filename in (".", ".."):
            raise ValidationError(
                f"Thought filename must not contain path separators: {filename!r}",
                field="filename",
            )
        if filename.startswith("."):
            raise ValidationError(
                f"Thought filename must not start with a dot: {filename!r}",
                field="filename",
            )

    @staticmethod
    def _note_files(directory: Path) -> list[Path]:
        if not directory.is_dir():
            return []
        return sorted(
            p for p in directory.glob("*.md") if p.is_file() and not p.name.startswith(".")
        )

    def _summaries(self, paths: list[Path]) -> list[ThoughtSummary]:
        summaries: list[ThoughtSummary] = []
        for path in paths:
            content = self._read_text(path)
            summaries.append(
                ThoughtSummary(
                    name=path.name,
                    lines=len(content.splitlines()),
                    checkbox_count=count_checkboxes(content),
                )
            )
        return summaries

    @staticmethod
    def _read_text(path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageIOError("read", path, e) from e
