"""
Archive log format.

The log is a Markdown file kept next to the archived notes. It starts with
a fixed header ending in a ``---`` rule; entries follow, newest first, each
closed by its own rule:

    # Thought Archive Log

    This file tracks all processed thoughts and the tasks created from them.

    ---

    ## ideas.md

    **Archived:** 2026-03-01T09:30:00
    **Original Lines:** 12
    **Tasks Created:** AUTH-001, AUTH-002
    **Notes:** split the login work in two

    ---

New entries are inserted directly after the header rule. Existing entries
are never rewritten.
"""

import logging
import re
from datetime import datetime

from taskfold.core.thoughts.models import ArchiveEntry

logger = logging.getLogger(__name__)

ARCHIVE_LOG_FILENAME = ".archive-log.md"
LOG_TITLE = "# Thought Archive Log"
LOG_HEADER = (
    f"{LOG_TITLE}\n"
    "\n"
    "This file tracks all processed thoughts and the tasks created from them.\n"
    "\n"
    "---\n"
)
RULE = "---\n"
NO_TASKS = "None specified"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"

_ENTRY_HEADING = re.compile(r"^## (.+?)\s*$", re.MULTILINE)
_FIELD = re.compile(r"^\*\*(Archived|Original Lines|Tasks Created|Notes):\*\*\s*(.*?)\s*$", re.MULTILINE)


def render_entry(entry: ArchiveEntry) -> str:
    """Render one log entry, including its leading blank line and closing rule."""
    tasks = ", ".join(entry.task_ids) if entry.task_ids else NO_TASKS
    lines = [
        "",
        f"## {entry.filename}",
        "",
        f"**Archived:** {entry.archived.strftime(TIMESTAMP_FORMAT)}",
        f"**Original Lines:** {entry.line_count}",
        f"**Tasks Created:** {tasks}",
    ]
    if entry.notes:
        # One line per field
        lines.append(f"**Notes:** {' '.join(entry.notes.split())}")
    lines.extend(["", RULE])
    return "\n".join(lines)


def prepend_entry(log_content: str, entry: ArchiveEntry) -> str:
    """
    Insert ``entry`` as the newest entry of ``log_content``.

    A missing or headerless log gets a fresh header; any text it already
    held is kept below the new entry.
    """
    rendered = render_entry(entry)

    title_at = log_content.find(LOG_TITLE)
    if title_at != -1:
        rule_at = log_content.find(RULE, title_at)
        if rule_at != -1:
            insert_at = rule_at + len(RULE)
            return log_content[:insert_at] + rendered + log_content[insert_at:]

    prior = log_content.strip("\n")
    if not prior:
        return LOG_HEADER + rendered
    if title_at != -1:
        # Title present but no header rule yet
        return prior + "\n\n" + RULE + rendered
    return LOG_HEADER + rendered + "\n" + prior + "\n"


def parse_log(log_content: str) -> list[ArchiveEntry]:
    """
    Parse log entries in file order (newest first).

    Blocks without a readable ``Archived`` timestamp are skipped.
    """
    entries: list[ArchiveEntry] = []
    headings = list(_ENTRY_HEADING.finditer(log_content))
    for i, heading in enumerate(headings):
        end = headings[i + 1].start() if i + 1 < len(headings) else len(log_content)
        block = log_content[heading.end() : end]
        fields = {m.group(1): m.group(2) for m in _FIELD.finditer(block)}

        raw_archived = fields.get("Archived", "")
        try:
            archived = datetime.fromisoformat(raw_archived)
        except ValueError:
            logger.warning("Skipping archive log entry %r: bad timestamp %r", heading.group(1), raw_archived)
            continue

        raw_lines = fields.get("Original Lines", "0")
        raw_tasks = fields.get("Tasks Created", NO_TASKS)
        task_ids = [] if raw_tasks in ("", NO_TASKS) else [t.strip() for t in raw_tasks.split(",") if t.strip()]

        entries.append(
            ArchiveEntry(
                filename=heading.group(1),
                archived=archived,
                line_count=int(raw_lines) if raw_lines.isdigit() else 0,
                task_ids=task_ids,
                notes=fields.get("Notes") or None,
            )
        )
    return entries
