"""
Task record encoding.

Each task lives in its own Markdown file: a YAML frontmatter header with a
fixed key order, followed by a free-text body. The body is treated as
opaque prose except for an optional ``## Subtasks`` checklist section.

Uses python-frontmatter for parsing and writing the header.
"""

import re
from datetime import datetime
from pathlib import Path
from typing import Any

import frontmatter
import yaml
from pydantic import ValidationError as PydanticValidationError

from taskfold.core.errors import MalformedRecordError
from taskfold.core.tasks.models import Subtask, Task

# Header keys, in the order they are written
HEADER_KEYS = (
    "id",
    "title",
    "project",
    "priority",
    "status",
    "owner",
    "depends_on",
    "blocked_by",
    "tags",
    "created",
    "updated",
    "estimate",
)

SUBTASKS_HEADING = "## Subtasks"
SUBTASKS_HEADING_PATTERN = re.compile(r"^##\s+Subtasks\s*$", re.IGNORECASE | re.MULTILINE)
CHECKLIST_LINE_PATTERN = re.compile(r"^\s*[-*]\s+\[([ xX])\]\s+(.+?)\s*$")

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"


def _format_timestamp(value: datetime) -> str:
    return value.strftime(TIMESTAMP_FORMAT)


def task_to_header(task: Task) -> dict[str, Any]:
    """
    Build the ordered frontmatter header for a task.

    Args:
        task: Task to serialize

    Returns:
        Dictionary whose insertion order matches HEADER_KEYS
    """
    values: dict[str, Any] = {
        "id": task.id,
        "title": task.title,
        "project": task.project,
        "priority": task.priority.value,
        "status": task.status.value,
        "owner": task.owner,
        "depends_on": list(task.depends_on),
        "blocked_by": list(task.blocked_by),
        "tags": list(task.tags),
        "created": _format_timestamp(task.created),
        "updated": _format_timestamp(task.updated),
        "estimate": task.estimate,
    }
    return {key: values[key] for key in HEADER_KEYS}


def render_body(task: Task) -> str:
    """Render the description plus the subtask checklist."""
    parts: list[str] = []
    if task.description.strip():
        parts.append(task.description.strip())
    if task.subtasks:
        lines = [SUBTASKS_HEADING, ""]
        for subtask in task.subtasks:
            box = "x" if subtask.done else " "
            lines.append(f"- [{box}] {subtask.text}")
        parts.append("\n".join(lines))
    return "\n\n".join(parts)


def dump_task(task: Task) -> str:
    """Serialize a task to the on-disk record format."""
    post = frontmatter.Post(render_body(task), **task_to_header(task))
    return frontmatter.dumps(post, sort_keys=False) + "\n"


def split_body(body: str) -> tuple[str, list[Subtask]]:
    """
    Split a record body into description and subtasks.

    Only checklist lines under the ``## Subtasks`` heading become subtasks;
    anything else in that section is kept with the description so no
    human-written prose is lost.

    Args:
        body: Markdown body below the frontmatter

    Returns:
        Tuple of (description, subtasks)
    """
    match = SUBTASKS_HEADING_PATTERN.search(body)
    if not match:
        return body.strip(), []

    description = body[: match.start()].rstrip()
    subtasks: list[Subtask] = []
    leftovers: list[str] = []
    for line in body[match.end() :].splitlines():
        item = CHECKLIST_LINE_PATTERN.match(line)
        if item:
            subtasks.append(Subtask(text=item.group(2), done=item.group(1).lower() == "x"))
        elif line.strip():
            leftovers.append(line)

    if leftovers:
        description = "\n".join([description, "", *leftovers]).strip()
    return description.strip(), subtasks


def parse_task(text: str, path: Path) -> Task:
    """
    Parse record text into a Task.

    Args:
        text: Full file content
        path: Path the content came from (used for error reporting and
            to cross-check the id)

    Returns:
        Validated Task

    Raises:
        MalformedRecordError: If the header cannot be parsed, fails
            validation, or names a different id than the filename
    """
    try:
        post = frontmatter.loads(text)
    except (yaml.YAMLError, TypeError, ValueError) as e:
        raise MalformedRecordError(path, f"invalid frontmatter: {e}") from e

    metadata = dict(post.metadata)
    if not metadata:
        raise MalformedRecordError(path, "missing frontmatter header")

    description, subtasks = split_body(post.content)
    try:
        task = Task.model_validate(
            {
                **{key: metadata[key] for key in HEADER_KEYS if key in metadata},
                "description": description,
                "subtasks": subtasks,
            }
        )
    except PydanticValidationError as e:
        reasons = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise MalformedRecordError(path, reasons) from e

    if task.id != path.stem:
        raise MalformedRecordError(path, f"id {task.id!r} does not match filename")
    return task
