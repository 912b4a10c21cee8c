"""
Duplicate detection between a proposed title and existing tasks.

A cheap token-overlap heuristic. Results are advisory: nothing is ever
merged or blocked because of them.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from taskfold.core.tasks.models import Task

DEFAULT_LIMIT = 3
MIN_TOKEN_LENGTH = 4
MIN_MATCHES = 2
MIN_RATIO = 0.5


@dataclass(frozen=True)
class RelatedTask:
    """An existing task that looks similar to a proposed title."""

    task_id: str
    title: str
    matches: int
    ratio: float


def significant_tokens(text: str) -> list[str]:
    """Lowercased whitespace-separated tokens longer than three characters."""
    return [token for token in text.lower().split() if len(token) >= MIN_TOKEN_LENGTH]


def find_related_tasks(
    title: str,
    tasks: Iterable[Task],
    limit: int = DEFAULT_LIMIT,
) -> list[RelatedTask]:
    """
    Rank existing tasks by how many significant title tokens they share.

    A token counts as matched when it occurs anywhere inside the existing
    task's lowercased title. A task is related when at least two tokens
    match or more than half of them do. Ties keep input order.

    Args:
        title: Proposed task title
        tasks: Existing tasks to compare against
        limit: Maximum number of results

    Returns:
        Up to ``limit`` RelatedTask records, highest ratio first
    """
    tokens = significant_tokens(title)
    if not tokens:
        return []

    related: list[RelatedTask] = []
    for task in tasks:
        existing = task.title.lower()
        matches = sum(1 for token in tokens if token in existing)
        ratio = matches / len(tokens)
        if matches >= MIN_MATCHES or ratio > MIN_RATIO:
            related.append(RelatedTask(task.id, task.title, matches, ratio))

    related.sort(key=lambda r: r.ratio, reverse=True)
    return related[:limit]
