"""
Task management models, storage and graph queries.

Tasks are Markdown files with YAML frontmatter, one per task, grouped under
a tasks directory. The store owns persistence and id allocation; the graph
is a read-only view used to pick the next actionable task.
"""

from .graph import TaskGraph
from .models import LoadResult, Subtask, Task, TaskPriority, TaskStatus
from .store import TaskStore

__all__ = [
    "LoadResult",
    "Subtask",
    "Task",
    "TaskGraph",
    "TaskPriority",
    "TaskStatus",
    "TaskStore",
]
