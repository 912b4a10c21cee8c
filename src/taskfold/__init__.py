"""
Taskfold - flat-file task tracking with a thought inbox.

Tasks live as Markdown records in the repository; free-form notes are
mined for actionable items that can become tasks.
"""

__version__ = "0.3.0"

# Re-export core models for convenience
from taskfold.core.config.models import TaskfoldConfig
from taskfold.core.tasks.models import Task, TaskPriority, TaskStatus

__all__ = ["TaskfoldConfig", "Task", "TaskStatus", "TaskPriority", "__version__"]
