"""
Thought processing.

Free-form notes go into an inbox; the processor reads them, proposes
tasks with priority, confidence and tags, and the caller creates the tasks
it wants and archives the note.
"""

from .context import ProjectContext
from .duplicates import RelatedTask, find_related_tasks
from .extractor import extract_candidates, has_actionable_intent
from .intent import analyze_intent
from .models import (
    ArchiveEntry,
    ArchiveListing,
    IntentAnalysis,
    ThoughtNote,
    ThoughtSummary,
    TodoCandidate,
)
from .processor import ProcessingReport, TaskSuggestion, ThoughtReport, process_thoughts
from .store import ThoughtStore
from .titles import generate_title

__all__ = [
    "ArchiveEntry",
    "ArchiveListing",
    "IntentAnalysis",
    "ProcessingReport",
    "ProjectContext",
    "RelatedTask",
    "TaskSuggestion",
    "ThoughtNote",
    "ThoughtReport",
    "ThoughtStore",
    "ThoughtSummary",
    "TodoCandidate",
    "analyze_intent",
    "extract_candidates",
    "find_related_tasks",
    "generate_title",
    "has_actionable_intent",
    "process_thoughts",
]
