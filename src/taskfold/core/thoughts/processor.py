"""
Thought processing pipeline.

Turns inbox notes into task suggestions: extract candidates, analyze
intent, derive a title, look for similar existing tasks and drop anything
below the confidence threshold. Processing never writes. Creating tasks
from the suggestions and archiving the note are left to the caller.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from taskfold.core.config import ExtractionConfig
from taskfold.core.tasks.models import Task, TaskPriority
from taskfold.core.tasks.store import TaskStore
from taskfold.core.thoughts.context import ProjectContext
from taskfold.core.thoughts.duplicates import RelatedTask, find_related_tasks
from taskfold.core.thoughts.extractor import extract_candidates
from taskfold.core.thoughts.intent import analyze_intent
from taskfold.core.thoughts.models import ThoughtNote
from taskfold.core.thoughts.store import ThoughtStore
from taskfold.core.thoughts.titles import generate_title

logger = logging.getLogger(__name__)


@dataclass
class TaskSuggestion:
    """A proposed task derived from one candidate line."""

    title: str
    priority: TaskPriority
    confidence: int
    line_number: int
    explicit_statement: str
    shadow_rationale: str | None = None
    practical_note: str | None = None
    section: str | None = None
    tags: list[str] = field(default_factory=list)
    is_checked: bool = False
    related: list[RelatedTask] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "priority": self.priority.value,
            "confidence": self.confidence,
            "line_number": self.line_number,
            "explicit_statement": self.explicit_statement,
            "shadow_rationale": self.shadow_rationale,
            "practical_note": self.practical_note,
            "section": self.section,
            "tags": list(self.tags),
            "is_checked": self.is_checked,
            "related": [
                {"task_id": r.task_id, "title": r.title, "matches": r.matches, "ratio": r.ratio}
                for r in self.related
            ],
        }


@dataclass
class ThoughtReport:
    """Suggestions for one note, plus how many candidates were dropped."""

    filename: str
    line_count: int
    suggestions: list[TaskSuggestion] = field(default_factory=list)
    dropped: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "filename": self.filename,
            "line_count": self.line_count,
            "dropped": self.dropped,
            "suggestions": [s.to_dict() for s in self.suggestions],
        }


@dataclass
class ProcessingReport:
    """Result of one processing run over one or more notes."""

    project: str
    context: ProjectContext
    thoughts: list[ThoughtReport] = field(default_factory=list)

    @property
    def suggestion_count(self) -> int:
        return sum(len(t.suggestions) for t in self.thoughts)

    def to_dict(self) -> dict[str, Any]:
        return {
            "project": self.project,
            "thoughts": [t.to_dict() for t in self.thoughts],
            "context": self.context.to_dict(),
        }


def analyze_note(
    note: ThoughtNote,
    existing_tasks: list[Task],
    config: ExtractionConfig | None = None,
) -> ThoughtReport:
    """
    Build suggestions for a single note.

    Args:
        note: Note to analyze (its body, without frontmatter)
        existing_tasks: Tasks to check suggestions against for duplicates
        config: Extraction settings (defaults apply when omitted)
    """
    config = config or ExtractionConfig()
    report = ThoughtReport(filename=note.filename, line_count=note.line_count)

    for candidate in extract_candidates(note.content, context_size=config.context_size):
        analysis = analyze_intent(candidate)
        if analysis.confidence < config.min_confidence:
            report.dropped += 1
            continue

        title = generate_title(candidate.raw, max_length=config.title_max_length)
        if not title:
            title = generate_title(candidate.text, max_length=config.title_max_length)

        report.suggestions.append(
            TaskSuggestion(
                title=title,
                priority=analysis.priority,
                confidence=analysis.confidence,
                line_number=candidate.line_number,
                explicit_statement=analysis.explicit_statement,
                shadow_rationale=analysis.shadow_rationale,
                practical_note=analysis.practical_note,
                section=candidate.section,
                tags=list(analysis.tags),
                is_checked=candidate.is_checked,
                related=find_related_tasks(title, existing_tasks, limit=config.related_limit),
            )
        )

    logger.debug(
        "%s: %d suggestion(s), %d dropped below %d",
        note.filename,
        len(report.suggestions),
        report.dropped,
        config.min_confidence,
    )
    return report


def process_thoughts(
    task_store: TaskStore,
    thought_store: ThoughtStore,
    project: str,
    filename: str | None = None,
    config: ExtractionConfig | None = None,
    project_root: Path | None = None,
) -> ProcessingReport:
    """
    Analyze one inbox note, or all of them, for a project.

    Args:
        task_store: Source of existing tasks for duplicate checks
        thought_store: Inbox to read notes from
        project: Project prefix the suggestions are meant for
        filename: Single note to process; every inbox note when omitted
        config: Extraction settings
        project_root: Directory holding ROADMAP.md, DECISIONS.md and
            STATUS.md; defaults to the parent of the tasks directory

    Returns:
        ProcessingReport with one ThoughtReport per note

    Raises:
        ValidationError: If the project prefix or filename is invalid
        NotFoundError: If ``filename`` is not in the inbox
    """
    prefix = TaskStore.normalize_project(project)
    tasks = task_store.load_all_tasks().tasks
    context = ProjectContext.build(project_root or task_store.tasks_dir.parent, tasks)

    notes = thought_store.load_thoughts([filename] if filename else None)
    report = ProcessingReport(project=prefix, context=context)
    for note in notes:
        report.thoughts.append(analyze_note(note, tasks, config))

    logger.info(
        "Processed %d note(s) for %s: %d suggestion(s)",
        len(report.thoughts),
        prefix,
        report.suggestion_count,
    )
    return report
