"""
Task graph for dependency-aware task selection.

Provides a pure query object built from a task list snapshot. Immutable after
construction. Answers "what should I work on next?" and keeps a
dependency-consistent view of project state (unmet and dangling edges,
dependents, cycles).
"""

from __future__ import annotations

from collections.abc import Iterable

from .models import Task, TaskStatus


class TaskGraph:
    """Immutable dependency graph built from a snapshot of tasks.

    The graph models two kinds of edges:

    * **depends_on**: task A depends on task B → A is not actionable until B
      is done. A dependency id that resolves to nothing is *dangling* and
      counts as not done.
    * **blocked_by**: a manual override; any entry makes A non-actionable
      regardless of dependency state.

    Archived tasks may be passed in ``archived`` so that dependencies on
    finished-and-archived work resolve with their recorded status. They are
    never candidates themselves.

    Example::

        graph = TaskGraph(store.load_all_tasks().tasks)
        task = graph.next_task(project="AUTH")
    """

    __slots__ = ("_tasks", "_archived", "_dependents")

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def __init__(self, tasks: Iterable[Task], archived: Iterable[Task] = ()) -> None:
        self._tasks: dict[str, Task] = {t.id: t for t in tasks}
        self._archived: dict[str, Task] = {
            t.id: t for t in archived if t.id not in self._tasks
        }

        # dependents[B] = {A} means A depends on B
        self._dependents: dict[str, set[str]] = {}
        for task in self._tasks.values():
            for dep_id in task.depends_on:
                self._dependents.setdefault(dep_id, set()).add(task.id)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks

    def get(self, task_id: str) -> Task | None:
        """Active task by id, or None."""
        return self._tasks.get(task_id)

    @property
    def tasks(self) -> list[Task]:
        """Active tasks in id order."""
        return [self._tasks[tid] for tid in sorted(self._tasks)]

    def _resolve(self, task_id: str) -> Task | None:
        return self._tasks.get(task_id) or self._archived.get(task_id)

    # ------------------------------------------------------------------
    # Dependency state
    # ------------------------------------------------------------------

    def unmet_dependencies(self, task_id: str) -> list[str]:
        """Dependency ids of *task_id* that are missing or not done."""
        task = self._tasks.get(task_id)
        if task is None:
            return []
        unmet: list[str] = []
        for dep_id in task.depends_on:
            dep = self._resolve(dep_id)
            if dep is None or dep.status != TaskStatus.DONE:
                unmet.append(dep_id)
        return unmet

    def dangling_dependencies(self) -> dict[str, list[str]]:
        """Map of task id → dependency ids that resolve to no known task.

        Dangling references are tolerated but always reported, never dropped.
        """
        dangling: dict[str, list[str]] = {}
        for tid in sorted(self._tasks):
            missing = [d for d in self._tasks[tid].depends_on if self._resolve(d) is None]
            if missing:
                dangling[tid] = missing
        return dangling

    def dependents(self, task_id: str) -> list[str]:
        """Active task ids that directly depend on *task_id*."""
        return sorted(self._dependents.get(task_id, set()))

    def is_actionable(self, task: Task) -> bool:
        """A todo task with no manual blockers and every dependency done."""
        if task.status != TaskStatus.TODO:
            return False
        if task.blocked_by:
            return False
        return not self.unmet_dependencies(task.id)

    def blocked_tasks(self) -> list[Task]:
        """Todo tasks held back by a manual block or an unmet dependency."""
        return [
            t
            for t in self.tasks
            if t.status == TaskStatus.TODO and not self.is_actionable(t)
        ]

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    @staticmethod
    def _matches(
        task: Task,
        project: str | None,
        tags: Iterable[str] | None,
        owner: str | None,
    ) -> bool:
        if project and task.project != project.upper():
            return False
        if owner and task.owner != owner:
            return False
        if tags and not all(task.has_tag(tag) for tag in tags):
            return False
        return True

    def actionable_tasks(
        self,
        project: str | None = None,
        tags: Iterable[str] | None = None,
        owner: str | None = None,
    ) -> list[Task]:
        """
        All actionable tasks, most urgent first.

        Ordered by priority (P0 first), then creation time (oldest first),
        then id, so identical snapshots always produce identical output.
        """
        tag_filter = list(tags) if tags else None
        candidates = [
            t
            for t in self._tasks.values()
            if self._matches(t, project, tag_filter, owner) and self.is_actionable(t)
        ]
        candidates.sort(key=lambda t: (t.priority.numeric_value, t.created, t.project, t.sequence))
        return candidates

    def next_task(
        self,
        project: str | None = None,
        tags: Iterable[str] | None = None,
        owner: str | None = None,
    ) -> Task | None:
        """The single next actionable task, or None when nothing is actionable."""
        actionable = self.actionable_tasks(project=project, tags=tags, owner=owner)
        return actionable[0] if actionable else None

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    def has_cycle(self) -> bool:
        """Detect cycles using three-color DFS (white / gray / black)."""
        WHITE, GRAY, BLACK = 0, 1, 2  # noqa: N806
        color: dict[str, int] = {tid: WHITE for tid in self._tasks}

        def _visit(node: str) -> bool:
            color[node] = GRAY
            for dep in self._tasks[node].depends_on:
                if dep not in color:
                    continue
                if color[dep] == GRAY:
                    return True
                if color[dep] == WHITE and _visit(dep):
                    return True
            color[node] = BLACK
            return False

        for tid in sorted(self._tasks):
            if color[tid] == WHITE and _visit(tid):
                return True
        return False
