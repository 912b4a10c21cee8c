"""
Pytest configuration and shared fixtures.

Provides fixtures for temp project directories, stores, sample tasks and
notes, and an isolated configuration environment.
"""

import os
from datetime import datetime
from pathlib import Path

import pytest

from taskfold.core.tasks.models import Task, TaskPriority, TaskStatus
from taskfold.core.tasks.store import TaskStore
from taskfold.core.thoughts.store import ThoughtStore

# ==============================================================================
# Directory Fixtures
# ==============================================================================


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """
    Provide a temporary ``.project`` directory.

    Creates:
    - tasks/
    - thoughts/todos/
    """
    root = tmp_path / ".project"
    (root / "tasks").mkdir(parents=True)
    (root / "thoughts" / "todos").mkdir(parents=True)
    return root


@pytest.fixture
def task_store(project_root: Path) -> TaskStore:
    return TaskStore(project_root / "tasks")


@pytest.fixture
def thought_store(project_root: Path) -> ThoughtStore:
    return ThoughtStore(project_root / "thoughts" / "todos")


# ==============================================================================
# Sample Data Fixtures
# ==============================================================================


def make_task(
    task_id: str,
    *,
    status: TaskStatus = TaskStatus.TODO,
    priority: TaskPriority = TaskPriority.P2,
    depends_on: list[str] | None = None,
    blocked_by: list[str] | None = None,
    tags: list[str] | None = None,
    owner: str | None = None,
    created: datetime | None = None,
    title: str | None = None,
) -> Task:
    """Shorthand for building a Task without touching disk."""
    stamp = created or datetime(2026, 1, 16, 9, 0, 0)
    return Task(
        id=task_id,
        title=title or f"Task {task_id}",
        project=task_id.rsplit("-", 1)[0],
        status=status,
        priority=priority,
        depends_on=depends_on or [],
        blocked_by=blocked_by or [],
        tags=tags or [],
        owner=owner,
        created=stamp,
        updated=stamp,
    )


@pytest.fixture
def sample_note() -> str:
    """A thought note with a heading, checklist, prose and noise."""
    return (
        "---\n"
        "author: sam\n"
        "---\n"
        "# Auth\n"
        "\n"
        "Users keep complaining about the session timeout.\n"
        "- [ ] Need to fix login bug - urgent!\n"
        "- [x] Add rate limiting to the login endpoint #security\n"
        "\n"
        "## Ideas\n"
        "What about passkeys?\n"
        "We should migrate the session store because redis keeps dropping keys\n"
        "- ok\n"
    )


# ==============================================================================
# Environment Fixtures
# ==============================================================================


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """
    Provide a clean environment without TASKFOLD_* env vars.

    Removes all TASKFOLD_* environment variables so tests don't inherit
    configuration from the system.
    """
    for key in list(os.environ.keys()):
        if key.startswith("TASKFOLD_"):
            monkeypatch.delenv(key, raising=False)
    return monkeypatch


@pytest.fixture
def isolated_config(clean_env: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """
    Provide a completely isolated config environment.

    Points XDG_CONFIG_HOME at an empty temp directory and makes tmp_path
    the working directory, so no user or project config is picked up.
    """
    config_home = tmp_path / "config"
    config_home.mkdir()
    clean_env.setenv("XDG_CONFIG_HOME", str(config_home))
    clean_env.chdir(tmp_path)
    return config_home


@pytest.fixture
def task_factory():
    """Factory fixture wrapping make_task."""
    return make_task
