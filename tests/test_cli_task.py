"""
Tests for the task CLI subcommand.

Tests `taskfold task` commands: create, update, archive, list, next, show.
"""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from taskfold.cli import app

runner = CliRunner()


@pytest.fixture
def cli_project(isolated_config: Path, project_root: Path) -> Path:
    """Working directory whose default ``.project`` is the temp project."""
    return project_root


def invoke(*args: str):
    return runner.invoke(app, list(args))


class TestCreate:
    def test_create(self, cli_project: Path) -> None:
        result = invoke("task", "create", "Fix login bug", "--project", "auth", "-p", "P0")

        assert result.exit_code == 0, result.output
        assert "Created: AUTH-001" in result.output
        assert (cli_project / "tasks" / "AUTH-001.md").exists()

    def test_create_json(self, cli_project: Path) -> None:
        result = invoke(
            "task", "create", "Fix login bug", "-P", "auth", "-t", "backend", "--json"
        )

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["id"] == "AUTH-001"
        assert data["priority"] == "P2"
        assert data["owner"] == "unassigned"
        assert data["tags"] == ["backend"]

    def test_default_owner_from_config(self, cli_project: Path, tmp_path: Path) -> None:
        (tmp_path / ".taskfold.json").write_text(json.dumps({"default_owner": "sam"}))
        result = invoke("task", "create", "Fix login bug", "-P", "auth", "--json")
        assert json.loads(result.stdout)["owner"] == "sam"

    def test_invalid_priority(self, cli_project: Path) -> None:
        result = invoke("task", "create", "Fix login bug", "-P", "auth", "-p", "urgent")

        assert result.exit_code == 2
        assert "Error:" in result.output
        assert not list((cli_project / "tasks").glob("*.md"))

    def test_project_required(self, cli_project: Path) -> None:
        assert invoke("task", "create", "Fix login bug").exit_code != 0

    def test_unknown_dependency(self, cli_project: Path) -> None:
        result = invoke("task", "create", "Needs ghost", "-P", "auth", "--depends-on", "NOPE-999")
        assert result.exit_code == 2
        assert not (cli_project / "tasks" / "AUTH-001.md").exists()


class TestUpdate:
    def test_update_status(self, cli_project: Path) -> None:
        invoke("task", "create", "Fix login bug", "-P", "auth")

        result = invoke("task", "update", "AUTH-001", "--status", "done")
        assert result.exit_code == 0
        assert "Updated: AUTH-001" in result.output

        shown = json.loads(invoke("task", "show", "AUTH-001", "--json").stdout)
        assert shown["status"] == "done"

    def test_unblock(self, cli_project: Path) -> None:
        invoke("task", "create", "Fix login bug", "-P", "auth", "--blocked-by", "vendor")
        result = invoke("task", "update", "AUTH-001", "--unblock", "--json")
        assert json.loads(result.stdout)["blocked_by"] == []

    def test_no_changes(self, cli_project: Path) -> None:
        invoke("task", "create", "Fix login bug", "-P", "auth")
        result = invoke("task", "update", "AUTH-001")
        assert result.exit_code == 2
        assert "No updates specified" in result.output

    def test_invalid_status(self, cli_project: Path) -> None:
        invoke("task", "create", "Fix login bug", "-P", "auth")
        result = invoke("task", "update", "AUTH-001", "--status", "finished")
        assert result.exit_code == 2
        assert "Invalid value: finished" in result.output

    def test_missing_task(self, cli_project: Path) -> None:
        result = invoke("task", "update", "AUTH-404", "--status", "done")
        assert result.exit_code == 2
        assert "Task not found: AUTH-404" in result.output

    def test_clear_deps_and_tags(self, cli_project: Path) -> None:
        invoke("task", "create", "Base", "-P", "auth")
        invoke("task", "create", "Follow-up", "-P", "auth", "--depends-on", "AUTH-001", "-t", "api")

        result = invoke("task", "update", "AUTH-002", "--clear-deps", "--clear-tags", "--json")

        data = json.loads(result.stdout)
        assert data["depends_on"] == []
        assert data["tags"] == []

    def test_unknown_dependency(self, cli_project: Path) -> None:
        invoke("task", "create", "Fix login bug", "-P", "auth")
        result = invoke("task", "update", "AUTH-001", "--depends-on", "NOPE-999")
        assert result.exit_code == 2
        assert "NOPE-999" in result.output


class TestArchiveAndList:
    def test_archive_moves_out_of_list(self, cli_project: Path) -> None:
        invoke("task", "create", "One", "-P", "auth")
        invoke("task", "create", "Two", "-P", "auth")

        result = invoke("task", "archive", "AUTH-001")
        assert result.exit_code == 0
        assert "Archived: AUTH-001" in result.output

        active = json.loads(invoke("task", "list", "--json").stdout)
        archived = json.loads(invoke("task", "list", "--archived", "--json").stdout)
        assert [t["id"] for t in active] == ["AUTH-002"]
        assert [t["id"] for t in archived] == ["AUTH-001"]

    def test_archive_missing(self, cli_project: Path) -> None:
        assert invoke("task", "archive", "AUTH-404").exit_code == 2

    def test_list_filters(self, cli_project: Path) -> None:
        invoke("task", "create", "One", "-P", "auth")
        invoke("task", "create", "Two", "-P", "ops")
        invoke("task", "update", "OPS-001", "-s", "in_progress")

        by_project = json.loads(invoke("task", "list", "-P", "ops", "--json").stdout)
        by_status = json.loads(invoke("task", "list", "-s", "todo", "--json").stdout)

        assert [t["id"] for t in by_project] == ["OPS-001"]
        assert [t["id"] for t in by_status] == ["AUTH-001"]

    def test_list_table(self, cli_project: Path) -> None:
        invoke("task", "create", "Fix login bug", "-P", "auth")
        result = invoke("task", "list")
        assert result.exit_code == 0
        assert "AUTH-001" in result.output
        assert "Total: 1 tasks" in result.output

    def test_list_empty(self, cli_project: Path) -> None:
        assert "No tasks found" in invoke("task", "list").output

    def test_malformed_record_warns(self, cli_project: Path) -> None:
        invoke("task", "create", "Good", "-P", "auth")
        (cli_project / "tasks" / "AUTH-002.md").write_text("no header")

        result = invoke("task", "list")

        assert result.exit_code == 0
        assert "Warning:" in result.output
        assert "AUTH-001" in result.output


class TestNextAndShow:
    def test_next_respects_dependencies(self, cli_project: Path) -> None:
        invoke("task", "create", "Base", "-P", "auth", "-p", "P3")
        invoke("task", "create", "Urgent", "-P", "auth", "-p", "P0", "--depends-on", "AUTH-001")

        data = json.loads(invoke("task", "next", "--json").stdout)
        assert data["id"] == "AUTH-001"

        invoke("task", "update", "AUTH-001", "-s", "done")
        data = json.loads(invoke("task", "next", "--json").stdout)
        assert data["id"] == "AUTH-002"

    def test_next_after_dependency_archived(self, cli_project: Path) -> None:
        invoke("task", "create", "Base", "-P", "auth")
        invoke("task", "create", "Follow-up", "-P", "auth", "--depends-on", "AUTH-001")
        invoke("task", "update", "AUTH-001", "-s", "done")
        invoke("task", "archive", "AUTH-001")

        result = invoke("task", "next")

        assert "AUTH-002" in result.output
        assert "Warning:" not in result.output

    def test_next_none(self, cli_project: Path) -> None:
        invoke("task", "create", "Blocked", "-P", "auth", "--blocked-by", "vendor")
        result = invoke("task", "next")
        assert "No actionable tasks" in result.output
        assert "1 todo task(s) are blocked" in result.output

    def test_next_json_none(self, cli_project: Path) -> None:
        assert json.loads(invoke("task", "next", "--json").stdout) is None

    def test_next_dangling_warning(self, cli_project: Path) -> None:
        invoke("task", "create", "Base", "-P", "auth")
        invoke("task", "create", "Orphan", "-P", "auth", "--depends-on", "AUTH-001")
        (cli_project / "tasks" / "AUTH-001.md").unlink()

        result = invoke("task", "next")

        assert "depends on unknown task(s): AUTH-001" in result.output

    def test_show(self, cli_project: Path) -> None:
        invoke(
            "task", "create", "Fix login bug", "-P", "auth",
            "-d", "Sessions expire early.", "--subtask", "Reproduce",
        )
        result = invoke("task", "show", "AUTH-001")

        assert result.exit_code == 0
        assert "Fix login bug" in result.output
        assert "Sessions expire early." in result.output
        assert "[ ] Reproduce" in result.output

    def test_show_missing(self, cli_project: Path) -> None:
        result = invoke("task", "show", "AUTH-404")
        assert result.exit_code == 2
        assert "taskfold task list" in result.output


class TestRoot:
    def test_version(self) -> None:
        result = invoke("--version")
        assert result.exit_code == 0
        assert "taskfold" in result.output

    def test_invalid_config(self, cli_project: Path, tmp_path: Path) -> None:
        (tmp_path / ".taskfold.json").write_text(
            json.dumps({"extraction": {"min_confidence": 500}})
        )
        result = invoke("task", "list")
        assert result.exit_code == 2
        assert "Invalid configuration" in result.output

    def test_project_root_from_env(self, isolated_config: Path, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.setenv("TASKFOLD_PROJECT_ROOT", str(tmp_path / "elsewhere"))
        invoke("task", "create", "Fix login bug", "-P", "auth")
        assert (tmp_path / "elsewhere" / "tasks" / "AUTH-001.md").exists()
