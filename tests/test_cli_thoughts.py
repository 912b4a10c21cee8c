"""
Tests for the thoughts CLI subcommand.

Tests `taskfold thoughts` commands: list, show, extract, process,
archive, archived.
"""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from taskfold.cli import app

runner = CliRunner()

BODY = (
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


@pytest.fixture
def inbox(isolated_config: Path, project_root: Path) -> Path:
    """The temp project's thought inbox, seen from the CLI's working directory."""
    return project_root / "thoughts" / "todos"


@pytest.fixture
def ideas(inbox: Path) -> Path:
    path = inbox / "ideas.md"
    path.write_text(BODY)
    return path


def invoke(*args: str):
    return runner.invoke(app, list(args))


class TestListAndShow:
    def test_list_empty(self, inbox: Path) -> None:
        result = invoke("thoughts", "list")
        assert result.exit_code == 0
        assert "No notes in" in result.output

    def test_list(self, ideas: Path) -> None:
        result = invoke("thoughts", "list", "--archived")

        assert result.exit_code == 0
        assert "ideas.md" in result.output
        assert "Total: 1 notes" in result.output
        assert "Archived: 0 notes" in result.output

    def test_show(self, ideas: Path) -> None:
        result = invoke("thoughts", "show", "ideas.md")

        assert result.exit_code == 0
        assert "inbox, 10 lines" in result.output
        assert "- [ ] Need to fix login bug - urgent!" in result.output

    def test_show_missing(self, inbox: Path) -> None:
        result = invoke("thoughts", "show", "nope.md")

        assert result.exit_code == 2
        assert "Thought not found: nope.md" in result.output
        assert "taskfold thoughts list" in result.output

    def test_category(self, inbox: Path) -> None:
        meetings = inbox.parent / "meetings"
        meetings.mkdir()
        (meetings / "standup.md").write_text("- [ ] Follow up with ops\n")

        listed = invoke("thoughts", "list", "--category", "meetings")
        shown = invoke("thoughts", "show", "standup.md", "-c", "meetings")

        assert "standup.md" in listed.output
        assert "Follow up with ops" in shown.output
        assert invoke("thoughts", "list", "-c", "../tasks").exit_code == 2


class TestExtract:
    def test_extract_json(self, ideas: Path) -> None:
        result = invoke("thoughts", "extract", "ideas.md", "--json")

        assert result.exit_code == 0
        rows = json.loads(result.stdout)
        assert [r["line_number"] for r in rows] == [4, 5, 9]
        assert rows[0]["context"] == ["Users keep complaining about the session timeout."]
        assert rows[1]["is_checked"] is True
        assert rows[1]["tags"] == ["security"]

    def test_extract_nothing(self, inbox: Path) -> None:
        (inbox / "empty.md").write_text("Just musing.\n")
        assert "No candidates found" in invoke("thoughts", "extract", "empty.md").output


class TestProcess:
    def test_process_json(self, ideas: Path) -> None:
        result = invoke("thoughts", "process", "--project", "auth", "--json")

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["project"] == "AUTH"
        suggestions = data["thoughts"][0]["suggestions"]
        assert [s["title"] for s in suggestions][:2] == [
            "Fix login bug - urgent!",
            "Add rate limiting to the login endpoint",
        ]
        assert [s["priority"] for s in suggestions] == ["P0", "P1", "P2"]

    def test_min_confidence_override(self, ideas: Path) -> None:
        result = invoke(
            "thoughts", "process", "ideas.md", "-P", "auth", "--min-confidence", "90", "--json"
        )

        thought = json.loads(result.stdout)["thoughts"][0]
        assert len(thought["suggestions"]) == 1
        assert thought["dropped"] == 2

    def test_min_confidence_from_env(self, ideas: Path, clean_env) -> None:
        clean_env.setenv("TASKFOLD_MIN_CONFIDENCE", "90")
        result = invoke("thoughts", "process", "-P", "auth", "--json")
        assert json.loads(result.stdout)["thoughts"][0]["dropped"] == 2

    def test_related_tasks_reported(self, ideas: Path) -> None:
        invoke("task", "create", "Migrate session store to postgres", "-P", "auth")

        result = invoke("thoughts", "process", "-P", "auth")

        assert result.exit_code == 0
        assert "Similar:" in result.output
        assert "AUTH-001" in result.output

    def test_context_shown(self, ideas: Path, inbox: Path) -> None:
        project = inbox.parent.parent
        (project / "ROADMAP.md").write_text("Q1: passkeys\n")
        (project / "STATUS.md").write_text("Login outage under investigation\n")
        invoke("task", "create", "Migrate session store to postgres", "-P", "auth")

        result = invoke("thoughts", "process", "-P", "auth")
        data = json.loads(invoke("thoughts", "process", "-P", "auth", "--json").stdout)

        assert "Existing tasks" in result.output
        assert "Q1: passkeys" in result.output
        assert "Login outage under investigation" in result.output
        assert data["context"]["roadmap"] == "Q1: passkeys\n"
        assert data["context"]["tasks"][0]["id"] == "AUTH-001"

    def test_process_does_not_archive(self, ideas: Path) -> None:
        invoke("thoughts", "process", "-P", "auth")
        assert ideas.exists()

    def test_no_notes(self, inbox: Path) -> None:
        assert "No notes to process" in invoke("thoughts", "process", "-P", "auth").output

    def test_project_required(self, ideas: Path) -> None:
        assert invoke("thoughts", "process").exit_code != 0

    def test_invalid_project(self, ideas: Path) -> None:
        result = invoke("thoughts", "process", "-P", "1bad")
        assert result.exit_code == 2


class TestArchive:
    def test_archive_then_history(self, ideas: Path, inbox: Path) -> None:
        result = invoke(
            "thoughts", "archive", "ideas.md", "--task", "AUTH-001", "--task", "AUTH-002",
            "--notes", "split in two",
        )

        assert result.exit_code == 0
        assert "Archived: ideas.md" in result.output
        assert "Tasks: AUTH-001, AUTH-002" in result.output
        assert not ideas.exists()
        assert (inbox / ".archive" / "ideas.md").exists()

        history = json.loads(invoke("thoughts", "archived", "--json").stdout)
        assert history["entries"][0]["task_ids"] == ["AUTH-001", "AUTH-002"]
        assert history["entries"][0]["notes"] == "split in two"
        assert [f["name"] for f in history["files"]] == ["ideas.md"]

    def test_rearchive_fails(self, ideas: Path) -> None:
        invoke("thoughts", "archive", "ideas.md")
        result = invoke("thoughts", "archive", "ideas.md")
        assert result.exit_code == 2
        assert "Thought not found" in result.output

    def test_path_traversal_rejected(self, inbox: Path) -> None:
        result = invoke("thoughts", "archive", "../secrets.md")
        assert result.exit_code == 2

    def test_show_archived(self, ideas: Path) -> None:
        invoke("thoughts", "archive", "ideas.md")
        result = invoke("thoughts", "show", "ideas.md", "--archived")
        assert result.exit_code == 0
        assert "archive, 10 lines" in result.output

    def test_archived_table(self, ideas: Path) -> None:
        invoke("thoughts", "archive", "ideas.md", "-t", "AUTH-001")
        result = invoke("thoughts", "archived")
        assert "ideas.md" in result.output
        assert "1 archived file(s)" in result.output

    def test_archived_empty(self, inbox: Path) -> None:
        assert "No archived notes yet" in invoke("thoughts", "archived").output
