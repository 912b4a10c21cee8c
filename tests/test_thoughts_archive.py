"""
Unit tests for the archive log format.

Tests rendering single entries, inserting entries newest-first and
parsing a log back into entries.
"""

from datetime import datetime

from taskfold.core.thoughts.archive import (
    LOG_HEADER,
    parse_log,
    prepend_entry,
    render_entry,
)
from taskfold.core.thoughts.models import ArchiveEntry


def entry(filename: str = "ideas.md", **kwargs) -> ArchiveEntry:
    defaults = {
        "archived": datetime(2026, 3, 1, 9, 30, 0),
        "line_count": 12,
        "task_ids": ["AUTH-001", "AUTH-002"],
    }
    defaults.update(kwargs)
    return ArchiveEntry(filename=filename, **defaults)


class TestRenderEntry:
    """Test the Markdown rendering of one entry."""

    def test_fields(self) -> None:
        text = render_entry(entry(notes="split the login work"))

        assert "## ideas.md" in text
        assert "**Archived:** 2026-03-01T09:30:00" in text
        assert "**Original Lines:** 12" in text
        assert "**Tasks Created:** AUTH-001, AUTH-002" in text
        assert "**Notes:** split the login work" in text
        assert text.endswith("---\n")

    def test_no_tasks(self) -> None:
        text = render_entry(entry(task_ids=[]))
        assert "**Tasks Created:** None specified" in text

    def test_no_notes_line_without_notes(self) -> None:
        assert "**Notes:**" not in render_entry(entry())

    def test_multiline_notes_folded(self) -> None:
        text = render_entry(entry(notes="first line\nsecond   line"))
        assert "**Notes:** first line second line" in text


class TestPrependEntry:
    """Test newest-first insertion."""

    def test_empty_log_gets_header(self) -> None:
        log = prepend_entry("", entry())
        assert log.startswith(LOG_HEADER)
        assert log.count("## ideas.md") == 1

    def test_newest_entry_first(self) -> None:
        log = prepend_entry("", entry("old.md"))
        log = prepend_entry(log, entry("new.md"))

        assert log.startswith(LOG_HEADER)
        assert log.index("## new.md") < log.index("## old.md")

    def test_existing_entries_untouched(self) -> None:
        log = prepend_entry("", entry("old.md", notes="keep me"))
        old_block = log[len(LOG_HEADER) :]
        updated = prepend_entry(log, entry("new.md"))
        assert updated.endswith(old_block)

    def test_headerless_content_kept_below(self) -> None:
        log = prepend_entry("stray text\n", entry())
        assert log.startswith(LOG_HEADER)
        assert log.index("## ideas.md") < log.index("stray text")

    def test_title_without_rule(self) -> None:
        log = prepend_entry("# Thought Archive Log\n", entry())
        assert log.startswith("# Thought Archive Log\n\n---\n")
        assert [e.filename for e in parse_log(log)] == ["ideas.md"]


class TestParseLog:
    """Test reading entries back."""

    def test_roundtrip_newest_first(self) -> None:
        log = prepend_entry("", entry("old.md", task_ids=[]))
        log = prepend_entry(log, entry("new.md", notes="two tasks"))

        entries = parse_log(log)

        assert [e.filename for e in entries] == ["new.md", "old.md"]
        assert entries[0].task_ids == ["AUTH-001", "AUTH-002"]
        assert entries[0].notes == "two tasks"
        assert entries[0].archived == datetime(2026, 3, 1, 9, 30, 0)
        assert entries[0].line_count == 12
        assert entries[1].task_ids == []
        assert entries[1].notes is None

    def test_bad_timestamp_skipped(self) -> None:
        log = LOG_HEADER + "\n## broken.md\n\n**Archived:** yesterday\n\n---\n"
        log = prepend_entry(log, entry())
        assert [e.filename for e in parse_log(log)] == ["ideas.md"]

    def test_empty_log(self) -> None:
        assert parse_log("") == []
        assert parse_log(LOG_HEADER) == []
