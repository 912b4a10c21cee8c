"""
Unit tests for thought extraction.

Tests candidate detection, section tracking, the rolling context window
and the actionable-intent heuristic for free prose.
"""

import pytest

from taskfold.core.thoughts.extractor import (
    ContextWindow,
    extract_candidates,
    has_actionable_intent,
)

NOTE = (
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


class TestContextWindow:
    """Test the fixed-size context buffer."""

    def test_keeps_last_three(self) -> None:
        window = ContextWindow()
        for line in ["a", "b", "c", "d"]:
            window.push(line)
        assert window.snapshot() == ("b", "c", "d")

    def test_clear(self) -> None:
        window = ContextWindow()
        window.push("a")
        window.clear()
        assert window.snapshot() == ()
        assert len(window) == 0


class TestExtractCandidates:
    """Test line-by-line candidate extraction."""

    def test_sample_note(self) -> None:
        candidates = extract_candidates(NOTE)

        assert [c.text for c in candidates] == [
            "Need to fix login bug - urgent!",
            "Add rate limiting to the login endpoint #security",
            "We should migrate the session store because redis keeps dropping keys",
        ]
        assert [c.line_number for c in candidates] == [4, 5, 9]
        assert [c.section for c in candidates] == ["Auth", "Auth", "Ideas"]

    def test_checklist_flags(self) -> None:
        first, second, third = extract_candidates(NOTE)

        assert first.is_explicit_checklist_item and not first.is_checked
        assert second.is_explicit_checklist_item and second.is_checked
        assert not third.is_explicit_checklist_item

    def test_context_is_preceding_plain_lines(self) -> None:
        """Candidates and headings never enter the context window."""
        first, second, third = extract_candidates(NOTE)

        assert first.context == ("Users keep complaining about the session timeout.",)
        assert second.context == first.context
        assert third.context == (
            "Users keep complaining about the session timeout.",
            "What about passkeys?",
        )

    def test_raw_line_is_verbatim(self) -> None:
        candidates = extract_candidates("   - [ ] Indented item here\n")
        assert candidates[0].raw == "   - [ ] Indented item here"
        assert candidates[0].text == "Indented item here"

    def test_single_candidate_scenario(self) -> None:
        candidates = extract_candidates("- [ ] Need to fix login bug - urgent!")
        assert len(candidates) == 1
        assert candidates[0].is_explicit_checklist_item

    def test_bullets_and_numbers(self) -> None:
        text = "* [ ] ship it today\n- plain bullet item\n1. Write the migration\n"
        candidates = extract_candidates(text)

        assert [c.text for c in candidates] == [
            "ship it today",
            "plain bullet item",
            "Write the migration",
        ]
        assert [c.is_explicit_checklist_item for c in candidates] == [True, False, False]

    @pytest.mark.parametrize("line", ["- ok", "- [ ]", "- [x] abc", "2. tbd", "*  x"])
    def test_short_list_items_discarded(self, line: str) -> None:
        assert extract_candidates(line) == []

    def test_discarded_item_becomes_context(self) -> None:
        candidates = extract_candidates("- ok\n- [ ] Write the release notes\n")
        assert candidates[0].context == ("- ok",)

    def test_context_capped_at_three(self) -> None:
        text = "one\ntwo\nthree\nfour\n- [ ] Write the docs\n"
        assert extract_candidates(text)[0].context == ("two", "three", "four")

    def test_single_blank_line_keeps_context(self) -> None:
        text = "background note\n\n- [ ] Write the docs\n"
        assert extract_candidates(text)[0].context == ("background note",)

    def test_two_blank_lines_clear_context(self) -> None:
        text = "background note\n\n\n- [ ] Write the docs\n"
        assert extract_candidates(text)[0].context == ()

    def test_no_section_before_first_heading(self) -> None:
        assert extract_candidates("- [ ] Write the docs")[0].section is None

    def test_heading_replaces_section(self) -> None:
        text = "# One\n## Two ##\n- [ ] Write the docs\n"
        assert extract_candidates(text)[0].section == "Two"

    def test_question_is_not_a_candidate(self) -> None:
        assert extract_candidates("What's causing the slow query?") == []

    def test_prose_scenario(self) -> None:
        candidates = extract_candidates("Should add caching to the API calls")
        assert len(candidates) == 1
        assert not candidates[0].is_explicit_checklist_item

    def test_restartable(self) -> None:
        """Identical text always yields identical candidates."""
        assert extract_candidates(NOTE) == extract_candidates(NOTE)

    def test_empty_text(self) -> None:
        assert extract_candidates("") == []


class TestHasActionableIntent:
    """Test the free-prose heuristic."""

    @pytest.mark.parametrize(
        "line",
        [
            "Should add caching to the API calls",
            "We need to update the onboarding copy",
            "There is a todo left in the parser module",
        ],
    )
    def test_actionable(self, line: str) -> None:
        assert has_actionable_intent(line) is True

    @pytest.mark.parametrize(
        "line",
        [
            "What's causing the slow query?",
            "How should we fix the login flow",
            "We need to fix the login flow?",
            "Fix it now",
            "The weather was nice yesterday afternoon",
        ],
    )
    def test_not_actionable(self, line: str) -> None:
        assert has_actionable_intent(line) is False
