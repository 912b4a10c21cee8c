"""
Thought extraction.

Parses the body of a thought note line by line into todo candidates.
Two pieces of rolling state are kept while scanning:

- the current section (the text of the most recent heading)
- a three-line context window of recent non-candidate lines, cleared
  whenever two blank lines appear in a row

Detection is tried in order per line: checklist item, plain bullet,
numbered item, then free prose with actionable intent. Extraction is a
pure function of the input text, so re-running it always yields the same
candidates.
"""

import logging
import re
from collections import deque

from taskfold.core.thoughts.models import TodoCandidate
from taskfold.core.thoughts.patterns import EXPLICIT_INTENT_PATTERNS, INTERROGATIVE_START

logger = logging.getLogger(__name__)

HEADING_PATTERN = re.compile(r"^\s{0,3}#{1,6}\s+(.+?)\s*#*\s*$")
CHECKLIST_PATTERN = re.compile(r"^\s*[-*]\s+\[([ xX])\]\s*(.*)$")
BULLET_PATTERN = re.compile(r"^\s*[-*]\s+(.+)$")
NUMBERED_PATTERN = re.compile(r"^\s*\d+\.\s+(.+)$")

# List items shorter than this carry no signal
MIN_ITEM_LENGTH = 5
# Prose lines shorter than this are never actionable
MIN_PROSE_LENGTH = 15

CONTEXT_SIZE = 3


class ContextWindow:
    """Fixed-capacity ring buffer of recent plain lines, oldest first."""

    def __init__(self, size: int = CONTEXT_SIZE):
        self._lines: deque[str] = deque(maxlen=size)

    def push(self, line: str) -> None:
        self._lines.append(line)

    def clear(self) -> None:
        self._lines.clear()

    def snapshot(self) -> tuple[str, ...]:
        return tuple(self._lines)

    def __len__(self) -> int:
        return len(self._lines)


def has_actionable_intent(line: str) -> bool:
    """
    Check whether a free-text line states an intention to do something.

    A line qualifies only if it matches an explicit-intent pattern, is at
    least 15 characters long, and is not phrased as a question.

    Example:
        >>> has_actionable_intent("Should add caching to the API calls")
        True
        >>> has_actionable_intent("What's causing the slow query?")
        False
    """
    text = line.strip()
    if len(text) < MIN_PROSE_LENGTH:
        return False
    if text.endswith("?") or INTERROGATIVE_START.match(text):
        return False
    return any(rule.pattern.search(text) for rule in EXPLICIT_INTENT_PATTERNS)


def _detect(line: str) -> tuple[str, bool, bool] | None:
    """Return (item_text, is_checklist, is_checked) or None for no candidate."""
    checklist = CHECKLIST_PATTERN.match(line)
    if checklist:
        text = checklist.group(2).strip()
        if len(text) < MIN_ITEM_LENGTH:
            return None
        return text, True, checklist.group(1).lower() == "x"

    for pattern in (BULLET_PATTERN, NUMBERED_PATTERN):
        match = pattern.match(line)
        if match:
            text = match.group(1).strip()
            if len(text) < MIN_ITEM_LENGTH:
                return None
            return text, False, False

    if has_actionable_intent(line):
        return line.strip(), False, False
    return None


def extract_candidates(text: str, context_size: int = CONTEXT_SIZE) -> list[TodoCandidate]:
    """
    Extract todo candidates from note text, in source order.

    Args:
        text: Note body (frontmatter already removed)
        context_size: Number of preceding plain lines kept as context

    Returns:
        List of TodoCandidate objects
    """
    candidates: list[TodoCandidate] = []
    section: str | None = None
    context = ContextWindow(context_size)
    blank_run = 0
    lines = text.splitlines()

    for line_number, line in enumerate(lines, start=1):
        if not line.strip():
            blank_run += 1
            if blank_run >= 2:
                context.clear()
            continue
        blank_run = 0

        heading = HEADING_PATTERN.match(line)
        if heading:
            section = heading.group(1).strip()
            continue

        detected = _detect(line)
        if detected is None:
            context.push(line.strip())
            continue

        item_text, is_checklist, is_checked = detected
        candidates.append(
            TodoCandidate(
                raw=line,
                text=item_text,
                section=section,
                context=context.snapshot(),
                line_number=line_number,
                is_explicit_checklist_item=is_checklist,
                is_checked=is_checked,
            )
        )

    logger.debug("Extracted %d candidate(s) from %d line(s)", len(candidates), len(lines))
    return candidates
