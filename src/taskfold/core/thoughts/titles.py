"""
Task title generation from thought lines.
"""

import re

DEFAULT_MAX_LENGTH = 80
ELLIPSIS = "..."

_LIST_MARKER = re.compile(
    r"^\s*(?:(?:[-*]|\d+\.)\s+)?\[[ xX]\]\s*|^\s*(?:[-*]|\d+\.)\s+"
)
_BRACKET_GROUP = re.compile(r"\[[^\[\]]*\]")
_HASHTAG = re.compile(r"(?<![\w&/#])#[A-Za-z0-9_][\w-]*")
_OBLIGATION = re.compile(r"^(?:need to|needs to|have to|must|should|will|want to)\s+", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")


def _strip_once(text: str) -> str:
    text = _LIST_MARKER.sub("", text, count=1)
    text = _BRACKET_GROUP.sub(" ", text)
    text = _HASHTAG.sub(" ", text)
    text = _WHITESPACE.sub(" ", text).strip()
    return _OBLIGATION.sub("", text, count=1)


def generate_title(text: str, max_length: int = DEFAULT_MAX_LENGTH) -> str:
    """
    Turn a raw thought line into a task title.

    Removes list markers and checkboxes, bracket tags, hashtags and a
    leading obligation phrase, collapses whitespace, capitalizes the first
    letter and truncates to ``max_length`` with an ellipsis. Applying it to
    its own output returns the same string.

    Example:
        >>> generate_title("- [ ] Need to fix login bug - urgent!")
        'Fix login bug - urgent!'
        >>> generate_title("#infra should migrate the cron jobs [ops]")
        'Migrate the cron jobs'
    """
    title = text
    while True:
        stripped = _strip_once(title)
        if stripped == title:
            break
        title = stripped

    if title:
        title = title[0].upper() + title[1:]

    if len(title) > max_length:
        title = title[: max_length - len(ELLIPSIS)].rstrip() + ELLIPSIS
    return title
