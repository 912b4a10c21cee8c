"""
Pattern tables driving thought classification.

Each table is an ordered sequence of ``(category, pattern, weight)`` rows.
The scoring functions in ``extractor`` and ``intent`` only walk these
tables; changing the heuristic means editing data here, not logic there.

Weights mean different things per table:
    EXPLICIT_INTENT_PATTERNS  - unused (0); any hit counts
    SHADOW_PATTERNS           - characters of trailing context to capture
    PRACTICAL_PATTERNS        - unused (0); categories are reported
    URGENCY_TIERS             - the TaskPriority the row maps to
    PRIORITY_KEYWORDS         - the TaskPriority the row can upgrade to
"""

import re
from typing import NamedTuple

from taskfold.core.tasks.models import TaskPriority

_FLAGS = re.IGNORECASE


class PatternRule(NamedTuple):
    """One row of a classification table."""

    category: str
    pattern: re.Pattern[str]
    weight: int


class PriorityRule(NamedTuple):
    """One row of a priority table."""

    category: str
    pattern: re.Pattern[str]
    weight: TaskPriority


def _rx(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern, _FLAGS)


# Explicit intent: the line literally states something should happen
EXPLICIT_INTENT_PATTERNS: tuple[PatternRule, ...] = (
    PatternRule("obligation", _rx(r"\b(?:need to|needs to|must|should|will|want to)\b"), 0),
    PatternRule(
        "imperative",
        _rx(r"\b(?:implement|create|build|add|fix|update|change|remove|delete)\b"),
        0,
    ),
    PatternRule("task_noun", _rx(r"\b(?:task|todo|to-do|action item|deliverable)s?\b"), 0),
)

# Questions are never candidates
INTERROGATIVE_START = _rx(r"^\s*(?:what|how|why|when|where|who|is|are|was|were|do|does)\b")

# Shadow intent: the motivation behind the statement.
# Weight = characters captured after the match; 20 are always captured before.
SHADOW_LEAD_CHARS = 20
SHADOW_PATTERNS: tuple[PatternRule, ...] = (
    PatternRule(
        "causal",
        _rx(r"\b(?:because|since|so that|in order to|to enable|to prevent)\b"),
        50,
    ),
    PatternRule("affect", _rx(r"\b(?:worried|concerned|frustrat\w*|painful|tedious)\b"), 30),
    PatternRule("soft_modal", _rx(r"\b(?:would be nice|could|might|maybe|eventually)\b"), 20),
    PatternRule(
        "stakeholder",
        _rx(r"\b(?:users?|customers?|team)\s+(?:\w+\s+){0,2}?(?:want|need|expect|complain)\w*"),
        50,
    ),
)

# Practical intent: concrete signs of what the work involves.
# Category names are what ends up in the "Involves: ..." note.
PRACTICAL_PATTERNS: tuple[PatternRule, ...] = (
    PatternRule(
        "sequenced steps",
        _rx(r"\b(?:step\s+\d+|first|then|next|finally|after that)\b"),
        0,
    ),
    PatternRule(
        "system components",
        _rx(
            r"\b(?:files?|functions?|class(?:es)?|modules?|components?"
            r"|apis?|endpoints?|databases?)\b"
        ),
        0,
    ),
    PatternRule(
        "operational work",
        _rx(r"\b(?:test\w*|deploy\w*|configur\w*|set ?up|install\w*|migrat\w*)\b"),
        0,
    ),
)

# Urgency tiers, scanned strictly in order; the first tier with a hit wins
URGENCY_TIERS: tuple[PriorityRule, ...] = (
    PriorityRule(
        "critical",
        _rx(r"\b(?:critical|urgent|blocker|asap|immediately|breaking|down|outage)\b"),
        TaskPriority.P0,
    ),
    PriorityRule(
        "high",
        _rx(r"\b(?:important|high priority|soon|this week|pressing|significant)\b"),
        TaskPriority.P1,
    ),
    PriorityRule(
        "medium",
        _rx(r"\b(?:medium|normal|standard|regular|when possible)\b"),
        TaskPriority.P2,
    ),
    PriorityRule(
        "low",
        _rx(r"\b(?:low priority|nice to have|eventually|someday|minor|trivial)\b"),
        TaskPriority.P3,
    ),
)

DEFAULT_PRIORITY = TaskPriority.P2

# Secondary keywords. These may only move a priority towards P0.
PRIORITY_KEYWORDS: tuple[PriorityRule, ...] = (
    PriorityRule("data_loss", _rx(r"\b(?:data loss|corrupt\w*|security hole)\b"), TaskPriority.P0),
    PriorityRule("security", _rx(r"\b(?:security|vulnerab\w*|exploit\w*)\b"), TaskPriority.P1),
    PriorityRule("crash", _rx(r"\b(?:crash\w*|regression)\b"), TaskPriority.P1),
    PriorityRule("production", _rx(r"\b(?:prod|production|outages?)\b"), TaskPriority.P1),
    PriorityRule("defect", _rx(r"\b(?:bugs?|broken|error)\b"), TaskPriority.P2),
    PriorityRule("cleanup", _rx(r"\b(?:clean ?up|refactor\w*|polish)\b"), TaskPriority.P3),
)

# Inline tags: [bracket groups] and #hashtags
TAG_PATTERN = re.compile(r"\[([^\[\]]+)\]|(?<![\w&/#])#([A-Za-z0-9_][\w-]*)")


def first_match(rules: tuple[PatternRule, ...], text: str) -> re.Match[str] | None:
    """Return the first match from any rule, in table order."""
    for rule in rules:
        match = rule.pattern.search(text)
        if match:
            return match
    return None


def matching_categories(rules: tuple[PatternRule, ...], text: str) -> list[str]:
    """Distinct categories with at least one hit, in table order."""
    categories: list[str] = []
    for rule in rules:
        if rule.category not in categories and rule.pattern.search(text):
            categories.append(rule.category)
    return categories
