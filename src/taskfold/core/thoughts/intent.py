"""
Intent analysis for todo candidates.

Every candidate is read on three layers:

- explicit: what the line literally says
- shadow: why it was written (motivation phrases near the line)
- practical: what doing it would involve

Shadow and practical layers are matched against the candidate text joined
with its context lines; explicit intent and tags come from the candidate
text alone. All scoring is table-driven, see ``patterns``.
"""

import logging

from taskfold.core.tasks.models import TaskPriority
from taskfold.core.thoughts.models import IntentAnalysis, TodoCandidate
from taskfold.core.thoughts.patterns import (
    DEFAULT_PRIORITY,
    EXPLICIT_INTENT_PATTERNS,
    PRACTICAL_PATTERNS,
    PRIORITY_KEYWORDS,
    SHADOW_LEAD_CHARS,
    SHADOW_PATTERNS,
    TAG_PATTERN,
    URGENCY_TIERS,
    first_match,
    matching_categories,
)

logger = logging.getLogger(__name__)

CHECKLIST_SCORE = 40
EXPLICIT_SCORE = 30
SHADOW_SCORE = 15
PRACTICAL_SCORE = 15
MAX_CONFIDENCE = 100


def combined_text(candidate: TodoCandidate) -> str:
    """Candidate text followed by its context lines, space separated."""
    return " ".join([candidate.text, *candidate.context]).strip()


def extract_shadow_rationale(text: str) -> str | None:
    """
    Collect motivation snippets from ``text``.

    Each shadow table row that matches contributes one window: up to 20
    characters before the match, the match itself, and up to ``weight``
    characters after it. Windows are joined with ``"; "``.
    """
    snippets: list[str] = []
    for rule in SHADOW_PATTERNS:
        match = rule.pattern.search(text)
        if not match:
            continue
        start = max(0, match.start() - SHADOW_LEAD_CHARS)
        snippet = text[start : match.end() + rule.weight].strip()
        if snippet:
            snippets.append(snippet)
    return "; ".join(snippets) if snippets else None


def extract_practical_note(text: str) -> str | None:
    categories = matching_categories(PRACTICAL_PATTERNS, text)
    if not categories:
        return None
    return "Involves: " + ", ".join(categories)


def infer_priority(text: str) -> TaskPriority:
    """
    Infer priority from urgency language.

    Tiers are checked from P0 down and the first tier with a hit wins;
    without any hit the default is P2. Secondary keywords are applied
    afterwards and can only make the result more urgent.

    Example:
        >>> infer_priority("fix typo in footer, minor").value
        'P3'
        >>> infer_priority("minor data loss on export").value
        'P0'
    """
    priority = DEFAULT_PRIORITY
    for tier in URGENCY_TIERS:
        if tier.pattern.search(text):
            priority = tier.weight
            break

    for rule in PRIORITY_KEYWORDS:
        if rule.pattern.search(text):
            priority = priority.upgraded_to(rule.weight)
    return priority


def extract_tags(text: str) -> list[str]:
    """Bracket groups and hashtags, lowercased, in order of appearance."""
    tags: list[str] = []
    for match in TAG_PATTERN.finditer(text):
        tag = (match.group(1) or match.group(2) or "").strip().lower()
        if tag:
            tags.append(tag)
    return tags


def analyze_intent(candidate: TodoCandidate) -> IntentAnalysis:
    """
    Score a candidate and derive its intent layers, priority and tags.

    Confidence adds 40 for an explicit checklist item, 30 for explicit
    intent wording in the item text, and 15 each for a shadow rationale
    and a practical note, capped at 100. Filtering by a minimum
    confidence is left to the caller.
    """
    text = combined_text(candidate)

    shadow = extract_shadow_rationale(text)
    practical = extract_practical_note(text)
    explicit = first_match(EXPLICIT_INTENT_PATTERNS, candidate.text) is not None

    confidence = 0
    if candidate.is_explicit_checklist_item:
        confidence += CHECKLIST_SCORE
    if explicit:
        confidence += EXPLICIT_SCORE
    if shadow:
        confidence += SHADOW_SCORE
    if practical:
        confidence += PRACTICAL_SCORE

    analysis = IntentAnalysis(
        explicit_statement=candidate.text,
        shadow_rationale=shadow,
        practical_note=practical,
        priority=infer_priority(text),
        confidence=min(confidence, MAX_CONFIDENCE),
        tags=extract_tags(candidate.text),
    )
    logger.debug(
        "Line %d: priority=%s confidence=%d",
        candidate.line_number,
        analysis.priority.value,
        analysis.confidence,
    )
    return analysis
