"""
Rule-based priority classification.

Used whenever the external classifier is disabled, slow or unavailable.
Deterministic, no I/O, never raises.

Rules (first match wins):
1. Any emergency keyword          -> URGENT, 0.90 + 0.02 per keyword
2. Any high-priority keyword, or
   category MEDICAL / EMERGENCY   -> HIGH,   0.70 + 0.05 per keyword
3. Category FOOD                  -> HIGH,   0.75
4. Category EDUCATION / LEGAL     -> MEDIUM, 0.60
5. Anything else                  -> LOW,    0.40

Scores are capped at 0.99 and rounded to 2 decimals.
"""

from typing import Iterable, Optional

from triage_hub.models.triage import ClassificationResult, Priority, cap_score


EMERGENCY_KEYWORDS = (
    "emergency", "urgent", "critical", "accident", "fire",
    "flood", "earthquake", "blood", "heart attack", "stroke",
    "pregnant", "child", "baby", "missing", "danger",
    "dying", "emergency room", "hospital", "ambulance",
)

HIGH_PRIORITY_KEYWORDS = (
    "medicine", "medication", "sick", "fever", "cough",
    "hungry", "starving", "food", "water", "shelter",
    "homeless", "evicted", "no electricity", "no water",
)

HIGH_PRIORITY_CATEGORIES = {"MEDICAL", "EMERGENCY"}
MEDIUM_PRIORITY_CATEGORIES = {"EDUCATION", "LEGAL"}


def count_keywords(text: str, keywords: Iterable[str]) -> int:
    """Number of keywords contained in text (substring match, each counted once)."""
    return sum(1 for keyword in keywords if keyword in text)


def classify(
    title: Optional[str],
    description: Optional[str],
    category: Optional[str]
) -> ClassificationResult:
    """
    Classify a request from its text and category.

    Args:
        title: Request title
        description: Request description
        category: Request category as submitted (echoed as suggested_category)

    Returns:
        ClassificationResult
    """
    category = category or ""
    normalized_category = category.strip().upper()
    text = f"{title or ''} {description or ''}".lower()

    emergency_count = count_keywords(text, EMERGENCY_KEYWORDS)
    high_count = count_keywords(text, HIGH_PRIORITY_KEYWORDS)

    if emergency_count > 0:
        priority = Priority.URGENT
        score = 0.90 + 0.02 * emergency_count
        reason = f"Contains {emergency_count} emergency keyword(s)"
    elif high_count > 0 or normalized_category in HIGH_PRIORITY_CATEGORIES:
        priority = Priority.HIGH
        score = 0.70 + 0.05 * high_count
        if high_count > 0:
            reason = f"Contains {high_count} high-priority keyword(s)"
        else:
            reason = f"Category-based priority: {category}"
    elif normalized_category == "FOOD":
        priority = Priority.HIGH
        score = 0.75
        reason = f"Category-based priority: {category}"
    elif normalized_category in MEDIUM_PRIORITY_CATEGORIES:
        priority = Priority.MEDIUM
        score = 0.60
        reason = f"Category-based priority: {category}"
    else:
        priority = Priority.LOW
        score = 0.40
        reason = f"Category-based priority: {category}"

    return ClassificationResult(
        priority=priority,
        score=cap_score(score),
        reason=reason,
        suggested_category=category,
    )
