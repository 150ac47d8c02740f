"""Rule-based message classification.

Walks the tier tables in patterns.py to resolve as many fields as possible
without an LLM call. Pure and deterministic: no I/O, no randomness.
"""

import logging
from typing import Optional

from ..models import PartialResult
from .patterns import BUSINESS_TIERS, REPLY_TIERS, TIME_TIERS, first_match

logger = logging.getLogger("inbox_triage.classifier.rules")

__all__ = [
    "classify_business_value",
    "classify_by_rules",
    "classify_reply_needed",
    "classify_time_sensitivity",
]


def classify_business_value(text: str) -> tuple[Optional[float], Optional[str]]:
    """Resolve business_value_score and focus_summary_type together.

    Returns:
        (score, category) from the first matching tier, or (None, None).
    """
    match = first_match(BUSINESS_TIERS, text)
    if match is None:
        return None, None
    tier, rule = match
    return float(tier.value), rule.category


def classify_time_sensitivity(text: str) -> Optional[float]:
    match = first_match(TIME_TIERS, text)
    return float(match[0].value) if match else None


def classify_reply_needed(text: str) -> Optional[bool]:
    """Needs-reply trigger first, then the (guarded) no-reply trigger."""
    match = first_match(REPLY_TIERS, text)
    return bool(match[0].value) if match else None


def classify_by_rules(text: str) -> PartialResult:
    """Classify a message using the rule tables.

    Each field is resolved independently; fields no rule covers stay None.

    Args:
        text: Sanitized message text

    Returns:
        PartialResult with resolved fields set.

    Examples:
        >>> classify_by_rules("Need to book you for Friday ASAP! Can you confirm?")
        PartialResult(business_value_score=1.0, time_sensitive_score=1.0, needs_reply=True, focus_summary_type='Booking')
        >>> classify_by_rules("sdkfjhsdkfjh")
        PartialResult(business_value_score=None, time_sensitive_score=None, needs_reply=None, focus_summary_type=None)
    """
    if not text or not isinstance(text, str):
        return PartialResult()

    business_value_score, focus_summary_type = classify_business_value(text)
    result = PartialResult(
        business_value_score=business_value_score,
        time_sensitive_score=classify_time_sensitivity(text),
        needs_reply=classify_reply_needed(text),
        focus_summary_type=focus_summary_type,
    )

    logger.debug("rule_classification", extra={"resolved": list(result.resolved_fields)})
    return result
