"""Completeness gate for rule-based results.

Decides whether a PartialResult can be returned as-is or must be escalated
to the LLM, with or without hints.
"""

import logging
from enum import Enum

from ..models import ClassificationResult, PartialResult

logger = logging.getLogger("inbox_triage.classifier.completeness")

__all__ = [
    "Completeness",
    "check_completeness",
    "heuristic_confidence",
    "promote_to_result",
]

FIELD_COUNT = 4


class Completeness(str, Enum):
    """How much of a message the rules resolved."""

    CONCLUSIVE = "conclusive"  # All four fields known, no LLM call
    PARTIAL = "partial"  # Escalate with hints for the known fields
    EMPTY = "empty"  # Escalate without hints


def check_completeness(partial: PartialResult) -> Completeness:
    """Classify a PartialResult into CONCLUSIVE, PARTIAL or EMPTY.

    Examples:
        >>> check_completeness(PartialResult())
        <Completeness.EMPTY: 'empty'>
        >>> check_completeness(PartialResult(business_value_score=0.7, focus_summary_type="Collab"))
        <Completeness.PARTIAL: 'partial'>
    """
    resolved = len(partial.resolved_fields)
    if resolved == FIELD_COUNT:
        return Completeness.CONCLUSIVE
    if resolved == 0:
        return Completeness.EMPTY
    return Completeness.PARTIAL


def heuristic_confidence(partial: PartialResult) -> float:
    """One quarter per resolved field. Reported, never used for gating."""
    return len(partial.resolved_fields) / FIELD_COUNT


def promote_to_result(partial: PartialResult) -> ClassificationResult:
    """Turn a conclusive PartialResult into a final ClassificationResult.

    Raises:
        ValueError: If the partial result is not conclusive.
    """
    if check_completeness(partial) is not Completeness.CONCLUSIVE:
        raise ValueError("Only a conclusive rule result can be promoted")

    return ClassificationResult(
        needs_reply=partial.needs_reply,
        time_sensitive_score=partial.time_sensitive_score,
        business_value_score=partial.business_value_score,
        focus_summary_type=partial.focus_summary_type,
        reason=f"Pattern-matched as {partial.focus_summary_type.lower()} with clear indicators",
    )
