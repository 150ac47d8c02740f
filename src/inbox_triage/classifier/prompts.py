"""Escalation prompt templates.

Builds the system instructions and the user prompt sent to the generative
model when rule-based classification is not conclusive.
"""

import json
from typing import Any, Optional, Sequence

from ..models import PartialResult, SimilarityHit

__all__ = [
    "CLASSIFICATION_PROMPT",
    "HINTS_HEADER",
    "build_classification_prompt",
    "build_hints",
]

CLASSIFICATION_PROMPT = """You classify messages for a creator or small business.
Return STRICT JSON:
{
  "needs_reply": true | false,
  "time_sensitive_score": 0.0-1.0,
  "business_value_score": 0.0-1.0,
  "focus_summary_type": "Booking" | "Collab" | "Brand reaching" | "Feature" | "Invoice" | "Refund" | "Affiliate" | "General",
  "reason": "<short 1-sentence explanation>"
}

Rules:
- time_sensitive_score = 1.0 if explicit date/time or urgent term (tonight, ASAP, by Friday)
- 0.7 if implied soon (next week, confirm, shipped yet)
- 0.4 if planning/logistics
- 0.0 if no urgency (compliment, casual)
- business_value_score = 1.0 for bookings/invoices/refunds
                         0.7 for collabs/features
                         0.4 for general inquiries
                         0.0 for praise
- needs_reply = true if action/confirmation requested"""

EXAMPLES_PREAMBLE = "Here are some similar messages and how they were classified:"
EXAMPLES_SEPARATOR = "---"
CLASSIFY_INSTRUCTION = "Now classify this message:"
HINTS_HEADER = "Hints (you may override if context suggests otherwise):"

TRUNCATION_MARKER = "\n\n[...truncated]"


def _format_hint_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_hints(partial: PartialResult) -> list[str]:
    """One suggestion line per field the rules resolved.

    Order: business_value_score, time_sensitive_score, needs_reply,
    focus_summary_type. Unresolved fields produce no line.

    Examples:
        >>> build_hints(PartialResult(business_value_score=0.7, needs_reply=True))
        ['Suggested business_value_score: 0.7', 'Suggested needs_reply: true']
    """
    return [
        f"Suggested {name}: {_format_hint_value(value)}"
        for name, value in partial.resolved_fields.items()
    ]


def _message_line(message: str) -> str:
    return f"Message: <<<{message}>>>"


def build_classification_prompt(
    message: str,
    similar: Sequence[SimilarityHit] = (),
    hints: Sequence[str] = (),
    max_input_chars: Optional[int] = None,
) -> str:
    """Build the user prompt for an escalated classification.

    Layout with examples: preamble, examples in rank order, separator,
    classify instruction with the message, then hints if any. Without
    examples the prompt is just the message line plus hints.

    Args:
        message: Sanitized message text
        similar: Retrieved examples, most similar first
        hints: Lines from build_hints()
        max_input_chars: Truncate the message beyond this length

    Returns:
        Formatted prompt string
    """
    if max_input_chars is None:
        from ..config import get_config

        max_input_chars = get_config().max_input_chars

    if len(message) > max_input_chars:
        message = message[:max_input_chars] + TRUNCATION_MARKER

    sections: list[str] = []

    if similar:
        sections.append(EXAMPLES_PREAMBLE)
        for rank, hit in enumerate(similar, start=1):
            classification = json.dumps(hit.classification.model_dump())
            sections.append(
                f"Example {rank}:\n{_message_line(hit.message)}\nClassification: {classification}"
            )
        sections.append(EXAMPLES_SEPARATOR)
        sections.append(f"{CLASSIFY_INSTRUCTION}\n{_message_line(message)}")
    else:
        sections.append(_message_line(message))

    if hints:
        sections.append(HINTS_HEADER + "\n" + "\n".join(hints))

    return "\n\n".join(sections)
