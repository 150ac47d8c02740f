"""Rule tables for heuristic message classification.

Each table is an ordered tuple of tiers; each tier is an ordered tuple of
rules. Evaluation order is the declaration order: the first tier with a
matching rule wins, and inside that tier the first matching rule supplies
the category. Edit the tables here, not the evaluation code in rules.py.
"""

import re
from dataclasses import dataclass
from typing import Callable, Optional, Union

__all__ = [
    "BUSINESS_TIERS",
    "REPLY_TIERS",
    "TIME_TIERS",
    "PatternRule",
    "Tier",
    "first_match",
    "no_question_mark",
]

Guard = Callable[[str], bool]


def no_question_mark(text: str) -> bool:
    """Guard for praise rules: only active when the message asks nothing."""
    return "?" not in text


@dataclass(frozen=True)
class PatternRule:
    """A case-insensitive matcher with an optional guard.

    Attributes:
        pattern: Compiled regex (re.IGNORECASE)
        category: focus_summary_type for business rules, None elsewhere
        guard: Predicate evaluated against the original-case message
    """

    pattern: re.Pattern
    category: Optional[str] = None
    guard: Optional[Guard] = None

    def matches(self, text: str) -> bool:
        if not self.pattern.search(text):
            return False
        return self.guard is None or self.guard(text)


@dataclass(frozen=True)
class Tier:
    """Priority bucket of rules sharing one output value."""

    name: str
    value: Union[float, bool]
    rules: tuple[PatternRule, ...]


def _rule(pattern: str, category: Optional[str] = None, guard: Optional[Guard] = None) -> PatternRule:
    return PatternRule(re.compile(pattern, re.IGNORECASE), category, guard)


_WEEKDAYS = r"monday|tuesday|wednesday|thursday|friday|saturday|sunday|mon|tue|wed|thu|fri|sat|sun"
_PRAISE = r"love|amazing|great|awesome|fantastic|excellent|beautiful|wonderful"

# =============================================================================
# BUSINESS VALUE (score + focus_summary_type)
# =============================================================================
BUSINESS_TIERS: tuple[Tier, ...] = (
    Tier(
        name="high",
        value=1.0,
        rules=(
            _rule(r"\b(book|booking|reserve|hire|event|gig|performance|rate)\b", "Booking"),
            _rule(r"\b(invoice|payment|paid|pay)\b", "Invoice"),
            _rule(r"\b(refund)\b", "Refund"),
            _rule(r"\b(contract)\b", "Booking"),
        ),
    ),
    Tier(
        name="medium_high",
        value=0.7,
        rules=(
            _rule(r"\b(collab\w*|partner\w*|work together)\b", "Collab"),
            _rule(
                r"\b(brand|sponsor\w*|campaign|ambassador|promot\w*|marketing)\b",
                "Brand reaching",
            ),
            _rule(r"\b(feature|request|suggest\w*|add\w*|improvement|bug|issue)\b", "Feature"),
            _rule(r"\b(affiliate|commission|referral)\b", "Affiliate"),
        ),
    ),
    Tier(
        name="medium",
        value=0.4,
        rules=(_rule(r"\b(shop|merch|discount|buy|purchase)\b", "General"),),
    ),
    Tier(
        name="low",
        value=0.0,
        rules=(_rule(rf"\b({_PRAISE})\b", "General", guard=no_question_mark),),
    ),
)

# =============================================================================
# TIME SENSITIVITY
# =============================================================================
TIME_TIERS: tuple[Tier, ...] = (
    Tier(
        name="urgent",
        value=1.0,
        rules=(
            _rule(
                r"\b(today|tonight|asap|urgent|immediately|right now"
                rf"|by\s+({_WEEKDAYS})"
                r"|by\s+end\s+of\s+(day|week)"
                r"|\d{1,2}/\d{1,2}|\d{1,2}:\d{2})\b"
            ),
        ),
    ),
    Tier(
        name="soon",
        value=0.7,
        rules=(_rule(r"\b(next week|soon|confirm|shipped yet|when|deadline)\b"),),
    ),
    Tier(
        name="planning",
        value=0.4,
        rules=(_rule(r"\b(how long|planning|schedule|rate|timeline)\b"),),
    ),
    Tier(
        name="casual",
        value=0.0,
        rules=(
            _rule(
                rf"\b({_PRAISE}|thank|thanks|appreciate|congrat)\b",
                guard=no_question_mark,
            ),
        ),
    ),
)

# =============================================================================
# REPLY NEED
# =============================================================================
REPLY_TIERS: tuple[Tier, ...] = (
    Tier(
        name="needs_reply",
        value=True,
        rules=(
            _rule(
                r"\?|can you|would you|could you|please|let me know|confirm|need"
                r"|want to|interested|available"
            ),
        ),
    ),
    Tier(
        name="no_reply",
        value=False,
        rules=(
            _rule(
                r"\b(love|thank|thanks|appreciate|congrat|awesome|amazing|great work)\b",
                guard=no_question_mark,
            ),
        ),
    ),
)


def first_match(tiers: tuple[Tier, ...], text: str) -> Optional[tuple[Tier, PatternRule]]:
    """Return the first (tier, rule) pair that matches, or None."""
    for tier in tiers:
        for rule in tier.rules:
            if rule.matches(text):
                return tier, rule
    return None
