"""Data models for message classification.

ClassificationResult is the only record handed to callers. PartialResult,
Example and SimilarityHit are internal to the classification pipeline.
"""

from dataclasses import dataclass, fields
from typing import Any, Literal, Optional, get_args

from pydantic import BaseModel, ConfigDict, Field, field_validator

__all__ = [
    "FOCUS_SUMMARY_TYPES",
    "SCORE_LEVELS",
    "ClassificationResult",
    "Example",
    "FocusSummaryType",
    "PartialResult",
    "SimilarityHit",
]

FocusSummaryType = Literal[
    "Booking",
    "Collab",
    "Brand reaching",
    "Feature",
    "Invoice",
    "Refund",
    "Affiliate",
    "General",
]

FOCUS_SUMMARY_TYPES: tuple[str, ...] = get_args(FocusSummaryType)

# Ordinal levels used by the rule tiers and the scoring instructions
SCORE_LEVELS: tuple[float, ...] = (0.0, 0.4, 0.7, 1.0)


class ClassificationResult(BaseModel):
    """Final classification of a message.

    Strict types: "true" is not a boolean and "0.7" is not a number.
    Unknown keys are dropped on validation.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", strict=True)

    needs_reply: bool = Field(description="True if the sender expects an answer")
    time_sensitive_score: float = Field(ge=0.0, le=1.0)
    business_value_score: float = Field(ge=0.0, le=1.0)
    focus_summary_type: FocusSummaryType
    reason: str = Field(min_length=1, description="Short 1-sentence justification")

    @field_validator("time_sensitive_score", "business_value_score", mode="before")
    @classmethod
    def reject_booleans(cls, v: Any) -> Any:
        # bool is an int subclass; a score of True is a type error, not 1.0
        if isinstance(v, bool):
            raise ValueError("must be a number, not a boolean")
        return v


@dataclass(frozen=True)
class PartialResult:
    """Rule-based classification where each field may be unknown (None).

    Created per message and discarded after the request; never shared.
    """

    business_value_score: Optional[float] = None
    time_sensitive_score: Optional[float] = None
    needs_reply: Optional[bool] = None
    focus_summary_type: Optional[str] = None

    @property
    def resolved_fields(self) -> dict[str, Any]:
        """Fields with a known value, in declaration order."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    def as_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class Example:
    """Labelled corpus entry with its precomputed embedding."""

    message: str
    classification: ClassificationResult
    embedding: tuple[float, ...]


@dataclass(frozen=True)
class SimilarityHit:
    """Example annotated with its cosine similarity to the current message."""

    example: Example
    similarity: float

    @property
    def message(self) -> str:
        return self.example.message

    @property
    def classification(self) -> ClassificationResult:
        return self.example.classification
