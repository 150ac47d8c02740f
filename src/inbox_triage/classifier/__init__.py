"""Hybrid message classification.

Pattern rules resolve what they can; the generative model is called only
when the rules are not conclusive.

Public API:
    - HybridClassifier: Rules-first classifier with LLM escalation
    - ClassificationOutcome: Result plus metadata
    - ClassificationError: Escalation failure
    - classify_by_rules(): Rule-based classification
    - check_completeness(): Completeness gate
    - validate_classification(): Schema check for model replies
"""

from .completeness import Completeness, check_completeness, heuristic_confidence
from .llm_classifier import (
    ClassificationError,
    ClassificationMetadata,
    ClassificationOutcome,
    HybridClassifier,
    build_provider,
)
from .prompts import CLASSIFICATION_PROMPT, build_classification_prompt, build_hints
from .rules import classify_by_rules
from .schema import SchemaValidationError, validate_classification

__all__ = [
    "CLASSIFICATION_PROMPT",
    "ClassificationError",
    "ClassificationMetadata",
    "ClassificationOutcome",
    "Completeness",
    "HybridClassifier",
    "SchemaValidationError",
    "build_classification_prompt",
    "build_hints",
    "build_provider",
    "check_completeness",
    "classify_by_rules",
    "heuristic_confidence",
    "validate_classification",
]
