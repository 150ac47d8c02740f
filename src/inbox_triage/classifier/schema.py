"""Validation of generative-model replies.

A model reply starts life as an UntrustedResponse. The only way to obtain a
ClassificationResult from it is validate_response(), which returns a
ValidatedResponse or raises SchemaValidationError. Nothing downstream
accepts an UntrustedResponse.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Union

from pydantic import ValidationError

from ..models import FOCUS_SUMMARY_TYPES, ClassificationResult

logger = logging.getLogger("inbox_triage.classifier.schema")

__all__ = [
    "ModelReply",
    "SchemaValidationError",
    "UntrustedResponse",
    "ValidatedResponse",
    "parse_model_output",
    "validate_classification",
    "validate_response",
]

_CODE_BLOCK = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL)


class SchemaValidationError(ValueError):
    """Raised when a model reply does not match the ClassificationResult schema.

    Attributes:
        errors: Human-readable list of violated constraints
    """

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("Invalid classification: " + "; ".join(self.errors))


@dataclass(frozen=True)
class UntrustedResponse:
    """Parsed but unchecked model output."""

    payload: Any
    raw_text: str = ""


@dataclass(frozen=True)
class ValidatedResponse:
    """Model output that passed schema validation."""

    classification: ClassificationResult


ModelReply = Union[UntrustedResponse, ValidatedResponse]


def parse_model_output(raw_text: str) -> UntrustedResponse:
    """Parse the model's raw text as JSON.

    Accepts clean JSON or JSON wrapped in a markdown code block.

    Raises:
        ValueError: If no JSON can be parsed.
    """
    text = (raw_text or "").strip()

    try:
        return UntrustedResponse(payload=json.loads(text), raw_text=raw_text)
    except json.JSONDecodeError:
        pass

    code_block_match = _CODE_BLOCK.search(text)
    if code_block_match:
        try:
            return UntrustedResponse(payload=json.loads(code_block_match.group(1)), raw_text=raw_text)
        except json.JSONDecodeError:
            pass

    logger.warning("json_parse_failed", extra={"response_preview": text[:200]})
    raise ValueError(f"Could not parse JSON from model response: {text[:100]}")


def _describe(error: dict) -> str:
    field = ".".join(str(part) for part in error["loc"]) or "response"
    if error["type"] == "missing":
        return f"{field} is required"
    if error["type"] == "literal_error":
        return f"{field} must be one of: {', '.join(FOCUS_SUMMARY_TYPES)}"
    return f"{field}: {error['msg']}"


def validate_classification(payload: Any) -> ClassificationResult:
    """Validate a parsed payload against the ClassificationResult schema.

    Unknown extra fields are stripped; nothing is coerced or defaulted.

    Raises:
        SchemaValidationError: With one entry per violated constraint,
            e.g. "time_sensitive_score: Input should be less than or equal to 1".
    """
    if not isinstance(payload, dict):
        raise SchemaValidationError([f"response must be a JSON object, got {type(payload).__name__}"])

    try:
        return ClassificationResult.model_validate(payload)
    except ValidationError as e:
        errors = [_describe(error) for error in e.errors()]
        logger.warning("classification_schema_invalid", extra={"errors": errors})
        raise SchemaValidationError(errors) from e


def validate_response(reply: UntrustedResponse) -> ValidatedResponse:
    """Promote an UntrustedResponse to a ValidatedResponse."""
    return ValidatedResponse(classification=validate_classification(reply.payload))
