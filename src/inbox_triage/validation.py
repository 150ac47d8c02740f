"""Inbound message validation and sanitization.

Runs at the HTTP boundary before anything reaches the rule classifier.
"""

import re
from typing import Any

__all__ = [
    "DEFAULT_MAX_MESSAGE_LENGTH",
    "MessageValidationError",
    "contains_suspicious_content",
    "sanitize_message",
    "validate_message",
]

DEFAULT_MAX_MESSAGE_LENGTH = 5000

# Control characters except tab (\x09), newline (\x0A) and carriage return (\x0D)
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_WHITESPACE_RUN = re.compile(r"\s+")
_SCRIPT_TAG = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_SPECIAL_CHARS = re.compile(r"[<>{}\[\]]")


class MessageValidationError(ValueError):
    """Raised when an inbound message is rejected."""

    pass


def sanitize_message(message: Any) -> str:
    """Strip control characters, trim, and collapse whitespace runs.

    Non-string input sanitizes to an empty string.
    """
    if not isinstance(message, str):
        return ""

    sanitized = _CONTROL_CHARS.sub("", message)
    return _WHITESPACE_RUN.sub(" ", sanitized.strip())


def validate_message(message: Any, max_length: int = DEFAULT_MAX_MESSAGE_LENGTH) -> str:
    """Validate and sanitize a message for classification.

    The length limit applies to the raw message.

    Returns:
        The sanitized message.

    Raises:
        MessageValidationError: If the message is missing, not a string,
            too long, or empty after sanitization.
    """
    if message is None:
        raise MessageValidationError("Message is required")

    if not isinstance(message, str):
        raise MessageValidationError("Message must be a string")

    if len(message) > max_length:
        raise MessageValidationError(
            f"Message exceeds maximum length of {max_length} characters"
        )

    sanitized = sanitize_message(message)
    if not sanitized:
        raise MessageValidationError("Message cannot be empty after sanitization")

    return sanitized


def contains_suspicious_content(message: str) -> bool:
    """Flag script tags or a high ratio (>30%) of bracket characters."""
    if not message:
        return False

    if _SCRIPT_TAG.search(message):
        return True

    special_count = len(_SPECIAL_CHARS.findall(message))
    return special_count / len(message) > 0.3
