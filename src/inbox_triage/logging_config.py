"""Structured logging configuration for inbox-triage.

- JSON structured logging with StructuredFormatter
- Logger hierarchy under the inbox_triage namespace
- Level and format taken from TriageConfig (LOG_LEVEL, LOG_FORMAT)
"""

import json
import logging
from datetime import datetime, timezone
from typing import Optional

__all__ = ["SENSITIVE_KEYS", "StructuredFormatter", "TextFormatter", "configure_logging"]

ROOT_LOGGER_NAME = "inbox_triage"

# Extras with these names are redacted in log output
SENSITIVE_KEYS = {
    "password", "token", "secret", "apikey", "api_key",
    "authorization", "credential", "auth", "key", "bearer",
}

_STANDARD_FIELDS = {
    "name",
    "msg",
    "args",
    "created",
    "filename",
    "funcName",
    "levelname",
    "levelno",
    "lineno",
    "module",
    "msecs",
    "message",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "thread",
    "threadName",
    "exc_info",
    "exc_text",
    "stack_info",
    "taskName",
}


class StructuredFormatter(logging.Formatter):
    """JSON structured log formatter.

    Outputs one JSON object per record with:
    - timestamp: UTC ISO 8601 with 'Z' suffix
    - level: Log level name
    - logger: Logger name (inbox_triage hierarchy)
    - message: Log message (an event name such as "rule_match")
    - context: Extras dict merged from LogRecord attributes

    Sensitive keys (api_key, token, ...) are redacted.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extras = {
            k: ("[REDACTED]" if k.lower() in SENSITIVE_KEYS else v)
            for k, v in record.__dict__.items()
            if k not in _STANDARD_FIELDS and not k.startswith("_")
        }

        if extras:
            log_data["context"] = extras

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable formatter for local development (LOG_FORMAT=text)."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


def configure_logging(level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Configure logging for all inbox_triage loggers.

    Args:
        level: Log level override. Defaults to TriageConfig.log_level.
        log_format: "json" or "text". Defaults to TriageConfig.log_format.
    """
    if level is None or log_format is None:
        from .config import get_config

        config = get_config()
        level = level or config.log_level
        log_format = log_format or config.log_format

    log_level = getattr(logging, level.upper(), logging.INFO)

    if log_format.lower() == "text":
        formatter: logging.Formatter = TextFormatter()
    else:
        formatter = StructuredFormatter()

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(log_level)

    # Only one handler, even if called repeatedly
    if not logger.handlers:
        handler = logging.StreamHandler()
        logger.addHandler(handler)
    for handler in logger.handlers:
        handler.setFormatter(formatter)

    logger.propagate = False
