"""Prometheus metrics for message classification.

Uses the `inboxtriage_*` prefix for all metrics.
"""

import logging

from prometheus_client import Counter, Histogram

logger = logging.getLogger("inbox_triage.classifier.metrics")

__all__ = [
    "classifier_escalations_total",
    "classifier_heuristic_confidence",
    "classifier_latency_seconds",
    "classifier_requests_total",
    "classifier_retrieval_degraded_total",
    "classifier_rule_matches_total",
    "classifier_tokens_total",
    "record_classification",
    "record_escalation",
    "record_retrieval_degraded",
    "record_rule_match",
]

# =============================================================================
# PROMETHEUS METRICS
# =============================================================================

# Request tracking
classifier_requests_total = Counter(
    "inboxtriage_classifier_requests_total",
    "Total classification requests",
    ["method", "status", "focus_summary_type"],  # method: heuristic/llm
)

# Token usage (escalated requests only)
classifier_tokens_total = Counter(
    "inboxtriage_classifier_tokens_total",
    "Total tokens used by the generative model",
    ["provider", "direction"],  # direction: input/output
)

# Latency
classifier_latency_seconds = Histogram(
    "inboxtriage_classifier_latency_seconds",
    "Classification latency",
    ["method"],
    buckets=[0.001, 0.01, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0],
)

# Escalations by gate outcome
classifier_escalations_total = Counter(
    "inboxtriage_classifier_escalations_total",
    "Messages escalated to the generative model",
    ["completeness"],  # partial/empty
)

# Rule-based field resolution
classifier_rule_matches_total = Counter(
    "inboxtriage_classifier_rule_matches_total",
    "Fields resolved by pattern rules",
    ["field"],
)

# Retrieval degraded to zero examples
classifier_retrieval_degraded_total = Counter(
    "inboxtriage_classifier_retrieval_degraded_total",
    "Escalations that ran without similar examples",
    ["reason"],  # embedding_error/empty_corpus/disabled
)

# Heuristic confidence distribution
classifier_heuristic_confidence = Histogram(
    "inboxtriage_classifier_heuristic_confidence",
    "Fraction of fields resolved by pattern rules on escalated messages",
    buckets=[0.0, 0.25, 0.5, 0.75, 1.0],
)

# =============================================================================
# HELPER FUNCTIONS
# =============================================================================


def record_classification(
    method: str,
    focus_summary_type: str,
    success: bool,
    latency_seconds: float,
    provider: str | None = None,
    input_tokens: int = 0,
    output_tokens: int = 0,
):
    """Record a classification event with all metrics.

    Args:
        method: "heuristic" or "llm"
        focus_summary_type: Category assigned ("none" on failure)
        success: True if classification succeeded, False if error
        latency_seconds: Time taken for classification
        provider: Provider name for escalated requests
        input_tokens: Number of input tokens used
        output_tokens: Number of output tokens generated

    Example:
        >>> record_classification(
        ...     method="llm",
        ...     focus_summary_type="Collab",
        ...     success=True,
        ...     latency_seconds=0.82,
        ...     provider="openai",
        ...     input_tokens=410,
        ...     output_tokens=60,
        ... )
    """
    status = "success" if success else "error"

    classifier_requests_total.labels(
        method=method,
        status=status,
        focus_summary_type=focus_summary_type,
    ).inc()

    classifier_latency_seconds.labels(method=method).observe(latency_seconds)

    if provider and input_tokens > 0:
        classifier_tokens_total.labels(provider=provider, direction="input").inc(input_tokens)

    if provider and output_tokens > 0:
        classifier_tokens_total.labels(provider=provider, direction="output").inc(output_tokens)

    logger.debug(
        "classification_recorded",
        extra={
            "method": method,
            "type": focus_summary_type,
            "success": success,
            "latency_seconds": latency_seconds,
        },
    )


def record_escalation(completeness: str, confidence: float):
    """Record a message the rules could not settle.

    Example:
        >>> record_escalation("partial", 0.75)
    """
    classifier_escalations_total.labels(completeness=completeness).inc()
    classifier_heuristic_confidence.observe(confidence)


def record_rule_match(field: str):
    """Record one field resolved by the pattern rules.

    Example:
        >>> record_rule_match("needs_reply")
    """
    classifier_rule_matches_total.labels(field=field).inc()


def record_retrieval_degraded(reason: str):
    """Record an escalation that proceeds without similar examples.

    Args:
        reason: embedding_error, empty_corpus or disabled
    """
    classifier_retrieval_degraded_total.labels(reason=reason).inc()

    logger.debug("retrieval_degraded_recorded", extra={"reason": reason})
