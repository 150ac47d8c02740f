"""Main classification orchestrator.

Coordinates rule-based and LLM-based classification: pattern rules first,
the completeness gate second, and a single model call (with similar
examples and hints) only when the rules are not conclusive.
"""

import logging
import time
from dataclasses import asdict, dataclass, field
from typing import Any, Optional

from ..config import TriageConfig, get_config
from ..embeddings import AsyncEmbeddingClient, EmbeddingError
from ..models import ClassificationResult, PartialResult, SimilarityHit
from ..search import SimilarityRetriever
from .completeness import (
    Completeness,
    check_completeness,
    heuristic_confidence,
    promote_to_result,
)
from .metrics import (
    record_classification,
    record_escalation,
    record_retrieval_degraded,
    record_rule_match,
)
from .prompts import CLASSIFICATION_PROMPT, build_classification_prompt, build_hints
from .providers import BaseProvider, ClaudeProvider, OpenAIProvider
from .rules import classify_by_rules
from .schema import SchemaValidationError, parse_model_output, validate_response

logger = logging.getLogger("inbox_triage.classifier.llm_classifier")

__all__ = [
    "ClassificationError",
    "ClassificationMetadata",
    "ClassificationOutcome",
    "HybridClassifier",
    "build_provider",
]

METHOD_HEURISTIC = "heuristic"
METHOD_LLM = "llm"


class ClassificationError(Exception):
    """Raised when an escalated classification cannot produce a result.

    Attributes:
        details: Schema violations when the model reply was invalid, else empty
    """

    def __init__(self, message: str, details: Optional[list[str]] = None):
        self.details = list(details or [])
        super().__init__(message)


@dataclass(frozen=True)
class ClassificationMetadata:
    """How a classification was produced.

    Attributes:
        method: "heuristic" (rules only) or "llm" (escalated)
        completeness: Gate outcome (conclusive, partial, empty)
        heuristic_confidence: Fraction of fields the rules resolved
        hints_provided: Number of hint lines sent to the model
        similar_examples_used: Number of few-shot examples sent to the model
        embeddings_available: True if the message was embedded successfully
        model: Model that answered (escalated requests only)
        input_tokens: Input tokens used by the model call
        output_tokens: Output tokens used by the model call
        execution_time_ms: Wall time of the whole pipeline
    """

    method: str
    completeness: str
    heuristic_confidence: float
    hints_provided: int = 0
    similar_examples_used: int = 0
    embeddings_available: bool = False
    model: Optional[str] = None
    input_tokens: int = 0
    output_tokens: int = 0
    execution_time_ms: float = 0.0

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ClassificationOutcome:
    """Validated classification plus the metadata describing its origin."""

    classification: ClassificationResult
    metadata: ClassificationMetadata

    @property
    def method(self) -> str:
        return self.metadata.method


@dataclass
class _Retrieval:
    hits: tuple[SimilarityHit, ...] = field(default_factory=tuple)
    embedded: bool = False


def build_provider(config: Optional[TriageConfig] = None) -> BaseProvider:
    """Build the generative-model provider named by ``config.llm_provider``.

    Args:
        config: Configuration (defaults to the global config)

    Returns:
        OpenAIProvider or ClaudeProvider
    """
    config = config or get_config()

    if config.llm_provider == "claude":
        api_key = config.anthropic_api_key
        return ClaudeProvider(
            api_key=api_key.get_secret_value() if api_key is not None else None,
            model=config.anthropic_model,
            timeout=config.llm_timeout,
            temperature=config.llm_temperature,
            max_output_tokens=config.max_output_tokens,
        )

    api_key = config.openai_api_key
    return OpenAIProvider(
        api_key=api_key.get_secret_value() if api_key is not None else None,
        model=config.openai_model,
        base_url=config.openai_base_url,
        timeout=config.llm_timeout,
        temperature=config.llm_temperature,
        max_output_tokens=config.max_output_tokens,
    )


class HybridClassifier:
    """Rules-first message classifier with LLM escalation.

    Holds only read-only state (corpus, clients, config); one instance
    serves all concurrent requests.

    Attributes:
        retriever: Similarity retriever over the example corpus
        provider: Generative-model provider used on escalation
        embedder: Embedding client, or None to disable retrieval
        config: TriageConfig
    """

    def __init__(
        self,
        retriever: SimilarityRetriever,
        provider: BaseProvider,
        embedder: Optional[AsyncEmbeddingClient] = None,
        config: Optional[TriageConfig] = None,
    ):
        self.retriever = retriever
        self.provider = provider
        self.embedder = embedder
        self.config = config or get_config()

    async def classify(self, message: str) -> ClassificationOutcome:
        """Classify a sanitized message.

        Classification flow:
        1. Apply pattern rules to get a PartialResult
        2. Conclusive: return the heuristic result, no external calls
        3. Otherwise embed the message and retrieve similar examples
           (any failure here means zero examples, never an error)
        4. Build the prompt with examples and hints, call the model once
        5. Parse and validate the reply

        Args:
            message: Sanitized message text

        Returns:
            ClassificationOutcome

        Raises:
            ClassificationError: If the model call fails or its reply is invalid.
            ValueError: If the message embedding and the corpus differ in dimension.

        Examples:
            >>> outcome = await classifier.classify("Need to book you for Friday ASAP! Can you confirm?")
            >>> outcome.method
            'heuristic'
        """
        start_time = time.perf_counter()

        partial = classify_by_rules(message)
        for field_name in partial.resolved_fields:
            record_rule_match(field_name)

        completeness = check_completeness(partial)
        confidence = heuristic_confidence(partial)

        if completeness is Completeness.CONCLUSIVE:
            result = promote_to_result(partial)
            elapsed = time.perf_counter() - start_time

            logger.info(
                "heuristic_classification",
                extra={
                    "focus_summary_type": result.focus_summary_type,
                    "needs_reply": result.needs_reply,
                    "duration_ms": round(elapsed * 1000, 2),
                },
            )
            record_classification(
                method=METHOD_HEURISTIC,
                focus_summary_type=result.focus_summary_type,
                success=True,
                latency_seconds=elapsed,
            )

            return ClassificationOutcome(
                classification=result,
                metadata=ClassificationMetadata(
                    method=METHOD_HEURISTIC,
                    completeness=completeness.value,
                    heuristic_confidence=confidence,
                    execution_time_ms=round(elapsed * 1000, 2),
                ),
            )

        record_escalation(completeness.value, confidence)

        try:
            return await self._escalate(message, partial, completeness, confidence, start_time)
        except (ClassificationError, ValueError):
            record_classification(
                method=METHOD_LLM,
                focus_summary_type="none",
                success=False,
                latency_seconds=time.perf_counter() - start_time,
                provider=self.provider.name,
            )
            raise

    async def _escalate(
        self,
        message: str,
        partial: PartialResult,
        completeness: Completeness,
        confidence: float,
        start_time: float,
    ) -> ClassificationOutcome:
        hints = build_hints(partial) if completeness is Completeness.PARTIAL else []
        retrieval = await self._retrieve(message)

        prompt = build_classification_prompt(
            message,
            similar=retrieval.hits,
            hints=hints,
            max_input_chars=self.config.max_input_chars,
        )

        logger.debug(
            "escalating_to_llm",
            extra={
                "provider": self.provider.name,
                "completeness": completeness.value,
                "hints": len(hints),
                "examples": len(retrieval.hits),
            },
        )

        try:
            response = await self.provider.complete(CLASSIFICATION_PROMPT, prompt)
        except (TimeoutError, ConnectionError, ValueError) as e:
            logger.error(
                "llm_call_failed",
                extra={"provider": self.provider.name, "error": str(e), "error_type": type(e).__name__},
            )
            raise ClassificationError(f"{self.provider.name} request failed: {e}") from e

        try:
            reply = parse_model_output(response.text)
        except ValueError as e:
            raise ClassificationError(f"Model returned invalid JSON: {e}") from e

        try:
            validated = validate_response(reply)
        except SchemaValidationError as e:
            logger.error("llm_response_invalid", extra={"errors": e.errors})
            raise ClassificationError("Invalid classification response from LLM", details=e.errors) from e

        result = validated.classification
        elapsed = time.perf_counter() - start_time

        logger.info(
            "llm_classification",
            extra={
                "provider": self.provider.name,
                "model": response.model_name,
                "focus_summary_type": result.focus_summary_type,
                "input_tokens": response.input_tokens,
                "output_tokens": response.output_tokens,
                "duration_ms": round(elapsed * 1000, 2),
            },
        )
        record_classification(
            method=METHOD_LLM,
            focus_summary_type=result.focus_summary_type,
            success=True,
            latency_seconds=elapsed,
            provider=self.provider.name,
            input_tokens=response.input_tokens,
            output_tokens=response.output_tokens,
        )

        return ClassificationOutcome(
            classification=result,
            metadata=ClassificationMetadata(
                method=METHOD_LLM,
                completeness=completeness.value,
                heuristic_confidence=confidence,
                hints_provided=len(hints),
                similar_examples_used=len(retrieval.hits),
                embeddings_available=retrieval.embedded,
                model=response.model_name or self.provider.model,
                input_tokens=response.input_tokens,
                output_tokens=response.output_tokens,
                execution_time_ms=round(elapsed * 1000, 2),
            ),
        )

    async def _retrieve(self, message: str) -> _Retrieval:
        """Embed the message and fetch similar examples, degrading to none."""
        if self.embedder is None or not self.config.embeddings_enabled:
            record_retrieval_degraded("disabled")
            return _Retrieval()

        if not self.retriever.available:
            logger.warning("retrieval_skipped_empty_corpus")
            record_retrieval_degraded("empty_corpus")
            return _Retrieval()

        try:
            embedding = await self.embedder.embed(message)
        except EmbeddingError as e:
            logger.warning("retrieval_degraded", extra={"reason": "embedding_error", "error": str(e)})
            record_retrieval_degraded("embedding_error")
            return _Retrieval()

        hits = self.retriever.find_similar(message, embedding, k=self.config.similar_examples_k)
        return _Retrieval(hits=hits, embedded=True)

    async def aclose(self) -> None:
        """Close the provider and embedding clients."""
        await self.provider.aclose()
        if self.embedder is not None:
            await self.embedder.aclose()
