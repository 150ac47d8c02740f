"""Inbox triage - hybrid classification of inbound messages.

Scores creator and small-business messages for reply need, urgency,
business value and category:
- Configuration management with environment overrides
- Deterministic pattern rules with a completeness gate
- Few-shot retrieval over a precomputed example corpus
- Single-call LLM escalation with strict response validation

Call configure_logging() from the entry point; importing the package does
not touch logging handlers.
"""

from .__version__ import __version__
from .classifier import (
    ClassificationError,
    ClassificationOutcome,
    HybridClassifier,
    build_provider,
    classify_by_rules,
)
from .config import TriageConfig, get_config, reset_config
from .corpus import CorpusError, ExampleCorpus, load_corpus
from .embeddings import AsyncEmbeddingClient, EmbeddingError
from .logging_config import StructuredFormatter, configure_logging
from .models import ClassificationResult, PartialResult
from .search import SimilarityRetriever, cosine_similarity
from .validation import MessageValidationError, validate_message

__all__ = [
    "__version__",
    # Configuration
    "TriageConfig",
    "get_config",
    "reset_config",
    # Logging
    "StructuredFormatter",
    "configure_logging",
    # Models
    "ClassificationResult",
    "PartialResult",
    # Classification
    "ClassificationError",
    "ClassificationOutcome",
    "HybridClassifier",
    "build_provider",
    "classify_by_rules",
    # Retrieval
    "AsyncEmbeddingClient",
    "CorpusError",
    "EmbeddingError",
    "ExampleCorpus",
    "SimilarityRetriever",
    "cosine_similarity",
    "load_corpus",
    # Input
    "MessageValidationError",
    "validate_message",
]
