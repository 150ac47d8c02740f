"""Shared pytest fixtures for inbox-triage tests.

Fixture Organization:
    - Environment fixtures: config cache reset, logging reset
    - Sample data fixtures: labelled examples and a small in-memory corpus
    - Mock fixtures: embedding client and generative-model provider
"""

import contextlib
import json
import logging
from unittest.mock import AsyncMock, Mock

import pytest

from inbox_triage.classifier.providers.base import BaseProvider, ProviderResponse
from inbox_triage.config import TriageConfig, reset_config
from inbox_triage.corpus import ExampleCorpus
from inbox_triage.embeddings import AsyncEmbeddingClient
from inbox_triage.models import ClassificationResult, Example

# Environment variables that would leak into TriageConfig defaults
CONFIG_ENV_VARS = [
    "LLM_PROVIDER",
    "OPENAI_API_KEY",
    "OPENAI_BASE_URL",
    "OPENAI_MODEL",
    "ANTHROPIC_API_KEY",
    "ANTHROPIC_MODEL",
    "LLM_TEMPERATURE",
    "MAX_OUTPUT_TOKENS",
    "LLM_TIMEOUT",
    "MAX_INPUT_CHARS",
    "EMBEDDINGS_ENABLED",
    "EMBEDDING_BASE_URL",
    "EMBEDDING_MODEL",
    "EMBEDDING_TIMEOUT",
    "CORPUS_PATH",
    "SIMILAR_EXAMPLES_K",
    "MAX_MESSAGE_LENGTH",
    "LOG_LEVEL",
    "LOG_FORMAT",
    "HOST",
    "PORT",
]


# =============================================================================
# Metrics Registry Reset
# =============================================================================


def pytest_sessionstart(session):
    """Clear the Prometheus REGISTRY before collection imports the metrics modules."""
    from prometheus_client import REGISTRY

    collectors = list(REGISTRY._names_to_collectors.values())
    for collector in collectors:
        with contextlib.suppress(Exception):
            REGISTRY.unregister(collector)


# =============================================================================
# Environment Fixtures (Autouse)
# =============================================================================


@pytest.fixture(autouse=True)
def clean_config_env(monkeypatch):
    """Remove config env vars and clear the cached config around each test."""
    for key in CONFIG_ENV_VARS:
        monkeypatch.delenv(key, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset inbox_triage loggers so caplog can capture records.

    configure_logging() installs a handler and disables propagation; the
    API lifespan calls it.
    """
    for name in list(logging.Logger.manager.loggerDict.keys()):
        if name.startswith("inbox_triage"):
            child_logger = logging.getLogger(name)
            child_logger.handlers.clear()
            child_logger.propagate = True

    root = logging.getLogger("inbox_triage")
    root.handlers.clear()
    root.propagate = True
    root.setLevel(logging.NOTSET)

    yield

    for name in list(logging.Logger.manager.loggerDict.keys()):
        if name.startswith("inbox_triage"):
            child_logger = logging.getLogger(name)
            child_logger.handlers.clear()
            child_logger.propagate = True
    root.setLevel(logging.NOTSET)


# =============================================================================
# Sample Data Fixtures
# =============================================================================


def make_classification(**overrides) -> ClassificationResult:
    """Build a valid ClassificationResult, overriding selected fields."""
    data = {
        "needs_reply": True,
        "time_sensitive_score": 0.4,
        "business_value_score": 0.7,
        "focus_summary_type": "Collab",
        "reason": "Creator proposes a collaboration.",
    }
    data.update(overrides)
    return ClassificationResult.model_validate(data)


def make_example(message: str, embedding, **overrides) -> Example:
    return Example(
        message=message,
        classification=make_classification(**overrides),
        embedding=tuple(float(x) for x in embedding),
    )


@pytest.fixture
def test_config(tmp_path):
    """Config with fake keys and no .env influence."""
    return TriageConfig(
        _env_file=None,
        openai_api_key="sk-test",
        corpus_path=tmp_path / "corpus.json",
        similar_examples_k=2,
    )


@pytest.fixture
def sample_examples():
    """Three examples with hand-picked 3d embeddings."""
    return [
        make_example("Would love to collab on a video!", [1.0, 0.0, 0.0]),
        make_example(
            "Can I get a refund for my order?",
            [0.0, 1.0, 0.0],
            focus_summary_type="Refund",
            business_value_score=1.0,
            reason="Refund request.",
        ),
        make_example(
            "Brand deal for our spring campaign",
            [0.8, 0.2, 0.0],
            focus_summary_type="Brand reaching",
            reason="Brand outreach.",
        ),
    ]


@pytest.fixture
def sample_corpus(sample_examples):
    return ExampleCorpus(sample_examples, source="memory")


@pytest.fixture
def corpus_file(tmp_path, sample_examples):
    """Corpus artifact on disk matching sample_examples."""
    path = tmp_path / "examples_with_embeddings.json"
    artifact = {
        "model": "text-embedding-3-small",
        "dimensions": 3,
        "examples": [
            {
                "message": example.message,
                "classification": example.classification.model_dump(),
                "embedding": list(example.embedding),
            }
            for example in sample_examples
        ],
    }
    path.write_text(json.dumps(artifact), encoding="utf-8")
    return path


# =============================================================================
# Mock Fixtures (Function Scope - Reset per Test)
# =============================================================================


@pytest.fixture
def mock_embedder():
    """Embedding client mock returning a vector close to the collab example."""
    embedder = Mock(spec=AsyncEmbeddingClient)
    embedder.model = "text-embedding-3-small"
    embedder.is_configured = True
    embedder.embed = AsyncMock(return_value=[0.9, 0.1, 0.0])
    embedder.aclose = AsyncMock()
    return embedder


VALID_LLM_REPLY = {
    "needs_reply": True,
    "time_sensitive_score": 0.4,
    "business_value_score": 0.7,
    "focus_summary_type": "Collab",
    "reason": "Partnership proposal that asks for a reply.",
}


@pytest.fixture
def mock_provider():
    """Provider mock whose complete() returns a valid classification."""
    provider = Mock(spec=BaseProvider)
    provider.name = "openai"
    provider.model = "gpt-4o-mini"
    provider.complete = AsyncMock(
        return_value=ProviderResponse(
            text=json.dumps(VALID_LLM_REPLY),
            model_name="gpt-4o-mini-2024-07-18",
            input_tokens=420,
            output_tokens=55,
        )
    )
    provider.aclose = AsyncMock()
    return provider


@pytest.fixture
def example_factory():
    """make_example(message, embedding, **classification_overrides)."""
    return make_example


@pytest.fixture
def classification_factory():
    """make_classification(**overrides)."""
    return make_classification
