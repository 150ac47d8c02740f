"""Inbox triage HTTP API.

FastAPI service exposing the hybrid classifier:
- GET /          service info
- GET /health    corpus and embedding availability
- POST /classify classify one message
- /metrics       Prometheus scrape endpoint
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app
from pydantic import BaseModel, Field

from .__version__ import __version__
from .classifier import ClassificationError, HybridClassifier, build_provider
from .config import get_config
from .corpus import load_corpus
from .embeddings import AsyncEmbeddingClient
from .logging_config import configure_logging
from .search import SimilarityRetriever
from .validation import MessageValidationError, contains_suspicious_content, validate_message

logger = logging.getLogger("inbox_triage.api")

__all__ = ["app", "main"]


class ClassifyRequest(BaseModel):
    """Classification request body."""

    message: Any = Field(None, description="Message text to classify")


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str = Field(..., description="Health status: ok or unavailable")
    corpus_size: int = Field(0, description="Number of examples loaded for retrieval")
    embeddings_available: bool = Field(False, description="Embedding client configured")
    provider: Optional[str] = Field(None, description="Generative model provider")


def _build_classifier() -> HybridClassifier:
    config = get_config()

    retriever = SimilarityRetriever(load_corpus(config.corpus_path))

    embedder = None
    if config.embeddings_enabled:
        embedder = AsyncEmbeddingClient(config)
        if not embedder.is_configured:
            logger.warning("embeddings_not_configured", extra={"reason": "missing OPENAI_API_KEY"})

    return HybridClassifier(retriever, build_provider(config), embedder=embedder, config=config)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the corpus and clients once; close them on shutdown."""
    configure_logging()

    owned = getattr(app.state, "classifier", None) is None
    if owned:
        app.state.classifier = _build_classifier()

    classifier: HybridClassifier = app.state.classifier
    logger.info(
        "service_started",
        extra={
            "version": __version__,
            "provider": classifier.provider.name,
            "corpus_size": len(classifier.retriever.corpus),
        },
    )
    yield

    if owned:
        await classifier.aclose()
        app.state.classifier = None
    logger.info("service_stopped")


app = FastAPI(
    title="Inbox Triage API",
    description="Hybrid rule-based and LLM classification of inbound messages",
    version=__version__,
    lifespan=lifespan,
)

# Mount Prometheus metrics endpoint
metrics_app = make_asgi_app()
app.mount("/metrics", metrics_app)


@app.get("/", tags=["Info"])
async def root():
    return {
        "status": "running",
        "message": "Inbox Triage Classifier API",
        "version": __version__,
        "endpoints": {
            "classify": "POST /classify - Classify a message",
            "health": "GET /health - Health check",
            "metrics": "GET /metrics - Prometheus metrics",
        },
    }


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health(request: Request):
    """Report whether the classifier is ready and what it degraded to.

    Status values:
    - ok: classifier built (retrieval may still be degraded)
    - unavailable: service has not finished starting
    """
    classifier: Optional[HybridClassifier] = getattr(request.app.state, "classifier", None)
    if classifier is None:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=HealthResponse(status="unavailable").model_dump(),
        )

    embedder = classifier.embedder
    return HealthResponse(
        status="ok",
        corpus_size=len(classifier.retriever.corpus),
        embeddings_available=embedder is not None and embedder.is_configured,
        provider=classifier.provider.name,
    )


@app.post("/classify", tags=["Classification"])
async def classify(body: ClassifyRequest, request: Request):
    """Classify one message.

    Returns 400 for missing or invalid input and 500 when escalation fails.
    """
    if body.message is None or body.message == "":
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Missing required field: message"},
        )

    config = get_config()
    try:
        message = validate_message(body.message, max_length=config.max_message_length)
    except MessageValidationError as e:
        logger.warning("message_rejected", extra={"error": str(e)})
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(e)})

    if contains_suspicious_content(message):
        logger.warning("suspicious_message", extra={"message_chars": len(message)})

    classifier: HybridClassifier = request.app.state.classifier

    logger.info("classify_request", extra={"message_chars": len(message)})

    try:
        outcome = await classifier.classify(message)
    except ClassificationError as e:
        if e.details:
            content = {"error": "Invalid classification response from LLM", "details": e.details}
        else:
            content = {"error": "Classification failed", "message": str(e)}
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)
    except ValueError as e:
        logger.error("classification_failed", extra={"error": str(e), "error_type": type(e).__name__})
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Classification failed", "message": str(e)},
        )

    metadata = outcome.metadata.as_dict()
    metadata["timestamp"] = datetime.now(timezone.utc).isoformat()

    return {
        "success": True,
        "classification": outcome.classification.model_dump(),
        "metadata": metadata,
    }


def main() -> None:
    """Run the API with uvicorn using host/port from config."""
    config = get_config()
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())


if __name__ == "__main__":
    main()
