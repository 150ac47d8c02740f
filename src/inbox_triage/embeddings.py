"""Embedding service client for inbox-triage.

Async httpx client for an OpenAI-compatible ``/embeddings`` endpoint with
connection pooling, structured logging and a single error type. No retries:
a failed call is reported to the caller, which degrades retrieval.
"""

import logging
import time

import httpx

from .config import TriageConfig, get_config

__all__ = ["AsyncEmbeddingClient", "EmbeddingError"]

logger = logging.getLogger("inbox_triage.embed")


class EmbeddingError(Exception):
    """Raised when embedding generation fails.

    Wraps httpx errors, timeouts and malformed responses.
    """

    pass


class AsyncEmbeddingClient:
    """Client for the embedding service.

    Uses one long-lived httpx.AsyncClient; reuse the instance across requests.

    Attributes:
        config: TriageConfig with endpoint, model and timeout
        base_url: Embedding API base URL
        model: Embedding model name
        client: Shared httpx.AsyncClient
    """

    def __init__(self, config: TriageConfig | None = None, client: httpx.AsyncClient | None = None):
        self.config = config or get_config()
        self.base_url = self.config.embedding_base_url.rstrip("/")
        self.model = self.config.embedding_model

        api_key = self.config.openai_api_key
        headers = {"Content-Type": "application/json"}
        if api_key is not None:
            headers["Authorization"] = f"Bearer {api_key.get_secret_value()}"

        timeout_config = httpx.Timeout(
            connect=3.0,
            read=self.config.embedding_timeout,
            write=5.0,
            pool=3.0,
        )
        limits = httpx.Limits(
            max_keepalive_connections=20,
            max_connections=100,
            keepalive_expiry=10.0,
        )

        self.client = client or httpx.AsyncClient(
            timeout=timeout_config, limits=limits, headers=headers
        )

    @property
    def is_configured(self) -> bool:
        return self.config.openai_api_key is not None

    async def embed(self, text: str) -> list[float]:
        """Embed a single text.

        Args:
            text: Text to embed

        Returns:
            Embedding vector

        Raises:
            EmbeddingError: On timeout, HTTP error or malformed response.
        """
        start_time = time.perf_counter()

        try:
            response = await self.client.post(
                f"{self.base_url}/embeddings",
                json={"model": self.model, "input": text},
            )
            response.raise_for_status()
            embedding = response.json()["data"][0]["embedding"]
        except httpx.TimeoutException as e:
            logger.error(
                "embedding_timeout",
                extra={"base_url": self.base_url, "model": self.model, "error": str(e)},
            )
            raise EmbeddingError("EMBEDDING_TIMEOUT") from e
        except httpx.HTTPError as e:
            logger.error(
                "embedding_error",
                extra={"base_url": self.base_url, "model": self.model, "error": str(e)},
            )
            raise EmbeddingError(f"EMBEDDING_ERROR: {e}") from e
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.error(
                "embedding_bad_response",
                extra={"base_url": self.base_url, "model": self.model, "error": str(e)},
            )
            raise EmbeddingError(f"EMBEDDING_BAD_RESPONSE: {e}") from e

        if not isinstance(embedding, list) or not embedding:
            raise EmbeddingError("EMBEDDING_BAD_RESPONSE: empty embedding")
        if not all(isinstance(x, (int, float)) and not isinstance(x, bool) for x in embedding):
            logger.error(
                "embedding_bad_response",
                extra={"base_url": self.base_url, "model": self.model, "error": "non-numeric vector"},
            )
            raise EmbeddingError("EMBEDDING_BAD_RESPONSE: non-numeric embedding")

        logger.debug(
            "embedding_success",
            extra={
                "model": self.model,
                "dimensions": len(embedding),
                "duration_ms": round((time.perf_counter() - start_time) * 1000, 2),
            },
        )
        return embedding

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> "AsyncEmbeddingClient":
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()
