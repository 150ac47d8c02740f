"""Nearest-neighbour search over the example corpus.

Ranks labelled examples by cosine similarity to the embedding of the
incoming message. The corpus is injected at construction and never
modified, so one retriever is shared by all concurrent requests.
"""

import logging
import time
from typing import Sequence

import numpy as np

from .corpus import ExampleCorpus
from .models import SimilarityHit

logger = logging.getLogger("inbox_triage.search")

__all__ = ["DEFAULT_TOP_K", "SimilarityRetriever", "cosine_similarity"]

DEFAULT_TOP_K = 3


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two equal-length vectors.

    Returns 0.0 when either vector has zero norm.

    Raises:
        ValueError: If the vectors differ in length.

    Examples:
        >>> cosine_similarity([1.0, 0.0], [1.0, 0.0])
        1.0
        >>> cosine_similarity([1.0, 2.0], [0.0, 0.0])
        0.0
    """
    if len(a) != len(b):
        raise ValueError(f"Vectors must have the same length ({len(a)} != {len(b)})")

    va = np.asarray(a, dtype=float)
    vb = np.asarray(b, dtype=float)

    norm = np.linalg.norm(va) * np.linalg.norm(vb)
    if norm == 0:
        return 0.0

    return float(np.dot(va, vb) / norm)


class SimilarityRetriever:
    """Top-k retrieval of labelled examples by cosine similarity.

    Attributes:
        corpus: Read-only example corpus built once at startup
    """

    def __init__(self, corpus: ExampleCorpus):
        self.corpus = corpus

    @property
    def available(self) -> bool:
        return not self.corpus.is_empty

    def find_similar(
        self, message: str, embedding: Sequence[float], k: int = DEFAULT_TOP_K
    ) -> tuple[SimilarityHit, ...]:
        """Return the k most similar examples, most similar first.

        Ties keep corpus order. An empty corpus yields an empty tuple.

        Args:
            message: The message being classified (used for logging only)
            embedding: Precomputed embedding of the message
            k: Number of examples to return

        Raises:
            ValueError: If the embedding length differs from the corpus vectors.
        """
        if self.corpus.is_empty or k <= 0:
            if self.corpus.is_empty:
                logger.warning("similarity_corpus_empty")
            return ()

        start_time = time.perf_counter()

        scored = [
            SimilarityHit(example=example, similarity=cosine_similarity(example.embedding, embedding))
            for example in self.corpus
        ]
        hits = tuple(sorted(scored, key=lambda hit: hit.similarity, reverse=True)[:k])

        logger.debug(
            "similar_examples_found",
            extra={
                "message_chars": len(message),
                "corpus_size": len(self.corpus),
                "returned": len(hits),
                "top_similarity": round(hits[0].similarity, 4) if hits else None,
                "duration_ms": round((time.perf_counter() - start_time) * 1000, 3),
            },
        )
        return hits
