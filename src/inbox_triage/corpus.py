"""Example corpus for few-shot retrieval.

The corpus artifact is a JSON file produced offline by
scripts/generate_embeddings.py:

    {"model": "...", "dimensions": 1536,
     "examples": [{"message": "...", "classification": {...}, "embedding": [...]}]}

It is loaded once at process start into an immutable ExampleCorpus and
passed to the SimilarityRetriever. Rebuilding requires a restart with a new
artifact. A missing or unreadable artifact yields an empty corpus and a
warning; retrieval then returns no examples.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator, Sequence

from pydantic import ValidationError

from .models import ClassificationResult, Example

logger = logging.getLogger("inbox_triage.corpus")

__all__ = [
    "CorpusError",
    "ExampleCorpus",
    "build_corpus",
    "load_corpus",
    "load_labelled_examples",
    "write_corpus",
]


class CorpusError(Exception):
    """Raised when a corpus or labelled-example file is malformed."""

    pass


class ExampleCorpus:
    """Immutable, ordered collection of embedded examples.

    All embeddings must share one dimension.
    """

    __slots__ = ("_examples", "_dimension", "source")

    def __init__(self, examples: Sequence[Example] = (), source: str | None = None):
        examples = tuple(examples)
        dimensions = {len(example.embedding) for example in examples}
        if len(dimensions) > 1:
            raise CorpusError(f"Corpus embeddings have mixed dimensions: {sorted(dimensions)}")

        self._examples = examples
        self._dimension = dimensions.pop() if dimensions else 0
        self.source = source

    @classmethod
    def empty(cls) -> "ExampleCorpus":
        return cls(())

    @property
    def examples(self) -> tuple[Example, ...]:
        return self._examples

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def is_empty(self) -> bool:
        return not self._examples

    def __len__(self) -> int:
        return len(self._examples)

    def __iter__(self) -> Iterator[Example]:
        return iter(self._examples)

    def __repr__(self) -> str:
        return f"ExampleCorpus(size={len(self)}, dimension={self._dimension}, source={self.source!r})"


def _parse_example(record: Any, index: int) -> Example:
    if not isinstance(record, dict):
        raise CorpusError(f"Example {index} is not an object")

    message = record.get("message")
    if not isinstance(message, str) or not message:
        raise CorpusError(f"Example {index} has no message")

    try:
        classification = ClassificationResult.model_validate(record.get("classification"))
    except ValidationError as e:
        raise CorpusError(f"Example {index} has an invalid classification: {e}") from e

    embedding = record.get("embedding")
    if not isinstance(embedding, list) or not embedding:
        raise CorpusError(f"Example {index} has no embedding")
    try:
        vector = tuple(float(x) for x in embedding)
    except (TypeError, ValueError) as e:
        raise CorpusError(f"Example {index} has a non-numeric embedding") from e

    return Example(message=message, classification=classification, embedding=vector)


def load_corpus(path: str | Path) -> ExampleCorpus:
    """Load the corpus artifact, degrading to an empty corpus on any problem.

    Args:
        path: Path to the JSON artifact

    Returns:
        ExampleCorpus (empty if the file is missing or malformed)
    """
    path = Path(path)

    if not path.exists():
        logger.warning(
            "corpus_not_found",
            extra={"path": str(path), "hint": "run scripts/generate_embeddings.py"},
        )
        return ExampleCorpus.empty()

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        records = data["examples"] if isinstance(data, dict) else None
        if not isinstance(records, list):
            raise CorpusError("Artifact has no 'examples' list")
        corpus = ExampleCorpus(
            [_parse_example(record, i) for i, record in enumerate(records)],
            source=str(path),
        )
    except (OSError, ValueError, KeyError, CorpusError) as e:
        logger.warning("corpus_load_failed", extra={"path": str(path), "error": str(e)})
        return ExampleCorpus.empty()

    logger.info(
        "corpus_loaded",
        extra={"path": str(path), "examples": len(corpus), "dimension": corpus.dimension},
    )
    return corpus


def load_labelled_examples(path: str | Path) -> list[tuple[str, ClassificationResult]]:
    """Read the hand-labelled examples used to build the corpus.

    Expected format: {"examples": [{"message": "...", "classification": {...}}]}

    Raises:
        CorpusError: If the file is unreadable or any example is invalid.
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise CorpusError(f"Cannot read labelled examples from {path}: {e}") from e

    records = data.get("examples") if isinstance(data, dict) else None
    if not isinstance(records, list):
        raise CorpusError(f"{path} has no 'examples' list")

    labelled = []
    for i, record in enumerate(records):
        if not isinstance(record, dict) or not isinstance(record.get("message"), str):
            raise CorpusError(f"Example {i} has no message")
        try:
            classification = ClassificationResult.model_validate(record.get("classification"))
        except ValidationError as e:
            raise CorpusError(f"Example {i} has an invalid classification: {e}") from e
        labelled.append((record["message"], classification))

    return labelled


async def build_corpus(
    labelled: Sequence[tuple[str, ClassificationResult]],
    embedder: Any,
) -> dict[str, Any]:
    """Embed every labelled example and return the artifact dict.

    Embedding errors propagate: a partial corpus is never written.

    Args:
        labelled: (message, classification) pairs
        embedder: Object with ``async embed(text) -> list[float]`` and a
            ``model`` attribute (AsyncEmbeddingClient)
    """
    examples = []
    for i, (message, classification) in enumerate(labelled, start=1):
        embedding = await embedder.embed(message)
        examples.append(
            {
                "message": message,
                "classification": classification.model_dump(),
                "embedding": list(embedding),
            }
        )
        logger.info(
            "example_embedded",
            extra={"index": i, "total": len(labelled), "preview": message[:50]},
        )

    return {
        "model": getattr(embedder, "model", None),
        "dimensions": len(examples[0]["embedding"]) if examples else 0,
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "examples": examples,
    }


def write_corpus(path: str | Path, artifact: dict[str, Any]) -> Path:
    """Write the artifact atomically (temp file + rename)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with open(tmp_path, "w", encoding="utf-8") as f:
        json.dump(artifact, f, indent=2)
    tmp_path.replace(path)
    logger.info(
        "corpus_written",
        extra={"path": str(path), "examples": len(artifact.get("examples", []))},
    )
    return path
