#!/usr/bin/env python3
"""Build the example corpus used for few-shot retrieval.

Reads hand-labelled examples, embeds each message with the configured
embedding model and writes the artifact the service loads at startup.
Run once, and again whenever the examples or the embedding model change.

Usage:
    python scripts/generate_embeddings.py
    python scripts/generate_embeddings.py --input data/examples.json --output data/examples_with_embeddings.json

Requires OPENAI_API_KEY (environment or .env) and an installed package
(pip install -e .).
"""

import argparse
import asyncio
import sys
from pathlib import Path

from inbox_triage.config import get_config
from inbox_triage.corpus import CorpusError, build_corpus, load_labelled_examples, write_corpus
from inbox_triage.embeddings import AsyncEmbeddingClient, EmbeddingError
from inbox_triage.logging_config import configure_logging

DEFAULT_INPUT = Path("data") / "examples.json"


async def generate(input_path: Path, output_path: Path) -> dict:
    labelled = load_labelled_examples(input_path)
    print(f"Found {len(labelled)} examples in {input_path}")

    async with AsyncEmbeddingClient() as embedder:
        print(f"Using model: {embedder.model}")
        artifact = await build_corpus(labelled, embedder)

    write_corpus(output_path, artifact)
    return artifact


def main() -> int:
    config = get_config()

    parser = argparse.ArgumentParser(
        description="Generate embeddings for the labelled example corpus.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/generate_embeddings.py
  python scripts/generate_embeddings.py --output /tmp/corpus.json
        """,
    )
    parser.add_argument(
        "--input",
        type=Path,
        default=DEFAULT_INPUT,
        help=f"Labelled examples JSON (default: {DEFAULT_INPUT})",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=config.corpus_path,
        help=f"Corpus artifact to write (default: {config.corpus_path})",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=False,
        help="Log every embedded example",
    )

    args = parser.parse_args()
    configure_logging(level="INFO" if args.verbose else "WARNING", log_format="text")

    if config.openai_api_key is None:
        print("Error: OPENAI_API_KEY environment variable not set", file=sys.stderr)
        return 1

    try:
        artifact = asyncio.run(generate(args.input, args.output))
    except (CorpusError, EmbeddingError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Saved {len(artifact['examples'])} examples to {args.output}")
    print(f"Embedding dimension: {artifact['dimensions']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
