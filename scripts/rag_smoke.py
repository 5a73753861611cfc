"""
Simple smoke test of the RAG pipeline, using the progressive two-step mode.

Example:
    python -m scripts.rag_smoke --question "What fruits are yellow?"
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from foodrag.config import setup_logging
from foodrag.providers import ProviderRegistry
from foodrag.rag.pipeline import RAGService


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Smoke test of the RAG pipeline.")
    parser.add_argument("--question", "-q", required=True, help="Question about the food collection")
    return parser.parse_args()


async def run(question: str, logger: logging.Logger) -> int:
    service = RAGService(ProviderRegistry(), on_state=lambda state: logger.info("state=%s", state.value))

    search = await service.search(question)
    if not search.success or search.rag_details is None:
        print(f"Search failed: {search.error}")
        return 1

    details = search.rag_details
    print("\n=== Retrieved documents ===")
    for idx, (doc_id, text) in enumerate(zip(details.ids, details.documents), start=1):
        similarity = details.similarities[idx - 1] if details.similarities else None
        score = f"{similarity:.3f}" if similarity is not None else "n/a"
        print(f"#{idx} id={doc_id} similarity={score}")
        print(f"   {text}")
    print(f"search time: {details.processing_time}ms")

    generation = await service.generate(question, details.documents)
    if not generation.success:
        print(f"Generation failed: {generation.error}")
        return 1

    print("\n=== Answer ===")
    print(generation.response)
    print(f"generation time: {generation.processing_time}ms")
    return 0


def main() -> None:
    setup_logging()
    logger = logging.getLogger(__name__)
    args = parse_args()
    sys.exit(asyncio.run(run(args.question, logger)))


if __name__ == "__main__":
    main()
