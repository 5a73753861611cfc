"""
CLI for searching the vector store with a text query.

Example:
    python -m scripts.search_query --query "sweet tropical fruit" --top-k 5
"""

from __future__ import annotations

import argparse
import asyncio

from foodrag.providers import ProviderRegistry


async def search(query: str, top_k: int, snippet: int) -> None:
    providers = await ProviderRegistry().acquire(with_llm=False)
    store = providers.store

    q = query if store.embeds_text else await providers.embedder.get_embedding(query)
    results = await store.query(q, top_k)

    if not results.documents:
        print("No results")
        return

    for idx, (doc_id, text) in enumerate(zip(results.ids, results.documents), start=1):
        distance = results.distances[idx - 1] if results.distances else float("nan")
        print(f"\n#{idx} distance={distance:.4f} id={doc_id}")
        if results.metadatas and results.metadatas[idx - 1]:
            print("metadata:", results.metadatas[idx - 1])
        print("text:", text[:snippet] + ("..." if len(text) > snippet else ""))


def main() -> None:
    parser = argparse.ArgumentParser(description="Search stored food records by text query.")
    parser.add_argument("--query", "-q", required=True, help="Query text")
    parser.add_argument("--top-k", type=int, default=5, help="How many results to return")
    parser.add_argument("--snippet", type=int, default=300, help="Snippet length")
    args = parser.parse_args()

    asyncio.run(search(args.query, args.top_k, args.snippet))


if __name__ == "__main__":
    main()
