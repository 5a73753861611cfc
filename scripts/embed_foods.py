"""
CLI for embedding the food records into the configured vector store.

Example:
    python -m scripts.embed_foods --force
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from foodrag.config import setup_logging
from foodrag.indexing.pipeline import IngestionService
from foodrag.providers import ProviderRegistry


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Embed food records into the vector store.")
    parser.add_argument(
        "--force",
        action="store_true",
        help="Re-embed every record, ignoring ids already in the store.",
    )
    parser.add_argument("--status", action="store_true", help="Only print embedding progress.")
    return parser.parse_args()


async def run(args: argparse.Namespace, logger: logging.Logger) -> int:
    service = IngestionService(ProviderRegistry(), logger_=logger)

    if args.status:
        report = await service.status()
        if not report.success:
            print(f"Status failed: {report.error}")
            return 1
        print(f"Embedded {report.embedded}/{report.total} ({report.percentage}%), remaining {report.remaining}")
        return 0

    result = await service.run(force=args.force)
    if not result.success:
        print(f"{result.message}: {result.error}")
        return 1
    print(f"{result.message} (count={result.count})")
    return 0


def main() -> None:
    setup_logging()
    logger = logging.getLogger(__name__)
    args = parse_args()
    sys.exit(asyncio.run(run(args, logger)))


if __name__ == "__main__":
    main()
