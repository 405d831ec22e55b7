#!/usr/bin/env python
"""Run a semantic search against the vector store.

Usage:
    python scripts/search.py "how do I configure chunking?"
    python scripts/search.py "deployment steps" --top-k 3
"""
import argparse
import asyncio
import sys
from pathlib import Path

import structlog

from docrag import config
from docrag.errors import DocRAGError
from docrag.main import configure_logging
from docrag.rag.retriever import Retriever
from docrag.rag.store_sqlite import SQLiteVectorStore
from docrag.voyage_client import VoyageClient

logger = structlog.get_logger()


async def main():
    """Main entry point for search script."""
    parser = argparse.ArgumentParser(description="Search ingested documents")
    parser.add_argument("query", help="Search query")
    parser.add_argument(
        "--top-k",
        type=int,
        default=None,
        help=f"Number of results (default: {config.RETRIEVAL_TOP_K})",
    )
    parser.add_argument(
        "--db-path",
        type=Path,
        default=None,
        help=f"SQLite database file (default: {config.DB_PATH})",
    )
    args = parser.parse_args()

    configure_logging("WARNING")

    store = SQLiteVectorStore(db_path=args.db_path)
    retriever = Retriever(store=store, embedder=VoyageClient())

    try:
        results = await retriever.search(args.query, top_k=args.top_k)
    except DocRAGError as e:
        print(f"\nError: {e}\n")
        logger.error("search_script_failed", error=str(e), error_type=type(e).__name__)
        sys.exit(1)
    finally:
        store.close()

    if not results:
        print("\nNo results.\n")
        return

    for i, result in enumerate(results, 1):
        preview = result.content[:200].replace("\n", " ")
        print(f"\n{i}. {result.source}  (similarity: {result.similarity:.4f})")
        print(f"   {preview}{'...' if len(result.content) > 200 else ''}")
    print()


if __name__ == "__main__":
    asyncio.run(main())
