#!/usr/bin/env python
"""Ingest a documents directory into the vector store.

Usage:
    python scripts/reindex.py                      # Ingest config.DOCUMENTS_DIR
    python scripts/reindex.py --documents-dir docs # Ingest another directory
    python scripts/reindex.py --verbose            # Log every batch
"""
import argparse
import asyncio
import sys
from pathlib import Path
from datetime import datetime

import structlog

from docrag import config
from docrag.errors import DocRAGError
from docrag.main import configure_logging
from docrag.rag.ingest import IngestPipeline, IngestStats
from docrag.rag.store_sqlite import SQLiteVectorStore
from docrag.voyage_client import VoyageClient

logger = structlog.get_logger()


class ProgressReporter:
    """Simple progress reporter for CLI."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose
        self.start_time = None

    def start(self, message: str):
        """Start progress reporting."""
        self.start_time = datetime.now()
        print(f"\n{'=' * 60}")
        print(f"  {message}")
        print(f"{'=' * 60}\n")

    def update(self, batch: int, total_batches: int, processed: int, total: int):
        """Update progress after a stored batch."""
        percentage = (processed / total) * 100 if total > 0 else 0
        bar_length = 40
        filled = int(bar_length * processed / total) if total > 0 else 0
        bar = "█" * filled + "░" * (bar_length - filled)

        print(
            f"\r  [{bar}] {percentage:5.1f}% ({processed}/{total} chunks, "
            f"batch {batch}/{total_batches})",
            end="",
            flush=True,
        )

        if self.verbose:
            print()

    def finish(self, stats: IngestStats, db_path: Path):
        """Finish progress reporting."""
        print("\n")
        elapsed_seconds = (datetime.now() - self.start_time).total_seconds()

        print(f"{'=' * 60}")
        print("  Ingestion Complete!")
        print(f"{'=' * 60}\n")
        print(f"  Files processed:  {stats.files_processed}")
        print(f"  Chunks produced:  {stats.chunks_produced}")
        print(f"  Chunks embedded:  {stats.chunks_embedded}")
        print(f"  Records stored:   {stats.records_stored}")
        print(f"  Tokens used:      {stats.total_tokens}")
        print(f"  Time elapsed:     {elapsed_seconds:.1f}s")

        if stats.records_stored > 0 and elapsed_seconds > 0:
            rate = stats.records_stored / elapsed_seconds
            print(f"  Indexing rate:    {rate:.1f} chunks/sec")

        print(f"\n{'=' * 60}\n")

        if stats.records_stored > 0:
            print(f"Database at: {db_path}\n")


async def main():
    """Main entry point for reindex script."""
    parser = argparse.ArgumentParser(
        description="Ingest documents into the docrag vector store",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/reindex.py
  python scripts/reindex.py --documents-dir docs --batch-size 64
        """,
    )

    parser.add_argument(
        "--documents-dir",
        type=Path,
        default=None,
        help=f"Documents directory (default: {config.DOCUMENTS_DIR})",
    )

    parser.add_argument(
        "--db-path",
        type=Path,
        default=None,
        help=f"SQLite database file (default: {config.DB_PATH})",
    )

    parser.add_argument(
        "--batch-size",
        type=int,
        default=None,
        help=f"Chunks per embedding request (default: {config.EMBEDDING_BATCH_SIZE})",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Show verbose progress output",
    )

    args = parser.parse_args()

    configure_logging("INFO" if args.verbose else "WARNING")
    progress = ProgressReporter(verbose=args.verbose)

    print("\nConfiguration:")
    print(f"   Documents directory: {args.documents_dir or config.DOCUMENTS_DIR}")
    print(f"   Embedding model:     {config.EMBEDDING_MODEL} ({config.EMBEDDING_DIMENSION}d)")
    print(f"   Chunk size:          {config.CHUNK_SIZE} chars")
    print(f"   Chunk overlap:       {config.CHUNK_OVERLAP} chars")

    store = SQLiteVectorStore(db_path=args.db_path)

    try:
        pipeline = IngestPipeline(
            store=store,
            embedder=VoyageClient(),
            documents_dir=args.documents_dir,
            batch_size=args.batch_size,
        )

        progress.start("Ingesting Documents")
        stats = await pipeline.ingest_all(progress_callback=progress.update)
        progress.finish(stats, store.db_path)

    except KeyboardInterrupt:
        print("\n\nIngestion cancelled by user.\n")
        sys.exit(1)

    except DocRAGError as e:
        print(f"\nError: {e}\n")
        logger.error("reindex_script_failed", error=str(e), error_type=type(e).__name__)
        sys.exit(1)

    finally:
        store.close()


if __name__ == "__main__":
    asyncio.run(main())
