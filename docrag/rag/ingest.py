"""Ingest pipeline for indexing text documents.

Orchestrates:
- File discovery
- Text chunking
- Batched embedding generation
- Record storage

Batches are embedded and stored one at a time. A failure stops the run;
batches stored before the failure stay in the database.
"""
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence
import structlog

from docrag import config
from docrag.errors import InputError, ProviderError
from docrag.rag.chunker import Chunk, TextChunker
from docrag.rag.store_sqlite import EmbeddedChunk, SQLiteVectorStore
from docrag.voyage_client import InputType, VoyageClient

logger = structlog.get_logger()

ProgressCallback = Callable[[int, int, int, int], None]


@dataclass
class IngestStats:
    """Counts reported by an ingestion run."""

    files_processed: int = 0
    chunks_produced: int = 0
    chunks_embedded: int = 0
    records_stored: int = 0
    batches: int = 0
    total_tokens: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class IngestPipeline:
    """Pipeline for ingesting a directory of documents into the vector store."""

    def __init__(
        self,
        store: SQLiteVectorStore,
        embedder: VoyageClient,
        documents_dir: Path = None,
        chunk_size: int = None,
        chunk_overlap: int = None,
        batch_size: int = None,
        patterns: Sequence[str] = None,
    ):
        """Initialize the ingest pipeline.

        Args:
            store: Vector store receiving the records
            embedder: Embedding client for document chunks
            documents_dir: Directory containing documents (default from config)
            chunk_size: Chunk size in characters (default from config)
            chunk_overlap: Chunk overlap in characters (default from config)
            batch_size: Number of chunks per embedding request (default from config)
            patterns: Glob patterns of files to ingest (default from config)
        """
        self.store = store
        self.embedder = embedder
        self.documents_dir = Path(documents_dir or config.DOCUMENTS_DIR)
        self.batch_size = batch_size if batch_size is not None else config.EMBEDDING_BATCH_SIZE
        self.patterns = list(patterns or config.DOCUMENT_PATTERNS)

        if self.batch_size < 1:
            raise ValueError(f"Batch size must be positive, got {self.batch_size}")

        self.chunker = TextChunker(chunk_size=chunk_size, chunk_overlap=chunk_overlap)
        self.stats = IngestStats()

        logger.info(
            "ingest_pipeline_initialized",
            documents_dir=str(self.documents_dir),
            chunk_size=self.chunker.chunk_size,
            chunk_overlap=self.chunker.chunk_overlap,
            batch_size=self.batch_size,
            patterns=self.patterns,
        )

    def discover_files(self) -> List[Path]:
        """Discover all matching documents in the documents directory.

        Returns:
            Sorted list of document paths

        Raises:
            InputError: If the documents directory doesn't exist or isn't a directory
        """
        if not self.documents_dir.is_dir():
            raise InputError(f"Documents directory not found: {self.documents_dir}")

        try:
            found = {
                path
                for pattern in self.patterns
                for path in self.documents_dir.rglob(pattern)
                if path.is_file()
            }
        except OSError as e:
            raise InputError(
                f"Cannot read documents directory {self.documents_dir}: {e}"
            ) from e

        files = sorted(found)

        logger.info(
            "document_files_discovered",
            count=len(files),
            documents_dir=str(self.documents_dir),
        )

        return files

    def read_document(self, file_path: Path) -> str:
        """Read a whole document as UTF-8 text.

        Raises:
            InputError: If the file cannot be read or is not text
        """
        try:
            return file_path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise InputError(f"Not a UTF-8 text file: {file_path}") from e
        except OSError as e:
            raise InputError(f"Cannot read {file_path}: {e}") from e

    def chunk_files(self, files: Sequence[Path]) -> List[Chunk]:
        """Read and chunk every file, keeping file order."""
        chunks: List[Chunk] = []

        for file_path in files:
            text = self.read_document(file_path)
            source_file = file_path.relative_to(self.documents_dir).as_posix()
            file_chunks = self.chunker.chunk_document(text, source_file)
            chunks.extend(file_chunks)

            self.stats.files_processed += 1
            self.stats.chunks_produced += len(file_chunks)

            logger.debug(
                "file_chunked",
                path=source_file,
                chunks_created=len(file_chunks),
            )

        return chunks

    async def embed_and_store(
        self,
        chunks: Sequence[Chunk],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> None:
        """Embed chunks batch by batch and store each batch before the next.

        Args:
            chunks: Chunks to embed and store
            progress_callback: Optional callback(batch_number, total_batches, processed, total)
        """
        total = len(chunks)
        total_batches = (total + self.batch_size - 1) // self.batch_size

        for batch_number, start in enumerate(range(0, total, self.batch_size), 1):
            batch = chunks[start : start + self.batch_size]
            texts = [chunk.content for chunk in batch]

            result = await self.embedder.embed(texts, input_type=InputType.DOCUMENT)
            if len(result.embeddings) != len(batch):
                raise ProviderError(
                    f"Expected {len(batch)} embeddings for batch {batch_number}, "
                    f"got {len(result.embeddings)}"
                )
            self.stats.chunks_embedded += len(result.embeddings)
            self.stats.total_tokens += result.total_tokens

            records = [
                EmbeddedChunk(
                    content=chunk.content,
                    embedding=embedding,
                    filename=chunk.source_file,
                    chunk_index=chunk.index,
                    total_chunks=chunk.total_chunks_in_source,
                )
                for chunk, embedding in zip(batch, result.embeddings)
            ]

            ids = self.store.insert_batch(records)
            self.stats.records_stored += len(ids)
            self.stats.batches += 1

            logger.info(
                "embedding_batch_stored",
                batch=batch_number,
                total_batches=total_batches,
                batch_size=len(batch),
                model=result.model,
                total_tokens=result.total_tokens,
            )

            if progress_callback:
                progress_callback(
                    batch_number, total_batches, self.stats.records_stored, total
                )

    async def ingest_all(
        self, progress_callback: Optional[ProgressCallback] = None
    ) -> IngestStats:
        """Ingest all matching documents in the documents directory.

        Args:
            progress_callback: Optional callback(batch_number, total_batches, processed, total)

        Returns:
            IngestStats for this run

        Raises:
            InputError: If the directory or a document cannot be read
            ProviderError: If an embedding batch fails
            StoreError: If a batch cannot be stored
        """
        logger.info("starting_ingest_all", documents_dir=str(self.documents_dir))

        self.stats = IngestStats()

        files = self.discover_files()

        if not files:
            logger.warning(
                "no_document_files_found", documents_dir=str(self.documents_dir)
            )
            return self.stats

        try:
            chunks = self.chunk_files(files)

            self.store.initialize()
            await self.embed_and_store(chunks, progress_callback=progress_callback)

        except Exception as e:
            logger.error(
                "ingest_failed",
                error=str(e),
                error_type=type(e).__name__,
                stats=self.stats.to_dict(),
            )
            raise

        logger.info("ingest_all_completed", stats=self.stats.to_dict())

        return self.stats
