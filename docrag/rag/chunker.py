"""Text chunking with overlap for RAG pipeline.

Implements word-bounded, character-budget chunking to avoid tokenizer
dependencies. Chunk sizes are approximate: the budget is checked before a
word is added, so a chunk may run past ``chunk_size``.
"""
from typing import List
from dataclasses import dataclass
import structlog

from docrag import config

logger = structlog.get_logger()


@dataclass(frozen=True)
class Chunk:
    """A chunk of a source document with its position in that document."""

    content: str
    source_file: str
    index: int
    total_chunks_in_source: int


def chunk_text(text: str, chunk_size: int = 800, overlap: int = 200) -> List[str]:
    """Split text into overlapping word-bounded chunks.

    When the next word would push the buffer past ``chunk_size``, the buffer
    is closed and the next one is seeded with the tail of the closed chunk:
    ``overlap`` divided by the average word length of that chunk, in words.

    Args:
        text: Text to chunk
        chunk_size: Character budget per chunk
        overlap: Approximate number of characters carried into the next chunk

    Returns:
        List of chunk strings, never empty
    """
    chunks: List[str] = []
    words = text.split()

    current: List[str] = []
    current_length = 0

    for word in words:
        word_length = len(word) + 1

        if current_length + word_length > chunk_size and current:
            chunks.append(" ".join(current))

            overlap_words = int(overlap // (current_length / len(current)))
            current = current[-overlap_words:] if overlap_words > 0 else []
            current_length = len(" ".join(current))

        current.append(word)
        current_length += word_length

    if current:
        chunks.append(" ".join(current))

    return chunks if chunks else [text]


class TextChunker:
    """Word-bounded text chunker with overlap support."""

    def __init__(
        self,
        chunk_size: int = None,
        chunk_overlap: int = None,
    ):
        """Initialize the text chunker.

        Args:
            chunk_size: Size of each chunk in characters (default from config)
            chunk_overlap: Overlap between chunks in characters (default from config)
        """
        self.chunk_size = chunk_size if chunk_size is not None else config.CHUNK_SIZE
        self.chunk_overlap = (
            chunk_overlap if chunk_overlap is not None else config.CHUNK_OVERLAP
        )

        # Validate parameters
        if self.chunk_size <= 0:
            raise ValueError(f"Chunk size must be positive, got {self.chunk_size}")

        if self.chunk_overlap < 0 or self.chunk_overlap >= self.chunk_size:
            raise ValueError(
                f"Overlap ({self.chunk_overlap}) must be between 0 and "
                f"chunk size ({self.chunk_size})"
            )

        logger.info(
            "chunker_initialized",
            chunk_size=self.chunk_size,
            chunk_overlap=self.chunk_overlap,
        )

    def chunk_text(self, text: str) -> List[str]:
        """Split text into overlapping chunks using this chunker's settings."""
        return chunk_text(text, chunk_size=self.chunk_size, overlap=self.chunk_overlap)

    def chunk_document(self, text: str, source_file: str) -> List[Chunk]:
        """Chunk a whole document and attach source positions.

        Args:
            text: Full document text
            source_file: Name of the file the text came from

        Returns:
            List of Chunk objects sharing the same total_chunks_in_source
        """
        pieces = self.chunk_text(text)
        total = len(pieces)

        chunks = [
            Chunk(
                content=piece,
                source_file=source_file,
                index=i,
                total_chunks_in_source=total,
            )
            for i, piece in enumerate(pieces)
        ]

        logger.debug(
            "document_chunked",
            source_file=source_file,
            text_length=len(text),
            chunk_count=total,
        )

        return chunks

    def get_chunk_stats(self, chunks: List[Chunk]) -> dict:
        """Get statistics about a set of chunks.

        Args:
            chunks: List of Chunk objects

        Returns:
            Dictionary with chunk statistics
        """
        if not chunks:
            return {
                "chunk_count": 0,
                "total_chars": 0,
                "avg_chunk_size": 0,
                "min_chunk_size": 0,
                "max_chunk_size": 0,
            }

        chunk_sizes = [len(c.content) for c in chunks]

        return {
            "chunk_count": len(chunks),
            "total_chars": sum(chunk_sizes),
            "avg_chunk_size": sum(chunk_sizes) // len(chunks),
            "min_chunk_size": min(chunk_sizes),
            "max_chunk_size": max(chunk_sizes),
            "overlap": self.chunk_overlap,
        }
