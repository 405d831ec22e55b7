"""Retriever for semantic search over ingested documents.

Handles:
- Query validation
- Query embedding generation
- Exhaustive store scan
- Ranking and context formatting
"""
from typing import List, Optional
import structlog

from docrag import config
from docrag.errors import InputError
from docrag.rag.ranker import SearchResult, rank
from docrag.rag.store_sqlite import SQLiteVectorStore
from docrag.voyage_client import InputType, VoyageClient

logger = structlog.get_logger()


class Retriever:
    """Semantic retriever for RAG pipeline."""

    def __init__(
        self,
        store: SQLiteVectorStore,
        embedder: VoyageClient,
        top_k: int = None,
        max_query_length: int = None,
    ):
        """Initialize the retriever.

        Args:
            store: Vector store to scan
            embedder: Embedding client used for queries
            top_k: Default number of results (default from config)
            max_query_length: Longest accepted query in characters (default from config)
        """
        self.store = store
        self.embedder = embedder
        self.top_k = top_k if top_k is not None else config.RETRIEVAL_TOP_K
        self.max_query_length = max_query_length or config.MAX_QUERY_LENGTH
        self._schema_ready = False

        logger.info("retriever_initialized", top_k=self.top_k)

    async def search(
        self,
        query: str,
        top_k: Optional[int] = None,
    ) -> List[SearchResult]:
        """Retrieve the chunks most similar to a query.

        Args:
            query: User query text
            top_k: Number of results to return (overrides default)

        Returns:
            List of SearchResult objects, most similar first

        Raises:
            InputError: If the query is empty or too long, or top_k < 1
            ProviderError: If the query cannot be embedded
            CorruptionError: If a stored embedding is malformed
            StoreError: If the store cannot be read
        """
        if not query or not query.strip():
            raise InputError("Query cannot be empty")

        if len(query) > self.max_query_length:
            raise InputError(
                f"Query too long ({len(query)} characters, max {self.max_query_length})"
            )

        top_k = self.top_k if top_k is None else top_k
        if top_k < 1:
            raise InputError(f"top_k must be at least 1, got {top_k}")

        logger.info("retrieval_started", query_length=len(query), top_k=top_k)

        if not self._schema_ready:
            self.store.initialize()
            self._schema_ready = True

        if self.store.count() == 0:
            logger.warning("empty_store_no_results")
            return []

        result = await self.embedder.embed([query], input_type=InputType.QUERY)
        query_embedding = result.embeddings[0]

        logger.debug(
            "query_embedded",
            dimension=len(query_embedding),
            model=result.model,
            total_tokens=result.total_tokens,
        )

        candidates = self.store.scan_all()
        results = rank(query_embedding, candidates, top_k, dimension=self.store.dimension)

        logger.info(
            "retrieval_completed",
            query_length=len(query),
            candidates_scanned=len(candidates),
            results_returned=len(results),
            top_similarity=results[0].similarity if results else None,
        )

        return results

    @staticmethod
    def format_context(results: List[SearchResult], max_chars: int = 4000) -> str:
        """Format retrieved chunks for an LLM prompt.

        Args:
            results: Ranked search results
            max_chars: Maximum total characters of context to return

        Returns:
            Formatted context string, empty if there are no results
        """
        context_parts = []
        total_chars = 0

        for i, result in enumerate(results, 1):
            chunk_text = (
                f"[Source {i}: {result.source}]\n"
                f"{result.content.strip()}\n"
            )

            if total_chars + len(chunk_text) > max_chars:
                # Try to fit a truncated version
                remaining = max_chars - total_chars
                if remaining > 200:
                    context_parts.append(chunk_text[:remaining] + "...\n")
                break

            context_parts.append(chunk_text)
            total_chars += len(chunk_text)

        return "\n".join(context_parts)
