"""Voyage AI embedding client wrapper with error handling."""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

import httpx
import numpy as np
import structlog

from docrag import config
from docrag.errors import ProviderError

logger = structlog.get_logger()

PROVIDER_NAME = "voyageai"


class InputType(str, Enum):
    """Provider hint for what the embedded text will be used for."""

    DOCUMENT = "document"
    QUERY = "query"


@dataclass
class EmbeddingResult:
    """Vectors for a batch of texts, in input order."""

    embeddings: List[List[float]] = field(default_factory=list)
    model: str = ""
    total_tokens: int = 0


class VoyageClient:
    """Async client for the Voyage AI embeddings API."""

    def __init__(
        self,
        api_key: str = None,
        base_url: str = None,
        model: str = None,
        dimension: int = None,
        timeout: float = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the Voyage client.

        Args:
            api_key: Voyage API key (defaults to config.VOYAGE_API_KEY)
            base_url: API base URL (defaults to config.VOYAGE_BASE_URL)
            model: Embedding model (defaults to config.EMBEDDING_MODEL)
            dimension: Requested output dimension (defaults to config.EMBEDDING_DIMENSION)
            timeout: Request timeout in seconds
            transport: Optional httpx transport, used by tests
        """
        self.api_key = api_key or config.VOYAGE_API_KEY
        self.base_url = (base_url or config.VOYAGE_BASE_URL).rstrip("/")
        self.model = model or config.EMBEDDING_MODEL
        self.dimension = dimension or config.EMBEDDING_DIMENSION
        self.timeout = timeout or config.EMBEDDING_TIMEOUT
        self._transport = transport

    async def embed(
        self,
        texts: List[str],
        input_type: InputType = InputType.DOCUMENT,
    ) -> EmbeddingResult:
        """Embed a batch of texts in a single provider call.

        Args:
            texts: Texts to embed
            input_type: DOCUMENT for stored chunks, QUERY for search queries

        Returns:
            EmbeddingResult with one vector per text, in input order

        Raises:
            ProviderError: On any provider failure; the whole batch fails
        """
        if not texts:
            return EmbeddingResult(model=self.model)

        if not self.api_key:
            raise ProviderError(
                "VOYAGE_API_KEY is not set", provider=PROVIDER_NAME
            )

        input_type = InputType(input_type)
        payload = {
            "input": list(texts),
            "model": self.model,
            "input_type": input_type.value,
            "output_dimension": self.dimension,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                logger.debug(
                    "voyage_embedding_request",
                    model=self.model,
                    input_type=input_type.value,
                    batch_size=len(texts),
                )

                response = await client.post(
                    f"{self.base_url}/embeddings",
                    json=payload,
                    headers=headers,
                )
                response.raise_for_status()

                data = response.json()

        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.error(
                "voyage_http_error",
                error=str(e),
                status_code=status_code,
                body_preview=e.response.text[:200],
            )
            raise ProviderError(
                f"Voyage API returned HTTP {status_code}",
                provider=PROVIDER_NAME,
                status_code=status_code,
            ) from e
        except httpx.HTTPError as e:
            logger.error("voyage_connection_error", error=str(e), base_url=self.base_url)
            raise ProviderError(
                f"Voyage API request failed: {e}", provider=PROVIDER_NAME
            ) from e
        except ValueError as e:
            logger.error("voyage_invalid_json", error=str(e))
            raise ProviderError(
                "Voyage API returned invalid JSON", provider=PROVIDER_NAME
            ) from e

        result = self._parse_response(data, expected_count=len(texts))

        logger.debug(
            "voyage_embedding_response",
            model=result.model,
            count=len(result.embeddings),
            total_tokens=result.total_tokens,
        )

        return result

    async def embed_query(self, text: str) -> List[float]:
        """Embed a single search query.

        Args:
            text: Query text

        Returns:
            Query embedding vector
        """
        result = await self.embed([text], input_type=InputType.QUERY)
        return result.embeddings[0]

    def _parse_response(self, data: dict, expected_count: int) -> EmbeddingResult:
        """Validate a provider response and order its vectors by input index."""
        try:
            items = sorted(data["data"], key=lambda item: item.get("index", 0))
            embeddings = []
            for item in items:
                vector = np.asarray(item["embedding"], dtype=float)
                if vector.ndim != 1 or vector.shape[0] != self.dimension:
                    raise ProviderError(
                        f"Embedding dimension mismatch: expected {self.dimension}, "
                        f"got shape {vector.shape}",
                        provider=PROVIDER_NAME,
                    )
                embeddings.append(vector.tolist())

            usage = data.get("usage") or {}
            total_tokens = int(usage.get("total_tokens", 0))
            model = data.get("model", self.model)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ProviderError(
                f"Malformed embedding response: {e}", provider=PROVIDER_NAME
            ) from e

        if len(embeddings) != expected_count:
            raise ProviderError(
                f"Expected {expected_count} embeddings, got {len(embeddings)}",
                provider=PROVIDER_NAME,
            )

        return EmbeddingResult(
            embeddings=embeddings,
            model=model,
            total_tokens=total_tokens,
        )
