"""Pytest configuration and fixtures for unit tests."""
import zlib

import numpy as np
import pytest

from docrag import config
from docrag.errors import ProviderError
from docrag.rag.store_sqlite import SQLiteVectorStore
from docrag.voyage_client import EmbeddingResult, InputType


DIMENSION = config.EMBEDDING_DIMENSION


def _fake_vector(text: str) -> list:
    """Deterministic pseudo-random vector for a text."""
    rng = np.random.default_rng(zlib.crc32(text.encode("utf-8")))
    return rng.standard_normal(DIMENSION).astype(np.float32).tolist()


class FakeEmbedder:
    """In-memory stand-in for the Voyage client."""

    def __init__(self, overrides: dict = None, fail_on_call: int = None):
        self.overrides = overrides or {}
        self.fail_on_call = fail_on_call
        self.calls = []

    async def embed(self, texts, input_type=InputType.DOCUMENT):
        self.calls.append((list(texts), InputType(input_type)))

        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            raise ProviderError("rate limited", provider="fake", status_code=429)

        return EmbeddingResult(
            embeddings=[self.overrides.get(t) or _fake_vector(t) for t in texts],
            model="fake-embed",
            total_tokens=sum(len(t.split()) for t in texts),
        )


@pytest.fixture
def fake_vector():
    """Function mapping text to its deterministic fake embedding."""
    return _fake_vector


@pytest.fixture
def embedder():
    """Fake embedder with no overrides."""
    return FakeEmbedder()


@pytest.fixture
def make_embedder():
    """Factory for fake embedders with overrides or injected failures."""
    return FakeEmbedder


@pytest.fixture
def store(tmp_path):
    """Initialized SQLite vector store in a temporary directory."""
    vector_store = SQLiteVectorStore(db_path=tmp_path / "vectors.db")
    vector_store.initialize()
    yield vector_store
    vector_store.close()


@pytest.fixture
def long_words():
    """200 distinct 9-character words; joined they make a 1999-character text."""
    return [f"word{i:05d}" for i in range(200)]
