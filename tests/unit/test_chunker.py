"""Tests for word-bounded chunking."""
import random

import pytest

from docrag.rag.chunker import Chunk, TextChunker, chunk_text


def _slice_bounds(words, chunk):
    """Start/end of a chunk inside the original (distinct) word list."""
    chunk_words = chunk.split(" ")
    start = words.index(chunk_words[0])
    assert words[start : start + len(chunk_words)] == chunk_words
    return start, start + len(chunk_words)


def test_short_text_is_single_chunk():
    text = "A short note about chunking."
    assert chunk_text(text) == [text]


def test_empty_text_returns_text_verbatim():
    assert chunk_text("") == [""]
    assert chunk_text("   \n\t ") == ["   \n\t "]


def test_two_thousand_characters_make_three_overlapping_chunks(long_words):
    text = " ".join(long_words) + " "
    assert len(text) == 2000

    chunks = chunk_text(text, chunk_size=800, overlap=200)

    assert len(chunks) == 3
    assert chunks[0] == " ".join(long_words[0:80])
    assert chunks[1] == " ".join(long_words[60:140])
    assert chunks[2] == " ".join(long_words[120:200])

    # Each chunk starts with the tail of the previous one
    assert chunks[1].startswith(" ".join(chunks[0].split(" ")[-20:]))
    assert chunks[2].startswith(" ".join(chunks[1].split(" ")[-20:]))


@pytest.mark.parametrize("seed", [1, 7, 42])
def test_chunks_cover_all_words_in_order(seed):
    rng = random.Random(seed)
    words = [f"{'x' * rng.randint(1, 12)}{i}" for i in range(600)]
    text = " ".join(words)

    chunks = chunk_text(text, chunk_size=300, overlap=60)

    bounds = [_slice_bounds(words, c) for c in chunks]
    assert bounds[0][0] == 0
    assert bounds[-1][1] == len(words)
    for (prev_start, prev_end), (start, end) in zip(bounds, bounds[1:]):
        assert prev_start < start <= prev_end
        assert end > prev_end


def test_chunk_may_exceed_size_for_long_word():
    word = "z" * 1000
    chunks = chunk_text(f"short {word} tail", chunk_size=800, overlap=200)

    assert any(word in c for c in chunks)
    assert chunks[-1].endswith("tail")


def test_zero_overlap_does_not_repeat_words():
    words = [f"w{i:03d}" for i in range(300)]
    chunks = chunk_text(" ".join(words), chunk_size=100, overlap=0)

    rejoined = " ".join(chunks).split(" ")
    assert rejoined == words


def test_whitespace_is_normalised():
    assert chunk_text("alpha\n\n beta\tgamma") == ["alpha beta gamma"]


class TestTextChunker:
    """Tests for the configured chunker wrapper."""

    def test_rejects_overlap_not_smaller_than_size(self):
        with pytest.raises(ValueError):
            TextChunker(chunk_size=100, chunk_overlap=100)

    def test_rejects_non_positive_size(self):
        with pytest.raises(ValueError):
            TextChunker(chunk_size=0, chunk_overlap=0)

    def test_chunk_document_attaches_positions(self, long_words):
        chunker = TextChunker(chunk_size=800, chunk_overlap=200)

        chunks = chunker.chunk_document(" ".join(long_words), "notes/a.md")

        assert [c.index for c in chunks] == [0, 1, 2]
        assert all(c.total_chunks_in_source == 3 for c in chunks)
        assert all(c.source_file == "notes/a.md" for c in chunks)
        assert isinstance(chunks[0], Chunk)

    def test_chunk_is_immutable(self):
        chunk = TextChunker(chunk_size=50, chunk_overlap=10).chunk_document("hi", "a.md")[0]

        with pytest.raises(AttributeError):
            chunk.content = "changed"

    def test_get_chunk_stats(self, long_words):
        chunker = TextChunker(chunk_size=800, chunk_overlap=200)
        chunks = chunker.chunk_document(" ".join(long_words), "a.md")

        stats = chunker.get_chunk_stats(chunks)

        assert stats["chunk_count"] == 3
        assert stats["max_chunk_size"] == 799
        assert stats["overlap"] == 200
        assert chunker.get_chunk_stats([])["chunk_count"] == 0
