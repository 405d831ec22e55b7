"""Tests for the SQLite vector store."""
import numpy as np
import pytest

from docrag.errors import CorruptionError, StoreError
from docrag.rag.store_sqlite import EmbeddedChunk, SQLiteVectorStore


def _record(content, vector, filename="a.md", chunk_index=0, total_chunks=1):
    return EmbeddedChunk(
        content=content,
        embedding=vector,
        filename=filename,
        chunk_index=chunk_index,
        total_chunks=total_chunks,
    )


def test_initialize_is_idempotent(store):
    store.initialize()
    store.initialize()

    assert store.count() == 0


def test_schema_has_filename_index(store):
    conn = store._get_connection()
    names = [
        row["name"]
        for row in conn.execute(
            "SELECT name FROM sqlite_master WHERE type = 'index' "
            "AND tbl_name = 'document_embeddings'"
        )
    ]

    assert "idx_filename" in names


def test_insert_then_scan_returns_decoded_records(store, fake_vector):
    records = [
        _record(f"chunk {i}", fake_vector(f"chunk {i}"), chunk_index=i, total_chunks=3)
        for i in range(3)
    ]

    ids = store.insert_batch(records)
    scanned = store.scan_all()

    assert ids == [1, 2, 3]
    assert [r.id for r in scanned] == ids
    assert [r.content for r in scanned] == ["chunk 0", "chunk 1", "chunk 2"]
    assert all(r.total_chunks == 3 for r in scanned)
    assert all(r.created_at for r in scanned)
    np.testing.assert_array_equal(
        scanned[1].embedding, np.asarray(fake_vector("chunk 1"), dtype=np.float32)
    )


def test_ids_keep_increasing_across_batches(store, fake_vector):
    store.insert_batch([_record("one", fake_vector("one"))])
    ids = store.insert_batch([_record("two", fake_vector("two"))])

    assert ids == [2]
    assert store.count() == 2


def test_empty_batch_is_noop(store):
    assert store.insert_batch([]) == []
    assert store.count() == 0


def test_wrong_dimension_writes_nothing(store, fake_vector):
    records = [_record("good", fake_vector("good")), _record("bad", [0.1] * 10)]

    with pytest.raises(ValueError):
        store.insert_batch(records)

    assert store.count() == 0


def test_sql_failure_rolls_back_whole_batch(store, fake_vector):
    records = [
        _record("first", fake_vector("first")),
        _record(None, fake_vector("second"), chunk_index=1),
        _record("third", fake_vector("third"), chunk_index=2),
    ]

    with pytest.raises(StoreError):
        store.insert_batch(records)

    assert store.count() == 0
    store.insert_batch([_record("after", fake_vector("after"))])
    assert [r.content for r in store.scan_all()] == ["after"]


def test_scan_fails_on_corrupted_embedding(store, fake_vector):
    store.insert_batch([_record("good", fake_vector("good"))])
    conn = store._get_connection()
    conn.execute(
        "INSERT INTO document_embeddings "
        "(content, embedding, filename, chunk_index, total_chunks, created_at) "
        "VALUES (?, ?, ?, ?, ?, ?)",
        ("bad", b"\x00" * 100, "b.md", 0, 1, "2024-01-01T00:00:00"),
    )
    conn.commit()

    with pytest.raises(CorruptionError) as exc_info:
        store.scan_all()

    assert exc_info.value.record_id == 2
    assert exc_info.value.byte_length == 100


def test_scan_without_schema_raises_store_error(tmp_path):
    fresh = SQLiteVectorStore(db_path=tmp_path / "fresh.db")

    with pytest.raises(StoreError):
        fresh.scan_all()

    fresh.close()


def test_get_stats(store, fake_vector):
    store.insert_batch([
        _record("a0", fake_vector("a0"), filename="a.md"),
        _record("b0", fake_vector("b0"), filename="b.md"),
        _record("b1", fake_vector("b1"), filename="b.md", chunk_index=1),
    ])

    stats = store.get_stats()

    assert stats["record_count"] == 3
    assert stats["file_count"] == 2
    assert stats["dimension"] == 1024


def test_records_persist_across_connections(tmp_path, fake_vector):
    path = tmp_path / "nested" / "vectors.db"

    with SQLiteVectorStore(db_path=path) as first:
        first.insert_batch([_record("kept", fake_vector("kept"))])

    with SQLiteVectorStore(db_path=path) as second:
        assert [r.content for r in second.scan_all()] == ["kept"]


def test_in_memory_store(fake_vector):
    with SQLiteVectorStore(db_path=":memory:") as memory_store:
        memory_store.insert_batch([_record("x", fake_vector("x"))])
        assert memory_store.count() == 1
