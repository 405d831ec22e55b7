"""Tests for the embedding byte layout."""
import struct

import numpy as np
import pytest

from docrag.errors import CorruptionError
from docrag.rag.codec import decode_embedding, encode_embedding, expected_byte_length


def test_round_trip_preserves_float32_values():
    rng = np.random.default_rng(0)
    vector = rng.standard_normal(1024)

    decoded = decode_embedding(encode_embedding(vector, 1024), 1024)

    assert decoded.dtype == np.float32
    assert decoded.shape == (1024,)
    np.testing.assert_array_equal(decoded, vector.astype(np.float32))


def test_layout_is_little_endian_float32_without_header():
    vector = [1.5, -2.0, 0.25, 3.0]

    encoded = encode_embedding(vector, 4)

    assert len(encoded) == 16
    assert encoded == struct.pack("<4f", *vector)


def test_expected_byte_length():
    assert expected_byte_length(1024) == 4096


def test_encode_rejects_wrong_dimension():
    with pytest.raises(ValueError):
        encode_embedding([0.1] * 1023, 1024)


def test_decode_rejects_truncated_buffer():
    buffer = encode_embedding([0.5] * 1024, 1024)[:-4]

    with pytest.raises(CorruptionError) as exc_info:
        decode_embedding(buffer, 1024, record_id=7)

    assert exc_info.value.record_id == 7
    assert exc_info.value.byte_length == 4092
    assert exc_info.value.expected_length == 4096


def test_decode_rejects_non_binary_value():
    with pytest.raises(CorruptionError):
        decode_embedding("not bytes", 4)


def test_decoded_array_is_writable():
    decoded = decode_embedding(encode_embedding([1.0, 2.0], 2), 2)

    decoded[0] = 5.0

    assert decoded[0] == 5.0
