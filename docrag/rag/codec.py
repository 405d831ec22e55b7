"""Binary layout of stored embeddings.

An embedding is stored as exactly ``dimension`` little-endian IEEE-754
float32 values, with no header or length prefix.
"""
from typing import Sequence, Union

import numpy as np

from docrag import config
from docrag.errors import CorruptionError

EMBEDDING_DTYPE = np.dtype("<f4")


def expected_byte_length(dimension: int = None) -> int:
    """Number of bytes a stored embedding of ``dimension`` floats occupies."""
    dimension = dimension or config.EMBEDDING_DIMENSION
    return dimension * EMBEDDING_DTYPE.itemsize


def encode_embedding(
    vector: Union[Sequence[float], np.ndarray], dimension: int = None
) -> bytes:
    """Encode a vector as contiguous little-endian float32 bytes.

    Raises:
        ValueError: If the vector is not one-dimensional with ``dimension`` values
    """
    dimension = dimension or config.EMBEDDING_DIMENSION
    array = np.asarray(vector, dtype=EMBEDDING_DTYPE)

    if array.ndim != 1 or array.shape[0] != dimension:
        raise ValueError(
            f"Embedding dimension mismatch: expected {dimension}, "
            f"got shape {array.shape}"
        )

    return array.tobytes()


def decode_embedding(
    buffer: bytes, dimension: int = None, record_id: int = None
) -> np.ndarray:
    """Decode stored bytes back into a float32 vector.

    Raises:
        CorruptionError: If the buffer is not exactly ``dimension * 4`` bytes
    """
    expected = expected_byte_length(dimension)

    if not isinstance(buffer, (bytes, bytearray, memoryview)) or len(buffer) != expected:
        actual = len(buffer) if isinstance(buffer, (bytes, bytearray, memoryview)) else None
        raise CorruptionError(
            f"Stored embedding for record {record_id} is {actual} bytes, "
            f"expected {expected}",
            record_id=record_id,
            byte_length=actual,
            expected_length=expected,
        )

    # frombuffer returns a read-only view; copy so callers own the array
    return np.frombuffer(buffer, dtype=EMBEDDING_DTYPE).copy()
