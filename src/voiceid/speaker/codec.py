"""Voice print serialization.

A voice print is stored as ``4 * dim`` bytes of little-endian float32 values in
vector order. Decoding never attempts partial recovery: a buffer of any other
length is rejected.
"""

import numpy as np

from voiceid.errors import InvalidEmbeddingDimension

EMBEDDING_DIM = 192

_FLOAT32_LE = np.dtype("<f4")


def serialize_embedding(embedding: np.ndarray, dim: int = EMBEDDING_DIM) -> bytes:
    """Serialize an embedding to bytes.

    Args:
        embedding: 1-D embedding vector
        dim: Expected embedding dimension

    Returns:
        ``4 * dim`` bytes, little-endian float32
    """
    vector = np.asarray(embedding)
    if vector.ndim != 1 or vector.shape[0] != dim:
        raise InvalidEmbeddingDimension(dim, int(vector.size))
    return vector.astype(_FLOAT32_LE).tobytes()


def deserialize_embedding(blob: bytes, dim: int = EMBEDDING_DIM) -> np.ndarray:
    """Deserialize bytes produced by :func:`serialize_embedding`.

    Args:
        blob: Serialized voice print
        dim: Expected embedding dimension

    Returns:
        float32 vector of length ``dim``
    """
    if len(blob) != dim * _FLOAT32_LE.itemsize:
        raise InvalidEmbeddingDimension(dim * _FLOAT32_LE.itemsize, len(blob))
    # Copy so the result is writable and native-endian.
    return np.frombuffer(blob, dtype=_FLOAT32_LE).astype(np.float32)
