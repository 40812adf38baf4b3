"""Embedding similarity."""

import numpy as np


def cosine_similarity(a: np.ndarray, b: np.ndarray) -> float:
    """Cosine similarity between two embeddings.

    Args:
        a: First embedding
        b: Second embedding (same length as ``a``)

    Returns:
        Similarity in [-1, 1]; 0.0 if either vector has zero norm or
        contains NaN/inf
    """
    a = np.asarray(a, dtype=np.float64).ravel()
    b = np.asarray(b, dtype=np.float64).ravel()
    if a.shape != b.shape:
        raise ValueError(
            f"Embeddings must have the same dimension ({a.shape[0]} != {b.shape[0]})"
        )

    norm_a = float(np.linalg.norm(a))
    norm_b = float(np.linalg.norm(b))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    similarity = float(np.dot(a, b) / (norm_a * norm_b))
    if not np.isfinite(similarity):
        return 0.0
    return float(np.clip(similarity, -1.0, 1.0))


def l2_normalize(embedding: np.ndarray) -> np.ndarray:
    """Scale an embedding to unit length. Zero vectors are returned unchanged."""
    vector = np.asarray(embedding, dtype=np.float32)
    norm = float(np.linalg.norm(vector))
    if norm == 0.0:
        return vector.copy()
    return (vector / norm).astype(np.float32)
