"""rag_search.retrieval.similarity

Vector similarity helpers used by the in-memory vector store.

Functions
---------
cosine_similarity
    Cosine similarity between two equal-length vectors.
"""

import numpy as np

from rag_search.common import DimensionMismatchError, Vector


def as_vector(values: Vector) -> np.ndarray:
    """Coerce a sequence of floats into a 1-D ``float64`` array."""
    return np.asarray(values, dtype=np.float64).reshape(-1)


def cosine_similarity(a: Vector, b: Vector) -> float:
    """Compute ``dot(a, b) / (||a|| * ||b||)``.

    Parameters
    ----------
    a, b : Sequence[float]
        Vectors of equal length.

    Returns
    -------
    float
        Cosine similarity in ``[-1, 1]``. If either vector has zero magnitude
        the similarity is defined as ``0.0``.

    Raises
    ------
    DimensionMismatchError
        If ``a`` and ``b`` have different lengths.
    """
    va = as_vector(a)
    vb = as_vector(b)
    if va.shape[0] != vb.shape[0]:
        raise DimensionMismatchError(va.shape[0], vb.shape[0])

    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    return float(np.dot(va, vb) / (norm_a * norm_b))


__all__ = ["as_vector", "cosine_similarity"]
