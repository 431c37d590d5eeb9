"""Vector similarity functions for the semantic cache.

A similarity function takes two embedding vectors and returns a score where
higher means closer. The semantic cache only compares that score against its
threshold, so any function with that shape can be plugged into CacheService.
"""

from collections.abc import Callable, Sequence

import numpy as np

SimilarityFn = Callable[[Sequence[float], Sequence[float]], float]


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two vectors.

    Vectors of different lengths (e.g. written by a different embedding model)
    and zero vectors score 0.0.

    Args:
        a: First vector
        b: Second vector

    Returns:
        Similarity in [-1, 1], 1 = same direction
    """
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.shape != vb.shape or va.size == 0:
        return 0.0

    norm = float(np.linalg.norm(va) * np.linalg.norm(vb))
    if norm == 0.0:
        return 0.0
    return float(np.dot(va, vb) / norm)
