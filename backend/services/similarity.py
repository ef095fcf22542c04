"""Vector similarity helpers shared by the bullet scorer and the ATS pass."""

from collections.abc import Sequence

import numpy as np


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    """Clamp to [low, high]; NaN collapses to `low`."""
    if value != value:  # NaN
        return low
    return max(low, min(high, value))


def cosine_similarity(a: Sequence[float] | None, b: Sequence[float] | None) -> float:
    """Cosine similarity of two vectors.

    Returns 0.0 for empty, mismatched-length or zero-magnitude vectors
    instead of raising or producing NaN.
    """
    if a is None or b is None or len(a) == 0 or len(b) == 0 or len(a) != len(b):
        return 0.0
    va = np.asarray(a, dtype=float)
    vb = np.asarray(b, dtype=float)
    norm_a = float(np.linalg.norm(va))
    norm_b = float(np.linalg.norm(vb))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return clamp(float(np.dot(va, vb)) / (norm_a * norm_b), -1.0, 1.0)


def max_similarity(
    embedding: Sequence[float] | None,
    query_embeddings: Sequence[Sequence[float]],
    fallback: Sequence[float] | None = None,
) -> float:
    """Best cosine of `embedding` against the queries (or the fallback vector).

    Clamped to [0, 1]; a missing embedding scores 0.
    """
    if embedding is None or len(embedding) == 0:
        return 0.0
    targets = list(query_embeddings) if len(query_embeddings) else [fallback]
    scores = [cosine_similarity(embedding, target) for target in targets]
    return clamp(max(scores)) if scores else 0.0
