from __future__ import annotations

from typing import Optional, Sequence, Union

import numpy as np

VectorLike = Union[np.ndarray, Sequence[float]]


def cosine_similarity(a: Optional[VectorLike], b: Optional[VectorLike]) -> float:
    """
    Cosine of the angle between `a` and `b`, clipped to [-1, 1].

    Returns 0.0 when either vector is missing, the lengths differ, or either
    vector has zero magnitude.
    """
    if a is None or b is None:
        return 0.0

    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.ndim != 1 or va.shape != vb.shape or va.size == 0:
        return 0.0

    norm_a = float(np.linalg.norm(va))
    norm_b = float(np.linalg.norm(vb))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    score = float(np.dot(va, vb)) / (norm_a * norm_b)
    return max(-1.0, min(1.0, score))


__all__ = ["cosine_similarity"]
