from __future__ import annotations

import math
from typing import Sequence

from .errors import DimensionMismatchError

Vector = Sequence[float]


def check_dims(a: Vector, b: Vector) -> None:
    if len(a) != len(b):
        raise DimensionMismatchError(len(a), len(b))


def euclidean(a: Vector, b: Vector) -> float:
    check_dims(a, b)
    return math.sqrt(sum((x - y) * (x - y) for x, y in zip(a, b)))


def mean_vector(vectors: Sequence[Vector]) -> list[float]:
    """Element-wise mean of one or more vectors of equal dimension."""
    if not vectors:
        raise ValueError("Cannot average an empty set of vectors")
    dim = len(vectors[0])
    total = [0.0] * dim
    for vec in vectors:
        check_dims(total, vec)
        for i, v in enumerate(vec):
            total[i] += v
    n = len(vectors)
    return [v / n for v in total]


__all__ = ["Vector", "check_dims", "euclidean", "mean_vector"]
