from __future__ import annotations


class LexClusterError(Exception):
    """Base exception for all lexcluster errors."""


class EmbeddingLoadError(LexClusterError):
    """Embeddings could not be loaded (unreadable source or no usable records)."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path


class ClusteringError(LexClusterError):
    """Raised while building clusters for a query word."""


class WordNotFoundError(ClusteringError):
    def __init__(self, word: str):
        super().__init__(f"Search word not found in embeddings: {word!r}")
        self.word = word


class DimensionMismatchError(ClusteringError):
    def __init__(self, left: int, right: int):
        super().__init__(f"Vector dimensions differ: {left} != {right}")
        self.left = left
        self.right = right


class BatchFailure(ClusteringError):
    """A unit of a concurrent batch failed; the whole batch is discarded.

    The failing unit's exception is kept as ``cause`` (and ``__cause__``).
    """

    def __init__(self, cause: BaseException):
        super().__init__(f"Batch aborted: {type(cause).__name__}: {cause}")
        self.cause = cause


__all__ = [
    "LexClusterError",
    "EmbeddingLoadError",
    "ClusteringError",
    "WordNotFoundError",
    "DimensionMismatchError",
    "BatchFailure",
]
