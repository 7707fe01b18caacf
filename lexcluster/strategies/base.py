from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable

from ..config import ClusterConfig
from ..distance import euclidean
from ..embedding import EmbeddingStore
from ..parallel import BatchRunner


class ClusteringAlgorithm(str, Enum):
    NEAREST_NEIGHBOR = "nearest"
    K_MEANS = "kmeans"
    HIERARCHICAL = "hierarchical"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def tag(self) -> str:
        return _TAGS[self]

    @classmethod
    def parse(cls, value: "ClusteringAlgorithm | str") -> "ClusteringAlgorithm":
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().replace("-", "").replace("_", "").replace(" ", "")
        alias = _ALIASES.get(key)
        if alias is None:
            raise ValueError(f"Unknown clustering algorithm: {value}")
        return alias

    def __str__(self) -> str:
        return self.label


_LABELS = {
    ClusteringAlgorithm.NEAREST_NEIGHBOR: "Nearest Neighbor",
    ClusteringAlgorithm.K_MEANS: "K-Means",
    ClusteringAlgorithm.HIERARCHICAL: "Hierarchical",
}

_TAGS = {
    ClusteringAlgorithm.NEAREST_NEIGHBOR: "Nearest Neighbor",
    ClusteringAlgorithm.K_MEANS: "K-Means Cluster",
    ClusteringAlgorithm.HIERARCHICAL: "Hierarchical Group",
}

_ALIASES = {
    "nearest": ClusteringAlgorithm.NEAREST_NEIGHBOR,
    "nearestneighbor": ClusteringAlgorithm.NEAREST_NEIGHBOR,
    "nn": ClusteringAlgorithm.NEAREST_NEIGHBOR,
    "kmeans": ClusteringAlgorithm.K_MEANS,
    "hierarchical": ClusteringAlgorithm.HIERARCHICAL,
    "agglomerative": ClusteringAlgorithm.HIERARCHICAL,
}


@dataclass(frozen=True)
class WordDistance:
    word: str
    distance: float

    def sort_key(self) -> tuple[float, str]:
        # lexical order breaks distance ties so concurrent collection order never leaks out
        return (self.distance, self.word)


@dataclass
class StrategyContext:
    query: str
    query_vector: list[float]
    store: EmbeddingStore
    runner: BatchRunner
    top_n: int = 5


@dataclass
class StrategyOutcome:
    matches: list[WordDistance]
    details: dict[str, Any] = field(default_factory=dict)


def rank(distances: Iterable[WordDistance], limit: int | None = None) -> list[WordDistance]:
    ordered = sorted(distances, key=WordDistance.sort_key)
    return ordered if limit is None else ordered[:limit]


def distances_to_query(ctx: StrategyContext, words: Iterable[str]) -> tuple[WordDistance, ...]:
    """Distance from every word to the query vector, computed as one batch."""

    def _measure(word: str) -> WordDistance:
        return WordDistance(word, euclidean(ctx.query_vector, ctx.store.vector_of(word)))

    return ctx.runner.map(words, _measure)


def top_members(ctx: StrategyContext, members: Iterable[str]) -> list[WordDistance]:
    """Closest ``top_n`` cluster members to the query, the query itself excluded."""
    peers = [w for w in members if w != ctx.query]
    return rank(distances_to_query(ctx, peers), ctx.top_n)


class ClusteringStrategy(ABC):
    algorithm: ClusteringAlgorithm

    def __init__(self, cfg: ClusterConfig | None = None):
        self.cfg = cfg or ClusterConfig()

    @abstractmethod
    def run(self, ctx: StrategyContext) -> StrategyOutcome:
        ...


__all__ = [
    "ClusteringAlgorithm",
    "WordDistance",
    "StrategyContext",
    "StrategyOutcome",
    "ClusteringStrategy",
    "rank",
    "distances_to_query",
    "top_members",
]
