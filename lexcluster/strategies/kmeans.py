from __future__ import annotations

from dataclasses import dataclass
import logging
import random

from ..config import ClusterConfig
from ..distance import euclidean, mean_vector
from ..embedding import EmbeddingStore
from ..parallel import BatchRunner, Collector
from .base import (
    ClusteringAlgorithm,
    ClusteringStrategy,
    StrategyContext,
    StrategyOutcome,
    top_members,
)

logger = logging.getLogger(__name__)


@dataclass
class KMeansState:
    centroids: list[list[float]]
    clusters: dict[int, list[str]]
    iterations: int = 0
    converged: bool = False

    def cluster_of(self, word: str) -> int | None:
        for cid, members in self.clusters.items():
            if word in members:
                return cid
        return None


def nearest_centroid(vec: list[float], centroids: list[list[float]]) -> int:
    """Index of the closest centroid; the first one wins on ties."""
    nearest = 0
    min_distance = float("inf")
    for i, centroid in enumerate(centroids):
        distance = euclidean(vec, centroid)
        if distance < min_distance:
            min_distance = distance
            nearest = i
    return nearest


def _moved(old: list[float], new: list[float], tolerance: float) -> bool:
    if tolerance == 0.0:
        return old != new
    return any(abs(a - b) > tolerance for a, b in zip(old, new))


class KMeansClusterer:
    """Lloyd iterations over a whole embedding store.

    Each iteration assigns every word to its nearest centroid in one
    concurrent batch, then recomputes every non-empty centroid as the mean of
    its members. Stops when no centroid moves or after ``max_iterations``.
    """

    def __init__(
        self,
        n_clusters: int = 10,
        max_iterations: int = 100,
        tolerance: float = 0.0,
        seed: int | None = None,
    ):
        self.n_clusters = n_clusters
        self.max_iterations = max_iterations
        self.tolerance = tolerance
        self.rng = random.Random(seed)

    def initial_centroids(self, store: EmbeddingStore, words: list[str]) -> list[list[float]]:
        # sampled with replacement, so two centroids may start on the same word
        return [list(store.vector_of(self.rng.choice(words))) for _ in range(self.n_clusters)]

    def assign(
        self, store: EmbeddingStore, words: list[str], centroids: list[list[float]], runner: BatchRunner
    ) -> dict[int, list[str]]:
        def _assign(word: str, out: Collector[tuple[str, int]]) -> None:
            out.add((word, nearest_centroid(store.vector_of(word), centroids)))

        clusters: dict[int, list[str]] = {i: [] for i in range(len(centroids))}
        for word, cid in runner.run(words, _assign):
            clusters[cid].append(word)
        # centroid sums must not depend on the order the workers reported in
        for members in clusters.values():
            members.sort()
        return clusters

    def update(
        self, store: EmbeddingStore, centroids: list[list[float]], clusters: dict[int, list[str]]
    ) -> bool:
        """Recompute centroids in place; returns True if any of them moved."""
        changed = False
        for cid, members in clusters.items():
            if not members:
                continue
            new_centroid = mean_vector([store.vector_of(w) for w in members])
            if _moved(centroids[cid], new_centroid, self.tolerance):
                changed = True
            centroids[cid] = new_centroid
        return changed

    def fit(self, store: EmbeddingStore, runner: BatchRunner) -> KMeansState:
        words = sorted(store.vocabulary())
        if not words:
            return KMeansState(centroids=[], clusters={}, converged=True)
        state = KMeansState(centroids=self.initial_centroids(store, words), clusters={})
        while state.iterations < self.max_iterations:
            state.clusters = self.assign(store, words, state.centroids, runner)
            state.iterations += 1
            changed = self.update(store, state.centroids, state.clusters)
            logger.debug(
                "K-Means iteration %d: cluster sizes %s",
                state.iterations,
                [len(state.clusters[i]) for i in range(len(state.centroids))],
            )
            if not changed:
                state.converged = True
                break
        if state.converged:
            logger.info("K-Means converged after %d iterations", state.iterations)
        else:
            logger.info("K-Means stopped at the %d iteration cap without converging", state.iterations)
        return state


class KMeansStrategy(ClusteringStrategy):
    algorithm = ClusteringAlgorithm.K_MEANS

    def __init__(self, cfg: ClusterConfig | None = None):
        super().__init__(cfg)
        km = self.cfg.kmeans
        self.clusterer = KMeansClusterer(
            n_clusters=km.n_clusters,
            max_iterations=km.max_iterations,
            tolerance=km.tolerance,
            seed=km.seed,
        )

    def run(self, ctx: StrategyContext) -> StrategyOutcome:
        state = self.clusterer.fit(ctx.store, ctx.runner)
        details = {"iterations": state.iterations, "converged": state.converged}
        cid = state.cluster_of(ctx.query)
        if cid is None:
            logger.warning("Query word %r was not assigned to any K-Means cluster", ctx.query)
            return StrategyOutcome(matches=[], details=details)
        members = state.clusters[cid]
        details.update({"cluster": cid, "cluster_size": len(members)})
        return StrategyOutcome(matches=top_members(ctx, members), details=details)


__all__ = ["KMeansState", "KMeansClusterer", "KMeansStrategy", "nearest_centroid"]
