from __future__ import annotations

from dataclasses import dataclass, field
import logging

from ..config import ClusterConfig
from ..distance import euclidean
from ..embedding import EmbeddingStore
from ..parallel import BatchRunner, Collector
from .base import (
    ClusteringAlgorithm,
    ClusteringStrategy,
    StrategyContext,
    StrategyOutcome,
    distances_to_query,
    rank,
    top_members,
)

logger = logging.getLogger(__name__)


@dataclass
class Merge:
    kept: str
    absorbed: str
    linkage: float
    clusters_left: int


@dataclass
class Hierarchy:
    clusters: list[list[str]]
    merges: list[Merge] = field(default_factory=list)

    def cluster_of(self, word: str) -> list[str] | None:
        for members in self.clusters:
            if word in members:
                return members
        return None


def distance_matrix(store: EmbeddingStore, words: list[str], runner: BatchRunner) -> list[list[float]]:
    """Symmetric pairwise distances, one batch unit per row of the upper triangle."""
    n = len(words)
    vecs = [store.vector_of(w) for w in words]

    def _row(i: int, out: Collector[tuple[int, list[float]]]) -> None:
        out.add((i, [euclidean(vecs[i], vecs[j]) for j in range(i + 1, n)]))

    matrix = [[0.0] * n for _ in range(n)]
    for i, row in runner.run(range(n), _row):
        for offset, d in enumerate(row):
            j = i + 1 + offset
            matrix[i][j] = d
            matrix[j][i] = d
    return matrix


class AgglomerativeClusterer:
    """Average-linkage agglomerative clustering over a ranked word list.

    Clusters are identified by the position of their earliest-ranked member.
    For every pair of live clusters we keep the *sum* of member-pair
    distances; merging two clusters adds their rows, so the average linkage
    of any pair is always ``sum / (size_a * size_b)``. Each cluster also
    caches its closest partner, which only has to be rescanned when that
    partner took part in a merge.
    """

    def __init__(self, n_clusters: int = 5):
        self.n_clusters = n_clusters

    def fit(self, words: list[str], matrix: list[list[float]]) -> Hierarchy:
        n = len(words)
        members: dict[int, list[int]] = {i: [i] for i in range(n)}
        sums: dict[int, dict[int, float]] = {
            i: {j: matrix[i][j] for j in range(n) if j != i} for i in range(n)
        }

        def linkage(a: int, b: int) -> float:
            return sums[a][b] / (len(members[a]) * len(members[b]))

        def closest(a: int) -> tuple[float, int]:
            return min((linkage(a, b), b) for b in members if b != a)

        best: dict[int, tuple[float, int]] = {}
        if n > self.n_clusters:
            best = {a: closest(a) for a in members}

        merges: list[Merge] = []
        while len(members) > self.n_clusters:
            a = min(best, key=lambda c: (best[c][0], min(c, best[c][1]), max(c, best[c][1])))
            dist, b = best[a]
            lo, hi = min(a, b), max(a, b)

            members[lo].extend(members.pop(hi))
            absorbed = sums.pop(hi)
            del best[hi]
            del sums[lo][hi]
            for c in members:
                if c == lo:
                    continue
                total = sums[lo][c] + absorbed[c]
                sums[lo][c] = total
                sums[c][lo] = total
                del sums[c][hi]

            merges.append(Merge(words[lo], words[hi], dist, len(members)))
            if len(members) <= self.n_clusters:
                break

            best[lo] = closest(lo)
            for c in members:
                if c == lo:
                    continue
                if best[c][1] in (lo, hi):
                    best[c] = closest(c)
                else:
                    candidate = (linkage(c, lo), lo)
                    if candidate < best[c]:
                        best[c] = candidate

            if len(merges) % 100 == 0:
                logger.debug("Hierarchical merge %d: %d clusters left", len(merges), len(members))

        clusters = [[words[i] for i in members[cid]] for cid in sorted(members)]
        return Hierarchy(clusters=clusters, merges=merges)


class HierarchicalStrategy(ClusteringStrategy):
    algorithm = ClusteringAlgorithm.HIERARCHICAL

    def __init__(self, cfg: ClusterConfig | None = None):
        super().__init__(cfg)
        self.candidate_pool = self.cfg.hierarchical.candidate_pool
        self.clusterer = AgglomerativeClusterer(self.cfg.hierarchical.n_clusters)

    def candidates(self, ctx: StrategyContext) -> list[str]:
        """The query word followed by its nearest neighbours, ``candidate_pool`` words in all."""
        others = [w for w in ctx.store.vocabulary() if w != ctx.query]
        nearest = rank(distances_to_query(ctx, others), self.candidate_pool - 1)
        return [ctx.query] + [wd.word for wd in nearest]

    def run(self, ctx: StrategyContext) -> StrategyOutcome:
        words = self.candidates(ctx)
        logger.info("Hierarchical clustering over %d candidate words", len(words))
        matrix = distance_matrix(ctx.store, words, ctx.runner)
        hierarchy = self.clusterer.fit(words, matrix)
        details = {"candidates": len(words), "merges": len(hierarchy.merges), "clusters": len(hierarchy.clusters)}
        target = hierarchy.cluster_of(ctx.query)
        if target is None:
            logger.warning("Query word %r missing from the hierarchical clusters", ctx.query)
            return StrategyOutcome(matches=[], details=details)
        details["cluster_size"] = len(target)
        return StrategyOutcome(matches=top_members(ctx, target), details=details)


__all__ = ["Merge", "Hierarchy", "AgglomerativeClusterer", "HierarchicalStrategy", "distance_matrix"]
