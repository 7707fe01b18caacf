from __future__ import annotations

from .base import (
    ClusteringAlgorithm,
    ClusteringStrategy,
    StrategyContext,
    StrategyOutcome,
    distances_to_query,
    rank,
)


class NearestNeighborStrategy(ClusteringStrategy):
    """Brute-force ranking of the whole vocabulary against the query vector."""

    algorithm = ClusteringAlgorithm.NEAREST_NEIGHBOR

    def run(self, ctx: StrategyContext) -> StrategyOutcome:
        others = [w for w in ctx.store.vocabulary() if w != ctx.query]
        matches = rank(distances_to_query(ctx, others), ctx.top_n)
        return StrategyOutcome(matches=matches, details={"compared": len(others)})


__all__ = ["NearestNeighborStrategy"]
