from .base import (
    ClusteringAlgorithm,
    ClusteringStrategy,
    StrategyContext,
    StrategyOutcome,
    WordDistance,
)
from .nearest import NearestNeighborStrategy
from .kmeans import KMeansStrategy
from .hierarchical import HierarchicalStrategy

STRATEGY_REGISTRY = {
    NearestNeighborStrategy.algorithm: NearestNeighborStrategy,
    KMeansStrategy.algorithm: KMeansStrategy,
    HierarchicalStrategy.algorithm: HierarchicalStrategy,
}

__all__ = [
    "ClusteringAlgorithm",
    "ClusteringStrategy",
    "StrategyContext",
    "StrategyOutcome",
    "WordDistance",
    "NearestNeighborStrategy",
    "KMeansStrategy",
    "HierarchicalStrategy",
    "STRATEGY_REGISTRY",
]
