from .builder import ClusterBuilder, ClusterResult
from .config import ClusterConfig
from .embedding import KeyedVectorsEmbedding
from .strategies import ClusteringAlgorithm

__version__ = "0.1.0"

__all__ = [
    "ClusterBuilder",
    "ClusterResult",
    "ClusterConfig",
    "KeyedVectorsEmbedding",
    "ClusteringAlgorithm",
]
