from __future__ import annotations

from dataclasses import dataclass
import logging
import time

from .config import ClusterConfig
from .embedding import EmbeddingStore, KeyedVectorsEmbedding
from .errors import EmbeddingLoadError, WordNotFoundError
from .parallel import BatchRunner
from .strategies import (
    STRATEGY_REGISTRY,
    ClusteringAlgorithm,
    ClusteringStrategy,
    StrategyContext,
    WordDistance,
)

logger = logging.getLogger(__name__)


def format_match(match: WordDistance, algorithm: ClusteringAlgorithm) -> str:
    return f"{match.word} (distance: {match.distance:.4f}) [{algorithm.tag}]"


@dataclass
class ClusterResult:
    query: str
    algorithm: ClusteringAlgorithm
    matches: list[WordDistance]
    elapsed: float = 0.0
    debug: dict | None = None

    def to_lines(self) -> list[str]:
        return [format_match(m, self.algorithm) for m in self.matches]


class ClusterBuilder:
    def __init__(self, cfg: ClusterConfig | None = None, store: EmbeddingStore | None = None):
        self.cfg = cfg or ClusterConfig()
        if store is None:
            if not self.cfg.embedding.path:
                raise EmbeddingLoadError("No embeddings file configured")
            store = KeyedVectorsEmbedding.load(self.cfg.embedding.path, self.cfg.embedding)
        self.store = store

    def _runner(self, concurrency_hint: int | None) -> BatchRunner:
        workers = concurrency_hint or self.cfg.execution.workers
        return BatchRunner(workers=workers, chunk_size=self.cfg.execution.chunk_size)

    def _strategy(self, algorithm: ClusteringAlgorithm) -> ClusteringStrategy:
        return STRATEGY_REGISTRY[algorithm](self.cfg)

    def build(
        self,
        query: str,
        concurrency_hint: int | None = None,
        algorithm: ClusteringAlgorithm | str | None = None,
    ) -> ClusterResult:
        algorithm = ClusteringAlgorithm.parse(algorithm or self.cfg.algorithm)
        query_vector = self.store.vector_of(query)
        if query_vector is None:
            raise WordNotFoundError(query)

        runner = self._runner(concurrency_hint)
        ctx = StrategyContext(
            query=query,
            query_vector=query_vector,
            store=self.store,
            runner=runner,
            top_n=self.cfg.top_n,
        )
        logger.info("Building %s clusters for %r with %d workers", algorithm.label, query, runner.workers)
        started = time.perf_counter()
        outcome = self._strategy(algorithm).run(ctx)
        elapsed = time.perf_counter() - started
        logger.info("%s finished in %.2fs with %d matches", algorithm.label, elapsed, len(outcome.matches))

        debug = None
        if self.cfg.debug:
            debug = dict(outcome.details, workers=runner.workers, vocabulary=len(self.store.vocabulary()))
        return ClusterResult(
            query=query,
            algorithm=algorithm,
            matches=outcome.matches,
            elapsed=elapsed,
            debug=debug,
        )

    def build_clusters(
        self,
        query: str,
        concurrency_hint: int | None,
        algorithm: ClusteringAlgorithm | str,
    ) -> list[str]:
        return self.build(query, concurrency_hint, algorithm).to_lines()


__all__ = ["ClusterBuilder", "ClusterResult", "format_match"]
