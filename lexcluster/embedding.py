from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Mapping, Protocol, Sequence
import logging
import math

from .config import EmbeddingConfig
from .errors import EmbeddingLoadError

logger = logging.getLogger(__name__)


class EmbeddingStore(Protocol):
    def vector_of(self, word: str) -> list[float] | None:
        ...

    def vocabulary(self) -> frozenset[str]:
        ...

    @property
    def dim(self) -> int:
        ...


@dataclass
class LoadStats:
    loaded: int = 0
    skipped_short: int = 0
    skipped_non_numeric: int = 0
    skipped_dimension: int = 0
    duplicates: int = 0

    @property
    def skipped(self) -> int:
        return self.skipped_short + self.skipped_non_numeric + self.skipped_dimension


def _normalize(vec: list[float]) -> list[float]:
    norm = math.sqrt(sum(v * v for v in vec))
    if norm > 0:
        return [v / norm for v in vec]
    return vec


@dataclass
class KeyedVectorsEmbedding:
    """Immutable word -> vector table with a fixed dimension."""

    vectors: dict[str, list[float]]
    stats: LoadStats = field(default_factory=LoadStats)

    def __post_init__(self) -> None:
        dims = {len(v) for v in self.vectors.values()}
        if len(dims) > 1:
            raise ValueError(f"Embedding vectors have mixed dimensions: {sorted(dims)}")
        self._dim = dims.pop() if dims else 0
        self._vocab = frozenset(self.vectors)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Sequence[float]]) -> "KeyedVectorsEmbedding":
        vectors = {word: [float(v) for v in vec] for word, vec in mapping.items()}
        return cls(vectors, LoadStats(loaded=len(vectors)))

    @classmethod
    def load(cls, path: str | Path, cfg: EmbeddingConfig | None = None) -> "KeyedVectorsEmbedding":
        cfg = cfg or EmbeddingConfig()
        path = Path(path)
        logger.info("Loading embeddings from %s", path)
        try:
            with path.open(encoding=cfg.encoding) as fh:
                vectors, stats = cls._parse(fh, cfg)
        except (OSError, UnicodeDecodeError) as exc:
            raise EmbeddingLoadError(f"Cannot read embeddings file {path}: {exc}", str(path)) from exc
        if not vectors:
            raise EmbeddingLoadError(f"No embeddings loaded from {path}", str(path))
        if stats.skipped_dimension > stats.loaded:
            raise EmbeddingLoadError(
                f"Only {stats.loaded} of {stats.loaded + stats.skipped_dimension} records in {path} "
                f"have dimension {len(next(iter(vectors.values())))}",
                str(path),
            )
        if stats.skipped:
            logger.warning(
                "Skipped %d malformed records in %s (too few fields: %d, non-numeric: %d, wrong dimension: %d)",
                stats.skipped,
                path,
                stats.skipped_short,
                stats.skipped_non_numeric,
                stats.skipped_dimension,
            )
        store = cls(vectors, stats)
        logger.info(
            "Loaded %d word embeddings (dim=%d, %d duplicate words replaced)",
            len(store),
            store.dim,
            stats.duplicates,
        )
        return store

    @staticmethod
    def _parse(lines: Iterable[str], cfg: EmbeddingConfig) -> tuple[dict[str, list[float]], LoadStats]:
        stats = LoadStats()
        records: list[tuple[str, list[float]]] = []
        for line in lines:
            line = line.strip()
            if not line:
                continue
            parts = line.split(cfg.delimiter) if cfg.delimiter else line.split()
            if len(parts) < 2:
                stats.skipped_short += 1
                continue
            word, *vals = parts
            try:
                vec = [float(v) for v in vals]
            except ValueError:
                stats.skipped_non_numeric += 1
                continue
            if not all(math.isfinite(v) for v in vec):
                stats.skipped_non_numeric += 1
                continue
            records.append((word, vec))

        dim = cfg.vector_dim
        if dim is None and records:
            # the most common length wins, so a truncated first line or a
            # word2vec "count dim" header cannot dictate the dimension
            dim = Counter(len(vec) for _, vec in records).most_common(1)[0][0]

        vectors: dict[str, list[float]] = {}
        for word, vec in records:
            if len(vec) != dim:
                stats.skipped_dimension += 1
                continue
            if cfg.normalize_vectors:
                vec = _normalize(vec)
            if word in vectors:
                stats.duplicates += 1
            else:
                stats.loaded += 1
            vectors[word] = vec
        return vectors, stats

    @property
    def dim(self) -> int:
        return self._dim

    def vector_of(self, word: str) -> list[float] | None:
        return self.vectors.get(word)

    def vocabulary(self) -> frozenset[str]:
        return self._vocab

    def __contains__(self, word: object) -> bool:
        return word in self.vectors

    def __len__(self) -> int:
        return len(self.vectors)


__all__ = ["EmbeddingStore", "KeyedVectorsEmbedding", "LoadStats"]
