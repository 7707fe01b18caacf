from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any
import json

import yaml


@dataclass
class EmbeddingConfig:
    path: str = ""
    delimiter: str | None = ","  # None splits on any whitespace (GloVe text files)
    vector_dim: int | None = None  # None: take the dimension of the first record
    normalize_vectors: bool = False
    encoding: str = "utf-8"


@dataclass
class ExecutionConfig:
    workers: int | None = None  # None: os.cpu_count()
    chunk_size: int = 512


@dataclass
class KMeansConfig:
    n_clusters: int = 10
    max_iterations: int = 100
    tolerance: float = 0.0
    seed: int | None = None


@dataclass
class HierarchicalConfig:
    candidate_pool: int = 500
    n_clusters: int = 5


@dataclass
class OutputConfig:
    path: str = "./out.txt"
    format: str = "text"  # "text" | "json" | "markdown"


OUTPUT_FORMATS = ("text", "json", "markdown")


@dataclass
class ClusterConfig:
    embedding: EmbeddingConfig = field(default_factory=EmbeddingConfig)
    execution: ExecutionConfig = field(default_factory=ExecutionConfig)
    kmeans: KMeansConfig = field(default_factory=KMeansConfig)
    hierarchical: HierarchicalConfig = field(default_factory=HierarchicalConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    algorithm: str = "nearest"
    top_n: int = 5
    debug: bool = False

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "ClusterConfig":
        cfg = cls(
            embedding=EmbeddingConfig(**data.get("embedding", {})),
            execution=ExecutionConfig(**data.get("execution", {})),
            kmeans=KMeansConfig(**data.get("kmeans", {})),
            hierarchical=HierarchicalConfig(**data.get("hierarchical", {})),
            output=OutputConfig(**data.get("output", {})),
            algorithm=data.get("algorithm", "nearest"),
            top_n=data.get("top_n", 5),
            debug=data.get("debug", False),
        )
        cfg.validate()
        return cfg

    @classmethod
    def load(cls, path: str | Path) -> "ClusterConfig":
        path = Path(path)
        text = path.read_text(encoding="utf-8")
        if path.suffix.lower() in {".yaml", ".yml"}:
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
        return cls.from_mapping(data or {})

    def validate(self) -> None:
        positive = {
            "top_n": self.top_n,
            "execution.chunk_size": self.execution.chunk_size,
            "kmeans.n_clusters": self.kmeans.n_clusters,
            "kmeans.max_iterations": self.kmeans.max_iterations,
            "hierarchical.candidate_pool": self.hierarchical.candidate_pool,
            "hierarchical.n_clusters": self.hierarchical.n_clusters,
        }
        if self.execution.workers is not None:
            positive["execution.workers"] = self.execution.workers
        if self.embedding.vector_dim is not None:
            positive["embedding.vector_dim"] = self.embedding.vector_dim
        for name, value in positive.items():
            if value < 1:
                raise ValueError(f"{name} must be >= 1, got {value}")
        if self.kmeans.tolerance < 0:
            raise ValueError(f"kmeans.tolerance must be >= 0, got {self.kmeans.tolerance}")
        if self.output.format not in OUTPUT_FORMATS:
            raise ValueError(f"Unknown output format: {self.output.format}")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


__all__ = [
    "EmbeddingConfig",
    "ExecutionConfig",
    "KMeansConfig",
    "HierarchicalConfig",
    "OutputConfig",
    "ClusterConfig",
    "OUTPUT_FORMATS",
]
