from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable

from .builder import ClusterResult

logger = logging.getLogger(__name__)

RULE = "-" * 40


class ReportFormatter:
    def __init__(self, result: ClusterResult):
        self.result = result

    def to_text(self) -> str:
        return "\n".join(self.result.to_lines())

    def to_json(self, indent: int = 2) -> str:
        payload = {
            "query": self.result.query,
            "algorithm": self.result.algorithm.label,
            "matches": [{"word": m.word, "distance": round(m.distance, 4)} for m in self.result.matches],
            "elapsed_seconds": round(self.result.elapsed, 3),
            "debug": self.result.debug,
        }
        return json.dumps(payload, indent=indent)

    def to_markdown_table(self) -> str:
        lines = [f"### {self.result.algorithm.label}: {self.result.query}"]
        lines.append("| Rank | Word | Distance |")
        lines.append("| --- | --- | --- |")
        for i, m in enumerate(self.result.matches, start=1):
            lines.append(f"| {i} | {m.word} | {m.distance:.4f} |")
        return "\n".join(lines)

    def render(self, fmt: str = "text") -> str:
        if fmt == "json":
            return self.to_json()
        if fmt == "markdown":
            return self.to_markdown_table()
        if fmt == "text":
            return self.to_text()
        raise ValueError(f"Unknown output format: {fmt}")


def write_results(results: Iterable[str], path: str | Path, query: str) -> Path:
    """Write result lines under a ``Search Results for:`` header."""
    path = Path(path)
    lines = [f"Search Results for: {query}", RULE, *results]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    logger.info("Results written to %s", path)
    return path


__all__ = ["ReportFormatter", "write_results"]
