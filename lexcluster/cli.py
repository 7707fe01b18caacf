from __future__ import annotations

import argparse
import logging
import sys

import yaml

from .config import OUTPUT_FORMATS, ClusterConfig
from .builder import ClusterBuilder
from .errors import LexClusterError
from .report import ReportFormatter, write_results
from .strategies import ClusteringAlgorithm

logger = logging.getLogger(__name__)

ALGORITHM_CHOICES = ("nearest", "kmeans", "hierarchical")


def _build_config(args: argparse.Namespace) -> ClusterConfig:
    """Config file first, then command-line overrides."""
    cfg = ClusterConfig.load(args.config) if args.config else ClusterConfig()
    cfg.embedding.path = args.embeddings
    if args.delimiter is not None:
        cfg.embedding.delimiter = None if args.delimiter == "whitespace" else args.delimiter
    if args.algorithm:
        cfg.algorithm = args.algorithm
    if args.workers is not None:
        cfg.execution.workers = args.workers
    if args.top_n is not None:
        cfg.top_n = args.top_n
    if args.seed is not None:
        cfg.kmeans.seed = args.seed
    if args.output:
        cfg.output.path = args.output
    if args.format:
        cfg.output.format = args.format
    if args.debug:
        cfg.debug = True
    cfg.validate()
    ClusteringAlgorithm.parse(cfg.algorithm)
    return cfg


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Find related words by clustering word embeddings")

    parser.add_argument("embeddings", help="Path to a delimited word embedding file")
    parser.add_argument("query", help="Word to find related words for")

    parser.add_argument("--algorithm", "-a", choices=ALGORITHM_CHOICES, default=None)
    parser.add_argument("--workers", "-w", type=int, default=None, help="Worker threads (default: CPU count)")
    parser.add_argument("--top-n", type=int, default=None, help="Number of matches to return (default: 5)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for K-Means initialisation")
    parser.add_argument(
        "--delimiter", default=None, help="Field delimiter of the embeddings file; 'whitespace' for GloVe text"
    )
    parser.add_argument("--config", "-c", help="Path to YAML/JSON config", default=None)
    parser.add_argument("--output", "-o", default=None, help="Result file (default: ./out.txt)")
    parser.add_argument("--format", choices=OUTPUT_FORMATS, default=None, help="Stdout format")
    parser.add_argument("--no-write", action="store_true", help="Print results without writing the result file")
    parser.add_argument("--debug", action="store_true", help="Include strategy details in JSON output")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        cfg = _build_config(args)
    except (OSError, ValueError, TypeError, yaml.YAMLError) as exc:
        parser.error(str(exc))

    try:
        builder = ClusterBuilder(cfg)
        result = builder.build(args.query, cfg.execution.workers, cfg.algorithm)
    except LexClusterError as exc:
        logger.error("%s", exc)
        return 1

    if not result.matches:
        logger.warning("No related words found for %r", args.query)
    print(ReportFormatter(result).render(cfg.output.format))
    if not args.no_write:
        try:
            write_results(result.to_lines(), cfg.output.path, args.query)
        except OSError as exc:
            logger.error("Cannot write results to %s: %s", cfg.output.path, exc)
            return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
