"""Fork/join batches over a bounded thread pool.

Every clustering step that touches the whole vocabulary (ranking words
against the query, assigning words to centroids, filling the hierarchical
distance matrix) runs as one batch: a unit of work per item, a join, and
only then does the caller look at the collected results.
"""
from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from typing import Callable, Generic, Iterable, Sequence, TypeVar

from .errors import BatchFailure

logger = logging.getLogger(__name__)

T = TypeVar("T")
ItemT = TypeVar("ItemT")


class Collector(Generic[T]):
    """Thread-safe append-only accumulator owned by a single batch."""

    def __init__(self) -> None:
        self._items: list[T] = []
        self._lock = threading.Lock()

    def add(self, item: T) -> None:
        with self._lock:
            self._items.append(item)

    def extend(self, items: Iterable[T]) -> None:
        with self._lock:
            self._items.extend(items)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def snapshot(self) -> tuple[T, ...]:
        with self._lock:
            return tuple(self._items)


def default_workers() -> int:
    return os.cpu_count() or 1


class BatchRunner:
    """Runs one unit per item on at most ``workers`` threads.

    Items are submitted to the pool in contiguous chunks of ``chunk_size``;
    each item is still processed by exactly one call to the unit. A new
    executor is created for every batch and shut down before ``run`` returns.
    """

    def __init__(self, workers: int | None = None, chunk_size: int = 512):
        if workers is not None and workers < 1:
            raise ValueError(f"workers must be >= 1, got {workers}")
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
        self.workers = workers or default_workers()
        self.chunk_size = chunk_size

    def _chunks(self, items: Sequence[ItemT]) -> list[Sequence[ItemT]]:
        size = self.chunk_size
        return [items[i : i + size] for i in range(0, len(items), size)]

    def run(
        self,
        items: Iterable[ItemT],
        unit: Callable[[ItemT, Collector[T]], None],
        collector: Collector[T] | None = None,
    ) -> tuple[T, ...]:
        """Call ``unit(item, collector)`` for every item and join.

        Raises :class:`BatchFailure` if any unit raised. Units still running
        when the failure is observed finish, queued chunks are cancelled and
        whatever they collected is discarded.
        """
        collector = collector if collector is not None else Collector()
        items = list(items)
        if not items:
            return collector.snapshot()

        def _run_chunk(chunk: Sequence[ItemT]) -> None:
            for item in chunk:
                unit(item, collector)

        chunks = self._chunks(items)
        with ThreadPoolExecutor(max_workers=min(self.workers, len(chunks))) as pool:
            futures: list[Future] = [pool.submit(_run_chunk, c) for c in chunks]
            done, not_done = wait(futures, return_when=FIRST_EXCEPTION)
            failed = [f for f in futures if f in done and f.exception() is not None]
            if failed:
                for f in not_done:
                    f.cancel()
                cause = failed[0].exception()
                logger.debug("Batch of %d items aborted: %s", len(items), cause)
                raise BatchFailure(cause) from cause
        return collector.snapshot()

    def map(self, items: Iterable[ItemT], fn: Callable[[ItemT], T]) -> tuple[T, ...]:
        """Collect ``fn(item)`` for every item. Result order is unspecified."""

        def _unit(item: ItemT, out: Collector[T]) -> None:
            out.add(fn(item))

        return self.run(items, _unit)


__all__ = ["Collector", "BatchRunner", "default_workers"]
