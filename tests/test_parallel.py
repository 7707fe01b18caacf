import threading

import pytest

from lexcluster.errors import BatchFailure, DimensionMismatchError
from lexcluster.parallel import BatchRunner, Collector


def test_map_processes_every_item_once():
    runner = BatchRunner(workers=4, chunk_size=3)
    result = runner.map(range(100), lambda x: x * x)
    assert isinstance(result, tuple)
    assert sorted(result) == [x * x for x in range(100)]


def test_run_uses_supplied_collector():
    runner = BatchRunner(workers=2, chunk_size=1)
    collector = Collector()

    def unit(word, out):
        out.add((word, len(word)))

    snapshot = runner.run(["a", "bb", "ccc"], unit, collector)
    assert sorted(snapshot) == [("a", 1), ("bb", 2), ("ccc", 3)]
    assert len(collector) == 3


def test_empty_batch_returns_empty_snapshot():
    assert BatchRunner(workers=2).map([], lambda x: x) == ()


def test_failure_aborts_batch_with_cause():
    runner = BatchRunner(workers=4, chunk_size=1)

    def fn(x):
        if x == 7:
            raise DimensionMismatchError(2, 3)
        return x

    with pytest.raises(BatchFailure) as exc:
        runner.map(range(20), fn)
    assert isinstance(exc.value.cause, DimensionMismatchError)
    assert exc.value.__cause__ is exc.value.cause


def test_runner_can_be_reused_across_batches():
    runner = BatchRunner(workers=3, chunk_size=5)
    before = threading.active_count()
    for _ in range(20):
        assert len(runner.map(range(50), lambda x: x)) == 50
    assert threading.active_count() <= before + 1


def test_collector_is_thread_safe():
    collector = Collector()

    def worker():
        for i in range(1000):
            collector.add(i)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(collector.snapshot()) == 8000


def test_invalid_worker_count():
    with pytest.raises(ValueError):
        BatchRunner(workers=0)
    with pytest.raises(ValueError):
        BatchRunner(workers=2, chunk_size=0)
