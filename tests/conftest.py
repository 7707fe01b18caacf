import pytest

from lexcluster.embedding import KeyedVectorsEmbedding
from lexcluster.parallel import BatchRunner


@pytest.fixture
def small_store():
    return KeyedVectorsEmbedding.from_mapping(
        {
            "cat": [0.0, 0.0],
            "dog": [1.0, 0.0],
            "fish": [5.0, 5.0],
        }
    )


@pytest.fixture
def grid_store():
    """Three well separated blobs of four words each."""
    vectors = {}
    centres = {"a": (0.0, 0.0), "b": (10.0, 0.0), "c": (0.0, 10.0)}
    offsets = [(0.0, 0.0), (0.1, 0.0), (0.0, 0.2), (0.3, 0.3)]
    for prefix, (cx, cy) in centres.items():
        for i, (dx, dy) in enumerate(offsets):
            vectors[f"{prefix}{i}"] = [cx + dx, cy + dy]
    return KeyedVectorsEmbedding.from_mapping(vectors)


@pytest.fixture
def runner():
    return BatchRunner(workers=4, chunk_size=2)
