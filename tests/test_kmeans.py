import random

from lexcluster.config import ClusterConfig, KMeansConfig
from lexcluster.embedding import KeyedVectorsEmbedding
from lexcluster.parallel import BatchRunner
from lexcluster.strategies.base import StrategyContext
from lexcluster.strategies.kmeans import KMeansClusterer, KMeansStrategy, nearest_centroid


def test_nearest_centroid_first_index_wins_ties():
    centroids = [[1.0, 0.0], [-1.0, 0.0], [0.0, 5.0]]
    assert nearest_centroid([0.0, 0.0], centroids) == 0
    assert nearest_centroid([0.0, 4.0], centroids) == 2


def test_assign_partitions_vocabulary(grid_store, runner):
    clusterer = KMeansClusterer(n_clusters=4, seed=3)
    words = sorted(grid_store.vocabulary())
    centroids = clusterer.initial_centroids(grid_store, words)
    clusters = clusterer.assign(grid_store, words, centroids, runner)
    assigned = [w for members in clusters.values() for w in members]
    assert sorted(assigned) == words
    assert set(clusters) == {0, 1, 2, 3}


def test_empty_cluster_keeps_centroid(small_store):
    clusterer = KMeansClusterer(n_clusters=2)
    centroids = [[0.5, 0.0], [100.0, 100.0]]
    changed = clusterer.update(small_store, centroids, {0: ["cat", "dog"], 1: []})
    assert changed is False
    assert centroids == [[0.5, 0.0], [100.0, 100.0]]


def test_fit_separated_blobs_converges(grid_store, runner):
    state = KMeansClusterer(n_clusters=3, max_iterations=100, seed=11).fit(grid_store, runner)
    assert state.converged
    assert state.iterations <= 100
    assert state.cluster_of("a0") is not None
    assert sum(len(m) for m in state.clusters.values()) == len(grid_store)


def test_fit_stops_at_iteration_cap(runner):
    rng = random.Random(0)
    store = KeyedVectorsEmbedding.from_mapping(
        {f"w{i}": [rng.random(), rng.random(), rng.random()] for i in range(200)}
    )
    state = KMeansClusterer(n_clusters=10, max_iterations=2, seed=1).fit(store, runner)
    assert state.iterations <= 2


def test_same_seed_gives_same_result(grid_store):
    cfg = ClusterConfig(kmeans=KMeansConfig(n_clusters=3, seed=42))
    outcomes = []
    for workers in (1, 4):
        ctx = StrategyContext(
            query="b0",
            query_vector=grid_store.vector_of("b0"),
            store=grid_store,
            runner=BatchRunner(workers=workers, chunk_size=1),
        )
        outcomes.append(KMeansStrategy(cfg).run(ctx).matches)
    assert outcomes[0] == outcomes[1]


def test_single_word_vocabulary_gives_empty_result(runner):
    store = KeyedVectorsEmbedding.from_mapping({"only": [1.0, 2.0]})
    ctx = StrategyContext(query="only", query_vector=[1.0, 2.0], store=store, runner=runner)
    outcome = KMeansStrategy().run(ctx)
    assert outcome.matches == []
    assert outcome.details["converged"]


def test_matches_come_from_query_cluster(grid_store, runner):
    cfg = ClusterConfig(kmeans=KMeansConfig(n_clusters=1, seed=5))
    ctx = StrategyContext(query="a0", query_vector=grid_store.vector_of("a0"), store=grid_store, runner=runner)
    outcome = KMeansStrategy(cfg).run(ctx)
    # a single cluster holds every word, so this degenerates to nearest neighbours
    assert [m.word for m in outcome.matches] == ["a1", "a2", "a3", "b0", "c0"]
    assert outcome.details["cluster_size"] == 12


def test_strategy_seed_comes_from_config(grid_store):
    words = sorted(grid_store.vocabulary())
    strategy = KMeansStrategy(ClusterConfig(kmeans=KMeansConfig(n_clusters=4, seed=9)))
    expected = KMeansClusterer(n_clusters=4, seed=9).initial_centroids(grid_store, words)
    assert strategy.clusterer.initial_centroids(grid_store, words) == expected
