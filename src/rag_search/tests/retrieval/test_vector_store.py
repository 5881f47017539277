import logging
import threading

import pytest

from rag_search.common import Document, InvariantError
from rag_search.retrieval.similarity import cosine_similarity
from rag_search.retrieval.vector_store import InMemoryVectorStore


def _doc(i: int) -> Document:
    return Document(id=i, title=f"T{i}", text=f"Title: T{i}\nContent: body {i}", metadata={"id": i, "title": f"T{i}"})


@pytest.fixture
def populated_store():
    vectors = [
        [1.0, 0.0],
        [0.0, 1.0],
        [0.7, 0.7],
        [-1.0, 0.0],
        [0.9, 0.1],
    ]
    store = InMemoryVectorStore()
    store.load(vectors, [_doc(i) for i in range(len(vectors))])
    return store, vectors


@pytest.mark.parametrize("k", [1, 2, 3, 5, 6, 100])
def test_search_returns_min_of_k_and_corpus_size(populated_store, k):
    store, vectors = populated_store

    results = store.search([1.0, 0.2], k)

    assert len(results) == min(k, len(vectors))


@pytest.mark.parametrize("k", [0, -1, -50])
def test_non_positive_k_returns_empty(populated_store, k):
    store, _ = populated_store

    assert store.search([1.0, 0.0], k) == []


def test_empty_store_returns_empty_for_any_query():
    store = InMemoryVectorStore()

    assert store.search([1.0, 0.0], 3) == []
    assert store.search([0.0, 0.0, 1.0], 10) == []
    assert len(store) == 0
    assert store.dimension is None


def test_results_are_sorted_by_non_increasing_similarity(populated_store):
    store, vectors = populated_store
    query = [0.8, 0.3]

    results = store.search(query, len(vectors))
    scores = [cosine_similarity(query, vectors[doc.id]) for doc in results]

    assert scores == sorted(scores, reverse=True)
    assert [doc.id for doc in results] == [4, 0, 2, 1, 3]


def test_rank_exposes_scores(populated_store):
    store, _ = populated_store

    matches = store.rank([1.0, 0.0], 2)

    assert [m.document.id for m in matches] == [0, 4]
    assert matches[0].similarity == pytest.approx(1.0)
    assert matches[0].similarity >= matches[1].similarity


def test_search_is_deterministic(populated_store):
    store, _ = populated_store
    query = [0.3, 0.5]

    first = store.search(query, 4)
    second = store.search(query, 4)

    assert [d.id for d in first] == [d.id for d in second]


def test_ties_keep_insertion_order():
    docs = [_doc(i) for i in range(4)]
    store = InMemoryVectorStore()
    store.load([[0.0, 1.0], [1.0, 0.0], [2.0, 0.0], [0.5, 0.0]], docs)

    results = store.search([1.0, 0.0], 4)

    # docs 1, 2 and 3 all score exactly 1.0
    assert [d.id for d in results] == [1, 2, 3, 0]


def test_load_rejects_unequal_lengths():
    store = InMemoryVectorStore()

    with pytest.raises(InvariantError):
        store.load([[1.0], [2.0], [3.0]], [_doc(0), _doc(1)])


def test_failed_load_keeps_previous_contents(populated_store):
    store, vectors = populated_store

    with pytest.raises(InvariantError):
        store.load([[1.0, 0.0]], [])

    assert len(store) == len(vectors)
    assert store.search([1.0, 0.0], 1)[0].id == 0


def test_load_replaces_contents_wholesale(populated_store):
    store, _ = populated_store

    store.load([[0.0, 1.0]], [_doc(42)])

    assert len(store) == 1
    assert [d.id for d in store.search([1.0, 0.0], 10)] == [42]
    assert store.dimension == 2


def test_mismatched_stored_vector_is_skipped(caplog):
    store = InMemoryVectorStore()
    store.load([[1.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0]], [_doc(0), _doc(1), _doc(2)])

    with caplog.at_level(logging.WARNING, logger="rag_search.retrieval.vector_store"):
        results = store.search([1.0, 0.0], 3)

    assert [d.id for d in results] == [0, 2]
    assert "Skipping stored vector 1" in caplog.text


def test_min_similarity_drops_weak_matches(populated_store):
    store, _ = populated_store

    results = store.search([1.0, 0.0], 5, min_similarity=0.5)

    assert [d.id for d in results] == [0, 4, 2]


def test_zero_query_vector_scores_everything_zero(populated_store):
    store, vectors = populated_store

    matches = store.rank([0.0, 0.0], 10)

    assert [m.document.id for m in matches] == list(range(len(vectors)))
    assert all(m.similarity == 0.0 for m in matches)


def test_concurrent_searches_agree(populated_store):
    store, _ = populated_store
    query = [0.6, 0.4]
    expected = [d.id for d in store.search(query, 5)]
    results = []

    def worker():
        for _ in range(50):
            results.append([d.id for d in store.search(query, 5)])

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert all(r == expected for r in results)
