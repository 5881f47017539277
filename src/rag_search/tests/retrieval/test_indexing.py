import asyncio
import threading

import pytest

from rag_search.common import EmbeddingError, normalize_records
from rag_search.retrieval.embedder import BaseEmbedder
from rag_search.retrieval.indexing import abuild_index, build_index


def _records(n: int):
    return [{"id": i, "title": f"doc{i}", "content": f"topic{i}"} for i in range(n)]


def _one_hot_mapping(n: int):
    # Check higher indices first so "topic1" does not shadow "topic10".
    return {
        f"topic{i}": [1.0 if j == i else 0.0 for j in range(n)]
        for i in reversed(range(n))
    }


def test_build_index_pairs_each_vector_with_its_document(make_keyword_embedder):
    documents = normalize_records(_records(4))
    embedder = make_keyword_embedder(_one_hot_mapping(4))

    store = build_index(documents, embedder)

    assert len(store) == 4
    assert store.dimension == 4
    for i, doc in enumerate(documents):
        query = [1.0 if j == i else 0.0 for j in range(4)]
        assert store.search(query, 1) == [doc]


def test_build_index_embeds_document_text(make_keyword_embedder, animal_space_documents):
    embedder = make_keyword_embedder({"cat": [1.0, 0.0]})

    build_index(animal_space_documents, embedder, max_concurrency=1)

    assert embedder.calls == [doc.text for doc in animal_space_documents]


def test_build_index_on_empty_corpus_returns_empty_store(keyword_embedder):
    store = build_index([], keyword_embedder)

    assert len(store) == 0
    assert store.search([1.0, 0.0], 3) == []
    assert keyword_embedder.calls == []


def test_concurrent_embedding_restores_document_order(make_slow_embedder):
    n = 6
    documents = normalize_records(_records(n))
    # Earlier documents take longer, so completion order is reversed.
    delays = [0.06 - 0.01 * i for i in range(n)]
    embedder = make_slow_embedder(_one_hot_mapping(n), delays=delays)

    store = build_index(documents, embedder, max_concurrency=n)

    assert embedder.max_in_flight > 1
    for i, doc in enumerate(documents):
        query = [1.0 if j == i else 0.0 for j in range(n)]
        assert store.search(query, 1) == [doc]


def test_max_concurrency_bounds_in_flight_calls(make_slow_embedder):
    documents = normalize_records(_records(8))
    embedder = make_slow_embedder(_one_hot_mapping(8), delays=[0.005])

    build_index(documents, embedder, max_concurrency=3)

    assert embedder.max_in_flight <= 3


def test_max_concurrency_of_one_is_sequential(make_slow_embedder):
    documents = normalize_records(_records(4))
    embedder = make_slow_embedder(_one_hot_mapping(4), delays=[0.001])

    build_index(documents, embedder, max_concurrency=0)

    assert embedder.max_in_flight == 1


def test_embedding_failure_is_fatal(make_failing_embedder):
    documents = normalize_records(
        [
            {"id": 1, "title": "ok", "content": "fine"},
            {"id": 2, "title": "bad", "content": "boom"},
        ]
    )
    embedder = make_failing_embedder({"fine": [1.0, 0.0]})

    with pytest.raises(EmbeddingError) as exc_info:
        build_index(documents, embedder)

    assert isinstance(exc_info.value.__cause__, RuntimeError)


def test_embedding_error_from_embedder_is_not_rewrapped(make_keyword_embedder):
    class Broken:
        def embed(self, text):
            raise EmbeddingError("model not loaded")

    with pytest.raises(EmbeddingError, match="model not loaded"):
        build_index(normalize_records(_records(2)), Broken())


def test_build_index_refuses_to_run_inside_event_loop(keyword_embedder, animal_space_documents):
    async def _inside_loop():
        return build_index(animal_space_documents, keyword_embedder)

    with pytest.raises(RuntimeError, match="abuild_index"):
        asyncio.run(_inside_loop())


def test_abuild_index_can_be_awaited(keyword_embedder, animal_space_documents):
    store = asyncio.run(abuild_index(animal_space_documents, keyword_embedder))

    assert [d.id for d in store.search([1.0, 0.0], 1)] == [1]


class BlockingBackend:
    """Sync backend that only returns once ``parties`` calls are running at the same time."""

    def __init__(self, parties: int):
        self.barrier = threading.Barrier(parties, timeout=5)

    def get_text_embedding(self, text):
        self.barrier.wait()
        return [1.0, float(len(text))]


class BlockingEmbedder(BaseEmbedder):
    def __init__(self, parties: int):
        self.backend = BlockingBackend(parties)

    def get_embedder(self):
        return self.backend

    @classmethod
    def from_config_dict(cls, config, callback_manager=None):
        return cls(int(config["parties"]))


def test_sync_backed_embedders_overlap_during_indexing():
    documents = normalize_records(_records(2))

    store = build_index(documents, BlockingEmbedder(parties=2), max_concurrency=2)

    assert [d.id for d in store.documents] == [0, 1]
