import pytest

from rag_search.common import CompletionError, EmbeddingError
from rag_search.generation.prompt_builder import build_context, default_prompt_builder
from rag_search.pipelines.rag_pipeline import RAGPipeline
from rag_search.retrieval import InMemoryVectorStore, VectorStoreRetriever, build_index


class RecordingLLM:
    def __init__(self, reply="Cats are mammals.", error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def generate(self, prompt, **kwargs):
        self.calls.append((prompt, kwargs))
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def retriever(animal_space_documents, keyword_embedder):
    store = build_index(animal_space_documents, keyword_embedder)
    return VectorStoreRetriever(store=store, embedder=keyword_embedder, top_k=1)


def make_pipeline(retriever, llm, **kwargs):
    return RAGPipeline(
        retriever=retriever,
        prompt_builder=default_prompt_builder(),
        llm=llm,
        **kwargs,
    )


def test_run_returns_answer_prompt_and_sources(retriever):
    llm = RecordingLLM()

    result = make_pipeline(retriever, llm).run("tell me about a kitten")

    assert result["response"] == "Cats are mammals."
    assert [d.title for d in result["source_nodes"]] == ["A"]
    assert build_context(result["source_nodes"]) in result["prompt"]
    assert "Query: tell me about a kitten" in result["prompt"]


def test_completion_is_called_once_with_temperature_zero(retriever):
    llm = RecordingLLM()

    make_pipeline(retriever, llm)("rocket launch")

    assert len(llm.calls) == 1
    prompt, kwargs = llm.calls[0]
    assert kwargs == {"temperature": 0}
    assert "rockets reach orbit" in prompt


def test_per_call_generation_overrides(retriever):
    llm = RecordingLLM()

    make_pipeline(retriever, llm).run("cat", llm_generate={"max_tokens": 5})

    assert llm.calls[0][1] == {"temperature": 0, "max_tokens": 5}


def test_llm_failure_becomes_completion_error(retriever):
    llm = RecordingLLM(error=ConnectionError("connection refused"))

    with pytest.raises(CompletionError, match="connection refused"):
        make_pipeline(retriever, llm).run("cat")


def test_completion_error_passes_through_unchanged(retriever):
    original = CompletionError("quota exceeded")
    llm = RecordingLLM(error=original)

    with pytest.raises(CompletionError) as exc_info:
        make_pipeline(retriever, llm).run("cat")

    assert exc_info.value is original


def test_embedding_failure_skips_completion(animal_space_documents, make_failing_embedder):
    embedder = make_failing_embedder({"cat": [1.0, 0.0], "rocket": [0.0, 1.0]})
    store = build_index(animal_space_documents, embedder)
    llm = RecordingLLM()
    pipeline = make_pipeline(VectorStoreRetriever(store=store, embedder=embedder), llm)

    with pytest.raises(EmbeddingError):
        pipeline.run("boom")

    assert llm.calls == []


def test_empty_store_still_prompts(keyword_embedder):
    llm = RecordingLLM(reply="I don't know.")
    retriever = VectorStoreRetriever(store=InMemoryVectorStore(), embedder=keyword_embedder)

    result = make_pipeline(retriever, llm).run("anything")

    assert result["source_nodes"] == []
    assert result["response"] == "I don't know."
    assert "Query: anything" in result["prompt"]
