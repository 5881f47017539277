from pathlib import Path

import pytest

from rag_search.config import GlobalConfig


def test_load_expands_environment_variables(tmp_path, monkeypatch):
    monkeypatch.setenv("RAG_TEST_KEY", "sk-123")
    path = tmp_path / "config.yaml"
    path.write_text(
        "generator_llm:\n"
        "  type: OpenAIChatLike\n"
        "  model_name: m\n"
        "  api_key: ${RAG_TEST_KEY}\n"
        "  default_headers:\n"
        "    X-Title: ${RAG_TEST_KEY}-app\n",
        encoding="utf-8",
    )

    cfg = GlobalConfig.load(path)

    assert cfg.generator_llm["api_key"] == "sk-123"
    assert cfg.generator_llm["default_headers"]["X-Title"] == "sk-123-app"


def test_empty_file_loads_as_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("", encoding="utf-8")

    cfg = GlobalConfig.load(path)

    assert cfg.embedder == {}
    assert cfg.retriever == {}
    assert cfg.prompt_name == "grounded_answer"
    assert cfg.corpus_path == (tmp_path / "data.json").resolve()


def test_corpus_path_is_relative_to_config_file(tmp_path):
    cfg = GlobalConfig({"corpus": {"path": "../data/data.json"}}, config_path=tmp_path / "config" / "config.yaml")

    assert cfg.corpus_path == (tmp_path / "data" / "data.json").resolve()


def test_absolute_corpus_path_is_kept(tmp_path):
    target = tmp_path / "elsewhere.json"
    cfg = GlobalConfig({"corpus": {"path": str(target)}}, config_path=Path("/ignored/config.yaml"))

    assert cfg.corpus_path == target.resolve()


def test_missing_generator_llm():
    with pytest.raises(KeyError, match="generator_llm"):
        GlobalConfig({}).generator_llm


def test_section_must_be_mapping():
    with pytest.raises(TypeError, match="retriever"):
        GlobalConfig({"retriever": [1, 2]}).retriever


def test_root_must_be_mapping():
    with pytest.raises(TypeError):
        GlobalConfig(["not", "a", "mapping"])


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        GlobalConfig.load(tmp_path / "nope.yaml")


def test_override_refreshes_cached_sections(tmp_path):
    cfg = GlobalConfig(
        {"retriever": {"top_k": 3}, "corpus": {"path": "data.json"}},
        config_path=tmp_path / "config.yaml",
    )
    assert cfg.retriever["top_k"] == 3
    assert cfg.corpus_path == (tmp_path / "data.json").resolve()

    cfg.set_override("retriever", "top_k", 7)
    cfg.set_override("corpus", "path", "other.json")

    assert cfg.retriever["top_k"] == 7
    assert cfg.corpus_path == (tmp_path / "other.json").resolve()


def test_override_creates_missing_section():
    cfg = GlobalConfig({})

    cfg.set_override("indexing", "max_concurrency", 2)

    assert cfg.indexing == {"max_concurrency": 2}


def test_override_rejects_non_mapping_section():
    cfg = GlobalConfig({"retriever": 5})

    with pytest.raises(TypeError, match="retriever"):
        cfg.set_override("retriever", "top_k", 1)
