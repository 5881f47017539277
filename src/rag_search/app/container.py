"""rag_search.app.container

Composition root for rag_search.

This module is the single place where concrete implementations are wired
together from configuration (LLM client, embedder, corpus, vector store,
retriever and the end-to-end RAG pipeline). Components are constructed lazily
and cached on first access to avoid repeated expensive initialisation.

Notes
-----
- Keep this module importable with minimal side effects:
  - do not perform network calls at import time
  - do not read files at import time
  - construct expensive objects lazily (cached on first access)

Examples
--------
>>> from rag_search.config import GlobalConfig
>>> from rag_search.app.container import build_container
>>> cfg = GlobalConfig.load("config/config.yaml")
>>> c = build_container(cfg)
>>> answer = c.pipeline.run("my question")
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from typing import Any, Mapping


@dataclass(frozen=True)
class RAGSearchContainer:
    """Holds the configured, cached runtime components for the application.

    Parameters
    ----------
    config : Any
        Loaded global configuration object (typically :class:`rag_search.config.GlobalConfig`).
    """

    config: Any

    @cached_property
    def generator_llm(self) -> Any:
        """Return the LLM used to generate final answers."""
        from rag_search.generation.llm_interface import create_llm

        section = _as_mapping(self.config.generator_llm)
        return create_llm(dict(section))

    @cached_property
    def embedder(self) -> Any:
        """Return the embedder shared by indexing and querying."""
        from rag_search.retrieval.embedder import create_embedder

        section = _as_mapping(self.config.embedder)
        return create_embedder(section)

    @cached_property
    def prompt_builder(self) -> Any:
        """Return the prompt builder.

        Bundled templates are always registered; sources listed under
        ``config.prompts`` are registered on top, resolved relative to the
        config file directory.
        """
        from rag_search.generation.prompt_builder import DEFAULT_PROMPT_SOURCE, PromptBuilder

        builder = PromptBuilder()
        builder.register_from_source(DEFAULT_PROMPT_SOURCE)

        prompts = getattr(self.config, "prompts", None)
        if prompts is None:
            return builder

        if isinstance(prompts, str):
            sources = [prompts]
        elif isinstance(prompts, (list, tuple)):
            sources = [str(p) for p in prompts]
        else:
            raise TypeError(f"config.prompts must be a str or list[str], got {type(prompts)!r}")

        base_dir = getattr(self.config, "base_dir", None)
        for src in sources:
            builder.register_from_source(src, base_dir=base_dir)

        return builder

    @cached_property
    def prompt_name(self) -> str:
        """Return the configured prompt name.

        Raises
        ------
        ValueError
            If the configured prompt name is not registered.
        """
        prompt_name = str(self.config.prompt_name)
        if not self.prompt_builder.has_prompt(prompt_name):
            available = ", ".join(self.prompt_builder.list_prompts())
            raise ValueError(
                f"Configured prompt_name {prompt_name!r} was not found in loaded prompts. "
                f"Available: [{available}]"
            )
        return prompt_name

    @cached_property
    def documents(self) -> list:
        """Return the normalised corpus documents.

        Raises
        ------
        CorpusLoadError
            If the corpus file cannot be read or parsed.
        """
        from rag_search.retrieval.document_loader import load_documents

        return load_documents(self.config.corpus_path)

    @cached_property
    def vector_store(self) -> Any:
        """Return the vector store built from :attr:`documents` with :attr:`embedder`.

        Raises
        ------
        EmbeddingError
            If any document fails to embed.
        """
        from rag_search.retrieval.indexing import DEFAULT_MAX_CONCURRENCY, build_index

        section = _as_mapping(getattr(self.config, "indexing", {}) or {})
        max_concurrency = int(section.get("max_concurrency", DEFAULT_MAX_CONCURRENCY))
        return build_index(self.documents, self.embedder, max_concurrency=max_concurrency)

    @cached_property
    def retriever(self) -> Any:
        """Return the retriever over :attr:`vector_store`."""
        from rag_search.retrieval.retriever import VectorStoreRetriever

        section = _as_mapping(getattr(self.config, "retriever", {}) or {})
        return VectorStoreRetriever(
            store=self.vector_store,
            embedder=self.embedder,
            top_k=section.get("top_k"),
            min_similarity=section.get("min_similarity"),
        )

    @cached_property
    def pipeline(self) -> Any:
        """Return the fully wired RAG pipeline."""
        from rag_search.pipelines.rag_pipeline import RAGPipeline

        return RAGPipeline(
            retriever=self.retriever,
            prompt_builder=self.prompt_builder,
            prompt_name=self.prompt_name,
            llm=self.generator_llm,
        )


def build_container(config: Any) -> RAGSearchContainer:
    """Create a :class:`~rag_search.app.container.RAGSearchContainer`.

    Parameters
    ----------
    config : Any
        Loaded global configuration object (typically :class:`rag_search.config.GlobalConfig`).

    Returns
    -------
    RAGSearchContainer
        Container instance with cached component accessors.
    """

    return RAGSearchContainer(config=config)


def _as_mapping(obj: Any) -> Mapping[str, Any]:
    """Coerce ``obj`` into a mapping (mappings pass through, objects use ``vars``).

    Raises
    ------
    TypeError
        If ``obj`` cannot be interpreted as a mapping.
    """
    if isinstance(obj, Mapping):
        return obj

    if hasattr(obj, "__dict__"):
        return dict(vars(obj))

    raise TypeError(f"Expected mapping type but got {type(obj)}")


__all__ = ["RAGSearchContainer", "build_container"]
