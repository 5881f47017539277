"""rag_search

Retrieval-augmented question answering over a small document corpus.

A corpus of ``{id, title, content}`` records is embedded into an in-memory
vector store. Each query is embedded with the same model, matched against
every stored vector by cosine similarity, and the best documents are handed
to a language model as grounding context.

Attributes
----------
__version__ : str
    Package version string. Defaults to ``"0.0.0-dev"`` when package metadata is
    unavailable.

Modules
-------
config
    Global configuration loader and cached accessors.
app
    Composition root, interactive session loop and CLI.
pipelines
    High-level pipeline orchestration (retrieval → prompting → generation).
retrieval
    Corpus loading, embedding, similarity, vector store, indexing and retrieval.
generation
    LLM and prompt-building interfaces and factories.
common
    Shared schemas and errors.

Exports
-------
GlobalConfig
    Global configuration loader and accessor.
RAGSearchContainer
    Cached runtime component container for applications.
build_container
    Factory function to construct a configured :class:`~rag_search.app.container.RAGSearchContainer`.
RAGPipeline
    End-to-end Retrieval-Augmented Generation pipeline.
Document
    Canonical document container schema.
InMemoryVectorStore
    Parallel-array vector store with exhaustive cosine search.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("rag-search")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

from .config import GlobalConfig
from .app.container import RAGSearchContainer, build_container
from .pipelines.rag_pipeline import RAGPipeline
from .common import Document
from .retrieval.vector_store import InMemoryVectorStore

__all__ = [
    "__version__",
    "GlobalConfig",
    "RAGSearchContainer",
    "build_container",
    "RAGPipeline",
    "Document",
    "InMemoryVectorStore",
]
