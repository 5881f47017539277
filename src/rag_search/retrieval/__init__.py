"""
Retrieval layer of the RAG pipeline.

This package covers everything needed to turn a raw corpus into searchable
vectors and to fetch the most relevant documents for a query. It includes a
corpus loader, embedding model wrappers, cosine similarity, the in-memory
vector store, the indexing pipeline and the retriever.

Submodules
----------
document_loader
    Loads corpus records from JSON.
embedder
    Embedding model wrappers and factory.
similarity
    Cosine similarity between embedding vectors.
vector_store
    In-memory parallel-array vector store with exhaustive search.
indexing
    Builds a populated vector store from documents and an embedder.
retriever
    Query-time retrieval over a vector store.
types
    Embedder and retriever protocols.
"""

from .similarity import cosine_similarity
from .vector_store import BaseVectorStore, InMemoryVectorStore
from .indexing import abuild_index, build_index
from .retriever import VectorStoreRetriever, search_documents
from .document_loader import load_corpus, load_documents

__all__ = [
    "cosine_similarity",
    "BaseVectorStore",
    "InMemoryVectorStore",
    "abuild_index",
    "build_index",
    "VectorStoreRetriever",
    "search_documents",
    "load_corpus",
    "load_documents",
]
