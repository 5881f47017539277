"""
Common building blocks shared across the RAG stack.

This package provides small, widely-used primitives (document schemas,
type aliases and the error hierarchy) intended to be imported by multiple
layers of the system.

Classes
-------
Document
    Canonical document container.
RankedMatch
    Similarity score paired with a stored document.

Attributes
----------
Vector : TypeAlias
    Type alias for embedding vectors.

See Also
--------
rag_search.common.schemas
    Defines :class:`~rag_search.common.schemas.Document` and
    :class:`~rag_search.common.schemas.RankedMatch`.
rag_search.common.errors
    Defines the :class:`~rag_search.common.errors.RAGSearchError` family.
"""
from __future__ import annotations
from typing import Sequence, TypeAlias

from .errors import (
    CompletionError,
    CorpusLoadError,
    DimensionMismatchError,
    EmbeddingError,
    InvariantError,
    RAGSearchError,
)
from .schemas import (
    Document,
    RankedMatch,
    format_document_text,
    normalize_records,
)

Vector: TypeAlias = Sequence[float]

__all__ = [
    "Document",
    "RankedMatch",
    "format_document_text",
    "normalize_records",
    "Vector",
    "RAGSearchError",
    "CorpusLoadError",
    "InvariantError",
    "DimensionMismatchError",
    "EmbeddingError",
    "CompletionError",
]
