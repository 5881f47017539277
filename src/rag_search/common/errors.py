"""rag_search.common.errors

Exception hierarchy for the retrieval and answer-generation stack.

All errors derive from :class:`RAGSearchError` so callers at the session
boundary can catch the whole family at once.
"""


class RAGSearchError(Exception):
    """Base class for all rag_search errors."""


class CorpusLoadError(RAGSearchError):
    """The corpus file is missing, unreadable or malformed."""


class InvariantError(RAGSearchError, ValueError):
    """Vectors and documents handed to a vector store are not paired 1:1."""


class DimensionMismatchError(RAGSearchError, ValueError):
    """Two vectors compared for similarity have different lengths."""

    def __init__(self, left: int, right: int):
        super().__init__(f"Cannot compare vectors of length {left} and {right}.")
        self.left = left
        self.right = right


class EmbeddingError(RAGSearchError):
    """The embedder failed to produce a vector for some text."""


class CompletionError(RAGSearchError):
    """The completion service failed to produce an answer."""
