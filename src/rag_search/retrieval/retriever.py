"""rag_search.retrieval.retriever

Query-time retrieval over an in-memory vector store.

The query text is embedded with the same embedder that built the store and
the resulting vector is ranked against every stored vector.

Classes
-------
VectorStoreRetriever
    Retriever binding a store, an embedder and retrieval settings.

Functions
---------
search_documents
    Embed a query and return the top-k documents from a store.
"""

from typing import Optional

from rag_search.common import Document, EmbeddingError
from rag_search.retrieval.types import Embedder
from rag_search.retrieval.vector_store import InMemoryVectorStore

DEFAULT_TOP_K = 3


def search_documents(
        text: str,
        store: InMemoryVectorStore,
        embedder: Embedder,
        k: int = DEFAULT_TOP_K,
        *,
        min_similarity: Optional[float] = None,
    ) -> list[Document]:
    """Embed ``text`` and return the ``k`` most similar documents in ``store``.

    Parameters
    ----------
    text : str
        Natural-language query.
    store : InMemoryVectorStore
        Store built with ``embedder``.
    embedder : Embedder
        The embedder used to build ``store``. Using a different model here
        silently produces meaningless rankings.
    k : int, optional
        Number of documents to return. Defaults to ``3``.
    min_similarity : float or None, optional
        Optional relevance cut-off. Defaults to ``None``.

    Returns
    -------
    list[Document]
        Documents ordered by non-increasing similarity.

    Raises
    ------
    EmbeddingError
        If the embedder fails.
    """
    try:
        query_vector = embedder.embed(text)
    except EmbeddingError:
        raise
    except Exception as e:
        raise EmbeddingError(f"Embedder {type(embedder).__name__} failed: {e}") from e

    return store.search(query_vector, k, min_similarity=min_similarity)


class VectorStoreRetriever:
    """Retriever over an :class:`~rag_search.retrieval.vector_store.InMemoryVectorStore`.

    Parameters
    ----------
    store : InMemoryVectorStore
        Populated vector store.
    embedder : Embedder
        The embedder that built ``store``.
    top_k : int, optional
        Number of documents to return per query. Defaults to ``3``.
    min_similarity : float or None, optional
        Optional relevance cut-off. Defaults to ``None`` (always return the
        ``top_k`` best).
    """

    def __init__(
            self,
            *,
            store: InMemoryVectorStore,
            embedder: Embedder,
            top_k: Optional[int] = DEFAULT_TOP_K,
            min_similarity: Optional[float] = None,
        ):
        self.store = store
        self.embedder = embedder
        self.top_k = DEFAULT_TOP_K if top_k is None else int(top_k)
        self.min_similarity = None if min_similarity is None else float(min_similarity)

    def retrieve(
            self,
            query: str,
        ) -> list[Document]:
        """Retrieve documents for a query.

        Parameters
        ----------
        query : str
            Natural-language query string.

        Returns
        -------
        list[Document]
            Up to ``top_k`` documents, most similar first.
        """
        return search_documents(
            query,
            self.store,
            self.embedder,
            self.top_k,
            min_similarity=self.min_similarity,
        )


__all__ = [
    "DEFAULT_TOP_K",
    "VectorStoreRetriever",
    "search_documents",
]
