"""rag_search.retrieval.types

Shared type definitions for the retrieval layer.

This module defines lightweight protocols used to decouple the indexing and
query pipelines from concrete embedder and retriever classes.

Classes
-------
Embedder
    Protocol defining the minimal embedder interface.
Retriever
    Protocol defining the minimal retriever interface.
"""

from typing import List, Protocol, Sequence

from rag_search.common import Document


class Embedder(Protocol):
    """Protocol defining the embedder interface.

    An embedder maps a text string to a fixed-length vector. Output must be
    deterministic for a given text and model, and the same embedder must be
    used to build an index and to query it.

    Methods
    -------
    embed
        Embed a single text.
    """
    def embed(self, text: str) -> Sequence[float]:
        """Embed a single text.

        Parameters
        ----------
        text : str
            Text to embed.

        Returns
        -------
        Sequence[float]
            Embedding vector.
        """
        ...


class Retriever(Protocol):
    """Protocol defining the retriever interface.

    A retriever takes a natural-language query string and returns a ranked
    list of documents.
    """
    def retrieve(self, query: str) -> List[Document]:
        """Retrieve documents for a query.

        Parameters
        ----------
        query : str
            Natural-language query string.

        Returns
        -------
        list[Document]
            Documents ordered by decreasing relevance.
        """
        ...
