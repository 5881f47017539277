"""rag_search.retrieval.vector_store

In-memory vector store for the retrieval layer.

The store keeps two parallel sequences: embedding vectors and the documents
they were produced from. Position ``i`` in one always corresponds to position
``i`` in the other. Contents are replaced wholesale by :meth:`InMemoryVectorStore.load`
and are read-only otherwise, so concurrent :meth:`~InMemoryVectorStore.search`
calls are safe.

Similarity search is an exhaustive cosine scan over every stored vector.

Classes
-------
BaseVectorStore
    Abstract interface for vector store wrappers.
InMemoryVectorStore
    Parallel-array store with exhaustive cosine-similarity search.
"""
import logging
import threading
from abc import ABC, abstractmethod
from typing import Optional, Sequence

import numpy as np

from rag_search.common import (
    DimensionMismatchError,
    Document,
    InvariantError,
    RankedMatch,
    Vector,
)
from rag_search.retrieval.similarity import as_vector, cosine_similarity

logger = logging.getLogger("rag_search.retrieval.vector_store")


class BaseVectorStore(ABC):
    """Abstract interface for vector stores.

    Concrete implementations own a set of document vectors and answer
    top-k similarity queries over them.
    """

    @abstractmethod
    def load(
            self,
            vectors: Sequence[Vector],
            documents: Sequence[Document],
        ) -> None:
        """Replace the store contents with paired vectors and documents.

        Parameters
        ----------
        vectors : Sequence[Vector]
            Embedding vectors, one per document.
        documents : Sequence[Document]
            Documents, in the same order as ``vectors``.

        Raises
        ------
        InvariantError
            If ``vectors`` and ``documents`` differ in length.
        """
        pass

    @abstractmethod
    def search(
            self,
            query_vector: Vector,
            k: int,
        ) -> list[Document]:
        """Return the ``k`` documents most similar to ``query_vector``.

        Parameters
        ----------
        query_vector : Vector
            Embedding of the query.
        k : int
            Maximum number of documents to return.

        Returns
        -------
        list[Document]
            Documents ordered by non-increasing similarity.
        """
        pass


class InMemoryVectorStore(BaseVectorStore):
    """Parallel-array vector store with exhaustive cosine search.

    Contents are held as a single ``(vectors, documents)`` tuple that
    :meth:`load` swaps atomically, so readers never observe a half-loaded
    store. Loads are serialised with a lock.
    """

    def __init__(self):
        """Initialise an empty store."""
        self._entries: tuple[tuple[np.ndarray, ...], tuple[Document, ...]] = ((), ())
        self._load_lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries[1])

    @property
    def documents(self) -> tuple[Document, ...]:
        """Stored documents, in insertion order."""
        return self._entries[1]

    @property
    def dimension(self) -> Optional[int]:
        """Length of the first stored vector, or ``None`` for an empty store."""
        vectors = self._entries[0]
        if not vectors:
            return None
        return int(vectors[0].shape[0])

    def load(
            self,
            vectors: Sequence[Vector],
            documents: Sequence[Document],
        ) -> None:
        """Replace the store contents with paired vectors and documents.

        Parameters
        ----------
        vectors : Sequence[Vector]
            Embedding vectors, one per document.
        documents : Sequence[Document]
            Documents, in the same order as ``vectors``.

        Raises
        ------
        InvariantError
            If ``vectors`` and ``documents`` differ in length. The existing
            contents are left untouched.
        """
        if len(vectors) != len(documents):
            raise InvariantError(
                f"Vector store requires one vector per document; got "
                f"{len(vectors)} vectors and {len(documents)} documents."
            )

        entries = (
            tuple(as_vector(v) for v in vectors),
            tuple(documents),
        )
        with self._load_lock:
            self._entries = entries

    def rank(
            self,
            query_vector: Vector,
            k: int,
            *,
            min_similarity: Optional[float] = None,
        ) -> list[RankedMatch]:
        """Score every stored vector against ``query_vector`` and keep the top ``k``.

        Parameters
        ----------
        query_vector : Vector
            Embedding of the query.
        k : int
            Maximum number of matches to return. ``k <= 0`` returns an empty list.
        min_similarity : float or None, optional
            If given, matches scoring strictly below this value are dropped.
            Defaults to ``None`` (always return the ``k`` best).

        Returns
        -------
        list[RankedMatch]
            Matches ordered by non-increasing similarity. Equal scores keep
            their insertion order.

        Notes
        -----
        A stored vector whose length differs from ``query_vector`` is logged
        and skipped; the remaining comparisons are still ranked.
        """
        if k <= 0:
            return []

        vectors, documents = self._entries
        query = as_vector(query_vector)

        matches: list[RankedMatch] = []
        for index, (vector, document) in enumerate(zip(vectors, documents)):
            try:
                similarity = cosine_similarity(query, vector)
            except DimensionMismatchError as e:
                logger.warning("Skipping stored vector %d (document %r): %s", index, document.id, e)
                continue
            if min_similarity is not None and similarity < min_similarity:
                continue
            matches.append(RankedMatch(similarity=similarity, document=document))

        # sorted() is stable, including with reverse=True.
        matches = sorted(matches, key=lambda m: m.similarity, reverse=True)
        return matches[:k]

    def search(
            self,
            query_vector: Vector,
            k: int,
            *,
            min_similarity: Optional[float] = None,
        ) -> list[Document]:
        """Return the ``k`` documents most similar to ``query_vector``.

        Parameters
        ----------
        query_vector : Vector
            Embedding of the query.
        k : int
            Maximum number of documents to return. ``k <= 0`` returns an empty
            list; ``k`` larger than the store returns every document ranked.
        min_similarity : float or None, optional
            Optional relevance cut-off, see :meth:`rank`.

        Returns
        -------
        list[Document]
            Documents ordered by non-increasing similarity, scores discarded.
        """
        return [m.document for m in self.rank(query_vector, k, min_similarity=min_similarity)]


__all__ = [
    "BaseVectorStore",
    "InMemoryVectorStore",
]
