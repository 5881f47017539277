"""rag_search.retrieval.indexing

Indexing pipeline: documents in, populated vector store out.

Each document's ``text`` is embedded independently, so embedding calls may
run concurrently. Results are gathered in document order before being paired
with their documents, which keeps the store's vector/document pairing intact.

Functions
---------
abuild_index
    Embed documents concurrently and load them into a new vector store.
build_index
    Synchronous wrapper around :func:`abuild_index`.
"""

import asyncio
import logging
from typing import Sequence

from rag_search.common import Document, EmbeddingError
from rag_search.retrieval.types import Embedder
from rag_search.retrieval.vector_store import InMemoryVectorStore

logger = logging.getLogger("rag_search.retrieval.indexing")

DEFAULT_MAX_CONCURRENCY = 8


async def _aembed(embedder: Embedder, text: str) -> Sequence[float]:
    """Embed ``text`` natively async when supported, otherwise in the default executor."""
    try:
        aembed = getattr(embedder, "aembed", None)
        if aembed is not None:
            return await aembed(text)

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, embedder.embed, text)
    except EmbeddingError:
        raise
    except Exception as e:
        raise EmbeddingError(f"Embedder {type(embedder).__name__} failed: {e}") from e


async def abuild_index(
        documents: Sequence[Document],
        embedder: Embedder,
        *,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ) -> InMemoryVectorStore:
    """Embed every document and load the results into a new vector store.

    Parameters
    ----------
    documents : Sequence[Document]
        Documents to index. An empty sequence yields an empty store.
    embedder : Embedder
        Embedder used for every document. Queries against the returned store
        must use the same embedder.
    max_concurrency : int, optional
        Maximum number of embedding calls in flight. Values ``<= 1`` embed
        sequentially. Defaults to ``8``.

    Returns
    -------
    InMemoryVectorStore
        Store whose ``i``-th vector belongs to ``documents[i]``.

    Raises
    ------
    EmbeddingError
        If any embedding call fails. Outstanding calls are cancelled and no
        store is returned.
    """
    documents = list(documents)
    logger.info("Building vector index for %d document(s)", len(documents))

    semaphore = asyncio.Semaphore(max(1, int(max_concurrency)))

    async def _bounded(text: str) -> Sequence[float]:
        async with semaphore:
            return await _aembed(embedder, text)

    tasks = [asyncio.ensure_future(_bounded(doc.text)) for doc in documents]
    try:
        vectors = await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

    store = InMemoryVectorStore()
    store.load(vectors, documents)

    logger.info("Vector index ready: %d vector(s), dimension %s", len(store), store.dimension)
    return store


def build_index(
        documents: Sequence[Document],
        embedder: Embedder,
        *,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ) -> InMemoryVectorStore:
    """Synchronously build a vector store, see :func:`abuild_index`.

    Raises
    ------
    RuntimeError
        If called from inside a running event loop.
    EmbeddingError
        If any embedding call fails.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(
            abuild_index(documents, embedder, max_concurrency=max_concurrency)
        )
    raise RuntimeError(
        "build_index() cannot run inside an active event loop; "
        "use `await abuild_index(...)` instead."
    )


__all__ = [
    "DEFAULT_MAX_CONCURRENCY",
    "abuild_index",
    "build_index",
]
