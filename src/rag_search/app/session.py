"""rag_search.app.session

Interactive question/answer loop.

The loop reads one query per line, runs it through the RAG pipeline, prints
the answer followed by the titles of the documents used as sources, and
keeps going until the user types ``exit`` (any case) or input ends. The exit
check ignores surrounding whitespace, so ``"  exit "`` also ends the loop.
Query-time failures are reported and the loop moves on to the next query.

Functions
---------
unique_source_titles
    De-duplicated titles of retrieved documents, in rank order.
run_session
    Drive the read → answer → report loop.
"""

import logging
from typing import Any, Callable, Iterable, List

from rag_search.common import Document, RAGSearchError

logger = logging.getLogger("rag_search.app.session")

PROMPT = "Enter your query (or 'exit' to quit): "
EXIT_COMMAND = "exit"
SEPARATOR = "\n-------------------\n"


def unique_source_titles(documents: Iterable[Document]) -> List[Any]:
    """Return document titles in order, dropping repeats."""
    titles: List[Any] = []
    for doc in documents:
        title = doc.metadata.get("title", doc.title)
        # Titles are not validated and may be unhashable.
        if title in titles:
            continue
        titles.append(title)
    return titles


def _report(result: dict[str, Any], write: Callable[[str], Any]) -> None:
    write(f"\nAnswer: {result.get('response', '')}")
    write("\nSources:")
    for title in unique_source_titles(result.get("source_nodes", [])):
        write(f"- {title}")


def run_session(
        pipeline: Any,
        *,
        read_line: Callable[[str], str] = input,
        write: Callable[[str], Any] = print,
    ) -> int:
    """Run the interactive loop until ``exit`` or end of input.

    Parameters
    ----------
    pipeline : RAGPipeline
        Pipeline whose ``run(query)`` returns ``response`` and ``source_nodes``.
    read_line : Callable[[str], str], optional
        Reads one line of input after showing the given prompt. Defaults to
        :func:`input`.
    write : Callable[[str], Any], optional
        Writes one line of output. Defaults to :func:`print`.

    Returns
    -------
    int
        Number of queries that were answered successfully.
    """
    answered = 0

    while True:
        try:
            query = read_line(PROMPT)
        except EOFError:
            write("")
            break

        if query.strip().lower() == EXIT_COMMAND:
            break

        try:
            result = pipeline.run(query)
            _report(result, write)
        except RAGSearchError as e:
            logger.warning("Query failed: %s", e)
            write(f"Error while processing the query: {e}")
        except Exception as e:
            logger.exception("Unexpected error while processing query %r", query)
            write(f"Error while processing the query: {type(e).__name__}: {e}")
        else:
            answered += 1

        write(SEPARATOR)

    return answered


__all__ = ["run_session", "unique_source_titles"]
