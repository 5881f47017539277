"""rag_search.retrieval.document_loader

Corpus loading utilities.

The corpus is a UTF-8 JSON file whose top level is an array of
``{"id", "title", "content"}`` records.

Functions
---------
load_corpus
    Read raw corpus records from a JSON file.
load_documents
    Read a corpus file and normalise it into documents.
"""
import json
import logging
from pathlib import Path
from typing import Any, Union

from rag_search.common import CorpusLoadError, Document, normalize_records

logger = logging.getLogger("rag_search.retrieval.document_loader")

DEFAULT_CHARSET = "UTF-8"


def load_corpus(path: Union[str, Path]) -> list[dict[str, Any]]:
    """Read raw corpus records from a JSON file.

    Parameters
    ----------
    path : str or Path
        Path to the JSON corpus file.

    Returns
    -------
    list[dict[str, Any]]
        The records, in file order. May be empty.

    Raises
    ------
    CorpusLoadError
        If the file cannot be read, is not valid JSON, is not a JSON array,
        or contains a non-object entry.
    """
    p = Path(path).expanduser()

    try:
        with p.open("r", encoding=DEFAULT_CHARSET) as f:
            data = json.load(f)
    except OSError as e:
        raise CorpusLoadError(f"Could not read corpus file {p}: {e}") from e
    except UnicodeDecodeError as e:
        raise CorpusLoadError(f"Corpus file {p} is not valid {DEFAULT_CHARSET}: {e}") from e
    except json.JSONDecodeError as e:
        raise CorpusLoadError(f"Corpus file {p} is not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise CorpusLoadError(
            f"Corpus file {p} must contain a JSON array of records, got {type(data).__name__}"
        )

    for i, item in enumerate(data):
        if not isinstance(item, dict):
            raise CorpusLoadError(
                f"Corpus record #{i} in {p} must be an object, got {type(item).__name__}"
            )

    logger.info("Loaded %d corpus record(s) from %s", len(data), p)
    return data


def load_documents(path: Union[str, Path]) -> list[Document]:
    """Read a corpus file and normalise its records into documents.

    Raises
    ------
    CorpusLoadError
        See :func:`load_corpus`.
    """
    return normalize_records(load_corpus(path))


__all__ = [
    "load_corpus",
    "load_documents",
]
