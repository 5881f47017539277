"""rag_search.common.schemas

Core data schemas shared across the retrieval and generation layers.

These lightweight dataclasses describe the canonical shapes passed between
corpus loading, indexing, retrieval and prompt assembly.

Classes
-------
Document
    A normalised corpus record, the unit that is embedded and returned as context.
RankedMatch
    A transient pairing of a similarity score with a stored document.

Functions
---------
normalize_records
    Convert raw ``{id, title, content}`` records into :class:`Document` objects.

Notes
-----
``metadata`` is untyped (``Mapping[str, Any]``) and read-only. Downstream
code should not assume any key is present.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, List, Mapping


@dataclass(frozen=True)
class Document:
    """Container for a single corpus document.

    Attributes
    ----------
    id : Any
        Opaque identifier, unique within a corpus snapshot.
    title : str
        Display label. Not guaranteed unique across documents.
    text : str
        The embedded text, laid out as ``"Title: <title>\\nContent: <content>"``.
        The same string is later shown to the LLM as context.
    metadata : Mapping[str, Any]
        Read-only metadata (``id`` and ``title`` for records produced by
        :func:`normalize_records`). The given mapping is copied. Defaults to
        an empty mapping. Excluded from hashing.
    """
    id: Any
    title: str
    text: str
    metadata: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))


@dataclass(frozen=True)
class RankedMatch:
    """A stored document together with its similarity to a query vector.

    Attributes
    ----------
    similarity : float
        Cosine similarity between the query vector and the stored vector.
    document : Document
        The matched document. The vector store keeps ownership.
    """
    similarity: float
    document: Document


def format_document_text(title: Any, content: Any) -> str:
    """Return the two-line text layout that is embedded for a record."""
    return f"Title: {title}\nContent: {content}"


def normalize_records(raw_records: Iterable[Mapping[str, Any]]) -> List[Document]:
    """Normalise raw corpus records into documents.

    Parameters
    ----------
    raw_records : Iterable[Mapping[str, Any]]
        Records with ``id``, ``title`` and ``content`` keys. Missing keys are
        not validated; they render as ``None`` in the document text.

    Returns
    -------
    list[Document]
        One document per record, in input order. An empty input yields an
        empty list.
    """
    documents: List[Document] = []

    for record in raw_records:
        record_id = record.get("id")
        title = record.get("title")
        documents.append(
            Document(
                id=record_id,
                title=title,
                text=format_document_text(title, record.get("content")),
                metadata={"id": record_id, "title": title},
            )
        )

    return documents
