"""Knowledge documents and the cached snapshot built from them."""

from dataclasses import dataclass, field
from typing import Optional

NO_PAGES_MARKER = "No knowledge pages configured."
NO_DOCUMENTS_MARKER = "No knowledge pages could be loaded."

PAGE_SEPARATOR = "\n\n"


@dataclass(frozen=True)
class DocumentRecord:
    """One fetched knowledge page, already flattened to plain text."""

    identifier: str
    content: str
    fetched_at: float
    title: Optional[str] = None

    @property
    def display_title(self) -> str:
        return self.title or "Untitled"


def combine_documents(documents, empty_marker: str = NO_DOCUMENTS_MARKER) -> str:
    """Join documents into one context string.

    Pure function of the document sequence: same documents in the same
    order always give the same string.
    """
    if not documents:
        return empty_marker
    return PAGE_SEPARATOR.join(
        f"--- Page: {doc.display_title} ---\n{doc.content}" for doc in documents
    )


@dataclass(frozen=True)
class KnowledgeSnapshot:
    """Cache value: documents in configured order plus their combined context."""

    combined_context: str
    documents: tuple[DocumentRecord, ...] = field(default_factory=tuple)
    fetched_at: float = 0.0

    @classmethod
    def build(
        cls, documents, fetched_at: float, empty_marker: str = NO_DOCUMENTS_MARKER
    ) -> "KnowledgeSnapshot":
        documents = tuple(documents)
        return cls(
            combined_context=combine_documents(documents, empty_marker),
            documents=documents,
            fetched_at=fetched_at,
        )

    @property
    def titles(self) -> list[str]:
        return [doc.title or doc.identifier for doc in self.documents]
