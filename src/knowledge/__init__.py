"""Knowledge base: Notion pages cached as one combined context."""

from .cache import KnowledgeCache, KnowledgeSource
from .models import (
    NO_DOCUMENTS_MARKER,
    NO_PAGES_MARKER,
    DocumentRecord,
    KnowledgeSnapshot,
    combine_documents,
)
from .notion import KnowledgeSourceError, NotionAPIError, NotionKnowledgeSource

__all__ = [
    "KnowledgeCache",
    "KnowledgeSource",
    "KnowledgeSnapshot",
    "DocumentRecord",
    "combine_documents",
    "NO_PAGES_MARKER",
    "NO_DOCUMENTS_MARKER",
    "NotionKnowledgeSource",
    "KnowledgeSourceError",
    "NotionAPIError",
]
