"""Document, chunk and match records for the RAG pipeline."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any


@dataclass
class Document:
    """A saved web page owned by one user.

    Documents are created once on ingestion and never edited in place.
    Deleting a document deletes its chunks.

    Attributes:
        owner_id: Id of the user who saved the page.
        url: Source URL of the page.
        title: Page title, or the URL hostname when the page has none.
        content: Full scraped text (markdown).
        embedding: Optional document-level embedding of the full content.
        metadata: Scrape metadata (language, description, ...).
        created_at: Creation timestamp (UTC).
        doc_id: Store-assigned identifier, ``None`` until inserted.
    """

    owner_id: str
    url: str
    title: str
    content: str
    embedding: list[float] | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    doc_id: str | None = None

    @property
    def display_name(self) -> str:
        return self.title or "Untitled"


@dataclass
class TextChunk:
    """A slice of document text produced by the chunker, before embedding."""

    content: str
    index: int


@dataclass
class Chunk:
    """An embedded slice of a document.

    Attributes:
        document_id: Id of the owning Document.
        owner_id: Id of the owning user (same as the document's owner).
        index: 0-based position within the document, contiguous.
        content: Chunk text.
        embedding: Embedding vector of ``content``.
        metadata: Optional extra payload.
        chunk_id: Store-assigned identifier, ``None`` until inserted.
    """

    document_id: str
    owner_id: str
    index: int
    content: str
    embedding: list[float]
    metadata: dict[str, Any] = field(default_factory=dict)
    chunk_id: str | None = None


@dataclass
class Match:
    """One similarity-search hit. Never persisted.

    Attributes:
        chunk_id: Id of the matching chunk.
        document_id: Id of the chunk's document.
        similarity: Cosine similarity to the query (1 = identical direction).
        content: Chunk text.
    """

    chunk_id: str
    document_id: str
    similarity: float
    content: str
