"""Ingestion: scrape a page, embed it, chunk it and store everything."""

import logging
from concurrent.futures import ThreadPoolExecutor
from urllib.parse import urlparse

from ..domain import Chunk, Document, IngestionResult
from ..domain.exceptions import (
    DocumentNotFoundError,
    InvalidURLError,
    ScrapingError,
    UnauthenticatedError,
)
from ..ports.embedding_port import EmbeddingPort
from ..ports.scraper_port import ScraperPort
from ..ports.vector_store_port import VectorStorePort
from .chunking import DEFAULT_CHUNK_OVERLAP, DEFAULT_CHUNK_SIZE, chunk_text

logger = logging.getLogger(__name__)


def validate_url(url: str | None) -> str:
    """Return the stripped URL or raise InvalidURLError."""
    if not url or not url.strip():
        raise InvalidURLError("URL is required")
    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidURLError("URL must be an absolute http(s) URL", context={"url": url})
    return url


class IngestionService:
    """Saves web pages into a user's corpus and removes them again."""

    def __init__(
        self,
        scraper: ScraperPort,
        embedder: EmbeddingPort,
        vector_store: VectorStorePort,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        chunk_overlap: int = DEFAULT_CHUNK_OVERLAP,
        embedding_workers: int = 1,
    ) -> None:
        self.scraper = scraper
        self.embedder = embedder
        self.vector_store = vector_store
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.embedding_workers = embedding_workers

    def ingest(self, url: str, owner_id: str) -> IngestionResult:
        """Scrape ``url`` and store it as a new document for ``owner_id``.

        Re-ingesting a URL creates another document; nothing is deduplicated.
        If storing the chunks fails, the document row is deleted again so no
        document is left without chunks.

        Raises:
            InvalidURLError: If the URL is missing or not http(s).
            UnauthenticatedError: If no owner id is given.
            ScrapingError: If the page yields no markdown.
            EmbeddingError, StorageError: From the collaborators.
        """
        url = validate_url(url)
        if not owner_id:
            raise UnauthenticatedError("An owner id is required for ingestion")

        logger.info("Scraping URL: %s", url)
        scraped = self.scraper.scrape(url)
        if not scraped.markdown or not scraped.markdown.strip():
            raise ScrapingError("Failed to scrape URL", context={"url": url})

        content = scraped.markdown
        title = scraped.title or urlparse(url).hostname or url

        logger.info("Generating document embedding...")
        document = Document(
            owner_id=owner_id,
            url=url,
            title=title,
            content=content,
            embedding=self.embedder.embed(content),
            metadata=dict(scraped.metadata),
        )

        logger.info("Storing document...")
        document.doc_id = self.vector_store.insert_document(document)

        try:
            chunk_count = self._store_chunks(document)
        except Exception:
            logger.error("Chunk ingestion failed for document %s, rolling back", document.doc_id)
            self._compensate(document)
            raise

        logger.info(
            "Ingested %s as %s with %d chunks",
            url,
            document.doc_id,
            chunk_count,
            extra={"owner_id": owner_id, "document_id": document.doc_id},
        )
        return IngestionResult(document=document, chunk_count=chunk_count)

    def _store_chunks(self, document: Document) -> int:
        text_chunks = chunk_text(document.content, self.chunk_size, self.chunk_overlap)
        logger.debug("Embedding %d chunks...", len(text_chunks))
        embeddings = self._embed_all([chunk.content for chunk in text_chunks])

        chunks = [
            Chunk(
                document_id=document.doc_id,
                owner_id=document.owner_id,
                index=text_chunk.index,
                content=text_chunk.content,
                embedding=embedding,
            )
            for text_chunk, embedding in zip(text_chunks, embeddings)
        ]
        return self.vector_store.insert_chunks(document.doc_id, chunks)

    def _embed_all(self, texts: list[str]) -> list[list[float]]:
        """Embed texts one call each, keeping input order."""
        if self.embedding_workers <= 1 or len(texts) < 2:
            return [self.embedder.embed(text) for text in texts]

        # Executor.map yields results in submission order regardless of completion order
        with ThreadPoolExecutor(max_workers=self.embedding_workers) as pool:
            return list(pool.map(self.embedder.embed, texts))

    def _compensate(self, document: Document) -> None:
        try:
            self.vector_store.delete_document(document.doc_id, document.owner_id)
            logger.info("Deleted partially ingested document %s", document.doc_id)
        except Exception:
            logger.exception("Compensating delete failed for document %s", document.doc_id)

    def delete(self, document_id: str, owner_id: str) -> None:
        """Delete a document (and its chunks) owned by ``owner_id``.

        Raises:
            DocumentNotFoundError: If no such document exists for this owner.
        """
        if not owner_id:
            raise UnauthenticatedError("An owner id is required to delete documents")
        if not self.vector_store.delete_document(document_id, owner_id):
            raise DocumentNotFoundError(
                "Document not found", context={"document_id": document_id}
            )
        logger.info("Deleted document %s", document_id)

    def list_documents(self, owner_id: str) -> list[Document]:
        """The owner's documents, newest first."""
        if not owner_id:
            raise UnauthenticatedError("An owner id is required to list documents")
        return self.vector_store.list_documents(owner_id)
