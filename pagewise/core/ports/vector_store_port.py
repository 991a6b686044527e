"""Vector Store Port Interface."""

from abc import ABC, abstractmethod
from typing import Any

from ..domain import Chunk, Document, Match


class VectorStorePort(ABC):
    """Persists documents and chunks and answers similarity queries.

    Every read and delete is scoped by ``owner_id``; implementations must
    never return another user's rows.
    """

    @abstractmethod
    def insert_document(self, document: Document) -> str:
        """Store a document and return its new id."""
        ...

    @abstractmethod
    def insert_chunks(self, document_id: str, chunks: list[Chunk]) -> int:
        """Store a batch of chunks for one document. Returns the number stored."""
        ...

    @abstractmethod
    def delete_document(self, document_id: str, owner_id: str) -> bool:
        """Delete a document and its chunks. Returns False if nothing matched."""
        ...

    @abstractmethod
    def similarity_search(
        self,
        query_vector: list[float],
        owner_id: str,
        threshold: float = 0.0,
        limit: int = 15,
    ) -> list[Match]:
        """Return up to ``limit`` chunks most similar to ``query_vector``.

        Results are not required to be sorted.
        """
        ...

    @abstractmethod
    def get_documents(self, document_ids: list[str], owner_id: str) -> list[Document]:
        """Fetch documents by id in one call."""
        ...

    @abstractmethod
    def list_documents(self, owner_id: str, with_embeddings: bool = False) -> list[Document]:
        """List an owner's documents, newest first."""
        ...

    @abstractmethod
    def list_chunks(self, owner_id: str, with_embeddings: bool = True) -> list[Chunk]:
        """List an owner's chunks ordered by document and index."""
        ...

    @abstractmethod
    def get_stats(self) -> dict[str, Any]:
        """Store health and counts, used by the readiness probe."""
        ...
