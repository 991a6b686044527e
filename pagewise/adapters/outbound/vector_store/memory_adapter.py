"""In-process vector store for local runs and tests."""

import copy
import logging
import threading
import uuid
from typing import Any

import numpy as np

from ....core.domain import Chunk, Document, Match
from ....core.domain.exceptions import VectorStoreQueryError
from ....core.ports.vector_store_port import VectorStorePort

logger = logging.getLogger(__name__)


class InMemoryVectorStore(VectorStorePort):
    """Dictionary-backed store with brute-force cosine search.

    Stored records are copied on the way in and out so callers cannot
    mutate them in place.
    """

    def __init__(self) -> None:
        self._documents: dict[str, Document] = {}
        self._chunks: dict[str, Chunk] = {}
        self._lock = threading.Lock()

    def insert_document(self, document: Document) -> str:
        doc_id = str(uuid.uuid4())
        stored = copy.deepcopy(document)
        stored.doc_id = doc_id
        with self._lock:
            self._documents[doc_id] = stored
        return doc_id

    def insert_chunks(self, document_id: str, chunks: list[Chunk]) -> int:
        with self._lock:
            if document_id not in self._documents:
                raise VectorStoreQueryError(
                    "Cannot store chunks for an unknown document",
                    context={"document_id": document_id},
                )
            for chunk in chunks:
                chunk.chunk_id = str(uuid.uuid4())
                stored = copy.deepcopy(chunk)
                stored.document_id = document_id
                self._chunks[stored.chunk_id] = stored
        return len(chunks)

    def delete_document(self, document_id: str, owner_id: str) -> bool:
        with self._lock:
            document = self._documents.get(document_id)
            if document is None or document.owner_id != owner_id:
                return False
            del self._documents[document_id]
            orphaned = [cid for cid, c in self._chunks.items() if c.document_id == document_id]
            for chunk_id in orphaned:
                del self._chunks[chunk_id]
        logger.debug("Deleted document %s and %d chunks", document_id, len(orphaned))
        return True

    def similarity_search(
        self,
        query_vector: list[float],
        owner_id: str,
        threshold: float = 0.0,
        limit: int = 15,
    ) -> list[Match]:
        with self._lock:
            candidates = [c for c in self._chunks.values() if c.owner_id == owner_id and c.embedding]
        if not candidates:
            return []

        query = np.asarray(query_vector, dtype=float)
        matrix = np.asarray([c.embedding for c in candidates], dtype=float)
        if matrix.shape[1] != query.shape[0]:
            raise VectorStoreQueryError(
                "Query vector dimension does not match stored vectors",
                context={"expected": matrix.shape[1], "got": query.shape[0]},
            )

        norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
        norms[norms == 0] = 1.0
        scores = matrix @ query / norms

        order = np.argsort(-scores, kind="stable")
        matches = []
        for position in order:
            score = float(scores[position])
            if score < threshold:
                break
            chunk = candidates[position]
            matches.append(
                Match(
                    chunk_id=chunk.chunk_id,
                    document_id=chunk.document_id,
                    similarity=score,
                    content=chunk.content,
                )
            )
            if len(matches) >= limit:
                break
        return matches

    def get_documents(self, document_ids: list[str], owner_id: str) -> list[Document]:
        with self._lock:
            found = [self._documents.get(doc_id) for doc_id in document_ids]
        return [copy.deepcopy(doc) for doc in found if doc and doc.owner_id == owner_id]

    def list_documents(self, owner_id: str, with_embeddings: bool = False) -> list[Document]:
        with self._lock:
            owned = [doc for doc in self._documents.values() if doc.owner_id == owner_id]
        documents = []
        for doc in sorted(owned, key=lambda d: d.created_at, reverse=True):
            doc = copy.deepcopy(doc)
            if not with_embeddings:
                doc.embedding = None
            documents.append(doc)
        return documents

    def list_chunks(self, owner_id: str, with_embeddings: bool = True) -> list[Chunk]:
        with self._lock:
            owned = [c for c in self._chunks.values() if c.owner_id == owner_id]
        chunks = []
        for chunk in sorted(owned, key=lambda c: (c.document_id, c.index)):
            chunk = copy.deepcopy(chunk)
            if not with_embeddings:
                chunk.embedding = []
            chunks.append(chunk)
        return chunks

    def get_stats(self) -> dict[str, Any]:
        with self._lock:
            return {
                "backend": "memory",
                "documents": len(self._documents),
                "chunks": len(self._chunks),
            }
