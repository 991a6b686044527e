"""Qdrant vector store adapter.

Two collections are used: ``documents`` holds one point per saved page with
an optional named ``content`` vector (the document-level embedding), and
``chunks`` holds one point per chunk. Every point carries ``owner_id`` in
its payload and every read filters on it.
"""

import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from qdrant_client import QdrantClient

from ....core.domain import Chunk, Document, Match
from ....core.domain.exceptions import (
    PagewiseError,
    VectorStoreConnectionError,
    VectorStoreQueryError,
)
from ....core.ports.vector_store_port import VectorStorePort

logger = logging.getLogger(__name__)

EMBEDDING_DIMENSION = 3072
DOCUMENT_VECTOR = "content"
UPSERT_BATCH_SIZE = 100
SCROLL_PAGE_SIZE = 256


def _is_point_id(value: str) -> bool:
    """Qdrant point ids here are UUID strings; anything else cannot match."""
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


class QdrantAdapter(VectorStorePort):
    """Qdrant-backed store for documents and chunks."""

    DOCUMENTS_COLLECTION = "documents"
    CHUNKS_COLLECTION = "chunks"

    def __init__(
        self,
        url: str,
        api_key: str,
        embedding_dimension: int = EMBEDDING_DIMENSION,
    ) -> None:
        """Initialize the Qdrant vector store.

        Args:
            url: Qdrant cluster URL.
            api_key: Qdrant API key.
            embedding_dimension: Size of every stored vector.
        """
        self.url = url
        self.api_key = api_key
        self.embedding_dimension = embedding_dimension
        self._client: "QdrantClient | None" = None

    def _get_client(self) -> "QdrantClient":
        """Get or create the Qdrant client and make sure collections exist."""
        if not self._client:
            try:
                from qdrant_client import QdrantClient

                client = QdrantClient(url=self.url, api_key=self.api_key or None)
                logger.info("Connected to Qdrant at: %s", self.url)
                self._ensure_collections(client)
                self._client = client
            except Exception as e:
                raise VectorStoreConnectionError(
                    f"Failed to connect to Qdrant at {self.url}",
                    cause=e,
                    context={"url": self.url},
                ) from e

        return self._client

    def _ensure_collections(self, client: "QdrantClient") -> None:
        """Create collections and payload indexes if they are missing."""
        from qdrant_client.http import models

        existing = {c.name for c in client.get_collections().collections}

        if self.DOCUMENTS_COLLECTION not in existing:
            logger.info("Creating collection %s", self.DOCUMENTS_COLLECTION)
            client.create_collection(
                collection_name=self.DOCUMENTS_COLLECTION,
                vectors_config={
                    DOCUMENT_VECTOR: models.VectorParams(
                        size=self.embedding_dimension,
                        distance=models.Distance.COSINE,
                    )
                },
            )

        if self.CHUNKS_COLLECTION not in existing:
            logger.info("Creating collection %s", self.CHUNKS_COLLECTION)
            client.create_collection(
                collection_name=self.CHUNKS_COLLECTION,
                vectors_config=models.VectorParams(
                    size=self.embedding_dimension,
                    distance=models.Distance.COSINE,
                ),
            )

        client.create_payload_index(
            collection_name=self.DOCUMENTS_COLLECTION,
            field_name="owner_id",
            field_schema=models.PayloadSchemaType.KEYWORD,
        )
        for field_name in ("owner_id", "document_id"):
            client.create_payload_index(
                collection_name=self.CHUNKS_COLLECTION,
                field_name=field_name,
                field_schema=models.PayloadSchemaType.KEYWORD,
            )

    @contextmanager
    def _query(self, operation: str, **context: Any) -> Iterator["QdrantClient"]:
        """Yield the client and wrap failures in VectorStoreQueryError."""
        client = self._get_client()
        try:
            yield client
        except PagewiseError:
            raise
        except Exception as e:
            raise VectorStoreQueryError(
                f"Vector store {operation} failed",
                cause=e,
                context={"operation": operation, **context},
            ) from e

    @staticmethod
    def _owner_filter(owner_id: str, **extra: str):
        from qdrant_client.models import FieldCondition, Filter, MatchValue

        conditions = [FieldCondition(key="owner_id", match=MatchValue(value=owner_id))]
        for key, value in extra.items():
            conditions.append(FieldCondition(key=key, match=MatchValue(value=value)))
        return Filter(must=conditions)

    @staticmethod
    def _to_document(point: Any) -> Document:
        payload = dict(point.payload or {})
        vectors = point.vector if isinstance(point.vector, dict) else {}
        embedding = vectors.get(DOCUMENT_VECTOR)
        created_at = payload.get("created_at")
        return Document(
            owner_id=payload.get("owner_id", ""),
            url=payload.get("url", ""),
            title=payload.get("title", ""),
            content=payload.get("content", ""),
            embedding=list(embedding) if embedding else None,
            metadata=payload.get("metadata") or {},
            created_at=datetime.fromisoformat(created_at) if created_at else datetime.now(UTC),
            doc_id=str(point.id),
        )

    @staticmethod
    def _to_chunk(point: Any) -> Chunk:
        payload = dict(point.payload or {})
        vector = point.vector if isinstance(point.vector, list) else []
        return Chunk(
            document_id=payload.get("document_id", ""),
            owner_id=payload.get("owner_id", ""),
            index=int(payload.get("index", 0)),
            content=payload.get("content", ""),
            embedding=list(vector),
            metadata=payload.get("metadata") or {},
            chunk_id=str(point.id),
        )

    def _scroll(self, client: "QdrantClient", collection: str, scroll_filter, with_vectors) -> list:
        points = []
        offset = None
        while True:
            page, offset = client.scroll(
                collection_name=collection,
                scroll_filter=scroll_filter,
                limit=SCROLL_PAGE_SIZE,
                offset=offset,
                with_payload=True,
                with_vectors=with_vectors,
            )
            points.extend(page)
            if offset is None:
                return points

    def insert_document(self, document: Document) -> str:
        from qdrant_client.models import PointStruct

        doc_id = str(uuid.uuid4())
        payload = {
            "owner_id": document.owner_id,
            "url": document.url,
            "title": document.title,
            "content": document.content,
            "metadata": document.metadata,
            "created_at": document.created_at.isoformat(),
        }
        vector = {DOCUMENT_VECTOR: document.embedding} if document.embedding else {}

        with self._query("insert_document", url=document.url) as client:
            client.upsert(
                collection_name=self.DOCUMENTS_COLLECTION,
                points=[PointStruct(id=doc_id, vector=vector, payload=payload)],
                wait=True,
            )

        logger.debug("Stored document %s", doc_id)
        return doc_id

    def insert_chunks(self, document_id: str, chunks: list[Chunk]) -> int:
        """Upsert chunks in batches; chunk ids are assigned here."""
        if not chunks:
            return 0

        from qdrant_client.models import PointStruct

        points = []
        for chunk in chunks:
            chunk.chunk_id = str(uuid.uuid4())
            points.append(
                PointStruct(
                    id=chunk.chunk_id,
                    vector=chunk.embedding,
                    payload={
                        "document_id": document_id,
                        "owner_id": chunk.owner_id,
                        "index": chunk.index,
                        "content": chunk.content,
                        "metadata": chunk.metadata,
                    },
                )
            )

        with self._query("insert_chunks", document_id=document_id) as client:
            for i in range(0, len(points), UPSERT_BATCH_SIZE):
                client.upsert(
                    collection_name=self.CHUNKS_COLLECTION,
                    points=points[i : i + UPSERT_BATCH_SIZE],
                    wait=True,
                )

        logger.info("Added %d chunks for document %s", len(points), document_id)
        return len(points)

    def delete_document(self, document_id: str, owner_id: str) -> bool:
        """Delete the document's chunks, then the document itself."""
        if not _is_point_id(document_id):
            return False

        from qdrant_client.models import FilterSelector, PointIdsList

        with self._query("delete_document", document_id=document_id) as client:
            found = client.retrieve(
                collection_name=self.DOCUMENTS_COLLECTION,
                ids=[document_id],
                with_payload=["owner_id"],
                with_vectors=False,
            )
            if not found or (found[0].payload or {}).get("owner_id") != owner_id:
                return False

            client.delete(
                collection_name=self.CHUNKS_COLLECTION,
                points_selector=FilterSelector(
                    filter=self._owner_filter(owner_id, document_id=document_id)
                ),
                wait=True,
            )
            client.delete(
                collection_name=self.DOCUMENTS_COLLECTION,
                points_selector=PointIdsList(points=[document_id]),
                wait=True,
            )
        return True

    def similarity_search(
        self,
        query_vector: list[float],
        owner_id: str,
        threshold: float = 0.0,
        limit: int = 15,
    ) -> list[Match]:
        with self._query("similarity_search", owner_id=owner_id) as client:
            response = client.query_points(
                collection_name=self.CHUNKS_COLLECTION,
                query=query_vector,
                query_filter=self._owner_filter(owner_id),
                limit=limit,
                score_threshold=threshold,
                with_payload=True,
            )

        matches = []
        for hit in response.points:
            payload = hit.payload or {}
            matches.append(
                Match(
                    chunk_id=str(hit.id),
                    document_id=payload.get("document_id", ""),
                    similarity=float(hit.score),
                    content=payload.get("content", ""),
                )
            )
        return matches

    def get_documents(self, document_ids: list[str], owner_id: str) -> list[Document]:
        ids = [doc_id for doc_id in document_ids if _is_point_id(doc_id)]
        if not ids:
            return []

        with self._query("get_documents", owner_id=owner_id) as client:
            points = client.retrieve(
                collection_name=self.DOCUMENTS_COLLECTION,
                ids=ids,
                with_payload=True,
                with_vectors=False,
            )

        documents = [self._to_document(point) for point in points]
        return [doc for doc in documents if doc.owner_id == owner_id]

    def list_documents(self, owner_id: str, with_embeddings: bool = False) -> list[Document]:
        with self._query("list_documents", owner_id=owner_id) as client:
            points = self._scroll(
                client,
                self.DOCUMENTS_COLLECTION,
                self._owner_filter(owner_id),
                [DOCUMENT_VECTOR] if with_embeddings else False,
            )

        documents = [self._to_document(point) for point in points]
        documents.sort(key=lambda doc: doc.created_at, reverse=True)
        return documents

    def list_chunks(self, owner_id: str, with_embeddings: bool = True) -> list[Chunk]:
        with self._query("list_chunks", owner_id=owner_id) as client:
            points = self._scroll(
                client, self.CHUNKS_COLLECTION, self._owner_filter(owner_id), with_embeddings
            )

        chunks = [self._to_chunk(point) for point in points]
        chunks.sort(key=lambda chunk: (chunk.document_id, chunk.index))
        return chunks

    def get_stats(self) -> dict[str, Any]:
        with self._query("get_stats") as client:
            documents = client.get_collection(collection_name=self.DOCUMENTS_COLLECTION)
            chunks = client.get_collection(collection_name=self.CHUNKS_COLLECTION)
        return {
            "backend": "qdrant",
            "documents": documents.points_count or 0,
            "chunks": chunks.points_count or 0,
        }
