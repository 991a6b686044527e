"""Unit tests for QdrantAdapter.

The Qdrant client is replaced with a MagicMock so no server is needed.
"""

import uuid
from datetime import UTC, datetime
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from pagewise.adapters.outbound.vector_store.qdrant_adapter import DOCUMENT_VECTOR, QdrantAdapter
from pagewise.core.domain import Chunk, Document
from pagewise.core.domain.exceptions import VectorStoreConnectionError, VectorStoreQueryError

pytestmark = pytest.mark.unit

OWNER = "user-1"


@pytest.fixture
def adapter():
    adapter = QdrantAdapter(url="http://localhost:6333", api_key="key", embedding_dimension=3)
    adapter._client = MagicMock()
    return adapter


def _doc_point(title, created_at, owner=OWNER, vector=None):
    return SimpleNamespace(
        id=str(uuid.uuid4()),
        payload={
            "owner_id": owner,
            "url": f"https://example.com/{title}",
            "title": title,
            "content": "body",
            "created_at": created_at.isoformat(),
        },
        vector=vector,
    )


class TestWrites:
    """Tests for inserts and deletes."""

    def test_insert_document_uses_named_vector(self, adapter):
        doc = Document(owner_id=OWNER, url="https://x", title="X", content="c", embedding=[1.0, 0.0, 0.0])

        doc_id = adapter.insert_document(doc)

        point = adapter._client.upsert.call_args.kwargs["points"][0]
        assert point.id == doc_id
        assert point.vector == {DOCUMENT_VECTOR: [1.0, 0.0, 0.0]}
        assert point.payload["owner_id"] == OWNER
        assert point.payload["title"] == "X"

    def test_insert_chunks_assigns_ids_and_payload(self, adapter):
        chunks = [
            Chunk(document_id="", owner_id=OWNER, index=i, content=f"c{i}", embedding=[1.0, 0.0, 0.0])
            for i in range(3)
        ]

        assert adapter.insert_chunks("doc-1", chunks) == 3

        points = adapter._client.upsert.call_args.kwargs["points"]
        assert [p.payload["index"] for p in points] == [0, 1, 2]
        assert {p.payload["document_id"] for p in points} == {"doc-1"}
        assert [p.id for p in points] == [c.chunk_id for c in chunks]

    def test_insert_no_chunks_is_noop(self, adapter):
        assert adapter.insert_chunks("doc-1", []) == 0
        adapter._client.upsert.assert_not_called()

    def test_delete_cascades(self, adapter):
        doc_id = str(uuid.uuid4())
        adapter._client.retrieve.return_value = [SimpleNamespace(id=doc_id, payload={"owner_id": OWNER})]

        assert adapter.delete_document(doc_id, OWNER) is True
        collections = [c.kwargs["collection_name"] for c in adapter._client.delete.call_args_list]
        assert collections == ["chunks", "documents"]

    def test_delete_other_owner_is_refused(self, adapter):
        doc_id = str(uuid.uuid4())
        adapter._client.retrieve.return_value = [SimpleNamespace(id=doc_id, payload={"owner_id": "x"})]

        assert adapter.delete_document(doc_id, OWNER) is False
        adapter._client.delete.assert_not_called()

    def test_delete_non_uuid_id(self, adapter):
        assert adapter.delete_document("not-a-uuid", OWNER) is False
        adapter._client.retrieve.assert_not_called()


class TestReads:
    """Tests for search and listing."""

    def test_similarity_search_maps_points(self, adapter):
        adapter._client.query_points.return_value = SimpleNamespace(
            points=[
                SimpleNamespace(id="c1", score=0.81, payload={"document_id": "d1", "content": "text"})
            ]
        )

        matches = adapter.similarity_search([1.0, 0.0, 0.0], OWNER, threshold=0.0, limit=15)

        assert len(matches) == 1
        assert matches[0].chunk_id == "c1"
        assert matches[0].document_id == "d1"
        assert matches[0].similarity == pytest.approx(0.81)
        kwargs = adapter._client.query_points.call_args.kwargs
        assert kwargs["limit"] == 15
        assert kwargs["query_filter"].must[0].match.value == OWNER

    def test_query_failure_is_wrapped(self, adapter):
        adapter._client.query_points.side_effect = RuntimeError("timeout")

        with pytest.raises(VectorStoreQueryError) as exc_info:
            adapter.similarity_search([1.0, 0.0, 0.0], OWNER)

        assert exc_info.value.extra_context["operation"] == "similarity_search"

    def test_list_documents_pages_and_sorts(self, adapter):
        older = _doc_point("older", datetime(2024, 1, 1, tzinfo=UTC))
        newer = _doc_point("newer", datetime(2024, 6, 1, tzinfo=UTC), vector={DOCUMENT_VECTOR: [1.0, 0.0, 0.0]})
        adapter._client.scroll.side_effect = [([older], "next-page"), ([newer], None)]

        docs = adapter.list_documents(OWNER, with_embeddings=True)

        assert [d.title for d in docs] == ["newer", "older"]
        assert docs[0].embedding == [1.0, 0.0, 0.0]
        assert docs[1].embedding is None
        assert adapter._client.scroll.call_count == 2

    def test_get_documents_filters_owner(self, adapter):
        mine = _doc_point("mine", datetime.now(UTC))
        theirs = _doc_point("theirs", datetime.now(UTC), owner="user-2")
        adapter._client.retrieve.return_value = [mine, theirs]

        docs = adapter.get_documents([mine.id, theirs.id, "bogus"], OWNER)

        assert [d.title for d in docs] == ["mine"]
        assert adapter._client.retrieve.call_args.kwargs["ids"] == [mine.id, theirs.id]

    def test_get_stats(self, adapter):
        adapter._client.get_collection.side_effect = [
            SimpleNamespace(points_count=2),
            SimpleNamespace(points_count=None),
        ]
        assert adapter.get_stats() == {"backend": "qdrant", "documents": 2, "chunks": 0}


class TestConnection:
    def test_connection_failure(self):
        adapter = QdrantAdapter(url="http://unreachable:6333", api_key="")

        with patch("qdrant_client.QdrantClient", side_effect=Exception("refused")):
            with pytest.raises(VectorStoreConnectionError) as exc_info:
                adapter.get_stats()

        assert exc_info.value.extra_context == {"url": "http://unreachable:6333"}
