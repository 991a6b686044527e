"""Unit tests for InMemoryVectorStore."""

from datetime import UTC, datetime, timedelta

import pytest

from pagewise.core.domain import Chunk, Document
from pagewise.core.domain.exceptions import VectorStoreQueryError

pytestmark = pytest.mark.unit


def _doc(owner="user-1", title="Doc", embedding=None, created_at=None):
    doc = Document(
        owner_id=owner,
        url=f"https://example.com/{title}",
        title=title,
        content=f"{title} content",
        embedding=embedding,
    )
    if created_at:
        doc.created_at = created_at
    return doc


def _chunk(doc_id, index, embedding, owner="user-1"):
    return Chunk(document_id=doc_id, owner_id=owner, index=index, content=f"chunk {index}",
                 embedding=embedding)


class TestDocuments:
    """Tests for document storage."""

    def test_insert_assigns_id_without_mutating_input(self, store):
        doc = _doc()
        doc_id = store.insert_document(doc)

        assert doc_id
        assert doc.doc_id is None
        assert store.get_documents([doc_id], "user-1")[0].doc_id == doc_id

    def test_returned_records_are_copies(self, store):
        doc_id = store.insert_document(_doc(title="Original"))

        store.get_documents([doc_id], "user-1")[0].title = "Changed"

        assert store.get_documents([doc_id], "user-1")[0].title == "Original"

    def test_list_is_newest_first(self, store):
        now = datetime.now(UTC)
        store.insert_document(_doc(title="old", created_at=now - timedelta(days=2)))
        store.insert_document(_doc(title="new", created_at=now))
        store.insert_document(_doc(title="mid", created_at=now - timedelta(days=1)))

        assert [d.title for d in store.list_documents("user-1")] == ["new", "mid", "old"]

    def test_list_hides_embeddings_unless_asked(self, store):
        store.insert_document(_doc(embedding=[1.0, 0.0]))

        assert store.list_documents("user-1")[0].embedding is None
        assert store.list_documents("user-1", with_embeddings=True)[0].embedding == [1.0, 0.0]

    def test_get_documents_filters_by_owner(self, store):
        mine = store.insert_document(_doc())
        theirs = store.insert_document(_doc(owner="user-2"))

        found = store.get_documents([mine, theirs, "missing"], "user-1")

        assert [d.doc_id for d in found] == [mine]

    def test_delete_cascades_to_chunks(self, store):
        doc_id = store.insert_document(_doc())
        store.insert_chunks(doc_id, [_chunk(doc_id, 0, [1.0, 0.0]), _chunk(doc_id, 1, [0.0, 1.0])])

        assert store.delete_document(doc_id, "user-1") is True
        assert store.get_stats() == {"backend": "memory", "documents": 0, "chunks": 0}

    def test_delete_requires_matching_owner(self, store):
        doc_id = store.insert_document(_doc())

        assert store.delete_document(doc_id, "user-2") is False
        assert store.delete_document("missing", "user-1") is False
        assert store.get_stats()["documents"] == 1


class TestChunksAndSearch:
    """Tests for chunk storage and similarity search."""

    def test_insert_chunks_for_unknown_document_fails(self, store):
        with pytest.raises(VectorStoreQueryError):
            store.insert_chunks("missing", [_chunk("missing", 0, [1.0])])

    def test_insert_chunks_assigns_ids(self, store):
        doc_id = store.insert_document(_doc())
        chunks = [_chunk(doc_id, 0, [1.0, 0.0])]

        assert store.insert_chunks(doc_id, chunks) == 1
        assert chunks[0].chunk_id is not None

    def test_search_orders_by_similarity_and_limits(self, store):
        doc_id = store.insert_document(_doc())
        store.insert_chunks(
            doc_id,
            [_chunk(doc_id, 0, [0.0, 1.0]), _chunk(doc_id, 1, [1.0, 0.0]), _chunk(doc_id, 2, [1.0, 1.0])],
        )

        matches = store.similarity_search([1.0, 0.0], "user-1", threshold=-1.0, limit=2)

        assert [m.content for m in matches] == ["chunk 1", "chunk 2"]
        assert matches[0].similarity == pytest.approx(1.0)
        assert matches[0].document_id == doc_id

    def test_search_applies_threshold(self, store):
        doc_id = store.insert_document(_doc())
        store.insert_chunks(doc_id, [_chunk(doc_id, 0, [0.0, 1.0]), _chunk(doc_id, 1, [1.0, 0.0])])

        matches = store.similarity_search([1.0, 0.0], "user-1", threshold=0.5)

        assert [m.content for m in matches] == ["chunk 1"]

    def test_search_is_owner_scoped(self, store):
        doc_id = store.insert_document(_doc(owner="user-2"))
        store.insert_chunks(doc_id, [_chunk(doc_id, 0, [1.0, 0.0], owner="user-2")])

        assert store.similarity_search([1.0, 0.0], "user-1") == []

    def test_dimension_mismatch_raises(self, store):
        doc_id = store.insert_document(_doc())
        store.insert_chunks(doc_id, [_chunk(doc_id, 0, [1.0, 0.0, 0.0])])

        with pytest.raises(VectorStoreQueryError):
            store.similarity_search([1.0, 0.0], "user-1")

    def test_list_chunks_ordered_by_index(self, store):
        doc_id = store.insert_document(_doc())
        store.insert_chunks(doc_id, [_chunk(doc_id, 1, [1.0]), _chunk(doc_id, 0, [1.0])])

        chunks = store.list_chunks("user-1", with_embeddings=False)

        assert [c.index for c in chunks] == [0, 1]
        assert chunks[0].embedding == []
