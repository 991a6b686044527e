"""Unit tests for RetrievalService ranking and context assembly."""

from unittest.mock import MagicMock

import pytest
from conftest import FakeEmbedder, make_match

from pagewise.core.domain import Document, RankedMatch
from pagewise.core.domain.exceptions import EmptyQueryError, UnauthenticatedError
from pagewise.core.services.retrieval_service import (
    CONTEXT_SEPARATOR,
    RetrievalService,
    build_context,
    format_source,
    rank_matches,
)

pytestmark = pytest.mark.unit

SIMILARITIES = [0.91, 0.88, 0.85, 0.80, 0.77, 0.75, 0.72, 0.70, 0.66, 0.61, 0.55, 0.52, 0.50, 0.45, 0.40]


def _store_with(candidates, documents=None):
    store = MagicMock()
    store.similarity_search.return_value = candidates
    store.get_documents.return_value = documents or []
    return store


def _doc(doc_id, title="Title", url=None):
    return Document(
        owner_id="user-1",
        url=url or f"https://example.com/{doc_id}",
        title=title,
        content="...",
        doc_id=doc_id,
    )


class TestRankMatches:
    """Tests for top-K ranking."""

    def test_returns_top_k_descending(self):
        shuffled = [make_match(s, chunk_id=str(s)) for s in reversed(SIMILARITIES)]
        top = rank_matches(shuffled, top_k=5)
        assert [m.similarity for m in top] == [0.91, 0.88, 0.85, 0.80, 0.77]

    def test_ties_keep_candidate_order(self):
        candidates = [
            make_match(0.5, chunk_id="first"),
            make_match(0.9, chunk_id="best"),
            make_match(0.5, chunk_id="second"),
            make_match(0.5, chunk_id="third"),
        ]
        top = rank_matches(candidates, top_k=3)
        assert [m.chunk_id for m in top] == ["best", "first", "second"]

    def test_fewer_candidates_than_top_k(self):
        top = rank_matches([make_match(0.3), make_match(0.4)], top_k=5)
        assert len(top) == 2


class TestContext:
    """Tests for source headers and the context string."""

    def test_format_source_header(self):
        ranked = RankedMatch(rank=2, match=make_match(0.8765, content="body"), title="Guide")
        assert format_source(ranked) == '[Source 2 - "Guide" (similarity: 0.88)]\nbody'

    def test_entries_joined_with_separator(self):
        ranked = [
            RankedMatch(rank=1, match=make_match(0.9, content="one"), title="A"),
            RankedMatch(rank=2, match=make_match(0.8, content="two"), title="B"),
        ]
        included, context = build_context(ranked)
        assert included == ranked
        assert context.split(CONTEXT_SEPARATOR) == [format_source(r) for r in ranked]

    def test_budget_drops_trailing_passages(self):
        ranked = [
            RankedMatch(rank=1, match=make_match(0.9, content="a" * 50), title="A"),
            RankedMatch(rank=2, match=make_match(0.8, content="b" * 50), title="B"),
        ]
        budget = len(format_source(ranked[0])) + 10
        included, context = build_context(ranked, max_chars=budget)
        assert included == ranked[:1]
        assert len(context) <= budget

    def test_budget_truncates_first_passage(self):
        ranked = [RankedMatch(rank=1, match=make_match(0.9, content="a" * 500), title="A")]
        included, context = build_context(ranked, max_chars=100)
        assert len(included) == 1
        assert len(context) == 100
        assert context.startswith('[Source 1 - "A"')


class TestRetrievalService:
    """Tests for the retrieve use case."""

    def test_retrieve_top_five_of_fifteen(self):
        candidates = [
            make_match(s, chunk_id=f"c{i}", document_id="d1") for i, s in enumerate(SIMILARITIES)
        ]
        store = _store_with(candidates, [_doc("d1")])
        service = RetrievalService(FakeEmbedder(), store, candidate_count=15, top_k=5)

        result = service.retrieve("what is qdrant?", "user-1")

        assert result.grounded
        assert [r.match.similarity for r in result.matches] == [0.91, 0.88, 0.85, 0.80, 0.77]
        assert [r.rank for r in result.matches] == [1, 2, 3, 4, 5]
        store.similarity_search.assert_called_once_with(
            [1.0, 0.0, 0.0], "user-1", threshold=0.0, limit=15
        )

    def test_zero_candidates_is_ungrounded_not_error(self):
        service = RetrievalService(FakeEmbedder(), _store_with([]))

        result = service.retrieve("anything", "user-1")

        assert not result.grounded
        assert result.matches == []
        assert result.context == ""

    def test_documents_resolved_in_one_batch(self):
        candidates = [
            make_match(0.9, chunk_id="c1", document_id="d1"),
            make_match(0.8, chunk_id="c2", document_id="d2"),
            make_match(0.7, chunk_id="c3", document_id="d1"),
        ]
        store = _store_with(candidates, [_doc("d1", "First"), _doc("d2", "Second")])
        service = RetrievalService(FakeEmbedder(), store)

        result = service.retrieve("q", "user-1")

        store.get_documents.assert_called_once_with(["d1", "d2"], "user-1")
        assert [r.title for r in result.matches] == ["First", "Second", "First"]
        assert '[Source 1 - "First" (similarity: 0.90)]' in result.context

    def test_unresolved_document_is_untitled(self):
        store = _store_with([make_match(0.9, document_id="gone")], [])
        service = RetrievalService(FakeEmbedder(), store)

        result = service.retrieve("q", "user-1")

        ranked = result.matches[0]
        assert ranked.title == "Untitled"
        assert ranked.url is None
        assert not ranked.resolved

    def test_call_overrides_configured_counts(self):
        candidates = [make_match(s) for s in SIMILARITIES[:4]]
        store = _store_with(candidates)
        service = RetrievalService(FakeEmbedder(), store, candidate_count=15, top_k=5)

        result = service.retrieve("q", "user-1", candidate_count=4, top_k=2)

        assert len(result.matches) == 2
        assert store.similarity_search.call_args.kwargs["limit"] == 4

    def test_explicit_zero_top_k_is_not_replaced_by_default(self):
        store = _store_with([make_match(s) for s in SIMILARITIES[:3]])
        service = RetrievalService(FakeEmbedder(), store, candidate_count=15, top_k=5)

        result = service.retrieve("q", "user-1", top_k=0)

        assert result.matches == []
        assert not result.grounded

    def test_explicit_zero_candidate_count_is_passed_to_store(self):
        store = _store_with([])
        service = RetrievalService(FakeEmbedder(), store, candidate_count=15, top_k=5)

        service.retrieve("q", "user-1", candidate_count=0)

        assert store.similarity_search.call_args.kwargs["limit"] == 0

    @pytest.mark.parametrize("query", ["", "   "])
    def test_blank_query_rejected_before_embedding(self, query):
        embedder = FakeEmbedder()
        service = RetrievalService(embedder, _store_with([]))

        with pytest.raises(EmptyQueryError):
            service.retrieve(query, "user-1")
        assert embedder.calls == []

    def test_missing_owner_rejected(self):
        with pytest.raises(UnauthenticatedError):
            RetrievalService(FakeEmbedder(), _store_with([])).retrieve("q", "")
