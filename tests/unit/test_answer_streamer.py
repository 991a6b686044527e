"""Unit tests for AnswerStreamer and ChatService."""

from unittest.mock import MagicMock

import pytest
from conftest import FakeLLM, make_match

from pagewise.core.domain import (
    ChatMessage,
    CitationEvent,
    FinishEvent,
    RankedMatch,
    RetrievalResult,
    TextEvent,
)
from pagewise.core.domain.exceptions import (
    EmptyConversationError,
    EmptyQueryError,
    LLMGenerationError,
    UnauthenticatedError,
)
from pagewise.core.services.answer_streamer import AnswerStreamer
from pagewise.core.services.chat_service import ChatService, last_user_query

pytestmark = pytest.mark.unit

MESSAGES = [ChatMessage(role="user", content="What is a vector database?")]


def _grounded():
    return RetrievalResult(
        query="What is a vector database?",
        matches=[
            RankedMatch(
                rank=1,
                match=make_match(0.91, chunk_id="c1", document_id="d1"),
                title="Qdrant docs",
                url="https://qdrant.tech",
            ),
            RankedMatch(
                rank=2,
                match=make_match(0.80, chunk_id="c2", document_id="d2"),
                title="Untitled",
                url=None,
            ),
            RankedMatch(
                rank=3,
                match=make_match(0.72, chunk_id="c3", document_id="d3"),
                title="Blog",
                url="https://blog.example.com",
            ),
        ],
        context='[Source 1 - "Qdrant docs" (similarity: 0.91)]\ntext',
    )


class TestAnswerStreamer:
    """Tests for the event sequence."""

    def test_citations_precede_text_in_rank_order(self):
        events = list(AnswerStreamer(FakeLLM()).stream(MESSAGES, _grounded()))

        citations = [e for e in events if isinstance(e, CitationEvent)]
        first_text = next(i for i, e in enumerate(events) if isinstance(e, TextEvent))
        assert all(isinstance(e, CitationEvent) for e in events[:first_text])
        assert [c.source_id for c in citations] == ["c1", "c3"]
        assert citations[0].url == "https://qdrant.tech"

    def test_text_in_arrival_order_then_finish(self):
        llm = FakeLLM(["The ", "", "answer"])
        events = list(AnswerStreamer(llm).stream(MESSAGES, _grounded()))

        assert [e.delta for e in events if isinstance(e, TextEvent)] == ["The ", "answer"]
        assert events[-1] == FinishEvent(grounded=True)

    def test_grounded_answer_uses_context_in_system_prompt(self):
        llm = FakeLLM()
        list(AnswerStreamer(llm).stream(MESSAGES, _grounded()))

        system_prompt = llm.calls[0]["system_prompt"]
        assert 'Source 1 - "Qdrant docs"' in system_prompt
        assert llm.calls[0]["messages"] == MESSAGES

    def test_ungrounded_answer_has_no_citations(self):
        llm = FakeLLM()
        events = list(AnswerStreamer(llm).stream(MESSAGES, RetrievalResult(query="q")))

        assert not any(isinstance(e, CitationEvent) for e in events)
        assert llm.calls[0]["system_prompt"] is None
        assert events[-1] == FinishEvent(grounded=False)

    def test_closing_early_closes_upstream(self):
        llm = FakeLLM(["a", "b", "c", "d"])
        stream = AnswerStreamer(llm).stream(MESSAGES, RetrievalResult(query="q"))

        assert next(stream).delta == "a"
        stream.close()

        assert llm.closed
        assert llm.produced == 1

    def test_upstream_error_propagates_and_closes(self):
        llm = FakeLLM(["partial"], error=LLMGenerationError("boom"))
        stream = AnswerStreamer(llm).stream(MESSAGES, RetrievalResult(query="q"))

        assert next(stream).delta == "partial"
        with pytest.raises(LLMGenerationError):
            next(stream)
        assert llm.closed

    def test_citation_event_payload(self):
        event = AnswerStreamer(FakeLLM()).citations(_grounded())[0]
        assert event.to_dict() == {
            "type": "source-url",
            "sourceId": "c1",
            "title": "Qdrant docs",
            "url": "https://qdrant.tech",
            "similarity": 0.91,
        }


class TestChatService:
    """Tests for request validation and orchestration."""

    def _service(self, retrieval=None):
        retriever = MagicMock()
        retriever.retrieve.return_value = retrieval or RetrievalResult(query="q")
        return ChatService(retriever, AnswerStreamer(FakeLLM())), retriever

    def test_last_user_query_skips_assistant_turns(self):
        messages = [
            ChatMessage(role="user", content="first"),
            ChatMessage(role="assistant", content="reply"),
            ChatMessage(role="user", content="  second  "),
            ChatMessage(role="assistant", content="pending"),
        ]
        assert last_user_query(messages) == "second"

    def test_empty_conversation_rejected(self):
        service, retriever = self._service()
        with pytest.raises(EmptyConversationError, match="Messages are required"):
            service.answer([], "user-1")
        retriever.retrieve.assert_not_called()

    def test_conversation_without_user_text_rejected(self):
        service, _ = self._service()
        with pytest.raises(EmptyQueryError):
            service.answer([ChatMessage(role="assistant", content="hi")], "user-1")

    def test_missing_owner_rejected(self):
        service, _ = self._service()
        with pytest.raises(UnauthenticatedError):
            service.answer(MESSAGES, "")

    def test_retrieval_runs_before_stream_is_consumed(self):
        service, retriever = self._service(_grounded())

        events = service.answer(MESSAGES, "user-1")

        retriever.retrieve.assert_called_once_with("What is a vector database?", "user-1")
        assert isinstance(next(events), CitationEvent)
