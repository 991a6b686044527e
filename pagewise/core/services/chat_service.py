"""Use-case service for answering a conversation from the user's corpus."""

from collections.abc import Generator

from ..domain import ChatMessage, RetrievalResult, StreamEvent
from ..domain.exceptions import EmptyConversationError, EmptyQueryError, UnauthenticatedError
from .answer_streamer import AnswerStreamer
from .retrieval_service import RetrievalService


def last_user_query(messages: list[ChatMessage]) -> str:
    """Text of the most recent user message."""
    for message in reversed(messages):
        if message.role == "user":
            return message.content.strip()
    return ""


class ChatService:
    """Orchestrates retrieval and answer streaming for one request."""

    def __init__(self, retriever: RetrievalService, streamer: AnswerStreamer) -> None:
        self.retriever = retriever
        self.streamer = streamer

    def prepare(self, messages: list[ChatMessage], owner_id: str) -> RetrievalResult:
        """Validate the conversation and retrieve grounding for its last question."""
        if not owner_id:
            raise UnauthenticatedError("Authentication required")
        if not messages:
            raise EmptyConversationError("Messages are required")

        query = last_user_query(messages)
        if not query:
            raise EmptyQueryError("The last user message has no text")

        return self.retriever.retrieve(query, owner_id)

    def answer(
        self, messages: list[ChatMessage], owner_id: str
    ) -> Generator[StreamEvent, None, None]:
        """Retrieve eagerly, then return the lazy answer event stream.

        Validation and retrieval errors are raised here, before any event is
        produced.
        """
        retrieval = self.prepare(messages, owner_id)
        return self.streamer.stream(messages, retrieval)
