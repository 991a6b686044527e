"""Streams a source-annotated answer from the generation collaborator."""

import logging
from collections.abc import Generator

from ..domain import ChatMessage, CitationEvent, FinishEvent, RetrievalResult, StreamEvent, TextEvent
from ..ports.llm_port import LLMPort
from .prompts import build_grounded_system_prompt

logger = logging.getLogger(__name__)


class AnswerStreamer:
    """Produces the append-only event sequence for one answer.

    Citation events come first, in rank order, then answer fragments in the
    order the model produces them, then a single finish event. Closing the
    generator early closes the upstream generation stream.
    """

    def __init__(self, llm: LLMPort) -> None:
        self.llm = llm

    def citations(self, retrieval: RetrievalResult) -> list[CitationEvent]:
        """One citation per ranked match whose document could be resolved."""
        return [
            CitationEvent(
                source_id=ranked.match.chunk_id,
                title=ranked.title,
                url=ranked.url,
                similarity=ranked.match.similarity,
            )
            for ranked in retrieval.matches
            if ranked.resolved
        ]

    def stream(
        self,
        messages: list[ChatMessage],
        retrieval: RetrievalResult,
    ) -> Generator[StreamEvent, None, None]:
        """Yield citation, text and finish events for the conversation.

        Args:
            messages: Conversation history, oldest first.
            retrieval: Ranked matches and grounding context.

        Yields:
            CitationEvent (grounded only), TextEvent, then FinishEvent.
        """
        if retrieval.grounded:
            yield from self.citations(retrieval)
            system_prompt: str | None = build_grounded_system_prompt(retrieval.context)
        else:
            logger.warning(
                "No grounding available, answering from general knowledge: %r",
                retrieval.query[:80],
            )
            system_prompt = None

        upstream = self.llm.generate_stream(messages, system_prompt=system_prompt)
        try:
            for fragment in upstream:
                if fragment:
                    yield TextEvent(delta=fragment)
        finally:
            upstream.close()

        yield FinishEvent(grounded=retrieval.grounded)
