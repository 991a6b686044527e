"""Conversation messages and answer stream events."""

from dataclasses import dataclass
from typing import Any, Literal

Role = Literal["user", "assistant", "system"]


@dataclass
class ChatMessage:
    """A single message in the conversation history."""

    role: Role
    content: str


@dataclass
class CitationEvent:
    """A source the answer is grounded on, emitted before any answer text."""

    source_id: str
    title: str
    url: str
    similarity: float

    type: str = "source-url"

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "sourceId": self.source_id,
            "title": self.title,
            "url": self.url,
            "similarity": round(self.similarity, 4),
        }


@dataclass
class TextEvent:
    """A fragment of answer text in arrival order."""

    delta: str

    type: str = "text-delta"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "delta": self.delta}


@dataclass
class FinishEvent:
    """Marks the end of a completed answer."""

    grounded: bool

    type: str = "finish"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "grounded": self.grounded}


StreamEvent = CitationEvent | TextEvent | FinishEvent
