"""LLM Port Interface."""

from abc import ABC, abstractmethod
from collections.abc import Generator

from ..domain import ChatMessage


class LLMPort(ABC):
    """Abstract interface for chat-completion providers."""

    @abstractmethod
    def generate_stream(
        self,
        messages: list[ChatMessage],
        system_prompt: str | None = None,
    ) -> Generator[str, None, None]:
        """Stream answer fragments for a conversation.

        Closing the returned generator must release the upstream request.
        """
        ...
