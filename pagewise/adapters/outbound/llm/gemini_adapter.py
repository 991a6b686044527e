"""Gemini chat adapter implementing the LLM port."""

import logging
from collections.abc import Generator
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from google import genai

from ....core.domain import ChatMessage
from ....core.domain.exceptions import LLMGenerationError, LLMRateLimitError, MissingAPIKeyError
from ....core.ports.llm_port import LLMPort
from ...common.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

# Gemini only knows "user" and "model" turns
ROLE_MAP = {"user": "user", "assistant": "model"}


def _is_rate_limit(error: Exception) -> bool:
    code = getattr(error, "code", None)
    if code == 429:
        return True
    message = str(error).lower()
    return "quota" in message or "rate limit" in message


class GeminiAdapter(LLMPort):
    """Streams answers from Gemini using the google-genai SDK."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash",
        temperature: float = 0.7,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        """Initialize the Gemini adapter.

        Args:
            api_key: Google AI API key.
            model: Model to use.
            temperature: Sampling temperature (0.0-1.0).
            rate_limiter: Optional limiter shared by all calls.
        """
        self.api_key = api_key
        self.model_name = model
        self.temperature = temperature
        self.rate_limiter = rate_limiter
        self._client: "genai.Client | None" = None

    def _get_client(self) -> "genai.Client":
        """Lazy load the Gemini client."""
        if self._client is None:
            if not self.api_key:
                raise MissingAPIKeyError(
                    "Google API key not set. Get one at https://aistudio.google.com/ "
                    "and set GOOGLE_API_KEY in your .env file."
                )
            from google import genai

            self._client = genai.Client(api_key=self.api_key)
            logger.info("Gemini client initialized for model: %s", self.model_name)
        return self._client

    @staticmethod
    def _build_contents(messages: list[ChatMessage]) -> tuple[list, list[str]]:
        """Split the conversation into Gemini contents and system text."""
        from google.genai import types

        contents = []
        system_parts = []
        for message in messages:
            if message.role == "system":
                system_parts.append(message.content)
                continue
            contents.append(
                types.Content(
                    role=ROLE_MAP.get(message.role, "user"),
                    parts=[types.Part(text=message.content)],
                )
            )
        return contents, system_parts

    def generate_stream(
        self,
        messages: list[ChatMessage],
        system_prompt: str | None = None,
    ) -> Generator[str, None, None]:
        """Stream answer fragments for the conversation.

        Closing this generator closes the underlying HTTP stream.

        Raises:
            LLMRateLimitError: If the quota is exhausted.
            LLMGenerationError: For any other generation failure.
        """
        from google.genai.types import GenerateContentConfig

        client = self._get_client()
        contents, system_parts = self._build_contents(messages)
        if system_prompt:
            system_parts.insert(0, system_prompt)

        if self.rate_limiter:
            self.rate_limiter.acquire()

        stream = None
        try:
            stream = client.models.generate_content_stream(
                model=self.model_name,
                contents=contents,
                config=GenerateContentConfig(
                    temperature=self.temperature,
                    system_instruction="\n\n".join(system_parts) if system_parts else None,
                ),
            )
            for chunk in stream:
                if chunk.text:
                    yield chunk.text
        except GeneratorExit:
            logger.info("Generation stream cancelled by consumer")
            raise
        except Exception as e:
            if _is_rate_limit(e):
                raise LLMRateLimitError(
                    "Generation rate limit reached. Please wait a moment and try again.",
                    cause=e,
                ) from e
            raise LLMGenerationError(
                "Failed to generate a response", cause=e, context={"model": self.model_name}
            ) from e
        finally:
            close = getattr(stream, "close", None)
            if callable(close):
                close()
