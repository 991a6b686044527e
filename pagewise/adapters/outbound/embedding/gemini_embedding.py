"""Gemini embedding adapter implementing the embedding port."""

import logging
import time
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from google import genai

from ....core.domain.exceptions import EmbeddingError, MissingAPIKeyError
from ....core.ports.embedding_port import EmbeddingPort
from ...common.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

MAX_EMBEDDING_RETRIES = 3
EMBEDDING_DIMENSION = 3072  # gemini-embedding-001 default dimension

# Task types understood by the Gemini embedding API
QUERY_TASK = "RETRIEVAL_QUERY"
DOCUMENT_TASK = "RETRIEVAL_DOCUMENT"


class GeminiEmbeddingAdapter(EmbeddingPort):
    """Embeds text with the google-genai SDK.

    One instance per task type: queries and stored passages are embedded
    with different task hints but share the model and dimensionality.
    """

    def __init__(
        self,
        api_key: str,
        model_name: str = "gemini-embedding-001",
        task_type: str = DOCUMENT_TASK,
        dimension: int = EMBEDDING_DIMENSION,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        self.api_key = api_key
        self.model_name = model_name
        self.task_type = task_type
        self.dimension = dimension
        self.rate_limiter = rate_limiter
        self._client: "genai.Client | None" = None

    def _get_client(self) -> "genai.Client":
        """Get or create the genai client."""
        if self._client is None:
            if not self.api_key:
                raise MissingAPIKeyError(
                    "Google API key not set. Set GOOGLE_API_KEY in your .env file."
                )
            from google import genai

            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def embed(self, text: str) -> list[float]:
        """Embed one text, retrying transient failures with backoff.

        Raises:
            EmbeddingError: If the API keeps failing or returns no vector.
        """
        from google.genai import types

        client = self._get_client()

        for attempt in range(MAX_EMBEDDING_RETRIES):
            if self.rate_limiter:
                self.rate_limiter.acquire()
            try:
                result = client.models.embed_content(
                    model=self.model_name,
                    contents=text,
                    config=types.EmbedContentConfig(
                        task_type=self.task_type,
                        output_dimensionality=self.dimension,
                    ),
                )
            except Exception as e:
                if attempt == MAX_EMBEDDING_RETRIES - 1:
                    raise EmbeddingError(
                        "Failed to generate embedding",
                        cause=e,
                        context={"model": self.model_name, "attempts": MAX_EMBEDDING_RETRIES},
                    ) from e
                wait_time = 2**attempt
                logger.warning("Embedding failed (%s), retrying in %ss", e, wait_time)
                time.sleep(wait_time)
                continue

            if not result or not result.embeddings:
                raise EmbeddingError(
                    "Embedding API returned no vector", context={"model": self.model_name}
                )
            return list(result.embeddings[0].values)

        raise EmbeddingError("Failed to generate embedding", context={"model": self.model_name})
