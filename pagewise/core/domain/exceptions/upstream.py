"""Exceptions for the embedding, generation and scraping services."""

from .base import PagewiseError


class UpstreamError(PagewiseError):
    """An external model or scraping service failed."""

    error_code = "PW_UPS_001"


class EmbeddingError(UpstreamError):
    """Failed to generate an embedding."""

    error_code = "PW_UPS_002"


class LLMError(UpstreamError):
    """Base error for answer generation."""

    error_code = "PW_UPS_003"


class LLMGenerationError(LLMError):
    """The generation service returned an error or no content.

    Common causes:
    - Content filtered by safety settings
    - Token limit exceeded
    - Service unavailable
    """

    error_code = "PW_UPS_004"


class RateLimitError(UpstreamError):
    """An upstream quota was exceeded."""

    error_code = "PW_UPS_005"


class LLMRateLimitError(LLMError, RateLimitError):
    """Generation quota exceeded. Wait a moment and try again."""

    error_code = "PW_UPS_006"


class ScrapingError(UpstreamError):
    """A page could not be fetched or produced no readable text."""

    error_code = "PW_UPS_007"
