"""Exception hierarchy for pagewise.

Import from this package directly:

    from pagewise.core.domain.exceptions import PagewiseError, ScrapingError
"""

# Base classes
from .base import ExceptionContext, PagewiseError

# Authentication
from .auth import AuthError, UnauthenticatedError

# Configuration
from .configuration import ConfigurationError, MissingAPIKeyError

# Lookups
from .not_found import DocumentNotFoundError, NotFoundError

# Persistence
from .storage import StorageError, VectorStoreConnectionError, VectorStoreQueryError

# External services
from .upstream import (
    EmbeddingError,
    LLMError,
    LLMGenerationError,
    LLMRateLimitError,
    RateLimitError,
    ScrapingError,
    UpstreamError,
)

# Input validation
from .validation import (
    EmptyConversationError,
    EmptyQueryError,
    InvalidRequestError,
    InvalidThresholdError,
    InvalidURLError,
    ValidationError,
)

__all__ = [
    # Base
    "ExceptionContext",
    "PagewiseError",
    # Validation
    "ValidationError",
    "EmptyQueryError",
    "EmptyConversationError",
    "InvalidURLError",
    "InvalidThresholdError",
    "InvalidRequestError",
    # Auth
    "AuthError",
    "UnauthenticatedError",
    # Upstream
    "UpstreamError",
    "EmbeddingError",
    "LLMError",
    "LLMGenerationError",
    "LLMRateLimitError",
    "RateLimitError",
    "ScrapingError",
    # Storage
    "StorageError",
    "VectorStoreConnectionError",
    "VectorStoreQueryError",
    # Not found
    "NotFoundError",
    "DocumentNotFoundError",
    # Configuration
    "ConfigurationError",
    "MissingAPIKeyError",
]
