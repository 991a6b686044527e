"""Validation exceptions for pagewise."""

from .base import PagewiseError


class ValidationError(PagewiseError):
    """Required input is missing or malformed."""

    error_code = "PW_VAL_001"


class EmptyQueryError(ValidationError):
    """Query text cannot be empty or whitespace only."""

    error_code = "PW_VAL_002"


class EmptyConversationError(ValidationError):
    """A chat request must contain at least one message."""

    error_code = "PW_VAL_003"


class InvalidURLError(ValidationError):
    """URL is missing or is not an http(s) URL."""

    error_code = "PW_VAL_004"


class InvalidThresholdError(ValidationError):
    """Similarity threshold is outside [-1, 1]."""

    error_code = "PW_VAL_005"


class InvalidRequestError(ValidationError):
    """Request body or query parameters do not match the API schema."""

    error_code = "PW_VAL_006"
