"""Configuration-related exceptions for pagewise."""

from .base import PagewiseError


class ConfigurationError(PagewiseError):
    """Configuration or environment variable errors."""

    error_code = "PW_CFG_001"


class MissingAPIKeyError(ConfigurationError):
    """Required API key is not configured."""

    error_code = "PW_CFG_002"
