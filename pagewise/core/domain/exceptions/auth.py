"""Authentication exceptions for pagewise."""

from .base import PagewiseError


class AuthError(PagewiseError):
    """Caller could not be authenticated."""

    error_code = "PW_AUT_001"


class UnauthenticatedError(AuthError):
    """No valid credentials were supplied."""

    error_code = "PW_AUT_002"
