"""Lookup exceptions for pagewise."""

from .base import PagewiseError


class NotFoundError(PagewiseError):
    """Requested entity does not exist for this owner."""

    error_code = "PW_NTF_001"


class DocumentNotFoundError(NotFoundError):
    """Document does not exist or belongs to another user."""

    error_code = "PW_NTF_002"
