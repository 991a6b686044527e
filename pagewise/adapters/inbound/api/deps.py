"""FastAPI dependencies: authentication and service accessors."""

import logging

from fastapi import Header

from ....composition.container import (
    get_chat_service,
    get_graph_service,
    get_ingestion_service,
    get_vector_store,
)
from ....config import settings
from ....core.domain.exceptions import UnauthenticatedError

logger = logging.getLogger(__name__)

__all__ = [
    "get_chat_service",
    "get_current_user",
    "get_graph_service",
    "get_ingestion_service",
    "get_vector_store",
]


def get_current_user(authorization: str | None = Header(default=None)) -> str:
    """Resolve the bearer token to a user id.

    Raises:
        UnauthenticatedError: If the header is missing or the token is unknown.
    """
    if not authorization:
        raise UnauthenticatedError("Unauthorized")

    scheme, _, token = authorization.partition(" ")
    user_id = settings.api_tokens.get(token.strip()) if scheme.lower() == "bearer" else None
    if not user_id:
        logger.warning("Rejected request with invalid credentials")
        raise UnauthenticatedError("Unauthorized")
    return user_id
