"""Vector store exceptions for pagewise."""

from .base import PagewiseError


class StorageError(PagewiseError):
    """Base error for persistence reads and writes."""

    error_code = "PW_STO_001"


class VectorStoreConnectionError(StorageError):
    """Failed to connect to the vector store.

    Common causes:
    - Invalid URL or API key
    - Network connectivity issues
    - Qdrant service is down
    """

    error_code = "PW_STO_002"


class VectorStoreQueryError(StorageError):
    """A read or write against the vector store failed.

    Common causes:
    - Embedding dimension mismatch
    - Invalid filter or payload
    """

    error_code = "PW_STO_003"
