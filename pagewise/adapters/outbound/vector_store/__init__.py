"""Vector store adapters."""

from .memory_adapter import InMemoryVectorStore
from .qdrant_adapter import QdrantAdapter

__all__ = ["InMemoryVectorStore", "QdrantAdapter"]
