"""Embedding Port Interface."""

from abc import ABC, abstractmethod


class EmbeddingPort(ABC):
    """Maps text to a fixed-length vector. Used by ingestion and query."""

    @abstractmethod
    def embed(self, text: str) -> list[float]: ...
