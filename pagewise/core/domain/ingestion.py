"""Ingestion outcome."""

from dataclasses import dataclass

from .document import Document


@dataclass
class IngestionResult:
    """A stored document and how many chunks were persisted for it."""

    document: Document
    chunk_count: int
