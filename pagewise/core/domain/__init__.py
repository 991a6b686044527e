"""Domain models for pagewise.

- document: Document, Chunk, TextChunk and Match records
- retrieval: RankedMatch and RetrievalResult
- chat: ChatMessage and the answer stream events
- graph: GraphNode, GraphEdge and SimilarityGraph
- ingestion: IngestionResult

All models are re-exported here:

    from pagewise.core.domain import Document, Match, RetrievalResult
"""

from .chat import ChatMessage, CitationEvent, FinishEvent, StreamEvent, TextEvent
from .document import Chunk, Document, Match, TextChunk
from .graph import GraphEdge, GraphNode, SimilarityGraph
from .ingestion import IngestionResult
from .retrieval import RankedMatch, RetrievalResult

__all__ = [
    # Documents
    "Document",
    "Chunk",
    "TextChunk",
    "Match",
    # Retrieval
    "RankedMatch",
    "RetrievalResult",
    # Chat
    "ChatMessage",
    "CitationEvent",
    "TextEvent",
    "FinishEvent",
    "StreamEvent",
    # Graph
    "GraphNode",
    "GraphEdge",
    "SimilarityGraph",
    # Ingestion
    "IngestionResult",
]
