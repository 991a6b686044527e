"""Core RAG services: chunking, retrieval, answering, graph building, ingestion."""

from .answer_streamer import AnswerStreamer
from .chat_service import ChatService
from .chunking import chunk_text
from .graph_service import GraphService, cosine_similarity
from .ingestion_service import IngestionService
from .retrieval_service import RetrievalService

__all__ = [
    "AnswerStreamer",
    "ChatService",
    "GraphService",
    "IngestionService",
    "RetrievalService",
    "chunk_text",
    "cosine_similarity",
]
