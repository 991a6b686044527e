"""Composition root wiring adapters to the core services."""

from __future__ import annotations

import logging
from functools import lru_cache

from ..adapters.common.rate_limiter import RateLimiter
from ..adapters.outbound.embedding.gemini_embedding import (
    DOCUMENT_TASK,
    QUERY_TASK,
    GeminiEmbeddingAdapter,
)
from ..adapters.outbound.llm.gemini_adapter import GeminiAdapter
from ..adapters.outbound.scraper.web_scraper import WebScraper
from ..adapters.outbound.vector_store.memory_adapter import InMemoryVectorStore
from ..adapters.outbound.vector_store.qdrant_adapter import QdrantAdapter
from ..config import settings
from ..core.ports import VectorStorePort
from ..core.services.answer_streamer import AnswerStreamer
from ..core.services.chat_service import ChatService
from ..core.services.graph_service import GraphService
from ..core.services.ingestion_service import IngestionService
from ..core.services.retrieval_service import RetrievalService

logger = logging.getLogger(__name__)


@lru_cache
def get_vector_store() -> VectorStorePort:
    if settings.vector_backend == "memory":
        logger.info("Initializing InMemoryVectorStore...")
        return InMemoryVectorStore()
    logger.info("Initializing QdrantAdapter...")
    return QdrantAdapter(
        url=settings.qdrant_url,
        api_key=settings.qdrant_api_key,
        embedding_dimension=settings.embedding_dimension,
    )


@lru_cache
def get_embedding_rate_limiter() -> RateLimiter:
    return RateLimiter(settings.embedding_requests_per_minute)


def _embedder(task_type: str) -> GeminiEmbeddingAdapter:
    return GeminiEmbeddingAdapter(
        api_key=settings.google_api_key,
        model_name=settings.embedding_model,
        task_type=task_type,
        dimension=settings.embedding_dimension,
        rate_limiter=get_embedding_rate_limiter(),
    )


@lru_cache
def get_query_embedder() -> GeminiEmbeddingAdapter:
    return _embedder(QUERY_TASK)


@lru_cache
def get_document_embedder() -> GeminiEmbeddingAdapter:
    return _embedder(DOCUMENT_TASK)


@lru_cache
def get_llm() -> GeminiAdapter:
    logger.info("Initializing GeminiAdapter...")
    return GeminiAdapter(
        api_key=settings.google_api_key,
        model=settings.llm_model,
        temperature=settings.llm_temperature,
        rate_limiter=RateLimiter(settings.llm_requests_per_minute),
    )


@lru_cache
def get_scraper() -> WebScraper:
    return WebScraper(timeout=settings.scrape_timeout, user_agent=settings.scrape_user_agent)


@lru_cache
def get_retriever() -> RetrievalService:
    return RetrievalService(
        embedder=get_query_embedder(),
        vector_store=get_vector_store(),
        candidate_count=settings.candidate_count,
        top_k=settings.top_k,
        max_context_chars=settings.max_context_chars,
    )


@lru_cache
def get_chat_service() -> ChatService:
    logger.info("Initializing ChatService...")
    return ChatService(retriever=get_retriever(), streamer=AnswerStreamer(get_llm()))


@lru_cache
def get_ingestion_service() -> IngestionService:
    logger.info("Initializing IngestionService...")
    return IngestionService(
        scraper=get_scraper(),
        embedder=get_document_embedder(),
        vector_store=get_vector_store(),
        chunk_size=settings.chunk_size,
        chunk_overlap=settings.chunk_overlap,
        embedding_workers=settings.embedding_workers,
    )


@lru_cache
def get_graph_service() -> GraphService:
    return GraphService(
        vector_store=get_vector_store(),
        strategy=settings.graph_strategy,
        aggregation=settings.graph_aggregation,
    )
