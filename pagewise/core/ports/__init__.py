"""Capability interfaces the core depends on."""

from .embedding_port import EmbeddingPort
from .llm_port import LLMPort
from .scraper_port import ScrapeResult, ScraperPort
from .vector_store_port import VectorStorePort

__all__ = ["EmbeddingPort", "LLMPort", "ScrapeResult", "ScraperPort", "VectorStorePort"]
