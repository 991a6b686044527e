"""Configuration management for pagewise."""

from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _sanitize_secret(value: str) -> str:
    """Remove BOM characters and whitespace from secrets.

    Secrets pasted into environment files may carry a BOM that breaks HTTP
    headers.
    """
    if not value:
        return value
    return value.lstrip("\ufeff").strip()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Google AI API
    google_api_key: str = ""

    # Vector store
    vector_backend: Literal["qdrant", "memory"] = "qdrant"
    qdrant_url: str = ""
    qdrant_api_key: str = ""

    @field_validator("google_api_key", "qdrant_api_key", "qdrant_url", mode="after")
    @classmethod
    def sanitize_secrets(cls, value: str) -> str:
        """Remove BOM and whitespace from secret values."""
        return _sanitize_secret(value)

    # Model settings
    embedding_model: str = "gemini-embedding-001"
    embedding_dimension: int = 3072
    llm_model: str = "gemini-2.0-flash"
    llm_temperature: float = 0.7
    llm_requests_per_minute: int | None = 15
    embedding_requests_per_minute: int | None = 60
    embedding_workers: int = 1

    # RAG settings
    chunk_size: int = 20000
    chunk_overlap: int = 200
    candidate_count: int = 15
    top_k: int = 5
    max_context_chars: int | None = None

    # Similarity graph
    graph_threshold: float = 0.6
    graph_strategy: Literal["auto", "document", "chunks"] = "auto"
    graph_aggregation: Literal["halving", "mean"] = "halving"

    # Scraping
    scrape_timeout: float = 30.0
    scrape_user_agent: str = "Mozilla/5.0 (compatible; pagewise/1.0; +https://github.com/pagewise)"

    # Access: bearer token -> user id
    api_tokens: dict[str, str] = {}
    cli_user_id: str = "local"
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Logging
    log_level: str = "INFO"
    log_json: bool = False
    debug: bool = False

    @field_validator("chunk_size", "candidate_count", "top_k", "embedding_workers")
    @classmethod
    def must_be_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be positive")
        return value

    @field_validator("chunk_overlap")
    @classmethod
    def must_not_be_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("must not be negative")
        return value

    @field_validator("graph_threshold")
    @classmethod
    def threshold_in_range(cls, value: float) -> float:
        if not -1.0 <= value <= 1.0:
            raise ValueError("must be between -1 and 1")
        return value


# Global settings instance
settings = Settings()
