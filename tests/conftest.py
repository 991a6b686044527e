"""
Pytest configuration and shared fixtures.
"""

from collections.abc import Generator

import pytest

from pagewise.adapters.outbound.vector_store.memory_adapter import InMemoryVectorStore
from pagewise.core.domain import ChatMessage, Match
from pagewise.core.ports import EmbeddingPort, LLMPort, ScrapeResult, ScraperPort


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (HTTP API, CLI)")
    config.addinivalue_line("markers", "slow: Slow tests (network, large data)")


class FakeEmbedder(EmbeddingPort):
    """Returns canned vectors; unknown texts map to ``default``."""

    def __init__(self, vectors: dict[str, list[float]] | None = None, default=None, error=None):
        self.vectors = vectors or {}
        self.default = default or [1.0, 0.0, 0.0]
        self.error = error
        self.calls: list[str] = []

    def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.error:
            raise self.error
        return list(self.vectors.get(text, self.default))


class FakeLLM(LLMPort):
    """Yields canned fragments and records how the stream ended."""

    def __init__(self, fragments=None, error: Exception | None = None):
        self.fragments = fragments if fragments is not None else ["Hello", " ", "world"]
        self.error = error
        self.calls: list[dict] = []
        self.closed = False
        self.produced = 0

    def generate_stream(
        self, messages: list[ChatMessage], system_prompt: str | None = None
    ) -> Generator[str, None, None]:
        self.calls.append({"messages": messages, "system_prompt": system_prompt})
        try:
            for fragment in self.fragments:
                self.produced += 1
                yield fragment
            if self.error:
                raise self.error
        finally:
            self.closed = True


class FakeScraper(ScraperPort):
    def __init__(self, markdown: str | None = "# Title\n\nSome content.", title: str | None = "A page"):
        self.markdown = markdown
        self.title = title
        self.calls: list[str] = []

    def scrape(self, url: str) -> ScrapeResult:
        self.calls.append(url)
        return ScrapeResult(markdown=self.markdown, title=self.title, metadata={"sourceURL": url})


def make_match(similarity: float, chunk_id: str = "c", document_id: str = "d", content: str = "text"):
    return Match(chunk_id=chunk_id, document_id=document_id, similarity=similarity, content=content)


@pytest.fixture
def store():
    """Fresh in-memory vector store."""
    return InMemoryVectorStore()


@pytest.fixture
def embedder():
    return FakeEmbedder()


@pytest.fixture
def llm():
    return FakeLLM()


@pytest.fixture
def scraper():
    return FakeScraper()
