"""Scraper Port Interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass
class ScrapeResult:
    """Readable content extracted from a web page."""

    markdown: str | None
    title: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


class ScraperPort(ABC):
    """Abstract interface for fetching a page as markdown text."""

    @abstractmethod
    def scrape(self, url: str) -> ScrapeResult: ...
