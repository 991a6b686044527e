"""Web page scraper producing markdown-ish text from the main content."""

import logging
import re

import requests
from bs4 import BeautifulSoup, NavigableString, Tag

from ....core.domain.exceptions import ScrapingError
from ....core.ports.scraper_port import ScrapeResult, ScraperPort

logger = logging.getLogger(__name__)

# Page furniture that never belongs to the main content
EXCLUDED_TAGS = ["nav", "footer", "aside", "script", "style", "form", "noscript", "svg"]
MAIN_CONTENT_SELECTORS = ["main", "article", "[role=main]", "body"]
BLOCK_TAGS = ["p", "pre", "blockquote", "li", "h1", "h2", "h3", "h4", "h5", "h6", "table"]
WHITESPACE = re.compile(r"\s+")


def _inline_text(element: Tag) -> str:
    return WHITESPACE.sub(" ", element.get_text(" ", strip=True)).strip()


def _render_block(element: Tag) -> str | None:
    """Markdown for one block element, or None if it has no text."""
    name = element.name
    if name == "pre":
        code = element.get_text().strip("\n")
        return f"```\n{code}\n```" if code.strip() else None

    text = _inline_text(element)
    if not text:
        return None
    if name in ("h1", "h2", "h3", "h4", "h5", "h6"):
        return f"{'#' * int(name[1])} {text}"
    if name == "li":
        return f"- {text}"
    if name == "blockquote":
        return f"> {text}"
    if name == "table":
        rows = [
            " | ".join(_inline_text(cell) for cell in row.find_all(["th", "td"]))
            for row in element.find_all("tr")
        ]
        return "\n".join(row for row in rows if row.strip()) or None
    return text


def html_to_markdown(root: Tag) -> str:
    """Render block-level content as paragraphs separated by blank lines.

    Blocks nested inside other blocks (a paragraph in a list item, a list in
    a blockquote) are rendered once, by their outermost block ancestor.
    """
    blocks: list[str] = []
    for element in root.find_all(BLOCK_TAGS):
        if element.find_parent(BLOCK_TAGS) is not None:
            continue
        rendered = _render_block(element)
        if rendered:
            blocks.append(rendered)

    if not blocks:
        # Pages built from bare divs and text nodes
        text = "\n".join(
            WHITESPACE.sub(" ", s).strip()
            for s in root.find_all(string=True)
            if isinstance(s, NavigableString) and s.strip()
        )
        return text.strip()

    return "\n\n".join(blocks)


class WebScraper(ScraperPort):
    """Fetches pages with requests and extracts the main content with BeautifulSoup."""

    def __init__(self, timeout: float = 30.0, user_agent: str | None = None) -> None:
        """Initialize the scraper.

        Args:
            timeout: Request timeout in seconds.
            user_agent: User-Agent header sent with every request.
        """
        self.timeout = timeout
        self.session = requests.Session()
        if user_agent:
            self.session.headers.update({"User-Agent": user_agent})

    def scrape(self, url: str) -> ScrapeResult:
        """Fetch ``url`` and return its main content as markdown.

        Raises:
            ScrapingError: If the request fails or the response is not HTML.
        """
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise ScrapingError("Failed to fetch URL", cause=e, context={"url": url}) from e

        content_type = response.headers.get("Content-Type", "")
        if content_type and "html" not in content_type and "text" not in content_type:
            raise ScrapingError(
                "URL did not return an HTML page",
                context={"url": url, "content_type": content_type},
            )

        return self.parse(response.text, url)

    def parse(self, html: str, url: str = "") -> ScrapeResult:
        """Extract title, metadata and markdown from an HTML document."""
        soup = BeautifulSoup(html, "lxml")

        title = None
        og_title = soup.find("meta", attrs={"property": "og:title"})
        if og_title and og_title.get("content"):
            title = og_title["content"].strip()
        elif soup.title and soup.title.string:
            title = soup.title.string.strip()

        metadata = {"sourceURL": url}
        description = soup.find("meta", attrs={"name": "description"})
        if description and description.get("content"):
            metadata["description"] = description["content"].strip()
        if soup.html and soup.html.get("lang"):
            metadata["language"] = soup.html["lang"]

        for tag in soup(EXCLUDED_TAGS):
            tag.decompose()
        for image in soup.find_all("img", src=re.compile(r"^data:")):
            image.decompose()

        root = None
        for selector in MAIN_CONTENT_SELECTORS:
            root = soup.select_one(selector)
            if root is not None:
                break

        markdown = html_to_markdown(root) if root is not None else ""
        logger.debug("Scraped %d characters from %s", len(markdown), url)
        return ScrapeResult(markdown=markdown or None, title=title or None, metadata=metadata)
