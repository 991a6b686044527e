"""Retrieval results handed from the retriever to the answer streamer."""

from dataclasses import dataclass, field

from .document import Match


@dataclass
class RankedMatch:
    """A top-K match joined with its parent document.

    Attributes:
        rank: 1-based position in the ranked list.
        match: The underlying similarity hit.
        title: Parent document title ("Untitled" when unresolved).
        url: Parent document URL, ``None`` when the document could not be resolved.
    """

    rank: int
    match: Match
    title: str
    url: str | None = None

    @property
    def resolved(self) -> bool:
        return self.url is not None


@dataclass
class RetrievalResult:
    """Ranked matches and the grounding context built from them.

    ``grounded`` is False when the search returned no candidates; callers
    then answer without sources.
    """

    query: str
    matches: list[RankedMatch] = field(default_factory=list)
    context: str = ""

    @property
    def grounded(self) -> bool:
        return bool(self.matches)
