"""Query-time retrieval: similarity search, ranking and context assembly."""

import logging

from ..domain import Document, Match, RankedMatch, RetrievalResult
from ..domain.exceptions import EmptyQueryError, UnauthenticatedError
from ..ports.embedding_port import EmbeddingPort
from ..ports.vector_store_port import VectorStorePort

logger = logging.getLogger(__name__)

# Ranking is the only gate; the store must return candidates whenever any exist
SEARCH_THRESHOLD = 0.0
CONTEXT_SEPARATOR = "\n\n---\n\n"


def rank_matches(candidates: list[Match], top_k: int) -> list[Match]:
    """Sort by similarity descending and keep the first ``top_k``.

    ``sorted`` is stable with ``reverse=True``, so ties keep retrieval order.
    """
    return sorted(candidates, key=lambda match: match.similarity, reverse=True)[:top_k]


def format_source(ranked: RankedMatch, content: str | None = None) -> str:
    """Header plus raw chunk text for one ranked passage."""
    body = ranked.match.content if content is None else content
    return (
        f'[Source {ranked.rank} - "{ranked.title}" '
        f"(similarity: {ranked.match.similarity:.2f})]\n{body}"
    )


def build_context(
    ranked: list[RankedMatch],
    max_chars: int | None = None,
) -> tuple[list[RankedMatch], str]:
    """Join ranked passages into the grounding context.

    With ``max_chars`` set, passages that no longer fit are dropped (the
    first passage is truncated instead), and only the passages that made it
    into the context are returned.

    Returns:
        Tuple of (passages included, context string).
    """
    included: list[RankedMatch] = []
    parts: list[str] = []
    used = 0

    for item in ranked:
        entry = format_source(item)
        cost = len(entry) + (len(CONTEXT_SEPARATOR) if parts else 0)

        if max_chars is not None and used + cost > max_chars:
            if parts:
                logger.debug(
                    "Context budget of %d chars reached, dropping %d passages",
                    max_chars,
                    len(ranked) - len(included),
                )
                break
            header_len = len(format_source(item, content=""))
            entry = format_source(item, content=item.match.content[: max(max_chars - header_len, 0)])
            cost = len(entry)

        included.append(item)
        parts.append(entry)
        used += cost

    return included, CONTEXT_SEPARATOR.join(parts)


class RetrievalService:
    """Turns a query into ranked supporting passages for one owner."""

    def __init__(
        self,
        embedder: EmbeddingPort,
        vector_store: VectorStorePort,
        candidate_count: int = 15,
        top_k: int = 5,
        max_context_chars: int | None = None,
    ) -> None:
        """Initialize the retriever.

        Args:
            embedder: Embedding gateway for the query text.
            vector_store: Store answering owner-scoped similarity queries.
            candidate_count: Number of candidates requested from the store.
            top_k: Number of passages kept after ranking.
            max_context_chars: Optional character budget for the context string.
        """
        self.embedder = embedder
        self.vector_store = vector_store
        self.candidate_count = candidate_count
        self.top_k = top_k
        self.max_context_chars = max_context_chars

    def retrieve(
        self,
        query_text: str,
        owner_id: str,
        candidate_count: int | None = None,
        top_k: int | None = None,
    ) -> RetrievalResult:
        """Find, rank and format the passages supporting ``query_text``.

        Args:
            query_text: The user's question.
            owner_id: Only this user's chunks are searched.
            candidate_count: Overrides the configured candidate count.
            top_k: Overrides the configured top-K.

        Returns:
            RetrievalResult; with no candidates its match list is empty and
            ``grounded`` is False.

        Raises:
            EmptyQueryError: If the query is blank.
            UnauthenticatedError: If no owner id is given.
        """
        if not query_text or not query_text.strip():
            raise EmptyQueryError("Query cannot be empty or whitespace only")
        if not owner_id:
            raise UnauthenticatedError("An owner id is required for retrieval")

        if candidate_count is None:
            candidate_count = self.candidate_count
        if top_k is None:
            top_k = self.top_k

        logger.debug("Generating query embedding...")
        query_vector = self.embedder.embed(query_text)

        logger.debug("Searching for relevant chunks...")
        candidates = self.vector_store.similarity_search(
            query_vector,
            owner_id,
            threshold=SEARCH_THRESHOLD,
            limit=candidate_count,
        )

        if not candidates:
            logger.warning("No chunks found for owner %s", owner_id, extra={"owner_id": owner_id})
            return RetrievalResult(query=query_text)

        top_matches = rank_matches(candidates, top_k)
        logger.info("Found matches: %d", len(top_matches))
        for position, match in enumerate(top_matches, start=1):
            logger.debug("Match %d: similarity=%.3f", position, match.similarity)

        documents = self._resolve_documents(top_matches, owner_id)
        ranked = []
        for position, match in enumerate(top_matches, start=1):
            document = documents.get(match.document_id)
            ranked.append(
                RankedMatch(
                    rank=position,
                    match=match,
                    title=document.display_name if document else "Untitled",
                    url=document.url if document else None,
                )
            )

        ranked, context = build_context(ranked, self.max_context_chars)
        return RetrievalResult(query=query_text, matches=ranked, context=context)

    def _resolve_documents(self, matches: list[Match], owner_id: str) -> dict[str, Document]:
        """Look up parent documents once per distinct document id."""
        document_ids = list(dict.fromkeys(match.document_id for match in matches))
        documents = self.vector_store.get_documents(document_ids, owner_id)
        return {doc.doc_id: doc for doc in documents if doc.doc_id}
