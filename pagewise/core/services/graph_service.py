"""Document similarity graph for exploratory visualization.

Pairwise comparison is quadratic in the number of documents. Personal
corpora are small (tens to low hundreds of pages), so no index is used.
"""

import logging
from collections.abc import Iterable
from typing import Literal

import numpy as np

from ..domain import Chunk, Document, GraphEdge, GraphNode, SimilarityGraph
from ..domain.exceptions import InvalidThresholdError, UnauthenticatedError
from ..ports.vector_store_port import VectorStorePort

logger = logging.getLogger(__name__)

GraphStrategy = Literal["auto", "document", "chunks"]
Aggregation = Literal["halving", "mean"]

DEFAULT_THRESHOLD = 0.6


def cosine_similarity(a: Iterable[float], b: Iterable[float]) -> float:
    """dot(a, b) / (|a| * |b|); 0.0 when either vector has zero length."""
    u = np.asarray(a, dtype=float)
    v = np.asarray(b, dtype=float)
    denominator = np.linalg.norm(u) * np.linalg.norm(v)
    if denominator == 0:
        return 0.0
    return float(np.dot(u, v) / denominator)


def aggregate_chunk_embeddings(
    chunks: Iterable[Chunk],
    aggregation: Aggregation = "halving",
) -> dict[str, np.ndarray]:
    """Fold chunk embeddings into one representative vector per document.

    ``halving`` applies ``avg = (avg + next) / 2`` for every chunk after the
    first, which weights later chunks more heavily. ``mean`` keeps a true
    incremental mean. Both give the same result for one or two chunks.
    """
    averages: dict[str, np.ndarray] = {}
    counts: dict[str, int] = {}

    for chunk in chunks:
        if not chunk.embedding:
            continue
        vector = np.asarray(chunk.embedding, dtype=float)
        current = averages.get(chunk.document_id)

        if current is None:
            averages[chunk.document_id] = vector
            counts[chunk.document_id] = 1
        elif aggregation == "halving":
            averages[chunk.document_id] = (current + vector) / 2
        else:
            counts[chunk.document_id] += 1
            averages[chunk.document_id] = current + (vector - current) / counts[chunk.document_id]

    return averages


def similarity_matrix(vectors: np.ndarray) -> np.ndarray:
    """Cosine similarity between every pair of rows."""
    norms = np.linalg.norm(vectors, axis=1, keepdims=True)
    norms[norms == 0] = 1.0
    unit = vectors / norms
    return unit @ unit.T


class GraphService:
    """Builds the thresholded similarity graph over one owner's documents."""

    def __init__(
        self,
        vector_store: VectorStorePort,
        strategy: GraphStrategy = "auto",
        aggregation: Aggregation = "halving",
    ) -> None:
        """Initialize the graph builder.

        Args:
            vector_store: Source of documents and chunk embeddings.
            strategy: ``document`` uses document-level embeddings only,
                ``chunks`` aggregates chunk embeddings only, ``auto`` prefers
                the document embedding and falls back to the chunk aggregate.
            aggregation: Chunk aggregation rule, see ``aggregate_chunk_embeddings``.
        """
        self.vector_store = vector_store
        self.strategy = strategy
        self.aggregation = aggregation

    def build_graph(
        self,
        owner_id: str,
        threshold: float = DEFAULT_THRESHOLD,
        strategy: GraphStrategy | None = None,
    ) -> SimilarityGraph:
        """Compute nodes and above-threshold edges for ``owner_id``.

        Args:
            owner_id: Whose documents to include.
            threshold: Edges are kept only when similarity is strictly greater.
            strategy: Overrides the configured strategy.

        Returns:
            SimilarityGraph; documents without a usable embedding are left
            out, documents without neighbours appear as isolated nodes.
        """
        if not owner_id:
            raise UnauthenticatedError("An owner id is required to build the graph")
        if not -1.0 <= threshold <= 1.0:
            raise InvalidThresholdError(
                "Similarity threshold must be between -1 and 1",
                context={"threshold": threshold},
            )

        documents = self.vector_store.list_documents(owner_id, with_embeddings=True)
        embedded = self._document_vectors(documents, owner_id, strategy or self.strategy)

        graph = SimilarityGraph(
            nodes=[
                GraphNode(id=doc.doc_id, name=doc.display_name, url=doc.url)
                for doc, _ in embedded
            ]
        )
        if len(embedded) < 2:
            return graph

        similarities = similarity_matrix(np.vstack([vector for _, vector in embedded]))
        for i, j in zip(*np.triu_indices(len(embedded), k=1)):
            value = float(similarities[i, j])
            if value > threshold:
                graph.edges.append(
                    GraphEdge(source=embedded[i][0].doc_id, target=embedded[j][0].doc_id, value=value)
                )

        logger.info(
            "Built graph for owner %s: %d nodes, %d edges (threshold %.2f)",
            owner_id,
            len(graph.nodes),
            len(graph.edges),
            threshold,
        )
        return graph

    def _document_vectors(
        self,
        documents: list[Document],
        owner_id: str,
        strategy: GraphStrategy,
    ) -> list[tuple[Document, np.ndarray]]:
        """Representative vector per document, in the store's listing order."""
        aggregated: dict[str, np.ndarray] = {}
        needs_chunks = strategy == "chunks" or (
            strategy == "auto" and any(not doc.embedding for doc in documents)
        )
        if needs_chunks:
            chunks = self.vector_store.list_chunks(owner_id, with_embeddings=True)
            aggregated = aggregate_chunk_embeddings(chunks, self.aggregation)

        vectors = []
        for doc in documents:
            if strategy != "chunks" and doc.embedding:
                vectors.append((doc, np.asarray(doc.embedding, dtype=float)))
            elif strategy != "document" and doc.doc_id in aggregated:
                vectors.append((doc, aggregated[doc.doc_id]))
        return vectors
