"""Similarity graph projection for visualization."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class GraphNode:
    """A document in the graph."""

    id: str
    name: str
    url: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "url": self.url}


@dataclass
class GraphEdge:
    """An undirected link between two documents whose similarity beats the threshold."""

    source: str
    target: str
    value: float

    def to_dict(self) -> dict[str, Any]:
        return {"source": self.source, "target": self.target, "value": self.value}


@dataclass
class SimilarityGraph:
    """Nodes for every document with a usable embedding, edges above threshold."""

    nodes: list[GraphNode] = field(default_factory=list)
    edges: list[GraphEdge] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "links": [edge.to_dict() for edge in self.edges],
        }
