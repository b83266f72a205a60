"""Graph IR: validates layout input and wraps it in a networkx MultiDiGraph.

This module owns the canonical graph data structure used by the layout
phases. Node sizes live on the graph as ``width``/``height`` attributes;
edges whose endpoints are not in the node set are dropped here, before any
phase sees them.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from numbers import Real
from typing import TYPE_CHECKING

import networkx as nx

from repograph.errors import InvalidNodeError

if TYPE_CHECKING:
    from repograph.layout.types import LayoutEdge, LayoutNode

logger = logging.getLogger(__name__)


def validate_node(node: LayoutNode) -> None:
    """Raise InvalidNodeError unless ``node`` has a usable id and positive size."""
    if not isinstance(node.id, str) or not node.id:
        raise InvalidNodeError(node.id, "id must be a non-empty string")
    for name in ("width", "height"):
        value = getattr(node, name)
        if isinstance(value, bool) or not isinstance(value, Real):
            raise InvalidNodeError(node.id, f"{name} must be a number, got {value!r}")
        if not math.isfinite(value) or value <= 0:
            raise InvalidNodeError(node.id, f"{name} must be positive, got {value!r}")


class LayoutGraph:
    """The validated layout input.

    Wraps a networkx MultiDiGraph and exposes helpers for topology queries.
    """

    def __init__(self, digraph: nx.MultiDiGraph, dropped_edges: list[LayoutEdge]) -> None:
        self.digraph = digraph
        self.dropped_edges = dropped_edges

    @classmethod
    def build(cls, nodes: Iterable[LayoutNode], edges: Iterable[LayoutEdge]) -> LayoutGraph:
        """Validate ``nodes`` and build the graph, ignoring dangling edges."""
        digraph: nx.MultiDiGraph = nx.MultiDiGraph()
        for node in nodes:
            validate_node(node)
            if node.id in digraph:
                raise InvalidNodeError(node.id, "duplicate id")
            digraph.add_node(node.id, width=node.width, height=node.height)

        dropped: list[LayoutEdge] = []
        for edge in edges:
            if edge.source in digraph and edge.target in digraph:
                digraph.add_edge(edge.source, edge.target)
            else:
                dropped.append(edge)
        if dropped:
            logger.debug("ignoring %d edge(s) with a dangling endpoint", len(dropped))

        return cls(digraph=digraph, dropped_edges=dropped)

    def node_count(self) -> int:
        return self.digraph.number_of_nodes()

    def edge_count(self) -> int:
        return self.digraph.number_of_edges()

    def size(self, node_id: str) -> tuple[float, float]:
        attrs = self.digraph.nodes[node_id]
        return (attrs["width"], attrs["height"])

    def components(self) -> list[list[str]]:
        """Weakly connected components, each sorted by id, ordered by smallest id."""
        comps = [sorted(c) for c in nx.weakly_connected_components(self.digraph)]
        comps.sort(key=lambda c: c[0])
        return comps
