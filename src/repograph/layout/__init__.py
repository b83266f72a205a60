"""Layered layout engine public API."""

from __future__ import annotations

from repograph.layout.engine import layout, layout_async
from repograph.layout.ordering import Barycenter, Median, OrderingStrategy, available_strategies, get_strategy
from repograph.layout.sugiyama import (
    AugmentedGraph,
    DummyChain,
    LayerAssignment,
    SugiyamaLayout,
    count_crossings,
    find_back_edges,
    insert_dummy_nodes,
    minimise_crossings,
    pack_component,
    rank_centres,
    remove_cycles,
)
from repograph.layout.types import DummyNode, LayoutEdge, LayoutNode, Point

__all__ = [
    "AugmentedGraph",
    "Barycenter",
    "DummyChain",
    "DummyNode",
    "LayerAssignment",
    "LayoutEdge",
    "LayoutNode",
    "Median",
    "OrderingStrategy",
    "Point",
    "SugiyamaLayout",
    "available_strategies",
    "count_crossings",
    "find_back_edges",
    "get_strategy",
    "insert_dummy_nodes",
    "layout",
    "layout_async",
    "minimise_crossings",
    "pack_component",
    "rank_centres",
    "remove_cycles",
]
