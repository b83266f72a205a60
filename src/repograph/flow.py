"""Generate+layout and re-layout over flow-graph payloads.

A flow graph is the renderer's JSON model: ``{"nodes": [...], "edges": [...]}``
where each node is ``{"id", "type", "position", "data"}`` and each edge is
``{"id", "source", "target", ...}``. These helpers size the nodes, run the
layout engine, and merge the resulting positions back into copies of the
payload. Edges pass through unchanged.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from typing import Any

from repograph.config import DEFAULT_CONFIG, LayoutConfig
from repograph.errors import InvalidPayloadError
from repograph.layout.engine import layout
from repograph.layout.types import LayoutEdge, LayoutNode
from repograph.sizing import NodeSizer, default_node_size
from repograph.types import LayoutDirection

logger = logging.getLogger(__name__)

_STROKE_WIDTH: dict[str, int] = {"strong": 3, "normal": 2, "weak": 1}
_EDGE_MARKER: dict[str, str] = {"type": "arrowclosed", "color": "#64748b"}


def _require_list(payload: Mapping[str, Any], key: str) -> list[Any]:
    value = payload.get(key)
    if not isinstance(value, list):
        raise InvalidPayloadError(f"{key!r} must be a list")
    return value


def _require_object(item: Any, kind: str, index: int) -> Mapping[str, Any]:
    if not isinstance(item, Mapping):
        raise InvalidPayloadError(f"{kind} at index {index} is not an object")
    return item


def build_flow_graph(analysis: Mapping[str, Any]) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
    """Turn classifier output into flow nodes and edges with renderer defaults.

    Nodes start at the origin; call :func:`apply_layout` to place them.
    """
    if not isinstance(analysis, Mapping):
        raise InvalidPayloadError("analysis must be an object")
    raw_nodes = _require_list(analysis, "nodes")
    raw_edges = _require_list(analysis, "edges")

    nodes: list[dict[str, Any]] = []
    for index, raw in enumerate(raw_nodes):
        raw = _require_object(raw, "node", index)
        nodes.append(
            {
                "id": raw.get("id") or f"node-{index}",
                "type": "enhanced",
                "position": {"x": 0, "y": 0},
                "data": {
                    "label": raw.get("label"),
                    "description": raw.get("description"),
                    "files": raw.get("files") or [],
                    "category": raw.get("category") or "default",
                    "complexity": raw.get("complexity") or "medium",
                    "dependencies": raw.get("dependencies") or [],
                    "exports": raw.get("exports") or [],
                },
            }
        )

    edges: list[dict[str, Any]] = []
    for index, raw in enumerate(raw_edges):
        raw = _require_object(raw, "edge", index)
        strength = raw.get("strength")
        edges.append(
            {
                "id": raw.get("id") or f"edge-{index}",
                "source": raw.get("source"),
                "target": raw.get("target"),
                "label": raw.get("label"),
                "type": "custom",
                "animated": raw.get("type") == "calls",
                "data": {
                    "label": raw.get("label"),
                    "type": raw.get("type") or "dependency",
                    "strength": strength or "normal",
                },
                "style": {"strokeWidth": _STROKE_WIDTH.get(strength, 2) if isinstance(strength, str) else 2},
                "markerEnd": dict(_EDGE_MARKER),
            }
        )

    return nodes, edges


def apply_layout(
    nodes: list[Mapping[str, Any]],
    edges: list[Mapping[str, Any]],
    direction: LayoutDirection | str | None = None,
    config: LayoutConfig = DEFAULT_CONFIG,
    sizer: NodeSizer = default_node_size,
) -> tuple[list[dict[str, Any]], list[Mapping[str, Any]]]:
    """Size, lay out, and position flow nodes. Returns (nodes, edges).

    The returned nodes are deep copies of the input with ``position`` replaced;
    every other key, including ``data``, is preserved.
    """
    resolved = LayoutDirection.parse(direction)

    layout_nodes: list[LayoutNode] = []
    for index, node in enumerate(nodes):
        node = _require_object(node, "node", index)
        data = node.get("data") or {}
        if not isinstance(data, Mapping):
            raise InvalidPayloadError(f"node at index {index} has non-object data")
        width, height = sizer(data, config)
        layout_nodes.append(LayoutNode(id=node.get("id"), width=width, height=height))

    layout_edges: list[LayoutEdge] = []
    for index, edge in enumerate(edges):
        edge = _require_object(edge, "edge", index)
        layout_edges.append(LayoutEdge(source=edge.get("source"), target=edge.get("target")))

    placed = layout(layout_nodes, layout_edges, resolved, config)

    positioned: list[dict[str, Any]] = []
    for node, result in zip(nodes, placed):
        merged = copy.deepcopy(dict(node))
        merged["position"] = {"x": result.position.x, "y": result.position.y}
        positioned.append(merged)

    logger.debug("positioned %d flow node(s) %s", len(positioned), resolved.value)
    return positioned, edges


def generate_layout(
    analysis: Mapping[str, Any],
    direction: LayoutDirection | str | None = None,
    config: LayoutConfig = DEFAULT_CONFIG,
    sizer: NodeSizer = default_node_size,
) -> dict[str, Any]:
    """Build a flow graph from classifier output and lay it out."""
    nodes, edges = build_flow_graph(analysis)
    positioned, edges = apply_layout(nodes, edges, direction, config, sizer)
    return {"nodes": positioned, "edges": edges}


def relayout(
    payload: Mapping[str, Any],
    direction: LayoutDirection | str | None = None,
    config: LayoutConfig = DEFAULT_CONFIG,
    sizer: NodeSizer = default_node_size,
) -> dict[str, Any]:
    """Recompute positions for an existing flow graph.

    Sizes are derived again from each node's current ``data``, so calling this
    twice with the same direction leaves every position unchanged.

    Node ids must be non-empty strings; a numeric id such as ``1`` raises
    InvalidNodeError rather than being coerced.
    """
    if not isinstance(payload, Mapping):
        raise InvalidPayloadError("payload must be an object")
    nodes = _require_list(payload, "nodes")
    edges = _require_list(payload, "edges")
    positioned, edges = apply_layout(nodes, edges, direction, config, sizer)
    return {"nodes": positioned, "edges": edges}
