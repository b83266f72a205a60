"""Layout engine entry points."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from repograph.config import DEFAULT_CONFIG, LayoutConfig
from repograph.ir.graph import LayoutGraph
from repograph.layout.sugiyama import SugiyamaLayout
from repograph.layout.types import LayoutEdge, LayoutNode
from repograph.types import LayoutDirection

logger = logging.getLogger(__name__)


def layout(
    nodes: Iterable[LayoutNode],
    edges: Iterable[LayoutEdge],
    direction: LayoutDirection | str | None = None,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> list[LayoutNode]:
    """Assign a top-left position to every node.

    Args:
        nodes: Sized nodes; ids must be unique, width and height positive.
        edges: Directed edges; edges naming an unknown node are ignored.
        direction: TOP_TO_BOTTOM (default) or LEFT_TO_RIGHT, or "TB"/"LR".
        config: Spacing constants and the crossing-reduction strategy.

    Returns:
        New LayoutNode objects in input order, with position, rank and order set.
        The input nodes are left untouched.

    Raises:
        InvalidDirectionError: If ``direction`` is not TB or LR.
        InvalidNodeError: If a node lacks an id or a positive width/height.
    """
    resolved = LayoutDirection.parse(direction)
    engine = SugiyamaLayout(config)
    nodes = list(nodes)
    lg = LayoutGraph.build(nodes, edges)
    if lg.node_count() == 0:
        return []

    logger.debug(
        "layout %s: %d node(s), %d edge(s)",
        resolved.value,
        lg.node_count(),
        lg.edge_count(),
    )
    placed = engine.layout(lg, resolved)
    return [placed[node.id] for node in nodes]


async def layout_async(
    nodes: Iterable[LayoutNode],
    edges: Iterable[LayoutEdge],
    direction: LayoutDirection | str | None = None,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> list[LayoutNode]:
    """Run :func:`layout` in a worker thread so an event loop stays responsive."""
    return await asyncio.to_thread(layout, list(nodes), list(edges), direction, config)
