"""Sugiyama-style layered graph layout engine.

Phases:
  1. Cycle removal (DFS back-edge reversal)
  2. Rank assignment (longest path)
  3. Dummy node insertion
  4. Crossing minimization (barycenter / median sweeps)
  5. Coordinate assignment
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Union

import networkx as nx

from repograph.config import DEFAULT_CONFIG, LayoutConfig
from repograph.ir.graph import LayoutGraph
from repograph.layout.ordering import OrderingStrategy, get_strategy
from repograph.layout.types import DummyNode, LayoutNode, Point
from repograph.types import LayoutDirection

logger = logging.getLogger(__name__)

Node = Union[str, DummyNode]


def tie_key(node: Node) -> tuple:
    """Sort key: real nodes by ascending id, then dummies by (edge, step)."""
    if isinstance(node, DummyNode):
        return (1, "", node.edge, node.step)
    return (0, node, 0, 0)


# ─── Cycle Removal (DFS) ─────────────────────────────────────────────────────


def find_back_edges(graph: nx.MultiDiGraph) -> set[tuple[str, str]]:
    """Return the edges that close a cycle in a depth-first search.

    Roots and successors are visited in ascending id order, so the result
    depends only on the graph, not on insertion order. Self-loops are back-edges.
    """
    on_stack: set[str] = set()
    done: set[str] = set()
    back_edges: set[tuple[str, str]] = set()

    for root in sorted(graph.nodes):
        if root in done:
            continue
        on_stack.add(root)
        stack = [(root, iter(sorted(graph.successors(root))))]
        while stack:
            node, children = stack[-1]
            for child in children:
                if child in on_stack:
                    back_edges.add((node, child))
                elif child not in done:
                    on_stack.add(child)
                    stack.append((child, iter(sorted(graph.successors(child)))))
                    break
            else:
                stack.pop()
                on_stack.discard(node)
                done.add(node)

    return back_edges


def remove_cycles(graph: nx.MultiDiGraph) -> tuple[nx.MultiDiGraph, set[tuple[str, str]]]:
    """Reverse back-edges and drop self-loops. Returns (dag, reversed_edges)."""
    reversed_edges = find_back_edges(graph)

    dag: nx.MultiDiGraph = nx.MultiDiGraph()
    for node_id in graph.nodes:
        dag.add_node(node_id, **graph.nodes[node_id])

    for src, tgt in graph.edges():
        if src == tgt:
            continue
        if (src, tgt) in reversed_edges:
            dag.add_edge(tgt, src)
        else:
            dag.add_edge(src, tgt)

    return dag, reversed_edges


# ─── Rank Assignment ─────────────────────────────────────────────────────────


class LayerAssignment:
    def __init__(
        self,
        dag: nx.MultiDiGraph,
        ranks: dict[str, int],
        rank_count: int,
        reversed_edges: set[tuple[str, str]],
    ) -> None:
        self.dag = dag
        self.ranks = ranks
        self.rank_count = rank_count
        self.reversed_edges = reversed_edges

    @classmethod
    def assign(cls, lg: LayoutGraph) -> LayerAssignment:
        """Longest-path ranking: sources sit at rank 0, every edge points down."""
        dag, reversed_edges = remove_cycles(lg.digraph)
        ranks: dict[str, int] = {}
        for node_id in nx.lexicographical_topological_sort(nx.DiGraph(dag)):
            ranks[node_id] = max((ranks[pred] + 1 for pred in dag.predecessors(node_id)), default=0)

        rank_count = (max(ranks.values()) + 1) if ranks else 0
        return cls(dag=dag, ranks=ranks, rank_count=rank_count, reversed_edges=reversed_edges)


# ─── Dummy Node Insertion ────────────────────────────────────────────────────


@dataclass
class DummyChain:
    source: str
    target: str
    dummies: list[DummyNode]


@dataclass
class AugmentedGraph:
    graph: nx.MultiDiGraph
    ranks: dict[Node, int]
    rank_count: int
    chains: list[DummyChain]


def insert_dummy_nodes(la: LayerAssignment) -> AugmentedGraph:
    """Split every edge spanning more than one rank into unit-length segments."""
    g: nx.MultiDiGraph = nx.MultiDiGraph()
    g.add_nodes_from(la.dag.nodes)

    ranks: dict[Node, int] = dict(la.ranks)
    chains: list[DummyChain] = []

    for src, tgt in sorted(la.dag.edges()):
        span = ranks[tgt] - ranks[src]
        if span <= 1:
            g.add_edge(src, tgt)
            continue

        edge_index = len(chains)
        dummies: list[DummyNode] = []
        prev: Node = src
        for step in range(span - 1):
            dummy = DummyNode(edge=edge_index, step=step)
            g.add_node(dummy)
            ranks[dummy] = ranks[src] + step + 1
            g.add_edge(prev, dummy)
            dummies.append(dummy)
            prev = dummy
        g.add_edge(prev, tgt)
        chains.append(DummyChain(source=src, target=tgt, dummies=dummies))

    return AugmentedGraph(graph=g, ranks=ranks, rank_count=la.rank_count, chains=chains)


# ─── Crossing Minimization ───────────────────────────────────────────────────


def minimise_crossings(
    aug: AugmentedGraph,
    members: list[Node],
    strategy: OrderingStrategy,
    max_passes: int = DEFAULT_CONFIG.max_ordering_passes,
) -> list[list[Node]]:
    """Order ``members`` (one connected component) rank by rank.

    Alternates down and up sweeps and keeps the ordering with the fewest
    crossings; stops at the first pass that does not improve on it.
    """
    rank_count = max(aug.ranks[n] for n in members) + 1
    ordering: list[list[Node]] = [[] for _ in range(rank_count)]
    for node in sorted(members, key=tie_key):
        ordering[aug.ranks[node]].append(node)

    best = [list(layer) for layer in ordering]
    best_crossings = count_crossings(ordering, aug.graph)

    for _pass in range(max_passes):
        if best_crossings == 0:
            break
        for idx in range(1, rank_count):
            _reorder(ordering[idx], ordering[idx - 1], aug.graph, "incoming", strategy)
        for idx in range(rank_count - 2, -1, -1):
            _reorder(ordering[idx], ordering[idx + 1], aug.graph, "outgoing", strategy)

        crossings = count_crossings(ordering, aug.graph)
        if crossings >= best_crossings:
            break
        best = [list(layer) for layer in ordering]
        best_crossings = crossings

    return best


def _neighbor_positions(node: Node, graph: nx.MultiDiGraph, ref_pos: dict[Node, float], direction: str) -> list[float]:
    if direction == "incoming":
        neighbors = [src for src, _ in graph.in_edges(node)]
    else:
        neighbors = [tgt for _, tgt in graph.out_edges(node)]
    return [ref_pos[nb] for nb in neighbors if nb in ref_pos]


def _reorder(
    layer: list[Node],
    reference: list[Node],
    graph: nx.MultiDiGraph,
    direction: str,
    strategy: OrderingStrategy,
) -> None:
    ref_pos: dict[Node, float] = {nid: float(i) for i, nid in enumerate(reference)}

    def key(item: tuple[int, Node]) -> tuple:
        idx, node = item
        positions = _neighbor_positions(node, graph, ref_pos, direction)
        weight = strategy.weight(positions) if positions else float(idx)
        return (weight, tie_key(node))

    layer[:] = [node for _, node in sorted(enumerate(layer), key=key)]


def count_crossings(ordering: list[list[Node]], graph: nx.MultiDiGraph) -> int:
    total = 0
    for l_idx in range(len(ordering) - 1):
        tgt_pos: dict[Node, int] = {nid: i for i, nid in enumerate(ordering[l_idx + 1])}
        edges: list[tuple[int, int]] = []
        for sp, src_id in enumerate(ordering[l_idx]):
            for _, nb in graph.out_edges(src_id):
                if nb in tgt_pos:
                    edges.append((sp, tgt_pos[nb]))
        for i in range(len(edges)):
            for j in range(i + 1, len(edges)):
                ei, ej = edges[i], edges[j]
                if (ei[0] < ej[0] and ei[1] > ej[1]) or (ei[0] > ej[0] and ei[1] < ej[1]):
                    total += 1
    return total


# ─── Coordinate Assignment ───────────────────────────────────────────────────


def node_extent(node: Node, lg: LayoutGraph, horizontal: bool) -> tuple[float, float]:
    """(breadth, depth): the node's size along the order axis and the rank axis."""
    if isinstance(node, DummyNode):
        return (0.0, 0.0)
    width, height = lg.size(node)
    return (height, width) if horizontal else (width, height)


def _separation(node: Node, config: LayoutConfig) -> float:
    return config.edge_separation if isinstance(node, DummyNode) else config.node_separation


def rank_centres(aug: AugmentedGraph, lg: LayoutGraph, horizontal: bool, config: LayoutConfig) -> list[float]:
    """Rank-axis centre line of every rank; ranks are as deep as their deepest node."""
    depth: list[float] = [0.0] * aug.rank_count
    for node, rank in aug.ranks.items():
        depth[rank] = max(depth[rank], node_extent(node, lg, horizontal)[1])

    centres: list[float] = []
    top = config.margin_x if horizontal else config.margin_y
    for d in depth:
        centres.append(top + d / 2)
        top += d + config.rank_separation
    return centres


def pack_component(
    ordering: list[list[Node]],
    aug: AugmentedGraph,
    lg: LayoutGraph,
    horizontal: bool,
    config: LayoutConfig,
) -> tuple[dict[Node, float], float]:
    """Order-axis centres for one component, relative to its leading edge.

    Returns (centres, breadth of the component).
    """
    lefts: dict[Node, float] = {}
    extents: list[float] = []
    for layer in ordering:
        cursor = 0.0
        prev: Node | None = None
        for node in layer:
            if prev is not None:
                cursor += (_separation(prev, config) + _separation(node, config)) / 2
            lefts[node] = cursor
            cursor += node_extent(node, lg, horizontal)[0]
            prev = node
        extents.append(cursor)

    widest = max(extents, default=0.0)
    for layer, extent in zip(ordering, extents):
        offset = (widest - extent) / 2
        for node in layer:
            lefts[node] += offset

    def centre(node: Node) -> float:
        return lefts[node] + node_extent(node, lg, horizontal)[0] / 2

    # Barycenter refinement: nudge whole layers towards their neighbours.
    for idx in range(1, len(ordering)):
        _shift_layer(ordering[idx], ordering[idx - 1], aug.graph, lefts, centre, "incoming", config)
    for idx in range(len(ordering) - 2, -1, -1):
        _shift_layer(ordering[idx], ordering[idx + 1], aug.graph, lefts, centre, "outgoing", config)

    if lefts:
        min_left = min(lefts.values())
        for node in lefts:
            lefts[node] -= min_left

    centres = {node: centre(node) for node in lefts}
    breadth = max((lefts[n] + node_extent(n, lg, horizontal)[0] for n in lefts), default=0.0)
    return centres, breadth


def _shift_layer(
    layer: list[Node],
    reference: list[Node],
    graph: nx.MultiDiGraph,
    lefts: dict[Node, float],
    centre: Callable[[Node], float],
    direction: str,
    config: LayoutConfig,
) -> None:
    in_reference = set(reference)
    sum_self = 0.0
    sum_other = 0.0
    count = 0
    for node in layer:
        edges = graph.in_edges(node) if direction == "incoming" else graph.out_edges(node)
        for src, tgt in edges:
            other = src if direction == "incoming" else tgt
            if other in in_reference:
                sum_self += centre(node)
                sum_other += centre(other)
                count += 1
    if count == 0:
        return
    shift = round((sum_other - sum_self) / count)
    if shift == 0 or abs(shift) > config.node_separation:
        return
    for node in layer:
        lefts[node] += shift


# ─── SugiyamaLayout Engine ───────────────────────────────────────────────────


class SugiyamaLayout:
    """Sugiyama layered layout engine."""

    def __init__(self, config: LayoutConfig = DEFAULT_CONFIG) -> None:
        self.config = config
        self.strategy = get_strategy(config.ordering)

    def layout(self, lg: LayoutGraph, direction: LayoutDirection) -> dict[str, LayoutNode]:
        """Place every node of ``lg``; returns positioned nodes keyed by id."""
        config = self.config
        horizontal = direction.is_horizontal

        la = LayerAssignment.assign(lg)
        if la.reversed_edges:
            logger.debug("reversed %d back-edge(s) for ranking: %s", len(la.reversed_edges), sorted(la.reversed_edges))
        aug = insert_dummy_nodes(la)

        # Dummies belong to the component of the edge they stand in for.
        dummies_by_source: dict[str, list[DummyNode]] = {}
        for chain in aug.chains:
            dummies_by_source.setdefault(chain.source, []).extend(chain.dummies)

        centres_on_rank = rank_centres(aug, lg, horizontal, config)
        cursor = config.margin_y if horizontal else config.margin_x
        order_centres: dict[Node, float] = {}
        layers: list[list[str]] = [[] for _ in range(aug.rank_count)]

        for component in lg.components():
            members: list[Node] = list(component)
            for node_id in component:
                members.extend(dummies_by_source.get(node_id, []))
            ordering = minimise_crossings(aug, members, self.strategy, config.max_ordering_passes)
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(
                    "component %r: %d rank(s), %d crossing(s)",
                    component[0],
                    len(ordering),
                    count_crossings(ordering, aug.graph),
                )
            centres, breadth = pack_component(ordering, aug, lg, horizontal, config)
            for node, c in centres.items():
                order_centres[node] = cursor + c
            for rank, layer in enumerate(ordering):
                layers[rank].extend(n for n in layer if not isinstance(n, DummyNode))
            cursor += breadth + config.node_separation

        placed: dict[str, LayoutNode] = {}
        for rank, layer in enumerate(layers):
            for order, node_id in enumerate(layer):
                width, height = lg.size(node_id)
                if horizontal:
                    cx, cy = centres_on_rank[rank], order_centres[node_id]
                else:
                    cx, cy = order_centres[node_id], centres_on_rank[rank]
                placed[node_id] = LayoutNode(
                    id=node_id,
                    width=width,
                    height=height,
                    position=Point(x=cx - width / 2, y=cy - height / 2),
                    rank=rank,
                    order=order,
                )
        return placed
