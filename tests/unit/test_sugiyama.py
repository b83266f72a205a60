"""Tests for repograph.layout.sugiyama: the individual layout phases.

Covers:
  - find_back_edges / remove_cycles (DFS cycle breaking)
  - LayerAssignment (longest-path ranking)
  - insert_dummy_nodes
  - minimise_crossings / count_crossings
  - ordering strategies (barycenter, median)
  - rank_centres / pack_component (coordinate assignment)
"""

from __future__ import annotations

import networkx as nx
import pytest

from repograph.config import DEFAULT_CONFIG
from repograph.errors import LayoutError
from repograph.ir.graph import LayoutGraph
from repograph.layout.ordering import Barycenter, Median, available_strategies, get_strategy
from repograph.layout.sugiyama import (
    AugmentedGraph,
    LayerAssignment,
    SugiyamaLayout,
    count_crossings,
    find_back_edges,
    insert_dummy_nodes,
    minimise_crossings,
    pack_component,
    rank_centres,
    remove_cycles,
    tie_key,
)
from repograph.layout.types import DummyNode, LayoutEdge, LayoutNode
from repograph.types import LayoutDirection

# ─── Helpers ──────────────────────────────────────────────────────────────────


def make_graph(*edges: tuple[str, str]) -> nx.MultiDiGraph:
    """Build a MultiDiGraph from a list of (src, tgt) string pairs."""
    g: nx.MultiDiGraph = nx.MultiDiGraph()
    for src, tgt in edges:
        g.add_edge(src, tgt)
    return g


def make_layout_graph(edges: list[tuple[str, str]], sizes: dict[str, tuple[int, int]] | None = None) -> LayoutGraph:
    """Build a LayoutGraph; nodes default to 280×100."""
    sizes = dict(sizes or {})
    for src, tgt in edges:
        sizes.setdefault(src, (280, 100))
        sizes.setdefault(tgt, (280, 100))
    nodes = [LayoutNode(id=nid, width=w, height=h) for nid, (w, h) in sizes.items()]
    return LayoutGraph.build(nodes, [LayoutEdge(source=s, target=t) for s, t in edges])


def make_augmented_graph(edges: list[tuple[str, str]], ranks: dict[str, int]) -> AugmentedGraph:
    """Build a minimal AugmentedGraph from (src, tgt) edges and explicit ranks."""
    g: nx.MultiDiGraph = nx.MultiDiGraph()
    g.add_nodes_from(ranks)
    for src, tgt in edges:
        g.add_edge(src, tgt)
    rank_count = (max(ranks.values()) + 1) if ranks else 0
    return AugmentedGraph(graph=g, ranks=dict(ranks), rank_count=rank_count, chains=[])


# ─── Cycle Removal Tests ──────────────────────────────────────────────────────


class TestFindBackEdges:
    def test_dag_has_no_back_edges(self):
        """A → B → C (simple DAG): no back-edges."""
        assert find_back_edges(make_graph(("A", "B"), ("B", "C"))) == set()

    def test_two_cycle(self):
        """A → B → A: the DFS from A closes the cycle on B → A."""
        assert find_back_edges(make_graph(("A", "B"), ("B", "A"))) == {("B", "A")}

    def test_self_loop(self):
        assert find_back_edges(make_graph(("A", "A"))) == {("A", "A")}

    def test_complex_cycle(self):
        """A → B → C → A plus D → B: only C → A closes a cycle; D → B is a cross edge."""
        g = make_graph(("A", "B"), ("B", "C"), ("C", "A"), ("D", "B"))
        assert find_back_edges(g) == {("C", "A")}

    def test_roots_visited_by_id(self):
        """Insertion order does not change the result: the search always starts at the smallest id."""
        forward = make_graph(("B", "A"), ("A", "B"))
        backward = make_graph(("A", "B"), ("B", "A"))
        assert find_back_edges(forward) == find_back_edges(backward) == {("B", "A")}

    def test_long_chain_no_recursion_limit(self):
        """The search is iterative, so very deep graphs do not hit the recursion limit."""
        ids = [f"n{i:05d}" for i in range(5000)]
        g = make_graph(*zip(ids, ids[1:]))
        g.add_edge(ids[-1], ids[0])
        assert find_back_edges(g) == {(ids[-1], ids[0])}


class TestRemoveCycles:
    def test_dag_unchanged(self):
        g = make_graph(("A", "B"), ("B", "C"))
        dag, reversed_edges = remove_cycles(g)
        assert reversed_edges == set()
        assert sorted(dag.edges()) == [("A", "B"), ("B", "C")]

    def test_single_cycle_reversed(self):
        """A → B → A: B → A is reversed, leaving two parallel A → B edges."""
        dag, reversed_edges = remove_cycles(make_graph(("A", "B"), ("B", "A")))
        assert reversed_edges == {("B", "A")}
        assert nx.is_directed_acyclic_graph(dag)
        assert sorted(dag.edges()) == [("A", "B"), ("A", "B")]

    def test_self_loop_removed(self):
        dag, reversed_edges = remove_cycles(make_graph(("A", "A")))
        assert len(reversed_edges) == 1
        assert dag.number_of_nodes() == 1
        assert dag.number_of_edges() == 0

    def test_complex_cycle(self):
        g = make_graph(("A", "B"), ("B", "C"), ("C", "A"), ("D", "B"), ("C", "D"))
        dag, reversed_edges = remove_cycles(g)
        assert nx.is_directed_acyclic_graph(dag)
        assert len(reversed_edges) >= 1

    def test_empty_graph(self):
        dag, reversed_edges = remove_cycles(nx.MultiDiGraph())
        assert dag.number_of_nodes() == 0
        assert reversed_edges == set()

    def test_node_attributes_kept(self):
        lg = make_layout_graph([("A", "B")], {"A": (10, 20)})
        dag, _ = remove_cycles(lg.digraph)
        assert dag.nodes["A"] == {"width": 10, "height": 20}


# ─── Rank Assignment Tests ────────────────────────────────────────────────────


class TestLayerAssignment:
    def test_chain(self):
        la = LayerAssignment.assign(make_layout_graph([("A", "B"), ("B", "C")]))
        assert la.ranks == {"A": 0, "B": 1, "C": 2}
        assert la.rank_count == 3

    def test_longest_path_wins(self):
        """A → C directly and via B: C sits below B, not next to it."""
        la = LayerAssignment.assign(make_layout_graph([("A", "B"), ("B", "C"), ("A", "C")]))
        assert la.ranks == {"A": 0, "B": 1, "C": 2}

    def test_components_start_at_zero(self):
        la = LayerAssignment.assign(make_layout_graph([("A", "B"), ("B", "C"), ("X", "Y")]))
        assert la.ranks["X"] == 0
        assert la.ranks["Y"] == 1

    def test_cycle_ranked(self):
        la = LayerAssignment.assign(make_layout_graph([("A", "B"), ("B", "C"), ("C", "A")]))
        assert la.ranks == {"A": 0, "B": 1, "C": 2}
        assert la.reversed_edges == {("C", "A")}

    def test_isolated_node(self):
        lg = LayoutGraph.build([LayoutNode(id="solo", width=1, height=1)], [])
        la = LayerAssignment.assign(lg)
        assert la.ranks == {"solo": 0}
        assert la.rank_count == 1

    def test_empty(self):
        la = LayerAssignment.assign(LayoutGraph.build([], []))
        assert la.ranks == {}
        assert la.rank_count == 0


# ─── Dummy Node Insertion Tests ───────────────────────────────────────────────


class TestInsertDummyNodes:
    def test_short_edges_untouched(self):
        aug = insert_dummy_nodes(LayerAssignment.assign(make_layout_graph([("A", "B"), ("B", "C")])))
        assert aug.chains == []
        assert aug.graph.number_of_edges() == 2

    def test_long_edge_split(self):
        """A → C spans two ranks and gets one dummy on rank 1."""
        la = LayerAssignment.assign(make_layout_graph([("A", "B"), ("B", "C"), ("A", "C")]))
        aug = insert_dummy_nodes(la)
        dummy = DummyNode(edge=0, step=0)
        assert len(aug.chains) == 1
        assert aug.chains[0].source == "A"
        assert aug.chains[0].target == "C"
        assert aug.chains[0].dummies == [dummy]
        assert aug.ranks[dummy] == 1
        assert aug.graph.has_edge("A", dummy)
        assert aug.graph.has_edge(dummy, "C")
        assert not aug.graph.has_edge("A", "C")
        assert aug.graph.number_of_edges() == 4

    def test_every_edge_spans_one_rank(self):
        edges = [("A", "B"), ("B", "C"), ("C", "D"), ("A", "D"), ("A", "C")]
        aug = insert_dummy_nodes(LayerAssignment.assign(make_layout_graph(edges)))
        for src, tgt in aug.graph.edges():
            assert aug.ranks[tgt] == aug.ranks[src] + 1

    def test_parallel_long_edges_get_separate_chains(self):
        edges = [("A", "B"), ("B", "C"), ("A", "C"), ("A", "C")]
        aug = insert_dummy_nodes(LayerAssignment.assign(make_layout_graph(edges)))
        assert len(aug.chains) == 2
        assert aug.chains[0].dummies != aug.chains[1].dummies


# ─── Crossing Minimization Tests ──────────────────────────────────────────────


class TestCountCrossings:
    def test_no_crossing(self):
        g = make_graph(("A", "C"), ("B", "D"))
        assert count_crossings([["A", "B"], ["C", "D"]], g) == 0

    def test_one_crossing(self):
        g = make_graph(("A", "D"), ("B", "C"))
        assert count_crossings([["A", "B"], ["C", "D"]], g) == 1

    def test_parallel_edges_counted(self):
        g = make_graph(("A", "D"), ("A", "D"), ("B", "C"))
        assert count_crossings([["A", "B"], ["C", "D"]], g) == 2

    def test_empty(self):
        assert count_crossings([], nx.MultiDiGraph()) == 0


class TestMinimiseCrossings:
    def test_untangles_cross(self):
        """A → D, B → C starts crossed; one down sweep swaps C and D."""
        aug = make_augmented_graph([("A", "D"), ("B", "C")], {"A": 0, "B": 0, "C": 1, "D": 1})
        ordering = minimise_crossings(aug, ["A", "B", "C", "D"], Barycenter())
        assert ordering == [["A", "B"], ["D", "C"]]
        assert count_crossings(ordering, aug.graph) == 0

    def test_initial_order_by_id(self):
        aug = make_augmented_graph([], {"c": 0, "a": 0, "b": 0})
        assert minimise_crossings(aug, ["c", "a", "b"], Barycenter()) == [["a", "b", "c"]]

    def test_never_worse_than_initial(self):
        edges = [("A", "F"), ("B", "D"), ("C", "E"), ("A", "E"), ("C", "D")]
        ranks = {"A": 0, "B": 0, "C": 0, "D": 1, "E": 1, "F": 1}
        aug = make_augmented_graph(edges, ranks)
        initial = [["A", "B", "C"], ["D", "E", "F"]]
        for strategy in (Barycenter(), Median()):
            ordering = minimise_crossings(aug, list(ranks), strategy)
            assert count_crossings(ordering, aug.graph) <= count_crossings(initial, aug.graph)

    def test_dummies_after_real_nodes_initially(self):
        dummy = DummyNode(edge=0, step=0)
        assert sorted(["b", dummy, "a"], key=tie_key) == ["a", "b", dummy]


class TestStrategies:
    def test_barycenter(self):
        assert Barycenter().weight([0.0, 1.0, 5.0]) == 2.0

    def test_median_odd(self):
        assert Median().weight([5.0, 0.0, 1.0]) == 1.0

    def test_median_two(self):
        assert Median().weight([1.0, 4.0]) == 2.5

    def test_median_even_weighted(self):
        """Four positions: interpolate between the middle pair towards the tighter side."""
        assert Median().weight([0.0, 1.0, 2.0, 3.0]) == 1.5
        assert Median().weight([0.0, 1.0, 2.0, 10.0]) == pytest.approx((1.0 * 8 + 2.0 * 1) / 9)

    def test_registry(self):
        assert available_strategies() == ["barycenter", "median"]
        assert isinstance(get_strategy("median"), Median)

    def test_unknown_strategy(self):
        with pytest.raises(LayoutError):
            get_strategy("nope")


# ─── Coordinate Assignment Tests ──────────────────────────────────────────────


class TestRankCentres:
    def test_vertical(self):
        lg = make_layout_graph([("A", "B")], {"A": (280, 100), "B": (280, 130)})
        aug = insert_dummy_nodes(LayerAssignment.assign(lg))
        assert rank_centres(aug, lg, False, DEFAULT_CONFIG) == [100, 315]

    def test_horizontal_uses_width(self):
        lg = make_layout_graph([("A", "B")], {"A": (280, 100), "B": (280, 130)})
        aug = insert_dummy_nodes(LayerAssignment.assign(lg))
        assert rank_centres(aug, lg, True, DEFAULT_CONFIG) == [190, 570]


class TestPackComponent:
    def test_dummy_uses_edge_separation(self):
        """B and the dummy for A → C share rank 1, spaced by (node_sep + edge_sep) / 2."""
        lg = make_layout_graph([("A", "B"), ("B", "C"), ("A", "C")])
        aug = insert_dummy_nodes(LayerAssignment.assign(lg))
        members = sorted(aug.ranks, key=tie_key)
        ordering = minimise_crossings(aug, members, Barycenter())
        centres, breadth = pack_component(ordering, aug, lg, False, DEFAULT_CONFIG)
        dummy = DummyNode(edge=0, step=0)
        gap = abs(centres[dummy] - centres["B"]) - 140
        assert gap == (DEFAULT_CONFIG.node_separation + DEFAULT_CONFIG.edge_separation) / 2
        assert min(centres[n] - 140 for n in ("A", "B", "C")) >= 0
        assert breadth >= 280

    def test_single_column(self):
        lg = make_layout_graph([("A", "B"), ("B", "C")])
        aug = insert_dummy_nodes(LayerAssignment.assign(lg))
        ordering = minimise_crossings(aug, ["A", "B", "C"], Barycenter())
        centres, breadth = pack_component(ordering, aug, lg, False, DEFAULT_CONFIG)
        assert centres == {"A": 140, "B": 140, "C": 140}
        assert breadth == 280

    def test_horizontal_uses_height(self):
        lg = make_layout_graph([("A", "B"), ("A", "C")])
        aug = insert_dummy_nodes(LayerAssignment.assign(lg))
        ordering = minimise_crossings(aug, ["A", "B", "C"], Barycenter())
        centres, breadth = pack_component(ordering, aug, lg, True, DEFAULT_CONFIG)
        assert centres["C"] - centres["B"] == 100 + 80
        assert breadth == 100 + 80 + 100


class TestSugiyamaLayout:
    def test_returns_every_node(self):
        lg = make_layout_graph([("A", "B"), ("C", "D")])
        placed = SugiyamaLayout().layout(lg, LayoutDirection.TOP_TO_BOTTOM)
        assert set(placed) == {"A", "B", "C", "D"}
        assert placed["C"].order == 1
        assert placed["D"].rank == 1

    def test_empty_graph(self):
        assert SugiyamaLayout().layout(LayoutGraph.build([], []), LayoutDirection.LEFT_TO_RIGHT) == {}
