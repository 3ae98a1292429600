"""Tests for the graph algorithms."""

import networkx as nx
import pytest

from depgraph_cli.metrics import (
    FrozenGraph,
    betweenness,
    degrees,
    find_cycles,
    pagerank,
    strongly_connected_components,
)


def graph(nodes, edges):
    return FrozenGraph.from_edges(nodes, edges)


class TestFrozenGraph:
    """Tests for the index-based graph."""

    def test_builds_adjacency(self):
        """Test node ids map to integer positions in the digraph."""
        g = graph(["a", "b", "c"], [("a", "b"), ("a", "c"), ("c", "b")])
        assert len(g) == 3
        assert list(g.digraph.successors(0)) == [1, 2]
        assert sorted(g.digraph.predecessors(1)) == [0, 2]
        assert g.node_ids[2] == "c"

    def test_drops_duplicates_and_unknown_nodes(self):
        """Test repeated edges and edges to unknown ids are ignored."""
        g = graph(["a", "b"], [("a", "b"), ("a", "b"), ("a", "zzz")])
        assert g.edges == ((0, 1),)

    def test_is_immutable(self):
        """Test the graph cannot be mutated after construction."""
        g = graph(["a"], [])
        with pytest.raises(Exception):
            g.node_ids = ("b",)
        assert nx.is_frozen(g.digraph)
        with pytest.raises(nx.NetworkXError):
            g.digraph.add_edge(0, 0)


class TestDegrees:
    """Tests for degree counts."""

    def test_self_loop_counts_both_ways(self):
        """Test a self-loop adds to in- and out-degree."""
        in_deg, out_deg = degrees(graph(["a", "b"], [("a", "a"), ("a", "b")]))
        assert in_deg == [1, 1]
        assert out_deg == [2, 0]


class TestPageRank:
    """Tests for PageRank."""

    def test_empty_graph(self):
        """Test zero nodes give an empty result."""
        assert pagerank(graph([], [])) == []

    def test_sums_to_one(self):
        """Test the ranks form a distribution, dangling nodes included."""
        g = graph(["a", "b", "c", "d"], [("a", "b"), ("c", "b"), ("b", "d")])
        ranks = pagerank(g)
        assert sum(ranks) == pytest.approx(1.0, abs=1e-9)

    def test_isolated_nodes_are_uniform(self):
        """Test a graph without edges ranks every node 1/N."""
        ranks = pagerank(graph(["a", "b", "c", "d"], []))
        assert ranks == pytest.approx([0.25] * 4)

    def test_hub_ranks_highest(self):
        """Test the most imported node ranks first."""
        g = graph(["a", "b", "c"], [("a", "b"), ("c", "b")])
        ranks = pagerank(g)
        assert ranks[1] > ranks[0]
        assert ranks[1] > ranks[2]

    def test_symmetric_cycle(self):
        """Test nodes in a pure cycle share rank equally."""
        ranks = pagerank(graph(["a", "b", "c"], [("a", "b"), ("b", "c"), ("c", "a")]))
        assert ranks == pytest.approx([1 / 3] * 3)

    def test_custom_damping(self):
        """Test damping changes the spread but keeps the total."""
        g = graph(["a", "b"], [("a", "b")])
        low = pagerank(g, damping=0.5)
        high = pagerank(g, damping=0.95)
        assert sum(low) == pytest.approx(1.0)
        assert high[1] > low[1]

    def test_tight_tolerance_still_converges(self):
        """Test a tolerance out of reach of the iteration budget still yields ranks."""
        g = graph(["a", "b", "c", "d"], [("a", "b"), ("b", "c"), ("c", "a"), ("d", "a")])
        ranks = pagerank(g, damping=0.95, max_iterations=1, tolerance=1e-13)
        assert sum(ranks) == pytest.approx(1.0, abs=1e-9)
        assert ranks[3] == pytest.approx(0.05 / 4)


class TestBetweenness:
    """Tests for Brandes betweenness."""

    def test_chain_middle(self):
        """Test the middle of a chain lies on one shortest path."""
        scores = betweenness(graph(["a", "b", "c"], [("a", "b"), ("b", "c")]))
        assert scores == [0.0, 1.0, 0.0]

    def test_parallel_paths_split_credit(self):
        """Test equal shortest paths share credit."""
        g = graph(["s", "x", "y", "t"], [("s", "x"), ("s", "y"), ("x", "t"), ("y", "t")])
        scores = betweenness(g)
        assert scores[1] == pytest.approx(0.5)
        assert scores[2] == pytest.approx(0.5)
        assert scores[0] == 0.0
        assert scores[3] == 0.0

    def test_star_center(self):
        """Test a pass-through hub collects every pair."""
        g = graph(["a", "b", "hub", "c", "d"], [("a", "hub"), ("b", "hub"), ("hub", "c"), ("hub", "d")])
        assert betweenness(g)[2] == pytest.approx(4.0)

    def test_non_negative(self):
        """Test scores are never negative."""
        g = graph(["a", "b", "c"], [("a", "b"), ("b", "a"), ("b", "c"), ("c", "c")])
        assert all(score >= 0 for score in betweenness(g))


class TestCycles:
    """Tests for SCC and cycle detection."""

    def test_two_node_cycle(self):
        """Test A -> B -> A."""
        cycles = find_cycles(graph(["a", "b"], [("a", "b"), ("b", "a")]))
        assert cycles == [[0, 1]]

    def test_three_node_cycle(self):
        """Test A -> B -> C -> A in discovery order."""
        cycles = find_cycles(graph(["a", "b", "c"], [("a", "b"), ("b", "c"), ("c", "a")]))
        assert cycles == [[0, 1, 2]]

    def test_self_loop(self):
        """Test a self-import is a cycle of one."""
        cycles = find_cycles(graph(["a", "b"], [("a", "a"), ("a", "b")]))
        assert cycles == [[0]]

    def test_acyclic(self):
        """Test a DAG has no cycles but one SCC per node."""
        g = graph(["a", "b", "c", "d"], [("a", "b"), ("a", "c"), ("a", "d")])
        assert find_cycles(g) == []
        assert len(strongly_connected_components(g)) == 4

    def test_separate_cycles(self):
        """Test disjoint cycles are reported separately."""
        g = graph(
            ["a", "b", "c", "d", "e"],
            [("a", "b"), ("b", "a"), ("c", "d"), ("d", "e"), ("e", "c"), ("b", "c")],
        )
        assert find_cycles(g) == [[0, 1], [2, 3, 4]]

    def test_long_chain_without_recursion_limit(self):
        """Test deep graphs do not hit the recursion limit."""
        n = 5000
        nodes = [f"n{i}" for i in range(n)]
        edges = [(nodes[i], nodes[i + 1]) for i in range(n - 1)] + [(nodes[-1], nodes[0])]
        cycles = find_cycles(graph(nodes, edges))
        assert len(cycles) == 1
        assert len(cycles[0]) == n
