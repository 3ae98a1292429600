"""Graph algorithms over an integer-indexed, frozen networkx graph."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence, Tuple

import networkx as nx

from .config import (
    DEFAULT_DAMPING_FACTOR,
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_TOLERANCE,
    MIN_PAGERANK_ITERATIONS,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FrozenGraph:
    """Directed graph built once from node ids and (source, target) pairs.

    Nodes of ``digraph`` are the positions in ``node_ids``. Duplicate edges
    are dropped; self-loops are kept. The digraph is frozen with
    :func:`networkx.freeze`, so every algorithm below is a pure function of it.
    """

    node_ids: Tuple[str, ...]
    digraph: nx.DiGraph = field(repr=False, compare=False)

    @classmethod
    def from_edges(cls, node_ids: Sequence[str], edges: Iterable[Tuple[str, str]]) -> "FrozenGraph":
        index: Dict[str, int] = {}
        for node_id in node_ids:
            index.setdefault(node_id, len(index))

        g = nx.DiGraph()
        g.add_nodes_from(range(len(index)))
        g.add_edges_from(
            (index[source], index[target])
            for source, target in edges
            if source in index and target in index
        )
        return cls(node_ids=tuple(index), digraph=nx.freeze(g))

    @property
    def edges(self) -> Tuple[Tuple[int, int], ...]:
        return tuple(self.digraph.edges())

    def __len__(self) -> int:
        return len(self.node_ids)


def degrees(graph: FrozenGraph) -> Tuple[List[int], List[int]]:
    """Return ``(in_degrees, out_degrees)``; a self-loop counts for both."""
    g = graph.digraph
    return (
        [g.in_degree(i) for i in range(len(graph))],
        [g.out_degree(i) for i in range(len(graph))],
    )


def pagerank(
    graph: FrozenGraph,
    damping: float = DEFAULT_DAMPING_FACTOR,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    tolerance: float = DEFAULT_TOLERANCE,
) -> List[float]:
    """PageRank by power iteration via :func:`networkx.pagerank`.

    Rank held by nodes without outgoing edges is spread uniformly over all
    nodes each round, so the result always sums to 1.
    """
    n = len(graph)
    if n == 0:
        return []

    iterations = max(max_iterations, MIN_PAGERANK_ITERATIONS)
    try:
        scores = nx.pagerank(graph.digraph, alpha=damping, max_iter=iterations, tol=tolerance)
    except nx.PowerIterationFailedConvergence:
        # The error shrinks by a factor of ``damping`` per round.
        extra = math.ceil(math.log(tolerance) / math.log(damping))
        logger.warning(
            "PageRank did not converge in %d iterations; retrying with %d",
            iterations,
            iterations + extra,
        )
        scores = nx.pagerank(graph.digraph, alpha=damping, max_iter=iterations + extra, tol=tolerance)
    return [scores[i] for i in range(n)]


def betweenness(graph: FrozenGraph) -> List[float]:
    """Brandes' betweenness centrality, unnormalised."""
    scores = nx.betweenness_centrality(graph.digraph, normalized=False)
    return [float(scores[i]) for i in range(len(graph))]


def strongly_connected_components(graph: FrozenGraph) -> List[List[int]]:
    """Strongly connected components, members listed in DFS discovery order.

    Discovery starts from node 0 and restarts from the lowest unvisited
    index, following edges in insertion order.
    """
    discovered = {node: i for i, node in enumerate(nx.dfs_preorder_nodes(graph.digraph))}
    return [
        sorted(component, key=discovered.__getitem__)
        for component in nx.strongly_connected_components(graph.digraph)
    ]


def find_cycles(graph: FrozenGraph) -> List[List[int]]:
    """Components of two or more nodes, plus single nodes with a self-loop.

    Cycles are ordered by their lowest node index.
    """
    self_loops = set(nx.nodes_with_selfloops(graph.digraph))
    cycles = [
        component
        for component in strongly_connected_components(graph)
        if len(component) > 1 or component[0] in self_loops
    ]
    return sorted(cycles, key=min)
