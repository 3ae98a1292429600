"""Build the dependency graph and its metrics from a list of files."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .config import INDENTATION_EXTENSIONS
from .config_manager import GraphConfig
from .metrics import FrozenGraph, betweenness, degrees, find_cycles, pagerank
from .models import (
    DependencyEdge,
    DependencyGraphResult,
    DependencyNode,
    FileAnalysis,
    FileCluster,
    FileRecord,
    GraphRankings,
    GraphStatistics,
    ImportInfo,
)
from .parser import FAILED_TO_READ, DeclarationExtractor
from .resolver import ImportResolver

logger = logging.getLogger(__name__)

FileInput = Union[FileRecord, Mapping[str, Any]]

ROOT_CLUSTER = "(root)"
TYPE_ONLY_WEIGHT = 0.5
VALUE_WEIGHT = 1.0

# Directory segments that say nothing about a domain
GENERIC_SEGMENTS = {"src", "lib", "app"}

DOMAIN_PATTERNS: List[Tuple[re.Pattern, str]] = [
    (re.compile(r"^(api|routes|endpoints)$", re.I), "api"),
    (re.compile(r"^(models|entities|schemas)$", re.I), "domain"),
    (re.compile(r"^services?$", re.I), "services"),
    (re.compile(r"^controllers?$", re.I), "controllers"),
    (re.compile(r"^(utils|helpers|common)$", re.I), "utilities"),
    (re.compile(r"^components?$", re.I), "components"),
    (re.compile(r"^hooks?$", re.I), "hooks"),
    (re.compile(r"^auth(entication)?$", re.I), "authentication"),
    (re.compile(r"^users?$", re.I), "users"),
    (re.compile(r"^products?$", re.I), "products"),
    (re.compile(r"^orders?$", re.I), "orders"),
    (re.compile(r"^payments?$", re.I), "payments"),
    (re.compile(r"^core$", re.I), "core"),
]


def suggest_domain(cluster_name: str, files: Sequence[str] = ()) -> str:
    """Guess a short domain label for a directory cluster."""
    parts = [p for p in cluster_name.replace("\\", "/").split("/") if p and p != ROOT_CLUSTER]
    for part in reversed(parts):
        if part.lower() in GENERIC_SEGMENTS:
            continue
        for pattern, domain in DOMAIN_PATTERNS:
            if pattern.match(part):
                return domain
        cleaned = re.sub(r"[^a-z0-9]+", "-", part.lower()).strip("-")
        if cleaned:
            return cleaned
    if files:
        stem = Path(files[0]).stem.lower()
        if stem:
            return stem
    return "misc"


@dataclass
class _EdgeAccumulator:
    names: List[str] = field(default_factory=list)
    type_only: bool = True

    def add(self, names: Iterable[str], type_only: bool) -> None:
        for name in names:
            if name not in self.names:
                self.names.append(name)
        self.type_only = self.type_only and type_only


class DependencyGraphBuilder:
    """Turns file records into a :class:`DependencyGraphResult`.

    Extraction for every file finishes before edges are created; metrics
    are then computed over a :class:`FrozenGraph` built once.
    """

    def __init__(
        self,
        graph_config: Optional[GraphConfig] = None,
        extractor: Optional[DeclarationExtractor] = None,
    ) -> None:
        self.config = graph_config or GraphConfig()
        self.extractor = extractor or DeclarationExtractor()

    def build(self, files: Sequence[FileInput], root_dir: Union[str, Path, None] = None) -> DependencyGraphResult:
        """Build the graph for *files*, resolving absolute imports under *root_dir*.

        A file listed more than once by absolute path becomes a single node,
        so ``statistics.node_count`` can be smaller than ``len(files)``.
        """
        records = self._normalise(files)
        resolver = ImportResolver(
            base_dir=root_dir,
            extensions=self.config.extensions,
            python_extensions=self.config.python_extensions,
        )

        analyses = self.extractor.parse_files(
            [r.absolute_path for r in records], workers=self.config.workers
        )
        for path, analysis in analyses.items():
            if FAILED_TO_READ in analysis.parse_errors:
                logger.warning("Could not read %s", path)

        nodes = [
            DependencyNode(id=r.absolute_path, file=r, exports=list(analyses[r.absolute_path].exports))
            for r in records
        ]
        edges = self._create_edges(records, analyses, resolver)

        graph = FrozenGraph.from_edges([n.id for n in nodes], [(e.source, e.target) for e in edges])
        self._compute_metrics(nodes, graph)

        cycles = [[graph.node_ids[i] for i in c] for c in find_cycles(graph)]
        clusters = self._detect_clusters(nodes, edges)
        rankings = self._rank(nodes, clusters)
        statistics = self._statistics(nodes, edges, clusters, cycles)

        logger.info(
            "Built dependency graph: %d nodes, %d edges, %d cycles",
            statistics.node_count, statistics.edge_count, statistics.cycle_count,
        )
        return DependencyGraphResult(
            nodes=nodes,
            edges=edges,
            clusters=clusters,
            cycles=cycles,
            rankings=rankings,
            statistics=statistics,
        )

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    @staticmethod
    def _normalise(files: Sequence[FileInput]) -> List[FileRecord]:
        records: List[FileRecord] = []
        seen = set()
        for item in files:
            record = item if isinstance(item, FileRecord) else FileRecord.from_dict(item)
            if record.absolute_path in seen:
                logger.debug("Skipping duplicate file %s", record.absolute_path)
                continue
            seen.add(record.absolute_path)
            records.append(record)
        return records

    def _create_edges(
        self,
        records: Sequence[FileRecord],
        analyses: Mapping[str, FileAnalysis],
        resolver: ImportResolver,
    ) -> List[DependencyEdge]:
        known = {os.path.normpath(r.absolute_path): r.absolute_path for r in records}
        aggregated: Dict[Tuple[str, str], _EdgeAccumulator] = {}

        for record in records:
            source = record.absolute_path
            for imp in analyses[source].imports:
                if imp.is_builtin:
                    continue
                for resolved, names in self._resolve_targets(imp, source, resolver):
                    target = known.get(resolved)
                    if target is None:
                        continue
                    aggregated.setdefault((source, target), _EdgeAccumulator()).add(names, imp.is_type_only)

        return [
            DependencyEdge(
                source=source,
                target=target,
                imported_names=acc.names,
                is_type_only=acc.type_only,
                weight=TYPE_ONLY_WEIGHT if acc.type_only else VALUE_WEIGHT,
            )
            for (source, target), acc in aggregated.items()
        ]

    @staticmethod
    def _resolve_targets(
        imp: ImportInfo, from_file: str, resolver: ImportResolver
    ) -> List[Tuple[str, List[str]]]:
        """Resolve one import to ``(path, names)`` pairs.

        Python ``from X import a, b`` tries each name as a submodule of X
        first; names that are not modules fall back to X itself.
        """
        is_python_from = (
            os.path.splitext(from_file)[1].lower() in INDENTATION_EXTENSIONS
            and imp.imported_names
            and not imp.has_namespace
        )
        targets: List[Tuple[str, List[str]]] = []
        remaining = list(imp.imported_names)
        if is_python_from:
            remaining = []
            for name in imp.imported_names:
                joiner = "" if imp.source.endswith(".") else "."
                sub = resolver.resolve(imp.source + joiner + name, from_file)
                if sub is not None:
                    targets.append((sub, [name]))
                else:
                    remaining.append(name)
            if not remaining:
                return targets

        resolved = resolver.resolve(imp.source, from_file)
        if resolved is not None:
            targets.append((resolved, remaining))
        return targets

    def _compute_metrics(self, nodes: Sequence[DependencyNode], graph: FrozenGraph) -> None:
        in_deg, out_deg = degrees(graph)
        ranks = pagerank(
            graph,
            damping=self.config.damping_factor,
            max_iterations=self.config.max_iterations,
            tolerance=self.config.tolerance,
        )
        between = betweenness(graph)
        for i, node in enumerate(nodes):
            node.metrics.in_degree = in_deg[i]
            node.metrics.out_degree = out_deg[i]
            node.metrics.page_rank = ranks[i]
            node.metrics.betweenness = between[i]

    def _detect_clusters(
        self, nodes: Sequence[DependencyNode], edges: Sequence[DependencyEdge]
    ) -> List[FileCluster]:
        groups: Dict[str, List[str]] = {}
        for node in nodes:
            groups.setdefault(node.file.directory or ROOT_CLUSTER, []).append(node.id)

        clusters: List[FileCluster] = []
        for name, members in groups.items():
            if len(members) < self.config.min_cluster_size:
                continue
            member_set = set(members)
            internal = external = 0
            for edge in edges:
                src_in = edge.source in member_set
                dst_in = edge.target in member_set
                if src_in and dst_in:
                    internal += 1
                elif src_in or dst_in:
                    external += 1
            n = len(members)
            clusters.append(FileCluster(
                id=f"cluster-{len(clusters)}",
                name=name,
                files=members,
                internal_edges=internal,
                external_edges=external,
                cohesion=internal / (n * (n - 1)) if n > 1 else 0.0,
                coupling=external / (internal + external) if internal + external else 0.0,
                suggested_domain=suggest_domain(name, members),
            ))
        return clusters

    def _rank(self, nodes: Sequence[DependencyNode], clusters: Sequence[FileCluster]) -> GraphRankings:
        by_id = {n.id: n for n in nodes}

        def importance(node: DependencyNode) -> Tuple:
            m = node.metrics
            # Rounded so float noise does not reorder equal ranks
            return (-round(m.page_rank, 12), -round(m.betweenness, 12), -m.in_degree, -node.file.score, node.id)

        by_importance = [n.id for n in sorted(nodes, key=importance)]
        by_connectivity = [
            n.id for n in sorted(nodes, key=lambda n: (-(n.metrics.in_degree + n.metrics.out_degree), n.id))
        ]
        leaf_nodes = [
            n.id
            for n in sorted(nodes, key=lambda n: (-n.metrics.out_degree, n.id))
            if n.metrics.out_degree > 0 and n.metrics.in_degree == 0
        ]
        orphan_nodes = [
            n.id for n in nodes if n.metrics.in_degree == 0 and n.metrics.out_degree == 0
        ]
        bridges = sorted(
            (n for n in nodes if n.metrics.betweenness > 0),
            key=lambda n: (-n.metrics.betweenness, n.id),
        )
        bridge_nodes = [n.id for n in bridges[: self.config.bridge_top_k]]
        cluster_centers = [
            min((by_id[f] for f in cluster.files), key=importance).id
            for cluster in clusters
            if cluster.files
        ]
        return GraphRankings(
            by_importance=by_importance,
            by_connectivity=by_connectivity,
            cluster_centers=cluster_centers,
            leaf_nodes=leaf_nodes,
            bridge_nodes=bridge_nodes,
            orphan_nodes=orphan_nodes,
        )

    @staticmethod
    def _statistics(
        nodes: Sequence[DependencyNode],
        edges: Sequence[DependencyEdge],
        clusters: Sequence[FileCluster],
        cycles: Sequence[List[str]],
    ) -> GraphStatistics:
        n = len(nodes)
        e = len(edges)
        total_degree = sum(node.metrics.in_degree + node.metrics.out_degree for node in nodes)
        return GraphStatistics(
            node_count=n,
            edge_count=e,
            avg_degree=total_degree / n if n else 0.0,
            density=e / (n * (n - 1)) if n > 1 else 0.0,
            cluster_count=len(clusters),
            cycle_count=len(cycles),
        )


def build_dependency_graph(
    files: Sequence[FileInput],
    root_dir: Union[str, Path, None] = None,
    graph_config: Optional[GraphConfig] = None,
    **options: Any,
) -> DependencyGraphResult:
    """Convenience wrapper around :class:`DependencyGraphBuilder`.

    Keyword *options* override fields of *graph_config* (or the defaults),
    e.g. ``min_cluster_size=3``.
    """
    base = graph_config.to_dict() if graph_config is not None else {}
    base.update(options)
    return DependencyGraphBuilder(GraphConfig.from_dict(base)).build(files, root_dir)
