"""Core data models shared by the extractor, graph builder and exporters.

Attributes are snake_case; ``to_dict()`` renders the camelCase field names
that downstream consumers key off.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------

@dataclass
class ImportInfo:
    source: str
    imported_names: List[str] = field(default_factory=list)
    is_relative: bool = False
    is_package: bool = False
    is_builtin: bool = False
    has_default: bool = False
    has_namespace: bool = False
    is_type_only: bool = False
    is_dynamic: bool = False
    line: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "importedNames": list(self.imported_names),
            "isRelative": self.is_relative,
            "isPackage": self.is_package,
            "isBuiltin": self.is_builtin,
            "hasDefault": self.has_default,
            "hasNamespace": self.has_namespace,
            "isTypeOnly": self.is_type_only,
            "isDynamic": self.is_dynamic,
            "line": self.line,
        }


@dataclass
class ExportInfo:
    name: str
    is_default: bool = False
    is_type: bool = False
    is_re_export: bool = False
    re_export_source: Optional[str] = None
    kind: str = "unknown"
    line: int = 1

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "isDefault": self.is_default,
            "isType": self.is_type,
            "isReExport": self.is_re_export,
            "kind": self.kind,
            "line": self.line,
        }
        if self.is_re_export:
            data["reExportSource"] = self.re_export_source
        return data


@dataclass
class FileAnalysis:
    """Everything the extractor learned about one file."""

    file_path: str
    imports: List[ImportInfo] = field(default_factory=list)
    exports: List[ExportInfo] = field(default_factory=list)
    local_imports: List[str] = field(default_factory=list)
    external_imports: List[str] = field(default_factory=list)
    parse_errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filePath": self.file_path,
            "imports": [i.to_dict() for i in self.imports],
            "exports": [e.to_dict() for e in self.exports],
            "localImports": list(self.local_imports),
            "externalImports": list(self.external_imports),
            "parseErrors": list(self.parse_errors),
        }


# ---------------------------------------------------------------------------
# Input file records
# ---------------------------------------------------------------------------

_RECORD_KEYS = {
    "absolutePath": "absolute_path",
    "isEntryPoint": "is_entry_point",
    "isConfig": "is_config",
    "isTest": "is_test",
    "isGenerated": "is_generated",
}


@dataclass
class FileRecord:
    """One file as handed over by the file walker.

    ``score`` is opaque here: it only breaks ranking ties and is echoed in
    the output.
    """

    path: str
    absolute_path: str
    name: str = ""
    extension: str = ""
    directory: Optional[str] = None
    score: float = 0.0
    size: int = 0
    lines: int = 0
    depth: int = 0
    is_entry_point: bool = False
    is_config: bool = False
    is_test: bool = False
    is_generated: bool = False
    tags: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.path = str(self.path).replace("\\", "/")
        self.absolute_path = str(self.absolute_path)
        if not self.name:
            self.name = os.path.basename(self.path)
        if not self.extension:
            self.extension = os.path.splitext(self.name)[1]
        if self.directory is None:
            parent = os.path.dirname(self.path)
            self.directory = "" if parent in ("", ".") else parent

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FileRecord":
        """Build a record from a camelCase or snake_case mapping."""
        kwargs: Dict[str, Any] = {}
        known = set(cls.__dataclass_fields__)
        for key, value in data.items():
            attr = _RECORD_KEYS.get(key, key)
            if attr in known:
                kwargs[attr] = value
        if "path" not in kwargs and "absolute_path" in kwargs:
            kwargs["path"] = os.path.basename(str(kwargs["absolute_path"]))
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "absolutePath": self.absolute_path,
            "name": self.name,
            "extension": self.extension,
            "directory": self.directory,
            "score": self.score,
            "size": self.size,
            "lines": self.lines,
            "depth": self.depth,
            "isEntryPoint": self.is_entry_point,
            "isConfig": self.is_config,
            "isTest": self.is_test,
            "isGenerated": self.is_generated,
            "tags": list(self.tags),
        }


# ---------------------------------------------------------------------------
# Graph
# ---------------------------------------------------------------------------

@dataclass
class NodeMetrics:
    in_degree: int = 0
    out_degree: int = 0
    betweenness: float = 0.0
    page_rank: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "inDegree": self.in_degree,
            "outDegree": self.out_degree,
            "betweenness": self.betweenness,
            "pageRank": self.page_rank,
        }


@dataclass
class DependencyNode:
    id: str
    file: FileRecord
    exports: List[ExportInfo] = field(default_factory=list)
    metrics: NodeMetrics = field(default_factory=NodeMetrics)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "file": self.file.to_dict(),
            "exports": [e.to_dict() for e in self.exports],
            "metrics": self.metrics.to_dict(),
        }


@dataclass
class DependencyEdge:
    source: str
    target: str
    imported_names: List[str] = field(default_factory=list)
    is_type_only: bool = False
    weight: float = 1.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "target": self.target,
            "importedNames": list(self.imported_names),
            "isTypeOnly": self.is_type_only,
            "weight": self.weight,
        }


@dataclass
class FileCluster:
    id: str
    name: str
    files: List[str]
    internal_edges: int = 0
    external_edges: int = 0
    cohesion: float = 0.0
    coupling: float = 0.0
    suggested_domain: str = "misc"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "files": list(self.files),
            "internalEdges": self.internal_edges,
            "externalEdges": self.external_edges,
            "cohesion": self.cohesion,
            "coupling": self.coupling,
            "suggestedDomain": self.suggested_domain,
        }


@dataclass
class GraphRankings:
    by_importance: List[str] = field(default_factory=list)
    by_connectivity: List[str] = field(default_factory=list)
    cluster_centers: List[str] = field(default_factory=list)
    leaf_nodes: List[str] = field(default_factory=list)
    bridge_nodes: List[str] = field(default_factory=list)
    orphan_nodes: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "byImportance": list(self.by_importance),
            "byConnectivity": list(self.by_connectivity),
            "clusterCenters": list(self.cluster_centers),
            "leafNodes": list(self.leaf_nodes),
            "bridgeNodes": list(self.bridge_nodes),
            "orphanNodes": list(self.orphan_nodes),
        }


@dataclass
class GraphStatistics:
    node_count: int = 0
    edge_count: int = 0
    avg_degree: float = 0.0
    density: float = 0.0
    cluster_count: int = 0
    cycle_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodeCount": self.node_count,
            "edgeCount": self.edge_count,
            "avgDegree": self.avg_degree,
            "density": self.density,
            "clusterCount": self.cluster_count,
            "cycleCount": self.cycle_count,
        }


@dataclass
class DependencyGraphResult:
    nodes: List[DependencyNode] = field(default_factory=list)
    edges: List[DependencyEdge] = field(default_factory=list)
    clusters: List[FileCluster] = field(default_factory=list)
    cycles: List[List[str]] = field(default_factory=list)
    rankings: GraphRankings = field(default_factory=GraphRankings)
    statistics: GraphStatistics = field(default_factory=GraphStatistics)

    def node(self, node_id: str) -> Optional[DependencyNode]:
        for n in self.nodes:
            if n.id == node_id:
                return n
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
            "clusters": [c.to_dict() for c in self.clusters],
            "cycles": [list(c) for c in self.cycles],
            "rankings": self.rankings.to_dict(),
            "statistics": self.statistics.to_dict(),
        }

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)
