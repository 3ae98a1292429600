"""Graph export helpers for node/link JSON, Mermaid and DOT outputs."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import DEFAULT_MAX_MERMAID_NODES
from .models import DependencyGraphResult

EXPORT_FORMATS = ("json", "mermaid", "dot", "graph")


def to_d3_format(result: DependencyGraphResult) -> Dict[str, List[Dict[str, Any]]]:
    """Node/link payload for force-directed layouts."""
    group_of: Dict[str, str] = {}
    for cluster in result.clusters:
        for file_id in cluster.files:
            group_of[file_id] = cluster.name
    paths = {node.id: node.file.path for node in result.nodes}

    return {
        "nodes": [
            {
                "id": node.file.path,
                "group": group_of.get(node.id),
                "score": node.metrics.page_rank,
            }
            for node in result.nodes
        ],
        "links": [
            {
                "source": paths.get(edge.source, edge.source),
                "target": paths.get(edge.target, edge.target),
                "value": edge.weight,
            }
            for edge in result.edges
        ],
    }


def to_mermaid_format(result: DependencyGraphResult, max_nodes: int = DEFAULT_MAX_MERMAID_NODES) -> str:
    """Mermaid flowchart limited to the *max_nodes* most important files."""
    names = {node.id: node.file.name for node in result.nodes}
    ordered = result.rankings.by_importance or [node.id for node in result.nodes]
    keep = ordered[:max_nodes]
    short_ids = {node_id: f"N{i}" for i, node_id in enumerate(keep)}

    lines = ["graph TD"]
    for node_id in keep:
        lines.append(f'  {short_ids[node_id]}["{_esc_mermaid(names.get(node_id, node_id))}"]')

    for edge in result.edges:
        if edge.source not in short_ids or edge.target not in short_ids:
            continue
        arrow = "-.->" if edge.is_type_only else "-->"
        lines.append(f"  {short_ids[edge.source]} {arrow} {short_ids[edge.target]}")

    return "\n".join(lines)


def to_dot_format(result: DependencyGraphResult) -> str:
    """Graphviz digraph; dashed edges are type-only imports."""
    centers = set(result.rankings.cluster_centers)

    lines = ["digraph Dependencies {"]
    lines.append("  rankdir=LR;")
    lines.append("  node [shape=box];")

    for node in result.nodes:
        attrs = f'label="{_esc(node.file.name)}"'
        if node.id in centers:
            attrs += ", style=filled, fillcolor=lightblue"
        lines.append(f'  "{_esc(node.file.path)}" [{attrs}];')

    paths = {node.id: node.file.path for node in result.nodes}
    for edge in result.edges:
        style = "dashed" if edge.is_type_only else "solid"
        source = _esc(paths.get(edge.source, edge.source))
        target = _esc(paths.get(edge.target, edge.target))
        lines.append(f'  "{source}" -> "{target}" [style={style}];')

    lines.append("}")
    return "\n".join(lines)


def render(result: DependencyGraphResult, fmt: str, max_nodes: int = DEFAULT_MAX_MERMAID_NODES) -> str:
    """Render *result* in one of :data:`EXPORT_FORMATS`."""
    if fmt == "json":
        return json.dumps(to_d3_format(result), indent=2)
    if fmt == "mermaid":
        return to_mermaid_format(result, max_nodes=max_nodes)
    if fmt == "dot":
        return to_dot_format(result)
    if fmt == "graph":
        return result.to_json()
    raise ValueError(f"Unknown export format: {fmt}")


def export_graph(
    result: DependencyGraphResult,
    fmt: str,
    output_file: Optional[Path] = None,
    max_nodes: int = DEFAULT_MAX_MERMAID_NODES,
) -> str:
    """Render and, when *output_file* is given, write the export to disk."""
    text = render(result, fmt, max_nodes=max_nodes)
    if output_file is not None:
        output_file = Path(output_file)
        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_text(text, encoding="utf-8")
    return text


def _esc(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


def _esc_mermaid(text: str) -> str:
    return text.replace('"', "#quot;")
