"""Tests for graph export formatters."""

import json
from pathlib import Path

import pytest

from depgraph_cli.graph import build_dependency_graph
from depgraph_cli.graph_export import (
    export_graph,
    render,
    to_d3_format,
    to_dot_format,
    to_mermaid_format,
)


@pytest.fixture
def small_result(project, temp_dir):
    files = project({
        "src/a.ts": "import { b } from './b';\nimport type { C } from './c';\n",
        "src/b.ts": "export const b = 1;\n",
        "src/c.ts": "export type C = string;\n",
        "lonely.ts": "",
    })
    return build_dependency_graph(files, temp_dir)


class TestD3Format:
    """Tests for node/link JSON."""

    def test_nodes_and_links(self, small_result):
        """Test relative paths, groups, scores and link values."""
        data = to_d3_format(small_result)
        nodes = {n["id"]: n for n in data["nodes"]}
        assert set(nodes) == {"src/a.ts", "src/b.ts", "src/c.ts", "lonely.ts"}
        assert nodes["src/a.ts"]["group"] == "src"
        assert nodes["lonely.ts"]["group"] is None
        assert nodes["src/b.ts"]["score"] == small_result.node(
            next(n.id for n in small_result.nodes if n.file.path == "src/b.ts")
        ).metrics.page_rank

        links = {(l["source"], l["target"]): l["value"] for l in data["links"]}
        assert links == {("src/a.ts", "src/b.ts"): 1.0, ("src/a.ts", "src/c.ts"): 0.5}

    def test_json_serialisable(self, small_result):
        """Test the payload can be dumped as JSON."""
        assert json.loads(json.dumps(to_d3_format(small_result)))["links"]


class TestMermaidFormat:
    """Tests for Mermaid flowcharts."""

    def test_structure(self, small_result):
        """Test header, node labels and arrow styles."""
        text = to_mermaid_format(small_result)
        lines = text.splitlines()
        assert lines[0] == "graph TD"
        assert sum(1 for line in lines if '["' in line) == 4
        assert '["a.ts"]' in text
        assert sum(1 for line in lines if " --> " in line) == 1
        assert sum(1 for line in lines if " -.-> " in line) == 1

    def test_max_nodes_drops_edges(self, small_result):
        """Test edges whose endpoints were cut are omitted."""
        lines = to_mermaid_format(small_result, max_nodes=1).splitlines()
        assert len(lines) == 2
        assert "-->" not in lines[1]

    def test_escapes_quotes(self, project, temp_dir):
        """Test quotes in file names do not break labels."""
        files = project({'we"ird.ts': ""})
        text = to_mermaid_format(build_dependency_graph(files, temp_dir))
        assert "we#quot;ird.ts" in text


class TestDotFormat:
    """Tests for Graphviz output."""

    def test_structure(self, small_result):
        """Test digraph header, node lines and edge styles."""
        text = to_dot_format(small_result)
        lines = text.splitlines()
        assert lines[0] == "digraph Dependencies {"
        assert "  rankdir=LR;" in lines
        assert "  node [shape=box];" in lines
        assert lines[-1] == "}"
        assert '  "src/a.ts" -> "src/b.ts" [style=solid];' in lines
        assert '  "src/a.ts" -> "src/c.ts" [style=dashed];' in lines
        assert any(line.startswith('  "lonely.ts" [label="lonely.ts"') for line in lines)


class TestExportGraph:
    """Tests for writing exports to disk."""

    @pytest.mark.parametrize("fmt", ["json", "mermaid", "dot", "graph"])
    def test_writes_file(self, small_result, temp_dir: Path, fmt):
        """Test each format is written to the requested file."""
        out = temp_dir / "out" / f"graph.{fmt}"
        text = export_graph(small_result, fmt, out)
        assert out.read_text(encoding="utf-8") == text
        assert text

    def test_graph_format_is_full_result(self, small_result):
        """Test 'graph' renders the complete result JSON."""
        data = json.loads(render(small_result, "graph"))
        assert data["statistics"]["nodeCount"] == 4

    def test_unknown_format(self, small_result):
        """Test unknown formats are rejected."""
        with pytest.raises(ValueError):
            render(small_result, "svg")
