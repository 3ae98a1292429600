"""depgraph: source dependency graph engine."""

__version__ = "0.1.0"

from .graph import DependencyGraphBuilder, build_dependency_graph
from .graph_export import export_graph, to_d3_format, to_dot_format, to_mermaid_format
from .models import DependencyGraphResult, FileAnalysis, FileRecord
from .parser import DeclarationExtractor, SyntaxFamily, parse_file, parse_files
from .resolver import ImportResolver, resolve_import

__all__ = [
    "DeclarationExtractor",
    "DependencyGraphBuilder",
    "DependencyGraphResult",
    "FileAnalysis",
    "FileRecord",
    "ImportResolver",
    "SyntaxFamily",
    "build_dependency_graph",
    "export_graph",
    "parse_file",
    "parse_files",
    "resolve_import",
    "to_d3_format",
    "to_dot_format",
    "to_mermaid_format",
]
