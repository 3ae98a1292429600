"""Typer-based CLI for depgraph dependency analysis."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Sequence

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from . import __version__, config
from .config_manager import ConfigError, GraphConfig, load_graph_config
from .graph import DependencyGraphBuilder
from .graph_export import EXPORT_FORMATS, export_graph as write_export
from .models import DependencyGraphResult, FileRecord

console = Console()

app = typer.Typer(
    help="🕸️ depgraph: source dependency graphs, cycles and hotspots.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"depgraph v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    )
):
    """depgraph: import/export extraction and dependency graph metrics."""
    pass


def collect_files(root: Path, extensions: Sequence[str]) -> List[FileRecord]:
    """Walk *root* for files with one of *extensions*, skipping vendored dirs."""
    wanted = {e.lower() for e in extensions}
    records = []
    for file_path in sorted(root.rglob("*")):
        rel = file_path.relative_to(root)
        if any(part in config.SKIP_DIRS for part in rel.parts[:-1]):
            continue
        if not file_path.is_file() or file_path.suffix.lower() not in wanted:
            continue
        records.append(FileRecord(path=rel.as_posix(), absolute_path=str(file_path)))
    return records


def _load_config(config_file: Optional[Path]) -> GraphConfig:
    try:
        return load_graph_config(config_file)
    except ConfigError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _build(
    project_path: Path,
    graph_config: GraphConfig,
    extensions: Optional[List[str]] = None,
) -> DependencyGraphResult:
    root = project_path.resolve()
    exts = extensions or (graph_config.extensions + graph_config.python_extensions)
    files = collect_files(root, exts)
    if not files:
        typer.echo(f"No source files found under {root}.")
        raise typer.Exit(code=1)
    return DependencyGraphBuilder(graph_config).build(files, root)


def _setup_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )


@app.command("analyze")
def analyze(
    project_path: Path = typer.Argument(..., exists=True, file_okay=False, help="Path to source project."),
    ext: Optional[List[str]] = typer.Option(None, "--ext", "-e", help="File extension to include (repeatable)."),
    json_out: Optional[Path] = typer.Option(None, "--json-out", help="Write the full graph result as JSON."),
    top: int = typer.Option(10, "--top", "-t", min=1, help="Number of top files to list."),
    workers: Optional[int] = typer.Option(None, "--workers", "-w", min=1, help="Parallel extraction threads."),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="TOML config file."),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging."),
):
    """Build the dependency graph and print a summary."""
    _setup_logging(verbose)
    graph_config = _load_config(config_file)
    if workers is not None:
        graph_config.workers = workers
    if ext:
        ext = [e if e.startswith(".") else f".{e}" for e in ext]

    result = _build(project_path, graph_config, ext)
    stats = result.statistics

    console.print(
        Panel.fit(
            f"[bold]{stats.node_count}[/bold] files · [bold]{stats.edge_count}[/bold] edges · "
            f"[bold]{stats.cycle_count}[/bold] cycles · [bold]{stats.cluster_count}[/bold] clusters",
            title="[bold]Dependency Graph[/bold]",
            border_style="cyan",
        )
    )

    table = Table(title="Top Files by Importance", show_header=True)
    table.add_column("#", style="dim", width=4)
    table.add_column("File", style="cyan")
    table.add_column("PageRank", justify="right")
    table.add_column("In", justify="right")
    table.add_column("Out", justify="right")
    table.add_column("Betweenness", justify="right")
    for rank, node_id in enumerate(result.rankings.by_importance[:top], start=1):
        node = result.node(node_id)
        m = node.metrics
        table.add_row(
            str(rank),
            escape(node.file.path),
            f"{m.page_rank:.4f}",
            str(m.in_degree),
            str(m.out_degree),
            f"{m.betweenness:.1f}",
        )
    console.print(table)

    if result.cycles:
        console.print(f"\n[bold red]Cycles ({len(result.cycles)}):[/bold red]")
        for cycle in result.cycles:
            names = [escape(result.node(node_id).file.path) for node_id in cycle]
            console.print("  " + " → ".join(names + names[:1]))
    else:
        console.print("\n[green]No import cycles found.[/green]")

    if json_out is not None:
        write_export(result, "graph", json_out)
        typer.echo(f"Wrote graph JSON to {json_out}")


@app.command("export-graph")
def export_graph(
    project_path: Path = typer.Argument(..., exists=True, file_okay=False, help="Path to source project."),
    fmt: str = typer.Option("json", "--format", "-f", help="Export format: json, mermaid, dot or graph."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file path (stdout if omitted)."),
    max_nodes: Optional[int] = typer.Option(None, "--max-nodes", min=1, help="Node limit for Mermaid output."),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="TOML config file."),
):
    """Export the dependency graph as node/link JSON, Mermaid or Graphviz DOT."""
    fmt = fmt.lower()
    if fmt not in EXPORT_FORMATS:
        raise typer.BadParameter(f"Format must be one of: {', '.join(EXPORT_FORMATS)}")

    graph_config = _load_config(config_file)
    result = _build(project_path, graph_config)
    text = write_export(result, fmt, output, max_nodes=max_nodes or graph_config.max_mermaid_nodes)

    if output is None:
        typer.echo(text)
    else:
        typer.echo(f"Exported graph to {output}")


@app.command("show-config")
def show_config(
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="TOML config file."),
):
    """Print the effective graph configuration."""
    graph_config = _load_config(config_file)
    table = Table(title=f"Graph configuration ({config_file or config.CONFIG_FILE})", show_header=True)
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key, value in graph_config.to_dict().items():
        table.add_row(key, escape(str(value)))
    console.print(table)


if __name__ == "__main__":
    app()
