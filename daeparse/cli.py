"""Command-line interface for daeparse.

Usage:
    daeparse info scene.dae
    daeparse tree scene.dae [--matrix]
    daeparse accessor scene.dae SOURCE_ID [--limit N]
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
import numpy as np
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from .core.config import ParserConfig
from .core.errors import ColladaError
from .parser import ParseResult, parse_file

console = Console()


def setup_logging(verbose: bool = False) -> None:
    """Configure logging with rich output."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_time=False)],
    )


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option(
    "-c", "--config",
    "config_path",
    type=click.Path(exists=True),
    help="Parser configuration JSON file",
)
@click.pass_context
def main(ctx: click.Context, verbose: bool, config_path: str | None) -> None:
    """daeparse - COLLADA structural parser."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config"] = (
        ParserConfig.from_file(config_path) if config_path else ParserConfig.default()
    )
    setup_logging(verbose)


def _load(ctx: click.Context, path: str) -> ParseResult:
    """Parse a document, exiting with status 1 on a parse error."""
    try:
        return parse_file(path, ctx.obj["config"])
    except ColladaError as e:
        console.print(f"[bold red]Error: {escape(str(e))}[/bold red]")
        sys.exit(1)


def _format_matrix(matrix: np.ndarray) -> str:
    rows = [" ".join(f"{v:8.3f}" for v in row) for row in matrix]
    return "\n".join(rows)


@main.command()
@click.argument("document", type=click.Path(exists=True))
@click.pass_context
def info(ctx: click.Context, document: str) -> None:
    """Show asset info and library sizes of a COLLADA document.

    DOCUMENT: Path to a .dae file
    """
    result = _load(ctx, document)
    stats = result.stats()

    console.print(f"\n[bold]COLLADA Info: {Path(document).name}[/bold]\n")

    table = Table()
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Version", stats["version"] or "-")
    table.add_row("Unit size (m)", f"{stats['unit_size']:g}")
    table.add_row("Up axis", f"{stats['up_axis']}_UP")
    table.add_row("Nodes", f"{stats['num_nodes']:,}")
    table.add_row("Node IDs", f"{stats['num_node_ids']:,}")
    table.add_row("Geometries", f"{stats['num_geometries']:,}")
    table.add_row("Data arrays", f"{stats['num_arrays']:,}")
    table.add_row("Accessors", f"{stats['num_accessors']:,}")
    table.add_row("Scene root", stats["root"] or "[dim]none[/dim]")

    console.print(table)


@main.command()
@click.argument("document", type=click.Path(exists=True))
@click.option("--matrix", is_flag=True, help="Show each node's composed local matrix")
@click.pass_context
def tree(ctx: click.Context, document: str, matrix: bool) -> None:
    """Print the node hierarchy of every visual scene.

    DOCUMENT: Path to a .dae file
    """
    result = _load(ctx, document)
    nodes = result.nodes

    if not nodes.roots:
        console.print("[yellow]No visual scenes found[/yellow]")
        return

    for root in nodes.roots:
        root_node = nodes.node(root)
        marker = " [green](active)[/green]" if root == result.root else ""
        top = Tree(f"[bold]{escape(root_node.label)}[/bold]{marker}")
        branches = {root: top}

        for _, node in nodes.iter_subtree(root):
            branch = branches[node.handle]
            if node.transforms:
                kinds = ", ".join(t.kind.value for t in node.transforms)
                branch.add(f"[dim]{kinds}[/dim]")
            if matrix and node.transforms:
                branch.add(f"[magenta]{_format_matrix(node.local_transform())}[/magenta]")
            for child in node.children:
                child_node = nodes.node(child)
                branches[child] = branch.add(f"[cyan]{escape(child_node.label)}[/cyan]")

        console.print(top)


@main.command()
@click.argument("document", type=click.Path(exists=True))
@click.argument("source_id")
@click.option(
    "--limit",
    default=10,
    type=click.IntRange(min=0),
    show_default=True,
    help="Maximum tuples to show",
)
@click.pass_context
def accessor(ctx: click.Context, document: str, source_id: str, limit: int) -> None:
    """Print the tuples read through a source's accessor.

    DOCUMENT: Path to a .dae file
    SOURCE_ID: ID of the <source> owning the accessor
    """
    result = _load(ctx, document)

    try:
        values = result.resolve(source_id)
    except ColladaError as e:
        console.print(f"[bold red]Error: {escape(str(e))}[/bold red]")
        sys.exit(1)

    acc = result.accessors[source_id.lstrip("#")]
    table = Table(title=f"{source_id} ({acc.count} x {acc.width})")
    table.add_column("#", style="dim")
    headers = acc.params or tuple(str(i) for i in range(acc.width))
    for header in headers:
        table.add_column(header or "-", style="green")

    for i, row in enumerate(values[:limit]):
        table.add_row(str(i), *(f"{v:g}" for v in row))
    console.print(table)

    if len(values) > limit:
        console.print(f"[dim](Showing {limit} of {len(values):,} tuples)[/dim]")


if __name__ == "__main__":
    main()
