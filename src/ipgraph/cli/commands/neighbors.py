"""
Neighbors Command - List assets directly connected to a node.
"""

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ...graph.paths import find_node_neighbors
from ..utils import load_graph_file, node_label, resolve_node

console = Console()


@click.command()
@click.argument("graph_file")
@click.argument("node")
def neighbors(graph_file: str, node: str) -> None:
    """
    Show every link touching NODE, in either direction.
    """
    graph = load_graph_file(graph_file)
    if graph is None:
        return

    center = resolve_node(graph, node, "node")
    if center is None:
        return

    hood = find_node_neighbors(graph, center.id)
    index = graph.node_index()

    console.print(f"\n[bold]{escape(node_label(center))}[/bold] has {len(hood.nodes)} neighbor(s)")
    if not hood.links:
        return

    table = Table()
    table.add_column("Direction", style="dim")
    table.add_column("Asset", style="cyan")
    table.add_column("Node Type")
    table.add_column("Link Type", style="green")

    for link in hood.links:
        outgoing = link.source == center.id
        other_id = link.target if outgoing else link.source
        other = index.get(other_id)
        table.add_row(
            "out" if outgoing else "in",
            escape(node_label(other) if other is not None else other_id),
            other.type.value if other is not None else "unknown",
            link.type.value,
        )

    console.print(table)
