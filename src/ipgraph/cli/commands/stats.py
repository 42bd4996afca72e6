"""
Stats Command - Summarize a relationship graph.
"""

import json
from collections import Counter

import click

from ..utils import load_graph_file


@click.command()
@click.argument("graph_file")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def stats(graph_file: str, as_json: bool) -> None:
    """
    Show node and link counts for a graph file.
    """
    graph = load_graph_file(graph_file)
    if graph is None:
        return

    node_counts = Counter(node.type.value for node in graph.nodes)
    link_counts = Counter(link.type.value for link in graph.links)
    distances = [node.distance for node in graph.nodes if node.distance is not None]
    max_distance = max(distances, default=0)

    if as_json:
        click.echo(json.dumps({
            "root_id": graph.root_id,
            "total_nodes": len(graph.nodes),
            "total_links": len(graph.links),
            "max_distance": max_distance,
            "node_types": dict(node_counts),
            "link_types": dict(link_counts),
        }, indent=2))
        return

    root = graph.get_node(graph.root_id) if graph.root_id else None
    click.echo()
    click.echo(f"📊 {click.style('Relationship Graph', bold=True)}")
    click.echo("═" * 60)
    if root is not None:
        click.echo(f"Root: {click.style(root.title or root.id, fg='cyan')} ({root.id})")
    click.echo(f"Nodes: {len(graph.nodes)}   Links: {len(graph.links)}   Max distance: {max_distance}")

    if node_counts:
        click.echo()
        click.echo("Nodes by type:")
        for node_type, count in node_counts.most_common():
            click.echo(f"  {node_type:<14} {count}")

    if link_counts:
        click.echo()
        click.echo("Links by type:")
        for link_type, count in link_counts.most_common():
            click.echo(f"  {link_type:<14} {count}")
