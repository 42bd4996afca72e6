"""
Path Command - Describe how two assets are connected.
"""

import click

from ...graph.paths import find_relationship_path
from ..utils import load_graph_file, node_label, resolve_node


@click.command()
@click.argument("graph_file")
@click.argument("source")
@click.argument("target")
def path(graph_file: str, source: str, target: str) -> None:
    """
    Find the shortest forward path from SOURCE to TARGET.

    Links are only followed from their source to their target, so an
    ancestor reaches the root but the root does not reach its ancestors.
    """
    graph = load_graph_file(graph_file)
    if graph is None:
        return

    source_node = resolve_node(graph, source, "source")
    if source_node is None:
        return
    target_node = resolve_node(graph, target, "target")
    if target_node is None:
        return

    result = find_relationship_path(graph, source_node.id, target_node.id)

    click.echo()
    if result.path is None:
        click.echo(click.style(result.description, fg="yellow") + " between:")
        click.echo(f"  Source: {source_node.id}")
        click.echo(f"  Target: {target_node.id}")
        return

    click.echo(f"🔗 {click.style('Relationship Path', bold=True)}")
    click.echo("═" * 60)
    click.echo(result.description)
    if not result.path:
        return

    click.echo()
    click.echo(f"Distance: {result.distance}")
    index = graph.node_index()
    click.echo(f"    {click.style(node_label(source_node), fg='cyan')}")
    for i, link in enumerate(result.path):
        connector = "└─" if i == len(result.path) - 1 else "├─"
        node = index.get(link.target)
        label = node_label(node) if node is not None else link.target
        click.echo(f"    {connector} [{link.type.value}] {click.style(label, fg='green')}")
