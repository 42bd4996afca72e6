"""
Filter Command - Preview the graph a set of filters would display.
"""

import json
from typing import Optional

import click

from ...core.types import LinkType, NodeType, RelationshipType
from ...graph.filters import apply_filters
from ..utils import echo_info, load_graph_file, node_label

NODE_TYPE_CHOICES = [t.value for t in NodeType]
LINK_TYPE_CHOICES = [t.value for t in LinkType]
RELATIONSHIP_CHOICES = [t.value for t in RelationshipType]


@click.command()
@click.argument("graph_file")
@click.option("-n", "--node-type", "node_types", multiple=True,
              type=click.Choice(NODE_TYPE_CHOICES, case_sensitive=False),
              help="Node type to keep (repeatable, default all)")
@click.option("-l", "--link-type", "link_types", multiple=True,
              type=click.Choice(LINK_TYPE_CHOICES, case_sensitive=False),
              help="Link type to keep (repeatable, default all)")
@click.option("-r", "--relationship-type", "relationship_types", multiple=True,
              type=click.Choice(RELATIONSHIP_CHOICES, case_sensitive=False),
              help="Relationship type to keep (repeatable, default any)")
@click.option("-s", "--search", "search_query", default="", help="Free-text search")
@click.option("--max-distance", type=int, default=None, help="Maximum hops from the root")
@click.option("--json", "as_json", is_flag=True, help="Output the filtered graph as JSON")
def filter_graph(
    graph_file: str,
    node_types: tuple,
    link_types: tuple,
    relationship_types: tuple,
    search_query: str,
    max_distance: Optional[int],
    as_json: bool,
) -> None:
    """
    Apply filters to a graph file and list what survives.
    """
    graph = load_graph_file(graph_file)
    if graph is None:
        return

    filtered = apply_filters(
        graph,
        [NodeType(t) for t in node_types] or list(NodeType),
        [LinkType(t) for t in link_types] or list(LinkType),
        search_query=search_query,
        max_distance=max_distance,
        relationship_types=[RelationshipType(t) for t in relationship_types] or None,
    )

    if as_json:
        click.echo(json.dumps(filtered.model_dump(mode="json", by_alias=True), indent=2))
        return

    click.echo()
    click.echo(
        f"Kept {click.style(str(len(filtered.nodes)), bold=True)}/{len(graph.nodes)} nodes, "
        f"{click.style(str(len(filtered.links)), bold=True)}/{len(graph.links)} links"
    )
    for node in filtered.nodes:
        marker = click.style("★", fg="yellow") if node.highlighted else " "
        click.echo(f"  {marker} {node_label(node):<24} {node.type.value}")

    if search_query and not any(node.highlighted for node in filtered.nodes):
        echo_info(f"No assets match '{search_query}'")
