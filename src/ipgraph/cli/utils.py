"""
CLI Utilities - Shared helpers for the inspection commands.

Formatted printing, graph file loading and node name resolution.
"""

import json
import logging
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError

from ..config import EngineConfig
from ..core.types import GraphData, GraphNode
from ..graph.builder import build_graph, graph_from_dict
from ..graph.filters import matches_query
from ..graph.style import get_node_label

logger = logging.getLogger(__name__)


def echo_success(message: str) -> None:
    """
    Print a success message with a green checkmark.

    Args:
        message (str): The message to display.
    """
    click.echo(click.style(f"✅ {message}", fg="green"))


def echo_error(message: str) -> None:
    """
    Print an error message with a red cross.

    Args:
        message (str): The error message to display.
    """
    click.echo(click.style(f"❌ {message}", fg="red"), err=True)


def echo_info(message: str) -> None:
    click.echo(click.style(f"   {message}", dim=True))


def load_graph_file(graph_file: str) -> Optional[GraphData]:
    """
    Load a graph from a JSON file.

    The file may hold a raw relationship response (an object with a
    ``root`` asset) or an already built graph (``nodes`` plus ``links``).

    Args:
        graph_file (str): Path to the JSON file.

    Returns:
        Optional[GraphData]: The graph, or None if loading failed.
    """
    graph_path = Path(graph_file)
    if not graph_path.exists():
        echo_error(f"Graph file not found: {graph_file}")
        return None

    try:
        data = json.loads(graph_path.read_text())
    except json.JSONDecodeError as e:
        echo_error(f"Invalid JSON in {graph_file}: {e}")
        return None

    if not isinstance(data, dict):
        echo_error(f"Expected a JSON object in {graph_file}")
        return None

    try:
        if "root" in data:
            return build_graph(data)
        return graph_from_dict(data)
    except ValidationError as e:
        echo_error(f"Failed to load graph: {e.error_count()} invalid field(s)")
        logger.debug(f"Validation errors for {graph_file}: {e}")
        return None


def resolve_node(graph: GraphData, name: str, label: str) -> Optional[GraphNode]:
    """Resolve an id, or a partial id/title, to a node in the graph."""
    node = graph.get_node(name)
    if node is not None:
        return node

    matches = [n for n in graph.nodes if matches_query(n, name)]
    if not matches:
        echo_error(f"No node found matching {label}: {name}")
        return None

    if len(matches) > 1:
        click.echo(f"Ambiguous {label} '{name}'. Using first match: {matches[0].id}")
    return matches[0]


def node_label(node: GraphNode) -> str:
    """Display label truncated to the configured ``label_max_length``."""
    ctx = click.get_current_context(silent=True)
    config = ctx.find_object(EngineConfig) if ctx is not None else None
    return get_node_label(node, (config or EngineConfig()).label_max_length)
