"""Highlight Engine: derive emphasis and opacity for a target node and link set."""

from typing import Iterable, List, Optional, Sequence

from ..core.types import GraphData, GraphLink

DEFAULT_DIM_OPACITY = 0.3


def create_highlighted_graph(
    graph: GraphData,
    highlighted_node_ids: Iterable[str],
    highlighted_links: Optional[Sequence[GraphLink]] = None,
    dim_opacity: float = DEFAULT_DIM_OPACITY,
) -> GraphData:
    """
    Return a copy of ``graph`` with highlight state applied.

    Listed nodes become highlighted at full opacity; every other node is
    dimmed. Links are matched by (source, target, type) rather than by
    object identity, so links taken from an older snapshot still match.
    Re-applying with the same inputs yields the same flags.
    """
    if graph.is_empty:
        return graph

    node_ids = set(highlighted_node_ids)
    link_keys = {link.key for link in highlighted_links or ()}

    nodes = [
        node.model_copy(update={
            "highlighted": node.id in node_ids,
            "opacity": 1.0 if node.id in node_ids else dim_opacity,
        })
        for node in graph.nodes
    ]
    links = [
        link.model_copy(update={"highlighted": link.key in link_keys})
        for link in graph.links
    ]
    return GraphData(nodes=nodes, links=links, metadata=graph.metadata)


def path_node_ids(path: Sequence[GraphLink]) -> List[str]:
    """Node ids visited by a link path, in order and without repeats."""
    ids: List[str] = []
    for link in path:
        for node_id in (link.source, link.target):
            if node_id not in ids:
                ids.append(node_id)
    return ids


def highlight_path(
    graph: GraphData,
    path: Sequence[GraphLink],
    dim_opacity: float = DEFAULT_DIM_OPACITY,
) -> GraphData:
    """Highlight every node and link along ``path``."""
    return create_highlighted_graph(graph, path_node_ids(path), path, dim_opacity=dim_opacity)
