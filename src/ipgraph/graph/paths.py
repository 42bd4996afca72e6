"""
Path finding over the relationship graph.

Paths follow links strictly from ``source`` to ``target``. Neighborhood
lookups, by contrast, consider both directions. Unknown node ids never
raise: they produce ``None`` or empty results.
"""

from collections import defaultdict, deque
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from ..core.types import GraphData, GraphLink, GraphNode

SAME_ASSET_DESCRIPTION = "Same IP"
NO_RELATIONSHIP_DESCRIPTION = "No relationship found"


class Neighborhood(BaseModel):
    """Nodes adjacent to a node and the links connecting them."""
    nodes: List[GraphNode] = Field(default_factory=list)
    links: List[GraphLink] = Field(default_factory=list)


class RelationshipPath(BaseModel):
    """Human-oriented description of how two assets are connected."""
    path: Optional[List[GraphLink]] = None
    intermediate_nodes: List[GraphNode] = Field(default_factory=list)
    description: str = NO_RELATIONSHIP_DESCRIPTION
    distance: int = 0
    source_node: Optional[GraphNode] = None
    target_node: Optional[GraphNode] = None


def _outgoing(graph: GraphData) -> Dict[str, List[GraphLink]]:
    outgoing: Dict[str, List[GraphLink]] = defaultdict(list)
    for link in graph.links:
        outgoing[link.source].append(link)
    return outgoing


def find_path(graph: GraphData, source_id: str, target_id: str) -> Optional[List[GraphLink]]:
    """
    Shortest forward path between two nodes (breadth-first).

    Returns:
        The links from source to target in traversal order, ``[]`` when
        both ids are the same, or ``None`` when the target cannot be reached
        by following links forward. Ties resolve in link-list order.
    """
    if source_id == target_id:
        return []

    outgoing = _outgoing(graph)
    visited = {source_id}
    came_by: Dict[str, GraphLink] = {}
    queue = deque([source_id])

    while queue:
        current = queue.popleft()
        for link in outgoing.get(current, []):
            if link.target in visited:
                continue
            visited.add(link.target)
            came_by[link.target] = link
            if link.target == target_id:
                return _unwind(came_by, source_id, target_id)
            queue.append(link.target)

    return None


def _unwind(came_by: Dict[str, GraphLink], source_id: str, target_id: str) -> List[GraphLink]:
    path: List[GraphLink] = []
    current = target_id
    while current != source_id:
        link = came_by[current]
        path.append(link)
        current = link.source
    path.reverse()
    return path


def find_node_neighbors(graph: GraphData, node_id: str) -> Neighborhood:
    """All links touching ``node_id`` (either direction) and the nodes on their far ends."""
    links = [link for link in graph.links if link.touches(node_id)]
    neighbor_ids = set()
    for link in links:
        neighbor_ids.add(link.target if link.source == node_id else link.source)

    nodes = [node for node in graph.nodes if node.id in neighbor_ids]
    return Neighborhood(nodes=nodes, links=links)


def _title(node: Optional[GraphNode], fallback: str) -> str:
    if node is not None and node.title:
        return node.title
    return fallback


def find_relationship_path(graph: GraphData, source_id: str, target_id: str) -> RelationshipPath:
    """
    Describe the forward relationship between two nodes.

    Wraps find_path and adds the intermediate assets along the way plus a
    readable sentence suitable for a tooltip or detail panel.
    """
    index = graph.node_index()
    source_node = index.get(source_id)
    target_node = index.get(target_id)

    if source_id == target_id:
        return RelationshipPath(
            path=[],
            description=SAME_ASSET_DESCRIPTION,
            distance=0,
            source_node=source_node,
            target_node=target_node,
        )

    path = find_path(graph, source_id, target_id)
    if path is None:
        return RelationshipPath(
            path=None,
            description=NO_RELATIONSHIP_DESCRIPTION,
            distance=0,
            source_node=source_node,
            target_node=target_node,
        )

    source_title = _title(source_node, source_id)
    target_title = _title(target_node, target_id)

    if len(path) == 1:
        link = path[0]
        kind = link.data.relationship_type or link.type.value
        description = f'Direct relationship: "{source_title}" -> "{target_title}" ({kind})'
        return RelationshipPath(
            path=path,
            description=description,
            distance=1,
            source_node=source_node,
            target_node=target_node,
        )

    intermediate = [index[link.target] for link in path[:-1] if link.target in index]
    hops = len(path) - 1
    noun = "asset" if hops == 1 else "assets"
    description = (
        f'"{source_title}" is connected to "{target_title}" '
        f"through {hops} intermediate IP {noun}: "
        + ", ".join(_title(node, node.id) for node in intermediate)
    )
    return RelationshipPath(
        path=path,
        intermediate_nodes=intermediate,
        description=description,
        distance=len(path),
        source_node=source_node,
        target_node=target_node,
    )
