"""
Graph Builder.

Turns a raw relationship response into a GraphData snapshot.

Edge direction convention (every link points "downstream" along the
derivation chain, so forward path finding from the root reaches its
derivatives and related assets, and forward path finding from an
ancestor reaches the root):

    ancestor   --DERIVES_FROM-->  root
    root       --DERIVED_BY---->  derivative
    root       --RELATED------->  related
    root       --DISPUTE------->  disputed
"""

import logging
from typing import Any, Dict, List, Mapping, Tuple, Union

from ..core.types import (
    AssetRelationship,
    GraphData,
    GraphLink,
    GraphMetadata,
    GraphNode,
    LinkData,
    LinkType,
    NodeData,
    NodeType,
    RelationsResponse,
)

logger = logging.getLogger(__name__)

# list name -> (node type, link type, link points from root)
RELATIONSHIP_LISTS: Tuple[Tuple[str, NodeType, LinkType, bool], ...] = (
    ("ancestors", NodeType.ANCESTOR, LinkType.DERIVES_FROM, False),
    ("derivatives", NodeType.DERIVATIVE, LinkType.DERIVED_BY, True),
    ("related", NodeType.RELATED, LinkType.RELATED, True),
    ("disputed", NodeType.DISPUTED, LinkType.DISPUTE, True),
)


class GraphBuilder:
    """
    Builds a graph from one relationship response.

    Node ids reused across lists resolve last-write-wins: the node keeps the
    position of its first occurrence and takes the attributes of its last.
    Entries pointing back at the root asset are skipped.
    """

    def __init__(self, response: RelationsResponse):
        self.response = response
        self._nodes: Dict[str, GraphNode] = {}
        self._links: Dict[str, GraphLink] = {}

    def build(self) -> GraphData:
        root = self.response.root
        self._nodes[root.ip_id] = GraphNode(
            id=root.ip_id,
            type=NodeType.ROOT,
            title=root.title,
            description=root.description,
            image=root.image,
            media_url=root.media_url,
            media_type=root.media_type,
            created_at=root.created_at,
            data=NodeData(distance=0, tags=list(root.tags), metadata=dict(root.metadata)),
        )

        for list_name, node_type, link_type, from_root in RELATIONSHIP_LISTS:
            for entry in getattr(self.response, list_name):
                self._add_entry(entry, node_type, link_type, from_root)

        nodes = list(self._nodes.values())
        links = list(self._links.values())
        distances = [n.data.distance for n in nodes if n.data.distance is not None]

        logger.debug(f"Built graph for {root.ip_id}: {len(nodes)} nodes, {len(links)} links")

        return GraphData(
            nodes=nodes,
            links=links,
            metadata=GraphMetadata(
                root_id=root.ip_id,
                total_nodes=len(nodes),
                total_links=len(links),
                max_distance=max(distances, default=0),
            ),
        )

    def _add_entry(
        self,
        entry: AssetRelationship,
        node_type: NodeType,
        link_type: LinkType,
        from_root: bool,
    ) -> None:
        root_id = self.response.root.ip_id
        if not entry.ip_id:
            logger.warning(f"Skipping {node_type.value} entry without an asset id")
            return
        if entry.ip_id == root_id:
            logger.debug(f"Skipping {node_type.value} entry that references the root {root_id}")
            return

        if entry.ip_id in self._nodes:
            logger.debug(f"Asset {entry.ip_id} listed more than once; keeping latest as {node_type.value}")

        self._nodes[entry.ip_id] = GraphNode(
            id=entry.ip_id,
            type=node_type,
            title=entry.title,
            description=entry.description,
            image=entry.image,
            created_at=entry.created_at,
            data=NodeData(
                relationship_type=entry.relationship_type,
                relationship_id=entry.relationship_id,
                distance=entry.distance,
                direction=entry.direction,
                approval_status=entry.approval_status,
                verification_status=entry.verification_status,
                remix_type=entry.remix_type,
                license_id=entry.license_id,
                tags=entry.tags,
                metadata=dict(entry.metadata),
            ),
        )

        source, target = (root_id, entry.ip_id) if from_root else (entry.ip_id, root_id)
        link = GraphLink(
            id=entry.relationship_id or "",
            source=source,
            target=target,
            type=link_type,
            relationship_id=entry.relationship_id,
            data=LinkData(relationship_type=entry.relationship_type),
        )
        self._links[link.id] = link


def build_graph(response: Union[RelationsResponse, Mapping[str, Any]]) -> GraphData:
    """
    Build a GraphData snapshot from a relationship response.

    Args:
        response: A validated RelationsResponse or a raw camelCase mapping
            as returned by the upstream service.

    Returns:
        A fresh graph with the root node first, followed by ancestors,
        derivatives, related and disputed assets in input order.
    """
    if not isinstance(response, RelationsResponse):
        response = RelationsResponse.model_validate(response)
    return GraphBuilder(response).build()


def graph_from_dict(data: Mapping[str, Any]) -> GraphData:
    """Load an already-built graph (``{"nodes": [...], "links": [...]}``)."""
    nodes: List[Any] = list(data.get("nodes") or [])
    links: List[Any] = list(data.get("links") or data.get("edges") or [])
    return GraphData.model_validate({
        "nodes": nodes,
        "links": links,
        "metadata": data.get("metadata"),
    })
