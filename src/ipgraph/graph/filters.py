"""
Filter Engine.

Reduces a graph to the subset matching the active criteria. The root node
survives every filter. A non-empty search query overrides the node-type
filter: matching nodes are kept (and highlighted) whatever their type,
non-matching nodes are dropped.
"""

import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence

from pydantic import BaseModel, Field

from ..core.types import (
    GraphData,
    GraphLink,
    GraphMetadata,
    GraphNode,
    LinkType,
    NodeType,
    RelationshipType,
)

logger = logging.getLogger(__name__)


class GraphFilters(BaseModel):
    """Active filter criteria, as held by the view-state store."""
    node_types: List[NodeType] = Field(default_factory=lambda: [
        NodeType.ROOT,
        NodeType.ANCESTOR,
        NodeType.DERIVATIVE,
    ])
    link_types: List[LinkType] = Field(default_factory=lambda: [
        LinkType.DERIVES_FROM,
        LinkType.DERIVED_BY,
    ])
    relationship_types: Optional[List[RelationshipType]] = Field(default_factory=lambda: [
        RelationshipType.REMIX,
        RelationshipType.ADAPTATION,
        RelationshipType.SEQUEL,
        RelationshipType.PREQUEL,
        RelationshipType.SPINOFF,
    ])
    remix_types: Optional[List[str]] = None
    approval_statuses: Optional[List[str]] = None
    verification_statuses: Optional[List[str]] = None
    min_creation_date: Optional[str] = None
    max_creation_date: Optional[str] = None
    tags: Optional[List[str]] = None
    # Not applied by any filter stage
    creators: Optional[List[str]] = None
    search_query: str = ""
    max_distance: Optional[int] = 2
    show_labels: bool = True


class GraphSearchResult(BaseModel):
    """Nodes matching a free-text query and the links touching them."""
    nodes: List[GraphNode] = Field(default_factory=list)
    links: List[GraphLink] = Field(default_factory=list)
    query: str
    total_results: int = 0


def _parse_date(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.debug(f"Ignoring unparseable date {value!r}")
        return None
    # Naive dates are read as UTC; aware ones are converted to it
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.replace(tzinfo=None)


def matches_query(node: GraphNode, query: str) -> bool:
    """Case-insensitive substring match on title, description and id."""
    needle = query.lower()
    haystacks = (node.title, node.description, node.id)
    return any(needle in text.lower() for text in haystacks if text)


def _in(value: Optional[str], allowed: Optional[Iterable[str]]) -> bool:
    if allowed is None:
        return True
    return value is not None and value in allowed


class _Criteria:
    """Attribute criteria shared by the type-filtered and search paths."""

    def __init__(
        self,
        max_distance: Optional[int] = None,
        relationship_types: Optional[Sequence[str]] = None,
        remix_types: Optional[Sequence[str]] = None,
        approval_statuses: Optional[Sequence[str]] = None,
        verification_statuses: Optional[Sequence[str]] = None,
        min_creation_date: Optional[str] = None,
        max_creation_date: Optional[str] = None,
        tags: Optional[Sequence[str]] = None,
    ):
        self.max_distance = max_distance
        self.relationship_types = relationship_types
        self.remix_types = remix_types
        self.approval_statuses = approval_statuses
        self.verification_statuses = verification_statuses
        self.min_date = _parse_date(min_creation_date)
        self.max_date = _parse_date(max_creation_date)
        self.tags = set(tags) if tags is not None else None

    def accepts(self, node: GraphNode) -> bool:
        data = node.data
        # Nodes with unknown distance are not excluded by the distance bound
        if self.max_distance is not None and data.distance is not None:
            if data.distance > self.max_distance:
                return False
        if not _in(data.relationship_type, self.relationship_types):
            return False
        if not _in(data.remix_type, self.remix_types):
            return False
        if not _in(data.approval_status, self.approval_statuses):
            return False
        if not _in(data.verification_status, self.verification_statuses):
            return False
        if self.tags is not None and not self.tags.intersection(data.tags):
            return False
        if self.min_date is not None or self.max_date is not None:
            created = _parse_date(node.created_at)
            if created is None:
                return False
            if self.min_date is not None and created < self.min_date:
                return False
            if self.max_date is not None and created > self.max_date:
                return False
        return True


def _recount(metadata: Optional[GraphMetadata], nodes: List[GraphNode], links: List[GraphLink]) -> Optional[GraphMetadata]:
    if metadata is None:
        return None
    distances = [n.data.distance for n in nodes if n.data.distance is not None]
    return metadata.model_copy(update={
        "total_nodes": len(nodes),
        "total_links": len(links),
        "max_distance": max(distances, default=0),
    })


def apply_filters(
    graph: GraphData,
    node_types: Sequence[NodeType],
    link_types: Sequence[LinkType],
    search_query: str = "",
    max_distance: Optional[int] = None,
    relationship_types: Optional[Sequence[str]] = None,
    *,
    remix_types: Optional[Sequence[str]] = None,
    approval_statuses: Optional[Sequence[str]] = None,
    verification_statuses: Optional[Sequence[str]] = None,
    min_creation_date: Optional[str] = None,
    max_creation_date: Optional[str] = None,
    tags: Optional[Sequence[str]] = None,
) -> GraphData:
    """
    Return a new graph restricted to the nodes and links matching the criteria.

    Args:
        graph: Source graph; left untouched.
        node_types: Node types to keep (ignored for search matches).
        link_types: Link types to keep.
        search_query: Free text; when non-empty only matching nodes (plus
            the root) are kept, and matches are highlighted.
        max_distance: Maximum hop distance from the root.
        relationship_types: Allowed relationship types, or None for any.

    Returns:
        A graph preserving the input order of surviving nodes and links.
        Links survive only when both endpoints survive.
    """
    criteria = _Criteria(
        max_distance=max_distance,
        relationship_types=relationship_types,
        remix_types=remix_types,
        approval_statuses=approval_statuses,
        verification_statuses=verification_statuses,
        min_creation_date=min_creation_date,
        max_creation_date=max_creation_date,
        tags=tags,
    )
    allowed_nodes = set(node_types)
    allowed_links = set(link_types)
    query = (search_query or "").strip()

    nodes: List[GraphNode] = []
    for node in graph.nodes:
        is_match = bool(query) and matches_query(node, query)
        if node.type == NodeType.ROOT:
            keep = True
        elif query:
            keep = is_match and criteria.accepts(node)
        else:
            keep = node.type in allowed_nodes and criteria.accepts(node)

        if not keep:
            continue
        nodes.append(node.model_copy(update={"highlighted": True}) if is_match else node)

    kept_ids = {node.id for node in nodes}
    links = [
        link for link in graph.links
        if link.type in allowed_links and link.source in kept_ids and link.target in kept_ids
    ]

    logger.debug(
        f"Filtered graph: {len(nodes)}/{len(graph.nodes)} nodes, "
        f"{len(links)}/{len(graph.links)} links"
    )
    return GraphData(nodes=nodes, links=links, metadata=_recount(graph.metadata, nodes, links))


def apply_filter_state(graph: GraphData, filters: GraphFilters) -> GraphData:
    """Apply a complete GraphFilters model."""
    return apply_filters(
        graph,
        filters.node_types,
        filters.link_types,
        filters.search_query,
        filters.max_distance,
        filters.relationship_types,
        remix_types=filters.remix_types,
        approval_statuses=filters.approval_statuses,
        verification_statuses=filters.verification_statuses,
        min_creation_date=filters.min_creation_date,
        max_creation_date=filters.max_creation_date,
        tags=filters.tags,
    )


def search_graph(graph: GraphData, query: str) -> Optional[GraphSearchResult]:
    """
    Free-text search over a graph.

    Returns None for an empty query so callers can tell "no search" apart
    from "no results".
    """
    query = (query or "").strip()
    if not query:
        return None

    nodes = [node for node in graph.nodes if matches_query(node, query)]
    ids = {node.id for node in nodes}
    links = [link for link in graph.links if link.source in ids or link.target in ids]
    return GraphSearchResult(nodes=nodes, links=links, query=query, total_results=len(nodes))
