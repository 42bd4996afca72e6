"""
Core type definitions for ipgraph.

Two families of models live here:

- The graph model (GraphNode, GraphLink, GraphData) consumed by the
  filter, path and highlight stages and handed to renderers.
- The raw relationship response (AssetNode, AssetRelationship,
  RelationsResponse) as delivered by the upstream asset-data service.

Raw models substitute documented defaults for missing fields instead of
failing, so a partially malformed payload still yields a usable graph.
"""

from datetime import datetime, timezone
from enum import StrEnum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

UNKNOWN_ASSET_TITLE = "Unknown IP asset"


class _LenientEnum(StrEnum):
    """StrEnum that also accepts member names and case variants ("ROOT", "Root")."""

    @classmethod
    def _missing_(cls, value: object):
        if isinstance(value, str):
            lowered = value.lower()
            for member in cls:
                if member.name.lower() == lowered or member.value.lower() == lowered:
                    return member
        return None


class NodeType(_LenientEnum):
    """Role of an asset relative to the root of the graph."""
    ROOT = "root"
    ANCESTOR = "ancestor"
    DERIVATIVE = "derivative"
    SIBLING = "sibling"
    RELATED = "related"
    DISPUTED = "disputed"
    COLLABORATOR = "collaborator"


class LinkType(_LenientEnum):
    """Kinds of edges between assets."""
    DERIVES_FROM = "derivesFrom"
    DERIVED_BY = "derivedBy"
    COMMON_ANCESTOR = "commonAncestor"
    RELATED = "related"
    COLLABORATION = "collaboration"
    DISPUTE = "dispute"


class RelationshipType(_LenientEnum):
    """Specific creative relationship carried on a link or node."""
    REMIX = "remix"
    ADAPTATION = "adaptation"
    TRANSLATION = "translation"
    SAMPLE = "sample"
    SEQUEL = "sequel"
    PREQUEL = "prequel"
    SPINOFF = "spinoff"
    INSPIRATION = "inspiration"
    HOMAGE = "homage"
    PARODY = "parody"
    REFERENCE = "reference"
    OTHER = "other"


class RemixType(_LenientEnum):
    VISUAL = "visual"
    AUDIO = "audio"
    TEXT = "text"
    CODE = "code"
    MIXED_MEDIA = "mixedMedia"
    INTERACTIVE = "interactive"
    OTHER = "other"


class ApprovalStatus(_LenientEnum):
    APPROVED = "approved"
    PENDING = "pending"
    REJECTED = "rejected"
    AUTO_APPROVED = "autoApproved"
    NOT_REQUIRED = "notRequired"


class VerificationStatus(_LenientEnum):
    VERIFIED = "verified"
    UNVERIFIED = "unverified"
    DISPUTED = "disputed"
    IN_REVIEW = "inReview"


class Direction(_LenientEnum):
    """Direction of a relationship as reported upstream."""
    INBOUND = "inbound"
    OUTBOUND = "outbound"
    BIDIRECTIONAL = "bidirectional"


def endpoint_id(value: Any) -> Any:
    """
    Resolve a link endpoint to a node id.

    Renderers replace ids with node objects once a layout has run; this
    accepts an id, a GraphNode (or any object with an ``id``) or a mapping
    with an ``"id"`` key.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        return value.get("id", value)
    node_id = getattr(value, "id", None)
    if isinstance(node_id, str):
        return node_id
    return value


# =============================================================================
# Graph model
# =============================================================================

class NodeData(BaseModel):
    """
    Relationship attributes attached to a node.

    Extra keys are kept so renderer-owned layout state (x, y, vx, vy, fx,
    fy) survives a round trip through the core untouched.
    """
    relationship_type: Optional[str] = None
    relationship_id: Optional[str] = None
    distance: Optional[int] = None
    direction: Optional[str] = None
    approval_status: Optional[str] = None
    verification_status: Optional[str] = None
    remix_type: Optional[str] = None
    license_id: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(
        extra="allow", alias_generator=to_camel, populate_by_name=True
    )


class GraphNode(BaseModel):
    """An IP asset placed in the relationship graph."""
    id: str
    type: NodeType
    title: str = ""
    description: Optional[str] = None
    image: Optional[str] = None
    media_url: Optional[str] = None
    media_type: Optional[str] = None
    created_at: Optional[str] = None
    data: NodeData = Field(default_factory=NodeData)

    # Owned by the filter and highlight stages
    highlighted: bool = False
    opacity: float = Field(default=1.0, ge=0.0, le=1.0)

    model_config = ConfigDict(
        extra="ignore", alias_generator=to_camel, populate_by_name=True
    )

    @field_validator("data", mode="before")
    @classmethod
    def _none_data(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def distance(self) -> Optional[int]:
        return self.data.distance

    @property
    def relationship_type(self) -> Optional[str]:
        return self.data.relationship_type


class LinkData(BaseModel):
    relationship_type: Optional[str] = None

    model_config = ConfigDict(
        extra="allow", alias_generator=to_camel, populate_by_name=True
    )


class GraphLink(BaseModel):
    """
    Directed edge between two nodes.

    ``source`` and ``target`` are always node ids after validation, even
    when the caller hands in laid-out node objects.
    """
    id: str = ""
    source: str
    target: str
    type: LinkType
    relationship_id: Optional[str] = None
    data: LinkData = Field(default_factory=LinkData)
    highlighted: bool = False

    model_config = ConfigDict(
        extra="ignore", alias_generator=to_camel, populate_by_name=True
    )

    @field_validator("source", "target", mode="before")
    @classmethod
    def _resolve_endpoint(cls, value: Any) -> Any:
        return endpoint_id(value)

    @field_validator("data", mode="before")
    @classmethod
    def _none_data(cls, value: Any) -> Any:
        return {} if value is None else value

    def model_post_init(self, __context) -> None:
        if not self.id:
            object.__setattr__(self, "id", f"{self.source}->{self.target}:{self.type.value}")

    @property
    def key(self) -> Tuple[str, str, LinkType]:
        """Identity used when matching links across graph snapshots."""
        return (self.source, self.target, self.type)

    def touches(self, node_id: str) -> bool:
        return self.source == node_id or self.target == node_id


class GraphMetadata(BaseModel):
    """
    Summary of a built graph.

    ``total_nodes`` is the node count. Older payloads called this figure
    ``depth``; the real hop depth is ``max_distance``.
    """
    root_id: str
    total_nodes: int = 0
    total_links: int = 0
    max_distance: int = 0
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GraphData(BaseModel):
    """A complete graph snapshot. Stages return new instances, never mutate."""
    nodes: List[GraphNode] = Field(default_factory=list)
    links: List[GraphLink] = Field(default_factory=list)
    metadata: Optional[GraphMetadata] = None

    @property
    def root_id(self) -> Optional[str]:
        if self.metadata is not None:
            return self.metadata.root_id
        for node in self.nodes:
            if node.type == NodeType.ROOT:
                return node.id
        return None

    def get_node(self, node_id: str) -> Optional[GraphNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def has_node(self, node_id: str) -> bool:
        return any(node.id == node_id for node in self.nodes)

    def node_index(self) -> Dict[str, GraphNode]:
        return {node.id: node for node in self.nodes}

    @property
    def is_empty(self) -> bool:
        return not self.nodes and not self.links


# =============================================================================
# Raw relationship response
# =============================================================================

class _RawModel(BaseModel):
    model_config = ConfigDict(
        extra="ignore", alias_generator=to_camel, populate_by_name=True
    )


class Creator(_RawModel):
    address: str = ""
    name: Optional[str] = None
    contribution_type: Optional[str] = None


class AssetNode(_RawModel):
    """The root asset of a relationship response."""
    ip_id: str
    title: str = UNKNOWN_ASSET_TITLE
    description: Optional[str] = None
    image: Optional[str] = None
    media_url: Optional[str] = None
    media_type: Optional[str] = None
    created_at: Optional[str] = None
    creators: List[Creator] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("title", mode="before")
    @classmethod
    def _default_title(cls, value: Any) -> Any:
        return value or UNKNOWN_ASSET_TITLE

    @field_validator("creators", "tags", "metadata", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any, info) -> Any:
        if value is None:
            return {} if info.field_name == "metadata" else []
        return value


class AssetRelationship(_RawModel):
    """One entry of an ancestors/derivatives/related/disputed list."""
    ip_id: str = ""
    title: str = UNKNOWN_ASSET_TITLE
    description: Optional[str] = None
    image: Optional[str] = None
    relationship_type: str = RelationshipType.OTHER.value
    relationship_id: Optional[str] = None
    direction: str = Direction.BIDIRECTIONAL.value
    approval_status: Optional[str] = None
    verification_status: Optional[str] = None
    remix_type: Optional[str] = None
    license_id: Optional[str] = None
    created_at: Optional[str] = None
    distance: int = 1
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("title", mode="before")
    @classmethod
    def _default_title(cls, value: Any) -> Any:
        return value or UNKNOWN_ASSET_TITLE

    @field_validator("relationship_type", mode="before")
    @classmethod
    def _default_relationship(cls, value: Any) -> Any:
        return str(value).lower() if value else RelationshipType.OTHER.value

    @field_validator("direction", mode="before")
    @classmethod
    def _default_direction(cls, value: Any) -> Any:
        return value or Direction.BIDIRECTIONAL.value

    @field_validator("distance", mode="before")
    @classmethod
    def _default_distance(cls, value: Any) -> Any:
        return 1 if value is None else value

    @field_validator("metadata", mode="before")
    @classmethod
    def _none_metadata(cls, value: Any) -> Any:
        return value or {}

    @property
    def tags(self) -> List[str]:
        tags = self.metadata.get("tags") or []
        return [str(tag) for tag in tags]


class RelationsSummary(_RawModel):
    total_relationships: int = 0
    direct_relationships: int = 0
    indirect_relationships: int = 0
    updated_at: Optional[str] = None


class RelationsResponse(_RawModel):
    """Root asset plus its relationship lists, as fetched upstream."""
    root: AssetNode
    ancestors: List[AssetRelationship] = Field(default_factory=list)
    derivatives: List[AssetRelationship] = Field(default_factory=list)
    related: List[AssetRelationship] = Field(default_factory=list)
    disputed: List[AssetRelationship] = Field(default_factory=list)
    metadata: RelationsSummary = Field(default_factory=RelationsSummary)

    @field_validator("ancestors", "derivatives", "related", "disputed", mode="before")
    @classmethod
    def _none_to_list(cls, value: Any) -> Any:
        return value or []

    @field_validator("metadata", mode="before")
    @classmethod
    def _none_summary(cls, value: Any) -> Any:
        return value or {}

    @property
    def relationship_count(self) -> int:
        return len(self.ancestors) + len(self.derivatives) + len(self.related) + len(self.disputed)
