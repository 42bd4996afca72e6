"""
Color and label resolution for renderers.

Pure, stateless lookups. Inputs may be graph models or plain mappings,
since renderers often hold their own copies of node and link records.
"""

from typing import Any, Dict, Optional

from ..core.types import LinkType, NodeType

HIGHLIGHT_COLOR = "#FFD700"
UNKNOWN_NODE_COLOR = "#AAAAAA"
UNKNOWN_LINK_COLOR = "#CCCCCC"
ELLIPSIS = "..."

NODE_COLORS: Dict[NodeType, str] = {
    NodeType.ROOT: "#FF5733",
    NodeType.ANCESTOR: "#33A1FF",
    NodeType.DERIVATIVE: "#33FF57",
    NodeType.SIBLING: "#F033FF",
    NodeType.RELATED: "#FFBD33",
}

LINK_COLORS: Dict[LinkType, str] = {
    LinkType.DERIVES_FROM: "#33A1FF",
    LinkType.DERIVED_BY: "#33FF57",
    LinkType.COMMON_ANCESTOR: "#F033FF",
    LinkType.RELATED: "#FFBD33",
}


def _field(item: Any, name: str) -> Any:
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


def _coerce(enum_cls, value: Any) -> Optional[Any]:
    if value is None:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        return None


def get_node_color(node: Any, highlighted: bool = False) -> str:
    """Color for a node by type; highlighting always wins."""
    if highlighted:
        return HIGHLIGHT_COLOR
    node_type = _coerce(NodeType, _field(node, "type"))
    return NODE_COLORS.get(node_type, UNKNOWN_NODE_COLOR)


def get_link_color(link: Any, highlighted: bool = False) -> str:
    """Color for a link by type; highlighting always wins."""
    if highlighted:
        return HIGHLIGHT_COLOR
    link_type = _coerce(LinkType, _field(link, "type"))
    return LINK_COLORS.get(link_type, UNKNOWN_LINK_COLOR)


def get_node_label(node: Any, max_length: int = 20) -> str:
    """
    Display label for a node.

    Titles longer than ``max_length`` are cut to ``max_length`` characters
    and suffixed with an ellipsis, so the result is ``max_length + 3`` long.
    Untitled nodes fall back to the first 8 characters of their id.
    """
    title = _field(node, "title")
    if not title:
        node_id = _field(node, "id") or ""
        return f"{node_id[:8]}{ELLIPSIS}"
    if len(title) <= max_length:
        return title
    return f"{title[:max_length]}{ELLIPSIS}"
