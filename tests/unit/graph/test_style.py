"""Unit tests for color and label resolution."""

import pytest

from ipgraph.core.types import GraphLink, GraphNode, LinkType, NodeType
from ipgraph.graph.style import (
    HIGHLIGHT_COLOR,
    UNKNOWN_LINK_COLOR,
    UNKNOWN_NODE_COLOR,
    get_link_color,
    get_node_color,
    get_node_label,
)


class TestColors:
    @pytest.mark.parametrize("node_type,color", [
        (NodeType.ROOT, "#FF5733"),
        (NodeType.ANCESTOR, "#33A1FF"),
        (NodeType.DERIVATIVE, "#33FF57"),
        (NodeType.SIBLING, "#F033FF"),
        (NodeType.RELATED, "#FFBD33"),
    ])
    def test_node_palette(self, node_type, color):
        assert get_node_color(GraphNode(id="a", type=node_type)) == color

    def test_node_unknown_type(self):
        assert get_node_color(GraphNode(id="a", type=NodeType.DISPUTED)) == UNKNOWN_NODE_COLOR
        assert get_node_color({"id": "a", "type": "mystery"}) == UNKNOWN_NODE_COLOR
        assert get_node_color({"id": "a"}) == UNKNOWN_NODE_COLOR

    def test_node_highlight_wins(self):
        assert get_node_color(GraphNode(id="a", type=NodeType.ROOT), highlighted=True) == HIGHLIGHT_COLOR

    def test_node_plain_mapping(self):
        assert get_node_color({"id": "a", "type": "derivative"}) == "#33FF57"

    @pytest.mark.parametrize("link_type,color", [
        (LinkType.DERIVES_FROM, "#33A1FF"),
        (LinkType.DERIVED_BY, "#33FF57"),
        (LinkType.COMMON_ANCESTOR, "#F033FF"),
        (LinkType.RELATED, "#FFBD33"),
    ])
    def test_link_palette(self, link_type, color):
        assert get_link_color(GraphLink(source="a", target="b", type=link_type)) == color

    def test_link_unknown_and_highlight(self):
        assert get_link_color({"type": "dispute"}) == UNKNOWN_LINK_COLOR
        assert get_link_color({"type": "derivedBy"}, highlighted=True) == HIGHLIGHT_COLOR


class TestNodeLabel:
    def test_short_title_verbatim(self):
        assert get_node_label({"id": "x", "title": "Short"}) == "Short"

    def test_title_at_bound_verbatim(self):
        assert get_node_label({"title": "a" * 20}) == "a" * 20

    def test_long_title_truncated(self):
        title = "This is a very long title that should be truncated"
        assert get_node_label({"title": title}, 15) == title[:15] + "..."

    def test_missing_title_uses_id_prefix(self):
        assert get_node_label({"id": "a1b2c3d4e5f6g7h8"}, 20) == "a1b2c3d4..."

    def test_model_input(self):
        node = GraphNode(id="0x1234567890", type=NodeType.ROOT)
        assert get_node_label(node) == "0x123456..."
