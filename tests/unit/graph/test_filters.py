"""Unit tests for the Filter Engine and graph search."""

import pytest

from ipgraph.core.types import GraphData, GraphNode, LinkType, NodeType, RelationshipType
from ipgraph.graph.filters import (
    GraphFilters,
    apply_filter_state,
    apply_filters,
    matches_query,
    search_graph,
)

ALL_NODE_TYPES = list(NodeType)
ALL_LINK_TYPES = list(LinkType)


def ids(graph: GraphData):
    return [n.id for n in graph.nodes]


class TestApplyFilters:
    def test_all_types_keeps_everything(self, sample_graph):
        filtered = apply_filters(sample_graph, ALL_NODE_TYPES, ALL_LINK_TYPES)
        assert len(filtered.nodes) == len(sample_graph.nodes)
        assert len(filtered.links) == len(sample_graph.links)

    @pytest.mark.parametrize("node_types", [[], [NodeType.DERIVATIVE], [NodeType.RELATED, NodeType.ANCESTOR]])
    def test_root_always_retained(self, sample_graph, node_types):
        filtered = apply_filters(sample_graph, node_types, [])
        assert "root1" in ids(filtered)

    def test_excluded_type_removes_node_and_its_links(self, sample_graph):
        filtered = apply_filters(
            sample_graph,
            [NodeType.ROOT, NodeType.DERIVATIVE],
            ALL_LINK_TYPES,
        )
        assert ids(filtered) == ["root1", "deriv1", "deriv2"]
        assert all(not link.touches("related1") for link in filtered.links)
        assert all(not link.touches("anc1") for link in filtered.links)
        assert [l.id for l in filtered.links] == ["rel1", "rel2"]

    def test_link_type_filter(self, sample_graph):
        filtered = apply_filters(sample_graph, ALL_NODE_TYPES, [LinkType.DERIVES_FROM])
        assert len(filtered.nodes) == 5
        assert [l.id for l in filtered.links] == ["rel0"]

    def test_max_distance(self, sample_graph):
        filtered = apply_filters(sample_graph, ALL_NODE_TYPES, ALL_LINK_TYPES, max_distance=1)
        assert "deriv2" not in ids(filtered)
        assert "deriv1" in ids(filtered)

    def test_unknown_distance_passes_distance_filter(self):
        graph = GraphData(nodes=[
            GraphNode(id="r", type=NodeType.ROOT),
            GraphNode(id="x", type=NodeType.RELATED),
        ])
        filtered = apply_filters(graph, ALL_NODE_TYPES, ALL_LINK_TYPES, max_distance=0)
        assert ids(filtered) == ["r", "x"]

    def test_relationship_types(self, sample_graph):
        filtered = apply_filters(
            sample_graph, ALL_NODE_TYPES, ALL_LINK_TYPES,
            relationship_types=[RelationshipType.REMIX, RelationshipType.ADAPTATION],
        )
        assert ids(filtered) == ["root1", "anc1", "deriv1"]

    def test_preserves_order(self, sample_graph):
        filtered = apply_filters(sample_graph, [NodeType.RELATED, NodeType.ANCESTOR], ALL_LINK_TYPES)
        assert ids(filtered) == ["root1", "anc1", "related1"]

    def test_input_untouched(self, sample_graph):
        before = sample_graph.model_dump()
        apply_filters(sample_graph, [NodeType.ROOT], [], search_query="Derivative")
        assert sample_graph.model_dump() == before

    def test_metadata_recounted(self, sample_graph):
        filtered = apply_filters(sample_graph, [NodeType.ROOT, NodeType.DERIVATIVE], ALL_LINK_TYPES, max_distance=1)
        assert filtered.metadata.root_id == "root1"
        assert filtered.metadata.total_nodes == 2
        assert filtered.metadata.total_links == 1
        assert filtered.metadata.max_distance == 1


class TestSearchQuery:
    def test_search_highlights_match_and_keeps_root(self, sample_graph):
        filtered = apply_filters(sample_graph, ALL_NODE_TYPES, ALL_LINK_TYPES, search_query="Derivative 1")

        assert ids(filtered) == ["root1", "deriv1"]
        assert filtered.get_node("deriv1").highlighted is True
        assert filtered.get_node("root1").highlighted is False

    def test_search_overrides_type_filter(self, sample_graph):
        filtered = apply_filters(sample_graph, [NodeType.ROOT], ALL_LINK_TYPES, search_query="related ip")
        assert ids(filtered) == ["root1", "related1"]

    def test_search_still_applies_distance(self, sample_graph):
        filtered = apply_filters(
            sample_graph, ALL_NODE_TYPES, ALL_LINK_TYPES, search_query="derivative", max_distance=1
        )
        assert ids(filtered) == ["root1", "deriv1"]

    def test_search_matches_description_and_id(self, sample_graph):
        assert matches_query(sample_graph.get_node("root1"), "ORIGINAL")
        assert matches_query(sample_graph.get_node("deriv2"), "riv2")
        assert not matches_query(sample_graph.get_node("deriv2"), "remix")

    def test_whitespace_query_ignored(self, sample_graph):
        filtered = apply_filters(sample_graph, [NodeType.ROOT, NodeType.DERIVATIVE], ALL_LINK_TYPES, search_query="   ")
        assert ids(filtered) == ["root1", "deriv1", "deriv2"]
        assert not any(n.highlighted for n in filtered.nodes)


class TestExtendedCriteria:
    def test_approval_statuses(self, sample_graph):
        filtered = apply_filters(
            sample_graph, ALL_NODE_TYPES, ALL_LINK_TYPES, approval_statuses=["approved"]
        )
        assert ids(filtered) == ["root1", "deriv1"]

    def test_tags(self, sample_graph):
        filtered = apply_filters(sample_graph, ALL_NODE_TYPES, ALL_LINK_TYPES, tags=["music", "film"])
        assert ids(filtered) == ["root1", "deriv1"]

    def test_date_range(self, sample_graph):
        filtered = apply_filters(
            sample_graph, ALL_NODE_TYPES, ALL_LINK_TYPES,
            min_creation_date="2024-01-01",
            max_creation_date="2024-06-30T23:59:59Z",
        )
        # related1 has no creation date and is excluded once a range is set
        assert ids(filtered) == ["root1", "deriv1"]

    def test_date_offsets_compared_in_utc(self):
        graph = GraphData(nodes=[
            GraphNode(id="r", type=NodeType.ROOT),
            GraphNode(id="a", type=NodeType.RELATED, created_at="2024-01-01T02:00:00Z"),
            GraphNode(id="b", type=NodeType.RELATED, created_at="2024-01-01T03:00:00+05:00"),
        ])
        filtered = apply_filters(
            graph, ALL_NODE_TYPES, ALL_LINK_TYPES, max_creation_date="2024-01-01T05:00:00+05:00"
        )
        assert ids(filtered) == ["r", "b"]

        filtered = apply_filters(graph, ALL_NODE_TYPES, ALL_LINK_TYPES, min_creation_date="2024-01-01")
        assert ids(filtered) == ["r", "a"]

    def test_creators_carried_but_not_applied(self, sample_graph):
        filters = GraphFilters(creators=["0xnobody"], relationship_types=None, node_types=ALL_NODE_TYPES)
        assert len(apply_filter_state(sample_graph, filters).nodes) == 5

    def test_remix_and_verification_statuses_none_means_any(self, sample_graph):
        filtered = apply_filters(
            sample_graph, ALL_NODE_TYPES, ALL_LINK_TYPES, remix_types=None, verification_statuses=None
        )
        assert len(filtered.nodes) == 5

    def test_verification_status_required_when_given(self, sample_graph):
        filtered = apply_filters(
            sample_graph, ALL_NODE_TYPES, ALL_LINK_TYPES, verification_statuses=["verified"]
        )
        assert ids(filtered) == ["root1"]


class TestApplyFilterState:
    def test_defaults(self, sample_graph):
        filtered = apply_filter_state(sample_graph, GraphFilters())
        # related1 is neither a default node type nor a default relationship type
        assert ids(filtered) == ["root1", "anc1", "deriv1", "deriv2"]
        assert [l.id for l in filtered.links] == ["rel0", "rel1", "rel2"]

    def test_uses_every_field(self, sample_graph):
        filters = GraphFilters(
            node_types=[NodeType.ROOT, NodeType.DERIVATIVE],
            relationship_types=None,
            max_distance=1,
        )
        assert ids(apply_filter_state(sample_graph, filters)) == ["root1", "deriv1"]


class TestSearchGraph:
    def test_empty_query_is_none(self, sample_graph):
        assert search_graph(sample_graph, "") is None
        assert search_graph(sample_graph, "  ") is None

    def test_results(self, sample_graph):
        result = search_graph(sample_graph, "derivative")
        assert [n.id for n in result.nodes] == ["deriv1", "deriv2"]
        assert [l.id for l in result.links] == ["rel1", "rel2"]
        assert result.total_results == 2
        assert result.query == "derivative"

    def test_no_results(self, sample_graph):
        result = search_graph(sample_graph, "zzz")
        assert result is not None
        assert result.total_results == 0
