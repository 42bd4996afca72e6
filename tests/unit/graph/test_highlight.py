"""Unit tests for the Highlight Engine."""

from ipgraph.core.types import GraphData, GraphLink, LinkType
from ipgraph.graph.highlight import (
    DEFAULT_DIM_OPACITY,
    create_highlighted_graph,
    highlight_path,
    path_node_ids,
)
from ipgraph.graph.paths import find_path


class TestCreateHighlightedGraph:
    def test_highlights_and_dims(self, sample_graph):
        result = create_highlighted_graph(sample_graph, ["root1", "deriv1"])

        for node in result.nodes:
            if node.id in ("root1", "deriv1"):
                assert node.highlighted is True
                assert node.opacity == 1.0
            else:
                assert node.highlighted is False
                assert node.opacity == DEFAULT_DIM_OPACITY

    def test_links_matched_by_endpoints_and_type(self, sample_graph):
        # A fresh link object (different id) still matches on (source, target, type)
        stale = GraphLink(id="old", source="root1", target="deriv1", type=LinkType.DERIVED_BY)
        wrong_type = GraphLink(source="root1", target="deriv2", type=LinkType.RELATED)

        result = create_highlighted_graph(sample_graph, ["root1"], [stale, wrong_type])
        highlighted = [l.id for l in result.links if l.highlighted]
        assert highlighted == ["rel1"]

    def test_idempotent(self, sample_graph):
        links = [sample_graph.links[1]]
        once = create_highlighted_graph(sample_graph, {"root1", "deriv1"}, links)
        twice = create_highlighted_graph(once, {"root1", "deriv1"}, links)
        assert once.model_dump() == twice.model_dump()

    def test_custom_dim_opacity(self, sample_graph):
        result = create_highlighted_graph(sample_graph, [], dim_opacity=0.1)
        assert {n.opacity for n in result.nodes} == {0.1}

    def test_empty_graph_unchanged(self):
        graph = GraphData()
        assert create_highlighted_graph(graph, ["a"]) is graph

    def test_input_not_mutated(self, sample_graph):
        create_highlighted_graph(sample_graph, ["root1"], sample_graph.links)
        assert all(n.opacity == 1.0 and not n.highlighted for n in sample_graph.nodes)
        assert not any(l.highlighted for l in sample_graph.links)

    def test_clearing_restores_flags(self, sample_graph):
        on = create_highlighted_graph(sample_graph, ["root1"], sample_graph.links)
        off = create_highlighted_graph(on, [n.id for n in on.nodes], [])
        assert all(n.opacity == 1.0 for n in off.nodes)
        assert not any(l.highlighted for l in off.links)


class TestHighlightPath:
    def test_path_node_ids(self, sample_graph):
        path = find_path(sample_graph, "anc1", "deriv1")
        assert path_node_ids(path) == ["anc1", "root1", "deriv1"]
        assert path_node_ids([]) == []

    def test_highlights_path(self, sample_graph):
        path = find_path(sample_graph, "anc1", "deriv1")
        result = highlight_path(sample_graph, path)

        assert [n.id for n in result.nodes if n.highlighted] == ["root1", "anc1", "deriv1"]
        assert [l.id for l in result.links if l.highlighted] == ["rel0", "rel1"]
        assert result.get_node("deriv2").opacity == DEFAULT_DIM_OPACITY
