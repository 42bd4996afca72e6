"""
Synchronous graph pipeline stages.

- builder: raw relationship response -> GraphData
- filters: type/attribute filtering and free-text search
- paths: forward path finding and neighborhoods
- highlight: emphasis and dimming
- style: colors and labels
"""

from .builder import GraphBuilder, build_graph, graph_from_dict
from .filters import GraphFilters, GraphSearchResult, apply_filter_state, apply_filters, search_graph
from .highlight import create_highlighted_graph, highlight_path
from .paths import Neighborhood, RelationshipPath, find_node_neighbors, find_path, find_relationship_path
from .style import get_link_color, get_node_color, get_node_label

__all__ = [
    "GraphBuilder", "build_graph", "graph_from_dict",
    "GraphFilters", "GraphSearchResult", "apply_filter_state", "apply_filters", "search_graph",
    "create_highlighted_graph", "highlight_path",
    "Neighborhood", "RelationshipPath", "find_node_neighbors", "find_path", "find_relationship_path",
    "get_link_color", "get_node_color", "get_node_label",
]
