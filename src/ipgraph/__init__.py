"""
ipgraph - Relationship-graph engine for digital IP assets.

Builds a typed graph of how one asset relates to others (ancestors,
derivatives, related and disputed assets), then filters, searches,
path-finds and highlights it for display.

Key Components:
- core: Graph model and raw relationship response types
- graph: Builder, filters, path finding, highlighting, colors and labels
- state: View-state store and debounced filter writes
- data: Relationship sources, query cache and the async orchestrator

Usage:
    from ipgraph import GraphDataOrchestrator, GraphViewStore

    store = GraphViewStore()
    orchestrator = GraphDataOrchestrator(source, store)
    result = await orchestrator.load_graph("0xabc")
"""

__version__ = "0.3.0"

from .config import EngineConfig, load_config
from .core.types import (
    GraphData, GraphLink, GraphNode, LinkType, NodeType, RelationshipType,
    RelationsResponse,
)
from .data.orchestrator import GraphDataOrchestrator, QueryResult, QueryStatus
from .data.source import FetchOptions, RelationshipFetchError, StaticRelationshipSource
from .graph.builder import build_graph
from .graph.filters import GraphFilters, apply_filters, search_graph
from .graph.highlight import create_highlighted_graph
from .graph.paths import find_node_neighbors, find_path, find_relationship_path
from .state.store import GraphViewStore

__all__ = [
    "__version__",
    "EngineConfig",
    "load_config",
    "GraphData",
    "GraphLink",
    "GraphNode",
    "LinkType",
    "NodeType",
    "RelationshipType",
    "RelationsResponse",
    "GraphDataOrchestrator",
    "QueryResult",
    "QueryStatus",
    "FetchOptions",
    "RelationshipFetchError",
    "StaticRelationshipSource",
    "build_graph",
    "GraphFilters",
    "apply_filters",
    "search_graph",
    "create_highlighted_graph",
    "find_node_neighbors",
    "find_path",
    "find_relationship_path",
    "GraphViewStore",
]
