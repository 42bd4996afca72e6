"""
Relationship data access.

The async orchestrator is imported from ``ipgraph.data.orchestrator``.
"""

from .cache import QueryCache
from .source import FetchOptions, RelationshipFetchError, RelationshipSource, StaticRelationshipSource

__all__ = ["QueryCache", "FetchOptions", "RelationshipFetchError", "RelationshipSource", "StaticRelationshipSource"]
