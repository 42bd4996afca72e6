"""
View state for graph consumers.

- GraphViewStore: reactive store of filters, preferences and status
- DebouncedFilterWriter: coalesces rapid filter edits into one write
"""

from .debounce import DebouncedFilterWriter, Debouncer
from .store import GraphViewState, GraphViewStore, ViewPreferences

__all__ = ["DebouncedFilterWriter", "Debouncer", "GraphViewState", "GraphViewStore", "ViewPreferences"]
