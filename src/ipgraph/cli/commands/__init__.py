"""
CLI Commands Package.

Each command is implemented in its own module.
"""

from . import filter_graph
from . import neighbors
from . import path
from . import stats

__all__ = [
    "filter_graph",
    "neighbors",
    "path",
    "stats",
]
