"""Graph analysis utilities for the dependency graph.

Provides topological ordering and cycle detection over handle-addressed
adjacency lists.

Python 3.13+.
"""

from .graph import detect_cycles, topological_sort

__all__ = [
    "detect_cycles",
    "topological_sort",
]
