"""Graph algorithms over the immutable routing graph.

This subpackage contains the shortest-path strategies, the predecessor
walk that aggregates edge usage, and the forest bounding box.
"""

from .bounds import forest_bounds, segments_bounds, tree_bounds
from .shortest_path import dijkstra_tree, relax_undirected, shortest_path_tree
from .usage import aggregate_usage, top_usage, total_usage, usage_segments

__all__ = [
    "dijkstra_tree",
    "relax_undirected",
    "shortest_path_tree",
    "aggregate_usage",
    "top_usage",
    "total_usage",
    "usage_segments",
    "forest_bounds",
    "segments_bounds",
    "tree_bounds",
]
