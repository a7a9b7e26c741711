"""Bounding box of the vertices taking part in a shortest-path forest."""

from __future__ import annotations

from typing import Optional, Sequence

from ..domain.models import BoundingBox, Node, Predecessors, UsageSegment


def _cover_forest(
    bounds: Optional[BoundingBox],
    predecessors: Predecessors,
    nodes: Sequence[Node],
) -> Optional[BoundingBox]:
    for vertex, upstream in enumerate(predecessors):
        if upstream == vertex:
            continue
        for index in (vertex, upstream):
            node = nodes[index]
            if bounds is None:
                bounds = BoundingBox.around(node.lon, node.lat)
            else:
                bounds = bounds.expand(node.lon, node.lat)
    return bounds


def forest_bounds(
    predecessors: Predecessors,
    nodes: Sequence[Node],
    root: Optional[int] = None,
) -> Optional[BoundingBox]:
    """Compute the box covering every edge of the forest.

    Both endpoints of each forest edge ``(pred[v], v)`` are covered, so
    the root is inside the box as soon as one vertex hangs from it.
    Unreachable vertices (``pred[v] == v``) are skipped. When ``root`` is
    given its coordinate is always included, which makes a forest without
    edges a degenerate point box.

    Returns:
        The bounding box, or None when no vertex qualifies.
    """
    if root is not None:
        return tree_bounds(predecessors, nodes, root)
    return _cover_forest(None, predecessors, nodes)


def tree_bounds(
    predecessors: Predecessors, nodes: Sequence[Node], root: int
) -> BoundingBox:
    """Box covering the forest grown from ``root``, a point box without edges."""
    start = BoundingBox.around(nodes[root].lon, nodes[root].lat)
    return _cover_forest(start, predecessors, nodes) or start


def segments_bounds(segments: Sequence[UsageSegment]) -> Optional[BoundingBox]:
    """Box covering both endpoints of every segment, None when empty."""
    bounds: Optional[BoundingBox] = None
    for segment in segments:
        for lon, lat in ((segment.lon1, segment.lat1), (segment.lon2, segment.lat2)):
            if bounds is None:
                bounds = BoundingBox.around(lon, lat)
            else:
                bounds = bounds.expand(lon, lat)
    return bounds
