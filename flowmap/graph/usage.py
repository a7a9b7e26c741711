"""Edge usage aggregation over a shortest-path forest.

Every vertex walks up its predecessor chain to the root; each step
counts one traversal of the edge between the two vertices. The result
is the number of root-directed shortest paths crossing each edge.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, TypeVar

from ..domain.errors import MalformedRecordError
from ..domain.models import EdgeKey, EdgeUsage, Node, Predecessors, UsageSegment

if TYPE_CHECKING:
    from ..ports.progress import ProgressPort

Counted = TypeVar("Counted", EdgeUsage, UsageSegment)


def aggregate_usage(
    predecessors: Predecessors,
    *,
    oriented: bool = True,
    progress: Optional[ProgressPort] = None,
) -> List[EdgeUsage]:
    """Count how many root-directed walks traverse each edge.

    Args:
        predecessors: Predecessor array of the forest.
        oriented: Key edges as ``(upstream, downstream)`` when True, as
            ``(min, max)`` when False (undirected forests).
        progress: Optional progress reporter, one step per vertex.

    Returns:
        Usages sorted ascending by ``(count, key)``, so the busiest
        edges sit at the end of the list.

    Raises:
        MalformedRecordError: If a walk does not reach a root, i.e. the
            predecessor array contains a cycle.
    """
    count = len(predecessors)
    uses: Dict[EdgeKey, int] = {}

    if progress is not None:
        progress.start(count, "Counting edge uses")

    for vertex in range(count):
        current = vertex
        upstream = predecessors[current]
        steps = 0
        while upstream != current:
            if oriented:
                key = (upstream, current)
            else:
                key = (min(current, upstream), max(current, upstream))
            uses[key] = uses.get(key, 0) + 1

            steps += 1
            if steps >= count:
                raise MalformedRecordError(
                    f"Predecessor walk from vertex {vertex} never reaches a root",
                    record_index=vertex,
                )
            current = upstream
            upstream = predecessors[current]

        if progress is not None:
            progress.advance()

    if progress is not None:
        progress.close()

    ordered = sorted(uses.items(), key=lambda item: (item[1], item[0]))
    return [EdgeUsage(key=key, count=uses_count) for key, uses_count in ordered]


def top_usage(usages: Sequence[Counted], keep: Optional[int]) -> List[Counted]:
    """Keep the ``keep`` most used edges of a list ascending by count."""
    if keep is None:
        return list(usages)
    if keep <= 0:
        return []
    return list(usages[-keep:])


def total_usage(usages: Sequence[EdgeUsage]) -> int:
    return sum(usage.count for usage in usages)


def usage_segments(
    usages: Sequence[EdgeUsage], nodes: Sequence[Node]
) -> List[UsageSegment]:
    """Resolve edge usages to endpoint coordinates, keeping their order."""
    segments: List[UsageSegment] = []
    for usage in usages:
        first, second = usage.key
        start = nodes[first]
        end = nodes[second]
        segments.append(
            UsageSegment(
                lon1=start.lon,
                lat1=start.lat,
                lon2=end.lon,
                lat2=end.lat,
                count=usage.count,
            )
        )
    return segments
