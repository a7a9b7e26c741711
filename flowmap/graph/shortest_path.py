"""Single-source shortest paths over the routing graph.

Two interchangeable strategies produce the predecessor array of the
shortest-path forest rooted at a source vertex:

- ``dijkstra_tree``: directed search with a binary heap. Improved
  vertices are pushed again without removing their older entry; a popped
  entry whose key no longer matches the vertex distance is stale and is
  skipped.
- ``relax_undirected``: repeated sweeps relaxing every edge in both
  directions until a full sweep yields no improvement. Cost grows with
  vertex count times edge count, keep it for small graphs.

Ties are broken deterministically: relaxations use a strict ``<`` so the
first path found at a given cost wins, heap entries are ordered by
``(distance, vertex index)``, and adjacency and edge lists are visited
in load order.
"""

import heapq
import math
from typing import Callable, List, Optional, Tuple

from ..domain.errors import ComputationAborted, InvalidSourceError
from ..domain.models import Graph, ShortestPathTree, Strategy

StopCheck = Optional[Callable[[], bool]]


def _check_source(graph: Graph, source: int) -> None:
    if not 0 <= source < graph.node_count:
        raise InvalidSourceError(
            f"Source index {source} outside 0..{graph.node_count - 1}",
            source_index=source,
        )


def _abort_if_requested(should_stop: StopCheck, iterations: int) -> None:
    if should_stop is not None and should_stop():
        raise ComputationAborted(
            "Shortest-path computation cancelled",
            iterations=iterations,
        )


def dijkstra_tree(
    graph: Graph, source: int, should_stop: StopCheck = None
) -> ShortestPathTree:
    """Compute the directed shortest-path forest of ``source``.

    Parameters
    ----------
    graph:
        Routing graph with non-negative weights.
    source:
        Internal index of the root vertex.
    should_stop:
        Optional cancellation check polled before each heap pop.

    Returns
    -------
    ShortestPathTree
        Predecessors and distances. Unreachable vertices keep
        ``pred[v] == v`` and an infinite distance.

    Raises
    ------
    InvalidSourceError
        If ``source`` is not a valid vertex index.
    """
    _check_source(graph, source)

    count = graph.node_count
    distances: List[float] = [math.inf] * count
    predecessors: List[int] = list(range(count))
    distances[source] = 0.0

    heap: List[Tuple[float, int]] = [(0.0, source)]
    pops = 0

    while heap:
        _abort_if_requested(should_stop, pops)
        current_distance, u = heapq.heappop(heap)
        pops += 1

        if current_distance != distances[u]:
            continue

        for v, weight in graph.neighbors(u):
            new_distance = current_distance + weight
            if new_distance < distances[v]:
                distances[v] = new_distance
                predecessors[v] = u
                heapq.heappush(heap, (new_distance, v))

    return ShortestPathTree(
        source=source,
        predecessors=tuple(predecessors),
        distances=tuple(distances),
        strategy=Strategy.DIRECTED,
    )


def relax_undirected(
    graph: Graph, source: int, should_stop: StopCheck = None
) -> ShortestPathTree:
    """Compute the shortest-path forest treating every edge as two-way.

    Both directions of an edge cost its weight. Sweeps over the edge
    list repeat until one completes without improving any distance.
    ``should_stop`` is polled between sweeps.

    Raises:
        InvalidSourceError: If ``source`` is not a valid vertex index.
    """
    _check_source(graph, source)

    count = graph.node_count
    distances: List[float] = [math.inf] * count
    predecessors: List[int] = list(range(count))
    distances[source] = 0.0

    sweeps = 0
    improvement = True
    while improvement:
        _abort_if_requested(should_stop, sweeps)
        improvement = False
        for edge in graph.edges:
            source_distance = distances[edge.source]
            target_distance = distances[edge.target]

            if source_distance + edge.weight < target_distance:
                distances[edge.target] = source_distance + edge.weight
                predecessors[edge.target] = edge.source
                improvement = True
            elif target_distance + edge.weight < source_distance:
                distances[edge.source] = target_distance + edge.weight
                predecessors[edge.source] = edge.target
                improvement = True
        sweeps += 1

    return ShortestPathTree(
        source=source,
        predecessors=tuple(predecessors),
        distances=tuple(distances),
        strategy=Strategy.UNDIRECTED,
    )


def shortest_path_tree(
    graph: Graph,
    source: int,
    strategy: Strategy = Strategy.DIRECTED,
    should_stop: StopCheck = None,
) -> ShortestPathTree:
    """Run the strategy named by ``strategy`` from ``source``."""
    if strategy is Strategy.DIRECTED:
        return dijkstra_tree(graph, source, should_stop)
    if strategy is Strategy.UNDIRECTED:
        return relax_undirected(graph, source, should_stop)
    raise ValueError(f"Unknown shortest-path strategy: {strategy!r}")
