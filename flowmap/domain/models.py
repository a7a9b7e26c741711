"""Immutable domain models for the flow map pipeline.

All models are frozen dataclasses with slots. Vertices are referenced
internally by their dense index in ``Graph.nodes`` and externally by
their stable identifier.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .errors import MalformedRecordError

# Internal predecessor table: pred[v] is the upstream vertex of v.
Predecessors = Tuple[int, ...]

# Endpoint indices of an aggregated edge.
EdgeKey = Tuple[int, int]


class Strategy(Enum):
    """Shortest-path strategy, chosen explicitly by the caller."""

    DIRECTED = "directed"
    UNDIRECTED = "undirected"


@dataclass(frozen=True, slots=True)
class Node:
    """A graph vertex with its external identifier and coordinates."""

    external_id: int
    lon: float
    lat: float


@dataclass(frozen=True, slots=True)
class Edge:
    """A directed, weighted arc between two internal vertex indices."""

    source: int
    target: int
    weight: float


@dataclass(frozen=True, slots=True)
class Graph:
    """Dense, immutable routing graph.

    Attributes:
        nodes: Node array, position is the internal vertex index
        edges: Arcs in load order
        adjacency: Per-vertex ``(neighbor, weight)`` pairs, in load order
    """

    nodes: Tuple[Node, ...]
    edges: Tuple[Edge, ...]
    adjacency: Tuple[Tuple[Tuple[int, float], ...], ...]

    @classmethod
    def from_edges(cls, nodes: Sequence[Node], edges: Sequence[Edge]) -> Graph:
        """Build a graph, validating endpoints and weights.

        Raises:
            MalformedRecordError: If an arc references an unknown vertex
                or carries a negative or non-finite weight.
        """
        count = len(nodes)
        adjacency: List[List[Tuple[int, float]]] = [[] for _ in range(count)]
        for index, edge in enumerate(edges):
            if not (0 <= edge.source < count and 0 <= edge.target < count):
                raise MalformedRecordError(
                    f"Edge {edge.source}->{edge.target} references a vertex "
                    f"outside 0..{count - 1}",
                    record_index=index,
                )
            if not math.isfinite(edge.weight) or edge.weight < 0:
                raise MalformedRecordError(
                    f"Edge {edge.source}->{edge.target} has invalid weight "
                    f"{edge.weight!r}",
                    record_index=index,
                )
            adjacency[edge.source].append((edge.target, edge.weight))

        return cls(
            nodes=tuple(nodes),
            edges=tuple(edges),
            adjacency=tuple(tuple(pairs) for pairs in adjacency),
        )

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    def neighbors(self, vertex: int) -> Tuple[Tuple[int, float], ...]:
        """Return the outgoing ``(neighbor, weight)`` pairs of a vertex."""
        return self.adjacency[vertex]


@dataclass(frozen=True, slots=True)
class LoadedGraph:
    """Result of loading graph source material.

    Attributes:
        graph: The immutable graph
        index_by_id: External identifier to internal vertex index
        source_index: Internal index of the requested source, if any
    """

    graph: Graph
    index_by_id: Mapping[int, int]
    source_index: Optional[int] = None


@dataclass(frozen=True, slots=True)
class ShortestPathTree:
    """Shortest-path forest rooted at a single source.

    Attributes:
        source: Internal index of the root
        predecessors: Upstream vertex per vertex (``pred[v] == v`` for the
            root and unreachable vertices)
        distances: Shortest distance per vertex, ``inf`` when unreachable
        strategy: Strategy that produced the tree
    """

    source: int
    predecessors: Predecessors
    distances: Tuple[float, ...]
    strategy: Strategy = Strategy.DIRECTED

    def is_reachable(self, vertex: int) -> bool:
        return vertex == self.source or self.predecessors[vertex] != vertex

    @property
    def reachable_count(self) -> int:
        """Number of reachable vertices, the root included."""
        return sum(1 for v in range(len(self.predecessors)) if self.is_reachable(v))


@dataclass(frozen=True, slots=True)
class EdgeUsage:
    """Number of root-directed shortest paths traversing an edge."""

    key: EdgeKey
    count: int


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Axis-aligned box in geographic degrees."""

    lon_min: float
    lon_max: float
    lat_min: float
    lat_max: float

    @classmethod
    def around(cls, lon: float, lat: float) -> BoundingBox:
        """Degenerate box covering a single point."""
        return cls(lon_min=lon, lon_max=lon, lat_min=lat, lat_max=lat)

    def expand(self, lon: float, lat: float) -> BoundingBox:
        return BoundingBox(
            lon_min=min(self.lon_min, lon),
            lon_max=max(self.lon_max, lon),
            lat_min=min(self.lat_min, lat),
            lat_max=max(self.lat_max, lat),
        )

    @property
    def is_point(self) -> bool:
        return self.lon_min == self.lon_max and self.lat_min == self.lat_max

    @property
    def mean_lat(self) -> float:
        return (self.lat_min + self.lat_max) / 2.0


@dataclass(frozen=True, slots=True)
class UsageSegment:
    """An edge usage resolved to endpoint coordinates.

    This is the row shape shared by the renderer and the spatial store.
    """

    lon1: float
    lat1: float
    lon2: float
    lat2: float
    count: int


@dataclass(frozen=True, slots=True)
class CanvasExtent:
    """Page size of a rendered document, in canvas units."""

    width: float
    height: float


@dataclass(frozen=True, slots=True)
class StrokeStyle:
    """Stroke width and grayscale intensity (0.0 is black)."""

    width: float
    gray: float


@dataclass(frozen=True, slots=True)
class DrawCommand:
    """One projected line segment with its stroke style.

    ``segment`` keeps the geographic endpoints for canvases that draw
    in longitude/latitude rather than page units.
    """

    x1: float
    y1: float
    x2: float
    y2: float
    style: StrokeStyle
    segment: UsageSegment


@dataclass(frozen=True, slots=True)
class FlowMapResult:
    """Summary of one pipeline run.

    Attributes:
        source_index: Internal index of the root vertex
        node_count: Vertices in the graph
        edge_count: Arcs in the graph
        reachable_count: Vertices reached from the root, root included
        used_edge_count: Distinct edges carrying at least one path
        rendered_edge_count: Edges actually drawn after truncation
        max_count: Highest usage count, 0 when nothing is used
        bounds: Bounding box of the forest
        outputs: Files written by the run
        durations: Wall-clock seconds per stage
    """

    source_index: int
    node_count: int
    edge_count: int
    reachable_count: int
    used_edge_count: int
    rendered_edge_count: int
    max_count: int
    bounds: BoundingBox
    outputs: Tuple[Path, ...] = field(default_factory=tuple)
    durations: Dict[str, float] = field(default_factory=dict)
