"""CSV Graph Repository adapter.

Loads a node/edge set whose edges carry independent forward and
backward capacities for a travel mode:

- ``nodes.csv``: ``id,lon,lat``
- ``edges.csv``: ``source,target,length,<mode>_forward,<mode>_backward``

``source`` and ``target`` are node identifiers. Every edge row yields up
to two arcs, one per direction with a positive capacity, weighted by
``length / capacity``: cost is inversely proportional to how much
traffic the direction can carry.
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ...config import GraphConfig, get_config
from ...domain.errors import GraphIOError, MalformedRecordError, SourceNotFoundError
from ...domain.models import Edge, Graph, LoadedGraph, Node
from ...ports.progress import ProgressPort
from ..progress import NullProgress


@dataclass
class CSVGraphRepository:
    """Graph repository that loads from CSV files.

    This adapter implements GraphRepositoryPort.

    Attributes:
        config: Graph configuration (directory, file names, travel mode)
        progress: Side-channel progress reporter
    """

    config: GraphConfig = field(default_factory=lambda: get_config().graph)
    progress: ProgressPort = field(default_factory=NullProgress)
    _logger: logging.Logger = field(init=False, repr=False)

    # Cached data
    _graph: Optional[Graph] = field(default=None, repr=False)
    _index_by_id: Optional[Dict[int, int]] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    @property
    def forward_column(self) -> str:
        return f"{self.config.mode}_forward"

    @property
    def backward_column(self) -> str:
        return f"{self.config.mode}_backward"

    def load(self, source_id: Optional[int] = None) -> LoadedGraph:
        """Load the graph and resolve ``source_id``.

        Returns:
            The graph, the external-id index and the source index.

        Raises:
            GraphIOError: If a file cannot be read.
            MalformedRecordError: If a row is incomplete or inconsistent.
            SourceNotFoundError: If ``source_id`` is not a node identifier.
        """
        if self._graph is None or self._index_by_id is None:
            self._logger.debug(
                "Loading graph",
                extra={
                    "nodes_path": str(self.config.nodes_path),
                    "edges_path": str(self.config.edges_path),
                    "mode": self.config.mode,
                },
            )
            nodes, index_by_id = self._load_nodes(self.config.nodes_path)
            edges = self._load_edges(self.config.edges_path, index_by_id)
            try:
                graph = Graph.from_edges(nodes, edges)
            except MalformedRecordError as e:
                raise MalformedRecordError(
                    e.message,
                    file_path=str(self.config.edges_path),
                    record_index=e.record_index,
                ) from e

            self._graph = graph
            self._index_by_id = index_by_id
            self._logger.info(
                "Graph loaded",
                extra={"nodes": graph.node_count, "edges": graph.edge_count},
            )

        source_index: Optional[int] = None
        if source_id is not None:
            source_index = self._index_by_id.get(source_id)
            if source_index is None:
                raise SourceNotFoundError(
                    f"Source node not found: {source_id}",
                    external_id=source_id,
                )

        return LoadedGraph(
            graph=self._graph,
            index_by_id=self._index_by_id,
            source_index=source_index,
        )

    def _read_rows(self, path: Path) -> List[Dict[str, str]]:
        try:
            with path.open(newline="", encoding="utf-8") as f:
                return list(csv.DictReader(f))
        except OSError as e:
            raise GraphIOError(
                f"Cannot read {path}",
                file_path=str(path),
                cause=e,
            )

    def _load_nodes(self, path: Path) -> Tuple[List[Node], Dict[int, int]]:
        """Load vertices; file order gives the internal index."""
        rows = self._read_rows(path)
        nodes: List[Node] = []
        index_by_id: Dict[int, int] = {}

        self.progress.start(len(rows), "Reading nodes")
        for row_number, row in enumerate(rows):
            try:
                node = Node(
                    external_id=int(row["id"]),
                    lon=float(row["lon"]),
                    lat=float(row["lat"]),
                )
            except (KeyError, TypeError, ValueError) as e:
                raise MalformedRecordError(
                    f"Invalid node row {row_number}",
                    file_path=str(path),
                    record_index=row_number,
                    cause=e,
                )
            if node.external_id in index_by_id:
                raise MalformedRecordError(
                    f"Duplicate node id {node.external_id}",
                    file_path=str(path),
                    record_index=row_number,
                )
            index_by_id[node.external_id] = len(nodes)
            nodes.append(node)
            self.progress.advance()
        self.progress.close()

        return nodes, index_by_id

    def _load_edges(self, path: Path, index_by_id: Dict[int, int]) -> List[Edge]:
        """Load arcs, up to two per row depending on the capacities."""
        rows = self._read_rows(path)
        edges: List[Edge] = []

        self.progress.start(len(rows), "Reading edges")
        for row_number, row in enumerate(rows):
            try:
                source = index_by_id[int(row["source"])]
                target = index_by_id[int(row["target"])]
                length = float(row["length"])
                forward = float(row[self.forward_column] or 0)
                backward = float(row[self.backward_column] or 0)
            except (KeyError, TypeError, ValueError) as e:
                raise MalformedRecordError(
                    f"Invalid edge row {row_number}",
                    file_path=str(path),
                    record_index=row_number,
                    cause=e,
                )

            if forward > 0:
                edges.append(Edge(source=source, target=target, weight=length / forward))
            if backward > 0:
                edges.append(Edge(source=target, target=source, weight=length / backward))
            self.progress.advance()
        self.progress.close()

        return edges

    def clear_cache(self) -> None:
        """Clear cached graph data."""
        self._graph = None
        self._index_by_id = None
        self._logger.debug("Graph cache cleared")
