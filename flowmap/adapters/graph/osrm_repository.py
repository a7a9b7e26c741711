"""Binary graph repository adapter.

Reads the fixed-record graph layout produced by OSRM preprocessing:

- a header of ``header_size`` bytes, skipped;
- ``uint32`` node count, then node records ``(int32 lat * 1e6,
  int32 lon * 1e6, uint32 external id, 4 bytes padding)``;
- ``uint32`` edge count, then edge records ``(uint32 source index,
  uint32 target index, 4 bytes padding, uint32 weight, 4 bytes padding)``.

All integers are little-endian. Each edge record becomes one arc.
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Dict, List, Optional, Tuple

from ...config import GraphConfig, get_config
from ...domain.errors import GraphIOError, MalformedRecordError, SourceNotFoundError
from ...domain.models import Edge, Graph, LoadedGraph, Node
from ...ports.progress import ProgressPort
from ..progress import NullProgress

COUNT_RECORD = struct.Struct("<I")
NODE_RECORD = struct.Struct("<iiI4x")
EDGE_RECORD = struct.Struct("<II4xI4x")

COORDINATE_FACTOR = 1e6
PROGRESS_CHUNK = 1000


@dataclass
class OSRMGraphRepository:
    """Graph repository that loads a fixed-record binary file.

    This adapter implements GraphRepositoryPort.

    Attributes:
        config: Graph configuration (path, header size)
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
    def path(self) -> Path:
        return self.config.path

    def load(self, source_id: Optional[int] = None) -> LoadedGraph:
        """Load the graph and resolve ``source_id``.

        Raises:
            GraphIOError: If the file is unreadable or its header truncated.
            MalformedRecordError: If the records do not match the counts.
            SourceNotFoundError: If ``source_id`` is not a node identifier.
        """
        if self._graph is None or self._index_by_id is None:
            self._logger.debug("Loading graph", extra={"path": str(self.path)})
            try:
                with self.path.open("rb") as f:
                    graph, index_by_id = self._read_graph(f)
            except OSError as e:
                raise GraphIOError(
                    f"Cannot read graph file {self.path}",
                    file_path=str(self.path),
                    cause=e,
                )
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

    def _read_graph(self, f: BinaryIO) -> Tuple[Graph, Dict[int, int]]:
        header = f.read(self.config.header_size)
        if len(header) < self.config.header_size:
            raise GraphIOError(
                f"Truncated header: expected {self.config.header_size} bytes, "
                f"got {len(header)}",
                file_path=str(self.path),
            )

        node_count = self._read_count(f, "node")
        self._logger.info("Reading nodes", extra={"count": node_count})
        payload = self._read_block(f, node_count, NODE_RECORD, "node")

        nodes: List[Node] = []
        index_by_id: Dict[int, int] = {}
        self.progress.start(node_count, "Reading nodes")
        for index, (lat, lon, external_id) in enumerate(
            NODE_RECORD.iter_unpack(payload)
        ):
            nodes.append(
                Node(
                    external_id=external_id,
                    lon=lon / COORDINATE_FACTOR,
                    lat=lat / COORDINATE_FACTOR,
                )
            )
            index_by_id.setdefault(external_id, index)
            if (index + 1) % PROGRESS_CHUNK == 0:
                self.progress.advance(PROGRESS_CHUNK)
        self.progress.advance(node_count % PROGRESS_CHUNK)
        self.progress.close()

        edge_count = self._read_count(f, "edge")
        self._logger.info("Reading edges", extra={"count": edge_count})
        payload = self._read_block(f, edge_count, EDGE_RECORD, "edge")

        edges: List[Edge] = []
        self.progress.start(edge_count, "Reading edges")
        for index, (source, target, weight) in enumerate(
            EDGE_RECORD.iter_unpack(payload)
        ):
            edges.append(Edge(source=source, target=target, weight=float(weight)))
            if (index + 1) % PROGRESS_CHUNK == 0:
                self.progress.advance(PROGRESS_CHUNK)
        self.progress.advance(edge_count % PROGRESS_CHUNK)
        self.progress.close()

        try:
            graph = Graph.from_edges(nodes, edges)
        except MalformedRecordError as e:
            raise MalformedRecordError(
                e.message,
                file_path=str(self.path),
                record_index=e.record_index,
            ) from e
        return graph, index_by_id

    def _read_count(self, f: BinaryIO, kind: str) -> int:
        raw = f.read(COUNT_RECORD.size)
        if len(raw) < COUNT_RECORD.size:
            raise MalformedRecordError(
                f"Missing {kind} count",
                file_path=str(self.path),
            )
        (count,) = COUNT_RECORD.unpack(raw)
        return count

    def _read_block(
        self, f: BinaryIO, count: int, record: struct.Struct, kind: str
    ) -> bytes:
        expected = count * record.size
        payload = f.read(expected)
        if len(payload) < expected:
            raise MalformedRecordError(
                f"Expected {count} {kind} records ({expected} bytes), "
                f"found {len(payload)} bytes",
                file_path=str(self.path),
                record_index=len(payload) // record.size,
            )
        return payload

    def clear_cache(self) -> None:
        """Clear cached graph data."""
        self._graph = None
        self._index_by_id = None
        self._logger.debug("Graph cache cleared")
