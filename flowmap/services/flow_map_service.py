"""Flow map service - Main orchestrator.

Runs the staged batch pipeline:
1. Graph loading and source resolution
2. Shortest-path forest from the source
3. Edge usage aggregation
4. Forest bounding box
5. Rendering and/or persistence

Stages run one after the other; only the immutable graph is shared.
The first error stops the run.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from ..adapters.progress import NullProgress
from ..domain.errors import InvalidSourceError, RenderingError
from ..domain.models import (
    BoundingBox,
    EdgeUsage,
    FlowMapResult,
    LoadedGraph,
    ShortestPathTree,
    Strategy,
    UsageSegment,
)
from ..graph.bounds import segments_bounds, tree_bounds
from ..graph.usage import aggregate_usage, usage_segments
from ..ports.graph import GraphRepositoryPort, ShortestPathSolverPort
from ..ports.progress import ProgressPort
from ..ports.rendering import CanvasPort
from ..ports.store import UsageStorePort
from ..viz.flow import FlowRenderer, RenderReport


@dataclass(frozen=True)
class FlowAnalysis:
    """Everything computed for one source before any output.

    Attributes:
        loaded: Graph with its identifier index and source index
        tree: Shortest-path forest of the source
        usages: Edge usages, ascending by count
        segments: Usages resolved to coordinates, same order
        bounds: Bounding box of the forest
        durations: Wall-clock seconds per stage
    """

    loaded: LoadedGraph
    tree: ShortestPathTree
    usages: Tuple[EdgeUsage, ...]
    segments: Tuple[UsageSegment, ...]
    bounds: BoundingBox
    durations: Dict[str, float] = field(default_factory=dict)

    @property
    def max_count(self) -> int:
        return self.usages[-1].count if self.usages else 0


@dataclass
class FlowMapService:
    """Main service producing flow maps.

    Attributes:
        graph_repository: Loads the routing graph
        solver: Computes the shortest-path forest
        renderer: Turns usage into draw commands
        usage_store: Optional spatial store for the usage rows
        progress: Side-channel progress reporter for aggregation
    """

    graph_repository: GraphRepositoryPort
    solver: ShortestPathSolverPort
    renderer: FlowRenderer = field(default_factory=FlowRenderer)
    usage_store: Optional[UsageStorePort] = None
    progress: ProgressPort = field(default_factory=NullProgress)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def analyze(
        self,
        source_id: int,
        strategy: Strategy = Strategy.DIRECTED,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> FlowAnalysis:
        """Load the graph and compute usage for ``source_id``.

        Args:
            source_id: External identifier of the source vertex.
            strategy: Directed search or undirected relaxation.
            should_stop: Optional cancellation check for the solver.

        Returns:
            FlowAnalysis with the forest, usages and bounds.

        Raises:
            GraphIOError: If the graph cannot be read.
            MalformedRecordError: If the graph material is inconsistent.
            SourceNotFoundError: If ``source_id`` is not in the graph.
            ComputationAborted: If ``should_stop`` requested a stop.
        """
        durations: Dict[str, float] = {}

        self._logger.info("Loading the data", extra={"source_id": source_id})
        started = time.perf_counter()
        loaded = self.graph_repository.load(source_id)
        durations["load"] = time.perf_counter() - started
        if loaded.source_index is None:
            raise InvalidSourceError(f"Source {source_id} was not resolved")
        graph = loaded.graph
        self._logger.info(
            "Graph loaded",
            extra={
                "nodes": graph.node_count,
                "edges": graph.edge_count,
                "duration_s": round(durations["load"], 3),
            },
        )

        started = time.perf_counter()
        tree = self.solver.solve(graph, loaded.source_index, strategy, should_stop)
        durations["shortest_path"] = time.perf_counter() - started
        self._logger.info(
            "Shortest paths computed",
            extra={
                "strategy": strategy.value,
                "reachable": tree.reachable_count,
                "duration_s": round(durations["shortest_path"], 3),
            },
        )

        started = time.perf_counter()
        usages = aggregate_usage(
            tree.predecessors,
            oriented=strategy is Strategy.DIRECTED,
            progress=self.progress,
        )
        segments = usage_segments(usages, graph.nodes)
        durations["aggregate"] = time.perf_counter() - started
        self._logger.info(
            "Edge usage counted",
            extra={
                "used_edges": len(usages),
                "max_count": usages[-1].count if usages else 0,
                "duration_s": round(durations["aggregate"], 3),
            },
        )

        bounds = tree_bounds(tree.predecessors, graph.nodes, tree.source)

        return FlowAnalysis(
            loaded=loaded,
            tree=tree,
            usages=tuple(usages),
            segments=tuple(segments),
            bounds=bounds,
            durations=durations,
        )

    def run(
        self,
        source_id: int,
        strategy: Strategy = Strategy.DIRECTED,
        canvas: Optional[CanvasPort] = None,
        persist: bool = False,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> FlowMapResult:
        """Run the full pipeline for ``source_id``.

        Args:
            source_id: External identifier of the source vertex.
            strategy: Directed search or undirected relaxation.
            canvas: Canvas receiving the flow map, if any.
            persist: Save the usage rows to ``usage_store``.
            should_stop: Optional cancellation check for the solver.

        Returns:
            FlowMapResult summarizing the run.

        Raises:
            FlowMapError: Any stage failure; nothing is retried.
        """
        overall = time.perf_counter()
        analysis = self.analyze(source_id, strategy, should_stop)
        durations = dict(analysis.durations)
        outputs: List[Path] = []

        if persist:
            if self.usage_store is None:
                raise ValueError("persist=True requires a usage store")
            started = time.perf_counter()
            self.usage_store.save(analysis.segments)
            durations["persist"] = time.perf_counter() - started
            self._logger.info(
                "Saved into the database",
                extra={"duration_s": round(durations["persist"], 3)},
            )

        rendered = 0
        if canvas is not None:
            started = time.perf_counter()
            report = self.renderer.render(analysis.segments, analysis.bounds, canvas)
            durations["render"] = time.perf_counter() - started
            rendered = report.drawn
            if report.output_path is not None:
                outputs.append(report.output_path)

        durations["total"] = time.perf_counter() - overall
        self._logger.info(
            "Flow map run finished",
            extra={"duration_s": round(durations["total"], 3)},
        )

        graph = analysis.loaded.graph
        return FlowMapResult(
            source_index=analysis.tree.source,
            node_count=graph.node_count,
            edge_count=graph.edge_count,
            reachable_count=analysis.tree.reachable_count,
            used_edge_count=len(analysis.usages),
            rendered_edge_count=rendered,
            max_count=analysis.max_count,
            bounds=analysis.bounds,
            outputs=tuple(outputs),
            durations=durations,
        )

    def render_stored(self, canvas: CanvasPort) -> RenderReport:
        """Render a flow map from the rows already in ``usage_store``.

        Raises:
            PersistenceError: If the rows cannot be read.
            RenderingError: If the store is empty or the canvas fails.
        """
        if self.usage_store is None:
            raise ValueError("render_stored requires a usage store")

        segments = self.usage_store.load()
        bounds = segments_bounds(segments)
        if bounds is None:
            raise RenderingError(
                "No stored edge usage to render",
                renderer_type=type(canvas).__name__,
            )
        return self.renderer.render(segments, bounds, canvas)
