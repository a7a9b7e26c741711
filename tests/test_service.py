"""Tests for the flow map service pipeline."""

import pytest

from conftest import write_osrm
from flowmap.adapters.graph import OSRMGraphRepository, TreeSolver
from flowmap.adapters.rendering import RecordingCanvas
from flowmap.adapters.store import SQLUsageStore
from flowmap.config import GraphConfig, RenderConfig, StoreConfig
from flowmap.domain.errors import (
    ComputationAborted,
    RenderingError,
    SourceNotFoundError,
)
from flowmap.domain.models import BoundingBox, Strategy
from flowmap.services import FlowMapService
from flowmap.viz.flow import FlowRenderer


def make_service(graph_path, store=None, render_config=None):
    return FlowMapService(
        graph_repository=OSRMGraphRepository(GraphConfig(path=graph_path)),
        solver=TreeSolver(),
        renderer=FlowRenderer(render_config or RenderConfig()),
        usage_store=store,
    )


@pytest.fixture
def sqlite_store(tmp_path):
    config = StoreConfig(uri=f"sqlite:///{tmp_path / 'flows.db'}", geometry_function=None)
    return SQLUsageStore(config)


class TestFlowMapService:
    """Test suite for FlowMapService."""

    def test_analyze_chain(self, osrm_file):
        analysis = make_service(osrm_file).analyze(7)

        assert analysis.tree.predecessors == (0, 0, 1, 2)
        assert [(u.key, u.count) for u in analysis.usages] == [
            ((2, 3), 1),
            ((1, 2), 2),
            ((0, 1), 3),
        ]
        assert analysis.max_count == 3
        assert analysis.bounds == BoundingBox(2.0, 2.3, 47.9, 48.1)
        assert set(analysis.durations) == {"load", "shortest_path", "aggregate"}

    def test_run_renders_every_used_edge(self, osrm_file):
        canvas = RecordingCanvas()

        result = make_service(osrm_file).run(7, canvas=canvas)

        assert result.source_index == 0
        assert result.node_count == 4
        assert result.edge_count == 3
        assert result.reachable_count == 4
        assert result.used_edge_count == 3
        assert result.rendered_edge_count == 3
        assert result.max_count == 3
        assert result.outputs == ()
        assert [c.segment.count for c in canvas.commands] == [1, 2, 3]
        assert canvas.closed and not canvas.failed
        assert "render" in result.durations and "total" in result.durations

    def test_run_respects_keep(self, osrm_file):
        canvas = RecordingCanvas()

        result = make_service(osrm_file, render_config=RenderConfig(keep=1)).run(
            7, canvas=canvas
        )

        assert result.rendered_edge_count == 1
        assert canvas.commands[0].segment.count == 3

    def test_undirected_run_from_the_end_of_the_chain(self, osrm_file):
        result = make_service(osrm_file).run(10, Strategy.UNDIRECTED)

        assert result.source_index == 3
        assert result.reachable_count == 4
        assert result.max_count == 3
        assert result.rendered_edge_count == 0

    def test_directed_run_from_the_end_reaches_nothing(self, osrm_file):
        canvas = RecordingCanvas()

        result = make_service(osrm_file).run(10, canvas=canvas)

        assert result.reachable_count == 1
        assert result.used_edge_count == 0
        assert result.bounds.is_point
        assert canvas.commands == []

    def test_single_vertex_graph(self, tmp_path):
        path = write_osrm(tmp_path / "one.osrm", [(45.0, 5.0, 1)], [])
        canvas = RecordingCanvas()

        result = make_service(path).run(1, canvas=canvas)

        assert result.used_edge_count == 0
        assert result.bounds == BoundingBox.around(5.0, 45.0)
        assert canvas.closed

    def test_unknown_source(self, osrm_file):
        with pytest.raises(SourceNotFoundError):
            make_service(osrm_file).run(99)

    def test_stop_request_aborts_run(self, osrm_file):
        canvas = RecordingCanvas()

        with pytest.raises(ComputationAborted):
            make_service(osrm_file).run(7, canvas=canvas, should_stop=lambda: True)

        assert not canvas.opened

    def test_persist_requires_store(self, osrm_file):
        with pytest.raises(ValueError):
            make_service(osrm_file).run(7, persist=True)

    def test_persist_then_render_stored(self, osrm_file, sqlite_store):
        service = make_service(osrm_file, store=sqlite_store)

        result = service.run(7, persist=True)
        report = service.render_stored(RecordingCanvas())

        assert "persist" in result.durations
        assert [s.count for s in sqlite_store.load()] == [1, 2, 3]
        assert report.drawn == 3
        assert report.max_count == 3

    def test_render_stored_empty_store(self, osrm_file, sqlite_store):
        sqlite_store.save([])

        with pytest.raises(RenderingError):
            make_service(osrm_file, store=sqlite_store).render_stored(RecordingCanvas())
