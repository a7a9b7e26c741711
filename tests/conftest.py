"""Shared fixtures: small graphs and on-disk graph material."""

from __future__ import annotations

import csv
import struct
from pathlib import Path
from typing import Iterable, Sequence, Tuple

import pytest

from flowmap.config import reset_config
from flowmap.domain.models import Edge, Graph, Node

HEADER_SIZE = 156


@pytest.fixture(autouse=True)
def fresh_config(monkeypatch):
    """Isolate tests from FLOWMAP_* variables and the cached config."""
    import os

    for name in list(os.environ):
        if name.startswith("FLOWMAP_"):
            monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


def make_graph(
    coords: Sequence[Tuple[float, float]],
    arcs: Iterable[Tuple[int, int, float]],
) -> Graph:
    nodes = [
        Node(external_id=100 + i, lon=lon, lat=lat) for i, (lon, lat) in enumerate(coords)
    ]
    edges = [Edge(source=s, target=t, weight=w) for s, t, w in arcs]
    return Graph.from_edges(nodes, edges)


@pytest.fixture
def chain_graph() -> Graph:
    """A->B->C->D with unit weights; the D->A arc of the cycle is absent."""
    return make_graph(
        [(2.0, 48.0), (2.1, 48.1), (2.2, 48.0), (2.3, 47.9)],
        [(0, 1, 1.0), (1, 2, 1.0), (2, 3, 1.0)],
    )


def write_osrm(
    path: Path,
    nodes: Sequence[Tuple[float, float, int]],
    edges: Sequence[Tuple[int, int, int]],
    header_size: int = HEADER_SIZE,
) -> Path:
    """Write a binary graph; nodes are ``(lat, lon, external id)``."""
    with path.open("wb") as f:
        f.write(b"\0" * header_size)
        f.write(struct.pack("<I", len(nodes)))
        for lat, lon, external_id in nodes:
            f.write(
                struct.pack("<iiI4x", round(lat * 1e6), round(lon * 1e6), external_id)
            )
        f.write(struct.pack("<I", len(edges)))
        for source, target, weight in edges:
            f.write(struct.pack("<II4xI4x", source, target, weight))
    return path


@pytest.fixture
def osrm_file(tmp_path) -> Path:
    return write_osrm(
        tmp_path / "graph.osrm",
        nodes=[(48.0, 2.0, 7), (48.1, 2.1, 8), (48.0, 2.2, 9), (47.9, 2.3, 10)],
        edges=[(0, 1, 10), (1, 2, 10), (2, 3, 10)],
    )


def write_csv_graph(
    directory: Path,
    nodes: Sequence[Tuple[int, float, float]],
    edges: Sequence[Tuple[int, int, float, float, float]],
    mode: str = "car",
) -> Path:
    """Write nodes.csv (id, lon, lat) and edges.csv with capacities."""
    directory.mkdir(parents=True, exist_ok=True)
    with (directory / "nodes.csv").open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["id", "lon", "lat"])
        writer.writerows(nodes)
    with (directory / "edges.csv").open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["source", "target", "length", f"{mode}_forward", f"{mode}_backward"])
        writer.writerows(edges)
    return directory


@pytest.fixture
def csv_graph_dir(tmp_path) -> Path:
    return write_csv_graph(
        tmp_path / "csv",
        nodes=[(1, 2.0, 48.0), (2, 2.1, 48.1), (3, 2.2, 48.0)],
        edges=[
            (1, 2, 100.0, 2.0, 1.0),  # both directions, backward slower
            (2, 3, 50.0, 1.0, 0.0),  # one-way 2 -> 3
        ],
    )
