import random

import pytest

from conftest import make_graph
from flowmap.domain.errors import MalformedRecordError
from flowmap.domain.models import EdgeUsage, Node
from flowmap.graph.shortest_path import dijkstra_tree, relax_undirected
from flowmap.graph.usage import aggregate_usage, top_usage, total_usage, usage_segments


class CountingProgress:
    def __init__(self):
        self.total = None
        self.steps = 0
        self.closed = False

    def start(self, total, desc):
        self.total = total

    def advance(self, steps=1):
        self.steps += steps

    def close(self):
        self.closed = True


def path_length(predecessors, vertex):
    length = 0
    while predecessors[vertex] != vertex:
        vertex = predecessors[vertex]
        length += 1
    return length


def test_chain_fixture_usage(chain_graph):
    tree = dijkstra_tree(chain_graph, 0)

    usages = aggregate_usage(tree.predecessors)

    assert usages == [
        EdgeUsage(key=(2, 3), count=1),
        EdgeUsage(key=(1, 2), count=2),
        EdgeUsage(key=(0, 1), count=3),
    ]


def test_undirected_keys_are_min_max(chain_graph):
    tree = relax_undirected(chain_graph, 3)

    usages = aggregate_usage(tree.predecessors, oriented=False)

    assert [(u.key, u.count) for u in usages] == [((0, 1), 1), ((1, 2), 2), ((2, 3), 3)]


def test_oriented_keys_point_downstream(chain_graph):
    tree = relax_undirected(chain_graph, 3)

    usages = aggregate_usage(tree.predecessors)

    assert [u.key for u in usages] == [(1, 0), (2, 1), (3, 2)]


def test_ties_sorted_by_key():
    # Star: 0 is the root of three leaves
    predecessors = (0, 0, 0, 0)

    usages = aggregate_usage(predecessors)

    assert [u.key for u in usages] == [(0, 1), (0, 2), (0, 3)]
    assert all(u.count == 1 for u in usages)


def test_single_vertex_yields_no_usage():
    assert aggregate_usage((0,)) == []


def test_unreachable_vertices_are_skipped():
    assert aggregate_usage((0, 0, 2, 3)) == [EdgeUsage(key=(0, 1), count=1)]


@pytest.mark.parametrize("seed", range(10))
def test_total_usage_equals_sum_of_path_lengths(seed):
    rng = random.Random(seed)
    n = rng.randint(2, 20)
    graph = make_graph(
        [(float(i), 0.0) for i in range(n)],
        [
            (s, t, float(rng.randint(1, 5)))
            for s in range(n)
            for t in range(n)
            if s != t and rng.random() < 0.25
        ],
    )
    tree = dijkstra_tree(graph, 0)

    usages = aggregate_usage(tree.predecessors)

    expected = sum(path_length(tree.predecessors, v) for v in range(n))
    assert total_usage(usages) == expected
    assert all(usage.count >= 1 for usage in usages)


def test_aggregation_is_idempotent(chain_graph):
    predecessors = dijkstra_tree(chain_graph, 0).predecessors

    assert aggregate_usage(predecessors) == aggregate_usage(predecessors)


def test_deep_chain_does_not_recurse():
    n = 3000
    predecessors = tuple([0] + list(range(n - 1)))

    usages = aggregate_usage(predecessors)

    assert usages[-1] == EdgeUsage(key=(0, 1), count=n - 1)
    assert len(usages) == n - 1


def test_cyclic_predecessors_raise():
    with pytest.raises(MalformedRecordError):
        aggregate_usage((1, 2, 0))


def test_progress_receives_one_step_per_vertex(chain_graph):
    progress = CountingProgress()

    aggregate_usage(dijkstra_tree(chain_graph, 0).predecessors, progress=progress)

    assert progress.total == 4
    assert progress.steps == 4
    assert progress.closed


def test_top_usage_keeps_trailing_slice():
    usages = [EdgeUsage((0, i), i) for i in range(1, 6)]

    assert top_usage(usages, 2) == usages[-2:]
    assert top_usage(usages, None) == usages
    assert top_usage(usages, 0) == []
    assert top_usage(usages, 10) == usages


def test_usage_segments_resolve_coordinates():
    nodes = [Node(1, 2.0, 48.0), Node(2, 2.5, 48.5)]

    segments = usage_segments([EdgeUsage((1, 0), 4)], nodes)

    assert len(segments) == 1
    segment = segments[0]
    assert (segment.lon1, segment.lat1, segment.lon2, segment.lat2) == (2.5, 48.5, 2.0, 48.0)
    assert segment.count == 4
