import math
import random

import pytest

from conftest import make_graph
from flowmap.domain.errors import ComputationAborted, InvalidSourceError, MalformedRecordError
from flowmap.domain.models import Edge, Graph, Node, Strategy
from flowmap.graph.shortest_path import dijkstra_tree, relax_undirected, shortest_path_tree


def brute_force_distances(graph: Graph, source: int, undirected: bool = False):
    """Floyd-Warshall row of ``source``."""
    n = graph.node_count
    dist = [[math.inf] * n for _ in range(n)]
    for v in range(n):
        dist[v][v] = 0.0
    for edge in graph.edges:
        dist[edge.source][edge.target] = min(dist[edge.source][edge.target], edge.weight)
        if undirected:
            dist[edge.target][edge.source] = min(dist[edge.target][edge.source], edge.weight)
    for k in range(n):
        for i in range(n):
            for j in range(n):
                if dist[i][k] + dist[k][j] < dist[i][j]:
                    dist[i][j] = dist[i][k] + dist[k][j]
    return dist[source]


def random_graph(rng: random.Random, n: int, density: float) -> Graph:
    coords = [(rng.uniform(2, 3), rng.uniform(48, 49)) for _ in range(n)]
    arcs = [
        (s, t, float(rng.randint(0, 9)))
        for s in range(n)
        for t in range(n)
        if s != t and rng.random() < density
    ]
    return make_graph(coords, arcs)


def test_graph_builds_adjacency_in_load_order():
    graph = make_graph([(0, 0), (1, 1), (2, 2)], [(0, 2, 5.0), (0, 1, 1.0), (1, 2, 1.0)])

    assert graph.node_count == 3
    assert graph.edge_count == 3
    assert graph.neighbors(0) == ((2, 5.0), (1, 1.0))
    assert graph.neighbors(2) == ()


def test_graph_rejects_out_of_range_endpoint():
    nodes = [Node(1, 0.0, 0.0)]
    with pytest.raises(MalformedRecordError):
        Graph.from_edges(nodes, [Edge(0, 1, 1.0)])


@pytest.mark.parametrize("weight", [-1.0, math.inf, math.nan])
def test_graph_rejects_invalid_weight(weight):
    nodes = [Node(1, 0.0, 0.0), Node(2, 1.0, 1.0)]
    with pytest.raises(MalformedRecordError):
        Graph.from_edges(nodes, [Edge(0, 1, weight)])


def test_dijkstra_chain_predecessors(chain_graph):
    tree = dijkstra_tree(chain_graph, 0)

    assert tree.predecessors == (0, 0, 1, 2)
    assert tree.distances == (0.0, 1.0, 2.0, 3.0)
    assert tree.strategy is Strategy.DIRECTED


def test_dijkstra_chooses_shortest_path():
    # A can reach C directly, but A->B->C is shorter
    graph = make_graph([(0, 0), (1, 0), (2, 0)], [(0, 1, 3.0), (0, 2, 10.0), (1, 2, 4.0)])

    tree = dijkstra_tree(graph, 0)

    assert tree.predecessors[2] == 1
    assert tree.distances[2] == 7.0


def test_dijkstra_unreachable_keeps_self_predecessor():
    graph = make_graph([(0, 0), (1, 0), (2, 0)], [(1, 0, 1.0)])

    tree = dijkstra_tree(graph, 0)

    assert tree.predecessors == (0, 1, 2)
    assert math.isinf(tree.distances[1])
    assert tree.is_reachable(0)
    assert not tree.is_reachable(1)
    assert tree.reachable_count == 1


def test_dijkstra_ignores_direction_reversal(chain_graph):
    tree = dijkstra_tree(chain_graph, 3)

    assert tree.predecessors == (0, 1, 2, 3)
    assert tree.reachable_count == 1


def test_dijkstra_ties_keep_first_path_found():
    # Two equal-cost routes to 3: via 1 (pushed first) and via 2
    graph = make_graph(
        [(0, 0), (1, 0), (1, 1), (2, 0)],
        [(0, 1, 1.0), (0, 2, 1.0), (1, 3, 1.0), (2, 3, 1.0)],
    )

    tree = dijkstra_tree(graph, 0)

    assert tree.predecessors[3] == 1


@pytest.mark.parametrize("seed", range(25))
def test_dijkstra_matches_brute_force(seed):
    rng = random.Random(seed)
    n = rng.randint(1, 20)
    graph = random_graph(rng, n, density=rng.uniform(0.05, 0.4))
    source = rng.randrange(n)

    tree = dijkstra_tree(graph, source)
    expected = brute_force_distances(graph, source)

    assert list(tree.distances) == pytest.approx(expected)
    assert tree.predecessors[source] == source
    for v in range(n):
        if v == source:
            continue
        if math.isinf(expected[v]):
            assert tree.predecessors[v] == v
        else:
            upstream = tree.predecessors[v]
            assert upstream != v
            assert any(
                target == v and tree.distances[upstream] + weight == tree.distances[v]
                for target, weight in graph.neighbors(upstream)
            )


@pytest.mark.parametrize("seed", range(15))
def test_relax_undirected_matches_brute_force(seed):
    rng = random.Random(1000 + seed)
    n = rng.randint(1, 15)
    graph = random_graph(rng, n, density=rng.uniform(0.05, 0.3))
    source = rng.randrange(n)

    tree = relax_undirected(graph, source)
    expected = brute_force_distances(graph, source, undirected=True)

    assert list(tree.distances) == pytest.approx(expected)
    assert tree.predecessors[source] == source
    for v in range(n):
        if v != source:
            assert (tree.predecessors[v] == v) == math.isinf(expected[v])


def test_relax_undirected_walks_arcs_backwards(chain_graph):
    tree = relax_undirected(chain_graph, 3)

    assert tree.predecessors == (1, 2, 3, 3)
    assert tree.strategy is Strategy.UNDIRECTED


def test_single_vertex_graph():
    graph = make_graph([(5.0, 45.0)], [])

    for strategy in Strategy:
        tree = shortest_path_tree(graph, 0, strategy)
        assert tree.predecessors == (0,)
        assert tree.distances == (0.0,)


@pytest.mark.parametrize("source", [-1, 4, 100])
@pytest.mark.parametrize("strategy", list(Strategy))
def test_out_of_range_source_raises(chain_graph, source, strategy):
    with pytest.raises(InvalidSourceError) as excinfo:
        shortest_path_tree(chain_graph, source, strategy)

    assert excinfo.value.source_index == source


def test_should_stop_aborts_between_iterations(chain_graph):
    calls = []

    def stop_on_second_check():
        calls.append(1)
        return len(calls) >= 2

    with pytest.raises(ComputationAborted) as excinfo:
        dijkstra_tree(chain_graph, 0, should_stop=stop_on_second_check)
    assert excinfo.value.iterations == 1

    with pytest.raises(ComputationAborted):
        relax_undirected(chain_graph, 0, should_stop=lambda: True)


def test_zero_weight_edges_terminate():
    graph = make_graph([(0, 0), (1, 0), (2, 0)], [(0, 1, 0.0), (1, 0, 0.0), (1, 2, 0.0)])

    assert dijkstra_tree(graph, 0).distances == (0.0, 0.0, 0.0)
    assert relax_undirected(graph, 0).distances == (0.0, 0.0, 0.0)
