"""Graph ports - Abstractions for graph loading and shortest paths.

These protocols define the contracts for loading a routing graph from
external material and computing the shortest-path forest of a source.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Optional, Protocol

if TYPE_CHECKING:
    from ..domain.models import Graph, LoadedGraph, ShortestPathTree, Strategy


class GraphRepositoryPort(Protocol):
    """Port for loading graph data.

    Implementations:
    - adapters/graph/osrm_repository.py (fixed-record binary file)
    - adapters/graph/csv_repository.py (capacity-rated node/edge set)

    The repository turns external graph material into a dense,
    immutable Graph and resolves the external source identifier.
    """

    def load(self, source_id: Optional[int] = None) -> LoadedGraph:
        """Load the routing graph.

        Args:
            source_id: External identifier of the source vertex to
                resolve, if any.

        Returns:
            The graph, the external-id index and the source index.
        """
        ...


class ShortestPathSolverPort(Protocol):
    """Port for single-source shortest paths.

    Implementation: adapters/graph/tree_solver.py

    The solver produces the predecessor array of the shortest-path
    forest rooted at the source.
    """

    def solve(
        self,
        graph: Graph,
        source: int,
        strategy: Strategy,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> ShortestPathTree:
        """Compute the shortest-path forest of a source vertex.

        Args:
            graph: The routing graph.
            source: Internal index of the source vertex.
            strategy: Directed search or undirected relaxation.
            should_stop: Optional cancellation check, polled between
                outer-loop iterations.

        Returns:
            ShortestPathTree with predecessors and distances.
        """
        ...
