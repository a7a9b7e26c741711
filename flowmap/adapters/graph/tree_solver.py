"""Shortest-path tree solver adapter.

This adapter wraps the algorithms of graph/shortest_path.py and adds:
- Source validation before any computation
- Logging of the strategy and reachability
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from ...domain.errors import InvalidSourceError
from ...domain.models import Graph, ShortestPathTree, Strategy
from ...graph.shortest_path import shortest_path_tree


@dataclass
class TreeSolver:
    """Solver computing the shortest-path forest of one source.

    This adapter implements ShortestPathSolverPort.
    """

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def solve(
        self,
        graph: Graph,
        source: int,
        strategy: Strategy,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> ShortestPathTree:
        """Compute the shortest-path forest rooted at ``source``.

        Args:
            graph: The routing graph.
            source: Internal index of the source vertex.
            strategy: Directed search or undirected relaxation.
            should_stop: Optional cancellation check.

        Returns:
            ShortestPathTree with predecessors and distances.

        Raises:
            InvalidSourceError: If ``source`` is not a vertex of ``graph``.
            ComputationAborted: If ``should_stop`` requested a stop.
        """
        if not 0 <= source < graph.node_count:
            self._logger.warning(
                "Invalid source",
                extra={"source": source, "nodes": graph.node_count},
            )
            raise InvalidSourceError(
                f"Source index {source} outside 0..{graph.node_count - 1}",
                source_index=source,
            )

        self._logger.debug(
            "Solving shortest-path tree",
            extra={"source": source, "strategy": strategy.value},
        )

        tree = shortest_path_tree(graph, source, strategy, should_stop)

        self._logger.info(
            "Shortest-path tree computed",
            extra={
                "source": source,
                "strategy": strategy.value,
                "reachable": tree.reachable_count,
                "nodes": graph.node_count,
            },
        )
        return tree
