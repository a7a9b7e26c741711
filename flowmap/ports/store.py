"""Store port - Abstraction for persisting usage rows.

The store receives one row per used edge (usage count plus a two-point
line geometry) and writes them all-or-nothing.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Protocol, Sequence

if TYPE_CHECKING:
    from ..domain.models import UsageSegment


class UsageStorePort(Protocol):
    """Port for the relational/spatial usage store.

    Implementation: adapters/store/sql_store.py
    """

    def save(self, segments: Sequence[UsageSegment]) -> int:
        """Write every segment inside a single transaction.

        Args:
            segments: Usage rows to persist.

        Returns:
            Number of rows written.
        """
        ...

    def load(self) -> List[UsageSegment]:
        """Read back every stored usage row.

        Returns:
            Stored segments, ascending by count.
        """
        ...
