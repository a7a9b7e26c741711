"""Progress port - Side-channel progress reporting.

Long linear passes (loading records, walking predecessors, inserting
rows) report their advancement through this port. Reporters only
receive counts; nothing flows back into the computation.
"""

from __future__ import annotations

from typing import Protocol


class ProgressPort(Protocol):
    """Port for progress reporting.

    Implementations:
    - adapters/progress/tqdm_progress.py (TqdmProgress) - Production
    - adapters/progress/null_progress.py (NullProgress) - Testing
    """

    def start(self, total: int, desc: str) -> None:
        """Begin a new task of ``total`` steps.

        Args:
            total: Number of steps expected.
            desc: Short label shown next to the bar.
        """
        ...

    def advance(self, steps: int = 1) -> None:
        """Record ``steps`` completed steps of the current task."""
        ...

    def close(self) -> None:
        """Finish the current task."""
        ...
