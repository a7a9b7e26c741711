"""Null progress implementation for testing.

This reporter discards everything. Use it in tests and whenever the
output must stay quiet.

Example:
    repository = OSRMGraphRepository(config, progress=NullProgress())
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class NullProgress:
    """No-op progress reporter.

    This reporter implements the ProgressPort protocol but never
    displays anything.
    """

    name: str = "null"

    def start(self, total: int, desc: str) -> None:
        """Does nothing.

        Args:
            total: Number of steps (ignored).
            desc: Task label (ignored).
        """
        pass

    def advance(self, steps: int = 1) -> None:
        """Does nothing."""
        pass

    def close(self) -> None:
        """Does nothing."""
        pass
