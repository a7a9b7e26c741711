"""tqdm progress bar implementation.

Shows one bar per long pass (reading records, counting edge uses,
inserting rows). Bars are written to stderr and never touch the data
flowing through the pipeline.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from tqdm import tqdm


@dataclass
class TqdmProgress:
    """Progress reporter backed by tqdm.

    This reporter implements the ProgressPort protocol.

    Attributes:
        unit: Unit label shown by the bar
        leave: Keep finished bars on screen
        disable: Turn the bars off entirely
    """

    unit: str = "rec"
    leave: bool = True
    disable: bool = False

    _bar: Optional[Any] = field(default=None, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def start(self, total: int, desc: str) -> None:
        """Open a new bar, closing any bar left open."""
        self.close()
        self._logger.debug("Progress started", extra={"task": desc, "total": total})
        self._bar = tqdm(
            total=total,
            desc=desc,
            unit=self.unit,
            leave=self.leave,
            disable=self.disable,
        )

    def advance(self, steps: int = 1) -> None:
        if self._bar is not None and steps:
            self._bar.update(steps)

    def close(self) -> None:
        if self._bar is not None:
            self._bar.close()
            self._bar = None
