"""In-memory canvas for testing and dry runs.

Records every call so tests can check draw order and finalization.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ...domain.errors import RenderingError
from ...domain.models import CanvasExtent, DrawCommand


@dataclass
class RecordingCanvas:
    """Canvas that keeps the commands it receives.

    This adapter implements CanvasPort.

    Attributes:
        fail_after: Raise RenderingError on the draw call following this
            many successful draws (None never fails)
    """

    fail_after: Optional[int] = None

    extent: Optional[CanvasExtent] = None
    commands: List[DrawCommand] = field(default_factory=list)
    opened: bool = False
    closed: bool = False
    failed: bool = False

    def open(self, extent: CanvasExtent) -> None:
        self.extent = extent
        self.commands = []
        self.opened = True
        self.closed = False
        self.failed = False

    def draw(self, command: DrawCommand) -> None:
        if self.fail_after is not None and len(self.commands) >= self.fail_after:
            raise RenderingError(
                "Recording canvas failure",
                renderer_type="recording",
            )
        self.commands.append(command)

    def close(self, *, failed: bool = False) -> Optional[Path]:
        self.closed = True
        self.failed = failed
        return None
