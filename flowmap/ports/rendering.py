"""Rendering port - Abstraction for the flow map drawing sink.

This protocol defines the contract of a canvas receiving draw commands,
allowing different implementations (vector document, HTML map,
in-memory recording) to be used.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol

if TYPE_CHECKING:
    from pathlib import Path

    from ..domain.models import CanvasExtent, DrawCommand


class CanvasPort(Protocol):
    """Port for a drawing sink.

    Implementations:
    - adapters/rendering/matplotlib_canvas.py (PDF/SVG document)
    - adapters/rendering/folium_canvas.py (interactive HTML map)
    - adapters/rendering/recording_canvas.py (in-memory, testing)

    A canvas is opened once per render call, receives the draw commands
    in order and is always closed, on success and on failure. Every
    method raises RenderingError on failure.
    """

    def open(self, extent: CanvasExtent) -> None:
        """Acquire the underlying document sized to ``extent``."""
        ...

    def draw(self, command: DrawCommand) -> None:
        """Stroke one line segment."""
        ...

    def close(self, *, failed: bool = False) -> Optional[Path]:
        """Finalize the document and release resources.

        Args:
            failed: True when the render aborted; the canvas must still
                release its resources but should not publish output.

        Returns:
            Path of the written document, if any.
        """
        ...
