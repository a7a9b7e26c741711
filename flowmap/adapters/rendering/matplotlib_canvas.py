"""Matplotlib vector document canvas adapter.

Writes the flow map as a PDF or SVG page sized to the projected
bounding box. One canvas unit is one point, so stroke widths are in
points. Strokes are collected in draw order and emitted as a single
line collection with round caps when the canvas is closed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Tuple

from matplotlib.collections import LineCollection
from matplotlib.figure import Figure

from ...domain.errors import RenderingError
from ...domain.models import CanvasExtent, DrawCommand

POINTS_PER_INCH = 72.0

Segment = Tuple[Tuple[float, float], Tuple[float, float]]


@dataclass
class MatplotlibCanvas:
    """Vector document canvas.

    This adapter implements CanvasPort.

    Attributes:
        output_path: Destination file, ``.pdf`` or ``.svg``
        background: Page colour
    """

    output_path: Path
    background: str = "white"

    _extent: Optional[CanvasExtent] = field(default=None, repr=False)
    _segments: List[Segment] = field(default_factory=list, repr=False)
    _widths: List[float] = field(default_factory=list, repr=False)
    _colors: List[Tuple[float, float, float]] = field(default_factory=list, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    @property
    def format(self) -> str:
        return self.output_path.suffix.lstrip(".").lower() or "pdf"

    def open(self, extent: CanvasExtent) -> None:
        if self.format not in {"pdf", "svg"}:
            raise RenderingError(
                f"Unsupported document format: {self.format!r}",
                output_path=str(self.output_path),
                renderer_type="matplotlib",
            )
        self._extent = extent
        self._segments = []
        self._widths = []
        self._colors = []

    def draw(self, command: DrawCommand) -> None:
        if self._extent is None:
            raise RenderingError(
                "Canvas is not open",
                output_path=str(self.output_path),
                renderer_type="matplotlib",
            )
        gray = command.style.gray
        self._segments.append(((command.x1, command.y1), (command.x2, command.y2)))
        self._widths.append(command.style.width)
        self._colors.append((gray, gray, gray))

    def close(self, *, failed: bool = False) -> Optional[Path]:
        """Write the document unless the render failed.

        Raises:
            RenderingError: If the document cannot be written.
        """
        extent, self._extent = self._extent, None
        if extent is None or failed:
            self._segments, self._widths, self._colors = [], [], []
            return None

        try:
            figure = self._build_figure(extent)
            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            figure.savefig(
                str(self.output_path),
                format=self.format,
                facecolor=self.background,
            )
        except Exception as e:
            self._logger.error(
                "Document rendering failed",
                extra={"error": str(e), "output_path": str(self.output_path)},
            )
            raise RenderingError(
                f"Document rendering failed: {e}",
                output_path=str(self.output_path),
                renderer_type="matplotlib",
                cause=e,
            )
        finally:
            lines = len(self._segments)
            self._segments, self._widths, self._colors = [], [], []

        self._logger.info(
            "Document rendered successfully",
            extra={"output_path": str(self.output_path), "lines": lines},
        )
        return self.output_path

    def _build_figure(self, extent: CanvasExtent) -> Any:
        figure = Figure(
            figsize=(extent.width / POINTS_PER_INCH, extent.height / POINTS_PER_INCH),
            facecolor=self.background,
        )
        axes = figure.add_axes((0.0, 0.0, 1.0, 1.0))
        axes.set_xlim(0.0, extent.width)
        axes.set_ylim(extent.height, 0.0)
        axes.set_axis_off()

        if self._segments:
            axes.add_collection(
                LineCollection(
                    self._segments,
                    linewidths=self._widths,
                    colors=self._colors,
                    capstyle="round",
                )
            )
        return figure
