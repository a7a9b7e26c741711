"""Flow map drawing: projection, stroke scaling and ordered commands.

Usage counts become line strokes whose width grows with the logarithm
of the count, so the busiest edge reaches the maximum width and quieter
edges compress. Strokes are drawn quietest first so the busiest edges
end on top. The canvas receiving the commands does the actual encoding.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from ..config import RenderConfig
from ..domain.errors import FlowMapError, RenderingError
from ..domain.models import (
    BoundingBox,
    CanvasExtent,
    DrawCommand,
    StrokeStyle,
    UsageSegment,
)
from ..graph.usage import top_usage
from ..ports.rendering import CanvasPort


@dataclass(frozen=True)
class EquirectangularProjection:
    """Equirectangular approximation around the mean latitude of a box.

    Longitudes are shrunk by the cosine of the mean latitude. Only valid
    for regionally bounded extents. ``y`` grows downwards, the top of the
    page is the northern edge of the box.
    """

    bounds: BoundingBox
    scale: float = 1000.0

    @property
    def lon_factor(self) -> float:
        return math.cos(math.radians(self.bounds.mean_lat)) * self.scale

    def project(self, lon: float, lat: float) -> tuple[float, float]:
        x = (lon - self.bounds.lon_min) * self.lon_factor
        y = (self.bounds.lat_max - lat) * self.scale
        return x, y

    def extent(self) -> CanvasExtent:
        """Page size of the projected box, at least one unit per axis."""
        width = (self.bounds.lon_max - self.bounds.lon_min) * self.lon_factor
        height = (self.bounds.lat_max - self.bounds.lat_min) * self.scale
        return CanvasExtent(width=max(width, 1.0), height=max(height, 1.0))


def stroke_width(
    count: int, max_count: int, max_width: float, min_width: float
) -> float:
    """Width of an edge used ``count`` times.

    ``max_width * log(count) / log(max_count)``, never below
    ``min_width``. When every count is 1 the ratio is undefined and all
    strokes get ``min_width``.
    """
    if max_count <= 1 or count <= 1:
        return min_width
    width = max_width * math.log(count) / math.log(max_count)
    return max(width, min_width)


def stroke_gray(width: float, max_width: float) -> float:
    """Gray level for a stroke, 0.0 (black) for the widest strokes."""
    gray = (max_width - width) / (1.5 * max_width)
    return min(max(gray, 0.0), 1.0)


def select_segments(
    segments: Sequence[UsageSegment],
    keep: Optional[int] = None,
    min_count: int = 1,
) -> List[UsageSegment]:
    """Drop quiet segments and keep the ``keep`` busiest, ascending."""
    ordered = sorted(
        (segment for segment in segments if segment.count >= min_count),
        key=lambda segment: segment.count,
    )
    return top_usage(ordered, keep)


def build_draw_commands(
    segments: Sequence[UsageSegment],
    bounds: BoundingBox,
    config: RenderConfig,
) -> List[DrawCommand]:
    """Turn usage segments into ordered, styled draw commands.

    Args:
        segments: Usage rows, in any order.
        bounds: Box the projection is centred on.
        config: Width limits, truncation and scale.

    Returns:
        Commands for the retained segments, quietest first.
    """
    selected = select_segments(segments, config.keep, config.min_count)
    if not selected:
        return []

    projection = EquirectangularProjection(bounds, config.scale)
    max_count = selected[-1].count

    commands: List[DrawCommand] = []
    for segment in selected:
        width = stroke_width(
            segment.count, max_count, config.max_width, config.min_width
        )
        x1, y1 = projection.project(segment.lon1, segment.lat1)
        x2, y2 = projection.project(segment.lon2, segment.lat2)
        commands.append(
            DrawCommand(
                x1=x1,
                y1=y1,
                x2=x2,
                y2=y2,
                style=StrokeStyle(
                    width=width, gray=stroke_gray(width, config.max_width)
                ),
                segment=segment,
            )
        )
    return commands


@dataclass(frozen=True)
class RenderReport:
    """Outcome of one render call."""

    output_path: Optional[Path]
    drawn: int
    max_count: int


@dataclass
class FlowRenderer:
    """Submits styled flow map strokes to a canvas.

    The canvas is opened with the projected extent of the bounding box
    and is closed on every exit path.
    """

    config: RenderConfig = field(default_factory=RenderConfig)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def render(
        self,
        segments: Sequence[UsageSegment],
        bounds: BoundingBox,
        canvas: CanvasPort,
    ) -> RenderReport:
        """Draw the retained segments on ``canvas``.

        Raises:
            RenderingError: If the canvas fails at any step.
        """
        commands = build_draw_commands(segments, bounds, self.config)
        extent = EquirectangularProjection(bounds, self.config.scale).extent()

        self._logger.info(
            "Rendering flow map",
            extra={
                "segments": len(segments),
                "retained": len(commands),
                "width": extent.width,
                "height": extent.height,
            },
        )

        try:
            canvas.open(extent)
            for command in commands:
                canvas.draw(command)
        except FlowMapError:
            canvas.close(failed=True)
            raise
        except Exception as e:
            canvas.close(failed=True)
            raise RenderingError(
                f"Drawing failed: {e}",
                renderer_type=type(canvas).__name__,
                cause=e,
            )
        output_path = canvas.close()

        return RenderReport(
            output_path=output_path,
            drawn=len(commands),
            max_count=commands[-1].segment.count if commands else 0,
        )
