"""Flow map visualization: projection, stroke styling and rendering."""

from .flow import (
    EquirectangularProjection,
    FlowRenderer,
    RenderReport,
    build_draw_commands,
    select_segments,
    stroke_gray,
    stroke_width,
)

__all__ = [
    "EquirectangularProjection",
    "FlowRenderer",
    "RenderReport",
    "build_draw_commands",
    "select_segments",
    "stroke_gray",
    "stroke_width",
]
