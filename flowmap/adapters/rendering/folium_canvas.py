"""Folium map canvas adapter.

Draws the flow map as an interactive HTML map: one polyline per
command, in geographic coordinates, on a light base layer. Projected
page coordinates are not used; Leaflet projects the segments itself.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Tuple

from matplotlib.colors import to_hex

from ...domain.errors import RenderingError
from ...domain.models import CanvasExtent, DrawCommand


@dataclass
class FoliumCanvas:
    """Folium-based interactive map canvas.

    This adapter implements CanvasPort.

    Attributes:
        output_path: Destination HTML file
        tiles: Folium base layer name
        opacity: Stroke opacity
    """

    output_path: Path
    tiles: str = "cartodbpositron"
    opacity: float = 0.9

    _map: Optional[Any] = field(default=None, repr=False)
    _points: List[Tuple[float, float]] = field(default_factory=list, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def open(self, extent: CanvasExtent) -> None:
        """Create the map; the extent is implied by the segments."""
        try:
            import folium

            self._map = folium.Map(tiles=self.tiles, control_scale=True)
            self._points = []
        except ImportError as e:
            raise RenderingError(
                "Folium not installed",
                output_path=str(self.output_path),
                renderer_type="folium",
                cause=e,
            )

    def draw(self, command: DrawCommand) -> None:
        if self._map is None:
            raise RenderingError(
                "Canvas is not open",
                output_path=str(self.output_path),
                renderer_type="folium",
            )

        import folium

        segment = command.segment
        gray = command.style.gray
        locations = [(segment.lat1, segment.lon1), (segment.lat2, segment.lon2)]
        folium.PolyLine(
            locations=locations,
            weight=command.style.width,
            color=to_hex((gray, gray, gray)),
            opacity=self.opacity,
            tooltip=str(segment.count),
        ).add_to(self._map)
        self._points.extend(locations)

    def close(self, *, failed: bool = False) -> Optional[Path]:
        """Save the map unless the render failed.

        Raises:
            RenderingError: If the HTML file cannot be written.
        """
        flow_map, self._map = self._map, None
        points, self._points = self._points, []
        if flow_map is None or failed:
            return None

        try:
            if points:
                lats = [lat for lat, _ in points]
                lons = [lon for _, lon in points]
                flow_map.fit_bounds([(min(lats), min(lons)), (max(lats), max(lons))])

            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            flow_map.save(str(self.output_path))
        except Exception as e:
            self._logger.error(
                "Map rendering failed",
                extra={"error": str(e), "output_path": str(self.output_path)},
            )
            raise RenderingError(
                f"Map rendering failed: {e}",
                output_path=str(self.output_path),
                renderer_type="folium",
                cause=e,
            )

        self._logger.info(
            "Map rendered successfully",
            extra={"output_path": str(self.output_path), "lines": len(points) // 2},
        )
        return self.output_path
