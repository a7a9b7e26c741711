"""Rendering adapters - Implementations of CanvasPort.

Available implementations:
- MatplotlibCanvas: PDF/SVG vector document
- FoliumCanvas: Folium-based interactive HTML map
- RecordingCanvas: In-memory sink for tests and dry runs
"""

from .folium_canvas import FoliumCanvas
from .matplotlib_canvas import MatplotlibCanvas
from .recording_canvas import RecordingCanvas

__all__ = ["FoliumCanvas", "MatplotlibCanvas", "RecordingCanvas"]
