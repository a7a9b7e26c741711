"""Domain layer - Core models and errors.

This module contains immutable domain models and typed errors
used throughout the application. No external dependencies.
"""

from .errors import (
    ComputationAborted,
    ConfigurationError,
    FlowMapError,
    GraphIOError,
    InvalidSourceError,
    MalformedRecordError,
    PersistenceError,
    RenderingError,
    SourceNotFoundError,
)
from .models import (
    BoundingBox,
    CanvasExtent,
    DrawCommand,
    Edge,
    EdgeKey,
    EdgeUsage,
    FlowMapResult,
    Graph,
    LoadedGraph,
    Node,
    Predecessors,
    ShortestPathTree,
    Strategy,
    StrokeStyle,
    UsageSegment,
)

__all__ = [
    # Models
    "Node",
    "Edge",
    "Graph",
    "LoadedGraph",
    "Predecessors",
    "Strategy",
    "ShortestPathTree",
    "EdgeKey",
    "EdgeUsage",
    "BoundingBox",
    "UsageSegment",
    "CanvasExtent",
    "StrokeStyle",
    "DrawCommand",
    "FlowMapResult",
    # Errors
    "FlowMapError",
    "GraphIOError",
    "MalformedRecordError",
    "InvalidSourceError",
    "SourceNotFoundError",
    "ComputationAborted",
    "PersistenceError",
    "RenderingError",
    "ConfigurationError",
]
