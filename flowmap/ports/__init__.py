"""Ports layer - Abstract interfaces (Protocols) for the application.

Ports define the contracts between the pipeline core and external
adapters. They enable dependency injection and make the system testable.

This module follows the Hexagonal Architecture pattern:
- Input ports: How graph material enters (repositories)
- Output ports: Where results go (canvases, stores, progress)
"""

from .graph import GraphRepositoryPort, ShortestPathSolverPort
from .progress import ProgressPort
from .rendering import CanvasPort
from .store import UsageStorePort

__all__ = [
    # Graph
    "GraphRepositoryPort",
    "ShortestPathSolverPort",
    # Rendering
    "CanvasPort",
    # Persistence
    "UsageStorePort",
    # Progress
    "ProgressPort",
]
