"""Services layer - Application orchestration.

This module contains the application service that drives the staged
pipeline through the adapters.

Available services:
- FlowMapService: Load, solve, aggregate, bound, render and persist
"""

from .flow_map_service import FlowAnalysis, FlowMapService

__all__ = ["FlowMapService", "FlowAnalysis"]
