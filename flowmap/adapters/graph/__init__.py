"""Graph adapters - Implementations of graph-related ports.

Available implementations:
- OSRMGraphRepository: Loads graph from a fixed-record binary file
- CSVGraphRepository: Loads graph from capacity-rated CSV files
- TreeSolver: Computes shortest-path forests
"""

from .csv_repository import CSVGraphRepository
from .osrm_repository import OSRMGraphRepository
from .tree_solver import TreeSolver

__all__ = ["CSVGraphRepository", "OSRMGraphRepository", "TreeSolver"]
