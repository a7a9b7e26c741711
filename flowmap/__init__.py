"""Top-level package for the flowmap project.

flowmap loads a weighted road graph, computes the shortest-path forest
of one source vertex, counts how many shortest paths use each edge, and
draws the result as a flow map or stores it in a spatial database.
"""

__version__ = "0.1.0"
