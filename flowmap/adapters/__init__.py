"""Adapters layer - Concrete implementations of ports.

This module contains implementations of the port interfaces,
connecting the application to external systems like:
- Graph storage (OSRM binary files, CSV files)
- Shortest-path solving
- Rendering engines (Matplotlib, Folium)
- Spatial storage (SQLAlchemy, PostGIS)
- Progress reporting (tqdm, null)
"""
