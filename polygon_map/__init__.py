"""
Polygon map generator: Voronoi tessellation of a box with Lloyd's relaxation.
"""

from .core import (Vector, Rectangle, VoronoiDiagram, build_voronoi, MapConfig,
                   PolygonMap, generate_polygon_map)

__version__ = "0.1.0"

__all__ = ['Vector', 'Rectangle', 'VoronoiDiagram', 'build_voronoi', 'MapConfig',
           'PolygonMap', 'generate_polygon_map']
