"""
Core polygon map functionality: geometry kernel, Fortune sweep and Lloyd relaxation.
"""

from .geometry import EPSILON, Vector, Rectangle, Edge, HalfEdge, AffineLine, VerticalLine
from .intersection import intersect, clip_ray, clip_segment
from .cell import VoronoiCell, CellGeometry
from .voronoi import VoronoiBuilder, VoronoiDiagram, build_voronoi
from .relaxation import (MapConfig, PolygonMap, sample_sites, lloyd_relaxation,
                         generate_polygon_map)

__all__ = ['EPSILON', 'Vector', 'Rectangle', 'Edge', 'HalfEdge', 'AffineLine', 'VerticalLine',
           'intersect', 'clip_ray', 'clip_segment', 'VoronoiCell', 'CellGeometry',
           'VoronoiBuilder', 'VoronoiDiagram', 'build_voronoi',
           'MapConfig', 'PolygonMap', 'sample_sites', 'lloyd_relaxation', 'generate_polygon_map']
