"""
Voronoi cells.

A cell is built in two phases. While the sweep runs, a VoronoiCell
accumulates the edges it shares with its neighbours and any box corners it
owns. Once every edge is known, `finalize()` orders the boundary around the
site and computes area, perimeter and centroid into an immutable
CellGeometry. Geometry is never read from the accumulator.
"""

from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from .geometry import EPSILON, Edge, Vector


@dataclass(frozen=True)
class CellGeometry:
    """Finalized geometry of one Voronoi cell."""
    site: Vector
    boundary: Tuple[Vector, ...]  # counter-clockwise
    edges: Tuple[Edge, ...]
    area: float
    perimeter: float
    centroid: Vector

    @property
    def is_closed(self) -> bool:
        return len(self.boundary) >= 3

    def boundary_array(self) -> np.ndarray:
        """Boundary vertices as an (N, 2) array, ready for polygon drawing."""
        if not self.boundary:
            return np.empty((0, 2))
        return np.array([v.as_array() for v in self.boundary])


class VoronoiCell:
    """Accumulates the edges and corners of the cell grown around one site."""

    def __init__(self, site: Vector):
        self.site = site
        self._edges: List[Edge] = []
        self._corners: List[Vector] = []
        self._geometry = None

    def __repr__(self):
        return f"VoronoiCell(site={self.site!r}, edges={len(self._edges)})"

    @property
    def edges(self) -> Tuple[Edge, ...]:
        return tuple(self._edges)

    @property
    def corners(self) -> Tuple[Vector, ...]:
        return tuple(self._corners)

    @property
    def is_finalized(self) -> bool:
        return self._geometry is not None

    def _check_open(self):
        if self._geometry is not None:
            raise RuntimeError(f"Cell {self.site} is finalized, it cannot accept new geometry")

    def add_edge(self, edge: Edge) -> None:
        self._check_open()
        if edge not in self._edges:
            self._edges.append(edge)

    def add_corner(self, corner: Vector) -> None:
        """Attach a bounding box corner that no edge reaches."""
        self._check_open()
        self._corners.append(corner)

    def finalize(self) -> CellGeometry:
        """Freeze the cell and compute its geometry. Idempotent."""
        if self._geometry is None:
            self._geometry = compute_cell_geometry(self.site, self._edges, self._corners)
        return self._geometry


def order_vertices(center: Vector, vertices: List[Vector]) -> List[Vector]:
    """
    Unique vertices sorted by angle around `center`.

    Ties in angle (two vertices on the same ray) are broken by distance so
    the order is deterministic.
    """
    unique: List[Vector] = []
    for vertex in vertices:
        if not any(vertex == kept for kept in unique):
            unique.append(vertex)

    def key(vertex: Vector):
        offset = vertex - center
        return (offset.angle, offset.sqr_length)

    return sorted(unique, key=key)


def vertex_mean(vertices: List[Vector]) -> Vector:
    n = len(vertices)
    return Vector(sum(v.x for v in vertices) / n, sum(v.y for v in vertices) / n)


def triangle_area(a: Vector, b: Vector, c: Vector) -> float:
    """Signed area of triangle (a, b, c), positive when counter-clockwise."""
    return 0.5 * (b - a).cross(c - a)


def compute_cell_geometry(site: Vector, edges: List[Edge], corners: List[Vector]) -> CellGeometry:
    """
    Assemble the cell polygon and its measures.

    Vertices are ordered by angle around their mean, a point inside the
    convex cell even when the site itself lies on the cell boundary (a site
    on the box edge or corner). The polygon is then decomposed into the fan
    of triangles (site, v[i], v[i+1]).
    The centroid is the area-weighted mean of the triangle centroids, with a
    plain vertex average when the total area is below EPSILON.

    Args:
        site: The cell site
        edges: Finalized edges bounding the cell
        corners: Bounding box corners owned by the cell

    Returns:
        Frozen CellGeometry
    """
    vertices = list(corners)
    for edge in edges:
        vertices.append(edge.v1)
        vertices.append(edge.v2)
    boundary = order_vertices(vertex_mean(vertices), vertices) if vertices else []

    n = len(boundary)
    if n == 0:
        return CellGeometry(site, (), tuple(edges), 0.0, 0.0, site)

    area = 0.0
    perimeter = 0.0
    weighted_x = 0.0
    weighted_y = 0.0
    sum_x = 0.0
    sum_y = 0.0

    for i in range(n):
        v2 = boundary[i]
        v3 = boundary[(i + 1) % n]

        a = triangle_area(site, v2, v3)
        area += a
        weighted_x += a * (site.x + v2.x + v3.x) / 3.0
        weighted_y += a * (site.y + v2.y + v3.y) / 3.0

        sum_x += v2.x
        sum_y += v2.y
        if n > 1:
            perimeter += v2.distance_to(v3)

    if abs(area) < EPSILON:
        centroid = Vector(sum_x / n, sum_y / n)
    else:
        centroid = Vector(weighted_x / area, weighted_y / area)

    return CellGeometry(
        site=site,
        boundary=tuple(boundary),
        edges=tuple(edges),
        area=area,
        perimeter=perimeter,
        centroid=centroid,
    )
