"""
Geometry kernel for the Voronoi sweep.

Provides the primitive shapes the sweep manipulates: vectors, finite edges,
half-edges (rays with an algebraic support line), support lines and the
axis-aligned bounding rectangle. All tolerance checks go through EPSILON so
that round-off from repeated subtraction and scaling does not leak into the
algorithm.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple, Union

import numpy as np

EPSILON = 1e-5


class PrimitiveKind(Enum):
    """Tags of the closed set of primitives known to the intersection dispatch."""
    AFFINE = "affine"
    VERTICAL = "vertical"
    SEGMENT = "segment"
    RAY = "ray"
    RECTANGLE = "rectangle"
    POINT = "point"


@dataclass(frozen=True, eq=False)
class Vector:
    """Immutable 2D vector with epsilon-based equality."""
    x: float
    y: float

    kind = PrimitiveKind.POINT

    def __eq__(self, other):
        if not isinstance(other, Vector):
            return NotImplemented
        return abs(self.x - other.x) < EPSILON and abs(self.y - other.y) < EPSILON

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self):
        # Quantized: exact duplicates share a bucket, near-equal vectors may not
        return hash((round(self.x / EPSILON), round(self.y / EPSILON)))

    def __add__(self, other: "Vector") -> "Vector":
        return Vector(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vector") -> "Vector":
        return Vector(self.x - other.x, self.y - other.y)

    def __mul__(self, factor: float) -> "Vector":
        return Vector(self.x * factor, self.y * factor)

    __rmul__ = __mul__

    def __neg__(self) -> "Vector":
        return Vector(-self.x, -self.y)

    def __iter__(self):
        yield self.x
        yield self.y

    def __repr__(self):
        return f"Vector({self.x:.6g}, {self.y:.6g})"

    def dot(self, other: "Vector") -> float:
        return self.x * other.x + self.y * other.y

    def cross(self, other: "Vector") -> float:
        """z-component of the 3D cross product (positive when other is counter-clockwise)."""
        return self.x * other.y - self.y * other.x

    def rotate(self, angle: float) -> "Vector":
        cos = math.cos(angle)
        sin = math.sin(angle)
        return Vector(cos * self.x - sin * self.y, sin * self.x + cos * self.y)

    def perpendicular(self) -> "Vector":
        """Clockwise quarter turn: (x, y) -> (y, -x)."""
        return Vector(self.y, -self.x)

    def mixed(self, other: "Vector", factor: float) -> "Vector":
        return Vector(
            self.x * (1.0 - factor) + other.x * factor,
            self.y * (1.0 - factor) + other.y * factor,
        )

    @property
    def sqr_length(self) -> float:
        return self.x * self.x + self.y * self.y

    @property
    def length(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y)

    @property
    def angle(self) -> float:
        return math.atan2(self.y, self.x)

    def normalized(self) -> "Vector":
        length = self.length
        if length > EPSILON:
            return self * (1.0 / length)
        return Vector(1.0, 0.0)

    def distance_to(self, other: "Vector") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def is_zero(self) -> bool:
        return abs(self.x) < EPSILON and abs(self.y) < EPSILON

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y])

    def contains(self, point: "Vector") -> bool:
        return self == point


@dataclass(frozen=True)
class AffineLine:
    """Non-vertical support line y = slope * x + intercept."""
    slope: float
    intercept: float

    kind = PrimitiveKind.AFFINE

    @classmethod
    def through(cls, p: Vector, q: Vector) -> "AffineLine":
        if p == q:
            raise ValueError(f"Cannot build a line through coincident points {p} and {q}")
        dx = q.x - p.x
        if abs(dx) < EPSILON:
            raise ValueError("Points are vertically aligned, use VerticalLine instead")
        slope = (q.y - p.y) / dx
        return cls(slope, p.y - slope * p.x)

    def y_at(self, x: float) -> float:
        return self.slope * x + self.intercept

    def x_at(self, y: float) -> float:
        """x where the line reaches y, NaN for horizontal lines."""
        if abs(self.slope) < EPSILON:
            return math.nan
        return (y - self.intercept) / self.slope

    def contains(self, point: Vector) -> bool:
        return abs(self.y_at(point.x) - point.y) < EPSILON


@dataclass(frozen=True)
class VerticalLine:
    """Vertical support line x = c."""
    x: float

    kind = PrimitiveKind.VERTICAL

    @classmethod
    def through(cls, p: Vector, q: Vector) -> "VerticalLine":
        if p == q:
            raise ValueError(f"Cannot build a line through coincident points {p} and {q}")
        if abs(q.x - p.x) >= EPSILON:
            raise ValueError("Points do not share an x value, use AffineLine instead")
        return cls((p.x + q.x) / 2)

    def contains(self, point: Vector) -> bool:
        return abs(point.x - self.x) < EPSILON


Line = Union[AffineLine, VerticalLine]


def line_through(p: Vector, q: Vector) -> Line:
    """Support line through two distinct points."""
    if abs(q.x - p.x) < EPSILON:
        return VerticalLine.through(p, q)
    return AffineLine.through(p, q)


@dataclass(frozen=True, eq=False)
class Edge:
    """Finite segment between two vectors. Immutable once created."""
    v1: Vector
    v2: Vector
    length: float = field(init=False, repr=False)

    kind = PrimitiveKind.SEGMENT

    def __post_init__(self):
        object.__setattr__(self, "length", self.v1.distance_to(self.v2))

    def __eq__(self, other):
        # Undirected: an edge equals its reverse
        if not isinstance(other, Edge):
            return NotImplemented
        return ((self.v1 == other.v1 and self.v2 == other.v2)
                or (self.v1 == other.v2 and self.v2 == other.v1))

    def __hash__(self):
        return hash(self.v1) ^ hash(self.v2)

    @property
    def midpoint(self) -> Vector:
        return self.v1.mixed(self.v2, 0.5)

    @property
    def support(self) -> Line:
        return line_through(self.v1, self.v2)

    def is_degenerate(self) -> bool:
        return self.length < EPSILON

    def offset(self, point: Vector) -> float:
        """Distance of the projection of point along v1 -> v2."""
        if self.is_degenerate():
            return 0.0
        return (point - self.v1).dot(self.v2 - self.v1) / self.length

    def contains(self, point: Vector) -> bool:
        if self.is_degenerate():
            return self.v1 == point
        if abs((self.v2 - self.v1).cross(point - self.v1)) / self.length >= EPSILON:
            return False
        t = self.offset(point)
        return -EPSILON <= t <= self.length + EPSILON


class HalfEdge:
    """
    Ray defined by a head and a direction.

    While the sweep is running a half-edge traces the unfinished bisector
    between two sites. Its support is derived once at construction: a
    VerticalLine when the direction has no x component, otherwise an
    AffineLine through the head.
    """

    kind = PrimitiveKind.RAY

    __slots__ = ("head", "direction", "support")

    def __init__(self, head: Vector, direction: Vector):
        if direction.is_zero():
            raise ValueError(f"Half-edge direction {direction} is too small")
        self.head = head
        self.direction = direction

        if abs(direction.x) < EPSILON:
            self.support = VerticalLine(head.x)
        else:
            slope = direction.y / direction.x
            self.support = AffineLine(slope, head.y - slope * head.x)

    def __repr__(self):
        return f"HalfEdge(head={self.head!r}, direction={self.direction!r})"

    def offset(self, point: Vector) -> float:
        """Signed distance of point's projection along the ray; negative behind the head."""
        return (point - self.head).dot(self.direction) / self.direction.length

    def contains(self, point: Vector) -> bool:
        return self.support.contains(point) and self.offset(point) >= -EPSILON


class Rectangle:
    """Axis-aligned box used for containment tests and edge clipping."""

    kind = PrimitiveKind.RECTANGLE

    __slots__ = ("x", "y", "width", "height", "bl", "br", "tl", "tr")

    def __init__(self, x: float, y: float, width: float, height: float):
        if width <= 0 or height <= 0:
            raise ValueError(f"Rectangle size must be positive, got {width}x{height}")
        self.x = x
        self.y = y
        self.width = width
        self.height = height
        self.bl = Vector(x, y)
        self.br = Vector(x + width, y)
        self.tl = Vector(x, y + height)
        self.tr = Vector(x + width, y + height)

    def __repr__(self):
        return f"Rectangle(x={self.x}, y={self.y}, width={self.width}, height={self.height})"

    def __eq__(self, other):
        if not isinstance(other, Rectangle):
            return NotImplemented
        return self.bl == other.bl and self.tr == other.tr

    def __hash__(self):
        return hash((self.bl, self.tr))

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def top(self) -> float:
        return self.y + self.height

    @property
    def corners(self) -> Tuple[Vector, Vector, Vector, Vector]:
        """Corners in counter-clockwise order starting bottom-left."""
        return (self.bl, self.br, self.tr, self.tl)

    @property
    def center(self) -> Vector:
        return Vector(self.x + self.width / 2, self.y + self.height / 2)

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def perimeter(self) -> float:
        return 2 * self.width + 2 * self.height

    def sides(self) -> Tuple[Edge, Edge, Edge, Edge]:
        bl, br, tr, tl = self.corners
        return (Edge(bl, br), Edge(br, tr), Edge(tr, tl), Edge(tl, bl))

    def contains(self, point: Vector) -> bool:
        return (self.x - EPSILON <= point.x <= self.right + EPSILON
                and self.y - EPSILON <= point.y <= self.top + EPSILON)

    def sample(self, prng) -> Vector:
        """Uniform point inside the rectangle."""
        x = prng.uniform(self.x, self.right)
        y = prng.uniform(self.y, self.top)
        return Vector(x, y)


Primitive = Union[Vector, AffineLine, VerticalLine, Edge, HalfEdge, Rectangle]


def ccw(a: Vector, b: Vector, c: Vector) -> float:
    """
    Twice the signed area of triangle (a, b, c).

    Positive for a counter-clockwise turn, negative for clockwise and exactly
    zero when the points are collinear within EPSILON.
    """
    det = (b - a).cross(c - a)
    if abs(det) < EPSILON:
        return 0.0
    return det
