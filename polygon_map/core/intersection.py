"""
Pairwise intersection between geometry primitives.

Every primitive carries a PrimitiveKind tag and `intersect` dispatches on the
pair of tags through a single table covering all of them. Results are tuples
of 0, 1 or 2 vectors:

- line-like primitives (affine, vertical, segment, ray) intersect their
  support lines and keep the candidates lying within both primitives,
- line-like primitives against a rectangle intersect the support with the
  rectangle boundary and keep the candidates within the primitive,
- a point intersects anything that contains it.

The clipping helpers used by the sweep to bound edges to the diagram box
live here as well.
"""

from typing import Callable, Dict, Optional, Tuple

from .geometry import (
    EPSILON,
    AffineLine,
    Edge,
    HalfEdge,
    Line,
    Primitive,
    PrimitiveKind,
    Rectangle,
    Vector,
    VerticalLine,
)

Intersections = Tuple[Vector, ...]

_LINEAR_KINDS = (
    PrimitiveKind.AFFINE,
    PrimitiveKind.VERTICAL,
    PrimitiveKind.SEGMENT,
    PrimitiveKind.RAY,
)


def _unique(points) -> Intersections:
    result = []
    for point in points:
        if not any(point == kept for kept in result):
            result.append(point)
    return tuple(result)


def _support(shape) -> Line:
    if shape.kind in (PrimitiveKind.AFFINE, PrimitiveKind.VERTICAL):
        return shape
    return shape.support


def _within(shape, point: Vector) -> bool:
    """Whether a point already known to be on the support lies within the shape."""
    if shape.kind is PrimitiveKind.RAY:
        return shape.offset(point) >= -EPSILON
    if shape.kind is PrimitiveKind.SEGMENT:
        return -EPSILON <= shape.offset(point) <= shape.length + EPSILON
    return True


def intersect_lines(a: Line, b: Line) -> Intersections:
    """
    Solve the 2x2 system of two support lines.

    Parallel distinct lines give no point; coincident lines give a single
    arbitrary point of the line.
    """
    if isinstance(a, VerticalLine) and isinstance(b, VerticalLine):
        if abs(a.x - b.x) < EPSILON:
            return (Vector(a.x, 0.0),)
        return ()
    if isinstance(a, VerticalLine):
        return (Vector(a.x, b.y_at(a.x)),)
    if isinstance(b, VerticalLine):
        return (Vector(b.x, a.y_at(b.x)),)

    if abs(a.slope - b.slope) < EPSILON:
        if abs(a.intercept - b.intercept) < EPSILON:
            return (Vector(0.0, a.intercept),)
        return ()
    x = (b.intercept - a.intercept) / (a.slope - b.slope)
    return (Vector(x, a.y_at(x)),)


def intersect_line_rectangle(line: Line, rect: Rectangle) -> Intersections:
    """Points where a support line crosses the rectangle boundary (at most two)."""
    if isinstance(line, VerticalLine):
        if rect.x - EPSILON <= line.x <= rect.right + EPSILON:
            return (Vector(line.x, rect.y), Vector(line.x, rect.top))
        return ()

    candidates = []
    for x in (rect.x, rect.right):
        y = line.y_at(x)
        if rect.y - EPSILON <= y <= rect.top + EPSILON:
            candidates.append(Vector(x, y))
    if abs(line.slope) >= EPSILON:
        for y in (rect.y, rect.top):
            x = line.x_at(y)
            if rect.x - EPSILON <= x <= rect.right + EPSILON:
                candidates.append(Vector(x, y))

    points = _unique(candidates)
    if len(points) > 2:
        ordered = sorted(points, key=lambda p: (p.x, p.y))
        points = (ordered[0], ordered[-1])
    return points


def _linear_linear(a, b) -> Intersections:
    candidates = intersect_lines(_support(a), _support(b))
    return tuple(p for p in candidates if _within(a, p) and _within(b, p))


def _linear_rectangle(shape, rect: Rectangle) -> Intersections:
    candidates = intersect_line_rectangle(_support(shape), rect)
    return tuple(p for p in candidates if _within(shape, p))


def _rectangle_rectangle(a: Rectangle, b: Rectangle) -> Intersections:
    points = []
    for side_a in a.sides():
        for side_b in b.sides():
            points.extend(_linear_linear(side_a, side_b))
    return _unique(points)


def _point_any(point: Vector, other) -> Intersections:
    return (point,) if other.contains(point) else ()


def _swapped(handler: Callable) -> Callable:
    return lambda a, b: handler(b, a)


def _build_dispatch() -> Dict[Tuple[PrimitiveKind, PrimitiveKind], Callable]:
    table = {}
    for first in _LINEAR_KINDS:
        for second in _LINEAR_KINDS:
            table[(first, second)] = _linear_linear
        table[(first, PrimitiveKind.RECTANGLE)] = _linear_rectangle
        table[(PrimitiveKind.RECTANGLE, first)] = _swapped(_linear_rectangle)
    table[(PrimitiveKind.RECTANGLE, PrimitiveKind.RECTANGLE)] = _rectangle_rectangle
    for kind in PrimitiveKind:
        table[(kind, PrimitiveKind.POINT)] = _swapped(_point_any)
        table[(PrimitiveKind.POINT, kind)] = _point_any
    return table


_DISPATCH = _build_dispatch()


def _as_primitive(shape):
    # A zero-length segment has no support line and behaves as a point
    if isinstance(shape, Edge) and shape.is_degenerate():
        return shape.v1
    return shape


def intersect(a: Primitive, b: Primitive) -> Intersections:
    """
    Intersect two primitives of any kind.

    Args:
        a: First primitive
        b: Second primitive

    Returns:
        Tuple of zero, one or two intersection vectors

    Raises:
        TypeError: If either argument is not a geometry primitive
    """
    a = _as_primitive(a)
    b = _as_primitive(b)
    kind_a = getattr(a, "kind", None)
    kind_b = getattr(b, "kind", None)
    if not isinstance(kind_a, PrimitiveKind) or not isinstance(kind_b, PrimitiveKind):
        raise TypeError(
            f"Cannot intersect {type(a).__name__} with {type(b).__name__}"
        )
    return _DISPATCH[(kind_a, kind_b)](a, b)


def clip_ray(ray: HalfEdge, box: Rectangle) -> Optional[Edge]:
    """
    Bound a ray to the box.

    A ray whose head is inside the box runs from the head to its exit point;
    a ray starting outside keeps the stretch between its entry and exit
    points, if it crosses the box at all.
    """
    hits = intersect(ray, box)
    if box.contains(ray.head):
        if not hits:
            return None
        edge = Edge(ray.head, max(hits, key=ray.offset))
    else:
        if len(hits) < 2:
            return None
        entry, exit_ = sorted(hits, key=ray.offset)
        edge = Edge(entry, exit_)
    return None if edge.is_degenerate() else edge


def clip_segment(head: Vector, tail: Vector, box: Rectangle) -> Optional[Edge]:
    """
    Sub-segment of head -> tail that fits the box.

    An end lying outside the box is replaced by the crossing of the segment
    with the box boundary. Returns None when nothing of the segment remains.
    """
    head_inside = box.contains(head)
    tail_inside = box.contains(tail)

    if head_inside and tail_inside:
        edge = Edge(head, tail)
    elif head_inside or tail_inside:
        inside, outside = (head, tail) if head_inside else (tail, head)
        if inside == outside:
            return None
        ray = HalfEdge(inside, outside - inside)
        hits = intersect(ray, box)
        if not hits:
            return None
        boundary = max(hits, key=ray.offset)
        edge = Edge(head, boundary) if head_inside else Edge(boundary, tail)
    else:
        if head == tail:
            return None
        hits = intersect(Edge(head, tail), box)
        if len(hits) < 2:
            return None
        direction = tail - head
        first, second = sorted(hits, key=lambda p: (p - head).dot(direction))
        edge = Edge(first, second)

    return None if edge.is_degenerate() else edge
