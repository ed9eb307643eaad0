"""Tests for the geometry kernel."""

import math

import pytest
import numpy as np
from polygon_map.core.geometry import (
    EPSILON, AffineLine, Edge, HalfEdge, PrimitiveKind, Rectangle, Vector,
    VerticalLine, ccw, line_through
)
from polygon_map.core.alea_prng import AleaPRNG


class TestVector:
    """Test vector arithmetic and tolerant equality."""

    def test_epsilon_equality(self):
        """Test epsilon equality."""
        assert Vector(1.0, 2.0) == Vector(1.0 + EPSILON / 10, 2.0 - EPSILON / 10)
        assert Vector(1.0, 2.0) != Vector(1.0 + 10 * EPSILON, 2.0)

    def test_equal_vectors_share_hash(self):
        """Test equal vectors share hash."""
        assert hash(Vector(3.0, 4.0)) == hash(Vector(3.0, 4.0))
        assert len({Vector(3.0, 4.0), Vector(3.0, 4.0), Vector(4.0, 3.0)}) == 2

    def test_operators(self):
        """Test operators."""
        a = Vector(1.0, 2.0)
        b = Vector(3.0, -1.0)
        assert a + b == Vector(4.0, 1.0)
        assert a - b == Vector(-2.0, 3.0)
        assert a * 2 == Vector(2.0, 4.0)
        assert 2 * a == Vector(2.0, 4.0)
        assert -a == Vector(-1.0, -2.0)
        assert tuple(a) == (1.0, 2.0)

    def test_products(self):
        """Test products."""
        a = Vector(1.0, 0.0)
        b = Vector(0.0, 1.0)
        assert a.dot(b) == 0.0
        assert a.cross(b) == 1.0
        assert b.cross(a) == -1.0

    def test_perpendicular_turns_clockwise(self):
        """Test perpendicular turns clockwise."""
        assert Vector(1.0, 0.0).perpendicular() == Vector(0.0, -1.0)
        assert Vector(0.0, 1.0).perpendicular() == Vector(1.0, 0.0)

    def test_rotate(self):
        """Test rotate."""
        assert Vector(1.0, 0.0).rotate(math.pi / 2) == Vector(0.0, 1.0)

    def test_lengths_and_angle(self):
        """Test lengths and angle."""
        v = Vector(3.0, 4.0)
        assert v.length == 5.0
        assert v.sqr_length == 25.0
        assert v.distance_to(Vector(0.0, 0.0)) == 5.0
        assert Vector(0.0, 2.0).angle == pytest.approx(math.pi / 2)
        assert v.normalized().length == pytest.approx(1.0)

    def test_mixed(self):
        """Test mixed."""
        assert Vector(0.0, 0.0).mixed(Vector(10.0, 20.0), 0.25) == Vector(2.5, 5.0)

    def test_as_array(self):
        """Test as array."""
        np.testing.assert_array_equal(Vector(1.5, -2.0).as_array(), [1.5, -2.0])


class TestLines:
    """Test support line construction."""

    def test_affine_through(self):
        """Test affine through."""
        line = AffineLine.through(Vector(0.0, 1.0), Vector(2.0, 5.0))
        assert line.slope == pytest.approx(2.0)
        assert line.intercept == pytest.approx(1.0)
        assert line.y_at(3.0) == pytest.approx(7.0)
        assert line.x_at(7.0) == pytest.approx(3.0)
        assert line.contains(Vector(1.0, 3.0))

    def test_horizontal_line_has_no_x(self):
        """Test horizontal line has no x."""
        assert math.isnan(AffineLine(0.0, 4.0).x_at(1.0))

    def test_affine_rejects_vertical_points(self):
        """Test affine rejects vertical points."""
        with pytest.raises(ValueError):
            AffineLine.through(Vector(1.0, 0.0), Vector(1.0, 5.0))

    def test_vertical_rejects_non_vertical_points(self):
        """Test vertical rejects non vertical points."""
        with pytest.raises(ValueError):
            VerticalLine.through(Vector(0.0, 0.0), Vector(1.0, 5.0))

    @pytest.mark.parametrize("cls", [AffineLine, VerticalLine])
    def test_coincident_points_rejected(self, cls):
        """Test coincident points rejected."""
        with pytest.raises(ValueError):
            cls.through(Vector(1.0, 1.0), Vector(1.0, 1.0))

    def test_line_through_picks_kind(self):
        """Test line through picks kind."""
        assert isinstance(line_through(Vector(1.0, 0.0), Vector(1.0, 3.0)), VerticalLine)
        assert isinstance(line_through(Vector(0.0, 0.0), Vector(1.0, 3.0)), AffineLine)


class TestEdge:
    """Test finite edges."""

    def test_length_cached(self):
        """Test length cached."""
        assert Edge(Vector(0.0, 0.0), Vector(3.0, 4.0)).length == 5.0

    def test_undirected_equality(self):
        """Test undirected equality."""
        a = Edge(Vector(0.0, 0.0), Vector(3.0, 4.0))
        b = Edge(Vector(3.0, 4.0), Vector(0.0, 0.0))
        assert a == b
        assert hash(a) == hash(b)

    def test_degenerate(self):
        """Test degenerate."""
        assert Edge(Vector(1.0, 1.0), Vector(1.0, 1.0 + EPSILON / 10)).is_degenerate()
        assert not Edge(Vector(1.0, 1.0), Vector(2.0, 1.0)).is_degenerate()

    def test_contains(self):
        """Test contains."""
        edge = Edge(Vector(0.0, 0.0), Vector(4.0, 4.0))
        assert edge.contains(Vector(2.0, 2.0))
        assert edge.contains(Vector(4.0, 4.0))
        assert not edge.contains(Vector(5.0, 5.0))
        assert not edge.contains(Vector(2.0, 3.0))

    def test_midpoint(self):
        """Test midpoint."""
        assert Edge(Vector(0.0, 0.0), Vector(4.0, 2.0)).midpoint == Vector(2.0, 1.0)


class TestHalfEdge:
    """Test rays."""

    def test_zero_direction_rejected(self):
        """Test zero direction rejected."""
        with pytest.raises(ValueError):
            HalfEdge(Vector(0.0, 0.0), Vector(0.0, 0.0))

    def test_vertical_support(self):
        """Test vertical support."""
        ray = HalfEdge(Vector(2.0, 0.0), Vector(0.0, -1.0))
        assert isinstance(ray.support, VerticalLine)
        assert ray.support.x == 2.0

    def test_affine_support(self):
        """Test affine support."""
        ray = HalfEdge(Vector(1.0, 1.0), Vector(1.0, 2.0))
        assert isinstance(ray.support, AffineLine)
        assert ray.support.slope == pytest.approx(2.0)
        assert ray.support.intercept == pytest.approx(-1.0)

    def test_contains_only_ahead(self):
        """Test contains only ahead."""
        ray = HalfEdge(Vector(0.0, 0.0), Vector(1.0, 1.0))
        assert ray.contains(Vector(3.0, 3.0))
        assert not ray.contains(Vector(-3.0, -3.0))
        assert ray.offset(Vector(-1.0, -1.0)) < 0


class TestRectangle:
    """Test the bounding box."""

    def test_non_positive_size_rejected(self):
        """Test non positive size rejected."""
        with pytest.raises(ValueError):
            Rectangle(0, 0, 0, 10)
        with pytest.raises(ValueError):
            Rectangle(0, 0, 10, -1)

    def test_corners_counter_clockwise(self):
        """Test corners counter clockwise."""
        box = Rectangle(1, 2, 10, 20)
        assert box.corners == (Vector(1, 2), Vector(11, 2), Vector(11, 22), Vector(1, 22))
        assert box.right == 11
        assert box.top == 22
        assert box.center == Vector(6, 12)
        assert box.area == 200
        assert box.perimeter == 60

    def test_contains_is_inclusive(self):
        """Test contains is inclusive."""
        box = Rectangle(0, 0, 10, 10)
        assert box.contains(Vector(0.0, 0.0))
        assert box.contains(Vector(10.0, 5.0))
        assert box.contains(Vector(10.0 + EPSILON / 10, 5.0))
        assert not box.contains(Vector(10.1, 5.0))

    def test_sides_close_the_boundary(self):
        """Test sides close the boundary."""
        sides = Rectangle(0, 0, 4, 2).sides()
        assert len(sides) == 4
        assert sum(side.length for side in sides) == pytest.approx(12.0)

    def test_sample_stays_inside(self):
        """Test sample stays inside."""
        box = Rectangle(-5, 10, 20, 5)
        prng = AleaPRNG("sample")
        for _ in range(200):
            assert box.contains(box.sample(prng))

    def test_kind_tags(self):
        """Test kind tags."""
        assert Rectangle(0, 0, 1, 1).kind is PrimitiveKind.RECTANGLE
        assert Vector(0, 0).kind is PrimitiveKind.POINT


class TestOrientation:
    """Test the ccw predicate."""

    def test_counter_clockwise(self):
        """Test counter clockwise."""
        assert ccw(Vector(0, 0), Vector(1, 0), Vector(0, 1)) > 0

    def test_clockwise(self):
        """Test clockwise."""
        assert ccw(Vector(0, 0), Vector(0, 1), Vector(1, 0)) < 0

    def test_collinear_is_exactly_zero(self):
        """Test collinear is exactly zero."""
        assert ccw(Vector(0, 0), Vector(1, 1), Vector(2, 2 + EPSILON / 100)) == 0.0
