"""
Tests for the boustrophedon coverage planner.
"""

import math

import pytest

from mowbot.core.coverage import Point, as_point, plan_coverage


SQUARE = [{"x": 0, "z": 0}, {"x": 10, "z": 0}, {"x": 10, "z": 10}, {"x": 0, "z": 10}]


def regular_polygon(sides, radius):
    return [
        Point(radius * math.cos(2 * math.pi * k / sides), radius * math.sin(2 * math.pi * k / sides))
        for k in range(sides)
    ]


class TestSquareScan:
    """10x10 square scanned with a 2 m tool."""

    def test_five_scan_lines(self):
        """Scan lines sit half a tool width in from the edge, one width apart."""
        path = plan_coverage(SQUARE, 2)
        assert len(path) == 10
        assert sorted({p.z for p in path}) == [1.0, 3.0, 5.0, 7.0, 9.0]

    def test_exact_serpentine(self):
        """Each line yields one pair at x=0 and x=10 with alternating direction."""
        path = plan_coverage(SQUARE, 2)
        assert path == [
            Point(0.0, 1.0), Point(10.0, 1.0),
            Point(10.0, 3.0), Point(0.0, 3.0),
            Point(0.0, 5.0), Point(10.0, 5.0),
            Point(10.0, 7.0), Point(0.0, 7.0),
            Point(0.0, 9.0), Point(10.0, 9.0),
        ]

    def test_accepts_tuples_and_points(self):
        """Vertex formats are interchangeable."""
        tuples = [(0, 0), (10, 0), (10, 10), (0, 10)]
        points = [Point(0, 0), Point(10, 0), Point(10, 10), Point(0, 10)]
        assert plan_coverage(tuples, 2) == plan_coverage(SQUARE, 2) == plan_coverage(points, 2)

    def test_waypoints_unpack_like_tuples(self):
        """Waypoints support both attribute access and unpacking."""
        first = plan_coverage(SQUARE, 2)[0]
        x, z = first
        assert (x, z) == (first.x, first.z) == (0.0, 1.0)


class TestConvexPolygons:
    """Properties on convex regular polygons."""

    @pytest.mark.parametrize("sides", [3, 5, 6, 8])
    def test_even_count_and_alternating_direction(self, sides):
        """Waypoints come in pairs and successive lines reverse direction."""
        path = plan_coverage(regular_polygon(sides, 12.0), 1.5)

        assert path
        assert len(path) % 2 == 0

        pairs = [path[i:i + 2] for i in range(0, len(path), 2)]
        for line, (start, end) in enumerate(pairs):
            assert start.z == end.z
            if line % 2 == 0:
                assert start.x <= end.x
            else:
                assert start.x >= end.x

    def test_deterministic(self):
        """Same polygon and width always give the same path."""
        polygon = regular_polygon(7, 9.0)
        assert plan_coverage(polygon, 0.75) == plan_coverage(polygon, 0.75)

    def test_waypoints_stay_inside_bounding_box(self):
        polygon = regular_polygon(6, 10.0)
        for p in plan_coverage(polygon, 1.0):
            assert -10.0 - 1e-9 <= p.x <= 10.0 + 1e-9
            assert -10.0 <= p.z <= 10.0


class TestEdgeCases:
    """Degenerate input and edge-case policies."""

    def test_fewer_than_three_vertices(self):
        assert plan_coverage([], 1.0) == []
        assert plan_coverage([(0, 0)], 1.0) == []
        assert plan_coverage([(0, 0), (5, 5)], 1.0) == []

    def test_non_positive_tool_width(self):
        with pytest.raises(ValueError):
            plan_coverage(SQUARE, 0)
        with pytest.raises(ValueError):
            plan_coverage(SQUARE, -1.0)

    def test_tool_wider_than_polygon(self):
        """A single scan line through the middle."""
        path = plan_coverage(SQUARE, 12)
        assert path == [Point(0.0, 6.0), Point(10.0, 6.0)]

    def test_first_line_offset_from_zone_bottom(self):
        """The first line is half a width above the lowest vertex."""
        shifted = [(x, z - 4) for x, z in [(0, 0), (10, 0), (10, 10), (0, 10)]]
        path = plan_coverage(shifted, 2)
        assert path[0].z == -3.0

    def test_concave_polygon_has_two_spans(self):
        """A U-shape yields two spans on lines crossing both arms."""
        u_shape = [(0, 0), (9, 0), (9, 9), (6, 9), (6, 3), (3, 3), (3, 9), (0, 9)]
        path = plan_coverage(u_shape, 2)
        upper = [p for p in path if p.z == 5.0]
        assert len(upper) == 4
        assert sorted(p.x for p in upper) == [0.0, 3.0, 6.0, 9.0]


class TestAsPoint:
    """Vertex coercion."""

    def test_formats(self):
        class Obj:
            x = 1
            z = 2

        assert as_point({"x": 1, "z": 2}) == Point(1.0, 2.0)
        assert as_point((1, 2)) == Point(1.0, 2.0)
        assert as_point(Obj()) == Point(1.0, 2.0)
