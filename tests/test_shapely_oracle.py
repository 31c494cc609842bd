"""Cross-check the 2D tracers against shapely's polygon geometry."""

import numpy as np
import pytest
from shapely.geometry import LineString, Point, Polygon, box

from shapes2 import Bounds2, Circle, Line2, Triangle2
from tracing import Ray2


REACH = 100.0


def _shapely_distance(ray, boundary):
    """Distance along the ray to the first boundary crossing, None on a miss."""
    segment = LineString([ray.origin, ray.at(REACH)])
    crossing = segment.intersection(boundary)
    if crossing.is_empty:
        return None
    return Point(ray.origin).distance(crossing)


def _random_rays(rng, random_unit, count):
    for _ in range(count):
        yield Ray2(rng.uniform(-6, 6, 2), random_unit(2))


class TestAgainstShapely:
    """Random rays give the same first crossing as shapely."""

    def test_triangle(self, rng, random_unit, samples):
        tri = Triangle2.from_points([-1, -1], [3, 0], [0, 2])
        poly = Polygon([tri.p1(), tri.p2(), tri.p3()])
        for ray in _random_rays(rng, random_unit, samples):
            hit = tri.trace(ray)
            expected = _shapely_distance(ray, poly.exterior)
            if expected is None:
                assert hit is None
            else:
                assert hit.distance == pytest.approx(expected, abs=1e-9)

    def test_box(self, rng, random_unit, samples):
        rect = Bounds2([1, 1], [4, 3])
        poly = box(1, 1, 4, 3)
        for ray in _random_rays(rng, random_unit, samples):
            hit = rect.trace(ray)
            expected = _shapely_distance(ray, poly.exterior)
            if expected is None:
                assert hit is None
            else:
                assert hit.distance == pytest.approx(expected, abs=1e-9)

    def test_segment(self, rng, random_unit, samples):
        line = Line2([-2, 1], [3, -1])
        segment = LineString([line.start, line.end])
        for ray in _random_rays(rng, random_unit, samples):
            hit = line.trace(ray)
            expected = _shapely_distance(ray, segment)
            if expected is None:
                assert hit is None
            else:
                assert hit.distance == pytest.approx(expected, abs=1e-9)

    def test_circle_against_polygon_approximation(self, rng, random_unit, samples):
        """shapely buffers the circle into a polygon, so compare loosely."""
        circle = Circle([0.5, -0.5], 2)
        poly = Point(0.5, -0.5).buffer(2, quad_segs=256)
        for ray in _random_rays(rng, random_unit, samples):
            hit = circle.trace(ray)
            expected = _shapely_distance(ray, poly.exterior)
            if hit is not None and expected is not None:
                assert hit.distance == pytest.approx(expected, abs=2e-2)

    def test_inside_matches_polygon(self, rng, samples):
        tri = Triangle2.from_points([-1, -1], [3, 0], [0, 2])
        poly = Polygon([tri.p1(), tri.p2(), tri.p3()])
        for point in rng.uniform(-2, 4, size=(samples, 2)):
            assert tri.inside(point) == poly.contains(Point(point))
