"""Randomized tracing of CSG composites.

Rays start well outside both operands and are aimed at points strictly
inside the composite. Every composite here is built from two balls, so
boundary membership can be checked through signed distances.
"""

import numpy as np
import pytest

from shapes2 import Circle
from shapes3 import Sphere
from tracing import Difference, Intersection, MarchConfig, Ray2, Ray3, Union, Xor


TOLERANCE = 1e-4
MARGIN = 0.02

OPERATIONS = [
    (Intersection, lambda a, b: a and b),
    (Difference, lambda a, b: a and not b),
    (Xor, lambda a, b: a != b),
    (Union, lambda a, b: a or b),
]


def _signed(balls, point):
    return [np.linalg.norm(point - ball.center) - ball.radius for ball in balls]


def _interior(rng, balls, member):
    """Rejection-sample a point inside the composite, away from both boundaries."""
    dim = len(balls[0].center)
    while True:
        point = rng.uniform(-1.6, 1.6, dim)
        d = _signed(balls, point)
        if min(abs(x) for x in d) > MARGIN and member(d[0] < 0, d[1] < 0):
            return point


def _on_composite_boundary(member, d):
    """True when the point sits on an operand surface that the composite keeps."""
    for i in (0, 1):
        if abs(d[i]) >= TOLERANCE:
            continue
        other = d[1 - i]
        if abs(other) < TOLERANCE:
            return True
        other_inside = other < 0
        if i == 0:
            flips = member(True, other_inside) != member(False, other_inside)
        else:
            flips = member(other_inside, True) != member(other_inside, False)
        if flips:
            return True
    return False


def _check(rng, random_unit, balls, operation, member, count):
    composite = operation(*balls)
    dim = len(balls[0].center)
    ray_cls = Ray2 if dim == 2 else Ray3
    for _ in range(count):
        target = _interior(rng, balls, member)
        origin = random_unit(dim) * 10
        ray = ray_cls.new(origin, target - origin)
        hit = composite.trace(ray)
        assert hit is not None
        assert hit.distance > 0
        assert np.allclose(ray.at(hit.distance), hit.point, atol=TOLERANCE)
        assert _on_composite_boundary(member, _signed(balls, hit.point))
        assert np.linalg.norm(hit.normal) == pytest.approx(1.0, abs=1e-6)


@pytest.mark.parametrize("operation, member", OPERATIONS, ids=lambda v: getattr(v, "__name__", ""))
class TestRandomRays:
    """Rays aimed into a composite hit its boundary."""

    def test_circles(self, rng, random_unit, samples, operation, member):
        balls = [Circle([-0.5, 0], 1), Circle([0.5, 0], 1)]
        _check(rng, random_unit, balls, operation, member, samples)

    def test_spheres(self, rng, random_unit, samples, operation, member):
        balls = [Sphere([-0.5, 0, 0], 1), Sphere([0.5, 0.2, 0], 0.9)]
        _check(rng, random_unit, balls, operation, member, samples)


class TestMarchTolerance:
    """Restarting on a crossing must not find that crossing again."""

    def test_oblique_entry_into_lens(self):
        lens = Intersection(Circle([-0.5, 0], 1), Circle([0.5, 0], 1))
        ray = Ray2.new([-8, 6], [8, -6])
        hit = lens.trace(ray)
        assert hit.distance == pytest.approx(10.4 - np.sqrt(0.91))
        assert np.linalg.norm(hit.point - np.array([0.5, 0.0])) == pytest.approx(1.0)

    def test_far_from_origin(self):
        """Coordinates in the thousands scale the restart tolerance."""
        lens = Intersection(Sphere([4000, 0, 0], 1), Sphere([4001, 0, 0], 1))
        ray = Ray3.new([3990, 3, 4], [10.5, -3, -4])
        hit = lens.trace(ray)
        assert hit is not None
        assert np.linalg.norm(hit.point - np.array([4001.0, 0.0, 0.0])) == pytest.approx(1.0, abs=TOLERANCE)

    def test_tolerance_is_configurable(self):
        lens = Intersection(Circle([-0.5, 0], 1), Circle([0.5, 0], 1), MarchConfig(tolerance=1e-6))
        hit = lens.trace(Ray2.new([-8, 6], [8, -6]))
        assert hit.distance == pytest.approx(10.4 - np.sqrt(0.91))
