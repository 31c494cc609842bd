"""Tests for affine transforms and transformed shapes."""

import math

import numpy as np
import pytest

from shapes2 import Bounds2, Circle
from shapes3 import Sphere, Triangle3
from tracing import Affine, HitSide, Ray2, Ray3, Transformed


class TestAffine:
    """Tests for the affine transform value type."""

    def test_rejects_bad_shapes(self):
        with pytest.raises(ValueError):
            Affine(np.eye(2), np.zeros(3))
        with pytest.raises(ValueError):
            Affine(np.ones((2, 3)), np.zeros(2))
        with pytest.raises(ValueError):
            Affine(np.eye(4), np.zeros(4))

    def test_singular_matrix(self):
        with pytest.raises(np.linalg.LinAlgError):
            Affine(np.zeros((2, 2)), np.zeros(2))

    def test_apply_and_inverse(self):
        T = Affine.from_translate(1, 2).then(Affine.from_scale(2))
        p = np.array([1.0, 1.0])
        assert np.allclose(T.apply(p), [4.0, 6.0])
        assert np.allclose(T.inverse_apply(T.apply(p)), p)

    def test_rotation(self):
        R = Affine.from_rotation(math.pi / 2)
        assert np.allclose(R.apply(np.array([1.0, 0.0])), [0.0, 1.0])

    def test_axis_angle(self):
        R = Affine.from_axis_angle([0, 0, 1], math.pi / 2)
        assert R.dim == 3
        assert np.allclose(R.apply_vector(np.array([1.0, 0.0, 0.0])), [0.0, 1.0, 0.0])

    def test_scale_dimension(self):
        assert Affine.from_scale(2, dim=3).dim == 3
        assert np.allclose(Affine.from_scale(2, 3).A, np.diag([2.0, 3.0]))

    def test_identity(self):
        p = np.array([3.0, -1.0, 2.0])
        assert np.allclose(Affine.identity(3).apply(p), p)

    def test_normal_uses_inverse_transpose(self):
        """A shear keeps normals perpendicular to transformed tangents."""
        shear = Affine(np.array([[1.0, 1.0], [0.0, 1.0]]), np.zeros(2))
        tangent = shear.apply_vector(np.array([0.0, 1.0]))
        normal = shear.transform_normal(np.array([1.0, 0.0]))
        assert np.dot(tangent, normal) == pytest.approx(0.0)
        assert np.linalg.norm(normal) == pytest.approx(1.0)


class TestTransformed:
    """Tests for shapes traced through a transform."""

    def test_translated_circle(self):
        shape = Circle([0, 0], 1).translate(3, 0)
        hit = shape.trace(Ray2([0, 0], [1, 0]))
        assert hit.distance == pytest.approx(2.0)
        assert np.allclose(hit.point, [2.0, 0.0])
        assert np.allclose(hit.normal, [-1.0, 0.0])
        assert shape.inside(np.array([3.5, 0.0]))

    def test_scaled_circle_reports_world_distance(self):
        shape = Circle([0, 0], 1).scale(2)
        hit = shape.trace(Ray2([-5, 0], [1, 0]))
        assert hit.distance == pytest.approx(3.0)
        assert np.allclose(hit.point, [-2.0, 0.0])
        assert shape.inside(np.array([1.5, 0.0]))

    def test_scaled_budget(self):
        shape = Circle([0, 0], 1).scale(2)
        assert shape.trace(Ray2([-5, 0], [1, 0], 2.5)) is None

    def test_rotated_box(self):
        shape = Bounds2([0, -1], [4, 1]).rotate(math.pi / 2)
        hit = shape.trace(Ray2([0, -5], [0, 1]))
        assert hit.distance == pytest.approx(5.0)
        assert np.allclose(hit.normal, [0.0, -1.0])
        assert hit.side is HitSide.ENTRY

    def test_anisotropic_sphere(self):
        ellipsoid = Transformed(Sphere([0, 0, 0], 1), Affine.from_scale(1, 1, 3))
        hit = ellipsoid.trace(Ray3([0, 0, 10], [0, 0, -1]))
        assert hit.distance == pytest.approx(7.0)
        assert np.allclose(hit.normal, [0.0, 0.0, 1.0])

    def test_rotated_triangle(self):
        tri = Triangle3([0, 0, 0], [1, 0, 0], [0, 1, 0]).rotate(math.pi / 2, axis=[1, 0, 0])
        hit = tri.trace(Ray3([0.25, -1, 0.25], [0, 1, 0]))
        assert hit.distance == pytest.approx(1.0)
        assert np.allclose(hit.normal, [0.0, -1.0, 0.0])

    def test_composite_transform(self):
        shape = (Circle([0, 0], 1) | Circle([1, 0], 1)).translate(0, 5)
        assert shape.trace(Ray2([-5, 5], [1, 0])).distance == pytest.approx(4.0)

    def test_then_matches_nested_transforms(self):
        """Tracing through a composed transform equals tracing through each in turn."""
        place = Affine.from_translate(3, 0)
        turn = Affine.from_rotation(math.pi / 2)
        composed = Transformed(Circle([0, 0], 1), place.then(turn))
        nested = Transformed(Transformed(Circle([0, 0], 1), place), turn)
        ray = Ray2([0, -5], [0, 1])
        hit = composed.trace(ray)
        assert hit.distance == pytest.approx(7.0)
        assert hit.distance == pytest.approx(nested.trace(ray).distance)
        assert np.allclose(hit.point, nested.trace(ray).point)
