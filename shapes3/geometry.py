from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
import numpy as np

from tracing.kernels import trace_ball, trace_plane, trace_slab
from tracing.numeric import (
    FrozenValue,
    as_scalar,
    as_vector,
    cross,
    epsilon,
    length,
    normalize,
)
from tracing.ray import Hit, HitSide, Ray, Traceable


def _vec3(values, name: str) -> np.ndarray:
    return as_vector(values, 3, name)


@dataclass(frozen=True, eq=False)
class Point3(FrozenValue, Traceable):
    point: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, "point", _vec3(self.point, "point"))

    def inside(self, point: np.ndarray) -> bool:
        return False

    def trace(self, ray: Ray) -> Optional[Hit]:
        return None


@dataclass(frozen=True, eq=False)
class Line3(FrozenValue, Traceable):
    """
    Segment from start to end. Infinitely thin, so never hit.
    """
    start: np.ndarray
    end: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, "start", _vec3(self.start, "start"))
        object.__setattr__(self, "end", _vec3(self.end, "end"))

    def delta(self) -> np.ndarray:
        return self.end - self.start

    def lerp(self, target: "Line3", t: float) -> "Line3":
        return Line3(
            self.start + (target.start - self.start) * t,
            self.end + (target.end - self.end) * t,
        )

    def project(self, point: np.ndarray) -> np.ndarray:
        delta = self.delta()
        denom = np.dot(delta, delta)
        s = 0.0 if denom == 0 else np.clip(np.dot(point - self.start, delta) / denom, 0.0, 1.0)
        return self.start + delta * s

    def distance_to(self, point: np.ndarray):
        return length(self.project(point) - point)

    def inside(self, point: np.ndarray) -> bool:
        return False

    def trace(self, ray: Ray) -> Optional[Hit]:
        return None


@dataclass(frozen=True, eq=False)
class Bounds3(FrozenValue, Traceable):
    mins: np.ndarray
    maxs: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, "mins", _vec3(self.mins, "mins"))
        object.__setattr__(self, "maxs", _vec3(self.maxs, "maxs"))

    @staticmethod
    def from_points(a, b) -> "Bounds3":
        a = _vec3(a, "a")
        b = _vec3(b, "b")
        return Bounds3(np.minimum(a, b), np.maximum(a, b))

    def norm(self) -> "Bounds3":
        return Bounds3.from_points(self.mins, self.maxs)

    def size(self) -> np.ndarray:
        return self.maxs - self.mins

    def center(self) -> np.ndarray:
        return (self.mins + self.maxs) / 2

    def volume(self):
        w, h, d = self.size()
        return w * h * d

    def contains(self, point: np.ndarray) -> bool:
        return bool(np.all(self.mins <= point) and np.all(point <= self.maxs))

    def inside(self, point: np.ndarray) -> bool:
        return self.contains(point)

    def trace(self, ray: Ray) -> Optional[Hit]:
        return trace_slab(self.mins, self.maxs, ray)


@dataclass(frozen=True, eq=False)
class Plane3(FrozenValue, Traceable):
    """
    Half-space normal.x + distance >= 0, bounded by the plane where it is 0.
    """
    normal: np.ndarray
    distance: float

    def __post_init__(self):
        object.__setattr__(self, "normal", _vec3(self.normal, "normal"))
        object.__setattr__(self, "distance", as_scalar(self.distance))

    @staticmethod
    def from_point(normal, point) -> "Plane3":
        normal = _vec3(normal, "normal")
        return Plane3(normal, -np.dot(normal, _vec3(point, "point")))

    @staticmethod
    def from_points(p1, p2, p3) -> "Plane3":
        """
        Plane through three points; normal follows the right-hand rule p1 -> p2 -> p3.
        """
        p1 = _vec3(p1, "p1")
        normal = normalize(cross(_vec3(p2, "p2") - p1, _vec3(p3, "p3") - p1))
        return Plane3(normal, -np.dot(normal, p1))

    def __neg__(self) -> "Plane3":
        return Plane3(-self.normal, -self.distance)

    def signed_distance(self, point: np.ndarray):
        return np.dot(self.normal, point) + self.distance

    def project(self, point: np.ndarray) -> np.ndarray:
        return point - self.normal * self.signed_distance(point)

    def intersect_plane(self, other: "Plane3") -> Optional[Line3]:
        """
        Line shared by both planes as a unit-length segment along the
        common direction, None if the planes are parallel.
        """
        direction = cross(self.normal, other.normal)
        denom = np.dot(direction, direction)
        if np.sqrt(denom) < epsilon(direction.dtype):
            return None
        start = (
            cross(other.normal, direction) * -self.distance
            + cross(direction, self.normal) * -other.distance
        ) / denom
        return Line3(start, start + normalize(direction))

    def inside(self, point: np.ndarray) -> bool:
        return bool(self.signed_distance(point) >= 0)

    def trace(self, ray: Ray) -> Optional[Hit]:
        return trace_plane(self.normal, self.distance, ray)


@dataclass(frozen=True, eq=False)
class Sphere(FrozenValue, Traceable):
    center: np.ndarray
    radius: float

    def __post_init__(self):
        object.__setattr__(self, "center", _vec3(self.center, "center"))
        object.__setattr__(self, "radius", as_scalar(self.radius))

    def bounds(self) -> Bounds3:
        return Bounds3(self.center - self.radius, self.center + self.radius)

    def lerp(self, target: "Sphere", t: float) -> "Sphere":
        return Sphere(
            self.center + (target.center - self.center) * t,
            self.radius + (target.radius - self.radius) * t,
        )

    def inside(self, point: np.ndarray) -> bool:
        d = point - self.center
        return bool(np.dot(d, d) < self.radius * self.radius)

    def trace(self, ray: Ray) -> Optional[Hit]:
        return trace_ball(self.center, self.radius, ray)


@dataclass(frozen=True, eq=False)
class Triangle3(FrozenValue, Traceable):
    """
    Flat triangle with vertices p, p+u, p+v. Has no interior.
    """
    p: np.ndarray
    u: np.ndarray
    v: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, "p", _vec3(self.p, "p"))
        object.__setattr__(self, "u", _vec3(self.u, "u"))
        object.__setattr__(self, "v", _vec3(self.v, "v"))

    @staticmethod
    def from_points(p1, p2, p3) -> "Triangle3":
        p1 = _vec3(p1, "p1")
        return Triangle3(p1, _vec3(p2, "p2") - p1, _vec3(p3, "p3") - p1)

    def p1(self) -> np.ndarray:
        return self.p

    def p2(self) -> np.ndarray:
        return self.p + self.u

    def p3(self) -> np.ndarray:
        return self.p + self.v

    def normal(self) -> np.ndarray:
        return normalize(cross(self.u, self.v))

    def plane(self) -> Plane3:
        return Plane3.from_point(self.normal(), self.p)

    def centroid(self) -> np.ndarray:
        return (self.p1() + self.p2() + self.p3()) / 3

    def decompose(self, q: np.ndarray) -> np.ndarray:
        d = q - self.p
        return np.array([np.dot(d, self.u) / np.dot(self.u, self.u), np.dot(d, self.v) / np.dot(self.v, self.v)])

    def barycentric(self, q: np.ndarray) -> np.ndarray:
        """
        Weights (a, b, c) of p1, p2, p3 for a point q in the triangle's plane.
        """
        d = q - self.p
        uu = np.dot(self.u, self.u)
        uv = np.dot(self.u, self.v)
        vv = np.dot(self.v, self.v)
        du = np.dot(d, self.u)
        dv = np.dot(d, self.v)
        denom = uu * vv - uv * uv
        b = (vv * du - uv * dv) / denom
        c = (uu * dv - uv * du) / denom
        return np.array([1.0 - b - c, b, c])

    def inside(self, point: np.ndarray) -> bool:
        return False

    def trace(self, ray: Ray) -> Optional[Hit]:
        # Moller-Trumbore
        eps = ray.epsilon
        h = cross(ray.direction, self.v)
        a = np.dot(self.u, h)
        if not abs(a) >= eps:
            return None
        f = 1.0 / a
        s = ray.origin - self.p
        bu = f * np.dot(s, h)
        if not 0 <= bu <= 1:
            return None
        q = cross(s, self.u)
        bv = f * np.dot(ray.direction, q)
        if not (bv >= 0 and bu + bv <= 1):
            return None
        t = f * np.dot(self.v, q)
        if not (t > max(ray.distance.min, eps) and t <= ray.distance.max):
            return None

        n = self.normal()
        if np.dot(n, ray.direction) < 0:
            return Hit(point=ray.at(t), distance=t, normal=n, side=HitSide.ENTRY)
        return Hit(point=ray.at(t), distance=t, normal=-n, side=HitSide.EXIT)
