from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple
import numpy as np

from tracing.kernels import trace_ball, trace_edge, trace_plane, trace_slab
from tracing.numeric import (
    FrozenValue,
    as_scalar,
    as_vector,
    cross2,
    length,
    normalize,
    perp,
)
from tracing.ray import Hit, HitSide, Ray, Traceable


def _vec2(values, name: str) -> np.ndarray:
    return as_vector(values, 2, name)


@dataclass(frozen=True, eq=False)
class Point2(FrozenValue, Traceable):
    """
    A single point. Has no interior and no area to hit.
    """
    point: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, "point", _vec2(self.point, "point"))

    def inside(self, point: np.ndarray) -> bool:
        return False

    def trace(self, ray: Ray) -> Optional[Hit]:
        return None


@dataclass(frozen=True, eq=False)
class Bounds2(FrozenValue, Traceable):
    """
    Axis-aligned rectangle [mins, maxs].
    """
    mins: np.ndarray
    maxs: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, "mins", _vec2(self.mins, "mins"))
        object.__setattr__(self, "maxs", _vec2(self.maxs, "maxs"))

    @staticmethod
    def from_points(a, b) -> "Bounds2":
        a = _vec2(a, "a")
        b = _vec2(b, "b")
        return Bounds2(np.minimum(a, b), np.maximum(a, b))

    def norm(self) -> "Bounds2":
        """
        Same rectangle with mins and maxs swapped where needed.
        """
        return Bounds2.from_points(self.mins, self.maxs)

    def size(self) -> np.ndarray:
        return self.maxs - self.mins

    def center(self) -> np.ndarray:
        return (self.mins + self.maxs) / 2

    def area(self):
        w, h = self.size()
        return w * h

    def contains(self, point: np.ndarray) -> bool:
        return bool(np.all(self.mins <= point) and np.all(point <= self.maxs))

    def inside(self, point: np.ndarray) -> bool:
        return self.contains(point)

    def trace(self, ray: Ray) -> Optional[Hit]:
        return trace_slab(self.mins, self.maxs, ray)


@dataclass(frozen=True, eq=False)
class Plane2(FrozenValue, Traceable):
    """
    { x : normal.x + distance = 0 }; inside is where normal.x + distance >= 0.
    """
    normal: np.ndarray
    distance: float

    def __post_init__(self):
        object.__setattr__(self, "normal", _vec2(self.normal, "normal"))
        object.__setattr__(self, "distance", as_scalar(self.distance))

    @staticmethod
    def from_point(normal, point) -> "Plane2":
        normal = _vec2(normal, "normal")
        return Plane2(normal, -np.dot(normal, _vec2(point, "point")))

    @staticmethod
    def from_line(pt1, pt2) -> "Plane2":
        """
        Plane through two points, normal rotated +90 degrees from pt1->pt2.
        """
        pt1 = _vec2(pt1, "pt1")
        delta = _vec2(pt2, "pt2") - pt1
        normal = normalize(np.array([-delta[1], delta[0]]))
        return Plane2(normal, -np.dot(normal, pt1))

    def __neg__(self) -> "Plane2":
        return Plane2(-self.normal, -self.distance)

    def signed_distance(self, point: np.ndarray):
        return np.dot(self.normal, point) + self.distance

    def project(self, point: np.ndarray) -> np.ndarray:
        return point - self.normal * self.signed_distance(point)

    def y_intercept(self):
        if self.normal[1] == 0:
            return None
        return -self.distance / self.normal[1]

    def x_intercept(self):
        if self.normal[0] == 0:
            return None
        return -self.distance / self.normal[0]

    def intersect_plane(self, other: "Plane2") -> Optional[np.ndarray]:
        """
        Point shared by both lines, None if they are parallel.
        """
        det = cross2(self.normal, other.normal)
        if det == 0:
            return None
        a1, b1 = self.normal
        a2, b2 = other.normal
        c1 = -self.distance
        c2 = -other.distance
        x = (b2 * c1 - b1 * c2) / det
        y = (a1 * c2 - a2 * c1) / det
        return np.array([x, y])

    def inside(self, point: np.ndarray) -> bool:
        return bool(self.signed_distance(point) >= 0)

    def trace(self, ray: Ray) -> Optional[Hit]:
        return trace_plane(self.normal, self.distance, ray)


@dataclass(frozen=True, eq=False)
class Circle(FrozenValue, Traceable):
    center: np.ndarray
    radius: float

    def __post_init__(self):
        object.__setattr__(self, "center", _vec2(self.center, "center"))
        object.__setattr__(self, "radius", as_scalar(self.radius))

    def bounds(self) -> Bounds2:
        return Bounds2(self.center - self.radius, self.center + self.radius)

    def lerp(self, target: "Circle", t: float) -> "Circle":
        return Circle(
            self.center + (target.center - self.center) * t,
            self.radius + (target.radius - self.radius) * t,
        )

    def inside(self, point: np.ndarray) -> bool:
        d = point - self.center
        return bool(np.dot(d, d) < self.radius * self.radius)

    def trace(self, ray: Ray) -> Optional[Hit]:
        return trace_ball(self.center, self.radius, ray)


def _edge_hit(ray: Ray, t, edge: np.ndarray, denom, side: HitSide) -> Hit:
    normal = normalize(perp(edge))
    # perp(edge).direction == denom, so flip to face the ray
    if denom > 0:
        normal = -normal
    return Hit(point=ray.at(t), distance=t, normal=normal, side=side)


@dataclass(frozen=True, eq=False)
class Line2(FrozenValue, Traceable):
    """
    Line segment from start to end.
    """
    start: np.ndarray
    end: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, "start", _vec2(self.start, "start"))
        object.__setattr__(self, "end", _vec2(self.end, "end"))

    def delta(self) -> np.ndarray:
        return self.end - self.start

    def bounds(self) -> Bounds2:
        return Bounds2.from_points(self.start, self.end)

    def pinch(self, point) -> Tuple["Line2", "Line2"]:
        return Line2(self.start, point), Line2(point, self.end)

    def lerp(self, target: "Line2", t: float) -> "Line2":
        return Line2(
            self.start + (target.start - self.start) * t,
            self.end + (target.end - self.end) * t,
        )

    def project(self, point: np.ndarray) -> np.ndarray:
        """
        Closest point on the segment.
        """
        delta = self.delta()
        denom = np.dot(delta, delta)
        s = 0.0 if denom == 0 else np.clip(np.dot(point - self.start, delta) / denom, 0.0, 1.0)
        return self.start + delta * s

    def distance_to(self, point: np.ndarray):
        return length(self.project(point) - point)

    def segment_x(self, segment: "Line2"):
        """
        Scalar s such that segment.start + s * segment.delta() lies on this
        (infinite) line, None if parallel. The segment is crossed for s in [0, 1].
        """
        r = self.delta()
        s = segment.delta()
        denom = cross2(r, s)
        if denom == 0:
            return None
        return cross2(segment.start - self.start, r) / denom

    def intersect_line(self, other: "Line2") -> Optional[np.ndarray]:
        """
        Intersection of the two infinite lines, None if parallel.
        """
        r = self.delta()
        s = other.delta()
        denom = cross2(r, s)
        if denom == 0:
            return None
        p = r * cross2(other.start, other.end) - s * cross2(self.start, self.end)
        return p / denom

    def inside(self, point: np.ndarray) -> bool:
        return False

    def trace(self, ray: Ray) -> Optional[Hit]:
        delta = self.delta()
        crossing = trace_edge(self.start, delta, ray)
        if crossing is None:
            return None
        t, denom = crossing
        # No inherent orientation
        return _edge_hit(ray, t, delta, denom, HitSide.ENTRY)


@dataclass(frozen=True, eq=False)
class Triangle2(FrozenValue, Traceable):
    """
    Triangle with base point p and edge vectors u, v.
    Vertices: p, p+u, p+v
    """
    p: np.ndarray
    u: np.ndarray
    v: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, "p", _vec2(self.p, "p"))
        object.__setattr__(self, "u", _vec2(self.u, "u"))
        object.__setattr__(self, "v", _vec2(self.v, "v"))

    @staticmethod
    def from_points(p1, p2, p3) -> "Triangle2":
        p1 = _vec2(p1, "p1")
        return Triangle2(p1, _vec2(p2, "p2") - p1, _vec2(p3, "p3") - p1)

    def p1(self) -> np.ndarray:
        return self.p

    def p2(self) -> np.ndarray:
        return self.p + self.u

    def p3(self) -> np.ndarray:
        return self.p + self.v

    def edges(self) -> List[Tuple[np.ndarray, np.ndarray]]:
        """
        (start, edge) for the boundary p -> p+u -> p+v -> p.
        """
        return [
            (self.p, self.u),
            (self.p + self.u, self.v - self.u),
            (self.p + self.v, -self.v),
        ]

    def centroid(self) -> np.ndarray:
        return (self.p1() + self.p2() + self.p3()) / 3

    def decompose(self, q: np.ndarray) -> np.ndarray:
        """
        Projections of q - p onto u and v, each relative to the edge length.
        """
        d = q - self.p
        return np.array([np.dot(d, self.u) / np.dot(self.u, self.u), np.dot(d, self.v) / np.dot(self.v, self.v)])

    def barycentric(self, q: np.ndarray) -> np.ndarray:
        """
        Weights (a, b, c) of p1, p2, p3 such that q = a*p1 + b*p2 + c*p3.
        """
        area_inv = 1.0 / cross2(self.u, self.v)
        d = q - self.p
        b = cross2(d, self.v) * area_inv
        c = cross2(self.u, d) * area_inv
        return np.array([1.0 - b - c, b, c])

    def inside(self, point: np.ndarray) -> bool:
        signs = [cross2(edge, point - start) for start, edge in self.edges()]
        return bool(all(s >= 0 for s in signs) or all(s <= 0 for s in signs))

    def trace(self, ray: Ray) -> Optional[Hit]:
        orientation = cross2(self.u, self.v)
        nearest: Optional[Hit] = None
        for start, edge in self.edges():
            crossing = trace_edge(start, edge, ray)
            if crossing is None:
                continue
            t, denom = crossing
            if nearest is not None and not t < nearest.distance:
                continue
            # Against the outward normal of a counter-clockwise edge means entering
            side = HitSide.ENTRY if denom * orientation < 0 else HitSide.EXIT
            nearest = _edge_hit(ray, t, edge, denom, side)
        return nearest
