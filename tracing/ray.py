"""
Rays, hits and the Trace capability shared by every shape.

A ray parameterizes points as ``origin + direction * t`` for ``t`` inside its
distance interval ``(min, max]``. Shapes implement ``Traceable``:

    inside(point) -> bool
    trace(ray)    -> Hit | None

Returned hits carry a unit normal facing the incoming ray and a side telling
whether the ray enters or leaves the shape's solid interior there.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import ClassVar, Iterable, Optional, Union
import math
import numpy as np

from .numeric import (
    FrozenValue,
    as_scalar,
    as_vector,
    epsilon,
    normalize,
    reflect,
    total_order_key,
)


@dataclass(frozen=True)
class Interval:
    """
    Valid parametric range (min, max] along a ray.
    """
    min: float = 0.0
    max: float = math.inf

    def contains(self, t) -> bool:
        # False for NaN
        return self.min < t <= self.max

    def with_max(self, t) -> "Interval":
        return Interval(self.min, t)


class HitSide(Enum):
    ENTRY = "entry"
    EXIT = "exit"


@dataclass(frozen=True, eq=False)
class Hit(FrozenValue):
    point: np.ndarray
    distance: float
    normal: np.ndarray
    index: int = 0
    side: HitSide = HitSide.ENTRY


class Traceable:
    """
    Anything a ray can be traced against: primitives, dispatch unions,
    CSG composites and transformed shapes.
    """
    def inside(self, point: np.ndarray) -> bool:
        raise NotImplementedError

    def trace(self, ray: "Ray") -> Optional[Hit]:
        raise NotImplementedError

    # ---- Composition DSL ----
    def union(self, other: "Traceable") -> "Traceable":
        from .csg import Union as _Union
        return _Union(self, other)

    def __or__(self, other: "Traceable") -> "Traceable":
        return self.union(other)

    def intersect(self, other: "Traceable") -> "Traceable":
        from .csg import Intersection
        return Intersection(self, other)

    def __and__(self, other: "Traceable") -> "Traceable":
        return self.intersect(other)

    def difference(self, other: "Traceable") -> "Traceable":
        from .csg import Difference
        return Difference(self, other)

    def __sub__(self, other: "Traceable") -> "Traceable":
        return self.difference(other)

    def symmetric_difference(self, other: "Traceable") -> "Traceable":
        from .csg import Xor
        return Xor(self, other)

    def __xor__(self, other: "Traceable") -> "Traceable":
        return self.symmetric_difference(other)

    # ---- Transform helpers ----
    def transformed(self, T) -> "Traceable":
        from .transform import Transformed
        return Transformed(self, T)

    def translate(self, *offset: float) -> "Traceable":
        from .transform import Affine
        return self.transformed(Affine.from_translate(*offset))

    def scale(self, *factors: float, dim: Optional[int] = None) -> "Traceable":
        from .transform import Affine
        return self.transformed(Affine.from_scale(*factors, dim=dim))

    def rotate(self, theta_radians: float, axis=None) -> "Traceable":
        from .transform import Affine
        if axis is None:
            return self.transformed(Affine.from_rotation(theta_radians))
        return self.transformed(Affine.from_axis_angle(axis, theta_radians))


def _as_interval(distance: Union[Interval, float, None]) -> Interval:
    if distance is None:
        return Interval()
    if isinstance(distance, Interval):
        return distance
    return Interval(0.0, as_scalar(distance))


@dataclass(frozen=True, eq=False)
class Ray(FrozenValue):
    """
    A ray with an origin, a direction and a distance interval.

    The direction should be unit length for distances to be metric. A bare
    number for ``distance`` means ``Interval(0, number)``.
    """
    origin: np.ndarray
    direction: np.ndarray
    distance: Interval = field(default_factory=Interval)

    dim: ClassVar[Optional[int]] = None

    def __post_init__(self):
        origin = as_vector(self.origin, self.dim, "origin")
        direction = as_vector(self.direction, origin.shape[0], "direction")
        object.__setattr__(self, "origin", origin)
        object.__setattr__(self, "direction", direction)
        object.__setattr__(self, "distance", _as_interval(self.distance))

    @classmethod
    def new(cls, origin, direction, distance: Union[Interval, float, None] = None) -> "Ray":
        """
        Construct a ray with its direction normalized.
        """
        direction = as_vector(direction, cls.dim, "direction")
        return cls(origin, normalize(direction), _as_interval(distance))

    @property
    def epsilon(self) -> float:
        return epsilon(self.direction.dtype)

    def at(self, t) -> np.ndarray:
        return self.origin + self.direction * t

    def with_max(self, t) -> "Ray":
        return replace(self, distance=self.distance.with_max(t))

    def step(self, d) -> "Ray":
        """
        Advance the origin by d; the remaining travel budget shrinks by d.

        The lower bound is kept rather than shifted with the origin, so a
        surface behind the new origin can never be reported.
        """
        return replace(
            self,
            origin=self.at(d),
            distance=Interval(self.distance.min, self.distance.max - d),
        )

    def reflect(self, hit: Hit) -> "Ray":
        direction = reflect(self.direction, hit.normal)
        distance = Interval(self.distance.min, self.distance.max - hit.distance)
        return replace(self, origin=hit.point, direction=direction, distance=distance)

    def refract(self, hit: Hit, ior_outside: float, ior_inside: float) -> Optional["Ray"]:
        """
        Refract through the surface at hit using Snell's law.
        Returns None on total internal reflection.
        """
        if hit.side is HitSide.ENTRY:
            eta = ior_outside / ior_inside
        else:
            eta = ior_inside / ior_outside
        cos_i = -np.dot(hit.normal, self.direction)
        sin2_t = eta * eta * (1.0 - cos_i * cos_i)
        if sin2_t > 1.0:
            return None
        cos_t = math.sqrt(1.0 - sin2_t)
        direction = normalize(self.direction * eta + hit.normal * (eta * cos_i - cos_t))
        distance = Interval(self.distance.min, self.distance.max - hit.distance)
        return replace(self, origin=hit.point, direction=direction, distance=distance)

    # ---- Tracing convenience ----
    def inside(self, shape: Traceable) -> bool:
        return shape.inside(self.origin)

    def inside_collection(self, shapes: Iterable[Traceable]) -> bool:
        return any(shape.inside(self.origin) for shape in shapes)

    def trace(self, shape: Traceable) -> Optional[Hit]:
        return shape.trace(self)

    def trace_collection(self, shapes: Iterable[Traceable]) -> Optional[Hit]:
        """
        Nearest hit over all shapes, with the index of the shape that produced
        it. Exact ties go to the earlier shape.
        """
        ray = self
        best: Optional[Hit] = None
        for index, shape in enumerate(shapes):
            hit = shape.trace(ray)
            if hit is None:
                continue
            if best is None or total_order_key(hit.distance) < total_order_key(best.distance):
                best = replace(hit, index=index)
                ray = ray.with_max(hit.distance)
        return best


@dataclass(frozen=True, eq=False)
class Ray2(Ray):
    dim: ClassVar[Optional[int]] = 2

    def y_intercept(self):
        """
        y coordinate where the ray crosses the Y axis, None if the ray is
        parallel to it or the crossing is outside the interval.
        """
        if self.direction[0] == 0.0:
            return None
        t = -self.origin[0] / self.direction[0]
        if not self.distance.contains(t):
            return None
        return self.origin[1] + self.direction[1] * t

    def x_intercept(self):
        if self.direction[1] == 0.0:
            return None
        t = -self.origin[1] / self.direction[1]
        if not self.distance.contains(t):
            return None
        return self.origin[0] + self.direction[0] * t


@dataclass(frozen=True, eq=False)
class Ray3(Ray):
    dim: ClassVar[Optional[int]] = 3
