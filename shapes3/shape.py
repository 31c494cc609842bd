from __future__ import annotations

from typing import Dict, Literal, Optional, Type
import numpy as np

from tracing.ray import Hit, Ray, Traceable
from .geometry import Bounds3, Line3, Plane3, Point3, Sphere, Triangle3


Shape3Kind = Literal["point", "bounds", "plane", "sphere", "line", "triangle"]

_KINDS: Dict[Type[Traceable], str] = {
    Point3: "point",
    Bounds3: "bounds",
    Plane3: "plane",
    Sphere: "sphere",
    Line3: "line",
    Triangle3: "triangle",
}


class Shape3(Traceable):
    """
    Tagged union over the 3D primitives.
    """

    def __init__(self, primitive: Traceable):
        if type(primitive) not in _KINDS:
            raise ValueError(f"unknown primitive kind: {type(primitive).__name__}")
        self.primitive = primitive

    @property
    def kind(self) -> Shape3Kind:
        return _KINDS[type(self.primitive)]  # type: ignore[return-value]

    def __repr__(self) -> str:
        return f"Shape3({self.primitive!r})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Shape3):
            return NotImplemented
        return self.primitive == other.primitive

    __hash__ = None  # type: ignore[assignment]

    def inside(self, point: np.ndarray) -> bool:
        return self.primitive.inside(point)

    def trace(self, ray: Ray) -> Optional[Hit]:
        return self.primitive.trace(ray)

    # ---- Named constructors ----
    @staticmethod
    def point(point) -> "Shape3":
        return Shape3(Point3(point))

    @staticmethod
    def bounds(mins, maxs) -> "Shape3":
        return Shape3(Bounds3(mins, maxs))

    @staticmethod
    def plane(normal, distance: float) -> "Shape3":
        return Shape3(Plane3(normal, distance))

    @staticmethod
    def sphere(center, radius: float) -> "Shape3":
        return Shape3(Sphere(center, radius))

    @staticmethod
    def line(start, end) -> "Shape3":
        return Shape3(Line3(start, end))

    @staticmethod
    def triangle(p, u, v) -> "Shape3":
        return Shape3(Triangle3(p, u, v))
