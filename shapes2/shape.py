from __future__ import annotations

from typing import Dict, Literal, Optional, Type
import numpy as np

from tracing.ray import Hit, Ray, Traceable
from .geometry import Bounds2, Circle, Line2, Plane2, Point2, Triangle2


Shape2Kind = Literal["point", "bounds", "plane", "circle", "line", "triangle"]

_KINDS: Dict[Type[Traceable], str] = {
    Point2: "point",
    Bounds2: "bounds",
    Plane2: "plane",
    Circle: "circle",
    Line2: "line",
    Triangle2: "triangle",
}


class Shape2(Traceable):
    """
    Tagged union over the 2D primitives. inside and trace forward to the
    wrapped variant.
    """

    def __init__(self, primitive: Traceable):
        if type(primitive) not in _KINDS:
            raise ValueError(f"unknown primitive kind: {type(primitive).__name__}")
        self.primitive = primitive

    @property
    def kind(self) -> Shape2Kind:
        return _KINDS[type(self.primitive)]  # type: ignore[return-value]

    def __repr__(self) -> str:
        return f"Shape2({self.primitive!r})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Shape2):
            return NotImplemented
        return self.primitive == other.primitive

    __hash__ = None  # type: ignore[assignment]

    def inside(self, point: np.ndarray) -> bool:
        return self.primitive.inside(point)

    def trace(self, ray: Ray) -> Optional[Hit]:
        return self.primitive.trace(ray)

    # ---- Named constructors ----
    @staticmethod
    def point(point) -> "Shape2":
        return Shape2(Point2(point))

    @staticmethod
    def bounds(mins, maxs) -> "Shape2":
        return Shape2(Bounds2(mins, maxs))

    @staticmethod
    def plane(normal, distance: float) -> "Shape2":
        return Shape2(Plane2(normal, distance))

    @staticmethod
    def circle(center, radius: float) -> "Shape2":
        return Shape2(Circle(center, radius))

    @staticmethod
    def line(start, end) -> "Shape2":
        return Shape2(Line2(start, end))

    @staticmethod
    def triangle(p, u, v) -> "Shape2":
        return Shape2(Triangle2(p, u, v))
