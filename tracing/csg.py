"""
Constructive solid geometry over traceable shapes.

Union resolves hits from the operands' inside tests directly. Intersection,
Difference and Xor march the ray across both operands' boundary crossings,
tracking whether the current position is inside each operand, until the
composite's membership flips. Marching is bounded by MarchConfig.max_iterations.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Tuple
import logging
import numpy as np

from .ray import Hit, HitSide, Interval, Ray, Traceable


logger = logging.getLogger(__name__)

MAX_MARCH_ITERATIONS = 64
MARCH_TOLERANCE = 1e-9


@dataclass(frozen=True)
class MarchConfig:
    max_iterations: int = MAX_MARCH_ITERATIONS
    # Crossings nearer than this to the previous one count as the same
    # surface. Scaled by the crossing's largest coordinate above 1.
    tolerance: float = MARCH_TOLERANCE


DEFAULT_MARCH_CONFIG = MarchConfig()


def _nearest(hit1: Optional[Hit], hit2: Optional[Hit]) -> Optional[Tuple[int, Hit]]:
    if hit1 is not None and (hit2 is None or hit1.distance <= hit2.distance):
        return 0, hit1
    if hit2 is not None:
        return 1, hit2
    return None


def march(
    shape1: Traceable,
    shape2: Traceable,
    member: Callable[[bool, bool], bool],
    ray: Ray,
    config: MarchConfig = DEFAULT_MARCH_CONFIG,
) -> Optional[Hit]:
    """
    Find the first boundary crossing of the composite solid
    { p : member(shape1.inside(p), shape2.inside(p)) } along the ray.
    """
    inside: List[bool] = [bool(shape1.inside(ray.origin)), bool(shape2.inside(ray.origin))]
    current = ray
    travelled = 0.0
    for _ in range(config.max_iterations):
        nearest = _nearest(shape1.trace(current), shape2.trace(current))
        if nearest is None:
            return None
        which, hit = nearest
        distance = travelled + hit.distance
        if distance > ray.distance.max:
            return None

        was_member = member(inside[0], inside[1])
        inside[which] = not inside[which]
        is_member = member(inside[0], inside[1])
        if is_member != was_member:
            side = HitSide.ENTRY if is_member else HitSide.EXIT
            return Hit(point=hit.point, distance=distance, normal=hit.normal, side=side)

        # Restart on the crossing; the raised lower bound keeps the
        # surface just crossed from being found again
        travelled = distance
        tolerance = config.tolerance * max(1.0, float(np.abs(hit.point).max()))
        stepped = current.step(hit.distance)
        current = replace(stepped, distance=Interval(tolerance, stepped.distance.max))

    logger.debug("march gave up after %d iterations", config.max_iterations)
    return None


class Union(Traceable):
    def __init__(self, shape1: Traceable, shape2: Traceable):
        self.shape1 = shape1
        self.shape2 = shape2

    def __repr__(self) -> str:
        return f"Union({self.shape1!r}, {self.shape2!r})"

    def inside(self, point: np.ndarray) -> bool:
        return bool(self.shape1.inside(point) or self.shape2.inside(point))

    def trace(self, ray: Ray) -> Optional[Hit]:
        if self.shape1.inside(ray.origin):
            return self._trace_from_inside(self.shape1, self.shape2, ray)
        if self.shape2.inside(ray.origin):
            return self._trace_from_inside(self.shape2, self.shape1, ray)
        hit1 = self.shape1.trace(ray)
        hit2 = self.shape2.trace(ray)
        if hit1 is None:
            return hit2
        if hit2 is None:
            return hit1
        return hit1 if hit1.distance < hit2.distance else hit2

    @staticmethod
    def _trace_from_inside(first: Traceable, other: Traceable, ray: Ray) -> Optional[Hit]:
        hit1 = first.trace(ray)
        if hit1 is None:
            return None
        ray2 = ray.step(hit1.distance)
        if other.inside(ray2.origin):
            # The boundary of first lies inside other: not a surface of the union
            hit2 = other.trace(ray2)
            if hit2 is not None:
                return Hit(
                    point=hit2.point,
                    distance=hit1.distance + hit2.distance,
                    normal=hit2.normal,
                    index=hit2.index,
                    side=hit2.side,
                )
        return hit1


class _Marched(Traceable):
    def __init__(self, shape1: Traceable, shape2: Traceable, config: MarchConfig = DEFAULT_MARCH_CONFIG):
        self.shape1 = shape1
        self.shape2 = shape2
        self.config = config

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.shape1!r}, {self.shape2!r})"

    @staticmethod
    def member(inside1: bool, inside2: bool) -> bool:
        raise NotImplementedError

    def inside(self, point: np.ndarray) -> bool:
        return self.member(bool(self.shape1.inside(point)), bool(self.shape2.inside(point)))

    def trace(self, ray: Ray) -> Optional[Hit]:
        return march(self.shape1, self.shape2, self.member, ray, self.config)


class Intersection(_Marched):
    @staticmethod
    def member(inside1: bool, inside2: bool) -> bool:
        return inside1 and inside2


class Difference(_Marched):
    """
    Points inside shape1 but not inside shape2.
    """
    @staticmethod
    def member(inside1: bool, inside2: bool) -> bool:
        return inside1 and not inside2


class Xor(_Marched):
    @staticmethod
    def member(inside1: bool, inside2: bool) -> bool:
        return inside1 != inside2
