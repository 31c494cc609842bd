"""
Closed-form ray intersection routines shared by the 2D and 3D primitives.

Each routine takes the primitive's parameters and a ray, and either returns
None or the nearest crossing inside the ray's interval. Returned normals are
unit length and face the incoming ray.
"""
from __future__ import annotations

from typing import Optional, Tuple
import numpy as np

from .numeric import cross2, min_max, normalize
from .ray import Hit, HitSide, Ray


def trace_plane(normal: np.ndarray, offset, ray: Ray) -> Optional[Hit]:
    """
    Plane { x : normal.x + offset = 0 }.
    Approaching from the side the normal points to is an entry.
    """
    denom = np.dot(normal, ray.direction)
    # Near-parallel rays never hit
    if not abs(denom) >= ray.epsilon:
        return None
    t = -(np.dot(normal, ray.origin) + offset) / denom
    if not ray.distance.contains(t):
        return None
    n = normalize(normal)
    if denom < 0:
        return Hit(point=ray.at(t), distance=t, normal=n, side=HitSide.ENTRY)
    return Hit(point=ray.at(t), distance=t, normal=-n, side=HitSide.EXIT)


def trace_ball(center: np.ndarray, radius, ray: Ray) -> Optional[Hit]:
    """
    Circle or sphere, solved through the point on the ray nearest the center.
    """
    oc = center - ray.origin
    tc = np.dot(oc, ray.direction)
    d2 = np.dot(oc, oc) - tc * tc
    disc = radius * radius - d2
    if not disc >= 0:
        return None
    half = np.sqrt(disc)

    t1 = tc - half
    if ray.distance.contains(t1):
        point = ray.at(t1)
        return Hit(point=point, distance=t1, normal=normalize(point - center), side=HitSide.ENTRY)
    t2 = tc + half
    if ray.distance.contains(t2):
        # Ray starts inside
        point = ray.at(t2)
        return Hit(point=point, distance=t2, normal=normalize(center - point), side=HitSide.EXIT)
    return None


def trace_slab(mins: np.ndarray, maxs: np.ndarray, ray: Ray) -> Optional[Hit]:
    """
    Axis-aligned box slab test. Axes the ray runs parallel to produce
    infinite slab distances, which the min/max reduction absorbs.
    """
    with np.errstate(divide="ignore", invalid="ignore"):
        inv_dir = 1.0 / ray.direction
        near = (mins - ray.origin) * inv_dir
        far = (maxs - ray.origin) * inv_dir
    near, far = min_max(near, far)

    t0 = near.max()
    t1 = far.min()
    if not t0 <= t1:
        return None
    if ray.distance.contains(t0):
        t, axes, side = t0, near == t0, HitSide.ENTRY
    elif ray.distance.contains(t1):
        t, axes, side = t1, far == t1, HitSide.EXIT
    else:
        return None

    # Face normal on the axis that produced t, against the ray direction.
    # On exit this is the inward face normal, matching plane and ball exits.
    normal = normalize(np.where(axes, -np.sign(ray.direction), 0.0))
    return Hit(point=ray.at(t), distance=t, normal=normal, side=side)


def trace_edge(start: np.ndarray, edge: np.ndarray, ray: Ray) -> Optional[Tuple[float, float]]:
    """
    2D ray against the segment start + s * edge, s in [0, 1].

    Returns (t, denom) where denom = cross(direction, edge); its sign tells
    which side of the edge the ray arrives from.
    """
    denom = cross2(ray.direction, edge)
    # Parallel
    if denom == 0:
        return None
    qp = start - ray.origin
    t = cross2(qp, edge) / denom
    s = cross2(qp, ray.direction) / denom
    if not (0 <= s <= 1 and ray.distance.contains(t)):
        return None
    return t, denom
