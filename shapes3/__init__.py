# Re-export 3D primitives for convenience
from .geometry import (
    Point3,
    Line3,
    Bounds3,
    Plane3,
    Sphere,
    Triangle3,
)
from .shape import (
    Shape3,
    Shape3Kind,
)
