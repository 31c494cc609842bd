# Re-export 2D primitives for convenience
from .geometry import (
    Point2,
    Bounds2,
    Plane2,
    Circle,
    Line2,
    Triangle2,
)
from .shape import (
    Shape2,
    Shape2Kind,
)
