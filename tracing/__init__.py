# Re-export core tracing API for convenience
from .numeric import (
    DEFAULT_DTYPE,
    EPSILON,
    epsilon,
    total_order_key,
)
from .ray import (
    Interval,
    HitSide,
    Hit,
    Traceable,
    Ray,
    Ray2,
    Ray3,
)
from .csg import (
    MarchConfig,
    Union,
    Intersection,
    Difference,
    Xor,
    march,
)
from .transform import (
    Affine,
    Transformed,
)
