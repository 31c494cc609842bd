from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
import math
import numpy as np

from .numeric import as_vector, normalize
from .ray import Hit, Interval, Ray, Traceable


@dataclass(frozen=True)
class Affine:
    """
    Maps local shape coordinates to world coordinates: x -> A x + t.
    Works in 2 or 3 dimensions; rays are pulled back through the inverse.
    """
    A: np.ndarray  # shape (n, n)
    t: np.ndarray  # shape (n,)

    def __post_init__(self):
        A = np.asarray(self.A, dtype=float)
        t = np.asarray(self.t, dtype=float)
        if A.ndim != 2 or A.shape[0] != A.shape[1] or A.shape[0] not in (2, 3):
            raise ValueError("A must be 2x2 or 3x3")
        if t.shape != (A.shape[0],):
            raise ValueError(f"t must be length-{A.shape[0]}")
        object.__setattr__(self, "A", A)
        object.__setattr__(self, "t", t)
        # Every traced ray is pulled back through A^-1
        object.__setattr__(self, "_Ainv", np.linalg.inv(A))

    @property
    def dim(self) -> int:
        return self.A.shape[0]

    def apply(self, point: np.ndarray) -> np.ndarray:
        return self.A @ point + self.t

    def inverse_apply(self, point: np.ndarray) -> np.ndarray:
        return self._Ainv @ (point - self.t)

    def apply_vector(self, v: np.ndarray) -> np.ndarray:
        return self.A @ v

    def transform_normal(self, n: np.ndarray) -> np.ndarray:
        """
        Map a local-space normal to world space (inverse transpose).
        """
        return normalize(self._Ainv.T @ n)

    def inverse_ray(self, ray: Ray):
        """
        Pull a world ray back into local space.

        Returns (local_ray, scale) where local distances equal world
        distances times scale.
        """
        direction = self._Ainv @ ray.direction
        scale = float(np.linalg.norm(direction))
        local = type(ray)(
            self.inverse_apply(ray.origin),
            direction / scale,
            Interval(ray.distance.min * scale, ray.distance.max * scale),
        )
        return local, scale

    # ---- Constructors ----
    @staticmethod
    def identity(dim: int = 2) -> "Affine":
        return Affine(A=np.eye(dim), t=np.zeros(dim))

    @staticmethod
    def from_translate(*offset: float) -> "Affine":
        t = np.array(offset, dtype=float)
        return Affine(A=np.eye(t.shape[0]), t=t)

    @staticmethod
    def from_scale(*factors: float, dim: Optional[int] = None) -> "Affine":
        if len(factors) == 1:
            factors = factors * (dim or 2)
        return Affine(A=np.diag(np.array(factors, dtype=float)), t=np.zeros(len(factors)))

    @staticmethod
    def from_rotation(theta_radians: float) -> "Affine":
        c = math.cos(theta_radians)
        s = math.sin(theta_radians)
        return Affine(A=np.array([[c, -s], [s, c]], dtype=float), t=np.zeros(2))

    @staticmethod
    def from_axis_angle(axis, theta_radians: float) -> "Affine":
        # Rodrigues' rotation formula
        k = normalize(as_vector(axis, 3, "axis"))
        K = np.array([
            [0.0, -k[2], k[1]],
            [k[2], 0.0, -k[0]],
            [-k[1], k[0], 0.0],
        ])
        A = np.eye(3) + math.sin(theta_radians) * K + (1.0 - math.cos(theta_radians)) * (K @ K)
        return Affine(A=A, t=np.zeros(3))

    def then(self, after: "Affine") -> "Affine":
        """
        Composite placing a shape with self, then moving the result with
        'after'. A ray traced against the composite is pulled back through
        'after' first, then through self.
        after.apply(self.apply(x)) == self.then(after).apply(x)
        """
        A = after.A @ self.A
        t = after.A @ self.t + after.t
        return Affine(A=A, t=t)


class Transformed(Traceable):
    def __init__(self, shape: Traceable, transform: Affine):
        self.shape = shape
        self.transform = transform

    def __repr__(self) -> str:
        return f"Transformed({self.shape!r}, {self.transform!r})"

    def inside(self, point: np.ndarray) -> bool:
        # Membership is decided in the shape's own coordinates
        return self.shape.inside(self.transform.inverse_apply(point))

    def trace(self, ray: Ray) -> Optional[Hit]:
        local, scale = self.transform.inverse_ray(ray)
        hit = self.shape.trace(local)
        if hit is None:
            return None
        return Hit(
            point=self.transform.apply(hit.point),
            distance=hit.distance / scale,
            normal=self.transform.transform_normal(hit.normal),
            index=hit.index,
            side=hit.side,
        )
