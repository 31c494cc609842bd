from __future__ import annotations

from dataclasses import fields
from typing import Optional, Tuple
import math
import numpy as np


DEFAULT_DTYPE = np.float64
EPSILON = float(np.finfo(DEFAULT_DTYPE).eps)


def epsilon(dtype) -> float:
    """
    Machine epsilon of a floating dtype. Non-floating dtypes use the default.
    """
    dtype = np.dtype(dtype)
    if not np.issubdtype(dtype, np.floating):
        dtype = np.dtype(DEFAULT_DTYPE)
    return float(np.finfo(dtype).eps)


def as_vector(values, dim: Optional[int] = None, name: str = "vector") -> np.ndarray:
    arr = np.asarray(values)
    if not np.issubdtype(arr.dtype, np.floating):
        arr = arr.astype(DEFAULT_DTYPE)
    if arr.ndim != 1 or (dim is not None and arr.shape[0] != dim):
        expected = f"({dim},)" if dim is not None else "(n,)"
        raise ValueError(f"{name} must have shape {expected}, got {arr.shape}")
    arr = arr.copy()
    arr.flags.writeable = False
    return arr


def as_scalar(value):
    if isinstance(value, np.floating):
        return value
    return float(value)


def total_order_key(value) -> Tuple[bool, float]:
    # NaN orders after every number, including +inf
    v = float(value)
    return (math.isnan(v), 0.0 if math.isnan(v) else v)


# ---- Vector helpers ----

def dot(a: np.ndarray, b: np.ndarray):
    return np.dot(a, b)


def cross2(a: np.ndarray, b: np.ndarray):
    """
    Scalar 2D cross product a.x*b.y - a.y*b.x.
    """
    return a[0] * b[1] - a[1] * b[0]


def cross(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return np.cross(a, b)


def perp(v: np.ndarray) -> np.ndarray:
    """
    2D vector rotated by -90 degrees: (x, y) -> (y, -x).
    Outward edge normal for counter-clockwise winding.
    """
    return np.array([v[1], -v[0]], dtype=v.dtype)


def length(v: np.ndarray):
    return np.sqrt(np.dot(v, v))


def normalize(v: np.ndarray) -> np.ndarray:
    # Zero vectors produce NaN components, same as any other 0/0
    with np.errstate(divide="ignore", invalid="ignore"):
        return v / length(v)


def reflect(v: np.ndarray, n: np.ndarray) -> np.ndarray:
    return v - n * (2 * np.dot(v, n))


def min_max(a: np.ndarray, b: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    # fmin/fmax skip NaN operands the way IEEE minNum/maxNum do
    return np.fmin(a, b), np.fmax(a, b)


class FrozenValue:
    """
    Value equality for frozen dataclasses holding numpy vectors.
    """
    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return all(
            np.array_equal(getattr(self, f.name), getattr(other, f.name))
            for f in fields(self)
        )

    __hash__ = None
