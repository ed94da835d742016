# simplexfield/vectors.py
"""
Small vector helpers shared by the noise kernels
"""

from typing import Sequence, Tuple, Union

import numpy as np
from numba import jit

SUPPORTED_DIMS = (2, 3, 4)


@jit(nopython=True, cache=True)
def dot(a: np.ndarray, b: np.ndarray) -> float:
    """Scalar product of two vectors of equal length"""
    total = 0.0
    for i in range(a.shape[0]):
        total += a[i] * b[i]
    return total


@jit(nopython=True, cache=True)
def floor_to_lattice(v: np.ndarray) -> np.ndarray:
    """Component-wise floor converted to integer lattice coordinates"""
    return np.floor(v).astype(np.int64)


def _check_dims(dims: int) -> int:
    if dims not in SUPPORTED_DIMS:
        raise ValueError(f"Points must have 2, 3 or 4 components, got {dims}")
    return dims


def as_point(point: Union[Sequence[float], np.ndarray]) -> np.ndarray:
    """Coerce a single point into a contiguous float64 vector"""
    p = np.ascontiguousarray(point, dtype=np.float64)
    if p.ndim != 1:
        raise ValueError(f"Expected a 1-D point, got shape {p.shape}")
    _check_dims(p.shape[0])
    return p


def as_points(points: Union[Sequence[Sequence[float]], np.ndarray]) -> Tuple[np.ndarray, Tuple[int, ...]]:
    """
    Flatten an array of points with shape (..., n) into (N, n)

    Returns:
        The flattened rows and the leading shape needed to restore results
    """
    p = np.asarray(points, dtype=np.float64)
    if p.ndim == 0:
        raise ValueError("Expected an array of points, got a scalar")
    n = _check_dims(p.shape[-1])
    leading = p.shape[:-1]
    return np.ascontiguousarray(p.reshape(-1, n)), leading
