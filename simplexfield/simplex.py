# simplexfield/simplex.py
"""
2D, 3D and 4D simplex noise

One kernel serves every arity; the per-arity pieces (skew constants,
corner ranking, normalization) are explicit branches on the point length.
"""

import math
from typing import Sequence, Union

import numpy as np
from numba import jit

from .gradient import gradient_at, gradient_table
from .permutation import PermutationTable, check_seed, lattice_gradient_index
from .vectors import as_point, as_points, dot, floor_to_lattice

# ----------------------------------------------------------------------
# Per-dimension constants
# ----------------------------------------------------------------------

@jit(nopython=True, cache=True)
def skew_factor(n: int) -> float:
    """(sqrt(n + 1) - 1) / n"""
    return (math.sqrt(n + 1.0) - 1.0) / n


@jit(nopython=True, cache=True)
def unskew_factor(n: int) -> float:
    """(1 - 1 / sqrt(n + 1)) / n"""
    return (1.0 - 1.0 / math.sqrt(n + 1.0)) / n


@jit(nopython=True, cache=True)
def normalization(n: int) -> float:
    """Scale bringing the summed surflets into roughly [-1, 1]"""
    if n == 2:
        return 70.0
    if n == 3:
        return 32.0
    return 27.0

# ----------------------------------------------------------------------
# Corner ranking
# ----------------------------------------------------------------------

@jit(nopython=True, cache=True)
def corner_offsets(distance: np.ndarray) -> np.ndarray:
    """
    Offsets of the n + 1 simplex corners relative to the cell origin

    Row 0 is the zero vector, row n is all ones, and each row sets exactly
    one more axis than the previous, following the components of
    `distance` from largest to smallest.
    """
    n = distance.shape[0]
    offsets = np.zeros((n + 1, n), dtype=np.int64)
    offsets[n, :] = 1

    if n == 2:
        if distance[0] > distance[1]:
            offsets[1, 0] = 1
        else:
            offsets[1, 1] = 1

    elif n == 3:
        x = distance[0]
        y = distance[1]
        z = distance[2]
        if x >= y:
            if y >= z:      # XYZ
                offsets[1, 0] = 1
                offsets[2, 0] = 1
                offsets[2, 1] = 1
            elif x >= z:    # XZY
                offsets[1, 0] = 1
                offsets[2, 0] = 1
                offsets[2, 2] = 1
            else:           # ZXY
                offsets[1, 2] = 1
                offsets[2, 0] = 1
                offsets[2, 2] = 1
        elif z >= y:        # ZYX
            offsets[1, 2] = 1
            offsets[2, 1] = 1
            offsets[2, 2] = 1
        elif z >= x:        # YZX
            offsets[1, 1] = 1
            offsets[2, 1] = 1
            offsets[2, 2] = 1
        else:               # YXZ
            offsets[1, 1] = 1
            offsets[2, 0] = 1
            offsets[2, 1] = 1

    else:
        # Pairwise comparisons in a fixed order; changing it changes the field
        rank = np.zeros(n, dtype=np.int64)
        for a in range(n - 1):
            for b in range(a + 1, n):
                if distance[a] > distance[b]:
                    rank[a] += 1
                else:
                    rank[b] += 1
        for k in range(1, n):
            for axis in range(n):
                if rank[axis] >= n - k:
                    offsets[k, axis] = 1

    return offsets

# ----------------------------------------------------------------------
# Kernel
# ----------------------------------------------------------------------

@jit(nopython=True, cache=True)
def surflet(gradient: np.ndarray, corner: np.ndarray) -> float:
    """Radially attenuated gradient contribution of a single corner"""
    t = 0.5 - dot(corner, corner)
    if t < 0.0:
        return 0.0
    t *= t
    return t * t * dot(gradient, corner)


@jit(nopython=True, cache=True)
def evaluate(point: np.ndarray, perm: np.ndarray, gradients: np.ndarray) -> float:
    """
    Simplex noise at `point`

    Args:
        point: 2, 3 or 4 float64 coordinates
        perm: Permutation table of length 256
        gradients: Gradient table for the arity of `point`

    Returns:
        Noise value, roughly in [-1, 1]
    """
    n = point.shape[0]
    skew = skew_factor(n)
    unskew = unskew_factor(n)

    # Skew into simplex-grid space and find the containing cell
    skewed = point + point.sum() * skew
    floored = floor_to_lattice(skewed)

    # Unskew the cell origin back and measure the point from it
    cell = floored - floored.sum() * unskew
    distance = point - cell

    offsets = corner_offsets(distance)

    total = 0.0
    for k in range(n + 1):
        corner = distance - offsets[k] + k * unskew
        index = lattice_gradient_index(perm, floored + offsets[k])
        total += surflet(gradient_at(gradients, index), corner)

    return normalization(n) * total


@jit(nopython=True, cache=True)
def evaluate_rows(points: np.ndarray, perm: np.ndarray, gradients: np.ndarray) -> np.ndarray:
    """Sequential evaluation of every row of an (N, n) array"""
    result = np.empty(points.shape[0], dtype=np.float64)
    for i in range(points.shape[0]):
        result[i] = evaluate(points[i], perm, gradients)
    return result

# ----------------------------------------------------------------------
# Public evaluator
# ----------------------------------------------------------------------

class Simplex:
    """
    Seeded simplex noise over 2, 3 or 4 dimensions

    Instances are immutable: `set_seed` returns a new evaluator (or the same
    one when the seed is unchanged), so one instance can be shared freely
    between threads.
    """

    DEFAULT_SEED = 0

    __slots__ = ("_seed", "_table")

    def __init__(self, seed: int = DEFAULT_SEED):
        self._seed = check_seed(seed)
        self._table = PermutationTable.for_seed(self._seed)

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def permutation_table(self) -> PermutationTable:
        return self._table

    def set_seed(self, seed: int) -> "Simplex":
        if check_seed(seed) == self._seed:
            return self
        return Simplex(seed)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Simplex):
            return NotImplemented
        return self._seed == other._seed

    def __hash__(self) -> int:
        return hash(("Simplex", self._seed))

    def __repr__(self) -> str:
        return f"Simplex(seed={self._seed})"

    def get(self, point: Union[Sequence[float], np.ndarray]) -> float:
        """Noise value at a single 2D, 3D or 4D point"""
        p = as_point(point)
        return float(evaluate(p, self._table.values, gradient_table(p.shape[0])))

    def get_many(self, points: Union[Sequence[Sequence[float]], np.ndarray]) -> np.ndarray:
        """
        Noise values for an array of points

        Args:
            points: Array of shape (..., n) with n in {2, 3, 4}

        Returns:
            float64 array of shape (...)
        """
        rows, leading = as_points(points)
        values = evaluate_rows(rows, self._table.values, gradient_table(rows.shape[1]))
        return values.reshape(leading)

    def _noise(self, *coords) -> Union[float, np.ndarray]:
        if all(np.ndim(c) == 0 for c in coords):
            return self.get(coords)
        arrays = np.broadcast_arrays(*[np.asarray(c, dtype=np.float64) for c in coords])
        return self.get_many(np.stack(arrays, axis=-1))

    def noise_2d(self, x: Union[float, np.ndarray],
                 y: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """2D simplex noise for scalars or same-shaped coordinate grids"""
        return self._noise(x, y)

    def noise_3d(self, x: Union[float, np.ndarray],
                 y: Union[float, np.ndarray],
                 z: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """3D simplex noise"""
        return self._noise(x, y, z)

    def noise_4d(self, x: Union[float, np.ndarray],
                 y: Union[float, np.ndarray],
                 z: Union[float, np.ndarray],
                 w: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """4D simplex noise"""
        return self._noise(x, y, z, w)
