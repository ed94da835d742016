# simplexfield/gradient.py
"""
Fixed gradient tables for 2D, 3D and 4D simplex noise
"""

import numpy as np
from numba import jit

# ----------------------------------------------------------------------
# Gradient tables
# ----------------------------------------------------------------------

_DIAG2 = 1.0 / np.sqrt(2.0)
_DIAG3 = 1.0 / np.sqrt(3.0)


def _readonly(table: np.ndarray) -> np.ndarray:
    table.flags.writeable = False
    return table


# 4 axes + 4 diagonals
GRADIENTS_2D = _readonly(np.array([
    [1.0, 0.0], [-1.0, 0.0], [0.0, 1.0], [0.0, -1.0],
    [_DIAG2, _DIAG2], [-_DIAG2, _DIAG2], [_DIAG2, -_DIAG2], [-_DIAG2, -_DIAG2],
], dtype=np.float64))

# 12 cube edges, then 4 of them repeated (Perlin's padding) to reach 16 entries
GRADIENTS_3D = _readonly(np.array([
    [1, 1, 0], [-1, 1, 0], [1, -1, 0], [-1, -1, 0],
    [1, 0, 1], [-1, 0, 1], [1, 0, -1], [-1, 0, -1],
    [0, 1, 1], [0, -1, 1], [0, 1, -1], [0, -1, -1],
    [1, 1, 0], [-1, 1, 0], [0, -1, 1], [0, -1, -1],
], dtype=np.float64) * _DIAG2)

GRADIENTS_4D = _readonly(np.array([
    [0, 1, 1, 1], [0, 1, 1, -1], [0, 1, -1, 1], [0, 1, -1, -1],
    [0, -1, 1, 1], [0, -1, 1, -1], [0, -1, -1, 1], [0, -1, -1, -1],
    [1, 0, 1, 1], [1, 0, 1, -1], [1, 0, -1, 1], [1, 0, -1, -1],
    [-1, 0, 1, 1], [-1, 0, 1, -1], [-1, 0, -1, 1], [-1, 0, -1, -1],
    [1, 1, 0, 1], [1, 1, 0, -1], [1, -1, 0, 1], [1, -1, 0, -1],
    [-1, 1, 0, 1], [-1, 1, 0, -1], [-1, -1, 0, 1], [-1, -1, 0, -1],
    [1, 1, 1, 0], [1, 1, -1, 0], [1, -1, 1, 0], [1, -1, -1, 0],
    [-1, 1, 1, 0], [-1, 1, -1, 0], [-1, -1, 1, 0], [-1, -1, -1, 0],
], dtype=np.float64) * _DIAG3)

_TABLES = {2: GRADIENTS_2D, 3: GRADIENTS_3D, 4: GRADIENTS_4D}

# ----------------------------------------------------------------------
# Lookups
# ----------------------------------------------------------------------

@jit(nopython=True, cache=True)
def gradient_count(dims: int) -> int:
    """Number of gradients for the given arity (always a power of two)"""
    if dims == 2:
        return 8
    if dims == 3:
        return 16
    return 32


@jit(nopython=True, cache=True)
def gradient_at(gradients: np.ndarray, index: int) -> np.ndarray:
    """Row `index` of a gradient table; out-of-range indices fail fast"""
    if index < 0 or index >= gradients.shape[0]:
        raise IndexError("gradient index out of range")
    return gradients[index]


def gradient_table(dims: int) -> np.ndarray:
    try:
        return _TABLES[dims]
    except KeyError:
        raise ValueError(f"Unsupported dimension {dims}; expected 2, 3 or 4") from None


def _get(table: np.ndarray, index: int) -> np.ndarray:
    if not 0 <= index < table.shape[0]:
        raise IndexError(f"Gradient index {index} out of range [0, {table.shape[0] - 1}]")
    return table[index]


def get2(index: int) -> np.ndarray:
    return _get(GRADIENTS_2D, index)


def get3(index: int) -> np.ndarray:
    return _get(GRADIENTS_3D, index)


def get4(index: int) -> np.ndarray:
    return _get(GRADIENTS_4D, index)
