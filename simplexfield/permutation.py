# simplexfield/permutation.py
"""
Seeded permutation table mapping integer lattice coordinates to gradient indices
"""

from functools import lru_cache
from typing import Sequence

import numpy as np
from numba import jit

from .gradient import gradient_count

TABLE_SIZE = 256
MAX_SEED = 2 ** 32 - 1


def check_seed(seed: int) -> int:
    """Validate a 32-bit unsigned seed"""
    if isinstance(seed, (bool, np.bool_)) or not isinstance(seed, (int, np.integer)):
        raise TypeError(f"Seed must be an integer, got {type(seed).__name__}")
    seed = int(seed)
    if seed < 0 or seed > MAX_SEED:
        raise ValueError(f"Seed must be in [0, {MAX_SEED}], got {seed}")
    return seed


@jit(nopython=True, cache=True)
def hash_lattice(perm: np.ndarray, lattice: np.ndarray) -> int:
    """
    Fold lattice coordinates through the permutation table

    Negative coordinates wrap through the 8-bit mask, so every integer
    coordinate hashes to a value in [0, 256).
    """
    h = 0
    for i in range(lattice.shape[0]):
        h = perm[(h ^ lattice[i]) & 255]
    return h


@jit(nopython=True, cache=True)
def lattice_gradient_index(perm: np.ndarray, lattice: np.ndarray) -> int:
    """Gradient index of a lattice point for the arity of `lattice`"""
    return hash_lattice(perm, lattice) & (gradient_count(lattice.shape[0]) - 1)


class PermutationTable:
    """Immutable permutation of 0..255 derived from a seed"""

    __slots__ = ("_seed", "_values")

    def __init__(self, seed: int = 0):
        self._seed = check_seed(seed)
        # RandomState streams are frozen by numpy, so tables never drift
        values = np.random.RandomState(self._seed).permutation(TABLE_SIZE).astype(np.int64)
        values.flags.writeable = False
        self._values = values

    @staticmethod
    def for_seed(seed: int) -> "PermutationTable":
        """Shared table for `seed`, built once per process"""
        return _cached_table(check_seed(seed))

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def values(self) -> np.ndarray:
        return self._values

    def __eq__(self, other) -> bool:
        if not isinstance(other, PermutationTable):
            return NotImplemented
        return self._seed == other._seed

    def __hash__(self) -> int:
        return hash(("PermutationTable", self._seed))

    def __repr__(self) -> str:
        return f"PermutationTable(seed={self._seed})"

    def _lookup(self, coords: Sequence[int], dims: int) -> int:
        lattice = np.asarray(coords, dtype=np.int64)
        if lattice.shape != (dims,):
            raise ValueError(f"Expected {dims} lattice coordinates, got shape {lattice.shape}")
        return int(lattice_gradient_index(self._values, lattice))

    def lookup_2(self, coords: Sequence[int]) -> int:
        return self._lookup(coords, 2)

    def lookup_3(self, coords: Sequence[int]) -> int:
        return self._lookup(coords, 3)

    def lookup_4(self, coords: Sequence[int]) -> int:
        return self._lookup(coords, 4)


@lru_cache(maxsize=64)
def _cached_table(seed: int) -> PermutationTable:
    return PermutationTable(seed)
