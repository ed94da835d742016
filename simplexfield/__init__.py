"""Simplexfield public API."""

from .fractal import (
    FractalParams,
    FractalGenerator,
    Fbm,
    Billow,
    BasicMulti,
    RidgedMulti,
    HybridMulti,
    MAX_OCTAVES,
)
from .permutation import PermutationTable
from .plane_map import PlaneMapBuilder, save_ppm, to_grayscale
from .simplex import Simplex, skew_factor, unskew_factor

__all__ = [
    "FractalParams",
    "FractalGenerator",
    "Fbm",
    "Billow",
    "BasicMulti",
    "RidgedMulti",
    "HybridMulti",
    "MAX_OCTAVES",
    "PermutationTable",
    "PlaneMapBuilder",
    "save_ppm",
    "to_grayscale",
    "Simplex",
    "skew_factor",
    "unskew_factor",
]

__version__ = "0.1.0"
