# simplexfield/fractal.py
"""
Fractal combinators layering several octaves of simplex noise
"""

import warnings
from dataclasses import dataclass, replace
from typing import Sequence, Tuple, Union

import numpy as np

from .permutation import MAX_SEED, check_seed
from .simplex import Simplex
from .vectors import as_point, as_points

MAX_OCTAVES = 32


@dataclass(frozen=True)
class FractalParams:
    """Fractal parameters"""
    octaves: int = 6
    frequency: float = 1.0     # Frequency of the first octave
    lacunarity: float = 2.0    # Frequency multiplier between octaves
    persistence: float = 0.5   # Amplitude multiplier between octaves
    attenuation: float = 2.0   # Only used by RidgedMulti

    def __post_init__(self):
        octaves = int(self.octaves)
        clamped = min(max(octaves, 1), MAX_OCTAVES)
        if clamped != octaves:
            warnings.warn(f"octaves={octaves} clamped to {clamped} (allowed 1..{MAX_OCTAVES})")
        object.__setattr__(self, "octaves", clamped)
        if self.frequency <= 0:
            raise ValueError(f"frequency must be positive, got {self.frequency}")
        if self.lacunarity <= 0:
            raise ValueError(f"lacunarity must be positive, got {self.lacunarity}")
        if self.attenuation == 0:
            raise ValueError("attenuation must be non-zero")


class FractalGenerator:
    """
    Base class for multi-octave generators

    Octave i samples its own simplex source (seeded seed + i) at
    frequency * lacunarity**i and is weighted by persistence**i.
    """

    DEFAULT_PARAMS = FractalParams()

    def __init__(self, seed: int = Simplex.DEFAULT_SEED, params: FractalParams = None):
        self._seed = check_seed(seed)
        self._params = params or self.DEFAULT_PARAMS
        self._sources = tuple(
            Simplex((self._seed + i) & MAX_SEED) for i in range(self._params.octaves)
        )

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def params(self) -> FractalParams:
        return self._params

    @property
    def sources(self) -> Tuple[Simplex, ...]:
        return self._sources

    def set_seed(self, seed: int) -> "FractalGenerator":
        if check_seed(seed) == self._seed:
            return self
        return type(self)(seed, self._params)

    def with_params(self, **changes) -> "FractalGenerator":
        return type(self)(self._seed, replace(self._params, **changes))

    def __eq__(self, other) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._seed == other._seed and self._params == other._params

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._seed, self._params))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(seed={self._seed}, params={self._params})"

    def get(self, point: Union[Sequence[float], np.ndarray]) -> float:
        p = as_point(point)
        return float(self._combine(p[np.newaxis, :])[0])

    def get_many(self, points: Union[Sequence[Sequence[float]], np.ndarray]) -> np.ndarray:
        rows, leading = as_points(points)
        return self._combine(rows).reshape(leading)

    def _octave(self, i: int, rows: np.ndarray) -> np.ndarray:
        frequency = self._params.frequency * self._params.lacunarity ** i
        return self._sources[i].get_many(rows * frequency)

    def _weight(self, i: int) -> float:
        return self._params.persistence ** i

    def _scale_factor(self) -> float:
        max_val = sum(self._weight(i) for i in range(self._params.octaves))
        return 1.0 / max_val if max_val != 0 else 1.0

    def _combine(self, rows: np.ndarray) -> np.ndarray:
        raise NotImplementedError


class Fbm(FractalGenerator):
    """Fractal Brownian motion: weighted sum of octaves"""

    def _combine(self, rows):
        result = np.zeros(rows.shape[0], dtype=np.float64)
        for i in range(self._params.octaves):
            result += self._octave(i, rows) * self._weight(i)
        return result * self._scale_factor()


class Billow(FractalGenerator):
    """Fbm over folded noise, giving puffy cloud-like shapes"""

    def _combine(self, rows):
        result = np.zeros(rows.shape[0], dtype=np.float64)
        for i in range(self._params.octaves):
            signal = np.abs(self._octave(i, rows)) * 2.0 - 1.0
            result += signal * self._weight(i)
        return result * self._scale_factor()


class BasicMulti(FractalGenerator):
    """Multifractal whose higher octaves are scaled by the running result"""

    DEFAULT_PARAMS = FractalParams(frequency=2.0)

    def _combine(self, rows):
        result = self._octave(0, rows)
        for i in range(1, self._params.octaves):
            signal = self._octave(i, rows) * self._weight(i)
            result += signal * result
        return result * self._scale_factor()


class RidgedMulti(FractalGenerator):
    """
    Ridged multifractal for sharp mountain ridges

    Each octave is folded into a ridge (1 - |n|)^2 and damped by the
    previous octave's signal through `attenuation`.
    """

    DEFAULT_PARAMS = FractalParams(persistence=1.0)

    def _combine(self, rows):
        result = np.zeros(rows.shape[0], dtype=np.float64)
        weight = np.ones(rows.shape[0], dtype=np.float64)
        for i in range(self._params.octaves):
            signal = 1.0 - np.abs(self._octave(i, rows))
            signal *= signal
            signal *= weight

            weight = np.clip(signal / self._params.attenuation, 0.0, 1.0)

            result += signal * self._weight(i)
        return result * 1.25 - 1.0


class HybridMulti(FractalGenerator):
    """Multifractal mixing additive and multiplicative octave blending"""

    DEFAULT_PARAMS = FractalParams(frequency=2.0, persistence=0.25)

    def _combine(self, rows):
        result = self._octave(0, rows)
        weight = result.copy()
        for i in range(1, self._params.octaves):
            weight = np.minimum(weight, 1.0)
            signal = self._octave(i, rows) * self._weight(i)
            result += weight * signal
            weight *= signal
        return result * self._scale_factor()


GENERATORS = {
    "fbm": Fbm,
    "billow": Billow,
    "basicmulti": BasicMulti,
    "ridgedmulti": RidgedMulti,
    "hybridmulti": HybridMulti,
}
