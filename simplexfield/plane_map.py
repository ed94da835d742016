"""Sampling generators over a plane and saving the result as an image."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, Tuple

import numpy as np


class NoiseSource(Protocol):
    def get_many(self, points) -> np.ndarray: ...


def _check_bounds(bounds: Tuple[float, float], name: str) -> Tuple[float, float]:
    lower, upper = float(bounds[0]), float(bounds[1])
    if not lower < upper:
        raise ValueError(f"{name} must be increasing, got ({lower}, {upper})")
    return lower, upper


class PlaneMapBuilder:
    """Samples a 2D noise source on a regular grid.

    Setters return a new builder; the source itself is never modified.
    """

    def __init__(
        self,
        source: NoiseSource,
        width: int = 100,
        height: int = 100,
        x_bounds: Tuple[float, float] = (-1.0, 1.0),
        y_bounds: Tuple[float, float] = (-1.0, 1.0),
    ) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Map size must be positive, got {width}x{height}")
        self.source = source
        self.width = int(width)
        self.height = int(height)
        self.x_bounds = _check_bounds(x_bounds, "x_bounds")
        self.y_bounds = _check_bounds(y_bounds, "y_bounds")

    def set_size(self, width: int, height: int) -> PlaneMapBuilder:
        return PlaneMapBuilder(self.source, width, height, self.x_bounds, self.y_bounds)

    def set_x_bounds(self, lower: float, upper: float) -> PlaneMapBuilder:
        return PlaneMapBuilder(self.source, self.width, self.height, (lower, upper), self.y_bounds)

    def set_y_bounds(self, lower: float, upper: float) -> PlaneMapBuilder:
        return PlaneMapBuilder(self.source, self.width, self.height, self.x_bounds, (lower, upper))

    def coordinates(self) -> Tuple[np.ndarray, np.ndarray]:
        x0, x1 = self.x_bounds
        y0, y1 = self.y_bounds
        x = x0 + (x1 - x0) / self.width * np.arange(self.width, dtype=np.float64)
        y = y0 + (y1 - y0) / self.height * np.arange(self.height, dtype=np.float64)
        return np.meshgrid(x, y)

    def build(self) -> np.ndarray:
        """Noise map of shape (height, width)."""
        xx, yy = self.coordinates()
        return self.source.get_many(np.stack([xx, yy], axis=-1))


def to_grayscale(noise_map: np.ndarray) -> np.ndarray:
    """Map values in [-1, 1] to uint8 gray levels, clamping outliers."""
    img = np.clip(np.asarray(noise_map, dtype=np.float64) * 0.5 + 0.5, 0.0, 1.0)
    return (img * 255.0 + 0.5).astype(np.uint8)


def _ensure_rgb(image: np.ndarray) -> np.ndarray:
    if image.ndim == 2:
        image = np.repeat(image[:, :, None], 3, axis=2)
    if image.shape[2] == 1:
        image = np.repeat(image, 3, axis=2)
    if image.shape[2] >= 3:
        return image[:, :, :3]
    raise ValueError("Unsupported image shape for RGB conversion.")


def save_ppm(image: np.ndarray, path: Path) -> Path:
    """Save a noise map or uint8 image to binary PPM (P6) format."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = np.asarray(image)
    if data.dtype != np.uint8:
        data = to_grayscale(data)
    rgb = np.ascontiguousarray(_ensure_rgb(data))
    height, width, _ = rgb.shape
    header = f"P6\n{width} {height}\n255\n".encode("ascii")
    with path.open("wb") as f:
        f.write(header)
        f.write(rgb.tobytes())
    return path
