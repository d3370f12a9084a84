"""Procedural grain overlay.

Each family is a pure function of (x, y, scale, time). ``generate_noise`` is the
scalar reference; ``noise_field`` evaluates the same formulas over whole
coordinate grids with numpy.
"""

from __future__ import annotations

import math
from enum import Enum

import numpy as np


class NoiseFamily(Enum):
    ANALOG = "analog"
    DIGITAL = "digital"
    FILM = "film"
    UNIFORM = "uniform"  # fallback arm: plain hashed scalar

    @classmethod
    def coerce(cls, value) -> "NoiseFamily":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.UNIFORM


def _hash(x: float, y: float, time: float) -> float:
    """Deterministic pseudo-random value in [0, 1]."""
    seed = math.fmod(x * 12.9898 + y * 78.233 + time * 0.001, 1.0)
    return math.sin(seed * 43758.5453) * 0.5 + 0.5


def _grid_cells(scale: float) -> float:
    cells = scale * 50.0
    return cells if cells > 0 else 1.0


def generate_noise(x: float, y: float, scale: float, family, time: float = 0.0) -> float:
    family = NoiseFamily.coerce(family)
    noise = _hash(x, y, time)

    if family is NoiseFamily.ANALOG:
        grain1 = math.sin((x + time * 0.1) * scale * 127.1) * math.cos((y + time * 0.05) * scale * 311.7)
        grain2 = math.cos((x - time * 0.08) * scale * 74.3) * math.sin((y + time * 0.12) * scale * 183.9)
        return (grain1 + grain2 + noise * 2) * 0.25

    if family is NoiseFamily.DIGITAL:
        cells = _grid_cells(scale)
        sx = math.floor(x * cells) / cells
        sy = math.floor(y * cells) / cells
        seed = math.fmod(sx * 12.9898 + sy * 78.233 + math.floor(time * 10) * 0.1, 1.0)
        return 1.0 if math.sin(seed * 43758.5453) > 0.7 else -0.3

    if family is NoiseFamily.FILM:
        vertical = math.sin(x * scale * 200 + time * 0.02) * 0.3
        grain = (
            math.sin((x + y + time * 0.05) * scale * 150.7)
            + math.cos((x * 1.3 + y * 0.7 + time * 0.08) * scale * 89.2)
        ) * 0.35
        # streak + grain can stack past 1.0
        return max(-1.0, min(1.0, vertical + grain + noise * 0.3))

    return noise * 2 - 1


def _hash_field(xx: np.ndarray, yy: np.ndarray, time: float) -> np.ndarray:
    seed = np.fmod(xx * 12.9898 + yy * 78.233 + time * 0.001, 1.0)
    return np.sin(seed * 43758.5453) * 0.5 + 0.5


def noise_field(xx: np.ndarray, yy: np.ndarray, scale: float, family, time: float = 0.0) -> np.ndarray:
    """Vectorized ``generate_noise`` over coordinate grids of equal shape."""
    family = NoiseFamily.coerce(family)
    noise = _hash_field(xx, yy, time)

    if family is NoiseFamily.ANALOG:
        grain1 = np.sin((xx + time * 0.1) * scale * 127.1) * np.cos((yy + time * 0.05) * scale * 311.7)
        grain2 = np.cos((xx - time * 0.08) * scale * 74.3) * np.sin((yy + time * 0.12) * scale * 183.9)
        return (grain1 + grain2 + noise * 2) * 0.25

    if family is NoiseFamily.DIGITAL:
        cells = _grid_cells(scale)
        sx = np.floor(xx * cells) / cells
        sy = np.floor(yy * cells) / cells
        seed = np.fmod(sx * 12.9898 + sy * 78.233 + math.floor(time * 10) * 0.1, 1.0)
        return np.where(np.sin(seed * 43758.5453) > 0.7, 1.0, -0.3)

    if family is NoiseFamily.FILM:
        vertical = np.sin(xx * scale * 200 + time * 0.02) * 0.3
        grain = (
            np.sin((xx + yy + time * 0.05) * scale * 150.7)
            + np.cos((xx * 1.3 + yy * 0.7 + time * 0.08) * scale * 89.2)
        ) * 0.35
        return np.clip(vertical + grain + noise * 0.3, -1.0, 1.0)

    return noise * 2 - 1
