"""Shared field types and constants."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

RGB = Tuple[int, int, int]

POLE_COUNT = 4
HIT_RADIUS = 15.0  # touch-friendly


class Theme(Enum):
    LIGHT = "light"
    DARK = "dark"

    @classmethod
    def coerce(cls, value) -> "Theme":
        if isinstance(value, cls):
            return value
        if isinstance(value, str) and value.lower() == "dark":
            return cls.DARK
        return cls.LIGHT


class Mode(Enum):
    """Which source owns pole positions for the current frame."""
    ANIMATED = "animated"
    INTERACTIVE = "interactive"


@dataclass(frozen=True)
class Raster:
    width: int
    height: int

    @property
    def center(self) -> Tuple[float, float]:
        return self.width / 2, self.height / 2

    @property
    def radius(self) -> float:
        return min(self.width, self.height) * 0.3

    def clamp(self, x: float, y: float) -> Tuple[float, float]:
        return (
            max(0.0, min(float(self.width), x)),
            max(0.0, min(float(self.height), y)),
        )


@dataclass
class Pole:
    """A colored point source. Position is rewritten every frame."""
    x: float
    y: float
    color: RGB

    @property
    def position(self) -> Tuple[float, float]:
        return self.x, self.y


def initial_poles(raster: Raster, colors) -> list[Pole]:
    """Four poles inset from the corners."""
    colors = list(colors)
    if len(colors) != POLE_COUNT:
        raise ValueError(f"expected {POLE_COUNT} pole colors, got {len(colors)}")
    w, h = raster.width, raster.height
    spots = [(w * 0.2, h * 0.2), (w * 0.8, h * 0.2), (w * 0.2, h * 0.8), (w * 0.8, h * 0.8)]
    return [Pole(x, y, tuple(c)) for (x, y), c in zip(spots, colors)]
