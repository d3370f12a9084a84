"""Closed-form pole trajectories.

``position_for`` is a pure function of (pole index, time, pattern, speed) and
the raster size. Results are not clamped; callers clamp to the raster.
"""

from __future__ import annotations

import math
import re
from enum import Enum
from typing import Tuple

from .types import Raster

TWO_PI = 2 * math.pi
HALF_PI = math.pi / 2


class AnimationPattern(Enum):
    CIRCULAR = "circular"
    FIGURE8 = "figure8"
    OSCILLATING = "oscillating"
    RANDOM = "random"
    CURL = "curl"
    STATIC = "static"  # fallback arm: every pole sits at the center

    @classmethod
    def coerce(cls, value) -> "AnimationPattern":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.STATIC


def pattern_label(pattern) -> str:
    """``figure8`` -> ``FIGURE8``, ``someName`` -> ``SOME_NAME``."""
    name = pattern.value if isinstance(pattern, AnimationPattern) else str(pattern)
    return re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name).upper()


def _circular(i: int, t: float, cx: float, cy: float, r: float) -> Tuple[float, float]:
    angle = math.fmod(t + i * HALF_PI, TWO_PI)
    return cx + r * math.cos(angle), cy + r * math.sin(angle)


def _figure8(i: int, t: float, cx: float, cy: float, r: float) -> Tuple[float, float]:
    angle = t + i * HALF_PI
    scale = 0.7
    return cx + r * scale * math.sin(angle), cy + r * scale * math.sin(2 * angle) / 2


def _oscillating(i: int, t: float, raster: Raster, cx: float, cy: float, r: float) -> Tuple[float, float]:
    x_off = (i % 2) * raster.width * 0.3
    y_off = (i // 2) * raster.height * 0.3
    return (
        cx - raster.width * 0.15 + x_off + r * 0.5 * math.sin(t + i),
        cy - raster.height * 0.15 + y_off + r * 0.5 * math.cos(t * 1.3 + i),
    )


def _random_walk(i: int, t: float, cx: float, cy: float, r: float) -> Tuple[float, float]:
    sx = i * 1.37
    sy = i * 2.73
    x = (
        math.sin(t * 0.7 + sx) * 0.5
        + math.sin(t * 1.3 + sx * 2) * 0.3
        + math.sin(t * 0.4 + sx * 3) * 0.2
    )
    y = (
        math.cos(t * 0.8 + sy) * 0.5
        + math.cos(t * 1.1 + sy * 2) * 0.3
        + math.cos(t * 0.6 + sy * 3) * 0.2
    )
    return cx + r * 0.6 * x, cy + r * 0.6 * y


def _curl(i: int, t: float, cx: float, cy: float, r: float) -> Tuple[float, float]:
    # layered sine turbulence around a breathing orbit
    angle = math.fmod(t * 0.8 + i * HALF_PI, TWO_PI)
    swirl = t * 0.3 + i

    turb1 = math.sin(t * 1.2 + i * 3.7) * 0.4
    turb2 = math.cos(t * 2.1 + i * 1.9) * 0.25
    turb3 = math.sin(t * 0.7 + i * 5.3) * 0.15
    turb4 = math.cos(t * 3.1 + i * 1.3) * 0.1

    radial = math.sin(t * 1.5 + i * 2.8) * 0.3 + math.cos(t * 0.9 + i * 4.2) * 0.2
    base_radius = r * (0.5 + math.sin(swirl) * 0.3 + radial)

    chaos_angle = angle + (turb1 + turb2 + turb4 * 2) * 0.6
    chaos_x = (turb1 * 0.5 + turb3 * 0.7 + turb4 * 0.3) * r
    chaos_y = (turb2 * 0.5 - turb3 * 0.4 + turb4 * 0.6) * r

    direction = 1.0 + math.sin(t * 0.4 + i * 2.1) * 0.3

    return (
        cx + (base_radius * math.cos(chaos_angle) + chaos_x) * direction,
        cy + (base_radius * math.sin(chaos_angle) + chaos_y) * direction,
    )


def position_for(pole_index: int, time: float, pattern, speed: float, raster: Raster) -> Tuple[float, float]:
    """Unclamped position of pole ``pole_index`` at ``time`` (ms)."""
    pattern = AnimationPattern.coerce(pattern)
    cx, cy = raster.center
    r = raster.radius
    t = time * speed / 1000.0
    i = pole_index

    if pattern is AnimationPattern.CIRCULAR:
        return _circular(i, t, cx, cy, r)
    if pattern is AnimationPattern.FIGURE8:
        return _figure8(i, t, cx, cy, r)
    if pattern is AnimationPattern.OSCILLATING:
        return _oscillating(i, t, raster, cx, cy, r)
    if pattern is AnimationPattern.RANDOM:
        return _random_walk(i, t, cx, cy, r)
    if pattern is AnimationPattern.CURL:
        return _curl(i, t, cx, cy, r)
    return cx, cy
