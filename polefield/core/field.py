"""Inverse-distance-weighted color field.

``color_at`` is the scalar reference. ``FieldInterpolator`` evaluates the same
arithmetic (same operation order) over a whole raster into buffers allocated
once per raster size. Vectorized pow may differ in the last ulp, so a channel
can land one unit away from the scalar result.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from .types import RGB, Pole, Raster

MIN_DISTANCE = 1.0


def _round_half_up(v: float) -> int:
    return int(math.floor(v + 0.5))


def color_at(x: float, y: float, poles: Sequence[Pole], power: float) -> RGB:
    total = 0.0
    wr = wg = wb = 0.0
    for pole in poles:
        dx = x - pole.x
        dy = y - pole.y
        d = math.sqrt(dx * dx + dy * dy)
        if d < MIN_DISTANCE:
            d = MIN_DISTANCE
        w = 1.0 / math.pow(d, power)
        total += w
        wr += w * pole.color[0]
        wg += w * pole.color[1]
        wb += w * pole.color[2]
    return (_round_half_up(wr / total), _round_half_up(wg / total), _round_half_up(wb / total))


class FieldInterpolator:
    """Raster evaluator with preallocated coordinate grids and scratch space."""

    def __init__(self, raster: Raster):
        self.raster = raster
        h, w = raster.height, raster.width
        yy, xx = np.mgrid[0:h, 0:w]
        self.xx = xx.astype(np.float64)
        self.yy = yy.astype(np.float64)
        self._dx = np.empty((h, w), dtype=np.float64)
        self._dy = np.empty((h, w), dtype=np.float64)
        self._w = np.empty((h, w), dtype=np.float64)
        self._tmp = np.empty((h, w), dtype=np.float64)
        self._total = np.empty((h, w), dtype=np.float64)
        self._acc = np.empty((3, h, w), dtype=np.float64)
        self._rgb = np.empty((h, w, 3), dtype=np.uint8)

    def render(self, poles: Sequence[Pole], power: float) -> np.ndarray:
        """Return an (h, w, 3) uint8 view, valid until the next call."""
        dx, dy, wgt, tmp = self._dx, self._dy, self._w, self._tmp
        total, acc = self._total, self._acc
        total.fill(0.0)
        acc.fill(0.0)

        for pole in poles:
            np.subtract(self.xx, pole.x, out=dx)
            np.subtract(self.yy, pole.y, out=dy)
            np.multiply(dx, dx, out=dx)
            np.multiply(dy, dy, out=dy)
            np.add(dx, dy, out=wgt)
            np.sqrt(wgt, out=wgt)
            np.maximum(wgt, MIN_DISTANCE, out=wgt)
            np.power(wgt, power, out=wgt)
            np.divide(1.0, wgt, out=wgt)
            np.add(total, wgt, out=total)
            for c in range(3):
                np.multiply(wgt, float(pole.color[c]), out=tmp)
                np.add(acc[c], tmp, out=acc[c])

        np.divide(acc, total, out=acc)
        np.add(acc, 0.5, out=acc)
        np.floor(acc, out=acc)
        np.copyto(self._rgb, np.moveaxis(acc, 0, -1), casting="unsafe")
        return self._rgb
