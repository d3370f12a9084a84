"""Color parsing and clamped blending.

Malformed hex strings resolve to opaque white instead of raising.
"""

from __future__ import annotations

import functools
import re

import numpy as np

from .types import RGB

WHITE: RGB = (255, 255, 255)

_HEX_RE = re.compile(r"^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$", re.IGNORECASE)


@functools.lru_cache(maxsize=64)
def hex_to_rgb(hex_color: str) -> RGB:
    """Parse ``#RRGGBB`` (marker optional). Memoized, so equal input returns the same tuple."""
    if not isinstance(hex_color, str):
        return WHITE
    m = _HEX_RE.match(hex_color.strip())
    if m is None:
        return WHITE
    return (int(m.group(1), 16), int(m.group(2), 16), int(m.group(3), 16))


def clamp_channel(v: float) -> int:
    return int(max(0, min(255, v)))


def rgb_to_hex(color: RGB) -> str:
    r, g, b = (clamp_channel(round(c)) for c in color)
    return f"#{r:02X}{g:02X}{b:02X}"


def blend_colors(color1: RGB, color2: RGB, ratio: float) -> RGB:
    """Blend two RGB colors. ratio 0=color1, 1=color2."""
    ratio = max(0.0, min(1.0, ratio))
    return tuple(clamp_channel(color1[i] * (1 - ratio) + color2[i] * ratio) for i in range(3))


def apply_grain(rgb: np.ndarray, noise: np.ndarray, intensity: float) -> np.ndarray:
    """Add ``noise * intensity * 255`` to every channel, clamped to [0, 255].

    ``rgb`` is (h, w, 3), ``noise`` is (h, w). Returns uint8.
    """
    amount = noise.astype(np.float64) * (float(intensity) * 255.0)
    out = rgb.astype(np.float64) + amount[..., None]
    np.clip(out, 0.0, 255.0, out=out)
    return np.rint(out).astype(np.uint8)
