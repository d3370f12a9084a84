from __future__ import annotations

import functools
import io
from typing import Optional, Sequence

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from polefield.core.types import Pole, Theme

ACCENT = "#FACC15"

MARKER_RADIUS = 8
MARKER_RADIUS_HOVER = 10
MARKER_RADIUS_DRAG = 12


@functools.lru_cache(maxsize=1)
def _label_font():
    return ImageFont.load_default()


def theme_foreground(theme: Theme) -> str:
    return "#FFFFFF" if theme is Theme.DARK else "#000000"


def draw_pole_markers(
    img: Image.Image,
    poles: Sequence[Pole],
    theme: Theme = Theme.LIGHT,
    hovered: Optional[int] = None,
    dragged: Optional[int] = None,
) -> Image.Image:
    """Draw a filled circle with a 1-based index label per pole, in place."""
    draw = ImageDraw.Draw(img)
    font = _label_font()
    fg = theme_foreground(theme)
    for index, pole in enumerate(poles):
        is_hovered = hovered == index
        is_dragged = dragged == index
        if is_dragged:
            r = MARKER_RADIUS_DRAG
        elif is_hovered:
            r = MARKER_RADIUS_HOVER
        else:
            r = MARKER_RADIUS
        border = ACCENT if (is_dragged or is_hovered) else fg
        draw.ellipse(
            (pole.x - r, pole.y - r, pole.x + r, pole.y + r),
            fill=tuple(pole.color) + (255,),
            outline=border,
            width=3 if is_dragged else 2,
        )
        label = str(index + 1)
        left, top, right, bottom = draw.textbbox((0, 0), label, font=font)
        # centered, baseline 3px below the pole center
        tx = pole.x - (right - left) / 2 - left
        ty = pole.y + 3 - bottom
        draw.text((tx, ty), label, fill=fg, font=font)
    return img


def to_image(buffer: np.ndarray) -> Image.Image:
    return Image.fromarray(np.ascontiguousarray(buffer))


def encode_png(buffer: np.ndarray) -> bytes:
    out = io.BytesIO()
    to_image(buffer).save(out, format="PNG")
    return out.getvalue()
