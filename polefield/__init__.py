"""polefield: animated four-pole color field with grain overlay."""

from polefield.core.compositor import Compositor, status_label
from polefield.core.params import ControlParameters
from polefield.core.simplex import SimplexNoise
from polefield.core.types import Pole, Raster, Theme

__version__ = "0.1.0"

__all__ = [
    "Compositor",
    "ControlParameters",
    "Pole",
    "Raster",
    "SimplexNoise",
    "Theme",
    "status_label",
]
