from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass
from typing import Any, Mapping, Tuple

from .noise import NoiseFamily
from .trajectories import AnimationPattern

DEFAULT_POLE_COLORS = ("#FF0000", "#00FF00", "#0000FF", "#FFFF00")


def _number(value, default: float, positive: bool = False) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    value = float(value)
    if not math.isfinite(value):
        return default
    if positive and value <= 0:
        return default
    return value


def _flag(value, default: bool) -> bool:
    return value if isinstance(value, bool) else default


def _color(value, default: str) -> str:
    return value if isinstance(value, str) else default


@dataclass(frozen=True)
class ControlParameters:
    pole_colors: Tuple[str, str, str, str] = DEFAULT_POLE_COLORS
    interpolation_power: float = 2.0
    animation_enabled: bool = False
    animation_speed: float = 1.0
    animation_pattern: AnimationPattern = AnimationPattern.CIRCULAR
    noise_enabled: bool = False
    noise_intensity: float = 0.3
    noise_scale: float = 0.02
    noise_type: NoiseFamily = NoiseFamily.ANALOG
    show_poles: bool = True

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any] | None) -> "ControlParameters":
        """Build from the camelCase settings mapping; absent or bad values take defaults."""
        v = dict(values or {})
        d = cls()
        colors = tuple(
            _color(v.get(f"pole{i + 1}Color"), DEFAULT_POLE_COLORS[i]) for i in range(4)
        )
        intensity = _number(v.get("noiseIntensity"), d.noise_intensity)
        if intensity < 0:
            intensity = d.noise_intensity
        pattern = v.get("animationPattern")
        noise_type = v.get("noiseType")
        return cls(
            pole_colors=colors,
            interpolation_power=_number(v.get("interpolationPower"), d.interpolation_power, positive=True),
            animation_enabled=_flag(v.get("animationEnabled"), d.animation_enabled),
            animation_speed=_number(v.get("animationSpeed"), d.animation_speed, positive=True),
            animation_pattern=d.animation_pattern if pattern is None else AnimationPattern.coerce(pattern),
            noise_enabled=_flag(v.get("noiseEnabled"), d.noise_enabled),
            noise_intensity=intensity,
            noise_scale=_number(v.get("noiseScale"), d.noise_scale, positive=True),
            noise_type=d.noise_type if noise_type is None else NoiseFamily.coerce(noise_type),
            show_poles=_flag(v.get("showPoles"), d.show_poles),
        )

    def to_mapping(self) -> dict:
        out = {f"pole{i + 1}Color": c for i, c in enumerate(self.pole_colors)}
        out.update(
            interpolationPower=self.interpolation_power,
            animationEnabled=self.animation_enabled,
            animationSpeed=self.animation_speed,
            animationPattern=self.animation_pattern.value,
            noiseEnabled=self.noise_enabled,
            noiseIntensity=self.noise_intensity,
            noiseScale=self.noise_scale,
            noiseType=self.noise_type.value,
            showPoles=self.show_poles,
        )
        return out

    def updated(self, changes: Mapping[str, Any]) -> "ControlParameters":
        """Merge a partial camelCase mapping over the current values."""
        merged = self.to_mapping()
        merged.update({k: val for k, val in changes.items() if k in merged})
        return ControlParameters.from_mapping(merged)

    def replace(self, **changes) -> "ControlParameters":
        return dataclasses.replace(self, **changes)
