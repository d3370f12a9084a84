"""Frame owner: pole list, clocks, loops and the full-frame pass.

Pole positions have exactly one writer per frame, chosen by ``mode``:
trajectories while animated, the interaction controller otherwise.
"""

from __future__ import annotations

from typing import Any, Callable, List, Mapping, Optional, Union

import numpy as np

from polefield.utils.image_ops import draw_pole_markers, to_image

from .colors import apply_grain, hex_to_rgb
from .field import FieldInterpolator
from .interaction import EventResult, InteractionController, PointerEvent, PointerKind
from .noise import noise_field
from .params import ControlParameters
from .scheduler import FrameClock, FrameLoop, FrameScheduler, ManualScheduler
from .trajectories import pattern_label, position_for
from .types import Mode, Pole, Raster, Theme, initial_poles


def status_label(params: ControlParameters) -> str:
    parts = ["4-POLE GRADIENT / CANVAS_2D"]
    if params.animation_enabled:
        parts.append("/ ANIMATED")
    if params.noise_enabled:
        parts.append("/ NOISE_OVERLAY")
    if not params.show_poles:
        parts.append("/ HIDDEN_POLES")
    return " ".join(parts)


class Compositor:
    def __init__(
        self,
        raster: Raster,
        params: Optional[ControlParameters] = None,
        scheduler: Optional[FrameScheduler] = None,
        haptic: Optional[Callable[[str], None]] = None,
        on_update: Optional[Callable[[], None]] = None,
    ):
        self.raster = raster
        self.params = params or ControlParameters()
        self.poles: List[Pole] = initial_poles(raster, self._pole_rgb())
        self.interaction = InteractionController(haptic=haptic)
        self.interaction.set_animation_enabled(self.params.animation_enabled)
        self.clock = FrameClock()
        self.noise_time = 0.0
        self.on_update = on_update

        self._field = FieldInterpolator(raster)
        self._buffer = np.empty((raster.height, raster.width, 4), dtype=np.uint8)
        self._scheduler = scheduler or ManualScheduler()
        self._motion_loop = FrameLoop(self._scheduler, self._on_motion_frame)
        self._noise_loop = FrameLoop(self._scheduler, self._on_noise_frame)
        self._mounted = False

    # --- state -------------------------------------------------------------

    @property
    def mode(self) -> Mode:
        return Mode.ANIMATED if self.params.animation_enabled else Mode.INTERACTIVE

    @property
    def motion_running(self) -> bool:
        return self._motion_loop.running

    @property
    def noise_running(self) -> bool:
        return self._noise_loop.running

    def _pole_rgb(self):
        return [hex_to_rgb(c) for c in self.params.pole_colors]

    def status(self) -> str:
        return status_label(self.params)

    def pattern_status(self) -> str:
        return pattern_label(self.params.animation_pattern) if self.params.animation_enabled else ""

    # --- lifecycle ---------------------------------------------------------

    def mount(self) -> None:
        self._mounted = True
        self._sync_loops()

    def unmount(self) -> None:
        self._mounted = False
        self._motion_loop.stop()
        self._noise_loop.stop()

    def _sync_loops(self) -> None:
        animated = self.params.animation_enabled
        noise_only = self.params.noise_enabled and not animated
        if self._mounted and animated:
            self._motion_loop.start()
        else:
            self._motion_loop.stop()
        if self._mounted and noise_only:
            self._noise_loop.start()
        else:
            self._noise_loop.stop()

    def apply_parameters(self, params: Union[ControlParameters, Mapping[str, Any], None]) -> None:
        if not isinstance(params, ControlParameters):
            params = ControlParameters.from_mapping(params)
        self.params = params
        for pole, rgb in zip(self.poles, self._pole_rgb()):
            pole.color = rgb
        self.interaction.set_animation_enabled(params.animation_enabled)
        self._sync_loops()
        self._notify()

    def update_parameters(self, changes: Mapping[str, Any]) -> None:
        """Apply a partial camelCase mapping on top of the current parameters."""
        self.apply_parameters(self.params.updated(changes))

    # --- frame clock -------------------------------------------------------

    def advance(self, timestamp: float) -> float:
        """Advance the clock; while animated, move every pole along its trajectory."""
        now = self.clock.advance(timestamp)
        self.noise_time = now
        if self.mode is Mode.ANIMATED:
            p = self.params
            for index, pole in enumerate(self.poles):
                x, y = position_for(index, now, p.animation_pattern, p.animation_speed, self.raster)
                pole.x, pole.y = self.raster.clamp(x, y)
        return now

    def _on_motion_frame(self, timestamp: float) -> None:
        self.advance(timestamp)
        self._notify()

    def _on_noise_frame(self, timestamp: float) -> None:
        self.noise_time = self.clock.advance(timestamp)
        self._notify()

    def _notify(self) -> None:
        if self.on_update is not None:
            self.on_update()

    # --- pointer -----------------------------------------------------------

    def _handled(self, result: EventResult) -> EventResult:
        if result.changed:
            self._notify()
        return result

    def pointer_press(self, x: float, y: float, touch: bool = False) -> EventResult:
        event = PointerEvent(x, y, PointerKind.TOUCH if touch else PointerKind.MOUSE)
        return self._handled(self.interaction.press(event, self.poles))

    def pointer_move(self, x: float, y: float, touch: bool = False) -> EventResult:
        event = PointerEvent(x, y, PointerKind.TOUCH if touch else PointerKind.MOUSE)
        return self._handled(self.interaction.move(event, self.poles, self.raster))

    def pointer_release(self) -> EventResult:
        return self._handled(self.interaction.release())

    def pointer_leave(self) -> EventResult:
        return self._handled(self.interaction.leave())

    # --- rendering ---------------------------------------------------------

    def render(self, theme: Theme = Theme.LIGHT) -> np.ndarray:
        """Full-frame pass. Returns a fresh (height, width, 4) uint8 RGBA array."""
        p = self.params
        buf = self._buffer
        rgb = self._field.render(self.poles, p.interpolation_power)
        if p.noise_enabled:
            n = noise_field(self._field.xx, self._field.yy, p.noise_scale, p.noise_type, self.noise_time)
            rgb = apply_grain(rgb, n, p.noise_intensity)
        buf[..., :3] = rgb
        buf[..., 3] = 255

        if not p.show_poles:
            return buf.copy()
        img = to_image(buf)
        state = self.interaction.state
        draw_pole_markers(img, self.poles, Theme.coerce(theme), state.hovered, state.dragged)
        return np.array(img)
