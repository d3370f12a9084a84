"""Pointer/touch interaction with the poles.

States: idle, hovering(i), dragging(i). Every transition is a no-op while
animation owns pole positions. The controller never keeps a reference to the
pole list it is handed.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence

from .types import HIT_RADIUS, Pole, Raster

HAPTIC_LIGHT = "light"


class PointerKind(Enum):
    MOUSE = "mouse"
    TOUCH = "touch"


@dataclass(frozen=True)
class PointerEvent:
    """Press/move/release position in raster-local coordinates."""
    x: float
    y: float
    kind: PointerKind = PointerKind.MOUSE

    @property
    def can_suppress_default(self) -> bool:
        return self.kind is PointerKind.TOUCH


@dataclass(frozen=True)
class EventResult:
    changed: bool = False  # poles or hover/drag state changed; re-render
    suppress_default: bool = False  # caller should swallow the platform gesture


IGNORED = EventResult()


@dataclass
class InteractionState:
    dragged: Optional[int] = None
    hovered: Optional[int] = None

    @property
    def phase(self) -> str:
        if self.dragged is not None:
            return "dragging"
        if self.hovered is not None:
            return "hovering"
        return "idle"


class InteractionController:
    def __init__(self, haptic: Optional[Callable[[str], None]] = None, hit_radius: float = HIT_RADIUS):
        self.state = InteractionState()
        self.hit_radius = hit_radius
        self.animation_enabled = False
        self._haptic = haptic

    def set_animation_enabled(self, enabled: bool) -> None:
        if enabled and not self.animation_enabled:
            self.reset()
        self.animation_enabled = bool(enabled)

    def reset(self) -> None:
        self.state = InteractionState()

    def pole_at(self, x: float, y: float, poles: Sequence[Pole]) -> Optional[int]:
        for i, pole in enumerate(poles):
            if math.sqrt((x - pole.x) ** 2 + (y - pole.y) ** 2) <= self.hit_radius:
                return i
        return None

    def press(self, event: PointerEvent, poles: Sequence[Pole]) -> EventResult:
        if self.animation_enabled:
            return IGNORED
        index = self.pole_at(event.x, event.y, poles)
        if index is None:
            return IGNORED
        self.state.dragged = index
        if event.kind is PointerKind.TOUCH:
            if self._haptic is not None:
                self._haptic(HAPTIC_LIGHT)
            return EventResult(changed=True, suppress_default=True)
        return EventResult(changed=True)

    def move(self, event: PointerEvent, poles: List[Pole], raster: Raster) -> EventResult:
        if self.animation_enabled:
            return IGNORED
        index = self.state.dragged
        if index is not None:
            pole = poles[index]
            pole.x, pole.y = raster.clamp(event.x, event.y)
            return EventResult(changed=True, suppress_default=event.can_suppress_default)
        if event.kind is PointerKind.TOUCH:
            # no hover without a cursor
            return IGNORED
        hovered = self.pole_at(event.x, event.y, poles)
        if hovered == self.state.hovered:
            return IGNORED
        self.state.hovered = hovered
        return EventResult(changed=True)

    def release(self) -> EventResult:
        if self.animation_enabled or self.state.dragged is None:
            return IGNORED
        self.state.dragged = None
        return EventResult(changed=True)

    def leave(self) -> EventResult:
        if self.animation_enabled:
            return IGNORED
        changed = self.state.dragged is not None or self.state.hovered is not None
        self.reset()
        return EventResult(changed=changed)
