"""Frame scheduling behind a cancelable handle.

The platform's "call me on the next frame" primitive is wrapped by a
``FrameScheduler``; ``FrameLoop`` keeps exactly one request outstanding while
running. ``ManualScheduler`` fires frames on demand for headless use and tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Dict, Hashable, Optional

FrameCallback = Callable[[float], None]


class FrameClock:
    """Monotonic frame timestamp (ms). Older timestamps are ignored."""

    def __init__(self, start: float = 0.0):
        self._now = float(start)

    @property
    def now(self) -> float:
        return self._now

    def advance(self, timestamp: float) -> float:
        if timestamp > self._now:
            self._now = float(timestamp)
        return self._now


class FrameScheduler(ABC):
    @abstractmethod
    def request(self, callback: FrameCallback) -> Hashable:
        """Schedule ``callback(timestamp_ms)`` for the next frame."""

    @abstractmethod
    def cancel(self, handle: Hashable) -> None:
        """Drop a pending request. Unknown or already-fired handles are ignored."""


class ManualScheduler(FrameScheduler):
    def __init__(self):
        self._pending: Dict[int, FrameCallback] = {}
        self._next_id = 0

    @property
    def pending(self) -> int:
        return len(self._pending)

    def request(self, callback: FrameCallback) -> int:
        self._next_id += 1
        self._pending[self._next_id] = callback
        return self._next_id

    def cancel(self, handle: Hashable) -> None:
        self._pending.pop(handle, None)

    def fire(self, timestamp: float) -> int:
        """Run every callback pending right now; returns how many ran."""
        callbacks = list(self._pending.values())
        self._pending.clear()
        for cb in callbacks:
            cb(timestamp)
        return len(callbacks)


class FrameLoop:
    def __init__(self, scheduler: FrameScheduler, on_frame: FrameCallback):
        self._scheduler = scheduler
        self._on_frame = on_frame
        self._handle: Optional[Hashable] = None
        self._active = False

    @property
    def running(self) -> bool:
        return self._active

    def start(self) -> None:
        if self._active:
            return
        self._active = True
        self._handle = self._scheduler.request(self._tick)

    def stop(self) -> None:
        self._active = False
        if self._handle is None:
            return
        handle, self._handle = self._handle, None
        self._scheduler.cancel(handle)

    def _tick(self, timestamp: float) -> None:
        self._handle = None
        if not self._active:
            return
        self._on_frame(timestamp)
        if self._active and self._handle is None:
            self._handle = self._scheduler.request(self._tick)
