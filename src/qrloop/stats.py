"""Frame timing statistics for the live detector."""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable


def now_ms() -> float:
    """Return a monotonic timestamp in milliseconds."""

    return time.perf_counter() * 1000.0


@dataclass(slots=True)
class FpsStats:
    """Exponentially smoothed latency and frames-per-second estimates.

    ``avg_ms`` follows every frame with a 2% weight on the newest sample.
    ``avg_fps`` is folded once per elapsed second from the number of frames
    counted in that window.  Instances are not thread safe and are meant to be
    driven from a single loop.
    """

    clock: Callable[[], float] = now_ms
    avg_ms: float = 0.0
    avg_fps: float = 0.0
    fps_1sec: float = 0.0
    fps_start: float = field(default=0.0)

    def __post_init__(self) -> None:
        self.fps_start = self.clock()

    def update_avg_ms(self, frame_ms: float) -> float:
        self.avg_ms = 0.98 * self.avg_ms + 0.02 * frame_ms
        return self.avg_ms

    def tick_fps(self) -> float:
        now = self.clock()
        if now - self.fps_start >= 1000.0:
            self.fps_start = now
            self.avg_fps = 0.7 * self.avg_fps + 0.3 * self.fps_1sec
            self.fps_1sec = 0.0
        self.fps_1sec += 1.0
        return self.avg_fps


__all__ = ["FpsStats", "now_ms"]
