# -------------------------------- lightloop/render.py --------------------------------

from __future__ import annotations
import asyncio, logging, math, time
from enum import Enum
from typing import Awaitable, Callable, Optional

from lightloop.clock import Clock
from lightloop.frame import FrameBuffer
from lightloop.patterns import Pattern
from lightloop.sinks import Sink

log = logging.getLogger(__name__)

TimeFn = Callable[[], float]
SleepFn = Callable[[float], Awaitable[None]]

MIN_FPS, MAX_FPS = 1, 200


class LoopState(Enum):
    INITIALIZING = "initializing"
    RUNNING = "running"
    TERMINATED = "terminated"


class Ticker:
    """
    Ticks on a fixed wall-clock grid: start + k * interval.

    A tick that came due while the caller was busy is delivered at once, but
    only one; any further grid points that passed are dropped. The grid
    itself never shifts, so a slow frame costs frames, not phase.
    """

    def __init__(self, interval: float, *, time_fn: TimeFn = time.monotonic, sleep: SleepFn = asyncio.sleep):
        self.interval = float(interval)
        self._time = time_fn
        self._sleep = sleep
        self._next = time_fn() + self.interval

    async def wait(self) -> int:
        """Block until the next tick; returns how many ticks were dropped."""
        left = self._next - self._time()
        if left > 0:
            await self._sleep(left)
        behind = self._time() - self._next
        dropped = max(0, math.floor(behind / self.interval)) if behind > 0 else 0
        self._next += (dropped + 1) * self.interval
        return dropped


class RenderLoop:
    """Renders a pattern into a sink at a fixed frame rate."""

    def __init__(self, sink: Sink, pattern: Pattern, *, fps: int = 30,
                 time_fn: TimeFn = time.monotonic, sleep: SleepFn = asyncio.sleep,
                 heartbeat: int = 300):
        if not MIN_FPS <= fps <= MAX_FPS:
            raise ValueError(f"fps must be between {MIN_FPS} and {MAX_FPS}, got {fps}")
        self.sink = sink
        self.pattern = pattern
        self.fps = fps
        self.heartbeat = max(1, int(heartbeat))
        self._time = time_fn
        self._sleep = sleep
        self.state = LoopState.INITIALIZING
        self.frame: Optional[FrameBuffer] = None
        self.frames = 0
        self.dropped_ticks = 0

    async def run(self, stop: Optional[asyncio.Event] = None) -> None:
        """
        Run until stop is set, the task is cancelled, or the sink fails.
        A sink error is re-raised unchanged; the sink is closed on every path.
        """
        try:
            n = self.sink.pixel_count()
            self.frame = FrameBuffer(n)
            tx = bytearray(3 * n)
            clock = Clock(self._time)
            clock.start()
            ticker = Ticker(1.0 / self.fps, time_fn=self._time, sleep=self._sleep)
            self.state = LoopState.RUNNING
            log.info("rendering %d pixels at %d fps", n, self.fps)

            while stop is None or not stop.is_set():
                t_frame = self._time()
                self.pattern.render(self.frame, clock.elapsed_millis())
                self.frame.to_rgb(tx)
                self.sink.write(tx)
                self.frames += 1
                if self.frames % self.heartbeat == 0:
                    log.debug("frame %d, avg=%.1f", self.frames, float(self.frame.pixels.mean()))

                dropped = await ticker.wait()
                if dropped:
                    self.dropped_ticks += dropped
                    log.debug("frame %d took %.3fs, dropped %d tick(s)",
                              self.frames, self._time() - t_frame, dropped)
        finally:
            self.state = LoopState.TERMINATED
            self.sink.close()
            log.info("render loop stopped after %d frames (%d ticks dropped)",
                     self.frames, self.dropped_ticks)
