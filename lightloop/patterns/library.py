# -------------------------------- lightloop/patterns/library.py --------------------------------

from __future__ import annotations
import math
from typing import Sequence

import numpy as np

from lightloop.frame import BLACK, Color, FrameBuffer
from lightloop.patterns.base import Pattern, Scratch


def _hsv_to_u8(h: np.ndarray, s: float, v: float) -> np.ndarray:
    """Vectorized HSV -> [N,3] uint8; h in turns (wraps), s and v 0..1."""
    h = (np.asarray(h, dtype=np.float64) % 1.0) * 6.0
    i = np.floor(h).astype(np.int32) % 6
    f = h - np.floor(h)
    v = np.full_like(h, v)
    p = v * (1.0 - s)
    q = v * (1.0 - s * f)
    t = v * (1.0 - s * (1.0 - f))
    choices = np.stack([
        np.stack([v, t, p], axis=-1),
        np.stack([q, v, p], axis=-1),
        np.stack([p, v, t], axis=-1),
        np.stack([p, q, v], axis=-1),
        np.stack([t, p, v], axis=-1),
        np.stack([v, p, q], axis=-1)
    ], axis=0)
    rgb = choices[i, np.arange(h.shape[0])]
    return np.clip(np.round(rgb * 255.0), 0, 255).astype(np.uint8)


class SolidColor(Pattern):
    """Every pixel the same color."""

    def __init__(self, color: Color = BLACK):
        self.color = Color(*color)

    def render(self, frame: FrameBuffer, time_ms: int) -> None:
        frame.fill(self.color)


class Frame(Pattern):
    """Fixed per-pixel colors; pixels past the end are black, extra colors are dropped."""

    def __init__(self, colors: Sequence[Color]):
        self.colors = np.array([tuple(c) for c in colors], dtype=np.uint8).reshape(-1, 3)

    def render(self, frame: FrameBuffer, time_ms: int) -> None:
        px = frame.pixels
        m = min(len(frame), self.colors.shape[0])
        px[:m] = self.colors[:m]
        px[m:] = 0


class Rainbow(Pattern):
    """Hue spread across the strip, optionally drifting over time."""

    def __init__(self, speed: float = 0.0, saturation: float = 1.0, value: float = 1.0):
        self.speed = float(speed)  # hue turns per second
        self.saturation = float(saturation)
        self.value = float(value)

    def render(self, frame: FrameBuffer, time_ms: int) -> None:
        n = len(frame)
        # speed mod 1000 only drops whole turns since time_ms is an integer
        drift = (math.fmod(self.speed, 1000.0) * time_ms / 1000.0) % 1.0
        hue = np.linspace(0.0, 1.0, n, endpoint=False) + drift
        frame.pixels[...] = _hsv_to_u8(hue, self.saturation, self.value)


class Gradient(Pattern):
    """Linear blend from left (pixel 0) to right (last pixel)."""

    def __init__(self, left: Color, right: Color):
        self.left = np.array(tuple(left), dtype=np.float64)
        self.right = np.array(tuple(right), dtype=np.float64)

    def render(self, frame: FrameBuffer, time_ms: int) -> None:
        x = np.linspace(0.0, 1.0, len(frame)).reshape(-1, 1)
        ramp = self.left + (self.right - self.left) * x
        frame.pixels[...] = np.clip(np.round(ramp), 0, 255).astype(np.uint8)


class Repeated(Pattern):
    """Tiles the first `every` pixels of a child along the strip."""

    def __init__(self, child: Pattern, every: int):
        self.child = child
        self.every = int(every)
        self._scratch = Scratch()

    def render(self, frame: FrameBuffer, time_ms: int) -> None:
        if self.every < 1:
            frame.fill(BLACK)
            return
        every = min(self.every, len(frame))
        tile = self._scratch.get(every)
        self.child.render(tile, time_ms)
        idx = np.arange(len(frame)) % every
        frame.pixels[...] = tile.pixels[idx]


class Rotate(Pattern):
    """Shifts a child along the strip, wrapping around the end."""

    def __init__(self, child: Pattern, pixels_per_second: float):
        self.child = child
        self.pixels_per_second = float(pixels_per_second)
        self._scratch = Scratch()

    def render(self, frame: FrameBuffer, time_ms: int) -> None:
        n = len(frame)
        src = self._scratch.get(n)
        self.child.render(src, time_ms)
        # reduce the rate first so huge rates stay finite
        rate = math.fmod(self.pixels_per_second, n * 1000.0)
        offset = int(math.fmod(rate * time_ms / 1000.0, n)) % n
        frame.pixels[...] = np.roll(src.pixels, offset, axis=0)


class Cycle(Pattern):
    """Shows each child for duration_ms, in order, then starts over."""

    def __init__(self, children: Sequence[Pattern], duration_ms: int):
        self.children = list(children)
        self.duration_ms = int(duration_ms)

    def render(self, frame: FrameBuffer, time_ms: int) -> None:
        if not self.children or self.duration_ms <= 0:
            frame.fill(BLACK)
            return
        i = (time_ms // self.duration_ms) % len(self.children)
        self.children[i].render(frame, time_ms)


class Transition(Pattern):
    """Cross-fades from `before` to `after`, starting at offset_ms and lasting duration_ms."""

    def __init__(self, before: Pattern, after: Pattern, offset_ms: int = 0, duration_ms: int = 1000):
        self.before = before
        self.after = after
        self.offset_ms = int(offset_ms)
        self.duration_ms = int(duration_ms)
        self._a = Scratch()
        self._b = Scratch()

    def render(self, frame: FrameBuffer, time_ms: int) -> None:
        if time_ms < self.offset_ms:
            self.before.render(frame, time_ms)
            return
        if time_ms >= self.offset_ms + self.duration_ms:
            self.after.render(frame, time_ms)
            return
        n = len(frame)
        a, b = self._a.get(n), self._b.get(n)
        self.before.render(a, time_ms)
        self.after.render(b, time_ms)
        k = (time_ms - self.offset_ms) / self.duration_ms
        pa = a.pixels.astype(np.float32)
        mixed = pa + (b.pixels.astype(np.float32) - pa) * k
        frame.pixels[...] = np.clip(np.round(mixed), 0, 255).astype(np.uint8)


class Breathe(Pattern):
    """Raises and lowers a child's brightness along a cosine, once per period."""

    def __init__(self, child: Pattern, period_ms: int = 4000, floor: float = 0.0):
        self.child = child
        self.period_ms = int(period_ms)
        self.floor = max(0.0, min(1.0, float(floor)))

    def render(self, frame: FrameBuffer, time_ms: int) -> None:
        self.child.render(frame, time_ms)
        if self.period_ms <= 0:
            return
        phase = (time_ms % self.period_ms) / self.period_ms
        level = self.floor + (1.0 - self.floor) * (0.5 - 0.5 * math.cos(2.0 * math.pi * phase))
        scaled = frame.pixels.astype(np.float32) * level
        frame.pixels[...] = np.clip(np.round(scaled), 0, 255).astype(np.uint8)
