"""Pytest fixtures for tests."""

import asyncio

import pytest

from lightloop.errors import SinkError
from lightloop.frame import FrameBuffer
from lightloop.patterns import Pattern
from lightloop.sinks import Sink


class FakeClock:
    """Manual time source; sleep() advances it instead of waiting."""

    def __init__(self, start=100.0):
        self.now = start
        self.sleeps = []

    def __call__(self):
        return self.now

    def advance(self, dt):
        self.now += dt

    async def sleep(self, dt):
        self.sleeps.append(dt)
        self.now += dt
        await asyncio.sleep(0)


class RecordingSink(Sink):
    """Keeps a copy of every frame written; can stop the loop or fail on cue."""

    def __init__(self, num_pixels, stop=None, stop_after=None, fail_after=None, on_write=None):
        self.n = num_pixels
        self.stop = stop
        self.stop_after = stop_after
        self.fail_after = fail_after
        self.on_write = on_write
        self.frames = []
        self.close_calls = 0

    def pixel_count(self):
        return self.n

    def write(self, data):
        if self.fail_after is not None and len(self.frames) >= self.fail_after:
            raise SinkError("device went away")
        self.frames.append(bytes(data))
        if self.on_write is not None:
            self.on_write()
        if self.stop_after is not None and len(self.frames) >= self.stop_after:
            self.stop.set()

    def close(self):
        self.close_calls += 1


class IndexPattern(Pattern):
    """Pixel i is (i mod 256, 0, 0); remembers what it was asked to render."""

    def __init__(self):
        self.calls = []

    def render(self, frame: FrameBuffer, time_ms: int) -> None:
        self.calls.append((len(frame), time_ms))
        for i in range(len(frame)):
            frame[i] = (i % 256, 0, 0)


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def index_pattern():
    return IndexPattern()
