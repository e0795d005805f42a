# -------------------------------- lightloop/patterns/base.py --------------------------------

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Callable, Dict

from lightloop.frame import FrameBuffer


class Pattern(ABC):
    """Base class for all patterns.

    render() is called once per tick with the same, uncleared frame buffer.
    It must write every pixel, must not block, and must not keep a reference
    to the frame after returning. A pattern that has no defined color for a
    timestamp paints black rather than raising.
    """

    @abstractmethod
    def render(self, frame: FrameBuffer, time_ms: int) -> None:
        """
        Fill frame with this pattern's colors at time_ms.
        time_ms: milliseconds since the loop started, wraps at 2**32.
        """


# name -> builder(ctx, **params) -> Pattern
REGISTRY: Dict[str, Callable[..., Pattern]] = {}

def pattern_type(name: str):
    def deco(fn: Callable[..., Pattern]):
        REGISTRY[name] = fn
        return fn
    return deco


class Scratch:
    """Per-pattern scratch frame, reallocated only when the strip length changes."""

    def __init__(self):
        self._frame: FrameBuffer | None = None

    def get(self, width: int) -> FrameBuffer:
        if self._frame is None or len(self._frame) != width:
            self._frame = FrameBuffer(width)
        return self._frame
