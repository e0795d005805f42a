# -------------------------------- lightloop/sinks.py --------------------------------

from __future__ import annotations
from abc import ABC, abstractmethod
import contextlib
import sys
from typing import TextIO

import numpy as np

from lightloop.errors import SinkError


class Sink(ABC):
    """Output boundary for packed R,G,B frames.

    The render loop sizes its frame from pixel_count(), calls write() once per
    tick and close() exactly once when it stops. write() raises SinkError on
    failure; close() must be safe to call more than once.
    """

    @abstractmethod
    def pixel_count(self) -> int:
        ...

    @abstractmethod
    def write(self, data: bytes) -> None:
        ...

    @abstractmethod
    def close(self) -> None:
        ...

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _frame(self, data: bytes) -> np.ndarray:
        """View data as [N,3] uint8, checking it matches the strip length."""
        n = self.pixel_count()
        if len(data) != 3 * n:
            raise SinkError(f"frame is {len(data)} bytes, strip needs {3 * n}")
        return np.frombuffer(data, dtype=np.uint8).reshape(n, 3)


class TerminalSink(Sink):
    """Preview on a terminal: one 24-bit colored cell per pixel, redrawn in place."""

    def __init__(self, num_pixels: int, stream: TextIO | None = None):
        self.n = int(num_pixels)
        self.stream = stream if stream is not None else sys.stdout
        self._closed = False

    def pixel_count(self) -> int:
        return self.n

    def write(self, data: bytes) -> None:
        if self._closed:
            raise SinkError("terminal sink is closed")
        frame = self._frame(data)
        cells = "".join(f"\033[48;2;{r};{g};{b}m " for r, g, b in frame.tolist())
        try:
            self.stream.write("\r" + cells + "\033[0m")
            self.stream.flush()
        except (OSError, ValueError) as e:
            raise SinkError(f"terminal write failed: {e}") from e

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        with contextlib.suppress(OSError, ValueError):
            self.stream.write("\033[0m\n")
            self.stream.flush()
