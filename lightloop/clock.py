# -------------------------------- lightloop/clock.py --------------------------------

from __future__ import annotations
import time
from typing import Callable

# Elapsed milliseconds are handed to patterns as an unsigned 32-bit value.
# It wraps after 2**32 ms, about 49.7 days of continuous operation.
WRAP_MS = 1 << 32


class Clock:
    """Monotonic animation clock measured from a resettable epoch."""

    def __init__(self, time_fn: Callable[[], float] = time.monotonic):
        self._time = time_fn
        self._t0 = time_fn()
        self._last = 0.0

    def start(self) -> None:
        self._t0 = self._time()
        self._last = 0.0

    def elapsed(self) -> float:
        """Seconds since the epoch; never goes backward."""
        dt = self._time() - self._t0
        if dt > self._last:
            self._last = dt
        return self._last

    def elapsed_millis(self) -> int:
        return int(self.elapsed() * 1000.0) % WRAP_MS
