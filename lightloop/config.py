"""
Run configuration, validated before any device is opened.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from lightloop.errors import StartupError
from lightloop.patterns import Pattern, load_pattern, loads_pattern

DRIVERS = ("apa102", "ws281x")


@dataclass
class RunConfig:
    fps: int = 30
    num_pixels: int = 44
    intensity: int = 127        # 1..255
    temperature: int = 5000     # kelvin, 0 disables white balance
    driver: str = "apa102"
    bus: str = ""               # driver default when empty
    hz: int = 0                 # bus speed, driver default when 0
    pattern_file: Optional[str] = None
    pattern_raw: Optional[str] = None
    terminal: bool = False
    verbose: bool = False

    def validate(self) -> None:
        """Raise StartupError describing the first invalid setting."""
        if not 1 <= self.intensity <= 255:
            raise StartupError("intensity must be between 1 and 255")
        if not 0 <= self.temperature <= 65535:
            raise StartupError("temperature must be between 0 and 65535")
        if not 1 <= self.num_pixels <= 10000:
            raise StartupError("number of pixels must be between 1 and 10000")
        if not 1 <= self.fps <= 200:
            raise StartupError("fps must be between 1 and 200")
        if self.hz < 0:
            raise StartupError("bus speed can't be negative")
        if self.driver not in DRIVERS:
            raise StartupError(f"driver must be one of {', '.join(DRIVERS)}")
        if self.pattern_file and self.pattern_raw:
            raise StartupError("can't use both -f and -r")
        if not self.pattern_file and not self.pattern_raw:
            raise StartupError("use one of -f or -r; try -r '\"#0101ff\"'")

    def load_pattern(self) -> Pattern:
        if self.pattern_file:
            return load_pattern(self.pattern_file)
        return loads_pattern(self.pattern_raw)
