"""
FrameBuffer holds the colors of every pixel on the strip for one tick,
and packs them into the byte layout handed to a sink.
"""

from __future__ import annotations
import colorsys
from typing import NamedTuple, Sequence, Union
import numpy as np

RGBu8 = np.ndarray  # [N,3] uint8


class Color(NamedTuple):
    """8-bit RGB color."""
    r: int
    g: int
    b: int

    @classmethod
    def from_hex(cls, text: str) -> "Color":
        """Parse "#rrggbb" (the leading # is optional)."""
        s = text[1:] if text.startswith("#") else text
        if len(s) != 6:
            raise ValueError(f"invalid color {text!r}, expected #rrggbb")
        return cls(int(s[0:2], 16), int(s[2:4], 16), int(s[4:6], 16))

    @classmethod
    def from_hsv(cls, h: float, s: float, v: float) -> "Color":
        """Hue in turns (wraps), saturation and value 0..1."""
        r, g, b = colorsys.hsv_to_rgb(h % 1.0, s, v)
        return cls(*(int(round(c * 255)) for c in (r, g, b)))


BLACK = Color(0, 0, 0)

ColorLike = Union[Color, Sequence[int]]


class FrameBuffer:
    """Fixed-length sequence of pixel colors, index i is physical pixel i."""

    def __init__(self, num_pixels: int):
        n = int(num_pixels)
        if n < 1:
            raise ValueError(f"frame needs at least one pixel, got {num_pixels}")
        self.width = n
        self._px: RGBu8 = np.zeros((n, 3), dtype=np.uint8)

    @property
    def pixels(self) -> RGBu8:
        """The underlying [N,3] uint8 array, for vectorized writes."""
        return self._px

    def fill(self, color: ColorLike) -> None:
        self._px[...] = tuple(color)

    def __len__(self):
        return self.width

    def __getitem__(self, key):
        """
        Get pixel color(s).
        Supports single index and slice notation.
        """
        if isinstance(key, int):
            if key < 0:
                key = self.width + key
            if key < 0 or key >= self.width:
                raise IndexError(f"Pixel index {key} out of range")
            r, g, b = self._px[key]
            return Color(int(r), int(g), int(b))
        elif isinstance(key, slice):
            return [Color(int(r), int(g), int(b)) for r, g, b in self._px[key]]
        else:
            raise TypeError(f"Invalid index type: {type(key)}")

    def __setitem__(self, key, color):
        """
        Set pixel color(s).

        Examples:
            frame[0] = Color(255, 0, 0)  # Set single pixel
            frame[10:20] = (0, 255, 0)   # Set range of pixels
            frame[::2] = Color(0, 0, 255)  # Set every other pixel
        """
        if isinstance(key, int):
            if key < 0:
                key = self.width + key
            if key < 0 or key >= self.width:
                raise IndexError(f"Pixel index {key} out of range")
            self._px[key] = tuple(color)
        elif isinstance(key, slice):
            self._px[key] = tuple(color)
        else:
            raise TypeError(f"Invalid index type: {type(key)}")

    def to_bytes(self) -> bytes:
        """R,G,B per pixel in ascending pixel order, 3*N bytes."""
        return self._px.tobytes()

    def to_rgb(self, out: bytearray) -> None:
        """Pack into a reused transmission buffer of exactly 3*N bytes."""
        if len(out) != 3 * self.width:
            raise ValueError(f"transmission buffer is {len(out)} bytes, need {3 * self.width}")
        np.frombuffer(out, dtype=np.uint8).reshape(self.width, 3)[...] = self._px
