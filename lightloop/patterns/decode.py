# -------------------------------- lightloop/patterns/decode.py --------------------------------
#
# JSON pattern documents -> Pattern trees.
#
#   "#ff0000"                                   solid color
#   "Rainbow"                                   registered type, default parameters
#   {"_type": "Gradient", "left": "#ff0000", "right": "#0000ff"}
#
# Child patterns are decoded recursively wherever a builder asks for one.

from __future__ import annotations
import json
import math
import logging
from pathlib import Path
from typing import Any, List

from lightloop.errors import PatternError
from lightloop.frame import Color
from lightloop.patterns.base import REGISTRY, Pattern, pattern_type
from lightloop.patterns.image import ImageRows
from lightloop.patterns.library import (
    Breathe, Cycle, Frame, Gradient, Rainbow, Repeated, Rotate, SolidColor, Transition,
)

log = logging.getLogger(__name__)


class DecodeContext:
    """Handed to every builder; resolves nested values and relative paths."""

    def __init__(self, base_dir: Path | None = None):
        self.base_dir = base_dir

    def pattern(self, obj: Any, field: str = "pattern") -> Pattern:
        if isinstance(obj, str):
            if obj.startswith("#"):
                return SolidColor(self.color(obj, field))
            return self._build(obj, {})
        if isinstance(obj, dict):
            params = dict(obj)
            name = params.pop("_type", None)
            if not isinstance(name, str):
                raise PatternError(f"{field}: object needs a \"_type\" string")
            return self._build(name, params)
        raise PatternError(f"{field}: expected a pattern, got {type(obj).__name__}")

    def patterns(self, obj: Any, field: str) -> List[Pattern]:
        if not isinstance(obj, list):
            raise PatternError(f"{field}: expected a list of patterns")
        return [self.pattern(o, f"{field}[{i}]") for i, o in enumerate(obj)]

    def color(self, obj: Any, field: str = "color") -> Color:
        """A "#rrggbb" string, or {"h": .., "s": .., "v": ..} with each part in 0..1."""
        if isinstance(obj, dict):
            if set(obj) != {"h", "s", "v"}:
                raise PatternError(f"{field}: an HSV color needs exactly \"h\", \"s\" and \"v\"")
            h, s, v = (self.number(obj[k], f"{field}.{k}") for k in "hsv")
            if not (0.0 <= s <= 1.0 and 0.0 <= v <= 1.0):
                raise PatternError(f"{field}: \"s\" and \"v\" must be between 0 and 1")
            return Color.from_hsv(h, s, v)
        if not isinstance(obj, str):
            raise PatternError(f"{field}: expected a \"#rrggbb\" string")
        try:
            return Color.from_hex(obj)
        except ValueError as e:
            raise PatternError(f"{field}: {e}") from e

    def number(self, obj: Any, field: str) -> float:
        if isinstance(obj, bool) or not isinstance(obj, (int, float)):
            raise PatternError(f"{field}: expected a number")
        try:
            value = float(obj)
        except OverflowError:
            value = math.inf
        if not math.isfinite(value):
            raise PatternError(f"{field}: expected a finite number")
        return value

    def integer(self, obj: Any, field: str) -> int:
        if isinstance(obj, bool) or not isinstance(obj, int):
            raise PatternError(f"{field}: expected an integer")
        return obj

    def path(self, obj: Any, field: str) -> Path:
        if not isinstance(obj, str) or not obj:
            raise PatternError(f"{field}: expected a file path")
        p = Path(obj)
        if not p.is_absolute() and self.base_dir is not None:
            p = self.base_dir / p
        return p

    def _build(self, name: str, params: dict) -> Pattern:
        fn = REGISTRY.get(name)
        if fn is None:
            raise PatternError(f"unknown pattern type '{name}'. Expected one of: {', '.join(sorted(REGISTRY))}")
        try:
            return fn(self, **params)
        except TypeError as e:
            raise PatternError(f"{name}: {e}") from e


def decode_pattern(obj: Any, base_dir: Path | None = None) -> Pattern:
    """Build a Pattern from an already parsed JSON value."""
    return DecodeContext(base_dir).pattern(obj)

def loads_pattern(text: str, base_dir: Path | None = None) -> Pattern:
    try:
        obj = json.loads(text)
    except json.JSONDecodeError as e:
        raise PatternError(f"invalid pattern JSON: {e}") from e
    return decode_pattern(obj, base_dir)

def load_pattern(path) -> Pattern:
    """Read a pattern document from a file; relative image paths resolve next to it."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise PatternError(f"can't read pattern file {str(path)!r}: {e.strerror or e}") from e
    except UnicodeDecodeError as e:
        raise PatternError(f"can't read pattern file {str(path)!r}: not UTF-8 text ({e.reason} at byte {e.start})") from e
    log.debug("loaded pattern from %s (%d bytes)", path, len(text))
    return loads_pattern(text, base_dir=path.parent)


# ---------------------------------------------------------------------------
# builders

@pattern_type("SolidColor")
def solid_color(ctx: DecodeContext, *, color: Any = "#000000") -> Pattern:
    return SolidColor(ctx.color(color))

@pattern_type("Frame")
def frame(ctx: DecodeContext, *, colors: Any) -> Pattern:
    if not isinstance(colors, list):
        raise PatternError("colors: expected a list of \"#rrggbb\" strings")
    return Frame([ctx.color(c, f"colors[{i}]") for i, c in enumerate(colors)])

@pattern_type("Rainbow")
def rainbow(ctx: DecodeContext, *, speed: Any = 0.0, saturation: Any = 1.0, value: Any = 1.0) -> Pattern:
    return Rainbow(speed=ctx.number(speed, "speed"),
                   saturation=ctx.number(saturation, "saturation"),
                   value=ctx.number(value, "value"))

@pattern_type("Gradient")
def gradient(ctx: DecodeContext, *, left: Any, right: Any) -> Pattern:
    return Gradient(ctx.color(left, "left"), ctx.color(right, "right"))

@pattern_type("Repeated")
def repeated(ctx: DecodeContext, *, child: Any, every: Any) -> Pattern:
    return Repeated(ctx.pattern(child, "child"), ctx.integer(every, "every"))

@pattern_type("Rotate")
def rotate(ctx: DecodeContext, *, child: Any, pixels_per_second: Any = 1.0) -> Pattern:
    return Rotate(ctx.pattern(child, "child"), ctx.number(pixels_per_second, "pixels_per_second"))

@pattern_type("Cycle")
def cycle(ctx: DecodeContext, *, children: Any, duration_ms: Any = 1000) -> Pattern:
    return Cycle(ctx.patterns(children, "children"), ctx.integer(duration_ms, "duration_ms"))

@pattern_type("Transition")
def transition(ctx: DecodeContext, *, before: Any, after: Any,
               offset_ms: Any = 0, duration_ms: Any = 1000) -> Pattern:
    return Transition(ctx.pattern(before, "before"),
                      ctx.pattern(after, "after"),
                      offset_ms=ctx.integer(offset_ms, "offset_ms"),
                      duration_ms=ctx.integer(duration_ms, "duration_ms"))

@pattern_type("Breathe")
def breathe(ctx: DecodeContext, *, child: Any, period_ms: Any = 4000, floor: Any = 0.0) -> Pattern:
    return Breathe(ctx.pattern(child, "child"),
                   period_ms=ctx.integer(period_ms, "period_ms"),
                   floor=ctx.number(floor, "floor"))

@pattern_type("Image")
def image(ctx: DecodeContext, *, path: Any, row_ms: Any = 50) -> Pattern:
    return ImageRows.from_file(ctx.path(path, "path"), row_ms=ctx.integer(row_ms, "row_ms"))
