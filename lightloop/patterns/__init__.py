from lightloop.patterns.base import REGISTRY, Pattern, pattern_type
from lightloop.patterns.library import (
    Breathe, Cycle, Frame, Gradient, Rainbow, Repeated, Rotate, SolidColor, Transition,
)
from lightloop.patterns.image import ImageRows
from lightloop.patterns.decode import decode_pattern, load_pattern, loads_pattern

__all__ = [
    "REGISTRY",
    "Pattern",
    "pattern_type",
    "SolidColor",
    "Frame",
    "Rainbow",
    "Gradient",
    "Repeated",
    "Rotate",
    "Cycle",
    "Transition",
    "Breathe",
    "ImageRows",
    "decode_pattern",
    "load_pattern",
    "loads_pattern",
]
