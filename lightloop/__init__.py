"""Time-driven rendering of animated patterns onto addressable LED strips."""

from lightloop.clock import Clock
from lightloop.errors import LightloopError, PatternError, SinkError, StartupError
from lightloop.frame import BLACK, Color, FrameBuffer
from lightloop.render import LoopState, RenderLoop, Ticker
from lightloop.sinks import Sink, TerminalSink

__version__ = "0.3.0"

__all__ = [
    "Clock",
    "Color",
    "BLACK",
    "FrameBuffer",
    "LoopState",
    "RenderLoop",
    "Ticker",
    "Sink",
    "TerminalSink",
    "LightloopError",
    "StartupError",
    "PatternError",
    "SinkError",
]
