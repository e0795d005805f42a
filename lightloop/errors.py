"""
Exception types for lightloop.

Startup problems (bad flags, bad pattern documents, devices that won't open)
are reported before the render loop starts. Sink failures end a running loop.
"""


class LightloopError(Exception):
    """Base class for all lightloop errors.

    Attributes:
        message: one-line, human readable description
        recoverable: True when the condition is likely transient
    """

    def __init__(self, message, recoverable=False):
        super().__init__(message)
        self.message = message
        self.recoverable = recoverable

    def __str__(self):
        return self.message


class StartupError(LightloopError):
    """Invalid configuration or a device that could not be opened."""


class PatternError(StartupError):
    """A pattern document that can't be decoded."""


class SinkError(LightloopError):
    """A sink failed to deliver a frame."""
