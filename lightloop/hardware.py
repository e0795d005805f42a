# derived from
# NeoPixel library strandtest example
# by Tony DiCola (tony@tonydicola.com)
#
# Opens the physical LED drivers. rpi_ws281x and spidev are imported only
# when a strip is actually opened, so the terminal preview runs anywhere.

from __future__ import annotations
import errno
import logging
import math
from typing import TYPE_CHECKING, Tuple

import numpy as np

from lightloop.errors import SinkError, StartupError
from lightloop.sinks import Sink, TerminalSink

if TYPE_CHECKING:
    from lightloop.config import RunConfig

log = logging.getLogger(__name__)

# WS281x strip configuration:
#LED_PIN = 18        # GPIO pin connected to the pixels (18 uses PWM!).
LED_PIN = 10          # GPIO pin connected to the pixels (10 uses SPI /dev/spidev0.0).
LED_FREQ_HZ = 800000  # LED signal frequency in hertz (usually 800khz)
LED_DMA = 10          # DMA channel to use for generating signal (try 10), ignored for SPI
LED_INVERT = False    # True to invert the signal (when using NPN transistor level shift)
PWM1_PINS = {13, 19, 41, 45, 53}  # these need channel 1, everything else channel 0

# APA102 over SPI:
SPI_BUS = "0.0"       # /dev/spidev<bus>.<device>
SPI_SPEED_HZ = 4000000

# errnos worth retrying at a higher level; anything else means the device is gone
_TRANSIENT = {errno.EAGAIN, errno.EBUSY, errno.EINTR, errno.ETIMEDOUT}

Gains = Tuple[float, float, float]


def white_balance(kelvin: int) -> Gains:
    """Per-channel gains (0..1) that tint white towards a color temperature.
    0 means no correction. Uses Tanner Helland's blackbody approximation."""
    if kelvin == 0:
        return (1.0, 1.0, 1.0)
    k = max(1000, min(40000, kelvin)) / 100.0

    if k <= 66:
        r = 255.0
    else:
        r = 329.698727446 * ((k - 60) ** -0.1332047592)

    if k <= 66:
        g = 99.4708025861 * math.log(k) - 161.1195681661
    else:
        g = 288.1221695283 * ((k - 60) ** -0.0755148492)

    if k >= 66:
        b = 255.0
    elif k <= 19:
        b = 0.0
    else:
        b = 138.5177312231 * math.log(k - 10) - 305.0447927307

    return tuple(max(0.0, min(255.0, c)) / 255.0 for c in (r, g, b))


def _scale(frame: np.ndarray, gains: np.ndarray) -> np.ndarray:
    return np.round(frame.astype(np.float32) * gains).astype(np.uint8)


class Ws281xSink(Sink):
    """WS281x strip driven through an rpi_ws281x PixelStrip.
    Brightness is handled by the strip itself; temperature by channel gains."""

    def __init__(self, strip, gains: Gains = (1.0, 1.0, 1.0)):
        self.strip = strip
        self.width = strip.numPixels()
        self.gains = np.array(gains, dtype=np.float32)
        self._closed = False

    def pixel_count(self) -> int:
        return self.width

    def write(self, data: bytes) -> None:
        frame = _scale(self._frame(data), self.gains).astype(np.uint32)
        packed = (frame[:, 0] << 16) | (frame[:, 1] << 8) | frame[:, 2]
        try:
            for i, color in enumerate(packed.tolist()):
                self.strip.setPixelColor(i, color)
            self.strip.show()
        except (RuntimeError, OSError) as e:
            raise SinkError(f"ws281x render failed: {e}") from e

    def blackout(self):
        """Turn every pixel off."""
        for i in range(self.width):
            self.strip.setPixelColor(i, 0)
        self.strip.show()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self.blackout()
        except (RuntimeError, OSError) as e:
            log.warning("ws281x blackout failed on close: %s", e)


class Apa102Sink(Sink):
    """
    APA102 strip on an SPI device (spidev.SpiDev or anything with writebytes2).

    Wire format: 4 zero bytes, then per LED 0xE0|brightness, B, G, R, then
    (N+15)//16 bytes of 0xFF to clock the data through the whole strip.
    """

    def __init__(self, spi, num_pixels: int, intensity: int = 255, gains: Gains = (1.0, 1.0, 1.0)):
        self.spi = spi
        self.n = int(num_pixels)
        self.gains = np.array(gains, dtype=np.float32) * (intensity / 255.0)
        end = (self.n + 15) // 16
        self._raw = np.zeros(4 + 4 * self.n + end, dtype=np.uint8)
        self._raw[4 + 4 * self.n:] = 0xFF
        self._leds = self._raw[4:4 + 4 * self.n].reshape(self.n, 4)
        self._leds[:, 0] = 0xFF  # 0xE0 | 31, full global brightness
        self._closed = False

    def pixel_count(self) -> int:
        return self.n

    def encode(self, data: bytes) -> np.ndarray:
        """Fill and return the reused SPI buffer for one frame."""
        rgb = _scale(self._frame(data), self.gains)
        self._leds[:, 1] = rgb[:, 2]
        self._leds[:, 2] = rgb[:, 1]
        self._leds[:, 3] = rgb[:, 0]
        return self._raw

    def write(self, data: bytes) -> None:
        buf = self.encode(data)
        try:
            self.spi.writebytes2(buf)
        except OSError as e:
            raise SinkError(f"spi write failed: {e}", recoverable=e.errno in _TRANSIENT) from e

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self.spi.writebytes2(self.encode(bytes(3 * self.n)))
        except OSError as e:
            log.warning("apa102 blackout failed on close: %s", e)
        finally:
            self.spi.close()


def open_ws281x(config: RunConfig) -> Ws281xSink:
    try:
        from rpi_ws281x import PixelStrip, ws
    except ImportError as e:
        raise StartupError("rpi_ws281x is not installed; use --terminal if you don't have LEDs") from e
    try:
        pin = int(config.bus) if config.bus else LED_PIN
    except ValueError:
        raise StartupError(f"ws281x bus must be a GPIO pin number, got '{config.bus}'") from None
    channel = 1 if pin in PWM1_PINS else 0
    strip = PixelStrip(config.num_pixels, pin, config.hz or LED_FREQ_HZ, LED_DMA, LED_INVERT,
                       config.intensity, channel, strip_type=ws.WS2811_STRIP_GRB)
    try:
        # Intialize the library (must be called once before other functions).
        strip.begin()
    except RuntimeError as e:
        raise StartupError(f"use --terminal if you don't have LEDs; error opening ws281x on GPIO {pin}: {e}") from e
    log.info("ws281x: %d pixels on GPIO %d (channel %d)", config.num_pixels, pin, channel)
    return Ws281xSink(strip, white_balance(config.temperature))


def open_apa102(config: RunConfig) -> Apa102Sink:
    try:
        import spidev
    except ImportError as e:
        raise StartupError("spidev is not installed; use --terminal if you don't have LEDs") from e
    name = config.bus or SPI_BUS
    try:
        bus, device = (int(x) for x in name.split("."))
    except ValueError:
        raise StartupError(f"spi bus must look like '0.0', got '{name}'") from None
    spi = spidev.SpiDev()
    try:
        spi.open(bus, device)
        spi.max_speed_hz = config.hz or SPI_SPEED_HZ
        spi.mode = 0
    except OSError as e:
        spi.close()
        if not config.bus:
            raise StartupError(f"use --terminal if you don't have LEDs; error opening SPI: {e}") from e
        raise StartupError(f"error opening SPI {name}: {e}") from e
    log.info("apa102: %d pixels on /dev/spidev%s at %d Hz", config.num_pixels, name, spi.max_speed_hz)
    return Apa102Sink(spi, config.num_pixels, config.intensity, white_balance(config.temperature))


def open_sink(config: RunConfig) -> Sink:
    """Build the sink the configuration asks for."""
    if config.terminal:
        return TerminalSink(config.num_pixels)
    if config.driver == "ws281x":
        return open_ws281x(config)
    if config.driver == "apa102":
        return open_apa102(config)
    raise StartupError(f"unknown driver '{config.driver}'")
