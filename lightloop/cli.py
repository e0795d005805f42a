"""
lightloop: play an animated pattern on an LED strip, or preview it on the terminal.

    lightloop --terminal -r '{"_type": "Rainbow", "speed": 0.2}'
    lightloop --driver ws281x --bus 18 -n 150 -f samples/sunset.json
"""

from __future__ import annotations
import argparse, asyncio, logging, signal, sys
from typing import List, Optional

from lightloop.config import DRIVERS, RunConfig
from lightloop.errors import LightloopError
from lightloop.hardware import open_sink
from lightloop.patterns import Pattern
from lightloop.render import RenderLoop

log = logging.getLogger("lightloop")


def build_parser() -> argparse.ArgumentParser:
    d = RunConfig()
    ap = argparse.ArgumentParser(prog="lightloop", description="Render an animated pattern onto an LED strip.")
    ap.add_argument("-v", "--verbose", action="store_true", help="verbose mode")
    ap.add_argument("--terminal", action="store_true", help="print the animation at the terminal")
    ap.add_argument("--driver", choices=DRIVERS, default=d.driver, help="LED driver when not using --terminal")
    ap.add_argument("--bus", default=d.bus, help="SPI bus '0.0' for apa102, GPIO pin for ws281x")
    ap.add_argument("--hz", type=int, default=d.hz, help="bus speed in Hz (0 = driver default)")
    ap.add_argument("-n", "--pixels", type=int, default=d.num_pixels, help="number of pixels on the strip")
    ap.add_argument("-l", "--intensity", type=int, default=d.intensity, help="light intensity [1-255]")
    ap.add_argument("-t", "--temperature", type=int, default=d.temperature,
                    help="light temperature in kelvin, 0 disables white balance")
    ap.add_argument("--fps", type=int, default=d.fps, help="frames per second [1-200]")
    ap.add_argument("-f", "--file", help="file to load the animation from")
    ap.add_argument("-r", "--raw", help="inline serialized animation")
    return ap


def config_from_args(args: argparse.Namespace) -> RunConfig:
    return RunConfig(
        fps=args.fps,
        num_pixels=args.pixels,
        intensity=args.intensity,
        temperature=args.temperature,
        driver=args.driver,
        bus=args.bus,
        hz=args.hz,
        pattern_file=args.file,
        pattern_raw=args.raw,
        terminal=args.terminal,
        verbose=args.verbose,
    )


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


async def run(config: RunConfig, pattern: Pattern) -> None:
    sink = open_sink(config)
    stop = asyncio.Event()
    aio = asyncio.get_running_loop()
    handled = []
    running = False
    try:
        loop = RenderLoop(sink, pattern, fps=config.fps)
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                aio.add_signal_handler(sig, stop.set)
            except NotImplementedError:
                # Ctrl-C still cancels the task, and the loop closes the sink
                log.debug("no signal handlers on this platform")
                break
            handled.append(sig)
        running = True
        await loop.run(stop)
    finally:
        for sig in handled:
            aio.remove_signal_handler(sig)
        # once running, the loop owns the sink
        if not running:
            sink.close()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)
    config = config_from_args(args)
    try:
        config.validate()
        pattern = config.load_pattern()
        asyncio.run(run(config, pattern))
    except LightloopError as e:
        log.debug("exiting on error", exc_info=True)
        print(f"lightloop: {e}.", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
