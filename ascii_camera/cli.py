from __future__ import annotations

import argparse
import signal
import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from .capture import CameraSource, CaptureSource, list_cameras
from .config import (
    DEFAULT_CAPTURE_FPS,
    DEFAULT_CAPTURE_HEIGHT,
    DEFAULT_CAPTURE_WIDTH,
    DEFAULT_DEVICE,
    DEFAULT_FONT_SIZE,
    DEFAULT_RENDER_FPS,
    DEFAULT_STARTUP_DELAY,
    AppConfig,
    AppContext,
)
from .controller import CommandController
from .glyphs import GlyphMapper
from .input_reader import LineCommandReader
from .persistence import FrameSaver, resolve_font
from .processor import FrameProcessor
from .render_loop import RenderLoop
from .terminal import TerminalDisplay

CONTROLS_BANNER = (
    "=== CONTROLS (type letter + Enter) ===\n"
    "  +/- : Contrast     [/] : Brightness\n"
    "  c   : Charset      1-4 : Resolution\n"
    "  s   : Save frame   r   : Reset\n"
    "  q   : Quit         h   : Help\n"
    "======================================="
)


def parse_args(argv: Optional[List[str]] = None) -> AppConfig:
    parser = argparse.ArgumentParser(
        description="Stream the webcam feed as ASCII art in your terminal."
    )
    parser.add_argument(
        "--device",
        type=int,
        default=DEFAULT_DEVICE,
        help="Zero-based camera index passed to OpenCV (default: 0).",
    )
    parser.add_argument(
        "--capture-width",
        type=int,
        default=DEFAULT_CAPTURE_WIDTH,
        help="Requested capture width in pixels (default: 640).",
    )
    parser.add_argument(
        "--capture-height",
        type=int,
        default=DEFAULT_CAPTURE_HEIGHT,
        help="Requested capture height in pixels (default: 480).",
    )
    parser.add_argument(
        "--capture-fps",
        type=float,
        default=DEFAULT_CAPTURE_FPS,
        help="Requested camera frame rate (default: 30).",
    )
    parser.add_argument(
        "--fps",
        type=float,
        default=DEFAULT_RENDER_FPS,
        help="Render refresh rate in frames per second (<=0 disables throttling, default: 15).",
    )
    parser.add_argument(
        "--save-dir",
        type=Path,
        default=Path("."),
        help="Directory where saved frames are written (default: current directory).",
    )
    parser.add_argument(
        "--save-png",
        action="store_true",
        help="Also write a PNG snapshot next to each saved text frame.",
    )
    parser.add_argument(
        "--font-path",
        type=Path,
        default=None,
        help="Optional TTF font for PNG snapshots (monospace strongly recommended).",
    )
    parser.add_argument(
        "--font-size",
        type=int,
        default=DEFAULT_FONT_SIZE,
        help="Font size (pixels) for PNG snapshots (default: 14).",
    )
    parser.add_argument(
        "--startup-delay",
        type=float,
        default=DEFAULT_STARTUP_DELAY,
        help="Seconds to show the controls before rendering starts (default: 2).",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help="Minimum log level (default: WARNING).",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Write logs to this file instead of stderr.",
    )
    parser.add_argument(
        "--list-cameras",
        action="store_true",
        help="Print the indices of detected cameras and exit.",
    )
    args = parser.parse_args(argv)
    return AppConfig(
        device=args.device,
        capture_width=args.capture_width,
        capture_height=args.capture_height,
        capture_fps=args.capture_fps,
        render_fps=args.fps,
        save_dir=args.save_dir,
        save_png=args.save_png,
        font_path=args.font_path,
        font_size=args.font_size,
        startup_delay=args.startup_delay,
        log_level=args.log_level,
        log_file=args.log_file,
        list_cameras=args.list_cameras,
    )


def _install_signal_handlers(loop: RenderLoop) -> Dict[int, Any]:
    def _handle(signum, _frame) -> None:
        loop.log.info("Received signal {}", signum)
        loop.request_stop()

    previous: Dict[int, Any] = {}
    for name in ("SIGINT", "SIGTERM"):
        signum = getattr(signal, name, None)
        if signum is not None:
            previous[signum] = signal.signal(signum, _handle)
    return previous


def _restore_signal_handlers(previous: Dict[int, Any]) -> None:
    for signum, handler in previous.items():
        signal.signal(signum, handler)


def main(argv: Optional[List[str]] = None) -> int:
    config = parse_args(argv)
    context = AppContext.create(config)
    try:
        return run(context)
    finally:
        context.close()


def run(context: AppContext, capture: Optional[CaptureSource] = None) -> int:
    config = context.config
    if config.list_cameras:
        cameras = list_cameras(context.log)
        if cameras:
            print("Detected cameras: " + ", ".join(str(index) for index in cameras))
        else:
            print("No cameras detected.")
        return 0

    font = None
    if config.save_png:
        try:
            font = resolve_font(config.font_path, config.font_size)
        except RuntimeError as exc:
            print(exc, file=sys.stderr)
            return 1

    capture = capture if capture is not None else CameraSource(context.log)
    if not capture.open(config.device, config.capture_width, config.capture_height, config.capture_fps):
        print(f"Could not open camera device {config.device}.", file=sys.stderr)
        return 1

    mapper = GlyphMapper()
    controller = CommandController(context, mapper)
    display = TerminalDisplay(context.log)
    saver = FrameSaver(context.log, config.save_dir, save_png=config.save_png, font=font)
    loop = RenderLoop(
        context,
        capture,
        FrameProcessor(context.log),
        mapper,
        controller,
        display,
        saver,
    )
    reader = LineCommandReader(context, controller)
    previous_handlers: Dict[int, Any] = {}

    try:
        print(CONTROLS_BANNER, file=sys.stderr)
        if config.startup_delay > 0:
            print(f"\nStarting in {config.startup_delay:g} seconds...\n", file=sys.stderr)
            time.sleep(config.startup_delay)
        reader.start()
        previous_handlers = _install_signal_handlers(loop)
        loop.run()
    except KeyboardInterrupt:
        return 0
    finally:
        reader.stop()
        loop.shutdown()
        _restore_signal_handlers(previous_handlers)
    return 0
