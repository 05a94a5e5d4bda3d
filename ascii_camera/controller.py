"""Command handling for the live rendering parameters.

Commands arrive as single-character tokens from the input reader thread and are
queued. The render loop drains the queue once per frame, so every parameter
change happens on the render thread and readers only ever see whole
``RenderParameters`` snapshots.
"""
from __future__ import annotations

import queue
import time
from dataclasses import dataclass, replace
from typing import Callable, Dict, Optional, Tuple

import numpy as np

from .config import AppContext
from .glyphs import GlyphMapper

CONTRAST_RANGE = (0.5, 3.0)
CONTRAST_STEP = 0.2
BRIGHTNESS_RANGE = (-100, 100)
BRIGHTNESS_STEP = 20
DEFAULT_DIMENSIONS = (80, 24)
STATUS_TTL = 3.0

RESOLUTION_PRESETS: Dict[str, Tuple[str, int, int]] = {
    "1": ("Low", 40, 15),
    "2": ("Medium", 80, 24),
    "3": ("High", 120, 40),
    "4": ("Ultra", 160, 50),
}

HELP_TEXT = "Controls: +/- contrast, [/] brightness, c charset, 1-4 resolution, s save, r reset, q quit"


@dataclass(frozen=True)
class RenderParameters:
    contrast: float = 1.0
    brightness: int = 0
    target_width: int = DEFAULT_DIMENSIONS[0]
    target_height: int = DEFAULT_DIMENSIONS[1]
    ramp_index: int = 0


@dataclass(frozen=True)
class StatusMessage:
    text: str
    timestamp: float


class CommandController:
    """Owns the rendering parameters and applies queued commands to them."""

    def __init__(
        self,
        context: AppContext,
        mapper: GlyphMapper,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.context = context
        self.log = context.log
        self.mapper = mapper
        self.clock = clock
        self._queue: "queue.Queue[str]" = queue.Queue()
        self._params = RenderParameters()
        self._status: Optional[StatusMessage] = None
        self._save_requested = False

    def submit(self, token: str) -> None:
        token = token.strip()
        if token:
            self._queue.put(token[0])

    def snapshot(self) -> RenderParameters:
        return self._params

    def apply_pending(self) -> int:
        pending = self._queue.qsize()
        applied = 0
        while applied < pending:
            try:
                token = self._queue.get_nowait()
            except queue.Empty:
                break
            self._apply(token)
            applied += 1
        return applied

    def should_save_frame(self) -> bool:
        if self._save_requested:
            self._save_requested = False
            return True
        return False

    def set_status(self, text: str) -> None:
        self._status = StatusMessage(text, self.clock())

    def get_status_message(self) -> str:
        status = self._status
        if status is None or self.clock() - status.timestamp >= STATUS_TTL:
            return ""
        return status.text

    def adjust_contrast(self, delta: float) -> float:
        low, high = CONTRAST_RANGE
        value = round(float(np.clip(self._params.contrast + delta, low, high)), 2)
        self._params = replace(self._params, contrast=value)
        self.log.info("Contrast adjusted to {}", value)
        return value

    def adjust_brightness(self, delta: int) -> int:
        low, high = BRIGHTNESS_RANGE
        value = int(np.clip(self._params.brightness + delta, low, high))
        self._params = replace(self._params, brightness=value)
        self.log.info("Brightness adjusted to {}", value)
        return value

    def set_target_dimensions(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Target dimensions must be positive, got {width}x{height}")
        self._params = replace(self._params, target_width=width, target_height=height)
        self.log.info("Target dimensions set to {}x{}", width, height)

    def cycle_ramp(self) -> str:
        index = self.mapper.cycle_ramp(self._params.ramp_index)
        self._params = replace(self._params, ramp_index=index)
        name = self.mapper.ramp(index).name
        self.log.info("Switched to {} charset", name)
        return name

    def reset(self) -> None:
        self._params = RenderParameters(ramp_index=self.mapper.reset_ramp())
        self.log.info("Settings reset")

    def discard_pending(self) -> int:
        discarded = 0
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                return discarded
            discarded += 1

    def _apply(self, token: str) -> None:
        key = token.lower()
        if key == "+":
            message = f"Contrast increased ({self.adjust_contrast(CONTRAST_STEP):.1f})"
        elif key == "-":
            message = f"Contrast decreased ({self.adjust_contrast(-CONTRAST_STEP):.1f})"
        elif key == "[":
            message = f"Brightness decreased ({self.adjust_brightness(-BRIGHTNESS_STEP)})"
        elif key == "]":
            message = f"Brightness increased ({self.adjust_brightness(BRIGHTNESS_STEP)})"
        elif key == "c":
            message = f"Character set: {self.cycle_ramp()}"
        elif key in RESOLUTION_PRESETS:
            label, width, height = RESOLUTION_PRESETS[key]
            dropped = self.discard_pending()
            if dropped:
                self.log.debug("Dropped {} queued commands after resolution change", dropped)
            self.set_target_dimensions(width, height)
            message = f"{label} resolution ({width}x{height})"
        elif key == "s":
            self._save_requested = True
            message = "Saving next frame..."
        elif key == "r":
            self.reset()
            message = "Settings reset"
        elif key in ("h", "?"):
            message = HELP_TEXT
        elif key == "q":
            self.log.info("Quit command received")
            self.context.request_shutdown()
            message = "Quitting..."
        else:
            self.log.debug("Unknown command {!r}", token)
            message = f"Unknown command: {token}"
        self.set_status(message)
