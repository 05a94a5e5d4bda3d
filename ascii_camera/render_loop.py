"""The real-time driver: capture, convert, display and pace frames."""
from __future__ import annotations

import enum
import time
from typing import Any, Callable, Optional, Tuple

from .capture import CaptureError, CaptureSource
from .config import AppContext
from .controller import CommandController, RenderParameters
from .glyphs import GlyphMapper
from .persistence import FrameMetadata
from .processor import FrameProcessor
from .terminal import DisplaySink

HINT_LINE = "Commands: +/- [/] c 1-4 s r q h"


class LoopState(enum.Enum):
    STOPPED = "stopped"
    RUNNING = "running"
    STOPPING = "stopping"


class FpsCounter:
    def __init__(self, clock: Callable[[], float] = time.perf_counter) -> None:
        self.clock = clock
        self.frame_count = 0
        self.started_at = clock()

    def reset(self) -> None:
        self.frame_count = 0
        self.started_at = self.clock()

    def tick(self) -> float:
        self.frame_count += 1
        return self.fps

    @property
    def fps(self) -> float:
        elapsed = self.clock() - self.started_at
        if elapsed <= 0:
            return 0.0
        return self.frame_count / elapsed


def format_status(message: str, fps: float) -> str:
    if message:
        return f">>> {message} | FPS: {fps:.1f}"
    return f"FPS: {fps:.1f} | {HINT_LINE}"


class RenderLoop:
    def __init__(
        self,
        context: AppContext,
        capture: CaptureSource,
        processor: FrameProcessor,
        mapper: GlyphMapper,
        controller: CommandController,
        display: DisplaySink,
        saver: Any,
        clock: Callable[[], float] = time.perf_counter,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.context = context
        self.log = context.log
        self.capture = capture
        self.processor = processor
        self.mapper = mapper
        self.controller = controller
        self.display = display
        self.saver = saver
        self.clock = clock
        self.sleep = sleep
        self.frame_period = context.config.frame_period
        self.state = LoopState.STOPPED
        self.fps = FpsCounter(clock)
        self.last_shape: Optional[Tuple[int, int]] = None
        self._closed = False

    def start(self) -> None:
        if self.state is not LoopState.STOPPED:
            return
        self.log.info("Starting render loop at {:.1f} ms per frame", self.frame_period * 1000)
        self.state = LoopState.RUNNING
        self.last_shape = None
        self.fps.reset()
        self.display.clear()

    def request_stop(self) -> None:
        self.context.request_shutdown()

    def run(self) -> None:
        self.start()
        try:
            while self.state is LoopState.RUNNING:
                if not self.context.running:
                    self.state = LoopState.STOPPING
                    break
                self.step()
        finally:
            self.shutdown()

    def step(self) -> bool:
        """Run one iteration. Returns True when a frame was written to the display."""
        started = self.clock()
        rendered = False
        try:
            self.controller.apply_pending()
            if self.context.running:
                rendered = self._render_frame(self.controller.snapshot())
        except CaptureError as exc:
            self.log.error("Capture source failed: {}", exc)
            self.state = LoopState.STOPPING
            self.context.request_shutdown()
            return False
        except Exception:
            self.log.exception("Error in render loop iteration")

        elapsed = self.clock() - started
        remaining = self.frame_period - elapsed
        if remaining > 0 and self.context.running:
            self.sleep(remaining)
        return rendered

    def _render_frame(self, params: RenderParameters) -> bool:
        frame = self.capture.grab()
        if frame is None:
            self.log.debug("No frame captured; skipping render")
            return False
        grid = self.processor.process(frame, params)
        if grid is None:
            return False

        if grid.shape != self.last_shape:
            self.display.clear()
            self.last_shape = grid.shape

        ramp = self.mapper.ramp(params.ramp_index)
        block = self.mapper.map(grid, ramp)
        self.display.write(block)

        if self.controller.should_save_frame():
            metadata = FrameMetadata(
                ramp_name=ramp.name,
                contrast=params.contrast,
                brightness=params.brightness,
                width=grid.width,
                height=grid.height,
            )
            self._save(block, metadata)

        fps = self.fps.tick()
        self.display.write_status_line(format_status(self.controller.get_status_message(), fps))
        return True

    def _save(self, block: str, metadata: FrameMetadata) -> None:
        if self.saver.save(block, metadata):
            path = getattr(self.saver, "last_path", None)
            self.controller.set_status(f"Frame saved to: {path}" if path else "Frame saved")
        else:
            self.controller.set_status("Error saving frame")

    def shutdown(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.state = LoopState.STOPPING
        self.log.info("Shutting down render loop")
        try:
            self.display.restore_baseline()
        finally:
            try:
                self.capture.close()
            finally:
                self.state = LoopState.STOPPED
                self.log.info("Shutdown complete")
