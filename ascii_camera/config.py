"""Runtime configuration and the application context shared by every component."""
from __future__ import annotations

import sys
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from loguru import logger

DEFAULT_DEVICE = 0
DEFAULT_CAPTURE_WIDTH = 640
DEFAULT_CAPTURE_HEIGHT = 480
DEFAULT_CAPTURE_FPS = 30.0
DEFAULT_RENDER_FPS = 15.0
DEFAULT_STARTUP_DELAY = 2.0
DEFAULT_FONT_SIZE = 14
LOG_FORMAT = "{time:HH:mm:ss.SSS} | {level: <8} | {name}:{function} - {message}"


@dataclass
class AppConfig:
    device: int = DEFAULT_DEVICE
    capture_width: int = DEFAULT_CAPTURE_WIDTH
    capture_height: int = DEFAULT_CAPTURE_HEIGHT
    capture_fps: float = DEFAULT_CAPTURE_FPS
    render_fps: float = DEFAULT_RENDER_FPS
    save_dir: Path = Path(".")
    save_png: bool = False
    font_path: Optional[Path] = None
    font_size: int = DEFAULT_FONT_SIZE
    startup_delay: float = DEFAULT_STARTUP_DELAY
    log_level: str = "WARNING"
    log_file: Optional[Path] = None
    list_cameras: bool = False

    @property
    def frame_period(self) -> float:
        """Seconds allotted to one render iteration."""
        if self.render_fps <= 0:
            return 0.0
        return 1.0 / self.render_fps


@dataclass
class AppContext:
    """Process-lifetime state handed to constructors instead of module globals.

    Holds the configuration, the cooperative shutdown flag observed by the
    render loop and the input reader, and the logger every component writes to.
    """

    config: AppConfig
    shutdown: threading.Event = field(default_factory=threading.Event)
    log: Any = field(default_factory=lambda: logger.bind(app="ascii-camera"))
    _handler_id: Optional[int] = None

    @classmethod
    def create(cls, config: AppConfig) -> "AppContext":
        logger.remove()
        sink: Any = str(config.log_file) if config.log_file else sys.stderr
        handler_id = logger.add(sink, level=config.log_level.upper(), format=LOG_FORMAT)
        return cls(config=config, _handler_id=handler_id)

    @property
    def running(self) -> bool:
        return not self.shutdown.is_set()

    def request_shutdown(self) -> None:
        self.shutdown.set()

    def close(self) -> None:
        if self._handler_id is not None:
            logger.remove(self._handler_id)
            self._handler_id = None
