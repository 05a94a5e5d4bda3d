from __future__ import annotations

import os
import sys
from typing import Any, Optional, Protocol, TextIO

CLEAR_SCREEN = "\x1b[2J"
CLEAR_SCROLLBACK = "\x1b[3J"
CLEAR_BELOW = "\x1b[J"
CLEAR_LINE = "\x1b[K"
CURSOR_HOME = "\x1b[H"
HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"
RESET = "\x1b[0m"
FALLBACK_CLEAR_LINES = 50


class DisplaySink(Protocol):
    def clear(self) -> None:
        ...

    def write(self, text: str) -> None:
        ...

    def write_status_line(self, text: str) -> None:
        ...

    def restore_baseline(self) -> None:
        ...


def supports_ansi(stream: TextIO) -> bool:
    term = os.environ.get("TERM")
    isatty = getattr(stream, "isatty", None)
    return bool(term) and term != "dumb" and callable(isatty) and isatty()


class TerminalDisplay:
    """Writes frames to a terminal. Not thread-safe; use from the render thread only."""

    def __init__(self, log: Any, stream: Optional[TextIO] = None, use_ansi: Optional[bool] = None) -> None:
        self.log = log
        self.stream = stream if stream is not None else sys.stdout
        self.use_ansi = supports_ansi(self.stream) if use_ansi is None else use_ansi
        self.frame_count = 0
        self._cursor_hidden = False
        self._restored = False

    def _emit(self, *parts: str) -> None:
        self.stream.write("".join(parts))
        self.stream.flush()

    def clear(self) -> None:
        if self.use_ansi:
            if not self._cursor_hidden:
                self._cursor_hidden = True
                self._emit(HIDE_CURSOR)
            self._emit(CLEAR_SCREEN, CLEAR_SCROLLBACK, CURSOR_HOME)
        else:
            self._emit("\n" * FALLBACK_CLEAR_LINES)
        self._restored = False

    def write(self, text: str) -> None:
        if not text:
            return
        if self.use_ansi:
            self._emit(CURSOR_HOME, text, RESET, CLEAR_BELOW)
        else:
            self._emit(text)
        self.frame_count += 1

    def write_status_line(self, text: str) -> None:
        if self.use_ansi:
            self._emit("\n", text, CLEAR_LINE)
        else:
            self._emit("\n", text, "\n")

    def restore_baseline(self) -> None:
        if self._restored:
            return
        self._restored = True
        if self.use_ansi:
            self._cursor_hidden = False
            self._emit(SHOW_CURSOR, RESET, CLEAR_SCREEN, CURSOR_HOME)
        self.log.debug("Terminal restored after {} frames", self.frame_count)
