from __future__ import annotations

import os
import select
import sys
import threading
from typing import Optional, TextIO

from .config import AppContext
from .controller import CommandController

POLL_INTERVAL = 0.1
READ_SIZE = 4096


def _is_selectable(stream: TextIO) -> bool:
    if sys.platform == "win32":
        return False
    try:
        stream.fileno()
    except (AttributeError, OSError, ValueError):
        return False
    return True


class LineCommandReader:
    """Background thread turning typed lines into command tokens.

    Each non-blank line contributes its first character. On POSIX streams the
    reader waits with ``select`` so it notices shutdown between lines; other
    streams block in ``readline`` and the daemon thread is abandoned at exit.
    """

    def __init__(
        self,
        context: AppContext,
        controller: CommandController,
        stream: Optional[TextIO] = None,
    ) -> None:
        self.context = context
        self.log = context.log
        self.controller = controller
        self.stream = stream if stream is not None else sys.stdin
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._thread = threading.Thread(target=self._run, daemon=True, name="Keyboard-Input")
        self._thread.start()
        self.log.info("Keyboard handler started")

    def stop(self, timeout: float = 1.0) -> None:
        self.context.request_shutdown()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    @property
    def alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _run(self) -> None:
        if _is_selectable(self.stream):
            self._read_descriptor(self.stream.fileno())
        else:
            self._read_lines()

    def _submit_line(self, line: str) -> None:
        token = line.strip()
        if token:
            self.controller.submit(token[0].lower())

    def _read_lines(self) -> None:
        while self.context.running:
            line = self.stream.readline()
            if not line:
                self.log.info("Input stream closed")
                return
            self._submit_line(line)

    def _read_descriptor(self, fd: int) -> None:
        # Raw reads so no complete line is left behind in a userspace buffer
        # while select waits on an empty descriptor.
        pending = b""
        while self.context.running:
            try:
                readable, _, _ = select.select([fd], [], [], POLL_INTERVAL)
                if not readable:
                    continue
                chunk = os.read(fd, READ_SIZE)
            except (OSError, ValueError) as exc:
                self.log.warning("Input stream is no longer readable: {}", exc)
                return
            if not chunk:
                if pending:
                    self._submit_line(pending.decode("utf-8", errors="replace"))
                self.log.info("Input stream closed")
                return
            *lines, pending = (pending + chunk).split(b"\n")
            for line in lines:
                self._submit_line(line.decode("utf-8", errors="replace"))
