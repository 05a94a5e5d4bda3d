from __future__ import annotations

from typing import Any, List, Optional, Protocol

import cv2  # type: ignore
import numpy as np


class CaptureError(RuntimeError):
    """The capture source is closed or has lost its device."""


class CaptureSource(Protocol):
    def open(self, device_index: int, width: int, height: int, fps: float) -> bool:
        ...

    def grab(self) -> Optional[np.ndarray]:
        ...

    def close(self) -> None:
        ...


class CameraSource:
    """Webcam capture through OpenCV."""

    def __init__(self, log: Any) -> None:
        self.log = log
        self.capture: Optional[cv2.VideoCapture] = None
        self.frame_width = 0
        self.frame_height = 0

    def open(self, device_index: int, width: int, height: int, fps: float) -> bool:
        self.log.info(
            "Initializing camera {} with resolution {}x{} @ {}fps", device_index, width, height, fps
        )
        capture = cv2.VideoCapture(device_index)
        if not capture.isOpened():
            self.log.error("Could not open camera device {}", device_index)
            capture.release()
            return False
        capture.set(cv2.CAP_PROP_FRAME_WIDTH, width)
        capture.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
        capture.set(cv2.CAP_PROP_FPS, fps)

        ok, frame = capture.read()
        if not ok or frame is None:
            self.log.error("Failed to capture test frame from camera {}", device_index)
            capture.release()
            return False

        # The driver may ignore the requested size; trust what it delivers.
        self.frame_height, self.frame_width = frame.shape[:2]
        self.capture = capture
        self.log.info("Camera delivers {}x{} frames", self.frame_width, self.frame_height)
        return True

    def grab(self) -> Optional[np.ndarray]:
        if self.capture is None:
            raise CaptureError("Camera is not open")
        if not self.capture.isOpened():
            raise CaptureError("Camera device was lost")
        try:
            ok, frame = self.capture.read()
        except cv2.error as exc:
            self.log.warning("Failed to capture frame: {}", exc)
            return None
        if not ok or frame is None:
            self.log.debug("Captured empty frame")
            return None
        return frame

    def close(self) -> None:
        if self.capture is None:
            return
        capture, self.capture = self.capture, None
        capture.release()
        self.log.info("Camera released")


def list_cameras(log: Any, max_devices: int = 5) -> List[int]:
    """Probe device indices in order and stop at the first one that does not open."""
    found: List[int] = []
    log.info("Detecting available cameras...")
    for index in range(max_devices):
        capture = cv2.VideoCapture(index)
        try:
            if not capture.isOpened():
                break
            found.append(index)
            log.info("Camera {} detected", index)
        finally:
            capture.release()
    log.info("Found {} camera(s)", len(found))
    return found
