"""Frame preprocessing: grayscale, terminal-shaped resize, contrast and brightness."""
from __future__ import annotations

from typing import Any, Optional, Tuple

import cv2  # type: ignore
import numpy as np

from .grid import GrayscaleGrid

# Terminal cells are roughly twice as tall as they are wide.
CELL_ASPECT = 2.0


def compute_output_size(
    source_width: int, source_height: int, target_width: int, target_height: int
) -> Tuple[int, int]:
    """Largest (width, height) in cells that fits the target box and keeps the image's proportions."""
    if source_width <= 0 or source_height <= 0:
        raise ValueError(f"Invalid source size {source_width}x{source_height}")
    # One division over integer products, so an exact half stays exact.
    if source_width * target_height * CELL_ASPECT > target_width * source_height:
        width = float(target_width)
        height = target_width * source_height / (source_width * CELL_ASPECT)
    else:
        height = float(target_height)
        width = target_height * source_width * CELL_ASPECT / source_height
    return max(1, int(round(width))), max(1, int(round(height)))


def to_grayscale(frame: np.ndarray) -> np.ndarray:
    if frame.dtype != np.uint8:
        frame = np.clip(frame, 0, 255).astype(np.uint8)
    if frame.ndim == 2:
        return frame
    channels = frame.shape[2]
    if channels == 1:
        return np.ascontiguousarray(frame[:, :, 0])
    if channels == 3:
        return cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)
    if channels == 4:
        return cv2.cvtColor(frame, cv2.COLOR_BGRA2GRAY)
    raise ValueError(f"Unsupported channel count: {channels}")


def adjust_contrast_brightness(gray: np.ndarray, contrast: float, brightness: int) -> np.ndarray:
    adjusted = np.rint(gray.astype(np.float32) * contrast + brightness)
    return np.clip(adjusted, 0, 255).astype(np.uint8)


class FrameProcessor:
    """Resize and convert frames to grayscale for ASCII rendering."""

    def __init__(self, log: Any) -> None:
        self.log = log

    def process(self, raw_frame: Optional[np.ndarray], params: Any) -> Optional[GrayscaleGrid]:
        if raw_frame is None:
            self.log.debug("No frame to process")
            return None
        frame = np.asarray(raw_frame)
        if frame.size == 0 or frame.ndim not in (2, 3):
            self.log.debug("Skipping empty frame with shape {}", frame.shape)
            return None

        gray = to_grayscale(frame)
        source_height, source_width = gray.shape
        width, height = compute_output_size(
            source_width, source_height, params.target_width, params.target_height
        )
        if (width, height) != (source_width, source_height):
            interpolation = cv2.INTER_AREA if width < source_width else cv2.INTER_LINEAR
            gray = cv2.resize(gray, (width, height), interpolation=interpolation)
        adjusted = adjust_contrast_brightness(gray, params.contrast, params.brightness)
        return GrayscaleGrid(adjusted)
