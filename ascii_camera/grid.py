from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np


@dataclass(frozen=True, eq=False)
class GrayscaleGrid:
    """Immutable rows x cols grid of 0-255 intensities, one per character cell."""

    pixels: np.ndarray

    def __post_init__(self) -> None:
        pixels = np.asarray(self.pixels)
        if pixels.ndim != 2:
            raise ValueError(f"Grid must be two-dimensional, got shape {pixels.shape}")
        if pixels.shape[0] == 0 or pixels.shape[1] == 0:
            raise ValueError("Grid must not be empty")
        if pixels.dtype != np.uint8:
            if pixels.size and (pixels.min() < 0 or pixels.max() > 255):
                raise ValueError("Grid intensities must be within 0-255")
            pixels = pixels.astype(np.uint8)
        else:
            pixels = pixels.copy()
        pixels.flags.writeable = False
        object.__setattr__(self, "pixels", pixels)

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]]) -> "GrayscaleGrid":
        if not rows:
            raise ValueError("Grid must not be empty")
        widths = {len(row) for row in rows}
        if len(widths) != 1:
            raise ValueError("Grid rows must all have the same length")
        return cls(np.array(rows, dtype=np.int64))

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def shape(self) -> Tuple[int, int]:
        """(width, height), the order the terminal box is described in."""
        return self.width, self.height

    def rows(self) -> List[List[int]]:
        return self.pixels.tolist()
