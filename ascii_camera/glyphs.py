from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .grid import GrayscaleGrid


@dataclass(frozen=True)
class CharacterRamp:
    """Glyphs ordered from darkest to brightest."""

    name: str
    glyphs: str

    def __post_init__(self) -> None:
        if not self.glyphs:
            raise ValueError(f"Ramp {self.name!r} must contain at least one glyph")

    def __len__(self) -> int:
        return len(self.glyphs)


SIMPLE_RAMP = CharacterRamp("simple", " .,:-=+*#%@")
EXTENDED_RAMP = CharacterRamp(
    "extended",
    " .'`^\",:;Il!i><~+_-?][}{1)(|/tfjrxnuvczXYUJCLQ0OZmwqpdbkhao*#MW&8%B@$",
)
BLOCK_RAMP = CharacterRamp("block", " ░▒▓█")

# Cycling order; index 0 is the default.
RAMPS: Tuple[CharacterRamp, ...] = (SIMPLE_RAMP, EXTENDED_RAMP, BLOCK_RAMP)


def glyph_index(value, ramp_length: int):
    """Map intensities in 0-255 to positions in a ramp of ``ramp_length`` glyphs.

    Accepts a scalar (returns an ``int``) or an array (returns an index array).
    """
    clipped = np.clip(np.asarray(value, dtype=np.int64), 0, 255)
    index = clipped * (ramp_length - 1) // 255
    return int(index) if index.ndim == 0 else index


class GlyphMapper:
    """Turns grayscale grids into text blocks and owns the ramp ordering."""

    def __init__(self, ramps: Tuple[CharacterRamp, ...] = RAMPS) -> None:
        if not ramps:
            raise ValueError("At least one character ramp is required")
        self.ramps = tuple(ramps)
        self._lookup = [np.array(list(ramp.glyphs)) for ramp in self.ramps]

    def ramp(self, index: int) -> CharacterRamp:
        return self.ramps[index % len(self.ramps)]

    def cycle_ramp(self, index: int) -> int:
        return (index + 1) % len(self.ramps)

    def reset_ramp(self) -> int:
        return 0

    def map(self, grid: GrayscaleGrid, ramp: CharacterRamp) -> str:
        if ramp in self.ramps:
            charset = self._lookup[self.ramps.index(ramp)]
        else:
            charset = np.array(list(ramp.glyphs))
        chars = charset[glyph_index(grid.pixels, len(charset))]
        return "\n".join("".join(row.tolist()) for row in chars)
