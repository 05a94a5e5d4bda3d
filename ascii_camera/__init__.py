"""ASCII camera streamer.

Capture frames from a webcam and render them as ASCII art directly in the terminal,
with contrast, brightness, resolution and character set adjustable while it runs.
"""
from .controller import CommandController, RenderParameters
from .glyphs import RAMPS, CharacterRamp, GlyphMapper
from .grid import GrayscaleGrid
from .processor import FrameProcessor
from .render_loop import LoopState, RenderLoop

__all__ = [
    "RAMPS",
    "CharacterRamp",
    "CommandController",
    "FrameProcessor",
    "GlyphMapper",
    "GrayscaleGrid",
    "LoopState",
    "RenderLoop",
    "RenderParameters",
]
