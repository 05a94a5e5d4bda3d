"""Saving rendered frames to disk as text, optionally with a PNG snapshot."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont  # type: ignore

SEPARATOR = "====================================="
FILENAME_PREFIX = "ascii_art_"
TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"


@dataclass(frozen=True)
class FrameMetadata:
    ramp_name: str
    contrast: float
    brightness: int
    width: int
    height: int


def resolve_font(font_path: Optional[Path], font_size: int) -> ImageFont.ImageFont:
    if font_path:
        try:
            return ImageFont.truetype(str(font_path), font_size)
        except OSError as exc:
            raise RuntimeError(f"Could not load font at {font_path}: {exc}") from exc
    return ImageFont.load_default()


def _text_size(font: ImageFont.ImageFont, text: str) -> Tuple[int, int]:
    bbox = font.getbbox(text)
    return bbox[2] - bbox[0], bbox[3] - bbox[1]


def render_text_block_to_image(
    text_block: str,
    font: ImageFont.ImageFont,
    background: Tuple[int, int, int] = (0, 0, 0),
    foreground: Tuple[int, int, int] = (255, 255, 255),
) -> Image.Image:
    lines = text_block.split("\n")
    rows = len(lines)
    cols = max((len(line) for line in lines), default=0)
    if rows == 0 or cols == 0:
        return Image.new("RGB", (16, 16), background)

    char_width, char_height = _text_size(font, "M")
    char_width = max(1, char_width)
    char_height = max(1, char_height)
    spacing = max(2, char_height // 6)
    margin_x = max(4, char_width // 2)
    margin_y = max(4, spacing)

    img_width = margin_x * 2 + char_width * cols
    img_height = margin_y * 2 + rows * (char_height + spacing)
    image = Image.new("RGB", (img_width, img_height), background)
    draw = ImageDraw.Draw(image)
    for row, line in enumerate(lines):
        y = margin_y + row * (char_height + spacing)
        for col, ch in enumerate(line):
            if ch == " ":
                continue
            draw.text((margin_x + col * char_width, y), ch, font=font, fill=foreground)
    return image


class FrameSaver:
    """Writes a rendered glyph block plus its metadata to a timestamped file."""

    def __init__(
        self,
        log: Any,
        directory: Path = Path("."),
        save_png: bool = False,
        font: Optional[ImageFont.ImageFont] = None,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.log = log
        self.directory = Path(directory)
        self.save_png = save_png
        self.font = font
        self.now = now
        self.last_path: Optional[Path] = None

    def _next_path(self, stamp: datetime) -> Path:
        base = f"{FILENAME_PREFIX}{stamp.strftime(TIMESTAMP_FORMAT)}"
        path = self.directory / f"{base}.txt"
        suffix = 1
        while path.exists():
            path = self.directory / f"{base}_{suffix}.txt"
            suffix += 1
        return path

    def save(self, text_block: str, metadata: FrameMetadata) -> bool:
        stamp = self.now()
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path = self._next_path(stamp)
            with path.open("w", encoding="utf-8") as f:
                f.write("ASCII Art Camera - Captured Frame\n")
                f.write(f"{SEPARATOR}\n")
                f.write(f"Timestamp: {stamp.isoformat()}\n")
                f.write(f"Resolution: {metadata.width}x{metadata.height}\n")
                f.write(f"Character Set: {metadata.ramp_name}\n")
                f.write(f"Contrast: {metadata.contrast}\n")
                f.write(f"Brightness: {metadata.brightness}\n")
                f.write(f"{SEPARATOR}\n\n")
                f.write(text_block)
                f.write(f"\n{SEPARATOR}\n")
        except OSError as exc:
            self.log.error("Failed to save ASCII art: {}", exc)
            return False

        self.last_path = path
        self.log.info("ASCII art with metadata saved to {}", path)
        if self.save_png:
            self._save_snapshot(text_block, path.with_suffix(".png"))
        return True

    def _save_snapshot(self, text_block: str, path: Path) -> None:
        try:
            font = self.font if self.font is not None else ImageFont.load_default()
            render_text_block_to_image(text_block, font).save(path)
        except (OSError, UnicodeError) as exc:
            self.log.warning("Failed to save PNG snapshot {}: {}", path, exc)
            return
        self.log.info("PNG snapshot saved to {}", path)
