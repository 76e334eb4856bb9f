"""
Script column layout.

Wraps the display script to the viewport width and rasterizes it once into a
single tall image. Frames are later cut out of this column by offset.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np
from PIL import Image, ImageColor, ImageDraw, ImageFont

from .models import DisplayScript

logger = logging.getLogger(__name__)

FONT_CANDIDATES = (
    "DejaVuSansMono.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf",
    "/usr/share/fonts/dejavu/DejaVuSansMono.ttf",
    "Menlo.ttc",
    "consola.ttf",
)


@dataclass
class ColumnStyle:
    width: int = 1280
    viewport_height: int = 720
    font_path: Optional[str] = None
    font_size: int = 36
    line_spacing: int = 12
    padding_x: int = 80
    padding_y: int = 60
    text_color: str = "#E2E8F0"
    background_color: str = "#0F172A"


def load_font(font_path: Optional[str], font_size: int) -> ImageFont.ImageFont:
    if font_path:
        try:
            return ImageFont.truetype(font_path, font_size)
        except OSError as e:
            logger.warning(f"Failed to load font {font_path}: {e}")

    for candidate in FONT_CANDIDATES:
        try:
            return ImageFont.truetype(candidate, font_size)
        except OSError:
            continue

    logger.warning("No monospace TrueType font found, using Pillow default font")
    return ImageFont.load_default(size=font_size)


class ScriptColumn:
    """The whole script laid out as one scrollable image."""

    def __init__(self, script: DisplayScript, style: Optional[ColumnStyle] = None):
        self.script = script
        self.style = style or ColumnStyle()
        self.font = load_font(self.style.font_path, self.style.font_size)
        self.line_height = self._measure_line_height()
        self.lines = self._wrap(script.lines)

    @property
    def max_text_width(self) -> int:
        return max(1, self.style.width - 2 * self.style.padding_x)

    @property
    def line_step(self) -> int:
        return self.line_height + self.style.line_spacing

    @property
    def content_height(self) -> int:
        """Height of the text block including top and bottom padding."""
        if not self.lines:
            return 2 * self.style.padding_y
        text_height = len(self.lines) * self.line_step - self.style.line_spacing
        return 2 * self.style.padding_y + text_height

    def _measure_line_height(self) -> int:
        probe = ImageDraw.Draw(Image.new("RGB", (10, 10)))
        bbox = probe.textbbox((0, 0), "Ayg|", font=self.font)
        return max(1, bbox[3] - min(0, bbox[1]))

    def _text_width(self, text: str) -> float:
        return self.font.getlength(text)

    def _wrap(self, lines: list[str]) -> list[str]:
        wrapped: list[str] = []
        for line in lines:
            wrapped.extend(self._wrap_line(line))
        # Trailing blank lines add scroll distance without content
        while wrapped and not wrapped[-1].strip():
            wrapped.pop()
        return wrapped

    def _wrap_line(self, line: str) -> list[str]:
        if not line or self._text_width(line) <= self.max_text_width:
            return [line]

        indent = line[: len(line) - len(line.lstrip(" "))]
        result: list[str] = []
        current = indent
        for word in line.split():
            candidate = f"{current}{word}" if current.strip() == "" else f"{current} {word}"
            if self._text_width(candidate) <= self.max_text_width:
                current = candidate
                continue
            if current.strip():
                result.append(current)
                current = indent
            # A single word wider than the viewport is broken by characters
            while self._text_width(f"{current}{word}") > self.max_text_width and len(word) > 1:
                cut = len(word)
                while cut > 1 and self._text_width(f"{current}{word[:cut]}") > self.max_text_width:
                    cut -= 1
                result.append(f"{current}{word[:cut]}")
                word = word[cut:]
                current = indent
            current = f"{current}{word}"
        if current.strip():
            result.append(current)
        return result or [line]

    def rasterize(self) -> np.ndarray:
        """
        RGB array of the column, at least one viewport tall.

        Raises UnicodeEncodeError/OSError when the font cannot draw the text.
        """
        height = max(self.content_height, self.style.viewport_height)
        background = ImageColor.getrgb(self.style.background_color)
        color = ImageColor.getrgb(self.style.text_color)

        image = Image.new("RGB", (self.style.width, height), background)
        draw = ImageDraw.Draw(image)

        y = self.style.padding_y
        for line in self.lines:
            if line:
                draw.text((self.style.padding_x, y), line, font=self.font, fill=color)
            y += self.line_step

        logger.debug(f"Rasterized {len(self.lines)} lines into {self.style.width}x{height} column")
        return np.asarray(image, dtype=np.uint8)
