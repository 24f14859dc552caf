"""
Label rendering for Template Composer.

Labels use a serif family, are left aligned and anchored at the top-left of
their first line. Text is drawn verbatim on one line: no wrapping, no escaping.
"""

import math
import os
from typing import Dict, Optional, Sequence, Tuple, Union

from PIL import Image, ImageDraw, ImageFont
from loguru import logger

from .render_config import Position


FontType = Union[ImageFont.FreeTypeFont, ImageFont.ImageFont]

SERIF_CANDIDATES = (
    "Times New Roman.ttf",
    "times.ttf",
    "DejaVuSerif.ttf",
    "LiberationSerif-Regular.ttf",
    "NotoSerif-Regular.ttf",
)

BLACK = (0, 0, 0, 255)
MIN_PROBE_SIZE = 12

# Line breaks and tabs become spaces, as on an HTML canvas
_WHITESPACE = str.maketrans({'\n': ' ', '\r': ' ', '\t': ' ', '\f': ' ', '\v': ' '})


class FontProvider:
    """Resolves and caches the serif font used for labels."""

    def __init__(self, font_path: Optional[str] = None, candidates: Sequence[str] = SERIF_CANDIDATES):
        self.font_path = font_path
        self.candidates = tuple(candidates)
        self._resolved: Optional[str] = None
        self._searched = False
        self._cache: Dict[int, FontType] = {}

    @property
    def resolved_path(self) -> Optional[str]:
        """Path or name of the first loadable candidate, None if only the default font works."""
        if not self._searched:
            self._resolved = self._find_font()
            self._searched = True
        return self._resolved

    def _find_font(self) -> Optional[str]:
        names = list(self.candidates)
        if self.font_path:
            if os.path.exists(self.font_path):
                names.insert(0, self.font_path)
            else:
                logger.warning(f"Configured font not found: {self.font_path}")

        for name in names:
            try:
                ImageFont.truetype(name, MIN_PROBE_SIZE)
            except OSError:
                continue
            logger.debug(f"Using label font: {name}")
            return name

        logger.warning("No serif TrueType font found, falling back to Pillow's default font")
        return None

    def get(self, size: float) -> FontType:
        """Return the label font at size (rounded to whole pixels)."""
        pixel_size = max(1, int(round(size)))
        if pixel_size not in self._cache:
            path = self.resolved_path
            if path is not None:
                self._cache[pixel_size] = ImageFont.truetype(path, pixel_size)
            else:
                self._cache[pixel_size] = ImageFont.load_default(pixel_size)
        return self._cache[pixel_size]


def normalize_label(text: Optional[str]) -> str:
    """Return text as it will be drawn: one line, verbatim otherwise."""
    if not text:
        return ""
    return text.translate(_WHITESPACE)


def draw_label(canvas: Image.Image,
               text: Optional[str],
               position: Position,
               font: FontType,
               fill: Tuple[int, int, int, int] = BLACK) -> bool:
    """
    Draw a single line label with its top-left corner at position.

    The text goes onto a transparent layer which is then alpha-composited,
    so antialiased edges blend with whatever lies underneath.

    Returns False when there was nothing to draw, including labels whose
    text box lies entirely outside the canvas.
    """
    line = normalize_label(text)
    if not line:
        return False

    if not _overlaps_canvas(line, position, font, canvas.size):
        logger.debug(f"Label {line!r} at ({position.x}, {position.y}) is outside the canvas")
        return False

    layer = Image.new('RGBA', canvas.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(layer)
    draw.text((position.x, position.y), line, font=font, fill=fill)
    canvas.alpha_composite(layer)
    return True


def _overlaps_canvas(line: str, position: Position, font: FontType, canvas_size: Tuple[int, int]) -> bool:
    x, y = position.x, position.y
    if not (math.isfinite(x) and math.isfinite(y)):
        return False

    canvas_width, canvas_height = canvas_size
    if x >= canvas_width or y >= canvas_height:
        return False

    left, top, right, bottom = font.getbbox(line)
    return x + right > 0 and y + bottom > 0
