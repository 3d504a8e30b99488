"""
Font loading and multi-line text layout shared by the bake and layer moves.

Text is laid out top-aligned: line ``i`` starts at ``y + i * font_size`` and
each line's top edge is anchored at its y coordinate.
"""

import logging
from functools import lru_cache
from typing import Any, List, Tuple

from PIL import Image, ImageDraw, ImageFont

from MS_Libs.ImageEditingLib.image_models import Box, Size
from MS_Libs.constants import FONT_FILES, FONTS

logger = logging.getLogger(__name__)

# Left/ascender anchor: the top of the line box sits on the given y
TEXT_ANCHOR = "la"


def font_pixel_size(size: float) -> int:
    return max(1, int(round(size)))


@lru_cache(maxsize=128)
def load_font(family: str, size: int) -> Any:
    """
    Load ``family`` at ``size`` pixels.

    TrueType files listed for the family are tried in order; Pillow's built-in
    scalable font is used when none is installed.

    Raises:
        ValueError: If family is not one of the supported fonts
    """
    if family not in FONTS:
        raise ValueError(f"Unsupported font family: {family}. Use one of {', '.join(FONTS)}")

    for candidate in FONT_FILES.get(family, ()):
        try:
            return ImageFont.truetype(candidate, size)
        except OSError:
            continue

    logger.warning(f"No TrueType file found for '{family}', using built-in font")
    return ImageFont.load_default(size=size)


def split_lines(content: str) -> List[str]:
    return content.split("\n")


def line_origins(x: float, y: float, content: str, font_size: int) -> List[Tuple[Tuple[float, float], str]]:
    """Origin of each line for top-aligned layout."""
    return [((x, y + index * font_size), line) for index, line in enumerate(split_lines(content))]


_MEASURE_SURFACE = ImageDraw.Draw(Image.new("L", (1, 1)))


def measure_text(content: str, family: str, size: float) -> Size:
    """Width and height of the laid-out text block, anchored at (0, 0)."""
    bounds = text_bounds(0.0, 0.0, content, family, size)
    if bounds is None:
        return Size(0.0, float(font_pixel_size(size) * len(split_lines(content))))
    return Size(bounds.right, bounds.bottom)


def text_bounds(x: float, y: float, content: str, family: str, size: float):
    """
    Union of the ink boxes of every line, or None when nothing is drawn.
    """
    pixel_size = font_pixel_size(size)
    font = load_font(family, pixel_size)
    left = top = right = bottom = None
    for origin, line in line_origins(x, y, content, pixel_size):
        if not line:
            continue
        l, t, r, b = _MEASURE_SURFACE.textbbox(origin, line, font=font, anchor=TEXT_ANCHOR)
        left = l if left is None else min(left, l)
        top = t if top is None else min(top, t)
        right = r if right is None else max(right, r)
        bottom = b if bottom is None else max(bottom, b)
    if left is None:
        return None
    return Box(left, top, right - left, bottom - top)


def draw_text(canvas: Any, x: float, y: float, content: str, family: str, size: float, color: str) -> None:
    """Draw top-aligned multi-line text onto an RGBA canvas in place."""
    pixel_size = font_pixel_size(size)
    font = load_font(family, pixel_size)
    layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(layer)
    for origin, line in line_origins(x, y, content, pixel_size):
        if line:
            draw.text(origin, line, fill=color, font=font, anchor=TEXT_ANCHOR)
    canvas.alpha_composite(layer)
