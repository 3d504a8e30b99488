"""
Freehand selection mask painted at display size and saved at native size.

Strokes are white, round-capped and round-joined on an otherwise transparent
canvas. Saving rasterizes them onto a black image at the base image's native
resolution, which is the mask handed to the image synthesis collaborator:
white areas may change, black areas must not.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from PIL import Image, ImageDraw

from MS_Libs.ImageEditingLib.image_models import ImageBuffer, Point, Size
from MS_Libs.constants import (
    BRUSH_SIZE_DEFAULT,
    BRUSH_SIZE_MAX,
    BRUSH_SIZE_MIN,
    MASK_BACKGROUND_COLOR,
    MASK_STROKE_COLOR,
)
from MS_Libs.errors import BakeFailure, GeometryInvalid

logger = logging.getLogger(__name__)


def validate_brush_size(brush_size: float) -> float:
    if not (BRUSH_SIZE_MIN <= brush_size <= BRUSH_SIZE_MAX):
        raise ValueError(f"brush_size must be {BRUSH_SIZE_MIN}-{BRUSH_SIZE_MAX}, got {brush_size}")
    return brush_size


@dataclass
class Stroke:
    """One pointer-down to pointer-up path in display space."""
    width: float
    points: List[Tuple[float, float]] = field(default_factory=list)


def _draw_stroke(draw: Any, stroke: Stroke) -> None:
    # A path with a single point draws nothing, like an unstroked moveTo
    if len(stroke.points) < 2:
        return
    radius = stroke.width / 2.0
    draw.line(stroke.points, fill=MASK_STROKE_COLOR, width=int(round(stroke.width)), joint="curve")
    for x, y in stroke.points:
        draw.ellipse((x - radius, y - radius, x + radius, y + radius), fill=MASK_STROKE_COLOR)


class MaskCanvas:
    """
    Accumulates brush strokes over the displayed image.

    Example:
        >>> canvas = MaskCanvas(Size(400, 300), brush_size=40)
        >>> canvas.begin_stroke(Point(10, 10))
        >>> canvas.extend_stroke(Point(120, 80))
        >>> canvas.end_stroke()
        >>> mask = canvas.save(Size(1600, 1200))
    """

    def __init__(self, display_size: Size, brush_size: float = BRUSH_SIZE_DEFAULT):
        if not display_size.is_positive:
            raise GeometryInvalid(
                f"Mask canvas needs a positive display size, got {display_size.width}x{display_size.height}"
            )
        self.display_size = display_size
        self._brush_size = validate_brush_size(brush_size)
        self._strokes: List[Stroke] = []
        self._active: Optional[Stroke] = None

    @property
    def brush_size(self) -> float:
        return self._brush_size

    @brush_size.setter
    def brush_size(self, value: float) -> None:
        self._brush_size = validate_brush_size(value)

    @property
    def is_drawing(self) -> bool:
        return self._active is not None

    @property
    def strokes(self) -> List[Stroke]:
        return list(self._strokes)

    @property
    def has_strokes(self) -> bool:
        return any(len(stroke.points) >= 2 for stroke in self._strokes)

    def begin_stroke(self, point: Point) -> None:
        if self._active is not None:
            self.end_stroke()
        self._active = Stroke(width=self._brush_size, points=[(point.x, point.y)])
        self._strokes.append(self._active)

    def extend_stroke(self, point: Point) -> None:
        if self._active is None:
            return
        self._active.points.append((point.x, point.y))

    def end_stroke(self) -> None:
        self._active = None

    def clear(self) -> None:
        """Erase every stroke; a previously saved mask is not affected."""
        self._strokes = []
        self._active = None

    def render(self) -> Any:
        """Stroke canvas at display size (white on transparent, RGBA)."""
        width, height = self.display_size.as_int_tuple()
        canvas = Image.new("RGBA", (max(1, width), max(1, height)), (0, 0, 0, 0))
        draw = ImageDraw.Draw(canvas)
        for stroke in self._strokes:
            _draw_stroke(draw, stroke)
        return canvas

    def save(self, native_size: Size) -> ImageBuffer:
        """
        Rasterize the strokes onto black at native resolution.

        The stroke canvas is scaled from display to native size before being
        composited. Strokes are cleared once the mask is produced.

        Raises:
            BakeFailure: If the native size has no area
        """
        if not native_size.is_positive:
            raise BakeFailure(f"Cannot allocate a {native_size.width}x{native_size.height} mask")

        native = native_size.as_int_tuple()
        strokes = self.render()
        if strokes.size != native:
            strokes = strokes.resize(native, Image.Resampling.BILINEAR)

        mask = Image.new("RGBA", native, MASK_BACKGROUND_COLOR)
        mask.alpha_composite(strokes)
        buffer = ImageBuffer.from_image(mask.convert("RGB"))

        logger.debug(f"Saved mask {native[0]}x{native[1]} from {len(self._strokes)} strokes")
        self.clear()
        return buffer
