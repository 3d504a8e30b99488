"""
Geometry and transform helpers for interactive editing.

All boxes live in display space unless stated otherwise. Resizes and moves
never fail: requests that would leave the container or shrink below the
minimum size are clamped.

Functions:
    clamp_box: Force a box inside a container with a minimum size
    clamp_resize: Apply a handle drag to a box with boundary clamping
    clamp_position: Keep an element of known size inside a container
    aspect_locked_resize: Resize width from a drag, deriving height from a ratio
    scale_font_size: Scale a font size from a horizontal drag
    centered_box: Box covering a fraction of a container, centered
    display_to_native_scale: Per-axis scale factors between spaces
    map_box_to_native: Convert a display box to a native pixel box
"""

from typing import Literal, Optional, Tuple

from MS_Libs.ImageEditingLib.image_models import Box, Point, Size
from MS_Libs.constants import (
    CROP_INITIAL_FRACTION,
    MIN_BOX_SIZE,
    TEXT_RESIZE_SENSITIVITY,
    TEXT_SIZE_MAX,
    TEXT_SIZE_MIN,
)
from MS_Libs.errors import GeometryInvalid

Handle = Literal["move", "n", "s", "e", "w", "ne", "nw", "se", "sw"]
HANDLES: Tuple[str, ...] = ("move", "nw", "ne", "sw", "se", "n", "s", "w", "e")


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


def _require_container(container: Size) -> None:
    if not container.is_positive:
        raise GeometryInvalid(
            f"Container must have positive dimensions, got {container.width}x{container.height}"
        )


def _effective_min(min_size: float, limit: float) -> float:
    # A container smaller than the minimum can only hold a box of its own size
    return min(max(min_size, 0.0), limit)


def clamp_box(box: Box, container: Size, min_size: float = MIN_BOX_SIZE) -> Box:
    """
    Force a box fully inside ``[0, 0, container.width, container.height]``.

    Width and height are clamped to ``[min_size, container]`` first, then the
    origin is clamped so the box does not overflow.

    Raises:
        GeometryInvalid: If the container itself has no area
    """
    _require_container(container)
    min_w = _effective_min(min_size, container.width)
    min_h = _effective_min(min_size, container.height)

    width = _clamp(box.width, min_w, container.width)
    height = _clamp(box.height, min_h, container.height)
    x = _clamp(box.x, 0.0, container.width - width)
    y = _clamp(box.y, 0.0, container.height - height)
    return Box(x, y, width, height)


def clamp_resize(
    box: Box,
    delta: Point,
    handle: str,
    container: Size,
    min_size: float = MIN_BOX_SIZE,
) -> Box:
    """
    Apply a pointer delta to ``box`` through the active handle.

    ``handle`` is ``"move"`` or a compass combination of ``n``/``s``/``e``/``w``.
    Edges named by the handle follow the pointer; opposite edges stay put.
    The result always satisfies::

        0 <= x, 0 <= y, x + width <= container.width,
        y + height <= container.height, width >= min_size, height >= min_size

    (the minimum is capped by the container when the container is smaller).

    Args:
        box: Box at the start of the drag
        delta: Pointer movement since the start of the drag
        handle: Active handle
        container: Displayed image bounds
        min_size: Minimum width and height

    Returns:
        The clamped box
    """
    if handle not in HANDLES:
        raise ValueError(f"Unknown handle: {handle}")

    start = clamp_box(box, container, min_size)

    if handle == "move":
        x = _clamp(start.x + delta.x, 0.0, container.width - start.width)
        y = _clamp(start.y + delta.y, 0.0, container.height - start.height)
        return Box(x, y, start.width, start.height)

    min_w = _effective_min(min_size, container.width)
    min_h = _effective_min(min_size, container.height)
    left, top, right, bottom = start.x, start.y, start.right, start.bottom

    if "w" in handle:
        left = _clamp(left + delta.x, 0.0, right - min_w)
    if "e" in handle:
        right = _clamp(right + delta.x, left + min_w, container.width)
    if "n" in handle:
        top = _clamp(top + delta.y, 0.0, bottom - min_h)
    if "s" in handle:
        bottom = _clamp(bottom + delta.y, top + min_h, container.height)

    return Box(left, top, right - left, bottom - top)


def clamp_position(position: Point, element: Size, container: Size) -> Point:
    """
    Keep an element of size ``element`` inside ``container``.

    Elements larger than the container are pinned to the origin on that axis.
    """
    _require_container(container)
    x = max(0.0, min(position.x, container.width - element.width))
    y = max(0.0, min(position.y, container.height - element.height))
    return Point(x, y)


def aspect_locked_resize(
    start: Size,
    dx: float,
    aspect_ratio: Optional[float],
    min_width: float = MIN_BOX_SIZE,
    max_size: Optional[Size] = None,
) -> Size:
    """
    Resize from a horizontal drag, deriving height from ``aspect_ratio``.

    Args:
        start: Size at the start of the drag
        dx: Horizontal pointer delta
        aspect_ratio: width / height to preserve, or None to keep height
        min_width: Smallest allowed width
        max_size: Optional space available to the element (from its position
                  to the container's far edges)

    Returns:
        New size
    """
    width = start.width + dx
    if max_size is not None:
        max_width = max_size.width
        if aspect_ratio:
            max_width = min(max_width, max_size.height * aspect_ratio)
        width = min(width, max_width)
    width = max(min_width, width)

    if aspect_ratio:
        height = width / aspect_ratio
    else:
        height = start.height
    return Size(width, height)


def scale_font_size(
    start_size: float,
    dx: float,
    sensitivity: float = TEXT_RESIZE_SENSITIVITY,
    minimum: float = TEXT_SIZE_MIN,
    maximum: float = TEXT_SIZE_MAX,
) -> float:
    """Scale a font size from a horizontal drag, clamped to ``[minimum, maximum]``."""
    return _clamp(start_size + dx * sensitivity, minimum, maximum)


def centered_box(container: Size, fraction: float = CROP_INITIAL_FRACTION) -> Box:
    """Box of ``fraction`` of the container on each axis, centered within it."""
    _require_container(container)
    if not (0.0 < fraction <= 1.0):
        raise ValueError(f"fraction must be 0 < f <= 1, got {fraction}")
    margin = (1.0 - fraction) / 2.0
    return Box(
        container.width * margin,
        container.height * margin,
        container.width * fraction,
        container.height * fraction,
    )


def display_to_native_scale(native: Size, display: Size) -> Tuple[float, float]:
    """
    Per-axis factors converting display coordinates to native pixels.

    Raises:
        GeometryInvalid: If either size has no area
    """
    if not display.is_positive:
        raise GeometryInvalid(f"Display size must be positive, got {display.width}x{display.height}")
    if not native.is_positive:
        raise GeometryInvalid(f"Native size must be positive, got {native.width}x{native.height}")
    return (native.width / display.width, native.height / display.height)


def map_box_to_native(box: Box, native: Size, display: Size) -> Box:
    """
    Map a display-space box onto the native pixel grid.

    The result is snapped to whole pixels and intersected with the native
    image; it may be degenerate when the box lies outside the image.
    """
    scale_x, scale_y = display_to_native_scale(native, display)
    left, top, right, bottom = box.scaled(scale_x, scale_y).as_pil_box()
    left = int(_clamp(left, 0, native.width))
    top = int(_clamp(top, 0, native.height))
    right = int(_clamp(right, 0, native.width))
    bottom = int(_clamp(bottom, 0, native.height))
    return Box(left, top, max(0, right - left), max(0, bottom - top))
