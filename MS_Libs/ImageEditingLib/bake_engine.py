"""
Composition (bake) engine.

Flattens the adjustment stack, an optional crop, overlay layers and text
layers onto a base image into a new PNG buffer. This is the only place in the
engine that produces new pixels for the edit history.

Steps:
    1. Render the base at native resolution with the filters applied
    2. Extract the crop region (native coordinates) if one is given
    3. Draw overlays in creation order, scaled from display to native space,
       with their opacity
    4. Draw text layers in creation order on top, font size scaled by the
       horizontal factor, lines advanced by the scaled font size
    5. Encode as PNG

Baking is deterministic: the same inputs always give identical bytes.

Example:
    >>> result = bake(base, FilterState(sepia=30), layers, display_size=Size(640, 480))
    >>> result.mime_type
    'image/png'
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple

import numpy as np
from PIL import Image

from MS_Libs.ImageEditingLib.filter_pipeline import IDENTITY_FILTERS, FilterState, bake_filters
from MS_Libs.ImageEditingLib.geometry import display_to_native_scale
from MS_Libs.ImageEditingLib.image_models import Box, ImageBuffer, Size
from MS_Libs.ImageEditingLib.text_rendering import draw_text, text_bounds
from MS_Libs.LayersLib.layer_model import Layer, OverlayLayer, TextLayer
from MS_Libs.constants import OUTPUT_FORMAT
from MS_Libs.errors import BakeFailure, DecodeFailure, GeometryInvalid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BakeScale:
    """Display-to-native conversion for one bake."""
    scale_x: float
    scale_y: float
    offset_x: float = 0.0
    offset_y: float = 0.0

    def point(self, x: float, y: float) -> Tuple[float, float]:
        return (x * self.scale_x - self.offset_x, y * self.scale_y - self.offset_y)


class LayerCompositor:
    """Draws layers onto a native-resolution RGBA canvas."""

    @staticmethod
    def composite_overlay(canvas: Any, layer: OverlayLayer, scale: BakeScale) -> Any:
        """
        Draw one overlay with its opacity over its full bounds.

        Returns:
            New RGBA canvas
        """
        overlay = layer.source.to_image().convert("RGBA")
        x, y = scale.point(layer.x, layer.y)
        width = max(1, int(round(layer.width * scale.scale_x)))
        height = max(1, int(round(layer.height * scale.scale_y)))

        if overlay.size != (width, height):
            overlay = overlay.resize((width, height), Image.Resampling.LANCZOS)

        if layer.opacity < 1.0:
            overlay = LayerCompositor._apply_opacity(overlay, layer.opacity)

        # Full-canvas layer so overlays hanging past the edges are clipped
        positioned = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        positioned.paste(overlay, (int(round(x)), int(round(y))))
        return Image.alpha_composite(canvas, positioned)

    @staticmethod
    def _apply_opacity(image: Any, opacity: float) -> Any:
        """Scale the alpha channel by ``opacity`` (0.0-1.0)."""
        pixels = np.array(image, dtype=np.float64)
        pixels[:, :, 3] = np.rint(pixels[:, :, 3] * opacity)
        return Image.fromarray(pixels.astype("uint8"))

    @staticmethod
    def composite_text(canvas: Any, layer: TextLayer, scale: BakeScale) -> Any:
        x, y = scale.point(layer.x, layer.y)
        draw_text(
            canvas,
            x,
            y,
            layer.content,
            layer.font_family,
            layer.size * scale.scale_x,
            layer.color,
        )
        return canvas

    @staticmethod
    def composite_layers(canvas: Any, layers: Sequence[Layer], scale: BakeScale) -> Any:
        """Overlays first, then text, each group in creation order."""
        result = canvas
        for layer in layers:
            if isinstance(layer, OverlayLayer):
                result = LayerCompositor.composite_overlay(result, layer, scale)
        for layer in layers:
            if isinstance(layer, TextLayer):
                result = LayerCompositor.composite_text(result, layer, scale)
            elif not isinstance(layer, OverlayLayer):
                raise TypeError(f"Unsupported layer type: {type(layer)}")
        return result


def resolve_scale(native: Size, display: Optional[Size]) -> Tuple[float, float]:
    """
    Per-axis display-to-native factors, or BakeFailure without a display size.
    """
    if display is None:
        raise BakeFailure("No display size available to map layers onto the image")
    try:
        return display_to_native_scale(native, display)
    except GeometryInvalid as exc:
        raise BakeFailure(str(exc)) from exc


def render(
    base: ImageBuffer,
    filters: FilterState = IDENTITY_FILTERS,
    layers: Sequence[Layer] = (),
    display_size: Optional[Size] = None,
    crop_rect: Optional[Box] = None,
) -> Any:
    """
    Flatten everything onto ``base`` and return the RGBA Pillow image.

    Args:
        base: Image to bake onto
        filters: Adjustment stack
        layers: Layers in creation order
        display_size: Size the image is shown at; defaults to its native size
        crop_rect: Region to keep, in native pixel coordinates

    Raises:
        DecodeFailure: If base or an overlay cannot be decoded
        BakeFailure: If there is no usable drawing surface
    """
    if display_size is None:
        display_size = base.size
    scale_x, scale_y = resolve_scale(base.size, display_size)

    image = base.to_image()
    canvas = bake_filters(image, filters, blur_scale=scale_x)

    offset_x = offset_y = 0.0
    if crop_rect is not None:
        left, top, right, bottom = crop_rect.as_pil_box()
        left, top = max(0, left), max(0, top)
        right, bottom = min(canvas.width, right), min(canvas.height, bottom)
        if right <= left or bottom <= top:
            raise BakeFailure(f"Crop region {crop_rect} has no area inside the image")
        canvas = canvas.crop((left, top, right, bottom))
        offset_x, offset_y = float(left), float(top)

    scale = BakeScale(scale_x, scale_y, offset_x, offset_y)
    return LayerCompositor.composite_layers(canvas, layers, scale)


def bake(
    base: ImageBuffer,
    filters: FilterState = IDENTITY_FILTERS,
    layers: Sequence[Layer] = (),
    display_size: Optional[Size] = None,
    crop_rect: Optional[Box] = None,
) -> ImageBuffer:
    """
    Produce a new flattened PNG buffer. See ``render`` for arguments.

    Either a complete buffer is returned or an error is raised; nothing is
    partially written.
    """
    try:
        flattened = render(base, filters, layers, display_size, crop_rect)
        result = ImageBuffer.from_image(flattened, OUTPUT_FORMAT)
    except (DecodeFailure, BakeFailure):
        raise
    except (OSError, ValueError) as exc:
        raise BakeFailure(f"Failed to bake image: {exc}") from exc

    logger.debug(
        f"Baked {base.width}x{base.height} -> {result.width}x{result.height} "
        f"with {len(layers)} layers"
    )
    return result


def text_layer_bounds(layer: TextLayer, native: Size, display: Size) -> Optional[Box]:
    """Native-space ink bounds of a text layer as the bake would draw it."""
    scale_x, scale_y = display_to_native_scale(native, display)
    return text_bounds(
        layer.x * scale_x,
        layer.y * scale_y,
        layer.content,
        layer.font_family,
        layer.size * scale_x,
    )
