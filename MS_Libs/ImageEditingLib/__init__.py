"""
ImageEditingLib - Core image editing functionality

This module provides image buffers, geometry, the adjustment stack and the
selection mask for Mockup Studio. The crop and bake engines live in
``crop_engine`` and ``bake_engine`` and are imported from there directly.
"""

from MS_Libs.ImageEditingLib.image_models import Box, ImageBuffer, Point, Size
from MS_Libs.ImageEditingLib.geometry import (
    aspect_locked_resize,
    centered_box,
    clamp_box,
    clamp_position,
    clamp_resize,
    display_to_native_scale,
    map_box_to_native,
    scale_font_size,
)
from MS_Libs.ImageEditingLib.filter_pipeline import (
    IDENTITY_FILTERS,
    FilterState,
    bake_filters,
    preview_transform,
)
from MS_Libs.ImageEditingLib.mask_canvas import MaskCanvas, Stroke

__all__ = [
    "Box",
    "ImageBuffer",
    "Point",
    "Size",
    "aspect_locked_resize",
    "centered_box",
    "clamp_box",
    "clamp_position",
    "clamp_resize",
    "display_to_native_scale",
    "map_box_to_native",
    "scale_font_size",
    "IDENTITY_FILTERS",
    "FilterState",
    "bake_filters",
    "preview_transform",
    "MaskCanvas",
    "Stroke",
]
