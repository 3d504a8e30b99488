"""
LayersLib - Text and overlay layers

This module provides the layer records, the ordered layer model with single
selection, and the drag sessions used to move and resize layers.
"""

from MS_Libs.LayersLib.layer_model import (
    Layer,
    LayerModel,
    OverlayLayer,
    Selection,
    TextLayer,
)
from MS_Libs.LayersLib.interaction import DragSession

__all__ = [
    "Layer",
    "LayerModel",
    "OverlayLayer",
    "Selection",
    "TextLayer",
    "DragSession",
]
