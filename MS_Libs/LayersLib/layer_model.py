"""
Text and image-overlay layers placed on top of the base image.

Layers are immutable records kept in creation order inside an ordered
mapping from id to layer. Every update replaces the record stored under the
unchanged id, so callers never hold live references into the model.

Classes:
    TextLayer: Text content with font, color and position
    OverlayLayer: Image overlay with opacity, size and position
    Selection: The currently selected layer (id and kind)
    LayerModel: Ordered layer collection with single selection
"""

import itertools
import logging
from dataclasses import asdict, dataclass, field, replace
from typing import Any, Dict, Iterator, List, Literal, Optional, Union

from MS_Libs.ImageEditingLib.geometry import aspect_locked_resize, clamp_position, scale_font_size
from MS_Libs.ImageEditingLib.image_models import ImageBuffer, Point, Size
from MS_Libs.constants import (
    DEFAULT_LAYER_X,
    DEFAULT_LAYER_Y,
    DEFAULT_OVERLAY_OPACITY,
    DEFAULT_OVERLAY_WIDTH,
    DEFAULT_OVERLAY_WIDTH_FRACTION,
    DEFAULT_TEXT_COLOR,
    DEFAULT_TEXT_CONTENT,
    DEFAULT_TEXT_SIZE,
    FONTS,
    MIN_BOX_SIZE,
    TEXT_SIZE_MAX,
    TEXT_SIZE_MIN,
)

logger = logging.getLogger(__name__)

LayerKind = Literal["text", "overlay"]


@dataclass(frozen=True)
class TextLayer:
    """A block of text drawn over the image.

    Attributes:
        id: Unique layer id
        content: Text, may contain line breaks
        color: Fill color (CSS hex string)
        size: Font size in display pixels
        font_family: One of the supported font families
        x: Left edge in display space
        y: Top edge in display space
    """
    id: str
    content: str = DEFAULT_TEXT_CONTENT
    color: str = DEFAULT_TEXT_COLOR
    size: float = DEFAULT_TEXT_SIZE
    font_family: str = FONTS[0]
    x: float = DEFAULT_LAYER_X
    y: float = DEFAULT_LAYER_Y
    kind: LayerKind = field(default="text", init=False)

    def __post_init__(self):
        if self.font_family not in FONTS:
            raise ValueError(f"Unsupported font family: {self.font_family}")
        if not (TEXT_SIZE_MIN <= self.size <= TEXT_SIZE_MAX):
            raise ValueError(f"size must be {TEXT_SIZE_MIN:g}-{TEXT_SIZE_MAX:g}, got {self.size}")

    @property
    def position(self) -> Point:
        return Point(self.x, self.y)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class OverlayLayer:
    """An image drawn over the base image.

    Attributes:
        id: Unique layer id
        source: Overlay image
        opacity: 0.0 (invisible) to 1.0 (opaque)
        width: Display width
        height: Display height
        x: Left edge in display space
        y: Top edge in display space
        aspect_ratio: width / height preserved while resizing; None once broken
    """
    id: str
    source: ImageBuffer
    width: float
    height: float
    opacity: float = DEFAULT_OVERLAY_OPACITY
    x: float = DEFAULT_LAYER_X
    y: float = DEFAULT_LAYER_Y
    aspect_ratio: Optional[float] = None
    kind: LayerKind = field(default="overlay", init=False)

    def __post_init__(self):
        if not (0.0 <= self.opacity <= 1.0):
            raise ValueError(f"opacity must be 0.0-1.0, got {self.opacity}")
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Overlay size must be positive, got {self.width}x{self.height}")

    @property
    def position(self) -> Point:
        return Point(self.x, self.y)

    @property
    def size(self) -> Size:
        return Size(self.width, self.height)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["source"] = None
        return data


Layer = Union[TextLayer, OverlayLayer]


@dataclass(frozen=True)
class Selection:
    id: str
    kind: LayerKind


class LayerModel:
    """
    Ordered collection of layers with at most one selected.

    Creation order is draw order: later layers draw on top.
    """

    def __init__(self):
        self._layers: Dict[str, Layer] = {}
        self._ids = itertools.count(1)
        self._selected: Optional[Selection] = None

    def __len__(self) -> int:
        return len(self._layers)

    def __iter__(self) -> Iterator[Layer]:
        return iter(list(self._layers.values()))

    def __contains__(self, layer_id: str) -> bool:
        return layer_id in self._layers

    def _next_id(self, kind: LayerKind) -> str:
        layer_id = f"{kind}_{next(self._ids)}"
        while layer_id in self._layers:
            layer_id = f"{kind}_{next(self._ids)}"
        return layer_id

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, layer_id: str) -> Layer:
        """
        Raises:
            KeyError: If no layer has this id
        """
        if layer_id not in self._layers:
            raise KeyError(f"Unknown layer: {layer_id}")
        return self._layers[layer_id]

    def layers(self) -> List[Layer]:
        return list(self._layers.values())

    def text_layers(self) -> List[TextLayer]:
        return [layer for layer in self._layers.values() if isinstance(layer, TextLayer)]

    def overlay_layers(self) -> List[OverlayLayer]:
        return [layer for layer in self._layers.values() if isinstance(layer, OverlayLayer)]

    # ------------------------------------------------------------------
    # Create / update / delete
    # ------------------------------------------------------------------

    def add_text(self, **props: Any) -> TextLayer:
        layer = TextLayer(id=self._next_id("text"), **props)
        self._layers[layer.id] = layer
        logger.debug(f"Created text layer {layer.id}")
        return layer

    def add_overlay(
        self,
        source: ImageBuffer,
        display_width: Optional[float] = None,
        **props: Any,
    ) -> OverlayLayer:
        """
        Add an overlay sized to a fraction of the displayed image width.

        The aspect ratio is taken from the source image and kept while resizing.
        """
        aspect_ratio = source.width / source.height
        if display_width:
            width = display_width * DEFAULT_OVERLAY_WIDTH_FRACTION
        else:
            width = DEFAULT_OVERLAY_WIDTH
        props.setdefault("width", width)
        props.setdefault("height", props["width"] / aspect_ratio)
        layer = OverlayLayer(
            id=self._next_id("overlay"),
            source=source,
            aspect_ratio=aspect_ratio,
            **props,
        )
        self._layers[layer.id] = layer
        logger.debug(f"Created overlay layer {layer.id} ({source.width}x{source.height})")
        return layer

    def update(self, layer_id: str, **changes: Any) -> Layer:
        """
        Replace the layer stored under ``layer_id`` with updated values.

        Raises:
            KeyError: If no layer has this id
            ValueError: If the new values are invalid (layer is unchanged)
        """
        current = self.get(layer_id)
        if "id" in changes and changes["id"] != layer_id:
            raise ValueError("Layer id cannot change")
        updated = replace(current, **changes)
        self._layers[layer_id] = updated
        return updated

    def delete(self, layer_id: str) -> Layer:
        layer = self.get(layer_id)
        del self._layers[layer_id]
        if self._selected is not None and self._selected.id == layer_id:
            self._selected = None
        logger.debug(f"Deleted layer {layer_id}")
        return layer

    def clear(self) -> None:
        self._layers.clear()
        self._selected = None

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    @property
    def selected(self) -> Optional[Selection]:
        return self._selected

    def select(self, layer_id: str) -> Selection:
        layer = self.get(layer_id)
        self._selected = Selection(layer.id, layer.kind)
        return self._selected

    def deselect(self) -> None:
        self._selected = None

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    def move(self, layer_id: str, position: Point, element: Size, container: Size) -> Layer:
        """Place a layer at ``position``, kept inside ``container``."""
        clamped = clamp_position(position, element, container)
        return self.update(layer_id, x=clamped.x, y=clamped.y)

    def resize_text(self, layer_id: str, start_size: float, dx: float) -> Layer:
        layer = self.get(layer_id)
        if not isinstance(layer, TextLayer):
            raise TypeError(f"Layer {layer_id} is not a text layer")
        return self.update(layer_id, size=scale_font_size(start_size, dx))

    def resize_overlay(
        self,
        layer_id: str,
        start_size: Size,
        dx: float,
        container: Optional[Size] = None,
    ) -> Layer:
        """Resize an overlay from a horizontal drag, keeping its aspect ratio."""
        layer = self.get(layer_id)
        if not isinstance(layer, OverlayLayer):
            raise TypeError(f"Layer {layer_id} is not an overlay layer")
        available = None
        if container is not None:
            available = Size(container.width - layer.x, container.height - layer.y)
        new_size = aspect_locked_resize(
            start_size,
            dx,
            layer.aspect_ratio,
            min_width=MIN_BOX_SIZE,
            max_size=available,
        )
        if container is None:
            return self.update(layer_id, width=new_size.width, height=new_size.height)
        # The minimum size can outgrow the space left, so pull the layer back inside
        position = clamp_position(Point(layer.x, layer.y), new_size, container)
        return self.update(
            layer_id,
            x=position.x,
            y=position.y,
            width=new_size.width,
            height=new_size.height,
        )

    def break_aspect_ratio(self, layer_id: str) -> Layer:
        return self.update(layer_id, aspect_ratio=None)
