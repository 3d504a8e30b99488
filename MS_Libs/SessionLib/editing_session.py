"""
Editing session for one base image.

The session ties the layer model, adjustment stack, crop engine, mask canvas
and edit history together behind the exclusive tool state machine::

    NONE | CROPPING | MASKING | LAYER_SELECTED

Entering a tool leaves the previous one and runs its cleanup: leaving
MASKING discards unsaved strokes, leaving CROPPING cancels the rectangle,
leaving LAYER_SELECTED deselects. Commits (crop, flatten, synthesis result,
variation selection) produce a new buffer and push it onto the history; if
producing the buffer fails nothing in the session changes.

Example:
    >>> session = EditingSession(project_image, display_size=Size(640, 480))
    >>> session.set_filter("sepia", 40)
    >>> layer = session.add_text_layer(content="Hello")
    >>> session.apply_adjustments()
    >>> session.undo()
"""

import logging
from enum import Enum
from typing import Any, Optional

from MS_Libs.ImageEditingLib.bake_engine import bake
from MS_Libs.ImageEditingLib.crop_engine import CropEngine
from MS_Libs.ImageEditingLib.filter_pipeline import IDENTITY_FILTERS, FilterState, preview_transform
from MS_Libs.ImageEditingLib.geometry import clamp_box
from MS_Libs.ImageEditingLib.image_models import Box, ImageBuffer, Point, Size
from MS_Libs.ImageEditingLib.mask_canvas import MaskCanvas, validate_brush_size
from MS_Libs.ImageEditingLib.text_rendering import measure_text
from MS_Libs.LayersLib.interaction import DragSession
from MS_Libs.LayersLib.layer_model import Layer, LayerModel, OverlayLayer, TextLayer
from MS_Libs.ProjStoreLib.synthesis import SynthesisRequest, build_edit_instructions
from MS_Libs.SessionLib.edit_history import EditHistory, HistoryEntry
from MS_Libs.constants import BRUSH_SIZE_DEFAULT

logger = logging.getLogger(__name__)


class Tool(Enum):
    NONE = "none"
    CROPPING = "cropping"
    MASKING = "masking"
    LAYER_SELECTED = "layer_selected"


class EditingSession:
    """Non-destructive editing state plus history for one base image."""

    def __init__(
        self,
        base: ImageBuffer,
        display_size: Optional[Size] = None,
        brush_size: float = BRUSH_SIZE_DEFAULT,
    ):
        self.history = EditHistory(base)
        self.layers = LayerModel()
        self.filters: FilterState = IDENTITY_FILTERS
        self.crop = CropEngine()
        self.mask: Optional[ImageBuffer] = None
        self.mask_canvas: Optional[MaskCanvas] = None
        self._brush_size = validate_brush_size(brush_size)
        self._display_size = display_size
        self._tool = Tool.NONE
        self._drag: Optional[DragSession] = None

    # ------------------------------------------------------------------
    # Image and display
    # ------------------------------------------------------------------

    @property
    def current(self) -> HistoryEntry:
        return self.history.current

    @property
    def current_image(self) -> ImageBuffer:
        return self.history.current.buffer

    @property
    def display_size(self) -> Size:
        """Size the current image is shown at (native size until laid out)."""
        if self._display_size is None:
            return self.current_image.size
        return self._display_size

    def set_display_size(self, size: Size) -> None:
        if not size.is_positive:
            raise ValueError(f"Display size must be positive, got {size.width}x{size.height}")
        self._display_size = size
        if self.crop.is_active:
            self.crop.display_size = size
            self.crop.rect = clamp_box(self.crop.rect, size, self.crop.min_size)

    def load_base(self, base: ImageBuffer) -> None:
        """Start over on a different base image; history is not carried over."""
        self.end_drag()
        self.history.reset(base)
        self.layers.clear()
        self.filters = IDENTITY_FILTERS
        self.crop.cancel()
        self.mask = None
        self.mask_canvas = None
        self._display_size = None
        self._tool = Tool.NONE
        logger.info(f"Loaded new base image {base.width}x{base.height}")

    # ------------------------------------------------------------------
    # Tool state machine
    # ------------------------------------------------------------------

    @property
    def tool(self) -> Tool:
        return self._tool

    def _leave_tool(self, next_tool: Tool) -> None:
        self.end_drag()
        if self._tool is Tool.MASKING and next_tool is not Tool.MASKING:
            if self.mask_canvas is not None:
                self.mask_canvas.clear()
            self.mask_canvas = None
        if self._tool is Tool.CROPPING and next_tool is not Tool.CROPPING:
            self.crop.cancel()
        if self._tool is Tool.LAYER_SELECTED:
            self.layers.deselect()

    def activate_tool(self, tool: Tool) -> None:
        """
        Switch to ``tool`` (NONE, CROPPING or MASKING).

        Use ``select_layer`` to enter LAYER_SELECTED.
        """
        if tool is Tool.LAYER_SELECTED:
            raise ValueError("Use select_layer() to select a layer")
        if tool is self._tool and tool is not Tool.NONE:
            return

        self._leave_tool(tool)
        self.layers.deselect()

        if tool is Tool.CROPPING:
            self.crop.activate(self.display_size)
        elif tool is Tool.MASKING:
            self.mask_canvas = MaskCanvas(self.display_size, self._brush_size)

        self._tool = tool
        logger.debug(f"Tool -> {tool.value}")

    def select_layer(self, layer_id: str) -> None:
        self.layers.get(layer_id)
        self._leave_tool(Tool.LAYER_SELECTED)
        self.layers.select(layer_id)
        self._tool = Tool.LAYER_SELECTED

    def deselect(self) -> None:
        if self._tool is Tool.LAYER_SELECTED:
            self._leave_tool(Tool.NONE)
            self._tool = Tool.NONE

    # ------------------------------------------------------------------
    # Adjustments
    # ------------------------------------------------------------------

    def set_filter(self, name: str, value: float) -> FilterState:
        self.filters = self.filters.with_value(name, value)
        return self.filters

    def set_filters(self, filters: FilterState) -> None:
        self.filters = filters

    def reset_adjustments(self) -> None:
        self.filters = IDENTITY_FILTERS

    def preview_filter(self) -> str:
        return preview_transform(self.filters)

    # ------------------------------------------------------------------
    # Layers
    # ------------------------------------------------------------------

    def add_text_layer(self, **props: Any) -> TextLayer:
        layer = self.layers.add_text(**props)
        self.select_layer(layer.id)
        return layer

    def add_overlay_layer(self, source: ImageBuffer, **props: Any) -> OverlayLayer:
        layer = self.layers.add_overlay(source, display_width=self.display_size.width, **props)
        self.select_layer(layer.id)
        return layer

    def update_layer(self, layer_id: str, **changes: Any) -> Layer:
        return self.layers.update(layer_id, **changes)

    def delete_layer(self, layer_id: str) -> None:
        self.layers.delete(layer_id)
        if self._tool is Tool.LAYER_SELECTED and self.layers.selected is None:
            self._tool = Tool.NONE

    def delete_selected(self) -> None:
        selection = self.layers.selected
        if selection is None:
            return
        self.delete_layer(selection.id)

    def layer_bounds(self, layer_id: str) -> Box:
        """Display-space box a layer occupies."""
        layer = self.layers.get(layer_id)
        if isinstance(layer, OverlayLayer):
            return Box(layer.x, layer.y, layer.width, layer.height)
        size = measure_text(layer.content, layer.font_family, layer.size)
        return Box(layer.x, layer.y, size.width, size.height)

    # ------------------------------------------------------------------
    # Drag sessions
    # ------------------------------------------------------------------

    @property
    def drag(self) -> Optional[DragSession]:
        return self._drag

    def _begin(self, drag: DragSession) -> DragSession:
        if self._drag is not None:
            raise RuntimeError(f"A {self._drag.kind} drag is already active")
        self._drag = drag
        return drag

    def begin_layer_move(self, layer_id: str, pointer: Point) -> DragSession:
        self.select_layer(layer_id)
        return self._begin(DragSession(
            kind="layer_move",
            start=pointer,
            layer_id=layer_id,
            start_box=self.layer_bounds(layer_id),
        ))

    def begin_layer_resize(self, layer_id: str, pointer: Point) -> DragSession:
        self.select_layer(layer_id)
        layer = self.layers.get(layer_id)
        return self._begin(DragSession(
            kind="layer_resize",
            start=pointer,
            layer_id=layer_id,
            start_box=self.layer_bounds(layer_id),
            start_font_size=layer.size if isinstance(layer, TextLayer) else None,
            aspect_ratio=layer.aspect_ratio if isinstance(layer, OverlayLayer) else None,
        ))

    def begin_crop_drag(self, handle: str, pointer: Point) -> DragSession:
        if self._tool is not Tool.CROPPING:
            raise RuntimeError("Crop tool is not active")
        return self._begin(DragSession(kind="crop", start=pointer, handle=handle, start_box=self.crop.rect))

    def begin_mask_stroke(self, pointer: Point) -> DragSession:
        if self._tool is not Tool.MASKING or self.mask_canvas is None:
            raise RuntimeError("Mask tool is not active")
        drag = self._begin(DragSession(kind="mask_stroke", start=pointer))
        self.mask_canvas.begin_stroke(pointer)
        return drag

    def update_drag(self, pointer: Point) -> Optional[Any]:
        """
        Apply one pointer-move to the active drag.

        Returns the updated layer, crop box, or None for mask strokes and
        when no drag is active.
        """
        drag = self._drag
        if drag is None:
            return None

        if drag.kind == "layer_move":
            return self.layers.move(
                drag.layer_id,
                drag.moved_position(pointer),
                drag.start_size,
                self.display_size,
            )
        if drag.kind == "layer_resize":
            dx = drag.delta(pointer).x
            if drag.start_font_size is not None:
                return self.layers.resize_text(drag.layer_id, drag.start_font_size, dx)
            return self.layers.resize_overlay(drag.layer_id, drag.start_size, dx, self.display_size)
        if drag.kind == "crop":
            return self.crop.drag(drag.start_box, drag.delta(pointer), drag.handle)
        if drag.kind == "mask_stroke":
            self.mask_canvas.extend_stroke(pointer)
        return None

    def end_drag(self) -> None:
        if self._drag is not None and self._drag.kind == "mask_stroke" and self.mask_canvas is not None:
            self.mask_canvas.end_stroke()
        self._drag = None

    # ------------------------------------------------------------------
    # Mask
    # ------------------------------------------------------------------

    @property
    def brush_size(self) -> float:
        return self._brush_size

    @brush_size.setter
    def brush_size(self, value: float) -> None:
        self._brush_size = validate_brush_size(value)
        if self.mask_canvas is not None:
            self.mask_canvas.brush_size = value

    def save_mask(self) -> ImageBuffer:
        """Rasterize strokes at native resolution and leave MASKING."""
        if self._tool is not Tool.MASKING or self.mask_canvas is None:
            raise RuntimeError("Mask tool is not active")
        self.end_drag()
        self.mask = self.mask_canvas.save(self.current_image.size)
        self.mask_canvas = None
        self._tool = Tool.NONE
        return self.mask

    def clear_strokes(self) -> None:
        """Erase unsaved strokes; a saved mask stays."""
        if self.mask_canvas is not None:
            self.mask_canvas.clear()

    def discard_mask(self) -> None:
        """Drop the saved mask so edits apply everywhere."""
        self.clear_strokes()
        self.mask = None

    # ------------------------------------------------------------------
    # Commits
    # ------------------------------------------------------------------

    def commit(self, buffer: ImageBuffer) -> bool:
        """
        Record a new current image. No-op when it equals the current image.
        """
        if buffer.same_content(self.current_image):
            return False
        previous = self.current_image
        self.history.push(buffer)
        self._current_changed(previous)
        logger.info(f"Committed {buffer.width}x{buffer.height} (history {self.history.index + 1}/{len(self.history)})")
        return True

    def apply_crop(self) -> Optional[ImageBuffer]:
        """Bake filters and the crop; the crop's size becomes the new native size."""
        if self._tool is not Tool.CROPPING:
            raise RuntimeError("Crop tool is not active")
        self.end_drag()
        result = self.crop.apply(self.current_image, self.filters)
        self._tool = Tool.NONE
        if result is not None:
            self.commit(result)
            self.reset_adjustments()
        return result

    def apply_adjustments(self, include_layers: bool = True) -> ImageBuffer:
        """
        Bake filters (and by default all layers) into a new history entry.

        Baked layers are removed so they are not drawn twice.
        """
        layers = self.layers.layers() if include_layers else []
        result = bake(self.current_image, self.filters, layers, self.display_size)
        self.commit(result)
        self.reset_adjustments()
        if include_layers:
            if self._tool is Tool.LAYER_SELECTED:
                self._tool = Tool.NONE
            self.layers.clear()
        return result

    def export(self) -> ImageBuffer:
        """Flattened PNG of what is on screen, without touching history."""
        return bake(self.current_image, self.filters, self.layers.layers(), self.display_size)

    def build_edit_request(self, instructions: str, style_reference: Optional[ImageBuffer] = None) -> SynthesisRequest:
        """Everything the synthesis collaborator needs to edit the current image."""
        prompt = build_edit_instructions(
            instructions,
            has_style_reference=style_reference is not None,
            has_mask=self.mask is not None,
        )
        return SynthesisRequest(
            base=self.current_image,
            instructions=prompt,
            style_reference=style_reference,
            mask=self.mask,
        )

    def accept_edit_result(self, buffer: ImageBuffer) -> bool:
        """Commit a synthesis result; the mask it was made with is dropped."""
        committed = self.commit(buffer)
        self.mask = None
        return committed

    def select_variation(self, buffer: ImageBuffer) -> bool:
        return self.commit(buffer)

    def _current_changed(self, previous: ImageBuffer) -> None:
        current = self.current_image
        if previous.size != current.size:
            # Layout must be recomputed for the new pixel size
            self.end_drag()
            self._display_size = None
            if self.crop.is_active:
                self.crop.activate(self.display_size)
            if self.mask_canvas is not None:
                self.mask_canvas = MaskCanvas(self.display_size, self._brush_size)
        if self.mask is not None and self.mask.size != current.size:
            logger.info(f"Dropped {self.mask.width}x{self.mask.height} mask, image is now {current.width}x{current.height}")
            self.mask = None

    def undo(self) -> bool:
        previous = self.current_image
        if not self.history.undo():
            return False
        self._current_changed(previous)
        return True

    def redo(self) -> bool:
        previous = self.current_image
        if not self.history.redo():
            return False
        self._current_changed(previous)
        return True
