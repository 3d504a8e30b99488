"""
Short-lived pointer interactions (drag, resize, crop handle, mask stroke).

A DragSession captures everything known at pointer-down: what is being
dragged, which handle, where the pointer started and the target's starting
geometry. Each pointer-move computes the new geometry from the start state
and the total delta, so intermediate states are always valid and a
pointer-up simply ends the session.
"""

from dataclasses import dataclass
from typing import Literal, Optional

from MS_Libs.ImageEditingLib.geometry import HANDLES
from MS_Libs.ImageEditingLib.image_models import Box, Point, Size

DragKind = Literal["layer_move", "layer_resize", "crop", "mask_stroke"]
DRAG_KINDS = ("layer_move", "layer_resize", "crop", "mask_stroke")


@dataclass(frozen=True)
class DragSession:
    """State captured when a drag starts.

    Attributes:
        kind: What the drag manipulates
        start: Pointer position at pointer-down (display space)
        handle: Crop handle (``"move"``, ``"nw"``, ...) for crop drags
        layer_id: Target layer for layer drags
        start_box: Target box at pointer-down (crop rect or layer bounds)
        start_font_size: Text size at pointer-down for text resizes
        aspect_ratio: Overlay ratio at pointer-down for overlay resizes
    """
    kind: DragKind
    start: Point
    handle: str = "move"
    layer_id: Optional[str] = None
    start_box: Optional[Box] = None
    start_font_size: Optional[float] = None
    aspect_ratio: Optional[float] = None

    def __post_init__(self):
        if self.kind not in DRAG_KINDS:
            raise ValueError(f"Unknown drag kind: {self.kind}")
        if self.handle not in HANDLES:
            raise ValueError(f"Unknown handle: {self.handle}")
        if self.kind in ("layer_move", "layer_resize") and not self.layer_id:
            raise ValueError(f"{self.kind} drag requires a layer_id")

    def delta(self, pointer: Point) -> Point:
        return Point(pointer.x - self.start.x, pointer.y - self.start.y)

    def moved_position(self, pointer: Point) -> Point:
        """Unclamped top-left of the dragged element for a move drag."""
        if self.start_box is None:
            raise ValueError("Move drag has no start box")
        offset = self.delta(pointer)
        return Point(self.start_box.x + offset.x, self.start_box.y + offset.y)

    @property
    def start_size(self) -> Optional[Size]:
        if self.start_box is None:
            return None
        return self.start_box.size
