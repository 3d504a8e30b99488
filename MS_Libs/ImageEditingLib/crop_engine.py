"""
Interactive crop rectangle and destructive crop.

State machine::

    IDLE --activate--> ACTIVE --apply--> IDLE
                              --cancel--> IDLE

While ACTIVE the rectangle is edited in display space through the geometry
helpers. Applying maps it onto the native pixel grid and asks the bake
engine for the sub-region, with the current filters baked in.
"""

import logging
from enum import Enum
from typing import Optional

from MS_Libs.ImageEditingLib.bake_engine import bake
from MS_Libs.ImageEditingLib.filter_pipeline import IDENTITY_FILTERS, FilterState
from MS_Libs.ImageEditingLib.geometry import centered_box, clamp_box, clamp_resize, map_box_to_native
from MS_Libs.ImageEditingLib.image_models import Box, ImageBuffer, Point, Size
from MS_Libs.constants import CROP_INITIAL_FRACTION, MIN_BOX_SIZE

logger = logging.getLogger(__name__)


class CropState(Enum):
    IDLE = "idle"
    ACTIVE = "active"


class CropEngine:
    """Holds the crop rectangle for one editing session."""

    def __init__(self, min_size: float = MIN_BOX_SIZE):
        self.min_size = min_size
        self.state = CropState.IDLE
        self.rect: Optional[Box] = None
        self.display_size: Optional[Size] = None

    @property
    def is_active(self) -> bool:
        return self.state is CropState.ACTIVE

    def activate(self, display_size: Size) -> Box:
        """Enter ACTIVE with a centered box covering 60% of each axis."""
        self.display_size = display_size
        self.rect = clamp_box(
            centered_box(display_size, CROP_INITIAL_FRACTION),
            display_size,
            self.min_size,
        )
        self.state = CropState.ACTIVE
        logger.debug(f"Crop activated with {self.rect}")
        return self.rect

    def set_rect(self, rect: Box) -> Box:
        """Replace the rectangle, clamped into the displayed image."""
        self._require_active()
        self.rect = clamp_box(rect, self.display_size, self.min_size)
        return self.rect

    def drag(self, start_rect: Box, delta: Point, handle: str) -> Box:
        """Apply a handle drag measured from ``start_rect``."""
        self._require_active()
        self.rect = clamp_resize(start_rect, delta, handle, self.display_size, self.min_size)
        return self.rect

    def cancel(self) -> None:
        self.state = CropState.IDLE
        self.rect = None

    def native_region(self, native_size: Size) -> Optional[Box]:
        """The crop rectangle on the native pixel grid, or None if degenerate."""
        if self.rect is None or self.display_size is None:
            return None
        region = map_box_to_native(self.rect, native_size, self.display_size)
        if region.is_degenerate:
            return None
        return region

    def apply(self, base: ImageBuffer, filters: FilterState = IDENTITY_FILTERS) -> Optional[ImageBuffer]:
        """
        Crop ``base`` to the rectangle and leave ACTIVE.

        A rectangle with no area after mapping is a no-op that returns None.
        On error the engine stays ACTIVE so the user can retry.

        Returns:
            New buffer whose size is the native crop size, or None
        """
        self._require_active()
        region = self.native_region(base.size)
        if region is None:
            logger.warning("Crop rectangle has no area; nothing applied")
            self.cancel()
            return None

        result = bake(base, filters, (), self.display_size, crop_rect=region)
        logger.info(f"Applied crop {region} -> {result.width}x{result.height}")
        self.cancel()
        return result

    def _require_active(self) -> None:
        if not self.is_active or self.display_size is None:
            raise RuntimeError("Crop is not active")
