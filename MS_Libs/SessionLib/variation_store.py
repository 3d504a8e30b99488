"""
Bounded, deduplicated set of alternate renders for a project.

Merging puts incoming images first, keeps the first occurrence of each exact
byte content, and keeps at most MAX_VARIATIONS_TO_STORE entries. Similar but
not byte-identical images are distinct.
"""

import logging
from typing import Iterable, List, Optional, Sequence

from MS_Libs.ImageEditingLib.image_models import ImageBuffer
from MS_Libs.constants import MAX_VARIATIONS_TO_STORE

logger = logging.getLogger(__name__)


def dedupe(candidates: Iterable[ImageBuffer]) -> List[ImageBuffer]:
    """Keep the first occurrence of each content, preserving encounter order."""
    seen = set()
    unique: List[ImageBuffer] = []
    for candidate in candidates:
        key = candidate.content_key
        if key in seen:
            continue
        seen.add(key)
        unique.append(candidate)
    return unique


def merge_variations(
    existing: Sequence[ImageBuffer],
    incoming: Sequence[ImageBuffer],
    cap: int = MAX_VARIATIONS_TO_STORE,
) -> List[ImageBuffer]:
    """
    Merge new variations ahead of existing ones.

    Example:
        existing=[A, B], incoming=[B, C] -> [B, C, A]
    """
    if cap < 0:
        raise ValueError(f"cap must be >= 0, got {cap}")
    return dedupe([*incoming, *existing])[:cap]


def variations_after_main_change(
    previous_main: Optional[ImageBuffer],
    new_main: ImageBuffer,
    existing: Sequence[ImageBuffer],
    cap: int = MAX_VARIATIONS_TO_STORE,
) -> List[ImageBuffer]:
    """
    Variation list once the project's main image is replaced.

    The previous main image becomes the newest variation, and the new main
    image is removed from its own variation list.
    """
    incoming = [previous_main] if previous_main is not None else []
    merged = dedupe([*incoming, *existing])
    remaining = [candidate for candidate in merged if not candidate.same_content(new_main)]
    return remaining[:cap]


def selectable_images(main: ImageBuffer, variations: Sequence[ImageBuffer]) -> List[ImageBuffer]:
    """Gallery shown for choosing a variation: main image first, no duplicates."""
    return dedupe([main, *variations])


class VariationStore:
    """Variations attached to one project."""

    def __init__(self, variations: Sequence[ImageBuffer] = (), cap: int = MAX_VARIATIONS_TO_STORE):
        self.cap = cap
        self._variations: List[ImageBuffer] = dedupe(variations)[:cap]

    def __len__(self) -> int:
        return len(self._variations)

    def __iter__(self):
        return iter(list(self._variations))

    @property
    def variations(self) -> List[ImageBuffer]:
        return list(self._variations)

    def add(self, incoming: Sequence[ImageBuffer]) -> List[ImageBuffer]:
        """Merge newly generated variations in front of the stored ones."""
        self._variations = merge_variations(self._variations, incoming, self.cap)
        logger.debug(f"Merged {len(incoming)} variations, {len(self._variations)} stored")
        return self.variations

    def on_main_image_changed(self, previous_main: Optional[ImageBuffer], new_main: ImageBuffer) -> List[ImageBuffer]:
        if previous_main is not None and previous_main.same_content(new_main):
            return self.variations
        self._variations = variations_after_main_change(previous_main, new_main, self._variations, self.cap)
        return self.variations

    def selectable(self, main: ImageBuffer) -> List[ImageBuffer]:
        return selectable_images(main, self._variations)
