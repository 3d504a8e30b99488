"""
Linear undo/redo history of baked images.

The history is an index-addressed log with an explicit active length.
Undo and redo only move the index. A new commit after an undo resets the
active length to just past the current entry before writing, so abandoned
entries become unreachable without any element being removed.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from MS_Libs.ImageEditingLib.image_models import ImageBuffer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryEntry:
    buffer: ImageBuffer
    mime_type: str


class EditHistory:
    """
    Undo/redo stack seeded with exactly one entry.

    Invariant: ``0 <= index < len(history)`` at all times.

    Example:
        >>> history = EditHistory(original)
        >>> history.push(edited)
        >>> history.undo()
        True
        >>> history.current.buffer is original
        True
    """

    def __init__(self, initial: ImageBuffer, mime_type: Optional[str] = None):
        self._log: List[HistoryEntry] = []
        self._length = 0
        self._index = 0
        self.reset(initial, mime_type)

    def __len__(self) -> int:
        return self._length

    @property
    def index(self) -> int:
        return self._index

    @property
    def current(self) -> HistoryEntry:
        return self._log[self._index]

    @property
    def can_undo(self) -> bool:
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        return self._index < self._length - 1

    def entries(self) -> Tuple[HistoryEntry, ...]:
        """Reachable entries, oldest first."""
        return tuple(self._log[: self._length])

    def push(self, buffer: ImageBuffer, mime_type: Optional[str] = None) -> HistoryEntry:
        """Discard everything after the current entry, then append and select."""
        entry = HistoryEntry(buffer, mime_type or buffer.mime_type)
        position = self._index + 1
        if position < len(self._log):
            self._log[position] = entry
        else:
            self._log.append(entry)
        self._length = position + 1
        self._index = position
        logger.debug(f"History push -> index {self._index} of {self._length}")
        return entry

    def undo(self) -> bool:
        """Step back one entry; no-op at the oldest entry."""
        if not self.can_undo:
            return False
        self._index -= 1
        return True

    def redo(self) -> bool:
        """Step forward one entry; no-op at the newest entry."""
        if not self.can_redo:
            return False
        self._index += 1
        return True

    def reset(self, initial: ImageBuffer, mime_type: Optional[str] = None) -> None:
        """Start over with a single entry (used when a different base image loads)."""
        self._log = [HistoryEntry(initial, mime_type or initial.mime_type)]
        self._length = 1
        self._index = 0
