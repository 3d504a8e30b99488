"""
SessionLib - Edit history, variations and the editing session

This module provides the undo/redo history of baked images, the bounded
variation store, and the session object that drives the tool state machine.
"""

from MS_Libs.SessionLib.edit_history import EditHistory, HistoryEntry
from MS_Libs.SessionLib.variation_store import (
    VariationStore,
    dedupe,
    merge_variations,
    selectable_images,
    variations_after_main_change,
)
from MS_Libs.SessionLib.editing_session import EditingSession, Tool

__all__ = [
    "EditHistory",
    "HistoryEntry",
    "VariationStore",
    "dedupe",
    "merge_variations",
    "selectable_images",
    "variations_after_main_change",
    "EditingSession",
    "Tool",
]
