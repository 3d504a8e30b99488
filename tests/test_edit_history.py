"""
Tests for the undo/redo history.
"""

import unittest

from MS_Libs.SessionLib.edit_history import EditHistory
from conftest import make_buffer


class TestEditHistory(unittest.TestCase):
    """Test EditHistory navigation and truncation."""

    def setUp(self):
        self.a = make_buffer(10, 10, (255, 0, 0))
        self.b = make_buffer(10, 10, (0, 255, 0))
        self.c = make_buffer(10, 10, (0, 0, 255))
        self.d = make_buffer(10, 10, (0, 0, 0))
        self.history = EditHistory(self.a)

    def buffers(self):
        return [entry.buffer for entry in self.history.entries()]

    def test_starts_with_one_entry(self):
        """Should start with the base image as the only entry."""
        self.assertEqual(len(self.history), 1)
        self.assertEqual(self.history.index, 0)
        self.assertIs(self.history.current.buffer, self.a)
        self.assertEqual(self.history.current.mime_type, "image/png")
        self.assertFalse(self.history.can_undo)
        self.assertFalse(self.history.can_redo)

    def test_push_advances(self):
        """Should move the index to a pushed entry."""
        self.history.push(self.b)
        self.assertEqual(len(self.history), 2)
        self.assertEqual(self.history.index, 1)
        self.assertIs(self.history.current.buffer, self.b)

    def test_undo_redo(self):
        """Should move the index back and forth."""
        self.history.push(self.b)
        self.assertTrue(self.history.undo())
        self.assertIs(self.history.current.buffer, self.a)
        self.assertTrue(self.history.redo())
        self.assertIs(self.history.current.buffer, self.b)

    def test_undo_at_start_is_noop(self):
        """Should not undo past the first entry."""
        self.assertFalse(self.history.undo())
        self.assertEqual(self.history.index, 0)

    def test_redo_at_end_is_noop(self):
        """Should not redo past the last entry."""
        self.history.push(self.b)
        self.assertFalse(self.history.redo())
        self.assertEqual(self.history.index, 1)

    def test_push_after_undo_discards_redo_branch(self):
        """Should drop the redo branch when pushing after undo."""
        self.history.push(self.b)
        self.history.push(self.c)
        self.history.undo()
        self.history.undo()

        self.history.push(self.d)

        self.assertEqual(self.buffers(), [self.a, self.d])
        self.assertEqual(self.history.index, 1)
        self.assertFalse(self.history.can_redo)
        self.assertFalse(self.history.redo())

    def test_push_after_single_undo(self):
        """Should replace the undone entry."""
        self.history.push(self.b)
        self.history.push(self.c)
        self.history.undo()
        self.history.push(self.d)
        self.assertEqual(self.buffers(), [self.a, self.b, self.d])

    def test_mime_type_override(self):
        """Should record an explicit mime type."""
        entry = self.history.push(self.b, mime_type="image/jpeg")
        self.assertEqual(entry.mime_type, "image/jpeg")

    def test_reset(self):
        """Should start over from a new base."""
        self.history.push(self.b)
        self.history.reset(self.c)
        self.assertEqual(self.buffers(), [self.c])
        self.assertEqual(self.history.index, 0)

    def test_index_stays_in_range(self):
        """Should keep the index in range under any sequence."""
        for buffer in (self.b, self.c, self.d):
            self.history.push(buffer)
        for _ in range(10):
            self.history.undo()
            self.assertTrue(0 <= self.history.index < len(self.history))
        for _ in range(10):
            self.history.redo()
            self.assertTrue(0 <= self.history.index < len(self.history))
