"""
Tests for the freehand mask canvas.
"""

import unittest

import numpy as np

from MS_Libs.ImageEditingLib.image_models import Point, Size
from MS_Libs.ImageEditingLib.mask_canvas import MaskCanvas, validate_brush_size
from MS_Libs.errors import BakeFailure, GeometryInvalid


class TestMaskCanvas(unittest.TestCase):
    """Test stroke capture and native-size export."""

    def setUp(self):
        self.canvas = MaskCanvas(Size(100, 50), brush_size=10)

    def draw_line(self, start, end):
        self.canvas.begin_stroke(start)
        self.canvas.extend_stroke(end)
        self.canvas.end_stroke()

    def test_brush_size_range(self):
        """Should reject brush sizes out of range."""
        self.assertEqual(validate_brush_size(10), 10)
        with self.assertRaises(ValueError):
            validate_brush_size(9)
        with self.assertRaises(ValueError):
            MaskCanvas(Size(100, 50), brush_size=101)

    def test_zero_display_size_raises(self):
        """Should reject a zero display size."""
        with self.assertRaises(GeometryInvalid):
            MaskCanvas(Size(0, 50))

    def test_stroke_lifecycle(self):
        """Should record a stroke from begin to end."""
        self.canvas.begin_stroke(Point(10, 10))
        self.assertTrue(self.canvas.is_drawing)
        self.canvas.extend_stroke(Point(20, 20))
        self.canvas.end_stroke()
        self.assertFalse(self.canvas.is_drawing)
        self.assertEqual(self.canvas.strokes[0].points, [(10, 10), (20, 20)])
        self.assertTrue(self.canvas.has_strokes)

    def test_extend_without_stroke_is_ignored(self):
        """Should ignore points outside a stroke."""
        self.canvas.extend_stroke(Point(5, 5))
        self.assertEqual(self.canvas.strokes, [])

    def test_single_point_draws_nothing(self):
        """Should not draw a stroke with one point."""
        self.canvas.begin_stroke(Point(10, 10))
        self.canvas.end_stroke()
        self.assertFalse(self.canvas.has_strokes)
        self.assertIsNone(self.canvas.render().getbbox())

    def test_save_is_black_and_white_at_native_size(self):
        """Should save white strokes on black at native size."""
        self.draw_line(Point(10, 25), Point(90, 25))
        mask = self.canvas.save(Size(200, 100))

        self.assertEqual((mask.width, mask.height), (200, 100))
        self.assertEqual(mask.mime_type, "image/png")
        image = mask.to_image()
        self.assertEqual(image.mode, "RGB")
        # Stroke scaled by 2 lands on the middle row; corners stay black
        self.assertEqual(image.getpixel((100, 50)), (255, 255, 255))
        self.assertEqual(image.getpixel((0, 0)), (0, 0, 0))
        self.assertEqual(image.getpixel((199, 99)), (0, 0, 0))

    def test_save_without_strokes_is_all_black(self):
        """Should save an all black mask with no strokes."""
        mask = self.canvas.save(Size(30, 20))
        pixels = np.asarray(mask.to_image())
        self.assertEqual(int(pixels.max()), 0)

    def test_save_clears_strokes(self):
        """Should clear strokes after saving."""
        self.draw_line(Point(10, 10), Point(50, 10))
        self.canvas.save(Size(100, 50))
        self.assertEqual(self.canvas.strokes, [])

    def test_clear(self):
        """Should erase all strokes."""
        self.draw_line(Point(10, 10), Point(50, 10))
        self.canvas.clear()
        self.assertFalse(self.canvas.has_strokes)

    def test_brush_size_applies_to_next_stroke(self):
        """Should use the new brush size for the next stroke."""
        self.draw_line(Point(10, 10), Point(50, 10))
        self.canvas.brush_size = 30
        self.draw_line(Point(10, 30), Point(50, 30))
        self.assertEqual([stroke.width for stroke in self.canvas.strokes], [10, 30])

    def test_save_to_empty_size_raises(self):
        """Should reject saving to an empty size."""
        with self.assertRaises(BakeFailure):
            self.canvas.save(Size(0, 0))
