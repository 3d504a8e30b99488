"""
Tests for the adjustment stack.

Tests cover:
- Slider validation and identity detection
- CSS preview string
- Baked colour math for each filter
- Gaussian blur helper
"""

import unittest

import numpy as np
import pytest
from PIL import Image, ImageChops

from MS_Libs.ImageEditingLib.filter_pipeline import (
    IDENTITY_FILTERS,
    FilterState,
    apply_gaussian_blur,
    bake_filters,
    preview_transform,
)


def bake_pixel(color, **sliders):
    """Bake a 4x4 solid image and return the top-left RGBA pixel."""
    image = Image.new("RGB", (4, 4), color)
    return bake_filters(image, FilterState(**sliders)).getpixel((0, 0))


class TestFilterState(unittest.TestCase):
    """Test FilterState validation and helpers."""

    def test_defaults_are_identity(self):
        """Should default every filter to its identity value."""
        self.assertTrue(FilterState().is_identity)
        self.assertEqual(IDENTITY_FILTERS, FilterState())

    def test_non_identity(self):
        """Should report a changed filter as non-identity."""
        self.assertFalse(FilterState(sepia=1).is_identity)

    def test_full_hue_turn_is_identity(self):
        """Should treat a 360 degree hue turn as identity."""
        self.assertTrue(FilterState(hue_rotate=360).is_identity)

    def test_out_of_range_raises(self):
        """Should reject values outside each range."""
        with self.assertRaises(ValueError):
            FilterState(brightness=10)
        with self.assertRaises(ValueError):
            FilterState(blur=21)
        with self.assertRaises(ValueError):
            FilterState(saturation=-1)

    def test_non_numeric_raises(self):
        """Should reject non-numeric values."""
        with self.assertRaises(TypeError):
            FilterState(sepia="40")

    def test_with_value_returns_new_state(self):
        """Should return a new state and keep the old one."""
        state = IDENTITY_FILTERS.with_value("sepia", 40)
        self.assertEqual(state.sepia, 40)
        self.assertEqual(IDENTITY_FILTERS.sepia, 0)

    def test_with_value_unknown_filter(self):
        """Should reject unknown filter names."""
        with self.assertRaises(KeyError):
            IDENTITY_FILTERS.with_value("vignette", 10)

    def test_from_dict_ignores_unknown_keys(self):
        """Should ignore unknown keys when loading."""
        state = FilterState.from_dict({"brightness": 120, "vignette": 3})
        self.assertEqual(state.brightness, 120)
        self.assertEqual(state.to_dict()["brightness"], 120)


class TestPreviewTransform:
    """Tests for the CSS preview string."""

    def test_identity_string(self):
        """Should describe the identity preview."""
        assert preview_transform(IDENTITY_FILTERS) == (
            "brightness(100%) contrast(100%) saturate(100%) sepia(0%) "
            "grayscale(0%) blur(0px) hue-rotate(0deg)"
        )

    def test_values_in_order(self):
        """Should list filters in composition order."""
        state = FilterState(brightness=120, sepia=40, blur=2.5, hue_rotate=90)
        assert preview_transform(state) == (
            "brightness(120%) contrast(100%) saturate(100%) sepia(40%) "
            "grayscale(0%) blur(2.5px) hue-rotate(90deg)"
        )


class TestBakeFilters:
    """Tests for bake_filters colour math."""

    def test_identity_returns_equal_copy(self):
        """Should return equal pixels for identity filters."""
        image = Image.new("RGB", (8, 8), (12, 200, 99))
        result = bake_filters(image, IDENTITY_FILTERS)
        assert result.mode == "RGBA"
        assert result is not image
        assert ImageChops.difference(result.convert("RGB"), image).getbbox() is None

    def test_brightness_scales_channels(self):
        """Should scale channels by brightness."""
        assert bake_pixel((100, 100, 100), brightness=150) == (150, 150, 150, 255)

    def test_brightness_clips(self):
        """Should clip bright channels at 255."""
        assert bake_pixel((200, 100, 0), brightness=150) == (255, 150, 0, 255)

    def test_contrast_pulls_towards_grey(self):
        """Should pull values towards mid grey at low contrast."""
        assert bake_pixel((0, 0, 0), contrast=50) == (64, 64, 64, 255)

    def test_full_grayscale_of_red(self):
        """Should convert red to its luminance grey."""
        assert bake_pixel((255, 0, 0), grayscale=100) == (54, 54, 54, 255)

    def test_zero_saturation_removes_colour(self):
        """Should remove colour at zero saturation."""
        r, g, b, _ = bake_pixel((255, 0, 0), saturation=0)
        assert r == g == b

    def test_full_sepia_of_white(self):
        """Should tint white with full sepia."""
        assert bake_pixel((255, 255, 255), sepia=100) == (255, 255, 239, 255)

    def test_hue_rotate_half_turn(self):
        """Should rotate hue by 180 degrees."""
        r, g, b, _ = bake_pixel((255, 0, 0), hue_rotate=180)
        assert r == 0
        assert g > 100 and b > 100

    def test_alpha_is_preserved(self):
        """Should leave alpha untouched."""
        image = Image.new("RGBA", (4, 4), (100, 100, 100, 128))
        result = bake_filters(image, FilterState(brightness=120))
        assert result.getpixel((0, 0))[3] == 128

    def test_order_brightness_before_contrast(self):
        """Should apply brightness before contrast."""
        # contrast(brightness(x)) differs from brightness(contrast(x))
        r, _, _, _ = bake_pixel((200, 200, 200), brightness=50, contrast=150)
        # 200 * 0.5 = 100 -> 100/255 * 1.5 - 0.25 = 0.338 -> 86
        assert r == 86

    def test_blur_spreads_a_point(self):
        """Should spread a single point."""
        image = Image.new("RGB", (21, 21), (0, 0, 0))
        image.putpixel((10, 10), (255, 255, 255))
        result = np.asarray(bake_filters(image, FilterState(blur=2)))
        assert result[10, 10, 0] < 255
        assert result[10, 12, 0] > 0

    def test_blur_scale_widens_blur(self):
        """Should widen the blur with the native scale."""
        image = Image.new("RGB", (41, 41), (0, 0, 0))
        image.putpixel((20, 20), (255, 255, 255))
        narrow = np.asarray(bake_filters(image, FilterState(blur=1), blur_scale=1.0))
        wide = np.asarray(bake_filters(image, FilterState(blur=1), blur_scale=4.0))
        assert wide[20, 20, 0] < narrow[20, 20, 0]

    def test_source_is_not_modified(self):
        """Should leave the source image untouched."""
        image = Image.new("RGB", (4, 4), (100, 100, 100))
        bake_filters(image, FilterState(brightness=150, sepia=50))
        assert image.getpixel((0, 0)) == (100, 100, 100)


class TestGaussianBlur(unittest.TestCase):
    """Test apply_gaussian_blur."""

    def setUp(self):
        self.test_image = Image.new("RGB", (50, 50), "red")

    def test_zero_radius_is_a_copy(self):
        """Should return a copy for a zero radius."""
        result = apply_gaussian_blur(self.test_image, 0)
        self.assertIsNot(result, self.test_image)
        self.assertEqual(result.tobytes(), self.test_image.tobytes())

    def test_keeps_mode_and_size(self):
        """Should keep mode and size."""
        result = apply_gaussian_blur(self.test_image, 3.0)
        self.assertEqual(result.mode, "RGB")
        self.assertEqual(result.size, (50, 50))

    def test_negative_radius_raises(self):
        """Should reject a negative radius."""
        with self.assertRaises(ValueError):
            apply_gaussian_blur(self.test_image, -1)

    def test_invalid_input_type(self):
        """Should reject non-image input."""
        with pytest.raises(TypeError):
            apply_gaussian_blur("not_an_image", 2)
