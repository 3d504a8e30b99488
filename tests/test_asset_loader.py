"""
Tests for loading image assets.
"""

import unittest
import tempfile
from pathlib import Path
from unittest import mock

from PIL import Image

from MS_Libs.ProjStoreLib.asset_loader import (
    decode_asset,
    get_supported_image_formats,
    is_supported_format,
    load_image_asset,
)
from MS_Libs.errors import DecodeFailure
from conftest import make_buffer


class TestAssetLoader(unittest.TestCase):
    """Test asset loading and format checks."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.dir = Path(self.tmpdir.name)

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_supported_formats(self):
        """Should list the image extensions the loader accepts."""
        formats = get_supported_image_formats()
        self.assertIn(".png", formats)
        self.assertIn(".jpg", formats)
        self.assertEqual(formats, sorted(formats))

    def test_is_supported_format(self):
        """Should match extensions case-insensitively."""
        self.assertTrue(is_supported_format(Path("photo.JPG")))
        self.assertFalse(is_supported_format(Path("notes.txt")))

    def test_load_png(self):
        """Should load a PNG file with its pixel size and mime type."""
        path = self.dir / "logo.png"
        Image.new("RGBA", (30, 20), (0, 0, 0, 0)).save(path)

        buffer = load_image_asset(path)

        self.assertEqual((buffer.width, buffer.height), (30, 20))
        self.assertEqual(buffer.mime_type, "image/png")
        self.assertEqual(buffer.data, path.read_bytes())

    def test_load_jpeg_detects_mime(self):
        """Should detect JPEG from the file contents."""
        path = self.dir / "photo.jpg"
        Image.new("RGB", (16, 16), "blue").save(path, format="JPEG")
        self.assertEqual(load_image_asset(path).mime_type, "image/jpeg")

    def test_missing_file(self):
        """Should raise for a path that does not exist."""
        with self.assertRaises(FileNotFoundError):
            load_image_asset(self.dir / "missing.png")

    def test_unsupported_extension(self):
        """Should reject files with an unsupported extension."""
        path = self.dir / "notes.txt"
        path.write_text("hello")
        with self.assertRaises(ValueError):
            load_image_asset(path)

    def test_corrupt_image(self):
        """Should raise DecodeFailure for unreadable bytes."""
        path = self.dir / "broken.png"
        path.write_bytes(b"definitely not a png")
        with self.assertRaises(DecodeFailure):
            load_image_asset(path)

    def test_decode_asset(self):
        """Should wrap raw bytes as an ImageBuffer."""
        original = make_buffer(5, 7)
        buffer = decode_asset(original.data, "image/png")
        self.assertEqual((buffer.width, buffer.height), (5, 7))

    def test_decode_empty_asset(self):
        """Should reject an empty payload."""
        with self.assertRaises(DecodeFailure):
            decode_asset(b"")

    def test_decode_base64_data_url(self):
        """Should decode a base64 data URL."""
        original = make_buffer(3, 3)
        buffer = type(original).from_base64("data:image/png;base64," + original.to_base64())
        self.assertEqual(buffer, original)

    def test_oversized_image_is_a_decode_failure(self):
        """Should report decompression bombs as DecodeFailure."""
        data = make_buffer(20, 20).data
        with mock.patch.object(Image, "MAX_IMAGE_PIXELS", 10):
            with self.assertRaises(DecodeFailure):
                decode_asset(data, "image/png")
