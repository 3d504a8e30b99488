"""
Pytest configuration and shared fixtures for Mockup Studio tests.

This module provides shared test fixtures and configuration
used across multiple test modules.
"""

import numpy as np
import pytest
from PIL import Image

from MS_Libs.ImageEditingLib.image_models import ImageBuffer


def make_gradient_image(width=100, height=100):
    """RGB image where every pixel differs from its neighbours."""
    xs = np.linspace(0, 255, width, dtype=np.float64)
    ys = np.linspace(0, 255, height, dtype=np.float64)
    red = np.tile(xs, (height, 1))
    green = np.tile(ys[:, None], (1, width))
    blue = (red + green) / 2.0
    pixels = np.stack([red, green, blue], axis=2).astype("uint8")
    return Image.fromarray(pixels)


def make_buffer(width=100, height=100, color=(255, 0, 0)):
    return ImageBuffer.from_image(Image.new("RGB", (width, height), color))


@pytest.fixture
def temp_project_dir(tmp_path):
    """
    Provide a temporary directory for project files.

    Args:
        tmp_path: Pytest's built-in temporary directory fixture

    Returns:
        Path object pointing to a temporary directory
    """
    return tmp_path


@pytest.fixture
def red_buffer():
    """100x100 solid red PNG buffer."""
    return make_buffer(100, 100, (255, 0, 0))


@pytest.fixture
def blue_buffer():
    """100x100 solid blue PNG buffer."""
    return make_buffer(100, 100, (0, 0, 255))


@pytest.fixture
def white_buffer():
    """200x200 solid white PNG buffer."""
    return make_buffer(200, 200, (255, 255, 255))


@pytest.fixture
def gradient_buffer():
    """
    100x100 gradient PNG buffer.

    Returns:
        ImageBuffer whose pixels vary along both axes, so crops and
        offsets are detectable
    """
    return ImageBuffer.from_image(make_gradient_image(100, 100))
