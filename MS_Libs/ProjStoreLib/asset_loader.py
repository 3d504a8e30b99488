"""
Asset loading for source images, style references and overlays.

This module turns user-supplied files or raw bytes into ImageBuffer objects.
It supports the standard still-image formats Pillow can read.

Functions:
    get_supported_image_formats: Get list of supported file extensions
    is_supported_format: Check whether a path has a supported extension
    decode_asset: Wrap raw bytes as an ImageBuffer
    load_image_asset: Load an image file from disk
"""

import logging
from pathlib import Path
from typing import List, Optional

from MS_Libs.ImageEditingLib.image_models import ImageBuffer
from MS_Libs.constants import SUPPORTED_STANDARD_IMAGES
from MS_Libs.errors import DecodeFailure

logger = logging.getLogger(__name__)


def get_supported_image_formats() -> List[str]:
    """
    Get list of supported standard image formats.

    Returns:
        List of file extensions (e.g., ['.bmp', '.gif', ...])
    """
    return sorted(SUPPORTED_STANDARD_IMAGES)


def is_supported_format(file_path: Path) -> bool:
    """
    Check if a file path has a supported format.

    Args:
        file_path: Path to the file

    Returns:
        True if file extension is supported
    """
    return Path(file_path).suffix.lower() in SUPPORTED_STANDARD_IMAGES


def decode_asset(data: bytes, mime_type: Optional[str] = None) -> ImageBuffer:
    """
    Wrap raw image bytes.

    Raises:
        DecodeFailure: If the bytes are not an image
    """
    if not data:
        raise DecodeFailure("Asset is empty")
    return ImageBuffer.from_bytes(data, mime_type)


def load_image_asset(file_path: Path) -> ImageBuffer:
    """
    Load an image file as an ImageBuffer.

    Args:
        file_path: Path to the image file

    Returns:
        Buffer holding the file's original encoded bytes

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the extension is not supported
        DecodeFailure: If the file is not a readable image
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")
    if not path.is_file():
        raise ValueError(f"Path is not a file: {path}")
    if not is_supported_format(path):
        raise ValueError(
            f"Unsupported image format: {path.suffix}. "
            f"Supported formats: {', '.join(get_supported_image_formats())}"
        )

    try:
        buffer = decode_asset(path.read_bytes())
    except DecodeFailure as exc:
        raise DecodeFailure(f"Failed to load image {path.name}: {exc}") from exc

    logger.debug(f"Loaded asset {path.name} ({buffer.width}x{buffer.height}, {buffer.mime_type})")
    return buffer
