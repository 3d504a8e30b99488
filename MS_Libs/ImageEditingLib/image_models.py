"""
Image editing data models for Mockup Studio.

This module defines core data structures used throughout the composition engine.

Classes:
    ImageBuffer: Immutable encoded image with its pixel size and mime type
    Size: Width/height pair in display or native space
    Point: x/y pair in display space
    Box: Axis-aligned rectangle (x, y, width, height)
"""

import base64
import hashlib
import io
from dataclasses import dataclass
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

from MS_Libs.constants import MIME_TYPES, OUTPUT_FORMAT, OUTPUT_MIME_TYPE
from MS_Libs.errors import DecodeFailure


def mime_type_for_format(image_format: Optional[str]) -> str:
    """Map a Pillow format name (PNG, JPEG, ...) to its mime type."""
    if not image_format:
        return OUTPUT_MIME_TYPE
    return MIME_TYPES.get(image_format.upper(), f"image/{image_format.lower()}")


def format_for_mime_type(mime_type: str) -> str:
    """Map a mime type back to a Pillow format name."""
    for image_format, known_mime in MIME_TYPES.items():
        if known_mime == mime_type:
            return image_format
    return mime_type.split("/")[-1].upper()


@dataclass(frozen=True)
class Size:
    width: float
    height: float

    @property
    def is_positive(self) -> bool:
        return self.width > 0 and self.height > 0

    def as_int_tuple(self) -> Tuple[int, int]:
        return (int(round(self.width)), int(round(self.height)))


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Box:
    """Rectangle anchored at its top-left corner."""
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def size(self) -> Size:
        return Size(self.width, self.height)

    @property
    def is_degenerate(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def translated(self, dx: float, dy: float) -> "Box":
        return Box(self.x + dx, self.y + dy, self.width, self.height)

    def scaled(self, scale_x: float, scale_y: float) -> "Box":
        return Box(self.x * scale_x, self.y * scale_y, self.width * scale_x, self.height * scale_y)

    def as_pil_box(self) -> Tuple[int, int, int, int]:
        """Return (left, upper, right, lower) on the integer pixel grid."""
        left = int(round(self.x))
        top = int(round(self.y))
        return (left, top, int(round(self.right)), int(round(self.bottom)))


@dataclass(frozen=True)
class ImageBuffer:
    """
    An encoded image that never changes once created.

    Every edit produces a new buffer. Two buffers are the same image for
    history and variation purposes when their encoded bytes are identical.

    Attributes:
        data: Encoded image bytes (PNG, JPEG, ...)
        width: Pixel width of the decoded image
        height: Pixel height of the decoded image
        mime_type: Format tag of the encoded bytes
    """
    data: bytes
    width: int
    height: int
    mime_type: str = OUTPUT_MIME_TYPE

    def __post_init__(self):
        if not isinstance(self.data, (bytes, bytearray)):
            raise TypeError(f"data must be bytes, got {type(self.data)}")
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {self.width}x{self.height}")

    def __repr__(self) -> str:
        return (
            f"ImageBuffer({self.width}x{self.height}, {self.mime_type}, "
            f"{len(self.data)} bytes, key={self.content_key[:12]})"
        )

    @property
    def size(self) -> Size:
        return Size(self.width, self.height)

    @property
    def content_key(self) -> str:
        """Digest of the encoded bytes, used for exact-content deduplication."""
        return hashlib.sha256(self.data).hexdigest()

    def same_content(self, other: Optional["ImageBuffer"]) -> bool:
        return other is not None and self.data == other.data

    def to_image(self) -> Image.Image:
        """
        Decode the buffer into a Pillow image.

        Raises:
            DecodeFailure: If the bytes are not a readable image
        """
        try:
            image = Image.open(io.BytesIO(self.data))
            image.load()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
            raise DecodeFailure(f"Could not decode {self.mime_type} image: {exc}") from exc
        return image

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    @classmethod
    def from_image(cls, image: Image.Image, save_format: str = OUTPUT_FORMAT) -> "ImageBuffer":
        """Encode a Pillow image into a new buffer."""
        stream = io.BytesIO()
        if save_format.upper() in ("JPEG", "JPG") and image.mode not in ("RGB", "L"):
            image = image.convert("RGB")
        image.save(stream, format=save_format)
        return cls(
            data=stream.getvalue(),
            width=image.width,
            height=image.height,
            mime_type=mime_type_for_format(save_format),
        )

    @classmethod
    def from_bytes(cls, data: bytes, mime_type: Optional[str] = None) -> "ImageBuffer":
        """
        Wrap encoded bytes, reading the pixel size from the image header.

        Args:
            data: Encoded image bytes
            mime_type: Format tag; detected from the bytes when omitted

        Raises:
            DecodeFailure: If the bytes cannot be interpreted as an image
        """
        try:
            with Image.open(io.BytesIO(data)) as image:
                image.verify()
            with Image.open(io.BytesIO(data)) as image:
                width, height = image.size
                detected = image.format
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError, SyntaxError) as exc:
            raise DecodeFailure(f"Bytes are not a readable image: {exc}") from exc
        return cls(
            data=bytes(data),
            width=width,
            height=height,
            mime_type=mime_type or mime_type_for_format(detected),
        )

    @classmethod
    def from_base64(cls, encoded: str, mime_type: Optional[str] = None) -> "ImageBuffer":
        """Decode a base64 payload (optionally a data URL) into a buffer."""
        if encoded.startswith("data:"):
            header, _, encoded = encoded.partition(",")
            if mime_type is None:
                mime_type = header[len("data:"):].split(";")[0] or None
        try:
            raw = base64.b64decode(encoded, validate=True)
        except (ValueError, TypeError) as exc:
            raise DecodeFailure(f"Invalid base64 image payload: {exc}") from exc
        return cls.from_bytes(raw, mime_type)
