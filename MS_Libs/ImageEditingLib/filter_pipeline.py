"""
Non-destructive adjustment stack and its destructive bake.

Seven independent sliders compose in a fixed order:

    brightness -> contrast -> saturate -> sepia -> grayscale -> blur -> hue-rotate

The live preview is described as a CSS filter string; the bake reproduces the
same functions with the Filter Effects color matrices so what the user saw is
what gets written into pixels.

Example:
    >>> state = FilterState(brightness=120, sepia=40)
    >>> preview_transform(state)
    'brightness(120%) contrast(100%) saturate(100%) sepia(40%) grayscale(0%) blur(0px) hue-rotate(0deg)'
    >>> baked = bake_filters(image, state)
"""

import math
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict

import numpy as np
from PIL import Image, ImageFilter

from MS_Libs.constants import (
    BLUR_RANGE,
    BRIGHTNESS_RANGE,
    CONTRAST_RANGE,
    FILTER_ORDER,
    GRAYSCALE_RANGE,
    HUE_ROTATE_RANGE,
    SATURATION_RANGE,
    SEPIA_RANGE,
)

FILTER_RANGES = {
    "brightness": BRIGHTNESS_RANGE,
    "contrast": CONTRAST_RANGE,
    "saturation": SATURATION_RANGE,
    "sepia": SEPIA_RANGE,
    "grayscale": GRAYSCALE_RANGE,
    "blur": BLUR_RANGE,
    "hue_rotate": HUE_ROTATE_RANGE,
}

# CSS function name and unit for each slider
_CSS_FUNCTIONS = {
    "brightness": ("brightness", "%"),
    "contrast": ("contrast", "%"),
    "saturation": ("saturate", "%"),
    "sepia": ("sepia", "%"),
    "grayscale": ("grayscale", "%"),
    "blur": ("blur", "px"),
    "hue_rotate": ("hue-rotate", "deg"),
}


@dataclass(frozen=True)
class FilterState:
    """Slider values for the adjustment stack.

    Attributes:
        brightness: Percent, 50-150 (identity 100)
        contrast: Percent, 50-150 (identity 100)
        saturation: Percent, 0-200 (identity 100)
        sepia: Percent, 0-100 (identity 0)
        grayscale: Percent, 0-100 (identity 0)
        blur: Display pixels, 0-20 (identity 0)
        hue_rotate: Degrees, 0-360 (identity 0)
    """
    brightness: float = BRIGHTNESS_RANGE[2]
    contrast: float = CONTRAST_RANGE[2]
    saturation: float = SATURATION_RANGE[2]
    sepia: float = SEPIA_RANGE[2]
    grayscale: float = GRAYSCALE_RANGE[2]
    blur: float = BLUR_RANGE[2]
    hue_rotate: float = HUE_ROTATE_RANGE[2]

    def __post_init__(self):
        """Validate every slider against its range."""
        for name, (low, high, _identity) in FILTER_RANGES.items():
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or isinstance(value, bool):
                raise TypeError(f"{name} must be a number, got {type(value)}")
            if not (low <= value <= high):
                raise ValueError(f"{name} must be {low:g}-{high:g}, got {value}")

    @property
    def is_identity(self) -> bool:
        return all(self.is_identity_for(name) for name in FILTER_ORDER)

    def is_identity_for(self, name: str) -> bool:
        value = getattr(self, name)
        identity = FILTER_RANGES[name][2]
        if name == "hue_rotate":
            # 360 degrees is a full turn
            return math.isclose(value % 360.0, 0.0)
        return value == identity

    def with_value(self, name: str, value: float) -> "FilterState":
        if name not in FILTER_RANGES:
            raise KeyError(f"Unknown filter: {name}")
        return replace(self, **{name: value})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FilterState":
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in names})


IDENTITY_FILTERS = FilterState()


def preview_transform(state: FilterState) -> str:
    """
    Describe the adjustment stack as a CSS ``filter`` value for live display.

    The order of functions is the order the bake applies them in.
    """
    parts = []
    for name in FILTER_ORDER:
        function, unit = _CSS_FUNCTIONS[name]
        parts.append(f"{function}({getattr(state, name):g}{unit})")
    return " ".join(parts)


# ============================================================================
# Color matrices (Filter Effects Module Level 1)
# ============================================================================

def _saturate_matrix(amount: float) -> np.ndarray:
    s = amount
    return np.array([
        [0.213 + 0.787 * s, 0.715 - 0.715 * s, 0.072 - 0.072 * s],
        [0.213 - 0.213 * s, 0.715 + 0.285 * s, 0.072 - 0.072 * s],
        [0.213 - 0.213 * s, 0.715 - 0.715 * s, 0.072 + 0.928 * s],
    ])


def _sepia_matrix(amount: float) -> np.ndarray:
    a = 1.0 - min(1.0, amount)
    return np.array([
        [0.393 + 0.607 * a, 0.769 - 0.769 * a, 0.189 - 0.189 * a],
        [0.349 - 0.349 * a, 0.686 + 0.314 * a, 0.168 - 0.168 * a],
        [0.272 - 0.272 * a, 0.534 - 0.534 * a, 0.131 + 0.869 * a],
    ])


def _grayscale_matrix(amount: float) -> np.ndarray:
    a = 1.0 - min(1.0, amount)
    return np.array([
        [0.2126 + 0.7874 * a, 0.7152 - 0.7152 * a, 0.0722 - 0.0722 * a],
        [0.2126 - 0.2126 * a, 0.7152 + 0.2848 * a, 0.0722 - 0.0722 * a],
        [0.2126 - 0.2126 * a, 0.7152 - 0.7152 * a, 0.0722 + 0.9278 * a],
    ])


def _hue_rotate_matrix(degrees: float) -> np.ndarray:
    radians = math.radians(degrees)
    c = math.cos(radians)
    s = math.sin(radians)
    return np.array([
        [0.213 + c * 0.787 - s * 0.213, 0.715 - c * 0.715 - s * 0.715, 0.072 - c * 0.072 + s * 0.928],
        [0.213 - c * 0.213 + s * 0.143, 0.715 + c * 0.285 + s * 0.140, 0.072 - c * 0.072 - s * 0.283],
        [0.213 - c * 0.213 - s * 0.787, 0.715 - c * 0.715 + s * 0.715, 0.072 + c * 0.928 + s * 0.072],
    ])


def _apply_matrix(rgb: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    return np.clip(rgb @ matrix.T, 0.0, 1.0)


def apply_gaussian_blur(image: Any, radius: float) -> Any:
    """
    Apply Gaussian blur to image.

    Args:
        image: PIL Image
        radius: Standard deviation in pixels (same meaning as CSS ``blur()``)

    Returns:
        Blurred PIL Image (same mode as input)

    Raises:
        ValueError: If radius is negative
        TypeError: If image not PIL Image
    """
    if not hasattr(image, "filter"):
        raise TypeError(f"Expected PIL Image, got {type(image)}")

    if radius < 0:
        raise ValueError(f"radius must be >= 0, got {radius}")

    if radius == 0:
        return image.copy()

    return image.filter(ImageFilter.GaussianBlur(radius=radius))


def bake_filters(image: Any, state: FilterState, blur_scale: float = 1.0) -> Any:
    """
    Rasterize the adjustment stack into a new RGBA image.

    Args:
        image: PIL Image at native resolution
        state: Slider values
        blur_scale: Native pixels per display pixel; the blur radius is set
                    in display pixels and scaled so it looks the same at
                    native resolution

    Returns:
        New RGBA PIL Image; an identity state returns an unmodified copy
    """
    if not hasattr(image, "convert"):
        raise TypeError(f"Expected PIL Image, got {type(image)}")

    rgba = image.convert("RGBA")
    if state.is_identity:
        return rgba.copy()

    pixels = np.asarray(rgba, dtype=np.float64) / 255.0
    rgb = pixels[:, :, :3]
    alpha = pixels[:, :, 3:]

    for name in FILTER_ORDER:
        if state.is_identity_for(name):
            continue
        value = getattr(state, name)

        if name == "brightness":
            rgb = np.clip(rgb * (value / 100.0), 0.0, 1.0)
        elif name == "contrast":
            amount = value / 100.0
            rgb = np.clip(rgb * amount + (0.5 - 0.5 * amount), 0.0, 1.0)
        elif name == "saturation":
            rgb = _apply_matrix(rgb, _saturate_matrix(value / 100.0))
        elif name == "sepia":
            rgb = _apply_matrix(rgb, _sepia_matrix(value / 100.0))
        elif name == "grayscale":
            rgb = _apply_matrix(rgb, _grayscale_matrix(value / 100.0))
        elif name == "blur":
            staged = _to_image(rgb, alpha)
            blurred = apply_gaussian_blur(staged, value * blur_scale)
            pixels = np.asarray(blurred, dtype=np.float64) / 255.0
            rgb = pixels[:, :, :3]
            alpha = pixels[:, :, 3:]
        elif name == "hue_rotate":
            rgb = _apply_matrix(rgb, _hue_rotate_matrix(value))

    return _to_image(rgb, alpha)


def _to_image(rgb: np.ndarray, alpha: np.ndarray) -> Any:
    combined = np.concatenate([rgb, alpha], axis=2)
    result = np.clip(np.rint(combined * 255.0), 0, 255).astype("uint8")
    return Image.fromarray(result)
