"""
Request preparation for the image synthesis collaborator.

The engine never talks to the network. It assembles the images and
instructions a synthesis service needs and validates what comes back.

Classes:
    SynthesisRequest: Ordered image inputs plus instructions
    SynthesisResult: Image (if any) and accompanying text from the service
    ImageSynthesizer: Protocol implemented by synthesis services

Functions:
    build_edit_instructions: Structured edit prompt referencing images by index
    strip_optional_references: Remove style/model reference lines from a prompt
    create_blank_canvas: Solid canvas used as an aspect-ratio guide
    require_image: Turn an empty response into SynthesisFailure
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence, Tuple

from PIL import Image

from MS_Libs.ImageEditingLib.image_models import ImageBuffer
from MS_Libs.constants import ASPECT_RATIOS, BLANK_CANVAS_COLOR, BLANK_CANVAS_WIDTH, DEFAULT_VARIATION_COUNT
from MS_Libs.errors import SynthesisFailure

_OPTIONAL_REFERENCE_LINE = re.compile(r"^.*(style reference|model reference|Image [3-9]).*$\n?", re.IGNORECASE | re.MULTILINE)


@dataclass(frozen=True)
class SynthesisRequest:
    """Inputs for one edit or variation call.

    Attributes:
        base: Image to edit or vary
        instructions: Free-text instructions
        style_reference: Optional style reference image
        mask: Optional black/white mask at the base image's native size
        aspect_guide: Optional blank canvas with the target aspect ratio
    """
    base: ImageBuffer
    instructions: str
    style_reference: Optional[ImageBuffer] = None
    mask: Optional[ImageBuffer] = None
    aspect_guide: Optional[ImageBuffer] = None

    def __post_init__(self):
        if self.mask is not None and (self.mask.width, self.mask.height) != (self.base.width, self.base.height):
            raise ValueError(
                f"Mask is {self.mask.width}x{self.mask.height} but image is {self.base.width}x{self.base.height}"
            )

    def images(self) -> List[ImageBuffer]:
        """Images in the order they are referenced (Image 1, Image 2, ...)."""
        ordered = [self.base, self.style_reference, self.mask, self.aspect_guide]
        return [image for image in ordered if image is not None]


@dataclass(frozen=True)
class SynthesisResult:
    image: Optional[ImageBuffer]
    text: str = ""


class ImageSynthesizer(Protocol):
    def edit(self, request: SynthesisRequest) -> SynthesisResult:
        ...

    def variations(self, request: SynthesisRequest, count: int = DEFAULT_VARIATION_COUNT) -> Sequence[SynthesisResult]:
        ...


def build_edit_instructions(user_request: str, has_style_reference: bool = False, has_mask: bool = False) -> str:
    """
    Build the structured edit prompt.

    Images are numbered in the order ``SynthesisRequest.images`` returns them.
    """
    if not user_request.strip():
        raise ValueError("Edit instructions cannot be empty")

    counter = 1
    main_index = counter
    counter += 1
    style_index = 0
    if has_style_reference:
        style_index = counter
        counter += 1
    mask_index = counter if has_mask else 0

    assets = [f"- Image {main_index}: The Main Image. This is the image to be edited."]
    if style_index:
        assets.append(
            f"- Image {style_index}: Style Reference. INSTRUCTION: Use this image ONLY to understand "
            "the desired artistic style (lighting, mood, color). IGNORE the actual content "
            "(objects, people) in this image."
        )
    if mask_index:
        assets.append(
            f"- Image {mask_index}: Mask. This is a black and white mask. INSTRUCTION: Apply the edit "
            "ONLY to the white areas of this mask. The black areas of the main image MUST remain "
            "completely untouched."
        )

    sections = [
        "<persona>",
        "You are a precise and expert AI image editor. Your goal is to modify an existing image "
        "based on specific instructions, while preserving the quality and integrity of the original.",
        "</persona>",
        "",
        "<input_assets>",
        *assets,
        "</input_assets>",
        "",
        "<edit_task>",
        f'- User\'s primary request: "{user_request.strip()}"',
        "</edit_task>",
        "",
        "<critical_rules>",
        "1.  **PRECISION**: Execute the user's request as precisely as possible.",
        "2.  **PRESERVATION**: Do not change any part of the Main Image that is not related to the edit "
        "task. If a mask is provided, the black areas are off-limits.",
        "3.  **SEAMLESS INTEGRATION**: The edit must blend seamlessly with the original image. Maintain "
        "consistent lighting, shadows, and perspective.",
        "4.  **MAINTAIN QUALITY**: The output image resolution and quality must be as high as the "
        "original. Do not introduce artifacts or blurriness.",
        "</critical_rules>",
    ]
    return "\n".join(sections)


def strip_optional_references(prompt: str) -> str:
    """
    Drop prompt lines that mention images a variation request does not send.

    Variation requests only carry the source image and an optional guide
    canvas, so lines naming a style reference, a model reference or Image 3+
    would point at nothing.
    """
    return _OPTIONAL_REFERENCE_LINE.sub("", prompt)


def parse_aspect_ratio(aspect_ratio: str) -> Tuple[int, int]:
    parts = aspect_ratio.split(":")
    if len(parts) != 2:
        raise ValueError(f"Invalid aspect ratio format: {aspect_ratio}")
    try:
        width, height = int(parts[0]), int(parts[1])
    except ValueError:
        raise ValueError(f"Invalid aspect ratio format: {aspect_ratio}")
    if width <= 0 or height <= 0:
        raise ValueError(f"Invalid aspect ratio format: {aspect_ratio}")
    return width, height


def create_blank_canvas(
    aspect_ratio: str,
    width: int = BLANK_CANVAS_WIDTH,
    color: str = BLANK_CANVAS_COLOR,
) -> ImageBuffer:
    """Solid PNG with the requested aspect ratio (e.g. ``"16:9"``)."""
    ratio_w, ratio_h = parse_aspect_ratio(aspect_ratio)
    height = max(1, int(round(width * ratio_h / ratio_w)))
    canvas = Image.new("RGB", (width, height), color)
    return ImageBuffer.from_image(canvas)


def build_variation_request(
    source: ImageBuffer,
    prompt: str,
    aspect_ratio: Optional[str] = None,
) -> SynthesisRequest:
    """Request for alternate renders of the project's source image."""
    if aspect_ratio is not None and aspect_ratio not in ASPECT_RATIOS:
        raise ValueError(f"Unsupported aspect ratio: {aspect_ratio}")
    guide = create_blank_canvas(aspect_ratio) if aspect_ratio else None
    return SynthesisRequest(
        base=source,
        instructions=strip_optional_references(prompt),
        aspect_guide=guide,
    )


def require_image(result: SynthesisResult) -> ImageBuffer:
    """
    Raises:
        SynthesisFailure: If the collaborator returned no image
    """
    if result is None or result.image is None:
        detail = result.text if result is not None and result.text else "No additional text provided."
        raise SynthesisFailure(f"The image service did not return an image. {detail}")
    return result.image


def collect_variations(results: Sequence[SynthesisResult]) -> List[ImageBuffer]:
    """
    Usable images from a variation call.

    Raises:
        SynthesisFailure: If none of the results carries an image
    """
    images = [result.image for result in results if result is not None and result.image is not None]
    if not images:
        raise SynthesisFailure("The image service failed to generate variations. Please try again.")
    return images
