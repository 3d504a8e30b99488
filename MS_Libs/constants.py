"""
Constants and configuration values for Mockup Studio.

This module centralizes all constant values, magic numbers, and
configuration settings used throughout the engine.
"""

# Filter sliders: (minimum, maximum, identity)
BRIGHTNESS_RANGE = (50.0, 150.0, 100.0)
CONTRAST_RANGE = (50.0, 150.0, 100.0)
SATURATION_RANGE = (0.0, 200.0, 100.0)
SEPIA_RANGE = (0.0, 100.0, 0.0)
GRAYSCALE_RANGE = (0.0, 100.0, 0.0)
BLUR_RANGE = (0.0, 20.0, 0.0)
HUE_ROTATE_RANGE = (0.0, 360.0, 0.0)

# Composition order shared by the preview and the bake
FILTER_ORDER = (
    "brightness",
    "contrast",
    "saturation",
    "sepia",
    "grayscale",
    "blur",
    "hue_rotate",
)

# Geometry constants (display pixels)
MIN_BOX_SIZE = 20.0
TEXT_SIZE_MIN = 8.0
TEXT_SIZE_MAX = 200.0
TEXT_RESIZE_SENSITIVITY = 0.5
CROP_INITIAL_FRACTION = 0.6

# Mask brush
BRUSH_SIZE_MIN = 10
BRUSH_SIZE_MAX = 100
BRUSH_SIZE_DEFAULT = 40
MASK_STROKE_COLOR = (255, 255, 255, 255)
MASK_BACKGROUND_COLOR = (0, 0, 0, 255)

# Text layer defaults
FONTS = (
    "Arial",
    "Verdana",
    "Georgia",
    "Times New Roman",
    "Courier New",
    "Impact",
    "Comic Sans MS",
)
DEFAULT_TEXT_CONTENT = "Your Text Here"
DEFAULT_TEXT_COLOR = "#18181B"
DEFAULT_TEXT_SIZE = 40.0
DEFAULT_LAYER_X = 50.0
DEFAULT_LAYER_Y = 50.0

# TrueType candidates tried for each family before the built-in font
FONT_FILES = {
    "Arial": ("arial.ttf", "Arial.ttf", "LiberationSans-Regular.ttf", "DejaVuSans.ttf"),
    "Verdana": ("verdana.ttf", "Verdana.ttf", "DejaVuSans.ttf"),
    "Georgia": ("georgia.ttf", "Georgia.ttf", "DejaVuSerif.ttf"),
    "Times New Roman": ("times.ttf", "Times New Roman.ttf", "LiberationSerif-Regular.ttf", "DejaVuSerif.ttf"),
    "Courier New": ("cour.ttf", "Courier New.ttf", "LiberationMono-Regular.ttf", "DejaVuSansMono.ttf"),
    "Impact": ("impact.ttf", "Impact.ttf", "DejaVuSans-Bold.ttf"),
    "Comic Sans MS": ("comic.ttf", "Comic Sans MS.ttf", "DejaVuSans.ttf"),
}

# Overlay layer defaults
DEFAULT_OVERLAY_WIDTH_FRACTION = 0.3
DEFAULT_OVERLAY_WIDTH = 150.0
DEFAULT_OVERLAY_OPACITY = 1.0

# Output
OUTPUT_FORMAT = "PNG"
OUTPUT_MIME_TYPE = "image/png"
LEGACY_VARIATION_MIME_TYPE = "image/jpeg"

# Variations
MAX_VARIATIONS_TO_STORE = 10
DEFAULT_VARIATION_COUNT = 3

# Aspect ratio guide canvas
ASPECT_RATIOS = ("1:1", "4:3", "3:4", "16:9", "9:16")
BLANK_CANVAS_WIDTH = 512
BLANK_CANVAS_COLOR = "#808080"

# Mime types understood by the asset loader
MIME_TYPES = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "WEBP": "image/webp",
    "GIF": "image/gif",
    "BMP": "image/bmp",
    "TIFF": "image/tiff",
}
SUPPORTED_STANDARD_IMAGES = {".png", ".jpg", ".jpeg", ".bmp", ".gif", ".tiff", ".webp"}

# Project file constants
PROJECTS_DIR_NAME = "Projects"
PROJECT_EXTENSION = ".msproj"
SCHEMA_VERSION = 1
SAFE_FILENAME_CHARS = "-_"
FILENAME_REPLACEMENT_CHAR = "_"
DEFAULT_PROJECT_NAME = "new_project"

# Project field names
FIELD_SCHEMA_VERSION = "schema_version"
FIELD_ID = "id"
FIELD_NAME = "name"
FIELD_CREATED_AT = "created_at"
FIELD_PROMPT = "prompt"
FIELD_GENERATED_IMAGE = "generated_image"
FIELD_SOURCE_IMAGE = "source_image"
FIELD_VARIATIONS = "variations"
FIELD_DATA = "data"
FIELD_MIME_TYPE = "mime_type"
