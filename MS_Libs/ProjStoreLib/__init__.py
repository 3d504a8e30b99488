"""
ProjStoreLib - Project storage and external collaborators

This module handles persistence of Mockup Studio projects, loading of image
assets, and preparation of requests for the image synthesis service.
"""

from MS_Libs.ProjStoreLib.project_store import (
    add_project_variations,
    create_project_file,
    get_projects_dir,
    list_project_files,
    load_project_data,
    load_project_image,
    load_project_name,
    load_project_variations,
    save_project_data,
    save_project_image,
)
from MS_Libs.ProjStoreLib.asset_loader import (
    decode_asset,
    get_supported_image_formats,
    is_supported_format,
    load_image_asset,
)
from MS_Libs.ProjStoreLib.synthesis import (
    ImageSynthesizer,
    SynthesisRequest,
    SynthesisResult,
    build_edit_instructions,
    build_variation_request,
    collect_variations,
    create_blank_canvas,
    require_image,
    strip_optional_references,
)

__all__ = [
    "add_project_variations",
    "create_project_file",
    "get_projects_dir",
    "list_project_files",
    "load_project_data",
    "load_project_image",
    "load_project_name",
    "load_project_variations",
    "save_project_data",
    "save_project_image",
    "decode_asset",
    "get_supported_image_formats",
    "is_supported_format",
    "load_image_asset",
    "ImageSynthesizer",
    "SynthesisRequest",
    "SynthesisResult",
    "build_edit_instructions",
    "build_variation_request",
    "collect_variations",
    "create_blank_canvas",
    "require_image",
    "strip_optional_references",
]
