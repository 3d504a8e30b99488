"""
Project file storage and management for Mockup Studio.

This module handles the persistence layer for mockup projects, including
creating, loading, and saving project files in the .msproj format.

The project file schema includes:
- Project metadata (id, name, creation date, schema version, prompt)
- The current generated image and the original source image
- Up to MAX_VARIATIONS_TO_STORE alternate renders

Images are stored as ``{"data": <base64>, "mime_type": <mime>}`` objects.

Functions:
    create_project_file: Create a new project file with default structure
    list_project_files: List all project files in the Projects directory
    load_project_name: Load just the project name from a file
    load_project_data: Load complete project data with validation
    save_project_data: Save project data to file
    load_project_image: Load the project's current image
    load_project_variations: Load the project's variations
    save_project_image: Replace the current image, updating variations
    add_project_variations: Merge new variations into the project
"""

import json
import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from MS_Libs.ImageEditingLib.image_models import ImageBuffer
from MS_Libs.SessionLib.variation_store import merge_variations, variations_after_main_change
from MS_Libs.constants import (
    DEFAULT_PROJECT_NAME,
    FIELD_CREATED_AT,
    FIELD_DATA,
    FIELD_GENERATED_IMAGE,
    FIELD_ID,
    FIELD_MIME_TYPE,
    FIELD_NAME,
    FIELD_PROMPT,
    FIELD_SCHEMA_VERSION,
    FIELD_SOURCE_IMAGE,
    FIELD_VARIATIONS,
    FILENAME_REPLACEMENT_CHAR,
    LEGACY_VARIATION_MIME_TYPE,
    PROJECT_EXTENSION,
    PROJECTS_DIR_NAME,
    SAFE_FILENAME_CHARS,
    SCHEMA_VERSION,
)
from MS_Libs.errors import DecodeFailure

logger = logging.getLogger(__name__)


def encode_image_record(buffer: ImageBuffer) -> Dict[str, str]:
    return {
        FIELD_DATA: buffer.to_base64(),
        FIELD_MIME_TYPE: buffer.mime_type,
    }


def _normalize_image_record(record: Any, default_mime_type: str) -> Optional[Dict[str, str]]:
    """
    Normalize a stored image to ``{data, mime_type}``.

    Handles the legacy plain-string format and the camelCase ``mimeType`` key.
    """
    if isinstance(record, str):
        return {FIELD_DATA: record, FIELD_MIME_TYPE: default_mime_type} if record else None
    if not isinstance(record, dict):
        return None
    data = record.get(FIELD_DATA)
    if not isinstance(data, str) or not data:
        return None
    mime_type = record.get(FIELD_MIME_TYPE) or record.get("mimeType") or default_mime_type
    return {FIELD_DATA: data, FIELD_MIME_TYPE: str(mime_type)}


def decode_image_record(record: Dict[str, str]) -> ImageBuffer:
    """
    Raises:
        DecodeFailure: If the stored payload is not an image
    """
    return ImageBuffer.from_base64(record[FIELD_DATA], record.get(FIELD_MIME_TYPE))


def get_projects_dir(base_dir: Path) -> Path:
    projects_dir = base_dir / PROJECTS_DIR_NAME
    projects_dir.mkdir(parents=True, exist_ok=True)
    return projects_dir


def list_project_files(base_dir: Path) -> List[Path]:
    projects_dir = get_projects_dir(base_dir)
    return sorted(projects_dir.glob(f"*{PROJECT_EXTENSION}"))


def create_project_file(
    base_dir: Path,
    project_name: str,
    generated_image: Optional[ImageBuffer] = None,
    source_image: Optional[ImageBuffer] = None,
    prompt: str = "",
) -> Path:
    """
    Create a new project file with default structure.

    Args:
        base_dir: Base directory containing the Projects folder
        project_name: Human-readable name for the project
        generated_image: Initial current image
        source_image: Original design or product photo
        prompt: Prompt the generated image was made from

    Returns:
        Path to the created project file
    """
    projects_dir = get_projects_dir(base_dir)

    # Sanitize filename - keep only alphanumeric and safe characters
    safe_name = "".join(
        c if c.isalnum() or c in SAFE_FILENAME_CHARS else FILENAME_REPLACEMENT_CHAR
        for c in project_name
    ).strip(FILENAME_REPLACEMENT_CHAR)

    if not safe_name:
        safe_name = DEFAULT_PROJECT_NAME

    project_path = projects_dir / f"{safe_name}{PROJECT_EXTENSION}"
    counter = 1
    while project_path.exists():
        project_path = projects_dir / f"{safe_name}_{counter}{PROJECT_EXTENSION}"
        counter += 1

    payload: Dict[str, Any] = {
        FIELD_SCHEMA_VERSION: SCHEMA_VERSION,
        FIELD_ID: str(uuid.uuid4()),
        FIELD_NAME: project_name,
        FIELD_CREATED_AT: datetime.now().isoformat(timespec="seconds"),
        FIELD_PROMPT: prompt,
        FIELD_GENERATED_IMAGE: encode_image_record(generated_image) if generated_image else None,
        FIELD_SOURCE_IMAGE: encode_image_record(source_image) if source_image else None,
        FIELD_VARIATIONS: [],
    }

    project_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    logger.info(f"Created project {project_path.name}")
    return project_path


def load_project_name(project_path: Path) -> str:
    """
    Load the project name from a project file.

    Args:
        project_path: Path to the project file

    Returns:
        The project name, or the filename stem if loading fails
    """
    try:
        payload = json.loads(project_path.read_text(encoding="utf-8"))
    except (FileNotFoundError, json.JSONDecodeError, OSError):
        return project_path.stem

    if not isinstance(payload, dict):
        return project_path.stem
    return str(payload.get(FIELD_NAME) or project_path.stem)


def load_project_data(project_path: Path) -> Dict[str, Any]:
    """
    Load a project file, filling defaults for anything missing or malformed.

    Legacy variation lists of bare base64 strings are migrated to image
    records and assumed to be JPEG.
    """
    try:
        payload = json.loads(project_path.read_text(encoding="utf-8"))
    except (FileNotFoundError, json.JSONDecodeError, OSError, UnicodeDecodeError):
        payload = {}

    if not isinstance(payload, dict):
        payload = {}

    variations = payload.get(FIELD_VARIATIONS)
    if not isinstance(variations, list):
        variations = []
    elif variations and isinstance(variations[0], str):
        logger.warning(f"Migrating old variations format for project: {project_path.stem}")

    normalized_variations: List[Dict[str, str]] = []
    for record in variations:
        normalized = _normalize_image_record(record, LEGACY_VARIATION_MIME_TYPE)
        if normalized is not None:
            normalized_variations.append(normalized)
    payload[FIELD_VARIATIONS] = normalized_variations

    for field_name in (FIELD_GENERATED_IMAGE, FIELD_SOURCE_IMAGE):
        record = payload.get(field_name)
        payload[field_name] = _normalize_image_record(record, "image/png") if record else None

    payload.setdefault(FIELD_SCHEMA_VERSION, SCHEMA_VERSION)
    payload.setdefault(FIELD_ID, project_path.stem)
    payload.setdefault(FIELD_NAME, project_path.stem)
    payload.setdefault(FIELD_CREATED_AT, datetime.now().isoformat(timespec="seconds"))
    payload.setdefault(FIELD_PROMPT, "")

    return payload


def save_project_data(project_path: Path, payload: Dict[str, Any]) -> None:
    payload[FIELD_SCHEMA_VERSION] = SCHEMA_VERSION
    project_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")


def load_project_image(project_path: Path) -> Optional[ImageBuffer]:
    """
    Load the project's current image, or None if it has none yet.

    Raises:
        DecodeFailure: If the stored image is corrupt
    """
    record = load_project_data(project_path).get(FIELD_GENERATED_IMAGE)
    if not record:
        return None
    return decode_image_record(record)


def load_project_variations(project_path: Path) -> List[ImageBuffer]:
    """Load the project's variations, skipping entries that cannot be decoded."""
    buffers: List[ImageBuffer] = []
    for record in load_project_data(project_path)[FIELD_VARIATIONS]:
        try:
            buffers.append(decode_image_record(record))
        except DecodeFailure as exc:
            logger.warning(f"Skipping unreadable variation in {project_path.name}: {exc}")
    return buffers


def save_project_image(project_path: Path, image: ImageBuffer, prompt: Optional[str] = None) -> List[ImageBuffer]:
    """
    Make ``image`` the project's current image.

    When the image actually changes, the previous current image joins the
    variations and ``image`` is removed from them.

    Returns:
        The variations as saved
    """
    payload = load_project_data(project_path)
    previous_record = payload.get(FIELD_GENERATED_IMAGE)
    previous = decode_image_record(previous_record) if previous_record else None
    variations = load_project_variations(project_path)

    if previous is None or not previous.same_content(image):
        variations = variations_after_main_change(previous, image, variations)

    payload[FIELD_GENERATED_IMAGE] = encode_image_record(image)
    payload[FIELD_VARIATIONS] = [encode_image_record(variation) for variation in variations]
    if prompt is not None:
        payload[FIELD_PROMPT] = prompt
    save_project_data(project_path, payload)
    logger.info(f"Saved {image.width}x{image.height} image to {project_path.name}")
    return variations


def add_project_variations(project_path: Path, incoming: Sequence[ImageBuffer]) -> List[ImageBuffer]:
    """Merge newly generated variations in front of the stored ones."""
    payload = load_project_data(project_path)
    variations = merge_variations(load_project_variations(project_path), incoming)
    payload[FIELD_VARIATIONS] = [encode_image_record(variation) for variation in variations]
    save_project_data(project_path, payload)
    return variations
