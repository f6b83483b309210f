"""Load the map raster and item JSON documents."""

import json
import logging
import os
from dataclasses import dataclass
from typing import Any

from PIL import Image

from src.config import MAP_H, MAP_W
from src.errors import AssetLoadError, MalformedInputError

logger = logging.getLogger(__name__)


@dataclass
class MapImage:
    """Container for the decoded map raster."""

    path: str
    image: Image.Image

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size


def load_map_image(path: str) -> MapImage:
    """
    Load the map raster from disk.

    The image is fully decoded here so a broken file fails now rather
    than on the first render.

    Args:
        path: Path to the map image (PNG)

    Returns:
        MapImage holding the decoded RGBA image

    Raises:
        AssetLoadError: If the file is missing or cannot be decoded
    """
    if not os.path.exists(path):
        raise AssetLoadError(f"Map image not found: {path}")

    try:
        with Image.open(path) as image:
            image.load()
            rgba = image.convert("RGBA")
    except (OSError, ValueError) as e:
        raise AssetLoadError(f"Failed to load map image {path}: {e}") from e

    if rgba.size != (MAP_W, MAP_H):
        # Calibration assumes the fixed raster size; draw it stretched anyway
        logger.warning(f"Map image is {rgba.size[0]}x{rgba.size[1]}, expected {MAP_W}x{MAP_H}")

    logger.info(f"Loaded map image {path} ({rgba.size[0]}x{rgba.size[1]})")
    return MapImage(path=path, image=rgba)


def parse_json_text(text: str | None) -> Any:
    """
    Parse editor text as JSON.

    Returns:
        The parsed value, or None when the text is blank

    Raises:
        MalformedInputError: If the text is not valid JSON
    """
    raw = (text or "").strip()
    if not raw:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedInputError(str(e)) from e


def format_json_text(text: str | None) -> str:
    """Pretty-print JSON text with 2-space indentation."""
    parsed = parse_json_text(text)
    if parsed is None:
        raise MalformedInputError("No JSON to format")
    return json.dumps(parsed, indent=2, ensure_ascii=False)


def load_item_file(path: str) -> Any:
    """
    Read a saved lookup response or item object from disk.

    Raises:
        MalformedInputError: If the file is unreadable, empty or not JSON
    """
    try:
        with open(path, encoding="utf-8") as item_file:
            text = item_file.read()
    except OSError as e:
        raise MalformedInputError(f"Cannot read {path}: {e}") from e

    parsed = parse_json_text(text)
    if parsed is None:
        raise MalformedInputError(f"{path} is empty")
    return parsed
