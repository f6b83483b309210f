"""
Configuration for the item waypoint mapper.

Map calibration and view constants are fixed; runtime settings (lookup
endpoint, map path, proxy usage) come from the environment, optionally
through a .env file in the project root.

Usage:
    from src.config import load_settings
    settings = load_settings()
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Map asset (pixel size of the static map raster)
MAP_W = 4034
MAP_H = 6414

# World -> map pixel calibration, derived from two reference points:
# 2865px corresponds to x=482 and 4926px corresponds to z=-1646
OFFSET_X = 2383
OFFSET_Y = 6572

# View constants
MIN_SCALE = 0.2
MAX_SCALE = 10.0
ZOOM_STEP = 1.2                # Multiplicative step per zoom button press
FIT_PADDING_PX = 40            # Added to each bbox dimension when fitting
DEFAULT_CENTER_SCALE = 6.0     # Scale used by "go to waypoint"
MARKER_RADIUS_PX = 4
COLOR_UPDATE_DELAY_MS = 200    # Debounce delay for color-driven redraws
DEFAULT_VIEWPORT_WIDTH = 1280   # Visible canvas area when no size is given
DEFAULT_VIEWPORT_HEIGHT = 800

# Waypoint defaults
DEFAULT_ICON = "flag"
DEFAULT_COLOR = "#ffffff"
FALLBACK_COLOR = "#ffffffff"
UNKNOWN_ITEM_NAME = "Unknown Item"

# Environment defaults
DEFAULT_API_BASE = "https://api.wynncraft.com/v3/item/search/"
DEFAULT_MAP_PATH = "map/main-map.png"
DEFAULT_PROXY_URL = "https://cors.io/?u="
DEFAULT_REQUEST_TIMEOUT = 15.0

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class Settings:
    """Runtime settings resolved from the environment."""

    api_base: str = DEFAULT_API_BASE
    map_path: str = DEFAULT_MAP_PATH
    use_proxy: bool = False
    proxy_url: str = DEFAULT_PROXY_URL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    default_icon: str = DEFAULT_ICON
    default_color: str = DEFAULT_COLOR


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"Expected a boolean for {name}, got {raw!r}")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ValueError(f"Expected a number for {name}, got {raw!r}") from e
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


def load_settings(dotenv: bool = True) -> Settings:
    """
    Build Settings from environment variables.

    Args:
        dotenv: Also read a .env file (existing variables take precedence)

    Returns:
        Settings with defaults applied for unset variables

    Raises:
        ValueError: If a boolean or numeric variable cannot be parsed
    """
    if dotenv:
        load_dotenv()

    return Settings(
        api_base=os.getenv("ITEM_API_BASE", DEFAULT_API_BASE),
        map_path=os.getenv("ITEM_MAP_PATH", DEFAULT_MAP_PATH),
        use_proxy=_env_bool("ITEM_USE_PROXY", False),
        proxy_url=os.getenv("ITEM_PROXY_URL", DEFAULT_PROXY_URL),
        request_timeout=_env_float("ITEM_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT),
        default_icon=os.getenv("ITEM_DEFAULT_ICON", DEFAULT_ICON),
        default_color=os.getenv("ITEM_DEFAULT_COLOR", DEFAULT_COLOR),
    )
