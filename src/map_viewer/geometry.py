"""
World <-> screen transforms for the static map.

Three coordinate spaces are involved:
- game world: (x, y, z) as reported by the lookup service; y is altitude
- map pixel: pixels of the map raster, px = round(x + OFFSET_X),
  py = round(z + OFFSET_Y)
- screen: canvas pixels, screen = map_pixel * scale + pan

screen_to_world() only undoes scale and pan, so it returns map pixels,
not game coordinates.
"""

import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

import numpy as np

from src.config import MAX_SCALE, MIN_SCALE, OFFSET_X, OFFSET_Y


@dataclass
class ViewState:
    """Affine map from map pixels to screen pixels."""

    scale: float = 1.0
    pan_x: float = 0.0
    pan_y: float = 0.0

    def copy(self) -> "ViewState":
        return ViewState(self.scale, self.pan_x, self.pan_y)


def clamp_scale(scale: float) -> float:
    """Clamp a scale to [MIN_SCALE, MAX_SCALE]."""
    return max(MIN_SCALE, min(MAX_SCALE, scale))


def round_half_up(value: float) -> float:
    """Round .5 towards +inf, the way the map calibration was measured."""
    return float(math.floor(value + 0.5))


def _as_float(value: Any) -> float:
    if isinstance(value, bool):
        return math.nan
    try:
        return float(value)
    except (TypeError, ValueError, OverflowError):
        return math.nan


def world_to_map_pixel(location: Mapping[str, Any]) -> tuple[float, float]:
    """
    Project a game location onto the map raster.

    Args:
        location: Mapping with "x" and "z" keys ("y" is ignored)

    Returns:
        (px, py) map pixel; NaN components when x or z is not numeric
    """
    x = _as_float(location.get("x"))
    z = _as_float(location.get("z"))
    px = round_half_up(x + OFFSET_X) if math.isfinite(x) else math.nan
    py = round_half_up(z + OFFSET_Y) if math.isfinite(z) else math.nan
    return px, py


def map_pixel_to_screen(px: float, py: float, view: ViewState) -> tuple[float, float]:
    return px * view.scale + view.pan_x, py * view.scale + view.pan_y


def world_to_screen(location: Mapping[str, Any], view: ViewState) -> tuple[float, float]:
    """Screen position of a game location under the given view."""
    px, py = world_to_map_pixel(location)
    return map_pixel_to_screen(px, py, view)


def screen_to_world(sx: float, sy: float, view: ViewState) -> tuple[float, float]:
    """
    Undo pan and scale for a screen point.

    The result is in map pixels; the calibration offsets are not removed.
    view.scale must be positive (callers clamp before calling).
    """
    return (sx - view.pan_x) / view.scale, (sy - view.pan_y) / view.scale


def project_waypoints(waypoints: Iterable[Mapping[str, Any] | None]) -> np.ndarray:
    """
    Map pixel positions of every waypoint that has a location.

    Returns:
        (N, 2) float array; rows may contain NaN for non-numeric coordinates
    """
    points = [
        world_to_map_pixel(waypoint["location"])
        for waypoint in waypoints
        if waypoint and isinstance(waypoint.get("location"), Mapping)
    ]
    if not points:
        return np.empty((0, 2), dtype=float)
    return np.asarray(points, dtype=float)
