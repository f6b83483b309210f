"""View state controller: zoom, pan, reset, fit and center operations."""

import logging
import math
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

import numpy as np

from src.config import (
    DEFAULT_CENTER_SCALE,
    FIT_PADDING_PX,
    MAP_H,
    MAP_W,
    ZOOM_STEP,
)
from src.map_viewer.geometry import (
    ViewState,
    clamp_scale,
    project_waypoints,
    screen_to_world,
    world_to_map_pixel,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Viewport:
    """
    The visible part of the canvas, in canvas pixels.

    offset_x/offset_y locate the visible area inside the canvas, so the
    visible center is (offset_x + width / 2, offset_y + height / 2).
    """

    width: float
    height: float
    offset_x: float = 0.0
    offset_y: float = 0.0

    def __post_init__(self) -> None:
        if not (self.width > 0 and self.height > 0):
            raise ValueError(f"Viewport size must be positive, got {self.width}x{self.height}")

    @property
    def center(self) -> tuple[float, float]:
        return self.offset_x + self.width / 2, self.offset_y + self.height / 2


class ViewportController:
    """
    Owns the ViewState and implements every view operation.

    The controller never draws; callers redraw after each call. Failed
    operations leave the view untouched.
    """

    def __init__(self, viewport: Viewport, view: ViewState | None = None) -> None:
        self.viewport = viewport
        self.view = view if view is not None else ViewState()
        self.view.scale = clamp_scale(self.view.scale)

        # Drag state: pointer and pan captured when the drag started
        self._drag_origin: tuple[float, float] | None = None
        self._drag_start_pan: tuple[float, float] = (0.0, 0.0)

    @property
    def is_dragging(self) -> bool:
        return self._drag_origin is not None

    def zoom_at_point(self, factor: float, sx: float, sy: float) -> None:
        """
        Multiply the scale by factor, keeping screen point (sx, sy) fixed.

        Args:
            factor: Multiplicative zoom factor (> 1 zooms in)
            sx: Anchor x in screen pixels
            sy: Anchor y in screen pixels
        """
        if not (math.isfinite(factor) and factor > 0):
            logger.warning(f"Ignoring invalid zoom factor {factor!r}")
            return

        wx, wy = screen_to_world(sx, sy, self.view)
        new_scale = clamp_scale(self.view.scale * factor)
        self.view.scale = new_scale
        self.view.pan_x = sx - wx * new_scale
        self.view.pan_y = sy - wy * new_scale

    def zoom_in(self) -> None:
        """Zoom one step in, anchored at the visible center."""
        self.zoom_at_point(ZOOM_STEP, *self.viewport.center)

    def zoom_out(self) -> None:
        """Zoom one step out, anchored at the visible center."""
        self.zoom_at_point(1 / ZOOM_STEP, *self.viewport.center)

    def pan(self, dx: float, dy: float) -> None:
        """Shift the view by a screen-space delta. Not clamped to the map."""
        self.view.pan_x += dx
        self.view.pan_y += dy

    def begin_drag(self, x: float, y: float) -> None:
        self._drag_origin = (x, y)
        self._drag_start_pan = (self.view.pan_x, self.view.pan_y)

    def drag_to(self, x: float, y: float) -> None:
        """Move the view so the map follows the pointer since begin_drag()."""
        if self._drag_origin is None:
            return
        start_x, start_y = self._drag_origin
        self.view.pan_x = self._drag_start_pan[0] + (x - start_x)
        self.view.pan_y = self._drag_start_pan[1] + (y - start_y)

    def end_drag(self) -> None:
        self._drag_origin = None

    def reset_view(self) -> None:
        """Scale 1 with the middle of the map under the visible center."""
        self._center_map_pixel(MAP_W / 2, MAP_H / 2, 1.0)

    def fit_to_waypoints(self, waypoints: Sequence[Mapping[str, Any] | None]) -> bool:
        """
        Zoom and pan so every waypoint is visible.

        The bounding box is taken in map pixels, padded by FIT_PADDING_PX in
        each dimension, and its midpoint is placed under the visible center.

        Returns:
            False (view unchanged) when there is nothing finite to fit
        """
        points = project_waypoints(waypoints)
        xs = points[:, 0][np.isfinite(points[:, 0])]
        ys = points[:, 1][np.isfinite(points[:, 1])]
        if xs.size == 0 or ys.size == 0:
            logger.warning(f"Cannot fit view: no valid locations among {len(waypoints)} waypoint(s)")
            return False

        min_x, max_x = float(xs.min()), float(xs.max())
        min_y, max_y = float(ys.min()), float(ys.max())
        bbox_w = max(1.0, (max_x - min_x) + FIT_PADDING_PX)
        bbox_h = max(1.0, (max_y - min_y) + FIT_PADDING_PX)

        scale = min(self.viewport.width / bbox_w, self.viewport.height / bbox_h)
        self._center_map_pixel((min_x + max_x) / 2, (min_y + max_y) / 2, scale)
        logger.debug(
            f"Fitted bbox ({min_x}, {min_y})-({max_x}, {max_y}) at scale {self.view.scale:.3f}"
        )
        return True

    def center_on_waypoint(
        self,
        waypoints: Sequence[Mapping[str, Any] | None],
        index: int,
        desired_scale: float = DEFAULT_CENTER_SCALE,
    ) -> bool:
        """
        Center one waypoint at the given (clamped) scale.

        Returns:
            False without touching the view for a bad index or a waypoint
            without a usable location
        """
        if isinstance(index, bool) or not isinstance(index, int):
            return False
        if index < 0 or index >= len(waypoints):
            return False
        waypoint = waypoints[index]
        if not waypoint or not isinstance(waypoint.get("location"), Mapping):
            return False

        px, py = world_to_map_pixel(waypoint["location"])
        if not (math.isfinite(px) and math.isfinite(py)):
            return False

        self._center_map_pixel(px, py, desired_scale)
        return True

    def _center_map_pixel(self, px: float, py: float, scale: float) -> None:
        """Set the scale (clamped) and place map pixel (px, py) under the visible center."""
        sx, sy = self.viewport.center
        self.view.scale = clamp_scale(scale)
        self.view.pan_x = sx - px * self.view.scale
        self.view.pan_y = sy - py * self.view.scale
