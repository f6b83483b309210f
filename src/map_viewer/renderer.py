"""Turn the current view and waypoints into screen-space draw commands."""

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from src.config import FALLBACK_COLOR, MAP_H, MAP_W, MARKER_RADIUS_PX
from src.errors import ViewportPreconditionError
from src.map_viewer.geometry import ViewState, map_pixel_to_screen, world_to_map_pixel

logger = logging.getLogger(__name__)

RGBA = tuple[int, int, int, float]

WHITE: RGBA = (255, 255, 255, 1.0)
LABEL_OUTLINE: RGBA = (0, 0, 0, 0.6)
CIRCLE_LINE_WIDTH_PX = 2.0     # Screen pixels, independent of zoom
LABEL_OFFSET_PX = 8            # Map pixels right of / above the marker
LABEL_FONT_PX = 12
LABEL_OUTLINE_PX = 3
LABEL_FONT_FAMILY = "Segoe UI, Arial, sans-serif"

_HEX8_RE = re.compile(r"#?([0-9a-f]{8})", re.IGNORECASE)


def hex8_to_rgba(value: Any) -> RGBA:
    """
    Convert "#RRGGBBAA" to an (r, g, b, alpha) tuple with alpha in [0, 1].

    Anything that is not 8 hex digits renders as opaque white.
    """
    match = _HEX8_RE.fullmatch(str(value or ""))
    if not match:
        return WHITE
    digits = match.group(1)
    r = int(digits[0:2], 16)
    g = int(digits[2:4], 16)
    b = int(digits[4:6], 16)
    a = int(digits[6:8], 16) / 255
    return (r, g, b, a)


def rgba_to_css(rgba: RGBA) -> str:
    r, g, b, a = rgba
    return f"rgba({r},{g},{b},{a:g})"


@dataclass(frozen=True)
class RenderOptions:
    show_radius: bool = False
    show_labels: bool = False


@dataclass(frozen=True)
class ImageCommand:
    """Draw the map raster into a screen rectangle."""

    source: Any
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class CircleCommand:
    """Stroke a drop radius around a waypoint."""

    cx: float
    cy: float
    radius: float
    color: RGBA
    line_width: float


@dataclass(frozen=True)
class MarkerCommand:
    """Fill the waypoint dot."""

    cx: float
    cy: float
    radius: float
    color: RGBA
    index: int


@dataclass(frozen=True)
class LabelCommand:
    """Outlined waypoint name next to its marker."""

    x: float
    y: float
    text: str
    font_size: float
    fill: RGBA = WHITE
    outline: RGBA = LABEL_OUTLINE
    outline_width: float = LABEL_OUTLINE_PX


DrawCommand = ImageCommand | CircleCommand | MarkerCommand | LabelCommand


@dataclass
class RenderResult:
    commands: list[DrawCommand] = field(default_factory=list)
    status: str = ""

    def of_type(self, command_type: type) -> list:
        return [command for command in self.commands if isinstance(command, command_type)]


def format_status(count: int, scale: float) -> str:
    return f"{count} waypoint(s) • zoom {scale:.2f}"


def _radius_of(waypoint: Mapping[str, Any]) -> float | None:
    value = waypoint.get("radius")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        radius = float(value)
    except OverflowError:
        return None
    if not math.isfinite(radius) or radius <= 0:
        return None
    return radius


def render(
    image: Any,
    view: ViewState,
    waypoints: Sequence[Mapping[str, Any] | None],
    options: RenderOptions | None = None,
) -> RenderResult:
    """
    Build the draw commands for one frame.

    Commands are in screen pixels and ordered back to front: map image,
    then per waypoint an optional radius circle, the marker dot and an
    optional label. Sizes drawn in map pixels (markers, labels) follow the
    zoom; circle outlines keep a constant screen width.

    Args:
        image: The loaded map image (anything the viewer can display)
        view: Current view state (not modified)
        waypoints: Visualization waypoints (not modified)
        options: Radius and label toggles

    Returns:
        RenderResult with the commands and a status summary

    Raises:
        ViewportPreconditionError: If the map image has not been loaded
    """
    if image is None:
        raise ViewportPreconditionError("Map image is not loaded")

    options = options or RenderOptions()
    scale = view.scale
    result = RenderResult()
    result.commands.append(
        ImageCommand(image, view.pan_x, view.pan_y, MAP_W * scale, MAP_H * scale)
    )

    for index, waypoint in enumerate(waypoints):
        if not waypoint or not isinstance(waypoint.get("location"), Mapping):
            continue
        px, py = world_to_map_pixel(waypoint["location"])
        if not (math.isfinite(px) and math.isfinite(py)):
            logger.debug(f"Skipping waypoint {index} with non-numeric location")
            continue

        sx, sy = map_pixel_to_screen(px, py, view)
        color = hex8_to_rgba(waypoint.get("color") or FALLBACK_COLOR)

        radius = _radius_of(waypoint)
        if options.show_radius and radius is not None:
            result.commands.append(
                CircleCommand(sx, sy, radius * scale, color, CIRCLE_LINE_WIDTH_PX)
            )

        result.commands.append(MarkerCommand(sx, sy, MARKER_RADIUS_PX * scale, color, index))

        name = waypoint.get("name")
        if options.show_labels and name:
            lx, ly = map_pixel_to_screen(px + LABEL_OFFSET_PX, py - LABEL_OFFSET_PX, view)
            result.commands.append(LabelCommand(lx, ly, str(name), LABEL_FONT_PX * scale))

    result.status = format_status(len(waypoints), scale)
    return result
