"""Item Map Viewer - interactive display of item drop waypoints on the static map."""

from src.map_viewer.geometry import ViewState, screen_to_world, world_to_screen
from src.map_viewer.renderer import RenderOptions, RenderResult, render
from src.map_viewer.session import MapSession, ReportKind, StatusReport
from src.map_viewer.viewer import create_figure
from src.map_viewer.viewport import Viewport, ViewportController

__all__ = [
    "ViewState",
    "screen_to_world",
    "world_to_screen",
    "RenderOptions",
    "RenderResult",
    "render",
    "MapSession",
    "ReportKind",
    "StatusReport",
    "create_figure",
    "Viewport",
    "ViewportController",
]
