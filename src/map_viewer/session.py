"""
Map session: the state behind one viewer window.

A MapSession ties the conversion pipeline to the viewport controller and
the renderer. It owns the loaded map image, the last converted waypoint
lists, the lookup results awaiting selection and the color debouncer, and
reports every user-visible outcome as a StatusReport.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

import requests

from src.config import (
    COLOR_UPDATE_DELAY_MS,
    DEFAULT_CENTER_SCALE,
    DEFAULT_VIEWPORT_HEIGHT,
    DEFAULT_VIEWPORT_WIDTH,
    Settings,
)
from src.errors import AssetLoadError, MalformedInputError
from src.lookup.client import ItemLookupClient
from src.map_viewer.debounce import debounce
from src.map_viewer.geometry import ViewState
from src.map_viewer.loader import MapImage, load_map_image, parse_json_text
from src.map_viewer.renderer import RenderOptions, RenderResult, render
from src.map_viewer.viewport import Viewport, ViewportController
from src.waypoints.converter import (
    PayloadShape,
    classify_payload,
    enumerate_search_results,
    extract_item_record,
    normalize_color,
    to_export_waypoints,
    to_visualization_waypoints,
    waypoints_to_json,
)
from src.waypoints.models import SearchResult

logger = logging.getLogger(__name__)


class ReportKind(Enum):
    OK = "ok"
    MALFORMED_INPUT = "malformed_input"
    EMPTY_RESULT = "empty_result"
    INVALID_SELECTION = "invalid_selection"
    VIEWPORT_PRECONDITION = "viewport_precondition"
    ASSET_LOAD_FAILURE = "asset_load_failure"
    REQUEST_FAILED = "request_failed"


@dataclass(frozen=True)
class StatusReport:
    """A status line message and what kind of outcome produced it."""

    message: str
    kind: ReportKind = ReportKind.OK

    @property
    def is_error(self) -> bool:
        return self.kind is not ReportKind.OK


class MapSession:
    """State and workflows behind the converter and map viewer."""

    def __init__(
        self,
        settings: Settings | None = None,
        viewport: Viewport | None = None,
        status_callback: Callable[[StatusReport], None] | None = None,
        render_options: RenderOptions | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.controller = ViewportController(
            viewport or Viewport(DEFAULT_VIEWPORT_WIDTH, DEFAULT_VIEWPORT_HEIGHT)
        )
        self.status_callback = status_callback
        self.render_options = render_options or RenderOptions()

        self.map_image: MapImage | None = None
        self.icon = self.settings.default_icon
        self.color = normalize_color(self.settings.default_color)

        # Last conversion results; replaced on every lookup or submission
        self.input_text = ""
        self.output_text = ""
        self.export_waypoints: list[dict[str, Any]] = []
        self.waypoints: list[dict[str, Any]] = []
        self.search_results: list[SearchResult] = []

        self.last_render: RenderResult | None = None
        self.last_status: StatusReport | None = None

        self._recolor = debounce(self.apply_color, COLOR_UPDATE_DELAY_MS / 1000)

    @property
    def view(self) -> ViewState:
        return self.controller.view

    @property
    def map_loaded(self) -> bool:
        return self.map_image is not None

    def _report(self, message: str, kind: ReportKind = ReportKind.OK) -> StatusReport:
        report = StatusReport(message, kind)
        if report.is_error:
            logger.warning(f"{kind.value}: {message}")
        else:
            logger.info(message)
        self.last_status = report
        if self.status_callback is not None:
            self.status_callback(report)
        return report

    # Map asset

    def load_map(self, path: str | None = None) -> StatusReport:
        """Load the map image once; later calls keep the loaded image."""
        if self.map_image is not None:
            return self._report("Map already loaded.")
        try:
            self.map_image = load_map_image(path or self.settings.map_path)
        except AssetLoadError as e:
            return self._report(f"Failed to render map: {e}", ReportKind.ASSET_LOAD_FAILURE)
        return self._report("Map loaded.")

    # Lookup and conversion

    def search(self, client: ItemLookupClient, name: str) -> StatusReport:
        """
        Look an item up and convert it when exactly one match comes back.

        Several matches are kept in search_results for select_result().
        """
        try:
            data = client.search(name)
        except MalformedInputError as e:
            return self._report(str(e), ReportKind.MALFORMED_INPUT)
        except ValueError as e:
            return self._report(str(e), ReportKind.MALFORMED_INPUT)
        except requests.RequestException as e:
            return self._report(f"Request failed: {e}", ReportKind.REQUEST_FAILED)

        self.search_results = enumerate_search_results(data)
        count = len(self.search_results)
        if count == 0:
            return self._report("No items found.", ReportKind.EMPTY_RESULT)
        if count == 1:
            result = self.search_results[0]
            return self.load_item(result.obj, f"1 item found: {result.name}.")
        return self._report(f"Found {count} items. Select one to load.")

    def select_result(self, index: int) -> StatusReport:
        """Convert one of several search results."""
        if isinstance(index, bool) or not isinstance(index, int) or not (
            0 <= index < len(self.search_results)
        ):
            return self._report("Select an item from results first.", ReportKind.INVALID_SELECTION)
        result = self.search_results[index]
        return self.load_item(result.obj, f"Loaded: {result.name}.")

    def load_item(self, item: Any, prefix: str = "") -> StatusReport:
        """
        Put an item into the editor, convert it and show it on the map.

        The map is only redrawn when the image has already been loaded.
        """
        self.input_text = json.dumps(item, indent=2, ensure_ascii=False)
        record = extract_item_record(item)
        self._set_export(to_export_waypoints(record, self.icon, self.color))

        if self.map_loaded:
            self.render_waypoints(to_visualization_waypoints(record, self.color))

        message = f"{prefix} Converted {len(self.export_waypoints)} waypoint(s).".strip()
        kind = ReportKind.OK if self.export_waypoints else ReportKind.EMPTY_RESULT
        return self._report(message, kind)

    def convert_text(self, text: str | None) -> StatusReport:
        """Convert editor text into export waypoints."""
        try:
            parsed = parse_json_text(text)
        except MalformedInputError as e:
            return self._report(f"Invalid JSON: {e}", ReportKind.MALFORMED_INPUT)
        if parsed is None:
            return self._report("No JSON to convert.", ReportKind.EMPTY_RESULT)

        self.input_text = text or ""
        record = extract_item_record(parsed)
        self._set_export(to_export_waypoints(record, self.icon, self.color))

        if classify_payload(parsed).shape not in (PayloadShape.SINGLE_ITEM, PayloadShape.NAME_KEYED):
            return self._report("Unrecognized item JSON.", ReportKind.MALFORMED_INPUT)
        if not self.export_waypoints:
            return self._report("Converted 0 waypoint(s).", ReportKind.EMPTY_RESULT)
        return self._report(f"Converted {len(self.export_waypoints)} waypoint(s).")

    def _set_export(self, waypoints: list[dict[str, Any]]) -> None:
        self.export_waypoints = waypoints
        self.output_text = waypoints_to_json(waypoints)

    # Map view

    def render_text(self, text: str | None) -> StatusReport:
        """Visualize editor text on the map."""
        try:
            parsed = parse_json_text(text)
        except MalformedInputError:
            parsed = None
        if parsed is None:
            return self._report("No item JSON to visualize.", ReportKind.MALFORMED_INPUT)
        record = extract_item_record(parsed)
        return self.render_waypoints(to_visualization_waypoints(record, self.color))

    def render_waypoints(self, waypoints: list[dict[str, Any]]) -> StatusReport:
        """Replace the shown waypoints, loading the map first if needed, and fit to them."""
        if not self.map_loaded:
            report = self.load_map()
            if report.is_error:
                return report

        self.waypoints = list(waypoints)
        fit_report = self.fit()
        if fit_report.is_error:
            self.draw()
            return fit_report
        return self._report("Map rendered.")

    def draw(self) -> RenderResult | None:
        """Render the current frame; does nothing until the map is loaded."""
        if self.map_image is None:
            return None
        self.last_render = render(self.map_image, self.view, self.waypoints, self.render_options)
        return self.last_render

    def fit(self) -> StatusReport:
        if not self.map_loaded:
            return self._report("Load the map first.", ReportKind.VIEWPORT_PRECONDITION)
        if not self.waypoints:
            return self._report("No waypoints to fit.", ReportKind.VIEWPORT_PRECONDITION)
        if not self.controller.fit_to_waypoints(self.waypoints):
            return self._report("Waypoints invalid for fit.", ReportKind.VIEWPORT_PRECONDITION)
        self.draw()
        return self._report("Fitted to waypoints.")

    def goto(self, index: int, scale: float = DEFAULT_CENTER_SCALE) -> bool:
        """Center a waypoint; silently ignored for bad indexes or before the map loads."""
        if not self.map_loaded:
            return False
        if not self.controller.center_on_waypoint(self.waypoints, index, scale):
            return False
        self.draw()
        return True

    def goto_options(self) -> list[str]:
        """Labels for the "go to waypoint" list, in waypoint order."""
        return [
            str(waypoint["name"]) if waypoint and waypoint.get("name") else f"Waypoint {i + 1}"
            for i, waypoint in enumerate(self.waypoints)
        ]

    def zoom_in(self) -> None:
        self.controller.zoom_in()
        self.draw()

    def zoom_out(self) -> None:
        self.controller.zoom_out()
        self.draw()

    def zoom_at_point(self, factor: float, sx: float, sy: float) -> None:
        self.controller.zoom_at_point(factor, sx, sy)
        self.draw()

    def reset_view(self) -> None:
        self.controller.reset_view()
        self.draw()

    def pan(self, dx: float, dy: float) -> None:
        self.controller.pan(dx, dy)
        self.draw()

    def set_render_options(self, show_radius: bool, show_labels: bool) -> None:
        self.render_options = RenderOptions(show_radius=show_radius, show_labels=show_labels)
        self.draw()

    # Color

    def set_color(self, value: str | None, debounced: bool = True) -> str:
        """
        Select a new waypoint color.

        The preview value is updated immediately; recoloring the shown
        waypoints waits until changes stop for COLOR_UPDATE_DELAY_MS
        (debounced mode needs a running event loop).

        Returns:
            The normalized color, as shown in the preview
        """
        self.color = normalize_color(value)
        if debounced:
            self._recolor()
        else:
            self._recolor.cancel()
            self.apply_color()
        return self.color

    def apply_color(self) -> None:
        """Recolor every shown waypoint with the selected color and redraw."""
        if not self.waypoints:
            return
        for waypoint in self.waypoints:
            if waypoint:
                waypoint["color"] = self.color
        self.draw()
