"""
Tests for MapSession workflows.

Educational notes:
- The lookup client is a MagicMock, so no network is used
- The session fixture points at a tiny PNG instead of the real map
- status_reports collects everything the session reports, in order
"""

import asyncio
import json
from unittest.mock import MagicMock

import pytest
import requests

from src.config import DEFAULT_CENTER_SCALE, Settings
from src.errors import MalformedInputError
from src.map_viewer.renderer import CircleCommand, MarkerCommand
from src.map_viewer.session import MapSession, ReportKind
from src.waypoints.converter import waypoints_to_json


def _client(result=None, error=None) -> MagicMock:
    client = MagicMock()
    if error is not None:
        client.search.side_effect = error
    else:
        client.search.return_value = result
    return client


def _messages(reports) -> list[str]:
    return [report.message for report in reports]


class TestLoadMap:
    """Tests for loading the map asset."""

    def test_loads_once(self, session):
        """The map should load once and then be reused."""
        assert session.load_map().message == "Map loaded."
        assert session.map_loaded
        assert session.load_map().message == "Map already loaded."

    def test_missing_asset(self, tmp_path, viewport):
        """A missing map should report an asset load failure."""
        session = MapSession(Settings(map_path=str(tmp_path / "missing.png")), viewport)
        report = session.load_map()
        assert report.kind is ReportKind.ASSET_LOAD_FAILURE
        assert report.message.startswith("Failed to render map:")
        assert not session.map_loaded

    def test_draw_before_load_does_nothing(self, session):
        """Drawing before the map loads should return None."""
        assert session.draw() is None


class TestSearch:
    """Tests for lookup result handling."""

    def test_single_result_is_loaded(self, session, keyed_payload, status_reports):
        """A single match should be loaded right away."""
        report = session.search(_client(keyed_payload), "Sword")
        assert report.message == "1 item found: Sword. Converted 2 waypoint(s)."
        assert report.kind is ReportKind.OK
        assert len(session.export_waypoints) == 2
        assert json.loads(session.input_text) == keyed_payload["Sword"]
        assert status_reports == [report]

    def test_several_results_wait_for_selection(self, session, sword_item, chest_item):
        """Several matches should wait for a selection."""
        report = session.search(_client([sword_item, chest_item]), "a")
        assert report.message == "Found 2 items. Select one to load."
        assert [r.name for r in session.search_results] == ["Sword", "Amulet"]
        assert session.export_waypoints == []

    def test_select_result(self, session, sword_item, chest_item):
        """Selecting a result should convert it."""
        session.search(_client([sword_item, chest_item]), "a")
        report = session.select_result(1)
        assert report.message == "Loaded: Amulet. Converted 4 waypoint(s)."
        assert len(session.export_waypoints) == 4

    @pytest.mark.parametrize("index", [-1, 2, None, True])
    def test_invalid_selection(self, session, sword_item, chest_item, index):
        """A bad selection index should be reported."""
        session.search(_client([sword_item, chest_item]), "a")
        report = session.select_result(index)
        assert report.kind is ReportKind.INVALID_SELECTION
        assert report.message == "Select an item from results first."

    def test_no_results(self, session):
        """No matches should report an empty result."""
        report = session.search(_client({}), "Nothing")
        assert report.message == "No items found."
        assert report.kind is ReportKind.EMPTY_RESULT

    def test_blank_name(self, session):
        """A blank name should be reported as malformed input."""
        report = session.search(_client(error=ValueError("Please enter an item name.")), " ")
        assert report.message == "Please enter an item name."
        assert report.kind is ReportKind.MALFORMED_INPUT

    def test_malformed_response(self, session):
        """A non-JSON response should be reported as malformed input."""
        report = session.search(_client(error=MalformedInputError("Proxy body parse failed")), "x")
        assert report.kind is ReportKind.MALFORMED_INPUT

    def test_request_failure(self, session):
        """Network errors should be reported as request failures."""
        report = session.search(_client(error=requests.ConnectionError("offline")), "x")
        assert report.kind is ReportKind.REQUEST_FAILED
        assert report.message == "Request failed: offline"

    def test_item_without_locations(self, session):
        """A match with no locations should report an empty result."""
        report = session.search(_client({"Dust": {"droppedBy": []}}), "Dust")
        assert report.kind is ReportKind.EMPTY_RESULT
        assert report.message == "1 item found: Dust. Converted 0 waypoint(s)."


class TestConvertText:
    """Tests for converting editor text."""

    def test_converts(self, session, sword_item):
        """Item JSON should convert into export waypoints."""
        report = session.convert_text(json.dumps(sword_item))
        assert report.message == "Converted 2 waypoint(s)."
        assert session.output_text == waypoints_to_json(session.export_waypoints)
        assert session.export_waypoints[0]["color"] == "#ffffffff"
        assert session.export_waypoints[0]["icon"] == "flag"

    def test_uses_selected_icon_and_color(self, session, sword_item):
        """The selected icon and color should be used."""
        session.icon = "skull"
        session.set_color("#123456", debounced=False)
        session.convert_text(json.dumps(sword_item))
        assert session.export_waypoints[0]["icon"] == "skull"
        assert session.export_waypoints[0]["color"] == "#123456ff"

    def test_integer_beyond_float_range_is_skipped(self, session):
        """Coordinates beyond float range should be skipped, not crash."""
        text = '{"internalName": "Gem", "droppedBy": [{"name": "Mine", "coords": [[1' + "0" * 400 + ', 2, 3], [4, 5, 6]]}]}'
        report = session.convert_text(text)
        assert report.message == "Converted 1 waypoint(s)."
        assert session.render_text(text).message == "Map rendered."

    def test_invalid_json(self, session):
        """Invalid JSON should be reported as malformed input."""
        report = session.convert_text("{oops")
        assert report.kind is ReportKind.MALFORMED_INPUT
        assert report.message.startswith("Invalid JSON:")

    def test_blank(self, session):
        """Blank text should report nothing to convert."""
        report = session.convert_text("  ")
        assert report.kind is ReportKind.EMPTY_RESULT
        assert report.message == "No JSON to convert."

    @pytest.mark.parametrize("text", ["[1, 2]", "42", '{"a": 1}'])
    def test_unrecognized(self, session, text):
        """Non-item JSON should be reported as unrecognized."""
        report = session.convert_text(text)
        assert report.kind is ReportKind.MALFORMED_INPUT
        assert report.message == "Unrecognized item JSON."
        assert session.output_text == "[]"

    def test_no_locations(self, session):
        """An item without locations should report zero waypoints."""
        report = session.convert_text('{"droppedBy": []}')
        assert report.kind is ReportKind.EMPTY_RESULT
        assert report.message == "Converted 0 waypoint(s)."


class TestRender:
    """Tests for showing waypoints on the map."""

    def test_render_text_loads_map_and_fits(self, session, sword_item, status_reports):
        """Rendering should load the map, fit and draw."""
        report = session.render_text(json.dumps(sword_item))
        assert report.message == "Map rendered."
        assert _messages(status_reports) == ["Map loaded.", "Fitted to waypoints.", "Map rendered."]
        assert len(session.waypoints) == 2
        assert len(session.last_render.of_type(MarkerCommand)) == 2

    def test_render_text_without_json(self, session):
        """Rendering blank or invalid text should be reported."""
        report = session.render_text("")
        assert report.kind is ReportKind.MALFORMED_INPUT
        assert report.message == "No item JSON to visualize."
        assert session.render_text("{bad").message == "No item JSON to visualize."

    def test_render_without_waypoints_still_draws(self, session):
        """A failed fit should still draw the map."""
        report = session.render_text('{"droppedBy": []}')
        assert report.kind is ReportKind.VIEWPORT_PRECONDITION
        assert report.message == "No waypoints to fit."
        assert session.last_render is not None

    def test_render_fails_without_map(self, tmp_path, viewport, sword_item):
        """Rendering with a missing map should report the load failure."""
        session = MapSession(Settings(map_path=str(tmp_path / "missing.png")), viewport)
        report = session.render_text(json.dumps(sword_item))
        assert report.kind is ReportKind.ASSET_LOAD_FAILURE

    def test_load_item_redraws_once_map_is_loaded(self, session, sword_item, status_reports):
        """Loading an item should redraw once the map is loaded."""
        session.load_map()
        report = session.load_item(sword_item)
        assert report.message == "Converted 2 waypoint(s)."
        assert "Map rendered." in _messages(status_reports)
        assert session.waypoints[0]["name"] == "Cave - Sword - 1"

    def test_fit_needs_map(self, session):
        """Fitting before the map loads should be reported."""
        report = session.fit()
        assert report.kind is ReportKind.VIEWPORT_PRECONDITION
        assert report.message == "Load the map first."

    def test_fit_with_invalid_locations(self, session):
        """Fitting unplaceable waypoints should keep the view."""
        session.load_map()
        session.waypoints = [{"name": "nowhere"}]
        before = session.view.copy()
        report = session.fit()
        assert report.message == "Waypoints invalid for fit."
        assert session.view == before

    def test_render_options(self, session, sword_item):
        """Toggling radius display should redraw with circles."""
        session.render_text(json.dumps(sword_item))
        assert session.last_render.of_type(CircleCommand) == []
        session.set_render_options(show_radius=True, show_labels=False)
        assert len(session.last_render.of_type(CircleCommand)) == 1


class TestNavigation:
    """Tests for go-to, zoom and pan."""

    def test_goto(self, session, sword_item):
        """goto should center valid indexes only after the map loads."""
        assert session.goto(0) is False
        session.render_text(json.dumps(sword_item))
        assert session.goto(1) is True
        assert session.view.scale == DEFAULT_CENTER_SCALE
        assert session.goto(5) is False

    def test_goto_options(self, session):
        """Unnamed waypoints should get numbered labels."""
        session.waypoints = [
            {"name": "Cave - Sword - 1", "location": {"x": 0, "y": 0, "z": 0}},
            {"location": {"x": 1, "y": 0, "z": 1}},
        ]
        assert session.goto_options() == ["Cave - Sword - 1", "Waypoint 2"]

    def test_zoom_and_pan_redraw(self, session, sword_item):
        """Zoom, pan and reset should redraw the frame."""
        session.render_text(json.dumps(sword_item))
        session.reset_view()
        assert session.last_render.status == "2 waypoint(s) • zoom 1.00"
        session.zoom_in()
        assert session.last_render.status == "2 waypoint(s) • zoom 1.20"
        session.zoom_out()
        session.pan(10, 0)
        assert session.view.pan_x == pytest.approx(400 - 4034 / 2 + 10)
        session.zoom_at_point(2.0, 0, 0)
        assert session.last_render.status == "2 waypoint(s) • zoom 2.00"


class TestColor:
    """Tests for color selection and the debounced recolor."""

    def test_set_color_returns_normalized_preview(self, session):
        """set_color should return the normalized color."""
        assert session.set_color("#00FF00", debounced=False) == "#00ff00ff"
        assert session.color == "#00ff00ff"

    def test_immediate_recolor(self, session, sword_item):
        """An immediate color change should recolor and redraw."""
        session.render_text(json.dumps(sword_item))
        session.set_color("#00ff00", debounced=False)
        assert all(w["color"] == "#00ff00ff" for w in session.waypoints)
        marker = session.last_render.of_type(MarkerCommand)[0]
        assert marker.color == (0, 255, 0, 1.0)

    @pytest.mark.asyncio
    async def test_debounced_recolor(self, session, sword_item):
        """Rapid color changes should recolor once with the last color."""
        session.render_text(json.dumps(sword_item))
        session.set_color("#ff0000")
        session.set_color("#0000ff")
        assert session.waypoints[0]["color"] == "#ffffffff"

        await asyncio.sleep(0.3)
        assert all(w["color"] == "#0000ffff" for w in session.waypoints)

    def test_export_not_recolored(self, session, sword_item):
        """Recoloring should not touch the export waypoints."""
        session.load_map()
        session.load_item(sword_item)
        session.set_color("#0000ff", debounced=False)
        assert session.export_waypoints[0]["color"] == "#ffffffff"
