"""
Shared pytest fixtures for the item waypoint mapper tests.

Fixtures here are discovered automatically by pytest and are available to
every test module.

Notes:
- Item payload fixtures mirror the shapes the lookup service returns
- Fixtures return fresh objects, so tests may mutate them freely
- The map image fixture writes a tiny PNG; the real map is never needed
"""

import pytest
from PIL import Image

from src.config import Settings
from src.map_viewer.session import MapSession
from src.map_viewer.viewport import Viewport


@pytest.fixture
def sword_item() -> dict:
    """
    Item with one droppedBy source: one coordinate with a radius, one without.
    """
    return {
        "internalName": "Sword",
        "droppedBy": [
            {"name": "Cave", "coords": [[100, 64, -200, 15], [101, 64, -201]]},
        ],
    }


@pytest.fixture
def chest_item() -> dict:
    """Item with two droppedBy sources and a dropMeta location."""
    return {
        "internalName": "Amulet",
        "droppedBy": [
            {"name": "Cave", "coords": [[0, 60, 0, 10], [20, 60, 10, 5]]},
            {"name": "Crypt", "coords": [[-40, 30, -80, 25]]},
        ],
        "dropMeta": {"name": "Old Chest", "type": "normal", "coordinates": [300, 70, -400]},
    }


@pytest.fixture
def keyed_payload(sword_item) -> dict:
    """Lookup response keyed by item name (the service's usual shape)."""
    item = dict(sword_item)
    del item["internalName"]
    return {"Sword": item}


@pytest.fixture
def viewport() -> Viewport:
    """An 800x600 visible canvas area."""
    return Viewport(800, 600)


@pytest.fixture
def map_image_path(tmp_path) -> str:
    """Write a small PNG standing in for the map raster."""
    path = tmp_path / "main-map.png"
    Image.new("RGB", (40, 64), color=(30, 90, 40)).save(path)
    return str(path)


@pytest.fixture
def status_reports() -> list:
    """Collects every StatusReport a session emits."""
    return []


@pytest.fixture
def session(map_image_path, viewport, status_reports) -> MapSession:
    """A MapSession whose map path points at the small test PNG (not loaded yet)."""
    return MapSession(
        Settings(map_path=map_image_path),
        viewport=viewport,
        status_callback=status_reports.append,
    )
