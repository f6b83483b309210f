"""Waypoint conversion pipeline for item lookup results."""

from src.waypoints.converter import (
    classify_payload,
    enumerate_search_results,
    extract_item_record,
    normalize_color,
    to_export_waypoints,
    to_visualization_waypoints,
    waypoints_to_json,
)
from src.waypoints.models import DropOrigin, DropSource, ItemRecord, Location, SearchResult

__all__ = [
    "classify_payload",
    "enumerate_search_results",
    "extract_item_record",
    "normalize_color",
    "to_export_waypoints",
    "to_visualization_waypoints",
    "waypoints_to_json",
    "DropOrigin",
    "DropSource",
    "ItemRecord",
    "Location",
    "SearchResult",
]
