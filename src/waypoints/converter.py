"""Convert item lookup payloads into waypoint lists."""

import json
import logging
import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator

from src.config import DEFAULT_ICON, FALLBACK_COLOR, UNKNOWN_ITEM_NAME
from src.waypoints.models import DropOrigin, DropSource, ItemRecord, Location, SearchResult

logger = logging.getLogger(__name__)

ITEM_FIELDS = ("droppedBy", "dropMeta")
GUILD_DROP_TYPE = "guild"
UNKNOWN_SOURCE = "Unknown"
UNKNOWN_META_SOURCE = "Unknown Source"
UNKNOWN_RESULT = "Unknown"
VISIBILITY_DEFAULT = "default"

_HEX6_RE = re.compile(r"#[0-9a-f]{6}")


class PayloadShape(Enum):
    """The lookup payload shapes we know how to read."""

    ITEM_LIST = "item_list"
    SINGLE_ITEM = "single_item"
    NAME_KEYED = "name_keyed"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class Payload:
    """
    A lookup payload resolved into one of the known shapes.

    Attributes:
        shape: Which shape the raw value had
        entries: (key, item object) pairs in input order. The key is the
            top-level name for NAME_KEYED payloads and None otherwise.
    """

    shape: PayloadShape
    entries: tuple[tuple[str | None, dict[str, Any]], ...] = ()


def is_item_object(value: Any) -> bool:
    """True for a dict carrying droppedBy and/or dropMeta."""
    return isinstance(value, dict) and any(key in value for key in ITEM_FIELDS)


def classify_payload(raw: Any) -> Payload:
    """
    Resolve a raw lookup value into a tagged Payload.

    Args:
        raw: Parsed JSON from the lookup service or the editor

    Returns:
        Payload whose entries only contain dict-valued items
    """
    if isinstance(raw, list):
        items = tuple((None, item) for item in raw if isinstance(item, dict))
        return Payload(PayloadShape.ITEM_LIST, items)

    if isinstance(raw, dict):
        if is_item_object(raw):
            return Payload(PayloadShape.SINGLE_ITEM, ((None, raw),))
        keyed = tuple((str(key), value) for key, value in raw.items() if isinstance(value, dict))
        if keyed:
            return Payload(PayloadShape.NAME_KEYED, keyed)

    return Payload(PayloadShape.UNRECOGNIZED)


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # int too large for a float
        return False


def _non_blank(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _parse_coordinate(entry: Any, allow_radius: bool) -> Location | None:
    """Read [x, y, z] or [x, y, z, radius]; None when x/y/z are not all numbers."""
    if not isinstance(entry, (list, tuple)) or len(entry) < 3:
        return None
    x, y, z = entry[0], entry[1], entry[2]
    if not (_is_number(x) and _is_number(y) and _is_number(z)):
        return None
    radius = None
    if allow_radius and len(entry) >= 4 and _is_number(entry[3]):
        radius = entry[3]
    return Location(x=x, y=y, z=z, radius=radius)


def _read_dropped_by(value: Any) -> list[DropSource]:
    if not isinstance(value, list):
        return []

    sources: list[DropSource] = []
    for entry in value:
        if not isinstance(entry, dict):
            continue
        name = entry.get("name")
        source_name = str(name) if name else UNKNOWN_SOURCE
        coords = entry.get("coords")
        if not isinstance(coords, list):
            coords = []

        locations = []
        for coord in coords:
            location = _parse_coordinate(coord, allow_radius=True)
            if location is None:
                logger.debug(f"Skipping invalid coordinate {coord!r} for {source_name}")
                continue
            locations.append(location)

        if locations:
            sources.append(DropSource(source_name, DropOrigin.DROPPED_BY, tuple(locations)))
    return sources


def _read_drop_meta(value: Any) -> DropSource | None:
    if not isinstance(value, dict):
        return None
    if value.get("type") == GUILD_DROP_TYPE:
        logger.debug("Ignoring guild dropMeta")
        return None

    location = _parse_coordinate(value.get("coordinates"), allow_radius=False)
    if location is None:
        return None
    meta_name = _non_blank(value.get("name")) or UNKNOWN_META_SOURCE
    return DropSource(meta_name, DropOrigin.DROP_META, (location,))


def extract_item_record(raw: Any) -> ItemRecord:
    """
    Normalize a lookup payload into an ItemRecord.

    Accepts an item object directly, or an object keyed by item name (the
    first item is used). Anything else yields an empty "Unknown Item" record.
    An explicit, non-blank internalName wins over the key-derived name.

    Args:
        raw: Parsed JSON value

    Returns:
        ItemRecord; never raises for malformed input
    """
    payload = classify_payload(raw)
    if payload.shape not in (PayloadShape.SINGLE_ITEM, PayloadShape.NAME_KEYED):
        logger.debug(f"Payload shape {payload.shape.value} has no convertible item")
        return ItemRecord()

    key, item = payload.entries[0]
    name = _non_blank(item.get("internalName")) or (str(key) if key else None) or UNKNOWN_ITEM_NAME

    drops = _read_dropped_by(item.get("droppedBy"))
    meta_drop = _read_drop_meta(item.get("dropMeta"))
    if meta_drop is not None:
        drops.append(meta_drop)

    record = ItemRecord(name=name, drops=tuple(drops))
    logger.debug(f"Extracted {record.location_count} location(s) for {name}")
    return record


def enumerate_search_results(raw: Any) -> list[SearchResult]:
    """
    List the candidate items contained in a lookup payload.

    Supports arrays of item objects, a single item object and objects keyed
    by item name; order follows the input. Unknown shapes give [].
    """
    payload = classify_payload(raw)
    results: list[SearchResult] = []
    for key, item in payload.entries:
        if payload.shape is PayloadShape.NAME_KEYED:
            name = item.get("internalName") or key or UNKNOWN_RESULT
        else:
            name = item.get("internalName") or item.get("name") or UNKNOWN_RESULT
        results.append(SearchResult(name=str(name), obj=item))
    return results


def normalize_color(value: str | None) -> str:
    """
    Lowercase a color and give 6-digit hex values a full-opacity alpha.

    Example:
        >>> normalize_color("#ABCDEF")
        '#abcdefff'
    """
    if not value:
        return FALLBACK_COLOR
    color = value.strip().lower()
    if _HEX6_RE.fullmatch(color):
        return color + "ff"
    return color


def _format_number(value: int | float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _iter_locations(record: ItemRecord) -> Iterator[tuple[DropSource, int, Location]]:
    """Yield (source, 1-based ordinal within source, location)."""
    for drop in record.drops:
        for ordinal, location in enumerate(drop.locations, start=1):
            yield drop, ordinal, location


def to_export_waypoints(record: ItemRecord, icon: str | None, color: str | None) -> list[dict[str, Any]]:
    """
    Build export waypoints for the overlay tool.

    droppedBy points are named "<source> - <radius>m - <item> - <n>", or
    "<source> - <item> - <n>" when the coordinate has no radius. The dropMeta
    point is named "<meta name> - <item>". Radius is never exported as a field.
    """
    color = normalize_color(color)
    icon = icon or DEFAULT_ICON
    waypoints: list[dict[str, Any]] = []

    for drop, ordinal, location in _iter_locations(record):
        if drop.origin is DropOrigin.DROP_META:
            name = f"{drop.source_name} - {record.name}"
        elif location.radius is not None:
            name = f"{drop.source_name} - {_format_number(location.radius)}m - {record.name} - {ordinal}"
        else:
            name = f"{drop.source_name} - {record.name} - {ordinal}"

        waypoints.append({
            "name": name,
            "color": color,
            "icon": icon,
            "visibility": VISIBILITY_DEFAULT,
            "location": location.as_dict(),
        })

    return waypoints


def to_visualization_waypoints(record: ItemRecord, color: str | None) -> list[dict[str, Any]]:
    """Build map waypoints: no icon, no radius in the name, radius kept as a field."""
    color = normalize_color(color)
    waypoints: list[dict[str, Any]] = []

    for drop, ordinal, location in _iter_locations(record):
        if drop.origin is DropOrigin.DROP_META:
            name = f"{drop.source_name} - {record.name}"
        else:
            name = f"{drop.source_name} - {record.name} - {ordinal}"

        waypoint: dict[str, Any] = {
            "name": name,
            "color": color,
            "visibility": VISIBILITY_DEFAULT,
            "location": location.as_dict(),
        }
        if location.radius is not None:
            waypoint["radius"] = location.radius
        waypoints.append(waypoint)

    return waypoints


def waypoints_to_json(waypoints: list[dict[str, Any]]) -> str:
    """Serialize waypoints as the formatted JSON text the overlay tool imports."""
    return json.dumps(waypoints, indent=2, ensure_ascii=False)
