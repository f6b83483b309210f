"""Canonical records produced from lookup payloads."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from src.config import UNKNOWN_ITEM_NAME

Number = int | float


class DropOrigin(str, Enum):
    """Which payload field a DropSource was read from."""

    DROPPED_BY = "droppedBy"
    DROP_META = "dropMeta"


@dataclass(frozen=True)
class Location:
    """A drop position in game coordinates. Only x and z place it on the map."""

    x: Number
    y: Number
    z: Number
    radius: Number | None = None

    def as_dict(self) -> dict[str, Number]:
        return {"x": self.x, "y": self.y, "z": self.z}


@dataclass(frozen=True)
class DropSource:
    """A named in-game source (mob, dungeon, chest...) and its drop locations."""

    source_name: str
    origin: DropOrigin
    locations: tuple[Location, ...] = ()


@dataclass(frozen=True)
class ItemRecord:
    """An item name plus every valid drop location found for it."""

    name: str = UNKNOWN_ITEM_NAME
    drops: tuple[DropSource, ...] = ()

    @property
    def location_count(self) -> int:
        return sum(len(drop.locations) for drop in self.drops)


@dataclass(frozen=True)
class SearchResult:
    """One candidate item from a lookup, shown to the user for selection."""

    name: str
    obj: dict[str, Any]
