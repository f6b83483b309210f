"""Exception types shared by the conversion and map viewer packages."""


class WaypointMapperError(Exception):
    """Base class for all waypoint mapper errors."""


class MalformedInputError(WaypointMapperError):
    """Source JSON could not be parsed or read."""


class ViewportPreconditionError(WaypointMapperError):
    """A view operation was attempted before the map image was loaded."""


class AssetLoadError(WaypointMapperError):
    """The map image is missing or could not be decoded."""
