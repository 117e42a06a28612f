"""
Property kinds a rule can constrain.

The set is closed for dispatch purposes but extensible: persisted ids that are
not known to this version are kept as plain integers and routed to the generic
free-text adapter, so rule sets written by a newer property set survive a
round trip through an older one.
"""

from __future__ import annotations

from enum import Enum
from typing import Final


class PropertyKind(int, Enum):
    """Catalog attributes, numbered as they are persisted."""

    FILMROLL = 0
    FOLDERS = 1
    CAMERA = 2
    LENS = 3
    APERTURE = 4
    EXPOSURE = 5
    FOCAL_LENGTH = 6
    ISO = 7
    DAY = 8
    TIME = 9
    IMPORT_TIMESTAMP = 10
    CHANGE_TIMESTAMP = 11
    EXPORT_TIMESTAMP = 12
    PRINT_TIMESTAMP = 13
    GEOTAGGING = 14
    ASPECT_RATIO = 15
    TAG = 16
    COLORLABEL = 17
    METADATA = 18
    GROUPING = 19
    LOCAL_COPY = 20
    HISTORY = 21
    MODULE = 22
    ORDER = 23
    RATING = 24
    TEXTSEARCH = 25
    FILENAME = 26


KNOWN_KIND_COUNT: Final[int] = len(PropertyKind)
PROPERTY_ID_MAX: Final[int] = 0xFFFF

_DISPLAY_NAMES: Final[dict[PropertyKind, str]] = {
    PropertyKind.FILMROLL: "film roll",
    PropertyKind.FOLDERS: "folder",
    PropertyKind.CAMERA: "camera",
    PropertyKind.LENS: "lens",
    PropertyKind.APERTURE: "aperture",
    PropertyKind.EXPOSURE: "exposure",
    PropertyKind.FOCAL_LENGTH: "focal length",
    PropertyKind.ISO: "ISO",
    PropertyKind.DAY: "capture date",
    PropertyKind.TIME: "capture time",
    PropertyKind.IMPORT_TIMESTAMP: "import timestamp",
    PropertyKind.CHANGE_TIMESTAMP: "change timestamp",
    PropertyKind.EXPORT_TIMESTAMP: "export timestamp",
    PropertyKind.PRINT_TIMESTAMP: "print timestamp",
    PropertyKind.GEOTAGGING: "geotagging",
    PropertyKind.ASPECT_RATIO: "aspect ratio",
    PropertyKind.TAG: "tag",
    PropertyKind.COLORLABEL: "color label",
    PropertyKind.METADATA: "metadata",
    PropertyKind.GROUPING: "grouping",
    PropertyKind.LOCAL_COPY: "local copy",
    PropertyKind.HISTORY: "history",
    PropertyKind.MODULE: "module",
    PropertyKind.ORDER: "module order",
    PropertyKind.RATING: "rating",
    PropertyKind.TEXTSEARCH: "search",
    PropertyKind.FILENAME: "filename",
}


def is_known_kind(property_id: int) -> bool:
    """Return True if property_id names a kind this version knows about."""
    return 0 <= property_id < KNOWN_KIND_COUNT


def coerce_property_id(raw: object) -> int:
    """
    Normalize a persisted property id.

    Parameters
    ----------
    raw:
        Value read from storage or supplied by a caller.

    Returns
    -------
    int
        The id as an int. Known ids come back as PropertyKind members. Negative
        or non-integer values, and ids wider than 16 bits, map to kind 0.
        Other unknown ids are kept.
    """
    try:
        value = int(raw)  # type: ignore[call-overload]
    except (TypeError, ValueError):
        return PropertyKind(0)
    if value < 0 or value > PROPERTY_ID_MAX:
        return PropertyKind(0)
    if is_known_kind(value):
        return PropertyKind(value)
    return value


def property_name(property_id: int) -> str:
    """Return the display name for a property id, or '???' when unknown."""
    if not is_known_kind(property_id):
        return "???"
    return _DISPLAY_NAMES[PropertyKind(property_id)]
