import math
import re
from typing import Mapping, Optional

METERS_PER_LEVEL = 3.0
DEFAULT_TOWER_HEIGHT_M = 25.0
TOWER_TYPES = ("tower", "mast")

_NON_NUMERIC = re.compile(r"[^\d.]")
_LEADING_NUMBER = re.compile(r"\d+\.?\d*|\.\d+")


def parse_leading_number(value: Optional[str]) -> Optional[float]:
    """Parse a loosely formatted OSM number such as ``"12.5 m"`` or ``"1,200"``.

    Everything except digits and decimal points is dropped, then the longest
    leading decimal literal is read. Returns None when nothing parses.
    """
    if not value:
        return None
    match = _LEADING_NUMBER.match(_NON_NUMERIC.sub("", value))
    if match is None:
        return None
    value = float(match.group())
    return value if math.isfinite(value) else None


def estimate_height_meters(tags: Mapping[str, str]) -> Optional[float]:
    """Approximate a structure's height from its tags, or None when there is no evidence."""
    if tags.get("height"):
        height = parse_leading_number(tags["height"])
        if height is not None and height > 0:
            return height

    if tags.get("building:levels"):
        levels = parse_leading_number(tags["building:levels"])
        if levels is not None and levels > 0:
            return levels * METERS_PER_LEVEL

    if tags.get("man_made") in TOWER_TYPES:
        return DEFAULT_TOWER_HEIGHT_M

    return None
