"""Sort OSM elements into critical sites, siting candidates, or neither."""

import enum
from typing import Mapping

from ..openmaps.models import Candidate, Coordinate, CriticalSite
from .height import TOWER_TYPES

OSM_BASE_URL = "https://www.openstreetmap.org"

CRITICAL_AMENITIES = ("hospital", "fire_station", "police")
AMENITY_LABELS = {
    "hospital": "Hospital",
    "fire_station": "Fire station",
    "police": "Police station",
}
UNNAMED_CRITICAL = "Critical site (unnamed)"
UNNAMED_CANDIDATE = "Unnamed structure"


class FeatureClass(enum.Enum):
    CRITICAL = "critical"
    CANDIDATE = "candidate"
    IGNORED = "ignored"


def is_critical(tags: Mapping[str, str]) -> bool:
    return (
        tags.get("amenity") in CRITICAL_AMENITIES
        or tags.get("power") == "substation"
        or tags.get("man_made") == "water_tower"
    )


def is_candidate(tags: Mapping[str, str]) -> bool:
    if tags.get("building") and (tags.get("height") or tags.get("building:levels")):
        return True
    return tags.get("man_made") in TOWER_TYPES


def classify(tags: Mapping[str, str]) -> FeatureClass:
    """Critical takes precedence; an element is never both."""
    if is_critical(tags):
        return FeatureClass.CRITICAL
    if is_candidate(tags):
        return FeatureClass.CANDIDATE
    return FeatureClass.IGNORED


def critical_label(tags: Mapping[str, str]) -> str:
    name = (tags.get("name") or "").strip()
    if name:
        return name

    amenity = tags.get("amenity")
    if amenity:
        return f"{AMENITY_LABELS.get(amenity, 'Amenity')} (amenity={amenity})"

    power = tags.get("power")
    man_made = tags.get("man_made")
    if power == "substation":
        operator = tags.get("operator")
        suffix = f" - {operator}" if operator else ""
        return f"Substation (power=substation){suffix}"
    if man_made == "water_tower":
        return "Water tower (man_made=water_tower)"
    if power:
        return f"Power site (power={power})"
    if man_made:
        return f"Site (man_made={man_made})"
    return UNNAMED_CRITICAL


def critical_kind(tags: Mapping[str, str]) -> str:
    for key in ("amenity", "power", "man_made"):
        if tags.get(key):
            return f"{key}={tags[key]}"
    return "critical"


def candidate_title(tags: Mapping[str, str]) -> str:
    for key in ("name", "tower:type", "man_made", "building"):
        if tags.get(key):
            return tags[key]
    return UNNAMED_CANDIDATE


def candidate_kind(tags: Mapping[str, str]) -> str:
    for key in ("man_made", "building"):
        if tags.get(key):
            return f"{key}={tags[key]}"
    return "candidate"


def osm_url(element_kind: str, element_id: int) -> str:
    return f"{OSM_BASE_URL}/{element_kind}/{element_id}"


def to_critical_site(position: Coordinate, tags: Mapping[str, str]) -> CriticalSite:
    return CriticalSite(position=position, title=critical_label(tags), kind=critical_kind(tags))


def to_candidate(
    position: Coordinate,
    tags: Mapping[str, str],
    height_meters: float,
    reference_url: str,
) -> Candidate:
    return Candidate(
        position=position,
        title=candidate_title(tags),
        kind=candidate_kind(tags),
        height_meters=height_meters,
        reference_url=reference_url,
    )
