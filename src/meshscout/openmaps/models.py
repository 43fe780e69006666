import math
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class Coordinate:
    """A WGS84 latitude/longitude pair."""

    lat: float
    lon: float


def make_coordinate(lat: Any, lon: Any) -> Optional[Coordinate]:
    """Build a Coordinate from loosely typed values; None unless both are finite and in range."""
    try:
        lat_value, lon_value = float(lat), float(lon)
    except (TypeError, ValueError):
        return None
    if not (math.isfinite(lat_value) and math.isfinite(lon_value)):
        return None
    if not (-90.0 <= lat_value <= 90.0 and -180.0 <= lon_value <= 180.0):
        return None
    return Coordinate(lat=lat_value, lon=lon_value)


@dataclass(frozen=True)
class Center:
    """The geocoded center of a search, with a human-readable label."""

    position: Coordinate
    label: str


@dataclass(frozen=True)
class RawElement:
    """A tagged element returned by the Overpass API.

    ``position`` is the node's own coordinate or the way/relation center, and
    is ``None`` when the response omitted it.
    """

    kind: str
    id: int
    tags: Dict[str, str] = field(default_factory=dict)
    position: Optional[Coordinate] = None


@dataclass(frozen=True)
class CriticalSite:
    """Infrastructure used as a proximity and density signal."""

    position: Coordinate
    title: str
    kind: str


@dataclass(frozen=True)
class Candidate:
    """A structure tall enough to be considered for node siting."""

    position: Coordinate
    title: str
    kind: str
    height_meters: float
    reference_url: str


@dataclass(frozen=True)
class Score:
    total: float
    within_1k: int
    within_3k: int
    nearest_meters: float = math.inf
    nearest_title: Optional[str] = None
    nearest_kind: Optional[str] = None

    @property
    def has_nearest(self) -> bool:
        return math.isfinite(self.nearest_meters)


@dataclass(frozen=True)
class ScoredCandidate:
    candidate: Candidate
    score: Score


@dataclass(frozen=True)
class Run:
    """One completed search: the ranked candidates and the critical sites they were scored against."""

    postal_code: str
    center: Center
    radius_km: float
    candidates: Tuple[ScoredCandidate, ...]
    critical: Tuple[CriticalSite, ...]
    total_candidates: int = 0
    min_height_m: float = 9.0

    def summary(self) -> str:
        return (
            f"Found {self.total_candidates} candidates >= {self.min_height_m:g}m "
            f"and {len(self.critical)} critical sites. "
            f"Showing top {len(self.candidates)}."
        )
