import math
from typing import Iterable, List, Sequence

from ..openmaps.models import Candidate, CriticalSite, Score, ScoredCandidate
from .classify import UNNAMED_CRITICAL
from .geo import distance_meters

NEAR_RADIUS_M = 1000.0
FAR_RADIUS_M = 3000.0

HEIGHT_WEIGHT = 12.0
NEAR_WEIGHT = 18.0
FAR_WEIGHT = 6.0
PROXIMITY_MAX = 18.0
PROXIMITY_DECAY_M = 200.0


def height_score(height_meters: float) -> float:
    return math.log2(1 + height_meters) * HEIGHT_WEIGHT


def density_score(within_1k: int, within_3k: int) -> float:
    # sites inside 1 km are counted in both rings on purpose
    return within_1k * NEAR_WEIGHT + within_3k * FAR_WEIGHT


def proximity_score(nearest_meters: float) -> float:
    if not math.isfinite(nearest_meters):
        return 0.0
    return max(0.0, PROXIMITY_MAX - nearest_meters / PROXIMITY_DECAY_M)


def score(candidate: Candidate, critical_sites: Iterable[CriticalSite]) -> Score:
    """Score a candidate by height, nearby critical-site density and distance to the nearest site."""
    within_1k = 0
    within_3k = 0
    nearest = math.inf
    nearest_title = None
    nearest_kind = None

    for site in critical_sites:
        d = distance_meters(candidate.position, site.position)
        if d < nearest:
            nearest = d
            nearest_title = site.title or UNNAMED_CRITICAL
            nearest_kind = site.kind or "critical"
        if d <= NEAR_RADIUS_M:
            within_1k += 1
        if d <= FAR_RADIUS_M:
            within_3k += 1

    total = (
        height_score(candidate.height_meters)
        + density_score(within_1k, within_3k)
        + proximity_score(nearest)
    )
    return Score(
        total=total,
        within_1k=within_1k,
        within_3k=within_3k,
        nearest_meters=nearest,
        nearest_title=nearest_title,
        nearest_kind=nearest_kind,
    )


def rank(scored: Sequence[ScoredCandidate], limit: int) -> List[ScoredCandidate]:
    """Return the top ``limit`` (at least one) candidates by descending total; ties keep input order."""
    ordered = sorted(scored, key=lambda item: item.score.total, reverse=True)
    return ordered[: max(1, limit)]
