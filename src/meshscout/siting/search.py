"""Run orchestration: geocode, query, classify, score, rank, retain.

:class:`SiteSearch` owns the most recent completed :class:`Run`. A new run
replaces it only once every stage has succeeded, so a failed search leaves
the previous results available for export.
"""

import logging
import math
import re
import threading
from typing import Callable, List, Optional, Sequence, Tuple

from ..config import Settings
from ..errors import InputValidationError, NoRunError, SearchInProgressError
from ..openmaps.geocoding import lookup_postal_code
from ..openmaps.models import Candidate, Center, CriticalSite, RawElement, Run, ScoredCandidate
from ..openmaps.overpass import build_overpass_query, fetch_elements
from .classify import FeatureClass, classify, osm_url, to_candidate, to_critical_site
from .height import estimate_height_meters
from .scoring import rank, score

POSTAL_CODE_PATTERN = re.compile(r"^\d{5}$")

Geocoder = Callable[[str], Center]
ElementSource = Callable[[str], Sequence[RawElement]]
StatusCallback = Callable[[str], None]

logger = logging.getLogger(__name__)


def validate_inputs(postal_code: str, radius_km: float, max_candidates: int) -> str:
    """Check search inputs and return the normalized postal code."""
    code = (postal_code or "").strip()
    if not POSTAL_CODE_PATTERN.match(code):
        raise InputValidationError("Enter a valid 5-digit ZIP.")
    try:
        radius_ok = math.isfinite(radius_km) and radius_km > 0
    except TypeError:
        radius_ok = False
    if not radius_ok:
        raise InputValidationError("Radius must be a positive number.")
    if isinstance(max_candidates, bool) or not isinstance(max_candidates, int) or max_candidates <= 0:
        raise InputValidationError("Max candidates must be a positive integer.")
    return code


def radius_to_meters(radius_km: float) -> int:
    """Round half up to whole meters, never below one."""
    return max(1, math.floor(radius_km * 1000 + 0.5))


def split_elements(
    elements: Sequence[RawElement], min_height_m: float
) -> Tuple[List[CriticalSite], List[Candidate]]:
    """Classify elements, keeping candidates whose estimated height reaches ``min_height_m``."""
    critical: List[CriticalSite] = []
    candidates: List[Candidate] = []

    for element in elements:
        if element.position is None:
            logger.debug("Skipping %s/%s without a position", element.kind, element.id)
            continue

        feature_class = classify(element.tags)
        if feature_class is FeatureClass.CRITICAL:
            critical.append(to_critical_site(element.position, element.tags))
        elif feature_class is FeatureClass.CANDIDATE:
            height = estimate_height_meters(element.tags)
            if height is None or height < min_height_m:
                logger.debug("Skipping %s/%s with height %s", element.kind, element.id, height)
                continue
            candidates.append(
                to_candidate(element.position, element.tags, height, osm_url(element.kind, element.id))
            )

    return critical, candidates


class SiteSearch:
    """Runs searches one at a time and keeps the last completed :class:`Run`."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        geocoder: Optional[Geocoder] = None,
        element_source: Optional[ElementSource] = None,
    ) -> None:
        self.settings = settings or Settings()
        self._geocoder = geocoder or self._default_geocoder
        self._element_source = element_source or self._default_element_source
        self._lock = threading.Lock()
        self._last_run: Optional[Run] = None

    @property
    def last_run(self) -> Optional[Run]:
        return self._last_run

    def require_run(self) -> Run:
        if self._last_run is None:
            raise NoRunError()
        return self._last_run

    def _default_geocoder(self, postal_code: str) -> Center:
        return lookup_postal_code(
            postal_code, base_url=self.settings.geocoder_url, timeout=self.settings.timeout_s
        )

    def _default_element_source(self, query: str) -> List[RawElement]:
        return fetch_elements(query, endpoint=self.settings.overpass_url, timeout=self.settings.timeout_s)

    def run(
        self,
        postal_code: str,
        radius_km: float,
        max_candidates: int,
        on_status: Optional[StatusCallback] = None,
    ) -> Run:
        """Execute one full search and retain its result.

        Raises:
            InputValidationError: Malformed inputs; nothing is requested.
            SearchInProgressError: Another search has not finished yet.
            GeocodingError: The postal code could not be resolved.
            OverpassQueryError: The spatial query failed.
        """
        code = validate_inputs(postal_code, radius_km, max_candidates)
        notify = on_status or (lambda message: None)

        if not self._lock.acquire(blocking=False):
            raise SearchInProgressError()
        try:
            notify("Looking up ZIP...")
            center = self._geocoder(code)

            notify(f"Querying OpenStreetMap around {center.label}...")
            query = build_overpass_query(
                center.position.lat, center.position.lon, radius_to_meters(radius_km)
            )
            elements = self._element_source(query)

            min_height = self.settings.min_height_m
            critical, candidates = split_elements(elements, min_height)
            scored = [ScoredCandidate(candidate=c, score=score(c, critical)) for c in candidates]
            top = rank(scored, max_candidates)

            new_run = Run(
                postal_code=code,
                center=center,
                radius_km=radius_km,
                candidates=tuple(top),
                critical=tuple(critical),
                total_candidates=len(candidates),
                min_height_m=min_height,
            )
            self._last_run = new_run
        finally:
            self._lock.release()

        logger.info("Search for %s complete: %s", code, new_run.summary())
        notify(new_run.summary())
        return new_run
