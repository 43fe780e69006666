"""Shared fixtures for the meshscout test-suite."""

import pytest

from meshscout.openmaps.models import (
    Candidate,
    Center,
    Coordinate,
    CriticalSite,
    Run,
    Score,
    ScoredCandidate,
)

from builders import ORIGIN, north_of


@pytest.fixture()
def sample_run() -> Run:
    """A run with one scored and one isolated candidate plus two critical sites."""
    hospital = CriticalSite(position=north_of(ORIGIN, 500), title="St. Mary's", kind="amenity=hospital")
    station = CriticalSite(
        position=north_of(ORIGIN, 2500), title="Fire station (amenity=fire_station)", kind="amenity=fire_station"
    )
    scored = ScoredCandidate(
        candidate=Candidate(
            position=ORIGIN,
            title='Tower "North", Block A',
            kind="man_made=tower",
            height_meters=40.0,
            reference_url="https://www.openstreetmap.org/way/42",
        ),
        score=Score(
            total=120.5,
            within_1k=1,
            within_3k=2,
            nearest_meters=500.0,
            nearest_title="St. Mary's",
            nearest_kind="amenity=hospital",
        ),
    )
    isolated = ScoredCandidate(
        candidate=Candidate(
            position=Coordinate(lat=31.0, lon=-98.0),
            title="Silo",
            kind="building=silo",
            height_meters=12.0,
            reference_url="https://www.openstreetmap.org/way/43",
        ),
        score=Score(total=44.4, within_1k=0, within_3k=0),
    )
    return Run(
        postal_code="78701",
        center=Center(position=ORIGIN, label="Austin, TX"),
        radius_km=3.0,
        candidates=(scored, isolated),
        critical=(hospital, station),
        total_candidates=2,
        min_height_m=9.0,
    )
