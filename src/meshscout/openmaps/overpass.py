import logging
from typing import Any, Dict, List, Optional

import requests

from ..config import DEFAULT_OVERPASS_URL, DEFAULT_TIMEOUT_S, REQUEST_HEADERS
from ..errors import OverpassQueryError
from .models import Coordinate, RawElement, make_coordinate

QUERY_TIMEOUT_S = 25

logger = logging.getLogger(__name__)


def build_overpass_query(lat: float, lon: float, radius_m: int) -> str:
    """Build an Overpass query for tall structures and critical infrastructure around a point."""
    around = f"around:{radius_m},{lat},{lon}"
    return f"""[out:json][timeout:{QUERY_TIMEOUT_S}];
(
  way({around})["building"]["building:levels"];
  way({around})["building"]["height"];
  node({around})["man_made"~"tower|mast"];
  way({around})["man_made"~"tower|mast"];
  relation({around})["man_made"~"tower|mast"];

  node({around})["amenity"~"hospital|fire_station|police"];
  way({around})["amenity"~"hospital|fire_station|police"];
  node({around})["power"="substation"];
  way({around})["power"="substation"];
  node({around})["man_made"="water_tower"];
  way({around})["man_made"="water_tower"];
);
out tags center;
"""


def fetch_elements(
    query: str,
    endpoint: str = DEFAULT_OVERPASS_URL,
    timeout: float = DEFAULT_TIMEOUT_S,
) -> List[RawElement]:
    """Run ``query`` against the Overpass API and return the parsed elements."""
    logger.debug("Querying Overpass endpoint %s", endpoint)
    try:
        response = requests.post(
            endpoint,
            data={"data": query},
            timeout=timeout,
            headers=REQUEST_HEADERS,
        )
    except requests.RequestException as exc:
        logger.warning("Overpass endpoint %s failed: %s", endpoint, exc)
        raise OverpassQueryError(f"Overpass request failed: {exc}") from exc

    if response.status_code == 429:
        raise OverpassQueryError("Overpass API rate limit hit. Please try again later.")

    if response.status_code >= 400:
        logger.warning("Overpass endpoint %s returned %s", endpoint, response.status_code)
        raise OverpassQueryError(f"Overpass error: {response.status_code}")

    try:
        payload = response.json()
    except ValueError as exc:
        logger.warning("Overpass endpoint %s returned invalid JSON: %s", endpoint, exc)
        raise OverpassQueryError("Overpass API returned invalid JSON payload.") from exc

    if not isinstance(payload, dict):
        raise OverpassQueryError("Overpass API returned an unexpected payload.")
    return parse_elements(payload.get("elements") or [])


def _coordinate(source: Any) -> Optional[Coordinate]:
    if not isinstance(source, dict):
        return None
    return make_coordinate(source.get("lat"), source.get("lon"))


def parse_element(element: Dict[str, Any]) -> Optional[RawElement]:
    """Normalize one Overpass element; returns None when its type or id is unusable."""
    kind = element.get("type")
    if kind not in ("node", "way", "relation"):
        return None
    try:
        element_id = int(element["id"])
    except (KeyError, TypeError, ValueError):
        return None

    raw_tags = element.get("tags")
    tags = {}
    if isinstance(raw_tags, dict):
        tags = {str(key): str(value) for key, value in raw_tags.items() if value is not None}

    if kind == "node":
        position = _coordinate(element)
    else:
        position = _coordinate(element.get("center"))

    return RawElement(kind=kind, id=element_id, tags=tags, position=position)


def parse_elements(elements: List[Dict[str, Any]]) -> List[RawElement]:
    """Normalize Overpass response elements into :class:`RawElement` values."""
    parsed: List[RawElement] = []
    for element in elements:
        if not isinstance(element, dict):
            continue
        raw = parse_element(element)
        if raw is None:
            logger.debug("Skipping malformed Overpass element: %r", element)
            continue
        parsed.append(raw)
    return parsed
