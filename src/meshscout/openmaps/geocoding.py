import logging

import requests

from ..config import DEFAULT_GEOCODER_URL, DEFAULT_TIMEOUT_S, REQUEST_HEADERS
from ..errors import GeocodingError, PostalCodeNotFoundError
from .models import Center, make_coordinate

logger = logging.getLogger(__name__)


def lookup_postal_code(
    postal_code: str,
    base_url: str = DEFAULT_GEOCODER_URL,
    timeout: float = DEFAULT_TIMEOUT_S,
) -> Center:
    """Resolve a US ZIP code to its center coordinate via Zippopotam.us."""
    url = f"{base_url}/{postal_code}"
    try:
        response = requests.get(url, timeout=timeout, headers=REQUEST_HEADERS)
    except requests.RequestException as exc:
        logger.warning("ZIP lookup for %s failed: %s", postal_code, exc)
        raise GeocodingError(f"ZIP lookup failed: {exc}") from exc

    if not response.ok:
        logger.info("ZIP lookup for %s returned %s", postal_code, response.status_code)
        raise PostalCodeNotFoundError(postal_code)

    try:
        data = response.json()
    except ValueError as exc:
        raise GeocodingError("ZIP lookup returned invalid JSON payload.") from exc

    places = data.get("places") if isinstance(data, dict) else None
    if not isinstance(places, list) or not places or not isinstance(places[0], dict):
        raise GeocodingError("ZIP lookup returned no places")

    place = places[0]
    position = make_coordinate(place.get("latitude"), place.get("longitude"))
    if position is None:
        raise GeocodingError("ZIP lookup returned no coordinates")

    label = f"{place.get('place name', postal_code)}, {place.get('state abbreviation', '')}"
    return Center(position=position, label=label.rstrip(", "))
