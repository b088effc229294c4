"""
Place-name geocoder backed by Nominatim (OpenStreetMap).
Free API, no key required, but every request must carry an identifying
User-Agent per the usage policy.

API docs: https://nominatim.org/release-docs/latest/api/Search/
"""

import logging
from dataclasses import dataclass
from typing import Optional

import requests

from src.config import DEFAULT_USER_AGENT
from src.location.errors import NominatimError
from src.metrics import UPSTREAM_LATENCY

logger = logging.getLogger(__name__)

NOMINATIM_SEARCH = "https://nominatim.openstreetmap.org/search"


@dataclass
class LocationInfo:
    """Best geocoder match for a free-text query."""
    latitude: float
    longitude: float
    display_name: str = ""
    place_class: str = ""
    place_type: str = ""


def geocode(
    query: str,
    user_agent: str = DEFAULT_USER_AGENT,
    timeout: float = 30,
) -> Optional[LocationInfo]:
    """
    Resolve a free-text place query to its single best match.

    Args:
        query: Place name or address (e.g., 'Nairobi, Kenya')
        user_agent: Identifying User-Agent sent to Nominatim
        timeout: Request timeout in seconds

    Returns:
        LocationInfo for the first match, or None if nothing matched.

    Raises:
        NominatimError: On transport failure, non-2xx status, undecodable
            body, or a match without usable coordinates.
    """
    params = {"format": "json", "q": query, "limit": 1}

    try:
        with UPSTREAM_LATENCY.labels(provider=NominatimError.provider).time():
            resp = requests.get(
                NOMINATIM_SEARCH, params=params, timeout=timeout,
                headers={"User-Agent": user_agent, "Accept": "application/json"},
            )
        resp.raise_for_status()
        data = resp.json()
    except (requests.exceptions.RequestException, ValueError) as e:
        raise NominatimError(f"Nominatim request failed: {e}") from e

    if not data:
        logger.info("No geocoding match for '%s'", query)
        return None

    try:
        match = data[0]
        return LocationInfo(
            latitude=float(match["lat"]),
            longitude=float(match["lon"]),
            display_name=match.get("display_name", ""),
            place_class=match.get("class", ""),
            place_type=match.get("type", ""),
        )
    except (KeyError, IndexError, TypeError, ValueError, AttributeError) as e:
        raise NominatimError(f"Malformed Nominatim match: {e}") from e
