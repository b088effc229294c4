"""
ISRIC SoilGrids v2.0 client: fetches modeled topsoil properties for a point.
Falls back to a deterministic synthetic reading when the service is unavailable.

API docs: https://rest.isric.org/soilgrids/v2.0/docs
License: CC-BY 4.0
"""

import math
import logging
from typing import Dict, List, Optional

import requests

from src.location.errors import SoilGridsError
from src.metrics import UPSTREAM_LATENCY

logger = logging.getLogger(__name__)

SOILGRIDS_BASE = "https://rest.isric.org/soilgrids/v2.0/properties/query"

SOILGRIDS_PROPERTIES = [
    "phh2o",    # pH in water
    "soc",      # Soil organic carbon
    "nitrogen", # Total nitrogen
]

# Shallowest depth band
DEFAULT_DEPTH = "0-5cm"

# Van Bemmelen factor: organic carbon -> organic matter
SOC_TO_ORGANIC_MATTER = 1.724

DEFAULT_PH = 6.5
DEFAULT_NITROGEN = 0.15
DEFAULT_SOC = 1.5


def _first_mean(layer: Dict) -> Optional[float]:
    """
    Mean value of a layer's first depth, rounded to 2 decimals.

    A missing layer, depth or 'mean' key gives None (the caller applies
    defaults). A 'mean' that is present but null or non-numeric is a
    no-data cell and raises SoilGridsError.
    """
    depths = layer.get("depths") or []
    if not depths:
        return None
    values = depths[0].get("values") or {}
    if "mean" not in values:
        return None
    mean = values["mean"]
    if isinstance(mean, bool) or not isinstance(mean, (int, float)):
        raise SoilGridsError(f"No usable mean for {layer.get('name')}: {mean!r}")
    return round(mean, 2)


def query_soilgrids(
    lat: float,
    lon: float,
    depth: str = DEFAULT_DEPTH,
    properties: List[str] = None,
    timeout: float = 30,
) -> Dict[str, Optional[float]]:
    """
    Query SoilGrids for the first-depth mean of each property.

    Args:
        lat: Latitude (-90 to 90)
        lon: Longitude (-180 to 180)
        depth: Depth interval (default '0-5cm')
        properties: SoilGrids property names (default: phh2o, soc, nitrogen)
        timeout: Request timeout in seconds

    Returns:
        Dict mapping property name to its value, None where absent.
        Values are in SoilGrids mapped units.

    Raises:
        SoilGridsError: On transport failure, non-2xx status or malformed body.
    """
    if properties is None:
        properties = SOILGRIDS_PROPERTIES

    param_list = [("lat", lat), ("lon", lon)]
    for prop in properties:
        param_list.append(("property", prop))
    param_list += [("depth", depth), ("value", "mean")]

    try:
        with UPSTREAM_LATENCY.labels(provider=SoilGridsError.provider).time():
            resp = requests.get(
                SOILGRIDS_BASE, params=param_list, timeout=timeout,
                headers={"Accept": "application/json"},
            )
        resp.raise_for_status()
        data = resp.json()
    except (requests.exceptions.RequestException, ValueError) as e:
        raise SoilGridsError(f"SoilGrids request failed: {e}") from e

    # A null body carries no layers; every property takes its default
    if data is None:
        data = {}

    try:
        layers = (data.get("properties") or {}).get("layers") or data.get("layers") or []
        by_name = {layer.get("name"): layer for layer in reversed(layers)}
        return {prop: _first_mean(by_name.get(prop, {})) for prop in properties}
    except (AttributeError, TypeError, ValueError) as e:
        raise SoilGridsError(f"Malformed SoilGrids payload: {e}") from e


def soil_sample_from_properties(values: Dict[str, Optional[float]]) -> Dict:
    """Reshape SoilGrids values into the dashboard soil sample, applying defaults."""
    # Zero counts as absent, same as a missing layer
    return {
        "ph": values.get("phh2o") or DEFAULT_PH,
        "nitrogen": values.get("nitrogen") or DEFAULT_NITROGEN,
        "organic_matter": (values.get("soc") or DEFAULT_SOC) * SOC_TO_ORGANIC_MATTER,
        "source": "soilgrids",
    }


def mock_soil_sample(lat: float, lon: float) -> Dict:
    """
    Deterministic synthetic soil reading derived from the coordinates.

    Used as a stand-in when SoilGrids cannot be reached. Same inputs always
    give the same outputs, with ph in [5.5, 8.5), nitrogen in [0.1, 0.3)
    and organic_matter in [1.0, 4.0).
    """
    seed = abs(math.sin(lat * lon) * 10000)
    return {
        "ph": 5.5 + (seed % 3),
        "nitrogen": 0.1 + (seed % 20) / 100,
        "organic_matter": 1.0 + (seed % 30) / 10,
        "source": "mock",
    }


def fetch_soil_sample(lat: float, lon: float, timeout: float = 30) -> Dict:
    """Fetch a soil sample from SoilGrids, or a synthetic one if it fails."""
    try:
        values = query_soilgrids(lat, lon, timeout=timeout)
    except SoilGridsError as e:
        logger.warning("SoilGrids failed, using mock data: %s", e)
        return mock_soil_sample(lat, lon)
    return soil_sample_from_properties(values)
