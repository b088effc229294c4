"""
Route handlers shared by the serverless adapter and the local FastAPI app.

Each handler takes a ProxyRequest plus Settings and returns either a
response model (or list of models) or a HandlerError. Handlers never raise
for upstream failures; anything they do raise is a bug and is turned into a
500 by the caller.
"""

import math
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, List, Tuple, Union

from pydantic import BaseModel

from src.api.schemas import (
    HealthResponse, SoilSample, MonthlyRainfall, GeocodeResult, WeatherSnapshot,
)
from src.config import Settings
from src.location.errors import UpstreamError
from src.location.openweather import fetch_current_weather
from src.location.resolver import geocode
from src.location.soilgrids import fetch_soil_sample
from src.location.weather import fetch_rain_history
from src.metrics import PROXY_REQUESTS

logger = logging.getLogger(__name__)


@dataclass
class ProxyRequest:
    """Inbound request, reduced to what the handlers need."""
    method: str = "GET"
    path: str = "/"
    query: Dict[str, str] = field(default_factory=dict)


@dataclass
class HandlerError:
    """A handled failure: status code plus client-facing message."""
    status_code: int
    message: str


HandlerResult = Union[BaseModel, List[BaseModel], HandlerError]
Handler = Callable[[ProxyRequest, Settings], HandlerResult]

MISSING_COORDS = HandlerError(400, "Missing lat/lon")
INVALID_COORDS = HandlerError(400, "Invalid lat/lon")


def _coordinates(request: ProxyRequest) -> Union[Tuple[float, float], HandlerError]:
    """Parse lat/lon query parameters; both must be present and finite."""
    lat = request.query.get("lat")
    lon = request.query.get("lon")
    if not lat or not lon:
        return MISSING_COORDS
    try:
        lat_f, lon_f = float(lat), float(lon)
    except ValueError:
        return INVALID_COORDS
    if not (math.isfinite(lat_f) and math.isfinite(lon_f)):
        return INVALID_COORDS
    return lat_f, lon_f


def utc_timestamp() -> str:
    """Current UTC time, ISO-8601 with milliseconds and a trailing Z."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def handle_health(request: ProxyRequest, settings: Settings) -> HandlerResult:
    return HealthResponse(status="ok", timestamp=utc_timestamp())


def handle_soil(request: ProxyRequest, settings: Settings) -> HandlerResult:
    coords = _coordinates(request)
    if isinstance(coords, HandlerError):
        return coords
    lat, lon = coords

    try:
        sample = fetch_soil_sample(lat, lon, timeout=settings.http_timeout)
        return SoilSample(**sample)
    except Exception:
        logger.exception("Soil API error")
        return HandlerError(500, "Soil data fetch failed")


def handle_rain_history(request: ProxyRequest, settings: Settings) -> HandlerResult:
    coords = _coordinates(request)
    if isinstance(coords, HandlerError):
        return coords
    lat, lon = coords

    try:
        months = fetch_rain_history(
            lat, lon,
            year=settings.rain_history_year,
            timeout=settings.http_timeout,
        )
        return [MonthlyRainfall(**m) for m in months]
    except UpstreamError as e:
        logger.error("Rain history error: %s", e)
        return HandlerError(500, "Rain history fetch failed")
    except Exception:
        logger.exception("Rain history error")
        return HandlerError(500, "Rain history fetch failed")


def handle_geocode(request: ProxyRequest, settings: Settings) -> HandlerResult:
    query = request.query.get("q")
    if not query:
        return HandlerError(400, "Missing query")

    try:
        match = geocode(
            query,
            user_agent=settings.nominatim_user_agent,
            timeout=settings.http_timeout,
        )
        if match is None:
            return HandlerError(404, "Location not found")
        return GeocodeResult(
            lat=match.latitude,
            lon=match.longitude,
            display_name=match.display_name,
            place_class=match.place_class,
            type=match.place_type,
        )
    except UpstreamError as e:
        logger.error("Geocode error: %s", e)
        return HandlerError(500, "Geocoding failed")
    except Exception:
        logger.exception("Geocode error")
        return HandlerError(500, "Geocoding failed")


def handle_weather(request: ProxyRequest, settings: Settings) -> HandlerResult:
    coords = _coordinates(request)
    if isinstance(coords, HandlerError):
        return coords
    lat, lon = coords

    if not settings.openweather_api_key:
        return HandlerError(500, "OpenWeather API key not configured")

    try:
        snapshot = fetch_current_weather(
            lat, lon,
            api_key=settings.openweather_api_key,
            timeout=settings.http_timeout,
        )
        return WeatherSnapshot(**snapshot)
    except UpstreamError as e:
        logger.error("Weather API error: %s", e)
        return HandlerError(500, "Weather data fetch failed")
    except Exception:
        logger.exception("Weather API error")
        return HandlerError(500, "Weather data fetch failed")


ROUTES: Dict[str, Handler] = {
    "/health": handle_health,
    "/soil": handle_soil,
    "/rain-history": handle_rain_history,
    "/geocode": handle_geocode,
    "/weather": handle_weather,
}


def to_payload(result: HandlerResult) -> Tuple[int, Union[dict, list]]:
    """Convert a handler result into (status_code, JSON-serializable body)."""
    if isinstance(result, HandlerError):
        return result.status_code, {"error": result.message}
    if isinstance(result, list):
        return 200, [item.model_dump(by_alias=True) for item in result]
    return 200, result.model_dump(by_alias=True)


def dispatch(request: ProxyRequest, settings: Settings) -> Tuple[int, Union[dict, list]]:
    """
    Route a request to its handler and return (status_code, body).

    Unknown paths give 404 and methods other than GET or HEAD on known
    paths give 405.
    Exceptions escaping a handler become 500 with the exception message.
    """
    handler = ROUTES.get(request.path)
    if handler is None:
        status, body = 404, {"error": "Not found"}
    elif request.method.upper() not in ("GET", "HEAD"):
        status, body = 405, {"error": "Method not allowed"}
    else:
        try:
            status, body = to_payload(handler(request, settings))
        except Exception as e:
            logger.exception("Unhandled error in %s", request.path)
            status, body = 500, {"error": str(e)}

    if status >= 400:
        logger.info("%s %s -> %d %s", request.method, request.path, status, body)
    PROXY_REQUESTS.labels(
        route=request.path if handler is not None else "unmatched",
        status=str(status),
    ).inc()
    return status, body
