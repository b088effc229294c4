"""
OpenWeather current-conditions client.
Requires an API key (set OPENWEATHER_API_KEY env var).

API docs: https://openweathermap.org/current
"""

from typing import Dict

import requests

from src.location.errors import OpenWeatherError
from src.metrics import UPSTREAM_LATENCY

OPENWEATHER_CURRENT = "https://api.openweathermap.org/data/2.5/weather"


def fetch_current_weather(
    lat: float,
    lon: float,
    api_key: str,
    timeout: float = 30,
) -> Dict:
    """
    Fetch current conditions in metric units and project them for the dashboard.

    Returns:
        Dict with temperature (C), humidity (%), description,
        wind_speed (m/s) and location (place name).

    Raises:
        OpenWeatherError: On transport failure, non-2xx status, or a payload
            missing any projected field.
    """
    params = {
        "lat": lat,
        "lon": lon,
        "appid": api_key,
        "units": "metric",
    }

    try:
        with UPSTREAM_LATENCY.labels(provider=OpenWeatherError.provider).time():
            resp = requests.get(OPENWEATHER_CURRENT, params=params, timeout=timeout)
        resp.raise_for_status()
        data = resp.json()
    except (requests.exceptions.RequestException, ValueError) as e:
        # Never log the request URL here, it carries the key
        raise OpenWeatherError(f"OpenWeather request failed: {type(e).__name__}") from e

    try:
        return {
            "temperature": data["main"]["temp"],
            "humidity": data["main"]["humidity"],
            "description": data["weather"][0]["description"],
            "wind_speed": data["wind"]["speed"],
            "location": data["name"],
        }
    except (KeyError, IndexError, TypeError) as e:
        raise OpenWeatherError(f"Malformed OpenWeather payload: missing {e}") from e
