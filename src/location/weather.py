"""
Open-Meteo archive client: fetches daily precipitation for a point and
rolls it up into calendar-month totals.
Free API, no key required. Uses ERA5 reanalysis for historical data.

API docs: https://open-meteo.com/en/docs/historical-weather-api
License: CC-BY 4.0
"""

import logging
from typing import Dict, List

import pandas as pd
import requests

from src.location.errors import OpenMeteoError
from src.metrics import UPSTREAM_LATENCY

logger = logging.getLogger(__name__)

OPEN_METEO_ARCHIVE = "https://archive-api.open-meteo.com/v1/archive"

MONTH_NAMES = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]


def fetch_daily_precipitation(
    lat: float,
    lon: float,
    year: int = 2023,
    timeout: float = 30,
) -> Dict[str, list]:
    """
    Fetch one calendar year of daily precipitation totals.

    Args:
        lat: Latitude
        lon: Longitude
        year: Calendar year to fetch (Jan 1 through Dec 31)
        timeout: Request timeout in seconds

    Returns:
        The 'daily' block of the response, with 'time' and
        'precipitation_sum' lists (empty dict if absent).

    Raises:
        OpenMeteoError: On transport failure, non-2xx status or undecodable body.
    """
    params = {
        "latitude": lat,
        "longitude": lon,
        "start_date": f"{year}-01-01",
        "end_date": f"{year}-12-31",
        "daily": "precipitation_sum",
        "timezone": "auto",
    }

    try:
        with UPSTREAM_LATENCY.labels(provider=OpenMeteoError.provider).time():
            resp = requests.get(OPEN_METEO_ARCHIVE, params=params, timeout=timeout)
        resp.raise_for_status()
        data = resp.json()
    except (requests.exceptions.RequestException, ValueError) as e:
        raise OpenMeteoError(f"Open-Meteo request failed: {e}") from e

    daily = data.get("daily") if isinstance(data, dict) else None
    if not daily:
        logger.warning("No daily data returned from Open-Meteo")
        return {}
    return daily


def aggregate_monthly_rainfall(daily: Dict[str, list]) -> List[Dict]:
    """
    Sum daily precipitation into 12 calendar-month buckets.

    Entries with an unparseable date are skipped; missing or non-numeric
    precipitation counts as zero. Always returns Jan..Dec, each rounded
    to one decimal, however many days are present.
    """
    precip = list(daily.get("precipitation_sum") or [])
    times = list(daily.get("time") or [])
    # Pair by position; days without a timestamp are dropped below
    times = (times + [None] * len(precip))[:len(precip)]

    frame = pd.DataFrame({
        "date": pd.to_datetime(pd.Series(times, dtype=object), errors="coerce", format="ISO8601"),
        "rainfall": pd.to_numeric(pd.Series(precip, dtype=object), errors="coerce").fillna(0.0),
    }).dropna(subset=["date"])

    monthly = (
        frame.groupby(frame["date"].dt.month)["rainfall"].sum()
        .reindex(range(1, 13), fill_value=0.0)
    )

    return [
        {"month": name, "rainfall": round(float(total), 1)}
        for name, total in zip(MONTH_NAMES, monthly)
    ]


def fetch_rain_history(
    lat: float,
    lon: float,
    year: int = 2023,
    timeout: float = 30,
) -> List[Dict]:
    """Fetch a year of precipitation and return monthly totals, Jan..Dec."""
    daily = fetch_daily_precipitation(lat, lon, year=year, timeout=timeout)
    return aggregate_monthly_rainfall(daily)
