"""
Pydantic response schemas for the farm data proxy.
"""

from typing import Literal, Union
from pydantic import BaseModel, Field

# Upstream numbers pass through as sent: 55 stays 55, 6.5 stays 6.5
Number = Union[int, float]


class HealthResponse(BaseModel):
    """Health check response."""
    status: Literal["ok"] = "ok"
    timestamp: str


class ErrorResponse(BaseModel):
    """Body of every non-2xx response."""
    error: str


class SoilSample(BaseModel):
    """Topsoil reading for a point."""
    ph: Number = Field(..., description="pH in water")
    nitrogen: Number = Field(..., description="Total nitrogen")
    organic_matter: Number = Field(..., description="Organic matter (SOC * 1.724)")
    source: Literal["soilgrids", "mock"]

    model_config = {"json_schema_extra": {
        "examples": [{
            "ph": 6.5, "nitrogen": 0.15,
            "organic_matter": 2.586, "source": "soilgrids",
        }]
    }}


class MonthlyRainfall(BaseModel):
    """Precipitation total for one calendar month."""
    month: str = Field(..., description="Three-letter month name")
    rainfall: float = Field(..., description="Total precipitation (mm)")


class GeocodeResult(BaseModel):
    """Best geocoder match for a place query."""
    lat: float
    lon: float
    display_name: str
    place_class: str = Field(..., alias="class")
    type: str

    model_config = {"populate_by_name": True}


class WeatherSnapshot(BaseModel):
    """Current conditions, metric units."""
    temperature: Number = Field(..., description="Temperature (°C)")
    humidity: Number = Field(..., description="Relative humidity (%)")
    description: str
    wind_speed: Number = Field(..., description="Wind speed (m/s)")
    location: str
