"""Tests for the local FastAPI app."""

import sys
import pytest
from pathlib import Path
from unittest.mock import patch

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture
def client():
    """Create test client with fixed settings."""
    from src.config import Settings
    import src.api.app as app_module

    with patch.object(app_module, "get_settings", return_value=Settings(openweather_api_key=None)):
        from fastapi.testclient import TestClient
        yield TestClient(app_module.app)


class TestHealthEndpoint:
    def test_health_returns_200(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert "timestamp" in data

    def test_no_store_and_cors(self, client):
        response = client.get("/health")
        assert response.headers["cache-control"] == "no-store"
        assert response.headers["access-control-allow-origin"] == "*"


class TestProxyEndpoints:
    def test_soil_missing_params(self, client):
        response = client.get("/soil", params={"lat": "12.97"})
        assert response.status_code == 400
        assert response.json() == {"error": "Missing lat/lon"}

    def test_geocode_missing_query(self, client):
        response = client.get("/geocode")
        assert response.status_code == 400
        assert response.json() == {"error": "Missing query"}

    def test_rain_history(self, client):
        daily = {"time": ["2023-01-01", "2023-01-15"], "precipitation_sum": [5, 3]}
        with patch("src.location.weather.fetch_daily_precipitation", return_value=daily):
            response = client.get("/rain-history", params={"lat": "1", "lon": "2"})

        assert response.status_code == 200
        data = response.json()
        assert len(data) == 12
        assert data[0] == {"month": "Jan", "rainfall": 8.0}

    def test_weather_without_key(self, client):
        with patch("src.location.openweather.requests.get") as mock_get:
            response = client.get("/weather", params={"lat": "1", "lon": "2"})

        assert response.status_code == 500
        assert response.json() == {"error": "OpenWeather API key not configured"}
        assert mock_get.call_count == 0

    def test_geocode_class_key(self, client):
        from src.location.resolver import LocationInfo

        match = LocationInfo(latitude=18.52, longitude=73.86, display_name="Pune",
                             place_class="place", place_type="city")
        with patch("src.api.handlers.geocode", return_value=match):
            response = client.get("/geocode", params={"q": "Pune"})

        assert response.status_code == 200
        assert response.json()["class"] == "place"


class TestRouting:
    def test_unknown_path_returns_404(self, client):
        response = client.get("/nope")
        assert response.status_code == 404
        assert response.json() == {"error": "Not found"}
        assert response.headers["cache-control"] == "no-store"

    def test_options_returns_empty_200(self, client):
        response = client.options("/soil")
        assert response.status_code == 200
        assert response.content == b""
        assert response.headers["access-control-allow-origin"] == "*"

    def test_head_returns_200(self, client):
        response = client.head("/health")
        assert response.status_code == 200
        assert response.headers["cache-control"] == "no-store"

    def test_post_not_allowed(self, client):
        response = client.post("/health")
        assert response.status_code == 405
        assert response.json() == {"error": "Method not allowed"}

    def test_metrics_endpoint(self, client):
        client.get("/health")
        response = client.get("/metrics")
        assert response.status_code == 200
        assert "proxy_requests_total" in response.text
