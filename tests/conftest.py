"""Shared fixtures: a fake OpenWeatherMap backend and a patched test client."""

import asyncio
from datetime import datetime, timezone
from unittest.mock import patch

import httpx
import pytest
from fastapi.testclient import TestClient

import app.main as main
from app.services.weather_service import WeatherService


BASE_URL = "https://owm.test/data/2.5"
GEO_URL = "https://owm.test/geo/1.0"

GEO = {
    "toronto": {"name": "Toronto", "country": "CA", "state": "Ontario", "lat": 43.65, "lon": -79.38},
    "paris": {"name": "Paris", "country": "FR", "state": "Ile-de-France", "lat": 48.85, "lon": 2.35},
    "london": {"name": "London", "country": "GB", "state": "England", "lat": 51.51, "lon": -0.13},
    "londrina": {"name": "Londrina", "country": "BR", "lat": -23.31, "lon": -51.16},
    "tokyo": {"name": "Tokyo", "country": "JP", "lat": 35.68, "lon": 139.76},
}

CURRENT = {
    43.65: {"temp": -3.4, "feels_like": -8.6, "description": "light snow", "icon": "13d"},
    48.85: {"temp": 11.5, "feels_like": 10.2, "description": "broken clouds", "icon": "04d"},
    51.51: {"temp": 9.49, "feels_like": 7.0, "description": "light rain", "icon": "10d"},
    -23.31: {"temp": 27.0, "feels_like": 29.1, "description": "clear sky", "icon": "01d"},
    35.68: {"temp": 18.2, "feels_like": 17.9, "description": "few clouds", "icon": "02d"},
}

# 2024-01-15 09:00 UTC
FORECAST_START = int(datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc).timestamp())


def current_payload(lat: float) -> dict:
    entry = CURRENT[lat]
    return {
        "main": {
            "temp": entry["temp"],
            "feels_like": entry["feels_like"],
            "humidity": 81,
            "pressure": 1012,
        },
        "weather": [{"description": entry["description"], "icon": entry["icon"]}],
        "wind": {"speed": 5.0, "deg": 270},
        "clouds": {"all": 75},
        "visibility": 8500,
    }


def forecast_payload(count: int = 40) -> dict:
    items = []
    for i in range(count):
        item = {
            "dt": FORECAST_START + i * 3 * 3600,
            "main": {"temp_min": 1.5 + i, "temp_max": 6.4 + i, "humidity": 60 + i % 10},
            "weather": [{"description": f"sample {i}", "icon": "01d"}],
            "wind": {"speed": 2.5},
        }
        if i % 2:
            item["rain"] = {"3h": 0.456}
        items.append(item)
    return {"list": items}


class FakeOpenWeatherMap:
    """In-process stand-in for the geocoding and weather endpoints."""

    def __init__(self):
        self.calls = []
        self.delays = {}
        self.failures = {}
        self.forecast = forecast_payload()

    async def handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        params = request.url.params
        self.calls.append((path, dict(params)))

        if params.get("appid") != "test-key":
            return httpx.Response(401, json={"cod": 401, "message": "Invalid API key"})

        if path.endswith("/direct"):
            query = params["q"]
            await asyncio.sleep(self.delays.get(query, 0))
            if query in self.failures:
                failure = self.failures[query]
                if isinstance(failure, Exception):
                    raise failure
                return httpx.Response(failure, json={"cod": failure, "message": "upstream trouble"})
            limit = int(params.get("limit", 5))
            matches = [geo for key, geo in GEO.items() if key.startswith(query.lower())]
            return httpx.Response(200, json=matches[:limit])

        if path.endswith("/weather"):
            return httpx.Response(200, json=current_payload(float(params["lat"])))

        if path.endswith("/forecast"):
            return httpx.Response(200, json=self.forecast)

        return httpx.Response(404, json={"cod": 404, "message": "not found"})


@pytest.fixture
def upstream():
    return FakeOpenWeatherMap()


def build_service(upstream: FakeOpenWeatherMap, api_key: str = "test-key") -> WeatherService:
    return WeatherService(
        api_key=api_key,
        base_url=BASE_URL,
        geo_url=GEO_URL,
        timeout=1.0,
        client=httpx.AsyncClient(transport=httpx.MockTransport(upstream.handle)),
    )


@pytest.fixture
def make_service():
    return build_service


@pytest.fixture
def weather_service(upstream):
    return build_service(upstream)


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    main.rate_limiter.reset()
    yield
    main.rate_limiter.reset()


@pytest.fixture
def client(weather_service):
    """Test client with the fake upstream wired in."""
    with patch("app.main.weather_service", weather_service):
        yield TestClient(main.app)
