"""Tests for the OpenWeatherMap client."""

from datetime import datetime, timezone

import httpx
import pytest

from app.errors import ConfigurationError, NotFoundError, UpstreamError
from app.services.weather_service import WeatherService


@pytest.mark.asyncio
class TestWeatherService:
    """Test upstream calls against the fake provider."""

    async def test_geocode(self, weather_service, upstream):
        location = await weather_service.geocode("Paris")

        assert location.name == "Paris"
        assert location.country == "FR"
        assert (location.lat, location.lon) == (48.85, 2.35)
        path, params = upstream.calls[0]
        assert path == "/geo/1.0/direct"
        assert params == {"q": "Paris", "limit": "1", "appid": "test-key"}

    async def test_geocode_not_found(self, weather_service):
        with pytest.raises(NotFoundError):
            await weather_service.geocode("Atlantis")

    async def test_forecast_samples_keep_feed_order(self, weather_service):
        location = await weather_service.geocode("Paris")

        samples = await weather_service.get_forecast_samples(location)

        assert len(samples) == 40
        assert samples[0].timestamp == datetime(2024, 1, 15, 9, tzinfo=timezone.utc)
        assert samples[0].precipitation_amount == 0
        assert samples[1].precipitation_amount == 0.456
        assert samples == sorted(samples, key=lambda s: s.timestamp)

    async def test_current_weather_uses_metric_units(self, weather_service, upstream):
        location = await weather_service.geocode("London")

        current = await weather_service.get_current(location)

        assert current.temperature == 9
        path, params = upstream.calls[-1]
        assert path == "/data/2.5/weather"
        assert params["units"] == "metric"

    async def test_city_summary(self, weather_service):
        summary = await weather_service.get_city_summary("Paris")

        assert summary.city == "Paris"
        assert summary.temperature == 12
        assert summary.wind_speed == 18

    async def test_search_cities(self, weather_service):
        matches = await weather_service.search_cities("Lond")

        assert [m.name for m in matches] == ["London", "Londrina"]
        assert matches[1].state is None

    async def test_timeout_is_upstream_error(self, weather_service, upstream):
        upstream.failures["Paris"] = httpx.ConnectTimeout("timed out")

        with pytest.raises(UpstreamError) as exc_info:
            await weather_service.geocode("Paris")

        assert exc_info.value.status_code == 500
        assert exc_info.value.error == "Service Unavailable"

    async def test_malformed_forecast_is_upstream_error(self, weather_service, upstream):
        upstream.forecast = {"list": [{"dt": 1700000000, "main": {}}]}
        location = await weather_service.geocode("Paris")

        with pytest.raises(UpstreamError) as exc_info:
            await weather_service.get_forecast_samples(location)

        assert exc_info.value.message == "Invalid weather data format received"

    async def test_ensure_configured(self, make_service, upstream):
        service = make_service(upstream, api_key="")

        with pytest.raises(ConfigurationError):
            service.ensure_configured()
        await service.close()

    async def test_defaults_from_settings(self):
        service = WeatherService(api_key="abc")

        assert service.base_url == "https://api.openweathermap.org/data/2.5"
        assert service.geo_url == "https://api.openweathermap.org/geo/1.0"
        assert service.timeout == 10.0
        await service.close()
