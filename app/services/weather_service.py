"""Weather service for fetching data from the OpenWeatherMap APIs."""

import logging
from datetime import datetime, timezone
from typing import List, Optional
import httpx

from ..errors import ConfigurationError, NotFoundError, UpstreamError
from ..models import (
    ComparisonSuccess,
    CurrentConditions,
    ForecastSample,
    GeoLocation,
)
from .units import ms_to_kmh, round_half_up
from config.settings import settings


logger = logging.getLogger(__name__)

SEARCH_RESULT_LIMIT = 10


class WeatherService:
    """Service for geocoding and weather lookups against OpenWeatherMap."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        geo_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = settings.openweather_api_key if api_key is None else api_key
        self.base_url = base_url or settings.openweather_base_url
        self.geo_url = geo_url or settings.openweather_geo_url
        self.timeout = timeout or settings.upstream_timeout_seconds
        self.client = client or httpx.AsyncClient(timeout=self.timeout)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def ensure_configured(self) -> None:
        """
        Raises:
            ConfigurationError: If no API key is provisioned
        """
        if not self.is_configured:
            raise ConfigurationError()

    async def _get(self, url: str, params: dict, context: str):
        """
        Issue one upstream GET and return the decoded JSON body.

        Raises:
            NotFoundError: If the provider answers 404
            UpstreamError: For any other provider status, network error or timeout
        """
        params = {**params, "appid": self.api_key}

        try:
            response = await self.client.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()

        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 404:
                logger.warning(f"Upstream returned 404 for {context}")
                raise NotFoundError()
            if status == 401:
                logger.error(f"Upstream rejected the API key during {context}")
                raise UpstreamError("Invalid API key configuration", error="API Configuration Error")

            logger.error(f"HTTP error during {context}: {e}")
            raise UpstreamError(_provider_message(e.response), status_code=status)

        except httpx.RequestError as e:
            logger.error(f"Network error during {context}: {e}")
            raise UpstreamError(
                "Weather service is temporarily unavailable",
                error="Service Unavailable",
            )

        except ValueError as e:
            logger.error(f"Invalid JSON from upstream during {context}: {e}")
            raise UpstreamError("Invalid weather data format received")

    async def geocode(self, city: str) -> GeoLocation:
        """
        Resolve a city name to its best geocoder match.

        Raises:
            NotFoundError: If the geocoder returns no match
            UpstreamError: If the provider call fails
        """
        logger.info(f"Geocoding city: {city}")
        matches = await self._get(f"{self.geo_url}/direct", {"q": city, "limit": 1}, f"geocoding {city}")

        if not matches:
            logger.warning(f"City not found: {city}")
            raise NotFoundError()

        return _parse_geo(matches[0])

    async def search_cities(self, query: str) -> List[GeoLocation]:
        """Return up to SEARCH_RESULT_LIMIT geocoder matches for a partial name."""
        logger.info(f"Searching cities for query: {query}")
        matches = await self._get(
            f"{self.geo_url}/direct",
            {"q": query, "limit": SEARCH_RESULT_LIMIT},
            f"city search {query}",
        )
        return [_parse_geo(match) for match in matches]

    async def get_current(self, location: GeoLocation) -> CurrentConditions:
        """Fetch current conditions for a geocoded location."""
        data = await self._get(
            f"{self.base_url}/weather",
            {"lat": location.lat, "lon": location.lon, "units": "metric"},
            f"current weather for {location.name}",
        )

        try:
            return CurrentConditions(
                temperature=round_half_up(data["main"]["temp"]),
                feels_like=round_half_up(data["main"]["feels_like"]),
                humidity=data["main"]["humidity"],
                pressure=data["main"]["pressure"],
                visibility=round_half_up((data.get("visibility") or 10000) / 1000),
                description=data["weather"][0]["description"],
                icon=data["weather"][0]["icon"],
                wind_speed=ms_to_kmh((data.get("wind") or {}).get("speed", 0)),
                wind_direction=(data.get("wind") or {}).get("deg", 0),
                cloudiness=(data.get("clouds") or {}).get("all", 0),
            )
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.error(f"Invalid current weather format for {location.name}: {e}")
            raise UpstreamError("Invalid weather data format received")

    async def get_forecast_samples(self, location: GeoLocation) -> List[ForecastSample]:
        """Fetch the 5-day / 3-hour forecast feed in upstream order."""
        data = await self._get(
            f"{self.base_url}/forecast",
            {"lat": location.lat, "lon": location.lon, "units": "metric"},
            f"forecast for {location.name}",
        )

        try:
            return [_parse_forecast_sample(item) for item in data["list"]]
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.error(f"Invalid forecast format for {location.name}: {e}")
            raise UpstreamError("Invalid weather data format received")

    async def get_city_summary(self, city: str) -> ComparisonSuccess:
        """Geocode a city and fetch the condensed current weather used by comparisons."""
        location = await self.geocode(city)
        current = await self.get_current(location)
        return ComparisonSuccess(
            city=location.name,
            country=location.country,
            temperature=current.temperature,
            description=current.description,
            icon=current.icon,
            humidity=current.humidity,
            wind_speed=current.wind_speed,
        )

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()


def _parse_geo(match: dict) -> GeoLocation:
    try:
        return GeoLocation(
            name=match["name"],
            country=match["country"],
            state=match.get("state"),
            lat=match["lat"],
            lon=match["lon"],
        )
    except (KeyError, TypeError, ValueError) as e:
        logger.error(f"Invalid geocoding format: {e}")
        raise UpstreamError("Invalid location data format received")


def _parse_forecast_sample(item: dict) -> ForecastSample:
    weather = item["weather"][0]
    return ForecastSample(
        timestamp=datetime.fromtimestamp(item["dt"], tz=timezone.utc),
        temperature_min=item["main"]["temp_min"],
        temperature_max=item["main"]["temp_max"],
        condition_description=weather["description"],
        condition_icon=weather["icon"],
        humidity=item["main"]["humidity"],
        wind_speed=(item.get("wind") or {}).get("speed", 0),
        precipitation_amount=(item.get("rain") or {}).get("3h", 0),
    )


def _provider_message(response: httpx.Response) -> str:
    try:
        message = response.json().get("message")
    except (ValueError, AttributeError):
        message = None
    return message or "API request failed"
