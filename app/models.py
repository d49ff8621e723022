"""Data models for the weather dashboard API."""

from datetime import date, datetime, timezone
from typing import Any, List, Optional, Union
from pydantic import BaseModel, Field, ConfigDict, field_serializer


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GeoLocation(BaseModel):
    """A geocoder match."""

    name: str
    country: str
    state: Optional[str] = None
    lat: float
    lon: float


class Location(BaseModel):
    """Location block returned to API callers."""

    name: str
    country: str
    state: Optional[str] = None
    coordinates: List[float]

    @classmethod
    def from_geo(cls, geo: GeoLocation) -> "Location":
        return cls(name=geo.name, country=geo.country, state=geo.state, coordinates=[geo.lat, geo.lon])


class CurrentConditions(BaseModel):
    """Current conditions, already rounded and converted for display."""

    model_config = ConfigDict(populate_by_name=True)

    temperature: int
    feels_like: int = Field(alias="feelsLike")
    humidity: int
    pressure: int
    visibility: int
    description: str
    icon: str
    wind_speed: int = Field(alias="windSpeed")
    wind_direction: int = Field(alias="windDirection")
    cloudiness: int


class ForecastSample(BaseModel):
    """One 3-hour data point from the upstream forecast feed."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    temperature_min: float
    temperature_max: float
    condition_description: str
    condition_icon: str
    humidity: int
    wind_speed: float
    precipitation_amount: float = 0.0


class TemperatureRange(BaseModel):
    min: int
    max: int


class DailySummary(BaseModel):
    """One aggregated forecast day."""

    model_config = ConfigDict(populate_by_name=True)

    calendar_date: date = Field(alias="date")
    weekday_name: str = Field(alias="dayName")
    temperature: TemperatureRange
    description: str
    icon: str
    humidity: int
    wind_speed: int = Field(alias="windSpeed")
    precipitation: float


class ComparisonSuccess(BaseModel):
    """Comparison entry for a city that resolved and returned data."""

    model_config = ConfigDict(populate_by_name=True)

    city: str
    country: str
    temperature: int
    description: str
    icon: str
    humidity: int
    wind_speed: int = Field(alias="windSpeed")


class ComparisonFailure(BaseModel):
    """Comparison entry for a city whose lookup failed."""

    city: str
    error: str


ComparisonResult = Union[ComparisonSuccess, ComparisonFailure]


class TimestampedResponse(BaseModel):
    timestamp: datetime = Field(default_factory=utcnow)

    @field_serializer('timestamp')
    def serialize_timestamp(self, value: datetime) -> str:
        return value.isoformat().replace("+00:00", "Z")


class HealthResponse(TimestampedResponse):
    status: str = "healthy"
    version: str


class CurrentWeatherResponse(TimestampedResponse):
    location: Location
    current: CurrentConditions


class ForecastResponse(TimestampedResponse):
    location: Location
    forecast: List[DailySummary]


class CompareRequest(BaseModel):
    """Body of the comparison endpoint. ``cities`` is checked by the orchestrator."""

    cities: Optional[Any] = None


class CompareResponse(TimestampedResponse):
    comparison: List[ComparisonResult]


class CitySearchResponse(TimestampedResponse):
    cities: List[Location]
    query: str


class ErrorResponse(BaseModel):
    """Error response model."""

    error: str
    message: str
