"""Services package for the weather dashboard API."""

from .weather_service import WeatherService
from .rate_limiter import RateLimiter, RateLimitStatus
from .forecast import aggregate
from .comparison import compare, validate_cities

__all__ = ["WeatherService", "RateLimiter", "RateLimitStatus", "aggregate", "compare", "validate_cities"]
