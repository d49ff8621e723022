"""Main FastAPI application for the weather dashboard service."""

import logging
from contextlib import asynccontextmanager
from http import HTTPStatus
from typing import Optional

from fastapi import FastAPI, Body, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .errors import ConfigurationError, ValidationError, WeatherAPIError
from .middleware import RateLimitMiddleware, SecurityHeadersMiddleware
from .models import (
    CitySearchResponse,
    CompareRequest,
    CompareResponse,
    CurrentWeatherResponse,
    ErrorResponse,
    ForecastResponse,
    HealthResponse,
    Location,
)
from .services import RateLimiter, WeatherService, aggregate, compare
from config.settings import settings
from config.logging import setup_logging


# Setup logging
logger = setup_logging()


# Service instances
weather_service: Optional[WeatherService] = None
rate_limiter = RateLimiter(
    points=settings.rate_limit_points,
    duration=settings.rate_limit_duration_seconds,
    max_keys=settings.rate_limit_max_keys,
)

MIN_SEARCH_QUERY_LENGTH = 2


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan events."""
    global weather_service

    logger.info("Starting Weather Dashboard API service...")

    weather_service = WeatherService()
    if not weather_service.is_configured:
        logger.warning("OPENWEATHER_API_KEY is not set; weather endpoints will return configuration errors")

    yield

    # Cleanup
    logger.info("Shutting down Weather Dashboard API service...")
    if weather_service:
        await weather_service.close()


# Create FastAPI app
app = FastAPI(
    title="Weather Dashboard API",
    description="Current weather, 5-day forecasts and multi-city comparison backed by OpenWeatherMap",
    version=settings.app_version,
    lifespan=lifespan
)

# Middlewares run outermost-last: security headers, CORS, then rate limiting
app.add_middleware(
    RateLimitMiddleware,
    limiter=rate_limiter,
    trust_forwarded_for=settings.trust_forwarded_for,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(SecurityHeadersMiddleware)


def get_weather_service() -> WeatherService:
    """Dependency returning a weather service that holds an API key."""
    if weather_service is None:
        raise ConfigurationError("Weather service is not initialised")
    weather_service.ensure_configured()
    return weather_service


def require_city(city: str) -> str:
    city = city.strip()
    if not city:
        raise ValidationError("City name is required")
    return city


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(version=settings.app_version)


@app.get("/api/weather/current/{city}", response_model=CurrentWeatherResponse, response_model_exclude_none=True)
async def get_current_weather(city: str, weather_svc: WeatherService = Depends(get_weather_service)):
    """
    Get current weather for a city.

    The city is geocoded first and the current conditions are fetched for
    the resolved coordinates.

    Raises:
        ValidationError: If the city name is blank
        NotFoundError: If the geocoder cannot resolve the city
        UpstreamError: If the provider fails
    """
    city = require_city(city)
    logger.info(f"Processing current weather request for city: {city}")

    location = await weather_svc.geocode(city)
    current = await weather_svc.get_current(location)

    return CurrentWeatherResponse(location=Location.from_geo(location), current=current)


@app.get("/api/weather/forecast/{city}", response_model=ForecastResponse, response_model_exclude_none=True)
async def get_forecast(city: str, weather_svc: WeatherService = Depends(get_weather_service)):
    """Get up to five daily forecast summaries for a city."""
    city = require_city(city)
    logger.info(f"Processing forecast request for city: {city}")

    location = await weather_svc.geocode(city)
    samples = await weather_svc.get_forecast_samples(location)

    return ForecastResponse(location=Location.from_geo(location), forecast=aggregate(samples))


@app.post("/api/weather/compare", response_model=CompareResponse, response_model_exclude_none=True)
async def compare_weather(
    payload: Optional[CompareRequest] = Body(default=None),
    weather_svc: WeatherService = Depends(get_weather_service),
):
    """
    Compare current weather across up to five cities.

    Cities are looked up concurrently. A city that fails is reported in its
    own entry and does not fail the request.
    """
    cities = payload.cities if payload else None
    results = await compare(cities, weather_svc.get_city_summary)
    return CompareResponse(comparison=results)


@app.get("/api/cities/search/{query}", response_model=CitySearchResponse, response_model_exclude_none=True)
async def search_cities(query: str, weather_svc: WeatherService = Depends(get_weather_service)):
    """Search cities by (partial) name."""
    if len(query.strip()) < MIN_SEARCH_QUERY_LENGTH:
        raise ValidationError(f"Search query must be at least {MIN_SEARCH_QUERY_LENGTH} characters long")

    matches = await weather_svc.search_cities(query.strip())
    return CitySearchResponse(cities=[Location.from_geo(match) for match in matches], query=query)


def _error_response(status_code: int, error: str, message: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, message=message).model_dump(),
        headers=headers,
    )


@app.exception_handler(WeatherAPIError)
async def weather_api_exception_handler(request: Request, exc: WeatherAPIError):
    """Render domain errors as ``{error, message}``."""
    if exc.status_code >= 500:
        logger.error(f"{exc.error} on {request.url.path}: {exc.message}")
    return _error_response(exc.status_code, exc.error, exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    """Unreadable request bodies are reported as validation errors."""
    logger.info(f"Rejected malformed request to {request.url.path}: {exc.errors()}")
    return _error_response(400, "Validation Error", "Invalid request body")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Unknown routes and other framework-level HTTP errors."""
    if exc.status_code == 404:
        return _error_response(404, "Not Found", "The requested endpoint does not exist")
    return _error_response(
        exc.status_code,
        HTTPStatus(exc.status_code).phrase,
        str(exc.detail),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler."""
    logger.error(f"Unhandled exception: {exc}")
    return _error_response(500, "Internal Server Error", "An unexpected error occurred")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.app_host,
        port=settings.app_port,
        log_level=settings.log_level.lower()
    )
