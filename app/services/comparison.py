"""Concurrent multi-city weather comparison."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, List

from ..errors import ValidationError, WeatherAPIError
from ..models import ComparisonFailure, ComparisonResult, ComparisonSuccess


logger = logging.getLogger(__name__)

MAX_COMPARISON_CITIES = 5
COMPARISON_FAILED_MESSAGE = "Failed to fetch weather data"

CityLookup = Callable[[str], Awaitable[ComparisonSuccess]]


def validate_cities(cities: Any) -> List[str]:
    """
    Check the ``cities`` value of a comparison request.

    Raises:
        ValidationError: If cities is missing, not a list of strings, empty,
            or longer than MAX_COMPARISON_CITIES
    """
    if not isinstance(cities, list) or len(cities) == 0:
        raise ValidationError("Cities array is required")
    if len(cities) > MAX_COMPARISON_CITIES:
        raise ValidationError(f"Maximum {MAX_COMPARISON_CITIES} cities allowed for comparison")
    if not all(isinstance(city, str) for city in cities):
        raise ValidationError("Cities must be strings")
    return cities


async def _lookup_isolated(city: str, lookup: CityLookup) -> ComparisonResult:
    try:
        return await lookup(city)
    except WeatherAPIError as e:
        logger.warning(f"Comparison lookup failed for {city}: {e.message}")
        return ComparisonFailure(city=city, error=f"{COMPARISON_FAILED_MESSAGE}: {e.message}")
    except Exception as e:
        logger.error(f"Unexpected error in comparison lookup for {city}: {e}")
        return ComparisonFailure(city=city, error=COMPARISON_FAILED_MESSAGE)


async def compare(cities: Any, lookup: CityLookup) -> List[ComparisonResult]:
    """
    Look up every city concurrently and return one entry per input city.

    A lookup failure becomes a ComparisonFailure at that city's position and
    never cancels or fails the other lookups. The result order always matches
    the input order, whatever order the lookups finish in.

    Args:
        cities: Value of the request's ``cities`` field
        lookup: Coroutine function resolving one city to a ComparisonSuccess

    Returns:
        List of results with the same length and order as ``cities``

    Raises:
        ValidationError: If ``cities`` is not acceptable; raised before any lookup starts
    """
    cities = validate_cities(cities)
    logger.info(f"Comparing weather for {len(cities)} cities")

    results = await asyncio.gather(*(_lookup_isolated(city, lookup) for city in cities))
    return list(results)
