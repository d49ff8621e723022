"""Collapse the 3-hour forecast feed into daily summaries."""

from typing import Iterable, List

from ..models import DailySummary, ForecastSample, TemperatureRange
from .units import ms_to_kmh, round_half_up, round_precipitation


MAX_FORECAST_DAYS = 5

# locale independent weekday names, Monday first to match date.weekday()
WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def summarize_sample(sample: ForecastSample) -> DailySummary:
    """Build the daily summary represented by a single sample."""
    day = sample.timestamp.date()
    return DailySummary(
        calendar_date=day,
        weekday_name=WEEKDAY_NAMES[day.weekday()],
        temperature=TemperatureRange(
            min=round_half_up(sample.temperature_min),
            max=round_half_up(sample.temperature_max),
        ),
        description=sample.condition_description,
        icon=sample.condition_icon,
        humidity=sample.humidity,
        wind_speed=ms_to_kmh(sample.wind_speed),
        precipitation=round_precipitation(sample.precipitation_amount),
    )


def aggregate(samples: Iterable[ForecastSample], max_days: int = MAX_FORECAST_DAYS) -> List[DailySummary]:
    """
    Pick one representative sample per calendar day.

    Samples are scanned in the order given. The first sample seen for a date
    stands for the whole day, including its embedded min/max range. The
    calendar date comes from the sample's own timestamp, so no server-local
    timezone is involved. Scanning stops once ``max_days`` dates are captured.

    Args:
        samples: Forecast samples in feed order

    Returns:
        At most ``max_days`` summaries in order of first appearance
    """
    summaries: List[DailySummary] = []
    seen = set()

    for sample in samples:
        if len(summaries) >= max_days:
            break
        day = sample.timestamp.date()
        if day in seen:
            continue
        seen.add(day)
        summaries.append(summarize_sample(sample))

    return summaries
