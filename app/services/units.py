"""Rounding and unit conversion helpers for display values."""

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards positive infinity."""
    return int(math.floor(value + 0.5))


def ms_to_kmh(speed: float) -> int:
    return round_half_up((speed or 0) * 3.6)


def round_precipitation(amount: float) -> float:
    # two decimals, same half-up rule as the temperatures
    return math.floor((amount or 0) * 100 + 0.5) / 100
