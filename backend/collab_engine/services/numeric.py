"""
Rounding helpers.

Dashboard numbers are rounded half away from zero for positive values
(2.5 -> 3), not with Python's banker's rounding.
"""
import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, .5 rounds up."""
    return int(math.floor(value + 0.5))


def round_tenth(value: float) -> float:
    """Round to one decimal place, .05 rounds up."""
    return math.floor(value * 10 + 0.5) / 10


def percent(part: float, whole: float) -> int:
    """Whole-number percentage of part/whole, 0 when whole is 0."""
    if not whole:
        return 0
    return round_half_up(part / whole * 100)


def clamp(value: float, low: float = 0, high: float = 100) -> float:
    return max(low, min(high, value))
