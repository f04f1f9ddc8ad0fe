"""Shared value types for race models."""

from typing import Annotated

from pydantic import BeforeValidator

MIN_RATING = 0.0
MAX_RATING = 100.0


def clamp(value: float, low: float = MIN_RATING, high: float = MAX_RATING) -> float:
    """Clamp a value to [low, high]."""
    return max(low, min(high, value))


def _clamp_rating(value: object) -> object:
    # Non-numeric input falls through to pydantic's own float validation
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return clamp(float(value))
    return value


# 0-100 quantity that is clamped rather than rejected when out of range
Rating = Annotated[float, BeforeValidator(_clamp_rating)]
