"""Simulation engine components."""

from .lap import INVALID_LAP_TIME, LapTimeCalculator
from .race import RaceEngine, RaceResult, RaceSnapshot, RaceState, RaceStatus
from .resources import apply_lap_wear, apply_pit_stop, fuel_consumption_rate, tire_wear_rate
from .standings import CompetitorProgress, compute_standings

__all__ = [
    "INVALID_LAP_TIME",
    "CompetitorProgress",
    "LapTimeCalculator",
    "RaceEngine",
    "RaceResult",
    "RaceSnapshot",
    "RaceState",
    "RaceStatus",
    "apply_lap_wear",
    "apply_pit_stop",
    "compute_standings",
    "fuel_consumption_rate",
    "tire_wear_rate",
]
