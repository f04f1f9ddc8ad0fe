"""Lap time calculation engine."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from racesim.errors import InvalidReferenceError
from racesim.models import CarState, Driver, DriverSkills, DrivingStyle, SectionType, Track

logger = logging.getLogger(__name__)

# Returned instead of a lap time for drivers that are not in the race
INVALID_LAP_TIME = 0.0

# Skill weights per section type used for the driver's skill composite
SECTION_SKILL_WEIGHTS: dict[SectionType, dict[str, float]] = {
    SectionType.TURN: {"racecraft": 0.5, "focus": 0.3, "consistency": 0.2},
    SectionType.STRAIGHT: {"consistency": 0.5, "racecraft": 0.3, "draft_sense": 0.2},
    SectionType.TRANSITION: {"racecraft": 0.4, "consistency": 0.4, "focus": 0.2},
}

# Pace multipliers per driving style (<1 = faster)
STYLE_PACE: dict[DrivingStyle, float] = {
    DrivingStyle.NORMAL: 1.0,
    DrivingStyle.AGGRESSIVE: 0.995,
    DrivingStyle.CONSERVATIVE: 1.008,
    DrivingStyle.EFFICIENT: 1.005,
}

SKILL_SPREAD = 0.03  # +/-3% of base lap time between skill 0 and skill 100
LOW_FUEL_THRESHOLD = 10.0
LOW_FUEL_MAX_PENALTY = 0.02
DAMAGE_MAX_PENALTY = 0.05
MIN_LAP_FRACTION = 0.5


@dataclass
class LapTimeBreakdown:
    """Contributions to a single lap time, in seconds."""

    base_time: float
    skill_delta: float
    tire_delta: float
    fuel_delta: float
    damage_delta: float
    style_factor: float
    mental_factor: float
    total_time: float


def tire_penalty(tire_wear: float) -> float:
    """Fractional lap time penalty from worn tires.

    Fresh tires (80%+) cost nothing, moderate wear costs up to 4% and
    below 50% the penalty grows steeply. Never decreases as wear drops.
    """
    wear = max(0.0, min(100.0, tire_wear))
    if wear >= 80.0:
        return 0.0
    if wear >= 50.0:
        return (1.0 - wear / 100.0) * 0.08
    return (1.0 - wear / 100.0) ** 1.5 * 0.20


def fuel_penalty(fuel_level: float) -> float:
    """Fractional lap time penalty when running on fumes."""
    fuel = max(0.0, min(100.0, fuel_level))
    if fuel >= LOW_FUEL_THRESHOLD:
        return 0.0
    return (LOW_FUEL_THRESHOLD - fuel) / LOW_FUEL_THRESHOLD * LOW_FUEL_MAX_PENALTY


class LapTimeCalculator:
    """Deterministic lap times from track, driver skill and car condition."""

    def __init__(self, track: Track):
        """Initialize the calculator for one track.

        Args:
            track: Circuit being raced
        """
        self.track = track
        self._weights = self._composite_weights(track)

    @staticmethod
    def _composite_weights(track: Track) -> dict[str, float]:
        """Blend per-section skill weights by each section type's share of the lap."""
        weights: dict[str, float] = {}
        for section_type, skill_weights in SECTION_SKILL_WEIGHTS.items():
            share = track.share_of(section_type)
            if share <= 0:
                continue
            for skill, weight in skill_weights.items():
                weights[skill] = weights.get(skill, 0.0) + weight * share

        if not weights:
            # No sections to weigh, fall back to racecraft alone
            return {"racecraft": 1.0}
        return weights

    def skill_composite(self, skills: DriverSkills) -> float:
        """Weighted average of the skills that matter on this track (0-100)."""
        total_weight = sum(self._weights.values())
        score = sum(skills.get(name) * weight for name, weight in self._weights.items())
        return score / total_weight

    def calculate_lap_time(self, driver: Driver, car: CarState) -> float:
        """Calculate the current lap time for a driver.

        Args:
            driver: Driver at the wheel
            car: Current car condition

        Returns:
            Lap time in seconds (always positive)
        """
        return self.breakdown(driver, car).total_time

    def breakdown(self, driver: Driver, car: CarState) -> LapTimeBreakdown:
        """Calculate a lap time and report each contribution.

        Args:
            driver: Driver at the wheel
            car: Current car condition

        Returns:
            LapTimeBreakdown with the final time in ``total_time``
        """
        base_time = self.track.base_lap_time

        # Skill 50 is the reference driver the base time was measured for
        composite = self.skill_composite(driver.skills)
        skill_delta = (50.0 - composite) / 50.0 * SKILL_SPREAD * base_time

        tire_delta = tire_penalty(car.tire_wear) * base_time
        fuel_delta = fuel_penalty(car.fuel_level) * base_time
        damage_delta = car.damage / 100.0 * DAMAGE_MAX_PENALTY * base_time

        style_factor = STYLE_PACE.get(car.driving_style, 1.0)
        mental_factor = driver.mental_state.speed_modifier()

        lap_time = base_time + skill_delta + tire_delta + fuel_delta + damage_delta
        lap_time *= style_factor
        lap_time /= mental_factor

        total_time = max(base_time * MIN_LAP_FRACTION, lap_time)

        return LapTimeBreakdown(
            base_time=base_time,
            skill_delta=skill_delta,
            tire_delta=tire_delta,
            fuel_delta=fuel_delta,
            damage_delta=damage_delta,
            style_factor=style_factor,
            mental_factor=mental_factor,
            total_time=total_time,
        )

    def lap_time_for(
        self,
        driver_id: str,
        drivers: Mapping[str, Driver],
        cars: Mapping[str, CarState],
    ) -> float:
        """Calculate the lap time for a driver looked up by id.

        Args:
            driver_id: Driver to look up
            drivers: Drivers by id
            cars: Car states by driver id

        Returns:
            Lap time in seconds, or INVALID_LAP_TIME (0.0) for an unknown id
        """
        try:
            driver, car = self._lookup(driver_id, drivers, cars)
        except InvalidReferenceError as exc:
            logger.warning("%s", exc)
            return INVALID_LAP_TIME
        return self.calculate_lap_time(driver, car)

    @staticmethod
    def _lookup(
        driver_id: str,
        drivers: Mapping[str, Driver],
        cars: Mapping[str, CarState],
    ) -> tuple[Driver, CarState]:
        if driver_id not in drivers or driver_id not in cars:
            raise InvalidReferenceError(driver_id)
        return drivers[driver_id], cars[driver_id]
