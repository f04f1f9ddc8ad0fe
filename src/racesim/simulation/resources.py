"""Per-lap tire wear and fuel consumption.

Everything here is a pure function of its inputs. Out-of-range percentages
are clamped, never rejected.
"""

from racesim.config import ResourceConfig
from racesim.models import CarState, Driver, DrivingStyle, MentalState, Track
from racesim.models.common import clamp

DEFAULT_RESOURCES = ResourceConfig()


def tire_wear_rate(
    track: Track,
    style: DrivingStyle = DrivingStyle.NORMAL,
    tire_management: float = 50.0,
    config: ResourceConfig | None = None,
) -> float:
    """Tire wear consumed in one lap, in percentage points.

    Args:
        track: Circuit being raced
        style: Current driving style
        tire_management: Driver tire management skill (0-100)
        config: Resource rates (defaults if None)

    Returns:
        Wear decrement for the lap (always positive)
    """
    config = config or DEFAULT_RESOURCES
    tire_life = config.tire_life.get(track.track_type, 100.0)

    wear = 100.0 / tire_life

    # Low-grip surfaces make the car slide and scrub the tires
    wear *= 2.0 - track.surface_grip

    # Skill 50 is neutral, 100 halves wear, 0 adds 50%
    wear *= 1.0 + (50.0 - clamp(tire_management)) / 100.0

    if style == DrivingStyle.AGGRESSIVE:
        wear += config.aggressive_wear_delta
    elif style == DrivingStyle.CONSERVATIVE:
        wear += config.conservative_wear_delta

    return max(config.min_tire_wear_rate, wear)


def fuel_consumption_rate(
    track: Track,
    style: DrivingStyle = DrivingStyle.NORMAL,
    consistency: float = 50.0,
    mental_state: MentalState | None = None,
    config: ResourceConfig | None = None,
) -> float:
    """Fuel burned in one lap, as a percentage of a full tank.

    Smooth (consistent, confident) drivers use less fuel; frustrated
    drivers use more.

    Args:
        track: Circuit being raced
        style: Current driving style
        consistency: Driver consistency skill (0-100)
        mental_state: Driver mental state (neutral if None)
        config: Resource rates (defaults if None)

    Returns:
        Fuel decrement for the lap (always positive)
    """
    config = config or DEFAULT_RESOURCES
    fuel = config.base_fuel_rate.get(track.track_type, 1.0)

    fuel *= 1.0 - clamp(consistency) / 100.0 * config.fuel_skill_max_bonus

    if mental_state is not None:
        fuel *= 1.0 + mental_state.frustration / 100.0 * config.fuel_frustration_max_penalty
        fuel *= 1.0 - mental_state.confidence / 100.0 * config.fuel_confidence_max_bonus

    if style == DrivingStyle.EFFICIENT:
        fuel += config.efficient_fuel_delta

    return max(config.min_fuel_rate, fuel)


def apply_lap_wear(
    car: CarState,
    driver: Driver,
    track: Track,
    config: ResourceConfig | None = None,
) -> CarState:
    """Return the car state after one completed lap.

    Args:
        car: Car state at the start of the lap
        driver: Driver of the car
        track: Circuit being raced
        config: Resource rates (defaults if None)

    Returns:
        New CarState; the input is not modified
    """
    wear = tire_wear_rate(
        track,
        car.driving_style,
        driver.skills.tire_management,
        config,
    )
    fuel = fuel_consumption_rate(
        track,
        car.driving_style,
        driver.skills.consistency,
        driver.mental_state,
        config,
    )

    return car.model_copy(update={
        "tire_wear": clamp(car.tire_wear - wear),
        "fuel_level": clamp(car.fuel_level - fuel),
        "laps_since_pit": car.laps_since_pit + 1,
        "last_fuel_used": fuel,
    })


def apply_pit_stop(car: CarState) -> CarState:
    """Return the car state after a full service stop (tires and fuel)."""
    return car.model_copy(update={
        "tire_wear": 100.0,
        "fuel_level": 100.0,
        "laps_since_pit": 0,
    })
