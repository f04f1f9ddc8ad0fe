"""Car condition during a race."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from racesim.models.common import Rating


class DrivingStyle(str, Enum):
    """How hard a car is being driven. Set by decision effects."""

    NORMAL = "normal"
    AGGRESSIVE = "aggressive"
    CONSERVATIVE = "conservative"
    EFFICIENT = "efficient"


class CarState(BaseModel):
    """Consumable and damage state of a car.

    All percentages are clamped to 0-100 whenever they are set.
    """

    model_config = ConfigDict(validate_assignment=True)

    tire_wear: Rating = Field(default=100.0, description="Tire condition (100 = fresh)")
    fuel_level: Rating = Field(default=100.0, description="Fuel remaining as % of tank")
    damage: Rating = Field(default=0.0, description="Accumulated damage (0 = none)")
    laps_since_pit: int = Field(default=0, ge=0, description="Laps completed since last stop")
    driving_style: DrivingStyle = Field(default=DrivingStyle.NORMAL)
    last_fuel_used: float = Field(default=0.0, ge=0.0, description="Fuel burned on the last lap")
