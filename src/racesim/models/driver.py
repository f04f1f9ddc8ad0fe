"""Driver model with skills and mental state."""

from pydantic import BaseModel, ConfigDict, Field

from racesim.models.common import Rating


class DriverSkills(BaseModel):
    """Named driver skills on a 0-100 scale."""

    model_config = ConfigDict(validate_assignment=True)

    racecraft: Rating = Field(default=50.0, description="Overall racing ability")
    consistency: Rating = Field(default=50.0, description="Ability to hold a steady pace")
    aggression: Rating = Field(default=50.0, description="Willingness to take risks")
    focus: Rating = Field(default=50.0, description="Mental sharpness")
    stamina: Rating = Field(default=50.0, description="Physical endurance")
    composure: Rating = Field(default=50.0, description="Emotional control under pressure")
    draft_sense: Rating = Field(default=50.0, description="Reading aerodynamic situations")
    tire_management: Rating = Field(default=50.0, description="Preserving tire life")
    fuel_management: Rating = Field(default=50.0, description="Efficient fuel usage")
    pit_strategy: Rating = Field(default=50.0, description="Understanding pit timing")

    def get(self, name: str, default: float = 50.0) -> float:
        """Look up a skill by name, falling back to ``default``."""
        if name in type(self).model_fields:
            return getattr(self, name)
        return default

    def as_dict(self) -> dict[str, float]:
        """Return all skills as a name -> value mapping."""
        return self.model_dump()


class MentalState(BaseModel):
    """Transient psychological state of a driver."""

    model_config = ConfigDict(validate_assignment=True)

    confidence: Rating = Field(default=50.0, description="Self-belief")
    focus: Rating = Field(default=70.0, description="Concentration level")
    frustration: Rating = Field(default=0.0, description="Annoyance and anger")
    distraction: Rating = Field(default=10.0, description="Mental noise")

    def speed_modifier(self) -> float:
        """Pace multiplier from mental state (0.92 to 1.08, >1 = faster).

        Confidence moves pace by up to 5% either side of neutral (50),
        frustration above 50 costs up to 8% and distraction up to 3%.
        """
        modifier = 1.0
        modifier += (self.confidence - 50.0) / 50.0 * 0.05
        modifier -= max(0.0, (self.frustration - 50.0) / 50.0) * 0.08
        modifier -= self.distraction / 100.0 * 0.03
        return max(0.92, min(1.08, modifier))


class Driver(BaseModel):
    """Represents a driver (player or AI)."""

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(..., description="Unique driver identifier")
    name: str = Field(..., description="Display name")
    number: str = Field(default="", description="Car number")

    skills: DriverSkills = Field(default_factory=DriverSkills)
    mental_state: MentalState = Field(default_factory=MentalState)
