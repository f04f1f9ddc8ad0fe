"""Race configuration supplied to the engine at initialization."""

from pydantic import BaseModel, Field

from racesim.models import Driver, Track, TrackType


class ResourceConfig(BaseModel):
    """Tire wear and fuel consumption rates."""

    # Tire life in laps by track type (linear wear from 100 to 0 over its life)
    tire_life: dict[TrackType, float] = Field(
        default_factory=lambda: {
            TrackType.SHORT: 100.0,
            TrackType.INTERMEDIATE: 120.0,
            TrackType.SUPERSPEEDWAY: 140.0,
            TrackType.ROAD: 110.0,
        },
        description="Laps a set of tires lasts at baseline wear",
    )
    # Percent of a full tank burned per lap (0.11 / 0.20 / 0.27 / 0.18 gal of an 18 gal tank)
    base_fuel_rate: dict[TrackType, float] = Field(
        default_factory=lambda: {
            TrackType.SHORT: 0.61,
            TrackType.INTERMEDIATE: 1.11,
            TrackType.SUPERSPEEDWAY: 1.5,
            TrackType.ROAD: 1.0,
        },
        description="Baseline fuel use in % of tank per lap",
    )

    aggressive_wear_delta: float = Field(
        default=0.5,
        description="Extra tire wear per lap when driving aggressively",
    )
    conservative_wear_delta: float = Field(
        default=-0.3,
        description="Tire wear change per lap when driving conservatively",
    )
    # Applied before the floor, so on tracks burning under 2% a lap the
    # efficient rate settles at min_fuel_rate
    efficient_fuel_delta: float = Field(
        default=-2.0,
        description="Fuel use change per lap when driving efficiently",
    )

    fuel_skill_max_bonus: float = Field(
        default=0.12,
        ge=0.0,
        le=1.0,
        description="Max fuel saving from consistency skill",
    )
    fuel_confidence_max_bonus: float = Field(
        default=0.08,
        ge=0.0,
        le=1.0,
        description="Max fuel saving from confidence",
    )
    fuel_frustration_max_penalty: float = Field(
        default=0.20,
        ge=0.0,
        le=1.0,
        description="Max extra fuel use from frustration",
    )

    min_tire_wear_rate: float = Field(default=0.05, gt=0, description="Minimum wear per lap")
    min_fuel_rate: float = Field(default=0.05, gt=0, description="Minimum fuel use per lap")


class DecisionConfig(BaseModel):
    """Trigger thresholds for player decisions."""

    min_laps_between: int = Field(default=10, ge=0, description="Minimum laps between decisions")

    pit_window_lap: int = Field(default=50, ge=0, description="Lap from which pit calls are offered")
    pit_tire_threshold: float = Field(default=60.0, description="Tire wear that opens a pit call")
    pit_fuel_threshold: float = Field(default=40.0, description="Fuel level that opens a pit call")

    passing_laps: int = Field(default=10, gt=0, description="Laps stuck behind one car before a passing call")

    frustration_threshold: float = Field(default=70.0, description="Frustration above which to intervene")
    distraction_threshold: float = Field(default=60.0, description="Distraction above which to intervene")

    tire_management_threshold: float = Field(default=50.0, description="Tire wear that starts a management call")
    tire_management_horizon: int = Field(
        default=20,
        ge=0,
        description="Laps to the pit window beyond which tires need managing",
    )

    opening_quiet_laps: int = Field(default=0, ge=0, description="No decisions before this lap")
    closing_quiet_laps: int = Field(default=0, ge=0, description="No decisions within this many laps of the end")


class RaceConfig(BaseModel):
    """Everything the engine needs to build a race."""

    track: Track
    drivers: list[Driver] = Field(..., description="All competitors, player included")
    player_id: str = Field(..., description="Id of the human-controlled driver")
    total_laps: int | None = Field(
        default=None,
        gt=0,
        description="Race distance in laps (defaults to the track's race laps)",
    )

    resources: ResourceConfig = Field(default_factory=ResourceConfig)
    decisions: DecisionConfig = Field(default_factory=DecisionConfig)

    player_only_gate: bool = Field(
        default=True,
        description="While a decision is pending, keep advancing AI cars and freeze only the player",
    )
    seed: int | None = Field(default=None, description="Seed for the decision outcome generator")
    starting_position: int | None = Field(
        default=None,
        ge=1,
        description="Player grid slot (defaults to driver list order)",
    )

    @property
    def race_laps(self) -> int:
        """Effective race distance."""
        return self.total_laps if self.total_laps is not None else self.track.race_laps
