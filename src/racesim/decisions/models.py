"""Decision prompts, options and outcomes."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from racesim.models import DrivingStyle, MentalState

# Option id accepted when a decision times out without an answer
NO_CHOICE = "no-choice"


class DecisionType(str, Enum):
    """Decision categories, in trigger priority order."""

    PIT_STRATEGY = "pit-strategy"
    PASSING = "passing"
    MENTAL_STATE = "mental-state"
    TIRE_MANAGEMENT = "tire-management"


class RiskLevel(str, Enum):
    """Risk attached to an option."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class OutcomeResult(str, Enum):
    """How a chosen option played out."""

    SUCCESS = "success"
    NEUTRAL = "neutral"
    FAILURE = "failure"


class DecisionOption(BaseModel):
    """One choice offered to the player."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Option identifier (e.g., 'pit-full')")
    label: str = Field(..., description="Short label for prompts")
    description: str = Field(default="", description="Longer explanation")
    risk_level: RiskLevel = Field(default=RiskLevel.MEDIUM)
    primary_skill: str = Field(..., description="Skill that drives the success chance")
    secondary_skill: str | None = Field(default=None, description="Skill that also earns XP")
    neutral_band: float = Field(
        default=0.0,
        ge=0.0,
        le=100.0,
        description="Width of the neutral band above the success chance (low risk only)",
    )


class TriggerContext(BaseModel):
    """Snapshot of the player's race situation when a decision fires."""

    model_config = ConfigDict(frozen=True)

    lap: int
    total_laps: int
    position: int
    laps_to_go: int
    gap_to_leader: float = 0.0
    gap_to_next: float = 0.0
    tire_wear: float
    fuel_level: float
    laps_since_pit: int = 0
    mental_state: MentalState = Field(default_factory=MentalState)
    car_ahead_id: str | None = None
    laps_stuck: int = 0
    laps_to_pit_window: int = 0


class Decision(BaseModel):
    """A timed strategic choice presented to the player."""

    model_config = ConfigDict(frozen=True)

    id: str
    decision_type: DecisionType
    prompt: str
    context: TriggerContext
    time_limit: float = Field(..., gt=0, description="Seconds the player has to answer")
    options: tuple[DecisionOption, ...]
    default_option: str = Field(..., description="Option used when time runs out")

    def option(self, option_id: str) -> DecisionOption | None:
        """Find an option by id."""
        for option in self.options:
            if option.id == option_id:
                return option
        return None

    @property
    def option_ids(self) -> list[str]:
        """Ids of all options, in display order."""
        return [option.id for option in self.options]


class EffectBundle(BaseModel):
    """State changes produced by a decision outcome."""

    model_config = ConfigDict(frozen=True)

    position_delta: int = Field(default=0, description="Positions gained (+) or lost (-)")
    mental_deltas: dict[str, float] = Field(default_factory=dict)
    tire_wear_delta: float = 0.0
    fuel_delta: float = 0.0
    damage_delta: float = 0.0
    pit_stop: bool = Field(default=False, description="Refill fuel, fit fresh tires")
    driving_style: DrivingStyle | None = Field(default=None, description="New driving style, if changed")
    xp: dict[str, float] = Field(default_factory=dict, description="Skill XP earned")

    @property
    def is_empty(self) -> bool:
        """Whether applying this bundle changes nothing."""
        return self == EffectBundle()


class DecisionOutcome(BaseModel):
    """Result of resolving a decision."""

    model_config = ConfigDict(frozen=True)

    decision_id: str
    decision_type: DecisionType
    option_id: str
    result: OutcomeResult
    success_chance: float
    roll: float | None = Field(default=None, description="Draw on a 0-100 scale (None when timed out)")
    effects: EffectBundle
    summary: str
    timed_out: bool = False
