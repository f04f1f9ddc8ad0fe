"""Decides when the player is asked to make a call."""

import logging
from dataclasses import dataclass

from racesim.config import DecisionConfig
from racesim.decisions.library import DEFAULT_TEMPLATES, DecisionTemplate
from racesim.decisions.models import Decision, TriggerContext
from racesim.models import CarState, MentalState

logger = logging.getLogger(__name__)


@dataclass
class PassingStreak:
    """Consecutive completed laps spent in one position behind one car."""

    position: int | None = None
    car_ahead_id: str | None = None
    laps: int = 0

    def record(self, position: int, car_ahead_id: str | None) -> int:
        """Record a completed lap and return the current streak length.

        The leader has nobody to pass, so leading resets the streak.
        """
        if car_ahead_id is None:
            self.reset()
            return 0

        if position == self.position and car_ahead_id == self.car_ahead_id:
            self.laps += 1
        else:
            self.position = position
            self.car_ahead_id = car_ahead_id
            self.laps = 1
        return self.laps

    def reset(self) -> None:
        self.position = None
        self.car_ahead_id = None
        self.laps = 0


def laps_to_pit_window(lap: int, total_laps: int, pit_window_lap: int) -> int:
    """Laps until the pit window opens.

    Once the window is open the next stop can come any time, so the rest
    of the race distance is used instead.
    """
    if lap < pit_window_lap:
        return pit_window_lap - lap
    return max(0, total_laps - lap)


class DecisionGenerator:
    """Evaluates decision templates after each completed player lap."""

    def __init__(
        self,
        config: DecisionConfig | None = None,
        templates: tuple[DecisionTemplate, ...] = DEFAULT_TEMPLATES,
    ):
        """Initialize the generator.

        Args:
            config: Trigger thresholds and spacing
            templates: Decision templates in priority order
        """
        self.config = config or DecisionConfig()
        self.templates = templates

    def build_context(
        self,
        lap: int,
        total_laps: int,
        laps_completed: int,
        position: int,
        car: CarState,
        mental_state: MentalState,
        gap_to_leader: float = 0.0,
        gap_to_next: float = 0.0,
        car_ahead_id: str | None = None,
        laps_stuck: int = 0,
    ) -> TriggerContext:
        """Snapshot the player's situation for trigger predicates and prompts.

        Args:
            lap: Lap the player is now running
            total_laps: Race distance
            laps_completed: Laps the player has finished
            position: Current race position
            car: Player car state
            mental_state: Player mental state
            gap_to_leader: Seconds behind the leader
            gap_to_next: Seconds behind the car ahead
            car_ahead_id: Driver directly ahead (None when leading)
            laps_stuck: Passing streak length

        Returns:
            Frozen TriggerContext (copies, safe to hand out)
        """
        return TriggerContext(
            lap=lap,
            total_laps=total_laps,
            position=position,
            laps_to_go=max(0, total_laps - laps_completed),
            gap_to_leader=gap_to_leader,
            gap_to_next=gap_to_next,
            tire_wear=car.tire_wear,
            fuel_level=car.fuel_level,
            laps_since_pit=car.laps_since_pit,
            mental_state=mental_state.model_copy(),
            car_ahead_id=car_ahead_id,
            laps_stuck=laps_stuck,
            laps_to_pit_window=laps_to_pit_window(lap, total_laps, self.config.pit_window_lap),
        )

    def can_trigger(self, context: TriggerContext, last_decision_lap: int | None) -> bool:
        """Whether spacing and quiet windows allow a decision on this lap."""
        config = self.config
        if last_decision_lap is not None and context.lap - last_decision_lap < config.min_laps_between:
            return False
        if context.lap < config.opening_quiet_laps:
            return False
        if context.laps_to_go < config.closing_quiet_laps:
            return False
        return True

    def generate(self, context: TriggerContext, last_decision_lap: int | None) -> Decision | None:
        """Return the highest-priority decision that applies, if any.

        Args:
            context: Player situation after a completed lap
            last_decision_lap: Lap of the previous decision (None if none yet)

        Returns:
            A new Decision, or None when nothing triggers
        """
        if not self.can_trigger(context, last_decision_lap):
            return None

        for template in self.templates:
            if template.matches(context, self.config):
                decision = template.build(context)
                logger.info(
                    "Decision %s triggered on lap %d (P%d)",
                    decision.id,
                    context.lap,
                    context.position,
                )
                return decision
        return None
