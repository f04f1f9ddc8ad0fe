"""Race engine: lifecycle, time integration and decision gating."""

import logging
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

import numpy as np
from pydantic import BaseModel, ConfigDict, ValidationError

from racesim.config import RaceConfig
from racesim.decisions import (
    NO_CHOICE,
    Decision,
    DecisionEvaluator,
    DecisionGenerator,
    DecisionOutcome,
    DecisionType,
    EffectBundle,
    OutcomeResult,
    PassingStreak,
)
from racesim.errors import ConfigurationError, InvalidDecisionError, StateViolationError
from racesim.models import CarState, Driver, Track
from racesim.models.common import clamp
from racesim.simulation.lap import INVALID_LAP_TIME, LapTimeCalculator
from racesim.simulation.resources import apply_lap_wear, apply_pit_stop
from racesim.simulation.standings import (
    CompetitorProgress,
    car_ahead,
    compute_standings,
    update_laps_led,
)

logger = logging.getLogger(__name__)

# Lap progress between neighbouring grid slots at the start
GRID_STAGGER = 0.001
# Fraction of a lap treated as "close enough" to the line to complete it
LAP_EPSILON = 1e-9
# Gap left to the target car when a decision moves the player
POSITION_SHIFT_MARGIN = 0.001
MAX_SHIFTED_PROGRESS = 0.999


class RaceStatus(str, Enum):
    """Engine lifecycle states."""

    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


@dataclass
class RaceState:
    """Complete mutable race state, owned by one engine."""

    track: Track
    total_laps: int
    player_id: str
    drivers: dict[str, Driver]
    cars: dict[str, CarState]
    progress: dict[str, CompetitorProgress]
    positions: list[CompetitorProgress]
    status: RaceStatus = RaceStatus.INITIALIZED
    started: bool = False
    current_lap: int = 0
    elapsed_time: float = 0.0
    last_decision_lap: int | None = None
    pending_decision: Decision | None = None
    decision_history: list[DecisionOutcome] = field(default_factory=list)
    xp_earned: dict[str, float] = field(default_factory=dict)
    passing_streak: PassingStreak = field(default_factory=PassingStreak)

    @property
    def paused(self) -> bool:
        return self.status == RaceStatus.PAUSED

    @property
    def completed(self) -> bool:
        return self.status == RaceStatus.COMPLETED


class CompetitorStanding(BaseModel):
    """Read-only copy of one competitor's progress."""

    model_config = ConfigDict(frozen=True)

    driver_id: str
    driver_name: str
    grid_slot: int
    current_lap: int
    lap_progress: float
    position: int
    gap_to_leader: float
    gap_to_next: float
    last_lap_time: float
    current_lap_time: float
    best_lap_time: float
    total_time: float
    laps_led: int
    finished: bool
    finish_time: float | None = None


class RaceSnapshot(BaseModel):
    """Immutable view of the race handed to external collaborators."""

    model_config = ConfigDict(frozen=True)

    status: RaceStatus
    track: Track
    total_laps: int
    current_lap: int
    elapsed_time: float
    player_id: str
    positions: tuple[CompetitorStanding, ...]
    drivers: dict[str, Driver]
    cars: dict[str, CarState]
    paused: bool
    completed: bool
    last_decision_lap: int | None = None
    pending_decision: Decision | None = None
    decision_history: tuple[DecisionOutcome, ...] = ()
    xp_earned: dict[str, float] = {}

    def standing(self, driver_id: str) -> CompetitorStanding | None:
        """Find a competitor's standing by driver id."""
        for standing in self.positions:
            if standing.driver_id == driver_id:
                return standing
        return None

    @property
    def player(self) -> CompetitorStanding | None:
        return self.standing(self.player_id)


@dataclass
class RaceResult:
    """Final classification entry for a driver."""

    driver_id: str
    driver_name: str
    position: int
    start_position: int
    positions_gained: int
    laps_led: int
    fastest_lap: float
    average_lap: float
    total_time: float
    is_player: bool = False
    decisions_made: int = 0
    decisions_successful: int = 0
    xp_earned: dict[str, float] = field(default_factory=dict)


class RaceEngine:
    """Drives one race from initialization to the chequered flag.

    The engine is advanced by an external clock through ``advance`` and
    paused whenever the player has a decision to make. Control calls that
    are invalid for the current state are logged and ignored.
    """

    def __init__(self, rng: np.random.Generator | None = None):
        """Initialize the engine.

        Args:
            rng: Random number generator for decision outcomes (a race's
                ``seed`` takes precedence)
        """
        self.rng = rng if rng is not None else np.random.default_rng()
        self.state: RaceState | None = None
        self.config: RaceConfig | None = None
        self.calculator: LapTimeCalculator | None = None
        self.generator: DecisionGenerator | None = None
        self.evaluator: DecisionEvaluator | None = None

    @property
    def status(self) -> RaceStatus:
        if self.state is None:
            return RaceStatus.UNINITIALIZED
        return self.state.status

    # Control surface

    def initialize(self, config: RaceConfig | Mapping[str, Any]) -> RaceSnapshot:
        """Build a fresh race, replacing any existing one.

        Args:
            config: Race configuration (model or plain mapping)

        Returns:
            Snapshot of the initialized race

        Raises:
            ConfigurationError: If the configuration is invalid. Existing
                state is left untouched.
        """
        try:
            if isinstance(config, RaceConfig):
                config = config.model_copy(deep=True)
            else:
                config = RaceConfig.model_validate(config)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid race configuration: {exc}") from exc

        self._check_config(config)

        rng = np.random.default_rng(config.seed) if config.seed is not None else self.rng
        calculator = LapTimeCalculator(config.track)
        total_laps = config.race_laps

        drivers = {driver.id: driver.model_copy(deep=True) for driver in config.drivers}
        cars = {driver_id: CarState() for driver_id in drivers}

        grid = [driver.id for driver in config.drivers]
        if config.starting_position is not None:
            grid.remove(config.player_id)
            grid.insert(config.starting_position - 1, config.player_id)

        # Stagger the grid so the start order holds before anyone crosses the line
        progress: dict[str, CompetitorProgress] = {}
        for slot, driver_id in enumerate(grid, 1):
            lap_time = calculator.calculate_lap_time(drivers[driver_id], cars[driver_id])
            progress[driver_id] = CompetitorProgress(
                driver_id=driver_id,
                driver_name=drivers[driver_id].name,
                grid_slot=slot,
                lap_progress=(len(grid) - slot) * GRID_STAGGER,
                current_lap_time=lap_time,
            )

        self.config = config
        self.calculator = calculator
        self.generator = DecisionGenerator(config.decisions)
        self.evaluator = DecisionEvaluator(rng=rng)
        self.state = RaceState(
            track=config.track,
            total_laps=total_laps,
            player_id=config.player_id,
            drivers=drivers,
            cars=cars,
            progress=progress,
            positions=compute_standings(list(progress.values())),
        )

        logger.info(
            "Race initialized: %s, %d laps, %d drivers (player %s from P%d)",
            config.track.name,
            total_laps,
            len(drivers),
            config.player_id,
            progress[config.player_id].grid_slot,
        )
        return self.get_state()

    def start(self) -> bool:
        """Start the race (INITIALIZED -> RUNNING).

        Returns:
            True if the race was started
        """
        try:
            self._require("start", RaceStatus.INITIALIZED)
        except StateViolationError as exc:
            logger.warning("%s", exc)
            return False

        state = self.state
        for competitor in state.progress.values():
            competitor.current_lap = 1
        state.current_lap = 1
        state.started = True
        state.status = RaceStatus.RUNNING
        logger.info("Race started")
        return True

    def pause(self) -> bool:
        """Pause the race. Pausing before the start is allowed.

        Returns:
            True if the race is paused after the call
        """
        if self.status == RaceStatus.PAUSED:
            return True
        try:
            self._require("pause", RaceStatus.RUNNING, RaceStatus.INITIALIZED)
        except StateViolationError as exc:
            logger.warning("%s", exc)
            return False

        self.state.status = RaceStatus.PAUSED
        logger.info("Race paused%s", "" if self.state.started else " before start")
        return True

    def resume(self) -> bool:
        """Resume a paused race.

        A race paused before the start returns to INITIALIZED.

        Returns:
            True if the race is no longer paused after the call
        """
        if self.status == RaceStatus.RUNNING:
            return True
        try:
            self._require("resume", RaceStatus.PAUSED)
        except StateViolationError as exc:
            logger.warning("%s", exc)
            return False

        state = self.state
        state.status = RaceStatus.RUNNING if state.started else RaceStatus.INITIALIZED
        logger.info("Race resumed (%s)", state.status.value)
        return True

    def advance(self, elapsed_ms: float) -> Decision | None:
        """Advance simulated time.

        Only a running race moves. While a decision is pending the player
        is frozen; AI cars keep going unless ``player_only_gate`` is off, in
        which case nothing moves.

        Args:
            elapsed_ms: Simulated time to add, in milliseconds

        Returns:
            A decision triggered during this call, or None. Each decision is
            returned exactly once.
        """
        try:
            self._require("advance", RaceStatus.RUNNING)
        except StateViolationError as exc:
            logger.warning("%s", exc)
            return None

        state = self.state
        if elapsed_ms <= 0:
            return None
        if state.pending_decision is not None and not self.config.player_only_gate:
            return None

        dt = elapsed_ms / 1000.0
        tick_start = state.elapsed_time
        triggered, simulated = self._run_tick(dt, tick_start)

        state.elapsed_time = tick_start + simulated
        state.positions = compute_standings(list(state.progress.values()))
        state.current_lap = max(c.current_lap for c in state.progress.values())

        if all(c.finished for c in state.progress.values()):
            state.status = RaceStatus.COMPLETED
            winner = state.positions[0]
            logger.info(
                "Race completed after %.1fs, won by %s",
                state.elapsed_time,
                winner.driver_name,
            )

        return triggered

    def submit_decision(self, option_id: str, decision_id: str | None = None) -> DecisionOutcome:
        """Resolve the pending decision with the chosen option.

        Args:
            option_id: Chosen option id, or NO_CHOICE for a timed-out prompt
            decision_id: Id of the decision being answered (checked if given)

        Returns:
            The outcome, with the effects already applied

        Raises:
            InvalidDecisionError: If there is no pending decision, the id does
                not match or the option is unknown. State is unchanged.
        """
        state = self.state
        if state is None or state.pending_decision is None:
            raise InvalidDecisionError("No decision is pending")

        decision = state.pending_decision
        if decision_id is not None and decision_id != decision.id:
            raise InvalidDecisionError(
                f"Decision {decision_id!r} is not pending (pending: {decision.id!r})"
            )

        player = state.drivers[state.player_id]
        outcome = self.evaluator.evaluate(decision, option_id, player)
        self._apply_effects(outcome.effects)

        state.pending_decision = None
        state.decision_history.append(outcome)
        logger.info(
            "Decision %s resolved: %s -> %s",
            decision.id,
            outcome.option_id,
            outcome.result.value,
        )
        return outcome

    def expire_decision(self) -> DecisionOutcome:
        """Resolve the pending decision as if its timer ran out."""
        return self.submit_decision(NO_CHOICE)

    def get_state(self) -> RaceSnapshot | None:
        """Return an immutable snapshot of the race (None before initialize)."""
        state = self.state
        if state is None:
            return None

        return RaceSnapshot(
            status=state.status,
            track=state.track,
            total_laps=state.total_laps,
            current_lap=state.current_lap,
            elapsed_time=state.elapsed_time,
            player_id=state.player_id,
            positions=tuple(CompetitorStanding(**asdict(c)) for c in state.positions),
            drivers={k: v.model_copy(deep=True) for k, v in state.drivers.items()},
            cars={k: v.model_copy(deep=True) for k, v in state.cars.items()},
            paused=state.paused,
            completed=state.completed,
            last_decision_lap=state.last_decision_lap,
            pending_decision=state.pending_decision,
            decision_history=tuple(state.decision_history),
            xp_earned=dict(state.xp_earned),
        )

    def lap_time(self, driver_id: str) -> float:
        """Current lap time for a driver, or 0.0 if the id is unknown."""
        if self.state is None:
            logger.warning("lap_time requested before the race was initialized")
            return INVALID_LAP_TIME
        return self.calculator.lap_time_for(driver_id, self.state.drivers, self.state.cars)

    def results(self) -> list[RaceResult] | None:
        """Final classification, available once the race is completed."""
        try:
            self._require("report results", RaceStatus.COMPLETED)
        except StateViolationError as exc:
            logger.warning("%s", exc)
            return None

        state = self.state
        made = len(state.decision_history)
        successful = sum(1 for o in state.decision_history if o.result == OutcomeResult.SUCCESS)

        results = []
        for competitor in state.positions:
            is_player = competitor.driver_id == state.player_id
            laps = competitor.laps_completed
            results.append(RaceResult(
                driver_id=competitor.driver_id,
                driver_name=competitor.driver_name,
                position=competitor.position,
                start_position=competitor.grid_slot,
                positions_gained=competitor.grid_slot - competitor.position,
                laps_led=competitor.laps_led,
                fastest_lap=competitor.best_lap_time,
                average_lap=competitor.total_time / laps if laps else 0.0,
                total_time=competitor.finish_time or competitor.total_time,
                is_player=is_player,
                decisions_made=made if is_player else 0,
                decisions_successful=successful if is_player else 0,
                xp_earned=dict(state.xp_earned) if is_player else {},
            ))
        return results

    # Internals

    def _require(self, operation: str, *allowed: RaceStatus) -> None:
        if self.status not in allowed:
            raise StateViolationError(operation, self.status.value)

    @staticmethod
    def _check_config(config: RaceConfig) -> None:
        if not config.drivers:
            raise ConfigurationError("A race needs at least one driver")
        if not config.track.sections:
            raise ConfigurationError(f"Track {config.track.id!r} has no sections")

        seen: set[str] = set()
        for driver in config.drivers:
            if driver.id in seen:
                raise ConfigurationError(f"Duplicate driver id: {driver.id!r}")
            seen.add(driver.id)

        if config.player_id not in seen:
            raise ConfigurationError(f"Player {config.player_id!r} is not in the driver list")
        if config.starting_position is not None and config.starting_position > len(config.drivers):
            raise ConfigurationError(
                f"Starting position {config.starting_position} is beyond the "
                f"{len(config.drivers)}-car grid"
            )

    def _run_tick(self, dt: float, tick_start: float) -> tuple[Decision | None, float]:
        """Move every eligible competitor forward by ``dt`` seconds.

        Line crossings are handled in the order they happen within the tick,
        so standings at each crossing reflect where everyone else is at that
        moment. Time left over after a lap carries into the next lap. Once a
        player lap triggers a decision the player stops for the rest of the
        tick; with the full gate the whole field stops at that instant.

        Returns:
            The triggered decision (or None) and the seconds simulated
        """
        state = self.state
        clock = 0.0
        triggered: Decision | None = None

        while True:
            active = [c for c in state.progress.values() if not c.finished and not self._gated(c)]
            if not active:
                break

            crossing = min(active, key=lambda c: ((1.0 - c.lap_progress) * c.current_lap_time, c.grid_slot))
            to_line = (1.0 - crossing.lap_progress) * crossing.current_lap_time
            step = dt - clock

            if to_line > step + LAP_EPSILON * crossing.current_lap_time:
                self._move(active, step)
                break

            step = max(0.0, min(to_line, step))
            self._move(active, step)
            clock += step

            decision = self._complete_lap(crossing, tick_start + clock)
            if decision is not None:
                triggered = decision
                if not self.config.player_only_gate:
                    return triggered, clock

        return triggered, dt

    def _gated(self, competitor: CompetitorProgress) -> bool:
        state = self.state
        return competitor.driver_id == state.player_id and state.pending_decision is not None

    @staticmethod
    def _move(competitors: list[CompetitorProgress], seconds: float) -> None:
        for competitor in competitors:
            competitor.lap_progress = min(1.0, competitor.lap_progress + seconds / competitor.current_lap_time)
            competitor.lap_elapsed += seconds
            competitor.total_time += seconds

    def _complete_lap(self, competitor: CompetitorProgress, crossing_time: float) -> Decision | None:
        state = self.state
        driver_id = competitor.driver_id
        driver = state.drivers[driver_id]
        car = apply_lap_wear(state.cars[driver_id], driver, state.track, self.config.resources)
        state.cars[driver_id] = car

        lap_time = competitor.lap_elapsed
        competitor.last_lap_time = lap_time
        if competitor.best_lap_time <= 0 or lap_time < competitor.best_lap_time:
            competitor.best_lap_time = lap_time
        competitor.lap_elapsed = 0.0

        if competitor.current_lap >= state.total_laps:
            competitor.finished = True
            competitor.current_lap = state.total_laps
            competitor.lap_progress = 1.0
            competitor.finish_time = crossing_time
        else:
            competitor.current_lap += 1
            competitor.lap_progress = 0.0
            competitor.current_lap_time = self.calculator.calculate_lap_time(driver, car)

        ordered = compute_standings(list(state.progress.values()))
        state.positions = ordered
        update_laps_led(ordered, driver_id)
        state.current_lap = max(state.current_lap, competitor.current_lap)

        logger.debug(
            "%s completed lap %d in %.3fs (P%d, tires %.1f%%, fuel %.1f%%)",
            driver_id,
            competitor.laps_completed,
            lap_time,
            competitor.position,
            car.tire_wear,
            car.fuel_level,
        )

        if driver_id != state.player_id or competitor.finished:
            return None
        return self._check_decision(competitor, ordered)

    def _check_decision(
        self,
        player: CompetitorProgress,
        ordered: list[CompetitorProgress],
    ) -> Decision | None:
        state = self.state
        ahead = car_ahead(ordered, player.driver_id)
        laps_stuck = state.passing_streak.record(
            player.position,
            ahead.driver_id if ahead is not None else None,
        )

        context = self.generator.build_context(
            lap=player.current_lap,
            total_laps=state.total_laps,
            laps_completed=player.laps_completed,
            position=player.position,
            car=state.cars[player.driver_id],
            mental_state=state.drivers[player.driver_id].mental_state,
            gap_to_leader=player.gap_to_leader,
            gap_to_next=player.gap_to_next,
            car_ahead_id=ahead.driver_id if ahead is not None else None,
            laps_stuck=laps_stuck,
        )
        decision = self.generator.generate(context, state.last_decision_lap)
        if decision is None:
            return None

        state.pending_decision = decision
        state.last_decision_lap = player.current_lap
        if decision.decision_type == DecisionType.PASSING:
            state.passing_streak.reset()
        return decision

    def _apply_effects(self, effects: EffectBundle) -> None:
        """Apply an outcome's effects to the player. Computes everything first, then commits."""
        state = self.state
        player_id = state.player_id
        driver = state.drivers[player_id]
        competitor = state.progress[player_id]

        mental = driver.mental_state.model_copy()
        for name, delta in effects.mental_deltas.items():
            setattr(mental, name, getattr(mental, name) + delta)
        new_driver = driver.model_copy(update={"mental_state": mental})

        car = state.cars[player_id]
        if effects.pit_stop:
            car = apply_pit_stop(car)
        else:
            car = car.model_copy()
        car.tire_wear = clamp(car.tire_wear + effects.tire_wear_delta)
        car.fuel_level = clamp(car.fuel_level + effects.fuel_delta)
        car.damage = clamp(car.damage + effects.damage_delta)
        if effects.driving_style is not None:
            car.driving_style = effects.driving_style

        new_progress = self._shifted_progress(competitor, effects.position_delta)
        new_lap_time = self.calculator.calculate_lap_time(new_driver, car)

        state.drivers[player_id] = new_driver
        state.cars[player_id] = car
        competitor.lap_progress = new_progress
        competitor.current_lap_time = new_lap_time
        for skill, xp in effects.xp.items():
            state.xp_earned[skill] = state.xp_earned.get(skill, 0.0) + xp
        state.positions = compute_standings(list(state.progress.values()))

    def _shifted_progress(self, player: CompetitorProgress, position_delta: int) -> float:
        """Lap progress that puts the player just ahead of (or behind) the target car.

        The player never leaves their current lap, so large moves are capped.
        """
        if position_delta == 0 or player.finished:
            return player.lap_progress

        ordered = compute_standings(list(self.state.progress.values()))
        index = next(i for i, c in enumerate(ordered) if c is player)
        target_index = max(0, min(len(ordered) - 1, index - position_delta))
        if target_index == index:
            return player.lap_progress

        target = ordered[target_index]
        offset = target.distance - player.laps_completed
        if position_delta > 0:
            desired = offset + POSITION_SHIFT_MARGIN
        else:
            desired = offset - POSITION_SHIFT_MARGIN
        return max(0.0, min(MAX_SHIFTED_PROGRESS, desired))
