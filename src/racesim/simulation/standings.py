"""Race order and time gaps."""

from dataclasses import dataclass


@dataclass
class CompetitorProgress:
    """Tracks how far a driver has got through the race."""

    driver_id: str
    driver_name: str
    grid_slot: int
    current_lap: int = 0
    lap_progress: float = 0.0
    position: int = 0
    gap_to_leader: float = 0.0
    gap_to_next: float = 0.0
    last_lap_time: float = 0.0
    current_lap_time: float = 0.0
    best_lap_time: float = 0.0
    total_time: float = 0.0
    lap_elapsed: float = 0.0
    laps_led: int = 0
    finished: bool = False
    finish_time: float | None = None

    @property
    def laps_completed(self) -> int:
        """Number of fully completed laps."""
        if self.finished:
            return self.current_lap
        return max(0, self.current_lap - 1)

    @property
    def distance(self) -> float:
        """Race distance covered, in laps."""
        return self.laps_completed + (0.0 if self.finished else self.lap_progress)


def _order_key(progress: CompetitorProgress) -> tuple[float, float, str]:
    finish = progress.finish_time if progress.finish_time is not None else float("inf")
    return (-progress.distance, finish, progress.driver_id)


def compute_standings(competitors: list[CompetitorProgress]) -> list[CompetitorProgress]:
    """Order competitors and assign positions and gaps.

    Competitors are ordered by distance covered (descending). Finished cars
    with equal distance are ordered by finish time, any remaining tie by
    driver id. Gaps are converted from distance to seconds using each
    competitor's current lap time, except between two finished cars, where
    the finish time difference is used.

    Updates the records in place, so calling it twice without progress
    changes yields identical results.

    Args:
        competitors: Progress records for every car in the race

    Returns:
        The same records, sorted by position
    """
    ordered = sorted(competitors, key=_order_key)
    if not ordered:
        return ordered

    leader = ordered[0]
    for index, progress in enumerate(ordered):
        progress.position = index + 1
        if index == 0:
            progress.gap_to_leader = 0.0
            progress.gap_to_next = 0.0
            continue

        ahead = ordered[index - 1]
        progress.gap_to_leader = _gap(leader, progress)
        progress.gap_to_next = _gap(ahead, progress)

    return ordered


def _gap(ahead: CompetitorProgress, behind: CompetitorProgress) -> float:
    # Two finished cars have covered the same distance; the clock separates them
    if _finished_at(ahead) and _finished_at(behind):
        return max(0.0, behind.finish_time - ahead.finish_time)
    return (ahead.distance - behind.distance) * behind.current_lap_time


def _finished_at(progress: CompetitorProgress) -> bool:
    return progress.finished and progress.finish_time is not None


def update_laps_led(ordered: list[CompetitorProgress], driver_id: str) -> bool:
    """Credit ``driver_id`` with a lap led if they lead after completing a lap.

    Returns:
        Whether the lap was credited
    """
    if ordered and ordered[0].driver_id == driver_id:
        ordered[0].laps_led += 1
        return True
    return False


def car_ahead(ordered: list[CompetitorProgress], driver_id: str) -> CompetitorProgress | None:
    """Return the competitor directly ahead of ``driver_id``, if any."""
    for index, progress in enumerate(ordered):
        if progress.driver_id == driver_id:
            return ordered[index - 1] if index > 0 else None
    return None
