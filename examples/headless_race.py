#!/usr/bin/env python3
"""Headless race example using synthetic data.

Runs a shortened Bristol race with a 12-car field and answers every
decision prompt automatically, so the engine can be exercised without a
user interface.

Usage:
    python examples/headless_race.py [--laps 120] [--seed 42] [--timeout]
"""

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import numpy as np

from racesim.config import RaceConfig
from racesim.models import Driver, DriverSkills, SectionType, Track, TrackSection, TrackType
from racesim.output import ConsoleOutput
from racesim.simulation import RaceEngine

TICK_MS = 250.0


def create_bristol_track() -> Track:
    """Create Bristol Motor Speedway (0.533 mi, 26 degree turns)."""
    return Track(
        id="bristol",
        name="Bristol Motor Speedway",
        track_type=TrackType.SHORT,
        length=0.533,
        base_lap_time=15.4,
        race_laps=500,
        surface_grip=0.95,
        banking=26.0,
        sections=(
            TrackSection(section_type=SectionType.TURN, length=440, banking=26),
            TrackSection(section_type=SectionType.STRAIGHT, length=700),
            TrackSection(section_type=SectionType.TURN, length=440, banking=26),
            TrackSection(section_type=SectionType.STRAIGHT, length=700),
        ),
    )


def create_field(rng: np.random.Generator, size: int = 12) -> list[Driver]:
    """Create the player plus an AI field with spread-out skills."""
    player = Driver(
        id="player",
        name="Kyle Busch",
        number="18",
        skills=DriverSkills(
            racecraft=65, consistency=62, focus=60, composure=55,
            tire_management=60, pit_strategy=58, draft_sense=60,
        ),
    )

    def rating() -> float:
        # AI field centred around 60 with some spread
        return float(np.clip(rng.normal(60, 10), 30, 90))

    drivers = [player]
    for index in range(1, size):
        drivers.append(Driver(
            id=f"ai-{index:02d}",
            name=f"AI Driver {index}",
            number=str(index + 1),
            skills=DriverSkills(
                racecraft=rating(),
                consistency=rating(),
                focus=rating(),
                draft_sense=rating(),
                tire_management=rating(),
            ),
        ))
    return drivers


def main():
    parser = argparse.ArgumentParser(description="Run a headless race")
    parser.add_argument("--laps", type=int, default=120, help="Race distance in laps")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument("--timeout", action="store_true", help="Let every decision time out")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log engine activity")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    rng = np.random.default_rng(args.seed)
    track = create_bristol_track()
    drivers = create_field(rng)

    print("Race Simulation - Headless Example")
    print("=" * 50)
    print(f"Track: {track.name}")
    print(f"Drivers: {len(drivers)}")
    print(f"Laps: {args.laps}")

    engine = RaceEngine()
    engine.initialize(RaceConfig(
        track=track,
        drivers=drivers,
        player_id="player",
        total_laps=args.laps,
        seed=args.seed,
        starting_position=len(drivers) // 2,
    ))
    engine.start()

    last_reported_lap = 0
    while not engine.state.completed:
        decision = engine.advance(TICK_MS)

        snapshot = engine.get_state()
        if snapshot.current_lap >= last_reported_lap + 25:
            last_reported_lap = snapshot.current_lap
            ConsoleOutput.print_standings(snapshot)

        if decision is not None:
            ConsoleOutput.print_decision(decision)
            if args.timeout:
                outcome = engine.expire_decision()
            else:
                # Pick the lowest-risk option with a random tie-break
                options = sorted(decision.options, key=lambda o: (o.risk_level != "low", rng.random()))
                outcome = engine.submit_decision(options[0].id, decision.id)
            ConsoleOutput.print_outcome(outcome)

    ConsoleOutput.print_race_results(engine.results())
    print("\nDone!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
