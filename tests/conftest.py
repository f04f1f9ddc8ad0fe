"""Shared fixtures for race simulation tests."""

import pytest

from racesim.config import DecisionConfig, RaceConfig
from racesim.models import (
    CarState,
    Driver,
    DriverSkills,
    MentalState,
    SectionType,
    Track,
    TrackSection,
    TrackType,
)
from racesim.simulation import RaceEngine


class FixedRng:
    """Stands in for a numpy Generator, returning preset draws in order."""

    def __init__(self, *values: float):
        self.values = list(values)
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        return self.values.pop(0)


class ExplodingRng:
    """Fails the test if any draw is taken."""

    def random(self) -> float:
        raise AssertionError("no draw expected")


def make_driver(driver_id: str, name: str | None = None, skill: float = 60.0, **overrides) -> Driver:
    """Driver with every skill at ``skill`` unless overridden."""
    skills = {skill_name: skill for skill_name in DriverSkills.model_fields}
    skills.update(overrides)
    return Driver(id=driver_id, name=name or driver_id.title(), skills=DriverSkills(**skills))


@pytest.fixture
def bristol() -> Track:
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


@pytest.fixture
def drivers() -> list[Driver]:
    return [
        make_driver("player", "Kyle Busch", skill=60.0),
        make_driver("ai-1", "Denny Hamlin", skill=70.0),
        make_driver("ai-2", "Chase Elliott", skill=55.0),
    ]


@pytest.fixture
def fresh_car() -> CarState:
    return CarState()


@pytest.fixture
def neutral_mental() -> MentalState:
    return MentalState()


@pytest.fixture
def make_config(bristol, drivers):
    """Factory for race configs with sensible test defaults."""

    def _make(**overrides) -> RaceConfig:
        values = {
            "track": bristol,
            "drivers": drivers,
            "player_id": "player",
            "total_laps": 20,
            "seed": 7,
        }
        values.update(overrides)
        return RaceConfig(**values)

    return _make


@pytest.fixture
def always_pit() -> DecisionConfig:
    """Pit calls fire on every eligible lap (subject to spacing)."""
    return DecisionConfig(pit_window_lap=0, pit_tire_threshold=101.0)


@pytest.fixture
def engine(make_config) -> RaceEngine:
    engine = RaceEngine()
    engine.initialize(make_config())
    return engine
