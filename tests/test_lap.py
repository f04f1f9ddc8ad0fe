"""Tests for the lap time calculator."""

import logging

import pytest

from racesim.models import CarState, Driver, DriverSkills, DrivingStyle, MentalState
from racesim.simulation.lap import (
    INVALID_LAP_TIME,
    LapTimeCalculator,
    fuel_penalty,
    tire_penalty,
)


def average_driver() -> Driver:
    return Driver(id="avg", name="Average")


class TestPenalties:
    """Test tire and fuel penalty curves."""

    def test_fresh_tires_cost_nothing(self):
        assert tire_penalty(100.0) == 0.0
        assert tire_penalty(80.0) == 0.0

    def test_tire_penalty_monotone(self):
        wear_levels = [100, 90, 80, 79, 65, 50, 49, 30, 10, 0]
        penalties = [tire_penalty(w) for w in wear_levels]
        assert penalties == sorted(penalties)

    def test_tire_penalty_bands(self):
        assert tire_penalty(60.0) == pytest.approx(0.4 * 0.08)
        assert tire_penalty(36.0) == pytest.approx(0.64 ** 1.5 * 0.20)

    def test_fuel_penalty_only_when_low(self):
        assert fuel_penalty(50.0) == 0.0
        assert fuel_penalty(10.0) == 0.0
        assert fuel_penalty(5.0) == pytest.approx(0.01)
        assert fuel_penalty(0.0) == pytest.approx(0.02)


class TestLapTimeCalculator:
    """Test deterministic lap times."""

    def test_average_driver_near_base(self, bristol):
        calc = LapTimeCalculator(bristol)
        lap = calc.calculate_lap_time(average_driver(), CarState())

        # Default distraction (10) costs 0.3%
        assert lap == pytest.approx(15.4 / 0.997)

    def test_deterministic(self, bristol):
        calc = LapTimeCalculator(bristol)
        driver = average_driver()
        assert calc.calculate_lap_time(driver, CarState()) == calc.calculate_lap_time(driver, CarState())

    def test_skill_makes_faster(self, bristol):
        calc = LapTimeCalculator(bristol)
        slow = Driver(id="s", name="Slow", skills=DriverSkills(racecraft=20, consistency=20, focus=20))
        fast = Driver(id="f", name="Fast", skills=DriverSkills(racecraft=90, consistency=90, focus=90))
        assert calc.calculate_lap_time(fast, CarState()) < calc.calculate_lap_time(slow, CarState())

    def test_worn_tires_slower(self, bristol):
        calc = LapTimeCalculator(bristol)
        driver = average_driver()
        fresh = calc.calculate_lap_time(driver, CarState(tire_wear=100))
        worn = calc.calculate_lap_time(driver, CarState(tire_wear=30))
        assert worn > fresh

    def test_damage_and_low_fuel_slower(self, bristol):
        calc = LapTimeCalculator(bristol)
        driver = average_driver()
        base = calc.calculate_lap_time(driver, CarState())
        assert calc.calculate_lap_time(driver, CarState(damage=50)) > base
        assert calc.calculate_lap_time(driver, CarState(fuel_level=2)) > base

    def test_aggressive_style_faster(self, bristol):
        calc = LapTimeCalculator(bristol)
        driver = average_driver()
        normal = calc.calculate_lap_time(driver, CarState())
        aggressive = calc.calculate_lap_time(driver, CarState(driving_style=DrivingStyle.AGGRESSIVE))
        conservative = calc.calculate_lap_time(driver, CarState(driving_style=DrivingStyle.CONSERVATIVE))
        assert aggressive < normal < conservative

    def test_frustration_slows_driver(self, bristol):
        calc = LapTimeCalculator(bristol)
        calm = average_driver()
        angry = Driver(id="a", name="Angry", mental_state=MentalState(frustration=95))
        assert calc.calculate_lap_time(angry, CarState()) > calc.calculate_lap_time(calm, CarState())

    def test_always_positive(self, bristol):
        calc = LapTimeCalculator(bristol)
        wrecked = CarState(tire_wear=0, fuel_level=0, damage=100)
        hopeless = Driver(
            id="h",
            name="Hopeless",
            skills=DriverSkills(racecraft=0, consistency=0, focus=0, draft_sense=0),
            mental_state=MentalState(confidence=0, frustration=100, distraction=100),
        )
        assert calc.calculate_lap_time(hopeless, wrecked) > 0

    def test_breakdown_sums_to_total(self, bristol):
        calc = LapTimeCalculator(bristol)
        parts = calc.breakdown(average_driver(), CarState(tire_wear=55, damage=10))
        raw = parts.base_time + parts.skill_delta + parts.tire_delta + parts.fuel_delta + parts.damage_delta
        assert parts.total_time == pytest.approx(raw * parts.style_factor / parts.mental_factor)

    def test_unknown_driver_returns_sentinel(self, bristol, caplog):
        calc = LapTimeCalculator(bristol)
        drivers = {"avg": average_driver()}
        cars = {"avg": CarState()}

        with caplog.at_level(logging.WARNING):
            assert calc.lap_time_for("ghost", drivers, cars) == INVALID_LAP_TIME
        assert "ghost" in caplog.text
        assert calc.lap_time_for("avg", drivers, cars) > 0
