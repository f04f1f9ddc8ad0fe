"""Tests for tire wear and fuel consumption."""

import pytest

from racesim.config import ResourceConfig
from racesim.models import CarState, Driver, DrivingStyle, MentalState, TrackType
from racesim.simulation.resources import (
    apply_lap_wear,
    apply_pit_stop,
    fuel_consumption_rate,
    tire_wear_rate,
)


class TestTireWear:
    """Test per-lap tire wear."""

    def test_baseline_wear_follows_tire_life(self, bristol):
        """Short-track tires last 100 laps at baseline."""
        wear = tire_wear_rate(bristol)
        # 1.0 per lap scaled by grip (2 - 0.95)
        assert wear == pytest.approx(1.05)

    def test_longer_tire_life_wears_slower(self, bristol):
        superspeedway = bristol.model_copy(update={"track_type": TrackType.SUPERSPEEDWAY})
        assert tire_wear_rate(superspeedway) < tire_wear_rate(bristol)

    def test_skill_reduces_wear(self, bristol):
        assert tire_wear_rate(bristol, tire_management=90) < tire_wear_rate(bristol, tire_management=50)
        assert tire_wear_rate(bristol, tire_management=10) > tire_wear_rate(bristol, tire_management=50)

    def test_style_deltas(self, bristol):
        normal = tire_wear_rate(bristol, DrivingStyle.NORMAL)
        assert tire_wear_rate(bristol, DrivingStyle.AGGRESSIVE) == pytest.approx(normal + 0.5)
        assert tire_wear_rate(bristol, DrivingStyle.CONSERVATIVE) == pytest.approx(normal - 0.3)

    def test_wear_never_below_floor(self, bristol):
        config = ResourceConfig(conservative_wear_delta=-50.0)
        wear = tire_wear_rate(bristol, DrivingStyle.CONSERVATIVE, 100.0, config)
        assert wear == pytest.approx(config.min_tire_wear_rate)

    def test_out_of_range_skill_is_clamped(self, bristol):
        assert tire_wear_rate(bristol, tire_management=250) == tire_wear_rate(bristol, tire_management=100)


class TestFuelConsumption:
    """Test per-lap fuel burn."""

    def test_consistency_saves_fuel(self, bristol):
        assert fuel_consumption_rate(bristol, consistency=100) < fuel_consumption_rate(bristol, consistency=0)

    def test_frustration_costs_fuel(self, bristol):
        calm = fuel_consumption_rate(bristol, mental_state=MentalState(frustration=0))
        angry = fuel_consumption_rate(bristol, mental_state=MentalState(frustration=100))
        assert angry > calm

    def test_efficient_style_saves_two_points_per_lap(self, bristol):
        config = ResourceConfig(base_fuel_rate={TrackType.SHORT: 4.0})
        normal = fuel_consumption_rate(bristol, DrivingStyle.NORMAL, config=config)
        efficient = fuel_consumption_rate(bristol, DrivingStyle.EFFICIENT, config=config)
        assert normal - efficient == pytest.approx(2.0)

    def test_efficient_saving_stops_at_floor(self, bristol):
        """Default short-track burn is under 2 points, so efficient driving hits the floor."""
        normal = fuel_consumption_rate(bristol, DrivingStyle.NORMAL)
        efficient = fuel_consumption_rate(bristol, DrivingStyle.EFFICIENT)
        assert normal < 2.0
        assert efficient == pytest.approx(ResourceConfig().min_fuel_rate)

    def test_fuel_always_positive(self, bristol):
        config = ResourceConfig(efficient_fuel_delta=-10.0)
        assert fuel_consumption_rate(bristol, DrivingStyle.EFFICIENT, config=config) > 0


class TestLapWear:
    """Test applying a completed lap to a car."""

    def test_lap_consumes_tires_and_fuel(self, bristol):
        car = CarState()
        driver = Driver(id="d", name="D")
        after = apply_lap_wear(car, driver, bristol)

        assert after.tire_wear < car.tire_wear
        assert after.fuel_level < car.fuel_level
        assert after.laps_since_pit == 1
        assert after.last_fuel_used > 0

    def test_input_car_untouched(self, bristol):
        car = CarState()
        apply_lap_wear(car, Driver(id="d", name="D"), bristol)
        assert car.tire_wear == 100.0
        assert car.laps_since_pit == 0

    def test_values_clamped_at_zero(self, bristol):
        car = CarState(tire_wear=0.2, fuel_level=0.1)
        after = apply_lap_wear(car, Driver(id="d", name="D"), bristol)
        assert after.tire_wear == 0.0
        assert after.fuel_level == 0.0

    def test_pit_stop_refills(self):
        car = CarState(tire_wear=35.0, fuel_level=12.0, laps_since_pit=48, damage=20.0)
        after = apply_pit_stop(car)

        assert after.tire_wear == 100.0
        assert after.fuel_level == 100.0
        assert after.laps_since_pit == 0
        assert after.damage == 20.0


def test_car_state_clamps_on_assignment():
    car = CarState(tire_wear=140.0)
    assert car.tire_wear == 100.0

    car.fuel_level = -5.0
    assert car.fuel_level == 0.0
