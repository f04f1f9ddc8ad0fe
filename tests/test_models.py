"""Tests for driver, car and track models."""

import pytest
from pydantic import ValidationError

from racesim.models import DriverSkills, MentalState, SectionType, Track, TrackSection


class TestClamping:
    """Test that 0-100 values clamp instead of failing."""

    def test_skills_clamped(self):
        skills = DriverSkills(racecraft=150, focus=-20)
        assert skills.racecraft == 100.0
        assert skills.focus == 0.0

    def test_mental_state_clamped_on_assignment(self):
        mental = MentalState()
        mental.frustration = 130.0
        assert mental.frustration == 100.0

    def test_non_numeric_still_rejected(self):
        with pytest.raises(ValidationError):
            DriverSkills(racecraft="fast")


class TestMentalState:
    """Test the pace modifier."""

    def test_defaults(self):
        mental = MentalState()
        assert (mental.confidence, mental.focus, mental.frustration, mental.distraction) == (50, 70, 0, 10)

    def test_modifier_bounds(self):
        assert MentalState(confidence=100, distraction=0).speed_modifier() == pytest.approx(1.05)
        assert MentalState(confidence=0, frustration=100, distraction=100).speed_modifier() == 0.92

    def test_skill_lookup(self):
        skills = DriverSkills(pit_strategy=90)
        assert skills.get("pit_strategy") == 90
        assert skills.get("unknown_skill") == 50.0
        assert skills.as_dict()["pit_strategy"] == 90


class TestTrack:
    """Test section shares."""

    def test_section_share(self, bristol):
        assert bristol.section_length == 2280
        assert bristol.share_of(SectionType.TURN) == pytest.approx(880 / 2280)
        assert bristol.share_of(SectionType.TRANSITION) == 0.0

    def test_track_is_frozen(self, bristol):
        with pytest.raises(ValidationError):
            bristol.base_lap_time = 10.0

    def test_section_length_must_be_positive(self):
        with pytest.raises(ValidationError):
            TrackSection(section_type=SectionType.TURN, length=0)

    def test_empty_track_share(self):
        track = Track(id="t", name="T", length=1.0, base_lap_time=30.0, race_laps=10)
        assert track.share_of(SectionType.STRAIGHT) == 0.0
