"""Tests for decision outcome evaluation."""

import numpy as np
import pytest

from conftest import ExplodingRng, FixedRng, make_driver
from racesim.decisions import (
    NO_CHOICE,
    DecisionEvaluator,
    DecisionGenerator,
    DecisionOption,
    DecisionType,
    OutcomeResult,
    RiskLevel,
    success_chance,
)
from racesim.decisions.evaluator import classify_roll, scale_effects
from racesim.decisions.library import DEFAULT_TEMPLATES, PassingTemplate
from racesim.decisions.models import EffectBundle
from racesim.errors import InvalidDecisionError
from racesim.models import CarState, DriverSkills, MentalState


def pit_decision():
    gen = DecisionGenerator()
    ctx = gen.build_context(
        lap=55,
        total_laps=200,
        laps_completed=54,
        position=8,
        car=CarState(tire_wear=55.0, fuel_level=70.0),
        mental_state=MentalState(),
    )
    decision = gen.generate(ctx, None)
    assert decision.decision_type == DecisionType.PIT_STRATEGY
    return decision


def passing_decision():
    gen = DecisionGenerator()
    ctx = gen.build_context(
        lap=30,
        total_laps=200,
        laps_completed=29,
        position=4,
        car=CarState(),
        mental_state=MentalState(),
        car_ahead_id="ai-1",
        laps_stuck=10,
    )
    return gen.generate(ctx, None)


def pit_expert():
    driver = make_driver("player", skill=60.0, pit_strategy=90.0)
    driver.mental_state = MentalState(confidence=80, frustration=10)
    return driver


def option(risk: RiskLevel, band: float = 0.0, skill: str = "racecraft") -> DecisionOption:
    return DecisionOption(id="x", label="X", risk_level=risk, primary_skill=skill, neutral_band=band)


class TestSuccessChance:
    """Test the success chance formula."""

    def test_neutral_driver_low_risk(self):
        assert success_chance(option(RiskLevel.LOW), DriverSkills(), MentalState(confidence=50, frustration=0)) == 55.0

    def test_formula_components(self):
        skills = DriverSkills(racecraft=80)
        mental = MentalState(confidence=60, frustration=20)
        # 50 + 15 + 4 - 5
        assert success_chance(option(RiskLevel.MEDIUM), skills, mental) == pytest.approx(64.0)

    def test_clamped_to_exactly_five(self):
        skills = DriverSkills(racecraft=0)
        mental = MentalState(confidence=0, frustration=100)
        assert success_chance(option(RiskLevel.HIGH), skills, mental) == 5.0

    def test_clamped_to_ninety_five(self):
        skills = DriverSkills(racecraft=100)
        mental = MentalState(confidence=100, frustration=0)
        assert success_chance(option(RiskLevel.LOW), skills, mental) == 95.0

    def test_pit_expert_chance(self):
        decision = pit_decision()
        driver = pit_expert()
        pit_full = decision.option("pit-full")
        # 50 + (90 - 50) * 0.5 + (80 - 10) * 0.1 + 0
        assert success_chance(pit_full, driver.skills, driver.mental_state) == pytest.approx(77.0)


class TestClassifyRoll:
    """Test mapping draws to outcomes."""

    def test_success_below_chance(self):
        assert classify_roll(59.9, 60.0, option(RiskLevel.HIGH)) == OutcomeResult.SUCCESS

    def test_neutral_band_only_for_low_risk(self):
        assert classify_roll(70.0, 60.0, option(RiskLevel.LOW, band=20.0)) == OutcomeResult.NEUTRAL
        assert classify_roll(70.0, 60.0, option(RiskLevel.MEDIUM, band=20.0)) == OutcomeResult.FAILURE

    def test_failure_beyond_band(self):
        assert classify_roll(80.0, 60.0, option(RiskLevel.LOW, band=20.0)) == OutcomeResult.FAILURE


class TestEvaluate:
    """Test full outcome evaluation."""

    def test_pit_now_succeeds_on_seeded_draw(self):
        evaluator = DecisionEvaluator(rng=FixedRng(0.42))
        outcome = evaluator.evaluate(pit_decision(), "pit-full", pit_expert())

        assert outcome.result == OutcomeResult.SUCCESS
        assert outcome.roll == pytest.approx(42.0)
        assert outcome.effects.pit_stop
        assert outcome.effects.xp["pit_strategy"] == 15.0

    def test_pit_now_success_rate_matches_chance(self):
        evaluator = DecisionEvaluator(rng=np.random.default_rng(2024))
        decision = pit_decision()
        driver = pit_expert()

        results = [evaluator.evaluate(decision, "pit-full", driver).result for _ in range(4000)]
        rate = results.count(OutcomeResult.SUCCESS) / len(results)
        assert 0.74 < rate < 0.80

    def test_same_seed_same_outcomes(self):
        decision = pit_decision()
        driver = pit_expert()
        first = DecisionEvaluator(rng=np.random.default_rng(9))
        second = DecisionEvaluator(rng=np.random.default_rng(9))

        for _ in range(20):
            assert first.evaluate(decision, "stay-out", driver) == second.evaluate(decision, "stay-out", driver)

    def test_does_not_mutate_driver(self):
        driver = pit_expert()
        before = driver.model_copy(deep=True)
        DecisionEvaluator(rng=FixedRng(0.99)).evaluate(passing_decision(), "aggressive-pass", driver)
        assert driver == before

    def test_unknown_option_rejected_without_draw(self):
        evaluator = DecisionEvaluator(rng=ExplodingRng())
        with pytest.raises(InvalidDecisionError):
            evaluator.evaluate(pit_decision(), "pit-twice", pit_expert())

    def test_no_choice_is_forced_neutral(self):
        evaluator = DecisionEvaluator(rng=ExplodingRng())
        outcome = evaluator.evaluate(pit_decision(), NO_CHOICE, pit_expert())

        assert outcome.option_id == "pit-full"
        assert outcome.result == OutcomeResult.NEUTRAL
        assert outcome.timed_out
        assert outcome.roll is None
        assert outcome.effects.pit_stop

    def test_failed_aggressive_pass_scaled_by_risk(self):
        evaluator = DecisionEvaluator(rng=FixedRng(0.99))
        outcome = evaluator.evaluate(passing_decision(), "aggressive-pass", make_driver("p"))

        assert outcome.result == OutcomeResult.FAILURE
        assert outcome.effects.position_delta == -1
        assert outcome.effects.damage_delta == pytest.approx(15.0)
        assert outcome.effects.mental_deltas["confidence"] == pytest.approx(-15.0)
        assert outcome.effects.mental_deltas["frustration"] == pytest.approx(15.0)
        assert outcome.effects.xp == {}

    def test_successful_aggressive_pass(self):
        evaluator = DecisionEvaluator(rng=FixedRng(0.0))
        outcome = evaluator.evaluate(passing_decision(), "aggressive-pass", make_driver("p"))

        assert outcome.result == OutcomeResult.SUCCESS
        assert outcome.effects.position_delta == 1
        assert outcome.effects.mental_deltas["confidence"] == pytest.approx(15.0)
        # Relief is not amplified
        assert outcome.effects.mental_deltas["frustration"] == pytest.approx(-10.0)
        assert outcome.effects.xp == {"racecraft": 15.0, "aggression": 7.5}


class TestTemplates:
    """Test the template contract."""

    def test_default_options_have_neutral_effects(self):
        for template in DEFAULT_TEMPLATES:
            effects = template.effects(template.default_option, OutcomeResult.NEUTRAL)
            assert not effects.is_empty

    def test_missing_neutral_falls_back_to_failure(self):
        template = PassingTemplate()
        assert template.effects("aggressive-pass", OutcomeResult.NEUTRAL) == template.effects(
            "aggressive-pass", OutcomeResult.FAILURE
        )

    def test_scale_leaves_low_risk_untouched(self):
        effects = EffectBundle(tire_wear_delta=-3.0, mental_deltas={"frustration": 10})
        assert scale_effects(effects, RiskLevel.LOW) == effects

    def test_scale_medium(self):
        effects = EffectBundle(tire_wear_delta=-4.0, fuel_delta=100.0, mental_deltas={"frustration": -5})
        scaled = scale_effects(effects, RiskLevel.MEDIUM)

        assert scaled.tire_wear_delta == pytest.approx(-5.0)
        assert scaled.fuel_delta == 100.0
        assert scaled.mental_deltas["frustration"] == -5
