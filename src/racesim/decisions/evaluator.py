"""Skill-weighted resolution of player decisions."""

import logging

import numpy as np

from racesim.decisions.library import DEFAULT_TEMPLATES, DecisionTemplate, template_for
from racesim.decisions.models import (
    NO_CHOICE,
    Decision,
    DecisionOption,
    DecisionOutcome,
    EffectBundle,
    OutcomeResult,
    RiskLevel,
)
from racesim.errors import InvalidDecisionError
from racesim.models import Driver, DriverSkills, MentalState

logger = logging.getLogger(__name__)

MIN_SUCCESS_CHANCE = 5.0
MAX_SUCCESS_CHANCE = 95.0

RISK_PENALTY: dict[RiskLevel, float] = {
    RiskLevel.LOW: 0.0,
    RiskLevel.MEDIUM: -5.0,
    RiskLevel.HIGH: -15.0,
}

# Magnitude multiplier applied to outcome effects
RISK_SCALE: dict[RiskLevel, float] = {
    RiskLevel.LOW: 1.0,
    RiskLevel.MEDIUM: 1.25,
    RiskLevel.HIGH: 1.5,
}


def success_chance(option: DecisionOption, skills: DriverSkills, mental_state: MentalState) -> float:
    """Probability (in percent) that an option succeeds.

    The primary skill moves the chance half a point per point away from
    50, confidence minus frustration moves it a tenth of a point, and
    riskier options are penalized. Always within 5-95.
    """
    chance = 50.0
    chance += (skills.get(option.primary_skill) - 50.0) * 0.5
    chance += (mental_state.confidence - mental_state.frustration) * 0.1
    chance += RISK_PENALTY[option.risk_level]
    return max(MIN_SUCCESS_CHANCE, min(MAX_SUCCESS_CHANCE, chance))


def classify_roll(roll: float, chance: float, option: DecisionOption) -> OutcomeResult:
    """Map a 0-100 draw to an outcome.

    Low-risk options have a neutral band just above the success chance;
    everything else is success or failure.
    """
    if roll < chance:
        return OutcomeResult.SUCCESS
    if option.risk_level == RiskLevel.LOW and roll < chance + option.neutral_band:
        return OutcomeResult.NEUTRAL
    return OutcomeResult.FAILURE


def scale_effects(effects: EffectBundle, risk_level: RiskLevel) -> EffectBundle:
    """Scale an outcome's magnitudes by risk level.

    Confidence changes, frustration increases, tire wear and damage scale.
    Frustration relief, other mental deltas, fuel and pit refills do not.
    """
    scale = RISK_SCALE[risk_level]
    if scale == 1.0:
        return effects

    mental = dict(effects.mental_deltas)
    if "confidence" in mental:
        mental["confidence"] *= scale
    if mental.get("frustration", 0.0) > 0:
        mental["frustration"] *= scale

    return effects.model_copy(update={
        "mental_deltas": mental,
        "tire_wear_delta": effects.tire_wear_delta * scale,
        "damage_delta": effects.damage_delta * scale,
    })


class DecisionEvaluator:
    """Resolves a chosen option into an outcome and its effects."""

    def __init__(
        self,
        rng: np.random.Generator | None = None,
        templates: tuple[DecisionTemplate, ...] = DEFAULT_TEMPLATES,
    ):
        """Initialize the evaluator.

        Args:
            rng: Random number generator used for outcome draws
            templates: Decision templates providing effect tables
        """
        self.rng = rng if rng is not None else np.random.default_rng()
        self.templates = templates

    def evaluate(self, decision: Decision, option_id: str, driver: Driver) -> DecisionOutcome:
        """Resolve ``option_id`` for ``decision``.

        Does not modify the driver or any race state.

        Args:
            decision: The pending decision
            option_id: Chosen option, or NO_CHOICE when the prompt timed out
            driver: Player driver (skills and mental state)

        Returns:
            DecisionOutcome with scaled effects and XP

        Raises:
            InvalidDecisionError: If the option is not part of the decision
        """
        if option_id == NO_CHOICE:
            return self._resolve_timeout(decision, driver)

        option = decision.option(option_id)
        if option is None:
            raise InvalidDecisionError(
                f"Option {option_id!r} is not valid for decision {decision.id!r} "
                f"(expected one of {decision.option_ids})"
            )

        chance = success_chance(option, driver.skills, driver.mental_state)
        roll = float(self.rng.random() * 100.0)
        result = classify_roll(roll, chance, option)

        logger.debug(
            "Decision %s: %s rolled %.1f against %.1f -> %s",
            decision.id,
            option.id,
            roll,
            chance,
            result.value,
        )
        return self._outcome(decision, option, result, chance, roll)

    def _resolve_timeout(self, decision: Decision, driver: Driver) -> DecisionOutcome:
        """Resolve the default option as a forced neutral without drawing."""
        option = decision.option(decision.default_option)
        if option is None:
            raise InvalidDecisionError(
                f"Decision {decision.id!r} has no default option {decision.default_option!r}"
            )

        chance = success_chance(option, driver.skills, driver.mental_state)
        return self._outcome(decision, option, OutcomeResult.NEUTRAL, chance, None, timed_out=True)

    def _outcome(
        self,
        decision: Decision,
        option: DecisionOption,
        result: OutcomeResult,
        chance: float,
        roll: float | None,
        timed_out: bool = False,
    ) -> DecisionOutcome:
        template = template_for(decision.decision_type, self.templates)

        if timed_out and result not in template.effects_table.get(option.id, {}):
            effects = EffectBundle()
        else:
            effects = scale_effects(template.effects(option.id, result), option.risk_level)
        effects = effects.model_copy(update={"xp": template.xp(option, result)})

        summary = template.message(option.id, result)
        if timed_out:
            summary = f"No call made, defaulted to {option.label.lower()}. {summary}"

        return DecisionOutcome(
            decision_id=decision.id,
            decision_type=decision.decision_type,
            option_id=option.id,
            result=result,
            success_chance=chance,
            roll=roll,
            effects=effects,
            summary=summary,
            timed_out=timed_out,
        )
