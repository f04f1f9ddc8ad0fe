"""Decision templates for the race situations that prompt the player.

Each template is one decision type: it knows when it applies, how to build
the prompt and options for the current situation, and which effects each
option produces per outcome. The generator and evaluator only talk to
templates through this shared interface.
"""

from abc import ABC, abstractmethod
from typing import ClassVar

from racesim.config import DecisionConfig
from racesim.decisions.models import (
    Decision,
    DecisionOption,
    DecisionType,
    EffectBundle,
    OutcomeResult,
    RiskLevel,
    TriggerContext,
)
from racesim.models import DrivingStyle

ROUTINE_DECISION_TIME = 12.0
TACTICAL_DECISION_TIME = 6.0

# Neutral band used by low-risk options that can fizzle without failing
LOW_RISK_NEUTRAL_BAND = 20.0

BASE_XP = {
    OutcomeResult.SUCCESS: 15.0,
    OutcomeResult.NEUTRAL: 5.0,
    OutcomeResult.FAILURE: 0.0,
}

Effects = dict[str, dict[OutcomeResult, EffectBundle]]


class DecisionTemplate(ABC):
    """Shared contract for every decision type."""

    decision_type: ClassVar[DecisionType]
    time_limit: ClassVar[float] = ROUTINE_DECISION_TIME
    default_option: ClassVar[str]
    effects_table: ClassVar[Effects]
    messages: ClassVar[dict[str, dict[OutcomeResult, str]]] = {}

    @abstractmethod
    def matches(self, context: TriggerContext, config: DecisionConfig) -> bool:
        """Whether this decision should fire in the given situation."""

    @abstractmethod
    def options(self, context: TriggerContext) -> list[DecisionOption]:
        """Options offered, described for the given situation."""

    @abstractmethod
    def prompt(self, context: TriggerContext) -> str:
        """Situation text shown to the player."""

    def build(self, context: TriggerContext) -> Decision:
        """Create a decision for the given situation."""
        return Decision(
            id=f"{self.decision_type.value}-{context.lap}",
            decision_type=self.decision_type,
            prompt=self.prompt(context),
            context=context,
            time_limit=self.time_limit,
            options=tuple(self.options(context)),
            default_option=self.default_option,
        )

    def effects(self, option_id: str, result: OutcomeResult) -> EffectBundle:
        """Unscaled effects of an option's outcome.

        A missing neutral entry falls back to the failure entry.
        """
        by_result = self.effects_table.get(option_id, {})
        if result in by_result:
            return by_result[result]
        if result == OutcomeResult.NEUTRAL and OutcomeResult.FAILURE in by_result:
            return by_result[OutcomeResult.FAILURE]
        return EffectBundle()

    def xp(self, option: DecisionOption, result: OutcomeResult) -> dict[str, float]:
        """Skill XP earned: full XP to the primary skill, half to the secondary."""
        base = BASE_XP[result]
        if base <= 0:
            return {}
        xp = {option.primary_skill: base}
        if option.secondary_skill and option.secondary_skill != option.primary_skill:
            xp[option.secondary_skill] = base * 0.5
        return xp

    def message(self, option_id: str, result: OutcomeResult) -> str:
        """Human-readable outcome summary."""
        return self.messages.get(option_id, {}).get(result, f"Decision outcome: {result.value}")


class PitStrategyTemplate(DecisionTemplate):
    """Pit window is open and tires or fuel are getting low."""

    decision_type = DecisionType.PIT_STRATEGY
    time_limit = ROUTINE_DECISION_TIME
    default_option = "pit-full"

    effects_table = {
        "pit-full": {
            OutcomeResult.SUCCESS: EffectBundle(
                pit_stop=True, position_delta=-2,
                mental_deltas={"confidence": 5}, driving_style=DrivingStyle.NORMAL,
            ),
            OutcomeResult.NEUTRAL: EffectBundle(
                pit_stop=True, position_delta=-3, driving_style=DrivingStyle.NORMAL,
            ),
            OutcomeResult.FAILURE: EffectBundle(
                pit_stop=True, position_delta=-4,
                mental_deltas={"frustration": 10}, driving_style=DrivingStyle.NORMAL,
            ),
        },
        "stay-out": {
            OutcomeResult.SUCCESS: EffectBundle(
                position_delta=2, mental_deltas={"confidence": 10},
                driving_style=DrivingStyle.EFFICIENT,
            ),
            OutcomeResult.NEUTRAL: EffectBundle(tire_wear_delta=-3),
            OutcomeResult.FAILURE: EffectBundle(
                position_delta=-1, tire_wear_delta=-3,
                mental_deltas={"confidence": -5, "frustration": 10},
            ),
        },
        "fuel-only": {
            OutcomeResult.SUCCESS: EffectBundle(
                fuel_delta=100, tire_wear_delta=-3, position_delta=-1,
                mental_deltas={"confidence": 3},
            ),
            OutcomeResult.FAILURE: EffectBundle(
                fuel_delta=100, tire_wear_delta=-4, position_delta=-2,
                mental_deltas={"confidence": -2, "frustration": 10},
            ),
        },
    }
    messages = {
        "pit-full": {
            OutcomeResult.SUCCESS: "Great pit stop timing! You minimized the loss of track position.",
            OutcomeResult.NEUTRAL: "Decent stop, but you lost a few positions.",
            OutcomeResult.FAILURE: "Poor timing - you fell back several positions.",
        },
        "stay-out": {
            OutcomeResult.SUCCESS: "Bold call! Staying out paid off - you gained positions.",
            OutcomeResult.NEUTRAL: "You held position but the equipment is struggling.",
            OutcomeResult.FAILURE: "That was too risky. Your worn tires cost you positions.",
        },
        "fuel-only": {
            OutcomeResult.SUCCESS: "Quick fuel stop worked perfectly!",
            OutcomeResult.NEUTRAL: "Fuel stop completed, but tire strategy is compromised.",
            OutcomeResult.FAILURE: "The quick stop didn't save enough time.",
        },
    }

    def matches(self, context: TriggerContext, config: DecisionConfig) -> bool:
        if context.lap < config.pit_window_lap:
            return False
        return (
            context.tire_wear < config.pit_tire_threshold
            or context.fuel_level < config.pit_fuel_threshold
        )

    def options(self, context: TriggerContext) -> list[DecisionOption]:
        worn_out = context.tire_wear < 40 or context.fuel_level < 30
        return [
            DecisionOption(
                id="pit-full",
                label="Pit now (4 tires + fuel)",
                description="Full service stop - lose track position but get fresh equipment",
                risk_level=RiskLevel.LOW,
                primary_skill="pit_strategy",
                secondary_skill="racecraft",
                neutral_band=LOW_RISK_NEUTRAL_BAND,
            ),
            DecisionOption(
                id="stay-out",
                label="Stay out",
                description=(
                    f"Keep P{context.position} on {context.tire_wear:.0f}% tires - "
                    + ("very risky on equipment this worn" if worn_out else "risky if the tires fade")
                ),
                risk_level=RiskLevel.HIGH if worn_out else RiskLevel.MEDIUM,
                primary_skill="tire_management",
                secondary_skill="fuel_management",
            ),
            DecisionOption(
                id="fuel-only",
                label="Fuel only (quick stop)",
                description="Quick splash of fuel - compromises tire strategy",
                risk_level=RiskLevel.MEDIUM,
                primary_skill="pit_strategy",
                secondary_skill="tire_management",
            ),
        ]

    def prompt(self, context: TriggerContext) -> str:
        return (
            f"Lap {context.lap}: Pit window is open. Your tires are at "
            f"{context.tire_wear:.0f}%, fuel at {context.fuel_level:.0f}%. Do you pit?"
        )


class PassingTemplate(DecisionTemplate):
    """Stuck behind the same car for too long."""

    decision_type = DecisionType.PASSING
    time_limit = TACTICAL_DECISION_TIME
    default_option = "patient-pass"

    effects_table = {
        "aggressive-pass": {
            OutcomeResult.SUCCESS: EffectBundle(
                position_delta=1, mental_deltas={"confidence": 10, "frustration": -10},
            ),
            OutcomeResult.FAILURE: EffectBundle(
                position_delta=-1, damage_delta=10,
                mental_deltas={"confidence": -10, "frustration": 10},
            ),
        },
        "patient-pass": {
            OutcomeResult.SUCCESS: EffectBundle(
                position_delta=1,
                mental_deltas={"confidence": 10, "frustration": -5, "focus": 5},
            ),
            OutcomeResult.NEUTRAL: EffectBundle(mental_deltas={"frustration": 3}),
            OutcomeResult.FAILURE: EffectBundle(mental_deltas={"frustration": 10}),
        },
        "stay-behind": {
            OutcomeResult.SUCCESS: EffectBundle(
                mental_deltas={"frustration": -5, "focus": 3},
                driving_style=DrivingStyle.EFFICIENT,
            ),
            OutcomeResult.NEUTRAL: EffectBundle(
                mental_deltas={"focus": 3}, driving_style=DrivingStyle.EFFICIENT,
            ),
            OutcomeResult.FAILURE: EffectBundle(mental_deltas={"frustration": 10}),
        },
    }
    messages = {
        "aggressive-pass": {
            OutcomeResult.SUCCESS: "Excellent move! You made it stick and gained a position!",
            OutcomeResult.NEUTRAL: "Aggressive attempt but no position change.",
            OutcomeResult.FAILURE: "Too aggressive - contact! You lost a position and took damage.",
        },
        "patient-pass": {
            OutcomeResult.SUCCESS: "Patience rewarded! Clean pass completed.",
            OutcomeResult.NEUTRAL: "You waited, but no opportunity materialized.",
            OutcomeResult.FAILURE: "Waited too long - they got away.",
        },
        "stay-behind": {
            OutcomeResult.SUCCESS: "Smart move. You conserved equipment and stayed close.",
            OutcomeResult.NEUTRAL: "Drafting, but still stuck in position.",
            OutcomeResult.FAILURE: "Staying behind cost you momentum.",
        },
    }

    def matches(self, context: TriggerContext, config: DecisionConfig) -> bool:
        return context.car_ahead_id is not None and context.laps_stuck >= config.passing_laps

    def options(self, context: TriggerContext) -> list[DecisionOption]:
        angry = context.mental_state.frustration > 60
        return [
            DecisionOption(
                id="aggressive-pass",
                label="Aggressive pass (dive inside)",
                description="Force the issue - high risk of contact" if angry else "Risky move - requires precision",
                risk_level=RiskLevel.HIGH,
                primary_skill="racecraft",
                secondary_skill="aggression",
            ),
            DecisionOption(
                id="patient-pass",
                label="Patient approach",
                description="Wait for a mistake or better opportunity",
                risk_level=RiskLevel.LOW,
                primary_skill="racecraft",
                secondary_skill="consistency",
                neutral_band=LOW_RISK_NEUTRAL_BAND,
            ),
            DecisionOption(
                id="stay-behind",
                label="Stay behind and draft",
                description="Conserve equipment, wait for pit strategy",
                risk_level=RiskLevel.LOW,
                primary_skill="draft_sense",
                secondary_skill="composure",
                neutral_band=LOW_RISK_NEUTRAL_BAND,
            ),
        ]

    def prompt(self, context: TriggerContext) -> str:
        return (
            f"Lap {context.lap}: You've been stuck in P{context.position} behind "
            f"{context.car_ahead_id} for {context.laps_stuck} laps. Make a move?"
        )


class MentalStateTemplate(DecisionTemplate):
    """Frustration or distraction is getting out of hand."""

    decision_type = DecisionType.MENTAL_STATE
    time_limit = TACTICAL_DECISION_TIME
    default_option = "calm-down"

    effects_table = {
        "calm-down": {
            OutcomeResult.SUCCESS: EffectBundle(
                mental_deltas={"confidence": 5, "frustration": -20, "focus": 10, "distraction": -15},
                driving_style=DrivingStyle.NORMAL,
            ),
            OutcomeResult.NEUTRAL: EffectBundle(
                mental_deltas={"frustration": -10, "distraction": -5},
                driving_style=DrivingStyle.NORMAL,
            ),
            OutcomeResult.FAILURE: EffectBundle(mental_deltas={"frustration": -5}),
        },
        "push-through": {
            OutcomeResult.SUCCESS: EffectBundle(
                mental_deltas={"confidence": 10, "frustration": -5},
                driving_style=DrivingStyle.AGGRESSIVE,
            ),
            OutcomeResult.FAILURE: EffectBundle(
                mental_deltas={"frustration": 10, "focus": -10},
                damage_delta=5,
                driving_style=DrivingStyle.AGGRESSIVE,
            ),
        },
        "maintain-pace": {
            OutcomeResult.SUCCESS: EffectBundle(mental_deltas={"frustration": -5}),
            OutcomeResult.FAILURE: EffectBundle(mental_deltas={"confidence": -5, "frustration": 10}),
        },
    }
    messages = {
        "calm-down": {
            OutcomeResult.SUCCESS: "Deep breath worked. You're back in the zone.",
            OutcomeResult.NEUTRAL: "You calmed down a bit.",
            OutcomeResult.FAILURE: "Still struggling to focus.",
        },
        "push-through": {
            OutcomeResult.SUCCESS: "Gutsy call! You fought through and maintained pace.",
            OutcomeResult.NEUTRAL: "You're pushing, but it's taking a toll.",
            OutcomeResult.FAILURE: "Pushing too hard - you made a mistake!",
        },
        "maintain-pace": {
            OutcomeResult.SUCCESS: "Steady approach kept you on track.",
            OutcomeResult.NEUTRAL: "Nothing changed.",
            OutcomeResult.FAILURE: "Maintaining pace didn't help the situation.",
        },
    }

    def matches(self, context: TriggerContext, config: DecisionConfig) -> bool:
        mental = context.mental_state
        return (
            mental.frustration > config.frustration_threshold
            or mental.distraction > config.distraction_threshold
        )

    def options(self, context: TriggerContext) -> list[DecisionOption]:
        return [
            DecisionOption(
                id="calm-down",
                label="Take a deep breath, calm down",
                description="Lose a bit of time, but recover mentally",
                risk_level=RiskLevel.LOW,
                primary_skill="composure",
                secondary_skill="focus",
                neutral_band=LOW_RISK_NEUTRAL_BAND,
            ),
            DecisionOption(
                id="push-through",
                label="Push harder, fight through it",
                description="Maintain pace but risk mistakes",
                risk_level=RiskLevel.HIGH,
                primary_skill="stamina",
                secondary_skill="focus",
            ),
            DecisionOption(
                id="maintain-pace",
                label="Maintain current pace",
                description="No change in approach",
                risk_level=RiskLevel.MEDIUM,
                primary_skill="consistency",
            ),
        ]

    def prompt(self, context: TriggerContext) -> str:
        frustration = context.mental_state.frustration
        distraction = context.mental_state.distraction
        frustrated = frustration > 70
        distracted = distraction > 60

        if frustrated and distracted:
            situation = (
                f"You're frustrated ({frustration:.0f}) and distracted "
                f"({distraction:.0f}). How do you respond?"
            )
        elif frustrated:
            situation = f"Frustration building ({frustration:.0f}). How do you handle it?"
        else:
            situation = f"You're getting distracted ({distraction:.0f}). Refocus?"
        return f"Lap {context.lap}: {situation}"


class TireManagementTemplate(DecisionTemplate):
    """Tires are fading with a long way to go until the pit window."""

    decision_type = DecisionType.TIRE_MANAGEMENT
    time_limit = ROUTINE_DECISION_TIME
    default_option = "manage-carefully"

    effects_table = {
        "conserve-tires": {
            OutcomeResult.SUCCESS: EffectBundle(
                tire_wear_delta=5, position_delta=-1,
                mental_deltas={"focus": 5}, driving_style=DrivingStyle.CONSERVATIVE,
            ),
            OutcomeResult.NEUTRAL: EffectBundle(
                tire_wear_delta=3, position_delta=-1, driving_style=DrivingStyle.CONSERVATIVE,
            ),
            OutcomeResult.FAILURE: EffectBundle(
                tire_wear_delta=3, position_delta=-2,
                mental_deltas={"frustration": 10}, driving_style=DrivingStyle.CONSERVATIVE,
            ),
        },
        "manage-carefully": {
            OutcomeResult.SUCCESS: EffectBundle(
                tire_wear_delta=3, mental_deltas={"focus": 5},
                driving_style=DrivingStyle.NORMAL,
            ),
            OutcomeResult.NEUTRAL: EffectBundle(driving_style=DrivingStyle.NORMAL),
            OutcomeResult.FAILURE: EffectBundle(
                tire_wear_delta=-3, mental_deltas={"frustration": 10},
                driving_style=DrivingStyle.NORMAL,
            ),
        },
        "push-through-wear": {
            OutcomeResult.SUCCESS: EffectBundle(
                tire_wear_delta=-3, position_delta=1,
                mental_deltas={"confidence": 5}, driving_style=DrivingStyle.AGGRESSIVE,
            ),
            OutcomeResult.FAILURE: EffectBundle(
                tire_wear_delta=-3,
                mental_deltas={"confidence": -5, "frustration": 10},
                driving_style=DrivingStyle.AGGRESSIVE,
            ),
        },
    }
    messages = {
        "conserve-tires": {
            OutcomeResult.SUCCESS: "Smart tire management! You're saving for later.",
            OutcomeResult.NEUTRAL: "Conserving tires, but lost a position.",
            OutcomeResult.FAILURE: "Too slow - you lost positions.",
        },
        "manage-carefully": {
            OutcomeResult.SUCCESS: "Perfect balance of speed and tire conservation.",
            OutcomeResult.NEUTRAL: "Managing tires carefully.",
            OutcomeResult.FAILURE: "Misjudged the balance - tires wearing faster.",
        },
        "push-through-wear": {
            OutcomeResult.SUCCESS: "Aggressive pace maintained! Tires holding up for now.",
            OutcomeResult.NEUTRAL: "Fast pace, but tires degrading quickly.",
            OutcomeResult.FAILURE: "Pushed too hard - massive tire wear.",
        },
    }

    def matches(self, context: TriggerContext, config: DecisionConfig) -> bool:
        return (
            context.tire_wear < config.tire_management_threshold
            and context.laps_to_pit_window > config.tire_management_horizon
        )

    def options(self, context: TriggerContext) -> list[DecisionOption]:
        return [
            DecisionOption(
                id="conserve-tires",
                label="Slow down, conserve tires",
                description=f"Save tires for the last {context.laps_to_go} laps, lose positions now",
                risk_level=RiskLevel.LOW,
                primary_skill="tire_management",
                secondary_skill="consistency",
                neutral_band=LOW_RISK_NEUTRAL_BAND,
            ),
            DecisionOption(
                id="manage-carefully",
                label="Manage carefully",
                description="Balance speed and tire wear",
                risk_level=RiskLevel.MEDIUM,
                primary_skill="tire_management",
                secondary_skill="racecraft",
            ),
            DecisionOption(
                id="push-through-wear",
                label="Push through, maintain pace",
                description=f"Keep P{context.position} pace, tires will degrade faster",
                risk_level=RiskLevel.HIGH,
                primary_skill="tire_management",
                secondary_skill="racecraft",
            ),
        ]

    def prompt(self, context: TriggerContext) -> str:
        return (
            f"Lap {context.lap}: Tires at {context.tire_wear:.0f}% with "
            f"{context.laps_to_pit_window} laps to the pit window. Adjust pace?"
        )


# Trigger priority order
DEFAULT_TEMPLATES: tuple[DecisionTemplate, ...] = (
    PitStrategyTemplate(),
    PassingTemplate(),
    MentalStateTemplate(),
    TireManagementTemplate(),
)


def template_for(
    decision_type: DecisionType,
    templates: tuple[DecisionTemplate, ...] = DEFAULT_TEMPLATES,
) -> DecisionTemplate:
    """Look up the template that produced a decision type."""
    for template in templates:
        if template.decision_type == decision_type:
            return template
    raise KeyError(f"No template for decision type {decision_type.value!r}")
