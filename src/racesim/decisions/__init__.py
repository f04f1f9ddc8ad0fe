"""Player decisions: triggering, options and outcome evaluation."""

from .evaluator import DecisionEvaluator, success_chance
from .generator import DecisionGenerator, PassingStreak
from .library import DEFAULT_TEMPLATES, DecisionTemplate
from .models import (
    NO_CHOICE,
    Decision,
    DecisionOption,
    DecisionOutcome,
    DecisionType,
    EffectBundle,
    OutcomeResult,
    RiskLevel,
    TriggerContext,
)

__all__ = [
    "DEFAULT_TEMPLATES",
    "NO_CHOICE",
    "Decision",
    "DecisionEvaluator",
    "DecisionGenerator",
    "DecisionOption",
    "DecisionOutcome",
    "DecisionTemplate",
    "DecisionType",
    "EffectBundle",
    "OutcomeResult",
    "PassingStreak",
    "RiskLevel",
    "TriggerContext",
    "success_chance",
]
