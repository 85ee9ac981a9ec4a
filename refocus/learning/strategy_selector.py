"""
Strategy recommendations for reporting.

Pure functions over per-strategy histories. Unlike the adaptive learner these
never change the profile; they answer "what would work best here?" for
insight reports and previews.
"""

import random
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from refocus.learning.effectiveness import compare_strategies
from refocus.models import InterventionRecord, StrategyType, Trigger

Histories = Mapping[StrategyType, Sequence[InterventionRecord]]

TRIGGER_DEFAULTS = {
    Trigger.SHINY_OBJECT: StrategyType.TIME_BOXED,
    Trigger.PLANNING_PROCRASTINATION: StrategyType.MICRO_TASK,
    Trigger.CONTEXT_SWITCH: StrategyType.ACCOUNTABILITY,
    Trigger.RESEARCH_RABBIT_HOLE: StrategyType.TIME_BOXED,
}

MORNING_END_HOUR = 10
FATIGUE_START_HOUR = 16
NEUTRAL_SCORE = 0.5
WELL_TESTED_RECORDS = 10


@dataclass
class StrategyRecommendation:
    strategy: StrategyType
    score: float
    reason: str
    confidence: float

    def to_dict(self) -> dict:
        return {
            "strategy": self.strategy.value,
            "score": self.score,
            "reason": self.reason,
            "confidence": self.confidence,
        }


def default_for_trigger(trigger: Trigger) -> StrategyRecommendation:
    return StrategyRecommendation(
        strategy=TRIGGER_DEFAULTS[trigger],
        score=NEUTRAL_SCORE,
        reason=f"Default strategy for {trigger.value} (no history yet)",
        confidence=0.3,
    )


def select_for_trigger(trigger: Trigger, histories: Histories) -> StrategyRecommendation:
    """Best scorer on this trigger's outcomes; the trigger default when nothing scores."""
    trigger_histories = {
        strategy: [r for r in history if r.trigger == trigger]
        for strategy, history in histories.items()
    }
    comparisons = compare_strategies(trigger_histories)
    if not comparisons or comparisons[0].score == 0:
        return default_for_trigger(trigger)

    best = comparisons[0]
    return StrategyRecommendation(
        strategy=best.strategy,
        score=best.score,
        reason=f"Best performing strategy for {trigger.value} trigger",
        confidence=min(best.sample_size / 10, 1.0),
    )


def _select_between(
    strategies: Sequence[StrategyType], histories: Histories, reason: str
) -> StrategyRecommendation:
    comparisons = compare_strategies({s: histories.get(s, []) for s in strategies})
    best = comparisons[0]
    return StrategyRecommendation(
        strategy=best.strategy, score=best.score, reason=reason, confidence=0.7
    )


def select_for_context(hour: int, histories: Histories) -> StrategyRecommendation:
    """Gentler strategies in the morning, firmer ones once fatigue sets in."""
    if hour < MORNING_END_HOUR:
        return _select_between(
            [StrategyType.ACCOUNTABILITY, StrategyType.MICRO_TASK], histories, "Early morning"
        )
    if hour >= FATIGUE_START_HOUR:
        return _select_between(
            [StrategyType.HARD_BLOCK, StrategyType.TIME_BOXED],
            histories,
            "Late afternoon/evening (fatigue)",
        )

    comparisons = compare_strategies(histories)
    if comparisons:
        strategy, score = comparisons[0].strategy, comparisons[0].score
    else:
        strategy, score = StrategyType.ACCOUNTABILITY, NEUTRAL_SCORE
    return StrategyRecommendation(
        strategy=strategy,
        score=score,
        reason="Peak productivity hours - using most effective strategy",
        confidence=0.8,
    )


def detect_preference(histories: Histories) -> StrategyRecommendation | None:
    """A clear favourite: score > 0.8, ahead of the runner-up by > 0.3, 10+ records."""
    comparisons = compare_strategies(histories)
    if len(comparisons) < 2:
        return None

    best, runner_up = comparisons[0], comparisons[1]
    if (
        best.score > 0.8
        and best.score - runner_up.score > 0.3
        and best.sample_size >= WELL_TESTED_RECORDS
    ):
        return StrategyRecommendation(
            strategy=best.strategy,
            score=best.score,
            reason="Strong user preference detected",
            confidence=0.95,
        )
    return None


def select_for_exploration(
    histories: Histories,
    current: StrategyType,
    rng: random.Random | None = None,
) -> StrategyRecommendation | None:
    underused = [
        strategy
        for strategy, history in histories.items()
        if len(history) < WELL_TESTED_RECORDS and strategy != current
    ]
    if not underused:
        return None

    return StrategyRecommendation(
        strategy=(rng or random).choice(underused),
        score=NEUTRAL_SCORE,
        reason="Exploring underused strategy to gather more data",
        confidence=0.4,
    )
