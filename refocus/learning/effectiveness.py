"""
Effectiveness scoring for intervention strategies.

Pure functions over InterventionRecord lists. Reporting tools and the
adaptive learner share them.

Score weights:
    +0.4  compliance rate
    +0.3  refocus speed (1 - min(avg refocus, 300s) / 300s)
    -0.2  override rate
    -0.1  ignore rate
Clamped to [0, 1]. Empty history scores 0 with a stable trend.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from refocus.models import (
    EffectivenessMetrics,
    InterventionRecord,
    StrategyType,
    Trend,
    UserResponseType,
)

COMPLIANCE_WEIGHT = 0.4
REFOCUS_WEIGHT = 0.3
OVERRIDE_WEIGHT = -0.2
IGNORE_WEIGHT = -0.1

MAX_REFOCUS_SECONDS = 300
MIN_TREND_HISTORY = 10
TREND_DELTA = 0.1
OVERRIDE_ALARM_RATE = 0.5
MIN_CANDIDATE_HISTORY = 5
MIN_IMPROVEMENT = 0.2


@dataclass
class StrategyComparison:
    strategy: StrategyType
    score: float
    metrics: EffectivenessMetrics
    sample_size: int


def _rates(history: Sequence[InterventionRecord]) -> tuple[float, float, float, float]:
    total = len(history)
    complied = sum(1 for r in history if r.user_response == UserResponseType.COMPLIED)
    overrode = sum(1 for r in history if r.user_response == UserResponseType.OVERRODE)
    ignored = total - complied - overrode
    average_refocus = sum(r.time_to_refocus for r in history) / total
    return complied / total, overrode / total, ignored / total, average_refocus


def _score_from_rates(compliance: float, override: float, ignore: float, avg_refocus: float) -> float:
    refocus_score = 1 - min(avg_refocus, MAX_REFOCUS_SECONDS) / MAX_REFOCUS_SECONDS
    score = (
        COMPLIANCE_WEIGHT * compliance
        + REFOCUS_WEIGHT * refocus_score
        + OVERRIDE_WEIGHT * override
        + IGNORE_WEIGHT * ignore
    )
    return max(0.0, min(1.0, score))


def calculate_score(history: Sequence[InterventionRecord]) -> float:
    if not history:
        return 0.0
    compliance, override, ignore, avg_refocus = _rates(history)
    return _score_from_rates(compliance, override, ignore, avg_refocus)


def calculate_trend(history: Sequence[InterventionRecord]) -> Trend:
    """Compare the recent half of the history against the older half."""
    if len(history) < MIN_TREND_HISTORY:
        return Trend.STABLE

    midpoint = len(history) // 2
    difference = calculate_score(history[midpoint:]) - calculate_score(history[:midpoint])

    if difference > TREND_DELTA:
        return Trend.IMPROVING
    if difference < -TREND_DELTA:
        return Trend.DECLINING
    return Trend.STABLE


def calculate_metrics(history: Sequence[InterventionRecord]) -> EffectivenessMetrics:
    if not history:
        return EffectivenessMetrics()

    compliance, override, ignore, avg_refocus = _rates(history)
    return EffectivenessMetrics(
        compliance_rate=compliance,
        average_refocus_time=avg_refocus,
        override_rate=override,
        ignore_rate=ignore,
        recent_trend=calculate_trend(history),
    )


def needs_adjustment(history: Sequence[InterventionRecord], threshold: float = 0.4) -> bool:
    """Low score, a declining trend, or mostly overrides."""
    metrics = calculate_metrics(history)
    return (
        calculate_score(history) < threshold
        or metrics.recent_trend == Trend.DECLINING
        or metrics.override_rate > OVERRIDE_ALARM_RATE
    )


def compare_strategies(
    histories: Mapping[StrategyType, Sequence[InterventionRecord]],
) -> list[StrategyComparison]:
    """All strategies, best score first. Ties keep the input order."""
    comparisons = [
        StrategyComparison(
            strategy=strategy,
            score=calculate_score(history),
            metrics=calculate_metrics(history),
            sample_size=len(history),
        )
        for strategy, history in histories.items()
    ]
    return sorted(comparisons, key=lambda c: c.score, reverse=True)


def recommend_strategy(
    histories: Mapping[StrategyType, Sequence[InterventionRecord]],
    current: StrategyType,
) -> StrategyType | None:
    """
    Best-scoring strategy, if switching to it is justified.

    Returns None unless the best strategy differs from current, has at least
    five records, and beats current's score by more than 0.2.
    """
    comparisons = compare_strategies(histories)
    if not comparisons:
        return None

    best = comparisons[0]
    improvement = best.score - calculate_score(histories.get(current, []))

    if (
        best.strategy != current
        and improvement > MIN_IMPROVEMENT
        and best.sample_size >= MIN_CANDIDATE_HISTORY
    ):
        return best.strategy
    return None


__all__ = [
    "StrategyComparison",
    "calculate_metrics",
    "calculate_score",
    "calculate_trend",
    "compare_strategies",
    "needs_adjustment",
    "recommend_strategy",
]
