"""Learning - adapting interventions to what actually works

Philosophy:
    Every intervention is an experiment. Record the outcome, score each
    strategy on it, and switch only when the evidence is clear. One bad
    afternoon should never change how the user is treated.

Components:
    effectiveness.py: Pure scoring, trends, and strategy comparison
    behavior_tracker.py: Append-only outcome log with query helpers
    adaptive_learner.py: Gated, confidence-checked strategy switching
    strategy_selector.py: Per-trigger and time-of-day recommendations
    insights.py: Weekly patterns and recommendations report

Configuration: args/refocus.yaml (learning)
"""

from refocus.learning.adaptive_learner import AdaptiveLearner
from refocus.learning.behavior_tracker import BehaviorTracker
from refocus.learning.effectiveness import (
    StrategyComparison,
    calculate_metrics,
    calculate_score,
    calculate_trend,
    compare_strategies,
    needs_adjustment,
    recommend_strategy,
)
from refocus.learning.insights import InsightGenerator, WeeklyInsight
from refocus.learning.strategy_selector import StrategyRecommendation

__all__ = [
    "AdaptiveLearner",
    "BehaviorTracker",
    "InsightGenerator",
    "StrategyComparison",
    "StrategyRecommendation",
    "WeeklyInsight",
    "calculate_metrics",
    "calculate_score",
    "calculate_trend",
    "compare_strategies",
    "needs_adjustment",
    "recommend_strategy",
]
