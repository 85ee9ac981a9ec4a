"""Tests for refocus/learning/effectiveness.py

Key behaviors:
- Scores are weighted response rates plus refocus speed, clamped to [0, 1]
- Trends compare the two halves of a history of 10+ records
- A strategy is only recommended with enough data and a clear margin
"""

import pytest

from refocus.learning.effectiveness import (
    calculate_metrics,
    calculate_score,
    calculate_trend,
    compare_strategies,
    needs_adjustment,
    recommend_strategy,
)
from refocus.models import StrategyType, Trend, UserResponseType

COMPLIED = UserResponseType.COMPLIED
OVERRODE = UserResponseType.OVERRODE
IGNORED = UserResponseType.IGNORED


def _history(make_record, responses, time_to_refocus=30, strategy=StrategyType.ACCOUNTABILITY):
    return [make_record(r, time_to_refocus, strategy) for r in responses]


# ─────────────────────────────────────────────────────────────────────────────
# Scoring
# ─────────────────────────────────────────────────────────────────────────────


class TestScore:
    """Tests for calculate_score."""

    def test_empty_history_scores_zero(self):
        """Should score an untried strategy at 0."""
        assert calculate_score([]) == 0.0

    def test_fast_compliance_scores_high(self, make_record):
        """Should score quick compliance above 0.6."""
        history = [make_record(COMPLIED, t) for t in (5, 8, 10, 3, 7)]

        assert calculate_score(history) > 0.6

    def test_slow_rejection_scores_low(self, make_record):
        """Should score slow overrides and ignores below 0.3."""
        history = [
            make_record(OVERRODE, 180),
            make_record(OVERRODE, 240),
            make_record(IGNORED, 300),
            make_record(OVERRODE, 120),
            make_record(IGNORED, 300),
        ]

        assert calculate_score(history) < 0.3

    def test_compliance_beats_override(self, make_record):
        """Should rank complied histories above overridden ones at equal speed."""
        complied = _history(make_record, [COMPLIED] * 5)
        overrode = _history(make_record, [OVERRODE] * 5)

        assert calculate_score(complied) > calculate_score(overrode)

    def test_refocus_time_is_capped(self, make_record):
        """Should treat anything past 300 seconds as no speed credit."""
        slow = _history(make_record, [COMPLIED] * 3, time_to_refocus=300)
        slower = _history(make_record, [COMPLIED] * 3, time_to_refocus=3000)

        assert calculate_score(slow) == calculate_score(slower) == pytest.approx(0.4)

    @pytest.mark.parametrize(
        "responses",
        [[COMPLIED], [OVERRODE], [IGNORED], [COMPLIED, OVERRODE, IGNORED, IGNORED]],
    )
    def test_score_bounded(self, make_record, responses):
        """Should always land in [0, 1]."""
        for seconds in (0, 150, 10_000):
            score = calculate_score(_history(make_record, responses, time_to_refocus=seconds))
            assert 0.0 <= score <= 1.0


# ─────────────────────────────────────────────────────────────────────────────
# Metrics and Trend
# ─────────────────────────────────────────────────────────────────────────────


class TestMetrics:
    """Tests for calculate_metrics and calculate_trend."""

    def test_rates_sum_to_one(self, make_record):
        """Should split every record into exactly one response bucket."""
        metrics = calculate_metrics(
            _history(make_record, [COMPLIED, COMPLIED, OVERRODE, IGNORED, IGNORED, IGNORED])
        )

        total = metrics.compliance_rate + metrics.override_rate + metrics.ignore_rate
        assert total == pytest.approx(1.0)
        assert metrics.ignore_rate == pytest.approx(0.5)

    def test_empty_metrics(self):
        """Should report zeros and a stable trend without history."""
        metrics = calculate_metrics([])

        assert metrics.compliance_rate == 0.0
        assert metrics.recent_trend == Trend.STABLE

    def test_short_history_is_stable(self, make_record):
        """Should not call a trend on fewer than 10 records."""
        history = _history(make_record, [OVERRODE] * 4 + [COMPLIED] * 5, time_to_refocus=5)

        assert calculate_trend(history) == Trend.STABLE

    def test_improving(self, make_record):
        """Should report improving when the recent half scores higher."""
        history = [make_record(OVERRODE, 300) for _ in range(5)]
        history += [make_record(COMPLIED, 10) for _ in range(5)]

        assert calculate_trend(history) == Trend.IMPROVING

    def test_declining(self, make_record):
        """Should report declining when the recent half scores lower."""
        history = [make_record(COMPLIED, 10) for _ in range(5)]
        history += [make_record(IGNORED, 300) for _ in range(5)]

        assert calculate_trend(history) == Trend.DECLINING

    def test_flat(self, make_record):
        """Should report stable when both halves match."""
        assert calculate_trend(_history(make_record, [COMPLIED] * 12)) == Trend.STABLE


# ─────────────────────────────────────────────────────────────────────────────
# Adjustment and Recommendation
# ─────────────────────────────────────────────────────────────────────────────


class TestRecommendation:
    """Tests for needs_adjustment, compare_strategies and recommend_strategy."""

    def test_mostly_overridden_needs_adjustment(self, make_record):
        """Should flag a strategy that is overridden more than half the time."""
        history = _history(make_record, [OVERRODE] * 3 + [COMPLIED] * 2, time_to_refocus=1)

        assert needs_adjustment(history)

    def test_override_rate_alone_needs_adjustment(self, make_record):
        """Should flag more than half overrides even when the score clears the threshold."""
        history = _history(make_record, [OVERRODE] * 6 + [COMPLIED] * 4, time_to_refocus=10)

        assert calculate_trend(history) == Trend.IMPROVING
        assert needs_adjustment(history, threshold=0.0)

    def test_half_overrides_is_not_enough(self, make_record):
        """Should not flag an override rate of exactly one half on its own."""
        history = _history(make_record, [OVERRODE] * 5 + [COMPLIED] * 5, time_to_refocus=10)

        assert calculate_trend(history) == Trend.IMPROVING
        assert not needs_adjustment(history, threshold=0.0)

    def test_healthy_strategy_needs_nothing(self, make_record):
        """Should leave a well-performing strategy alone."""
        history = _history(make_record, [COMPLIED] * 6, time_to_refocus=10)

        assert not needs_adjustment(history)

    def test_compare_orders_by_score(self, make_record):
        """Should put the best scorer first."""
        histories = {
            StrategyType.ACCOUNTABILITY: _history(make_record, [OVERRODE] * 3),
            StrategyType.MICRO_TASK: _history(make_record, [COMPLIED] * 3),
        }

        ranking = compare_strategies(histories)

        assert [c.strategy for c in ranking] == [StrategyType.MICRO_TASK, StrategyType.ACCOUNTABILITY]
        assert ranking[0].sample_size == 3

    def test_recommends_clear_winner(self, make_record):
        """Should recommend a well-sampled strategy that beats current by > 0.2."""
        histories = {
            StrategyType.ACCOUNTABILITY: _history(make_record, [OVERRODE] * 10, 300),
            StrategyType.MICRO_TASK: _history(make_record, [COMPLIED] * 5, 10, StrategyType.MICRO_TASK),
        }

        assert recommend_strategy(histories, StrategyType.ACCOUNTABILITY) == StrategyType.MICRO_TASK

    def test_no_recommendation_when_current_is_best(self, make_record):
        """Should return None when current already scores highest."""
        histories = {
            StrategyType.ACCOUNTABILITY: _history(make_record, [COMPLIED] * 10, 10),
            StrategyType.MICRO_TASK: _history(make_record, [OVERRODE] * 5, 300, StrategyType.MICRO_TASK),
        }

        assert recommend_strategy(histories, StrategyType.ACCOUNTABILITY) is None

    def test_no_recommendation_with_thin_data(self, make_record):
        """Should return None when the winner has fewer than 5 records."""
        histories = {
            StrategyType.ACCOUNTABILITY: _history(make_record, [OVERRODE] * 10, 300),
            StrategyType.MICRO_TASK: _history(make_record, [COMPLIED] * 4, 10, StrategyType.MICRO_TASK),
        }

        assert recommend_strategy(histories, StrategyType.ACCOUNTABILITY) is None

    def test_no_recommendation_with_small_margin(self, make_record):
        """Should return None when the winner is ahead by 0.2 or less."""
        histories = {
            StrategyType.ACCOUNTABILITY: _history(make_record, [COMPLIED] * 10, 300),
            StrategyType.MICRO_TASK: _history(make_record, [COMPLIED] * 6, 150, StrategyType.MICRO_TASK),
        }

        assert recommend_strategy(histories, StrategyType.ACCOUNTABILITY) is None

    def test_no_recommendation_without_histories(self):
        """Should return None for an empty mapping."""
        assert recommend_strategy({}, StrategyType.ACCOUNTABILITY) is None
