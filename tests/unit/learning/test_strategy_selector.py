"""Tests for refocus/learning/strategy_selector.py"""

import random

import pytest

from refocus.learning.strategy_selector import (
    TRIGGER_DEFAULTS,
    detect_preference,
    select_for_context,
    select_for_exploration,
    select_for_trigger,
)
from refocus.models import StrategyType, Trigger, UserResponseType


def _records(make_record, count, strategy, response=UserResponseType.COMPLIED, trigger=Trigger.CONTEXT_SWITCH):
    return [make_record(response, 10, strategy, trigger) for _ in range(count)]


class TestSelectForTrigger:
    """Tests for per-trigger recommendations."""

    @pytest.mark.parametrize("trigger", list(Trigger))
    def test_default_without_history(self, trigger):
        """Should fall back to the trigger's default with low confidence."""
        recommendation = select_for_trigger(trigger, {})

        assert recommendation.strategy == TRIGGER_DEFAULTS[trigger]
        assert recommendation.confidence == 0.3

    def test_best_performer_on_that_trigger(self, make_record):
        """Should score only outcomes for the asked trigger."""
        histories = {
            StrategyType.MICRO_TASK: _records(make_record, 5, StrategyType.MICRO_TASK, trigger=Trigger.SHINY_OBJECT),
            StrategyType.HARD_BLOCK: _records(make_record, 4, StrategyType.HARD_BLOCK, trigger=Trigger.PLANNING_PROCRASTINATION),
        }

        recommendation = select_for_trigger(Trigger.PLANNING_PROCRASTINATION, histories)

        assert recommendation.strategy == StrategyType.HARD_BLOCK
        assert recommendation.confidence == pytest.approx(0.4)
        assert recommendation.reason == "Best performing strategy for planning_procrastination trigger"


class TestSelectForContext:
    """Tests for time-of-day recommendations."""

    def test_morning_prefers_gentle(self, make_record):
        """Should choose between accountability and micro tasks before 10:00."""
        histories = {
            StrategyType.HARD_BLOCK: _records(make_record, 5, StrategyType.HARD_BLOCK),
            StrategyType.MICRO_TASK: _records(make_record, 5, StrategyType.MICRO_TASK),
        }

        recommendation = select_for_context(9, histories)

        assert recommendation.strategy == StrategyType.MICRO_TASK
        assert recommendation.reason == "Early morning"

    def test_evening_prefers_firm(self, make_record):
        """Should choose between hard block and time boxes from 16:00."""
        histories = {StrategyType.TIME_BOXED: _records(make_record, 3, StrategyType.TIME_BOXED)}

        recommendation = select_for_context(16, histories)

        assert recommendation.strategy == StrategyType.TIME_BOXED

    def test_peak_hours_use_best(self, make_record):
        """Should use the overall best during the day."""
        histories = {
            StrategyType.ACCOUNTABILITY: _records(make_record, 3, StrategyType.ACCOUNTABILITY, UserResponseType.IGNORED),
            StrategyType.HARD_BLOCK: _records(make_record, 3, StrategyType.HARD_BLOCK),
        }

        assert select_for_context(12, histories).strategy == StrategyType.HARD_BLOCK
        assert select_for_context(12, {}).strategy == StrategyType.ACCOUNTABILITY


class TestPreferenceAndExploration:
    """Tests for detect_preference and select_for_exploration."""

    def test_no_preference_with_one_strategy(self, make_record):
        """Should need at least two strategies to compare."""
        histories = {StrategyType.MICRO_TASK: _records(make_record, 12, StrategyType.MICRO_TASK)}

        assert detect_preference(histories) is None

    def test_no_preference_without_clear_gap(self, make_record):
        """Should not report a preference when strategies score alike."""
        histories = {
            StrategyType.MICRO_TASK: _records(make_record, 12, StrategyType.MICRO_TASK),
            StrategyType.TIME_BOXED: _records(make_record, 12, StrategyType.TIME_BOXED),
        }

        assert detect_preference(histories) is None

    def test_exploration_picks_underused(self, make_record):
        """Should explore only undersampled strategies other than current."""
        histories = {
            StrategyType.ACCOUNTABILITY: _records(make_record, 2, StrategyType.ACCOUNTABILITY),
            StrategyType.MICRO_TASK: _records(make_record, 3, StrategyType.MICRO_TASK),
            StrategyType.TIME_BOXED: _records(make_record, 12, StrategyType.TIME_BOXED),
        }

        recommendation = select_for_exploration(histories, StrategyType.ACCOUNTABILITY, random.Random(7))

        assert recommendation.strategy == StrategyType.MICRO_TASK
        assert recommendation.confidence == 0.4

    def test_nothing_to_explore(self, make_record):
        """Should return None when every other strategy is well tested."""
        histories = {
            StrategyType.ACCOUNTABILITY: [],
            StrategyType.MICRO_TASK: _records(make_record, 10, StrategyType.MICRO_TASK),
        }

        assert select_for_exploration(histories, StrategyType.ACCOUNTABILITY) is None
