"""Tests for refocus/learning/adaptive_learner.py

Key behaviors:
- No adaptation before the current strategy has 10 outcomes
- Adaptation needs a struggling current strategy, a recommended candidate,
  and confidence strictly above 0.7
- Every switch is logged in the profile's adaptation history
"""

import pytest

from refocus.learning.adaptive_learner import AdaptiveLearner, adaptation_confidence
from refocus.learning.behavior_tracker import BehaviorTracker
from refocus.models import StrategyType, UserResponseType
from refocus.state.profile_store import InMemoryProfileStore

ACCOUNTABILITY = StrategyType.ACCOUNTABILITY
MICRO_TASK = StrategyType.MICRO_TASK


@pytest.fixture
def tracker(profile_store, clock) -> BehaviorTracker:
    return BehaviorTracker(profile_store, clock)


@pytest.fixture
def learner(profile_store, tracker, clock) -> AdaptiveLearner:
    return AdaptiveLearner(profile_store, tracker, clock=clock)


def _seed(tracker, make_record, strategy, response, count, time_to_refocus):
    for _ in range(count):
        tracker.record(make_record(response, time_to_refocus, strategy))


class TestCheckAndAdapt:
    """Tests for the gated automatic switch."""

    def test_needs_ten_outcomes(self, learner, tracker, make_record):
        """Should not adapt before the current strategy has 10 outcomes."""
        _seed(tracker, make_record, ACCOUNTABILITY, UserResponseType.OVERRODE, 9, 300)
        _seed(tracker, make_record, MICRO_TASK, UserResponseType.COMPLIED, 20, 10)

        assert learner.check_and_adapt() is None

    def test_adapts_on_strong_evidence(self, learner, tracker, profile_store, make_record, clock):
        """Should switch to a well-sampled, clearly better strategy."""
        _seed(tracker, make_record, ACCOUNTABILITY, UserResponseType.OVERRODE, 10, 300)
        _seed(tracker, make_record, MICRO_TASK, UserResponseType.COMPLIED, 20, 10)

        event = learner.check_and_adapt()

        assert event.from_strategy == ACCOUNTABILITY
        assert event.to_strategy == MICRO_TASK
        assert event.confidence == pytest.approx(1.0)
        assert "frequently overriding current strategy" in event.reason
        assert "micro_task shows 100% better compliance" in event.reason

        tracking = profile_store.get().behavior_tracking
        assert tracking.current_strategy == MICRO_TASK
        assert tracking.last_adapted == clock.now
        assert tracking.adaptations == [event]

    def test_healthy_strategy_is_kept(self, learner, tracker, make_record):
        """Should not adapt when the current strategy is working."""
        _seed(tracker, make_record, ACCOUNTABILITY, UserResponseType.COMPLIED, 10, 30)
        _seed(tracker, make_record, MICRO_TASK, UserResponseType.COMPLIED, 20, 5)

        assert learner.check_and_adapt() is None

    def test_below_confidence(self, learner, tracker, make_record):
        """Should not adapt on a thinly sampled candidate."""
        _seed(tracker, make_record, ACCOUNTABILITY, UserResponseType.OVERRODE, 10, 300)
        _seed(tracker, make_record, MICRO_TASK, UserResponseType.COMPLIED, 5, 10)

        histories = tracker.histories_by_strategy()
        assert adaptation_confidence(histories, ACCOUNTABILITY, MICRO_TASK) == pytest.approx(0.625)
        assert learner.check_and_adapt() is None

    def test_disabled_in_profile(self, make_record, profile, clock):
        """Should respect the profile's adaptation switch."""
        profile.learning.adaptation_enabled = False
        store = InMemoryProfileStore(profile)
        tracker = BehaviorTracker(store, clock)
        _seed(tracker, make_record, ACCOUNTABILITY, UserResponseType.OVERRODE, 10, 300)
        _seed(tracker, make_record, MICRO_TASK, UserResponseType.COMPLIED, 20, 10)

        assert AdaptiveLearner(store, tracker, clock=clock).check_and_adapt() is None

    def test_no_profile(self, clock):
        """Should do nothing without a profile."""
        store = InMemoryProfileStore()
        learner = AdaptiveLearner(store, BehaviorTracker(store, clock), clock=clock)

        assert learner.check_and_adapt() is None
        assert learner.force_adapt(MICRO_TASK, "testing") is None


class TestManualAndStatus:
    """Tests for force_adapt and the status helpers."""

    def test_force_adapt(self, learner, profile_store):
        """Should switch unconditionally with full confidence."""
        event = learner.force_adapt(StrategyType.TIME_BOXED, "trying time boxes")

        assert event.reason == "Manual override: trying time boxes"
        assert event.confidence == 1.0
        assert profile_store.get().behavior_tracking.current_strategy == StrategyType.TIME_BOXED

    def test_ready_for_adaptation(self, learner, tracker, make_record):
        """Should be ready once 20 outcomes exist across all strategies."""
        _seed(tracker, make_record, ACCOUNTABILITY, UserResponseType.COMPLIED, 19, 30)
        assert not learner.is_ready_for_adaptation()

        _seed(tracker, make_record, MICRO_TASK, UserResponseType.COMPLIED, 1, 30)
        assert learner.is_ready_for_adaptation()

    def test_days_since_last_adaptation(self, learner):
        """Should count whole days since the last switch."""
        assert learner.days_since_last_adaptation() == 30

    def test_current_effectiveness(self, learner, tracker, make_record):
        """Should score every strategy, untried ones at 0."""
        _seed(tracker, make_record, MICRO_TASK, UserResponseType.COMPLIED, 3, 300)

        scores = learner.current_effectiveness()

        assert scores[MICRO_TASK] == pytest.approx(0.4)
        assert scores[StrategyType.HARD_BLOCK] == 0.0
