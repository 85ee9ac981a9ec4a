"""
Tool: Adaptive Learner
Purpose: Switch the active intervention strategy when another one clearly works better

Runs after each recorded outcome, never per tick. Every gate must pass:
    1. adaptation is enabled in the profile
    2. the current strategy has at least 10 recorded outcomes
    3. the current strategy needs adjustment (low score, declining, or mostly overridden)
    4. another strategy is recommended (>= 5 records, beats current by > 0.2)
    5. confidence = mean(data confidence, improvement confidence) > 0.7

Usage:
    python -m refocus.learning.adaptive_learner --action check
    python -m refocus.learning.adaptive_learner --action status
    python -m refocus.learning.adaptive_learner --action force --strategy micro_task --reason "trying it"

Dependencies:
    - refocus.learning.effectiveness
    - refocus.learning.behavior_tracker

Output:
    JSON result with success status and data
"""

import argparse
import json
import sys
from collections.abc import Callable
from datetime import datetime

from refocus.config import LearningConfig
from refocus.learning.behavior_tracker import BehaviorTracker
from refocus.learning.effectiveness import (
    calculate_metrics,
    calculate_score,
    needs_adjustment,
    recommend_strategy,
)
from refocus.logging_config import get_logger
from refocus.models import AdaptationEvent, InterventionRecord, StrategyType, Trend
from refocus.state.profile_store import ProfileStore, SwitchStrategy

logger = get_logger(__name__)

DATA_CONFIDENCE_RECORDS = 20
IMPROVEMENT_CONFIDENCE_DELTA = 0.5


def adaptation_confidence(
    histories: dict[StrategyType, list[InterventionRecord]],
    current: StrategyType,
    candidate: StrategyType,
) -> float:
    data_confidence = min(len(histories[candidate]) / DATA_CONFIDENCE_RECORDS, 1.0)
    improvement = calculate_score(histories[candidate]) - calculate_score(histories[current])
    improvement_confidence = min(improvement / IMPROVEMENT_CONFIDENCE_DELTA, 1.0)
    return (data_confidence + improvement_confidence) / 2


def adaptation_reason(
    histories: dict[StrategyType, list[InterventionRecord]],
    from_strategy: StrategyType,
    to_strategy: StrategyType,
) -> str:
    """Human-readable explanation built from metric deltas."""
    before = calculate_metrics(histories[from_strategy])
    after = calculate_metrics(histories[to_strategy])

    reasons = []
    if before.compliance_rate < 0.5:
        reasons.append("low compliance with current approach")
    if before.override_rate > 0.4:
        reasons.append("frequently overriding current strategy")
    if before.recent_trend == Trend.DECLINING:
        reasons.append("declining effectiveness")
    if after.compliance_rate > before.compliance_rate + 0.2:
        gain = round((after.compliance_rate - before.compliance_rate) * 100)
        reasons.append(f"{to_strategy.value} shows {gain}% better compliance")

    if not reasons:
        reasons.append(f"{to_strategy.value} scores higher than {from_strategy.value}")
    return "; ".join(reasons)


class AdaptiveLearner:
    def __init__(
        self,
        profile_store: ProfileStore,
        tracker: BehaviorTracker,
        config: LearningConfig | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.profile_store = profile_store
        self.tracker = tracker
        self.config = config or LearningConfig()
        self._clock = clock

    def check_and_adapt(self) -> AdaptationEvent | None:
        profile = self.profile_store.get()
        if profile is None or not profile.learning.adaptation_enabled:
            return None

        current = profile.behavior_tracking.current_strategy
        histories = self.tracker.histories_by_strategy()
        current_history = histories[current]

        if len(current_history) < self.config.min_history_for_adaptation:
            return None
        if not needs_adjustment(current_history, self.config.adjustment_threshold):
            return None

        candidate = recommend_strategy(histories, current)
        if candidate is None:
            return None

        confidence = adaptation_confidence(histories, current, candidate)
        if confidence <= self.config.min_adaptation_confidence:
            logger.debug(
                "adaptation_below_confidence",
                current=current.value,
                candidate=candidate.value,
                confidence=round(confidence, 3),
            )
            return None

        event = AdaptationEvent(
            timestamp=self._clock(),
            from_strategy=current,
            to_strategy=candidate,
            reason=adaptation_reason(histories, current, candidate),
            confidence=confidence,
        )
        if not self.profile_store.apply(SwitchStrategy(event=event)):
            return None

        logger.info(
            "strategy_adapted",
            from_strategy=current.value,
            to_strategy=candidate.value,
            confidence=round(confidence, 3),
            reason=event.reason,
        )
        return event

    def force_adapt(self, strategy: StrategyType, reason: str) -> AdaptationEvent | None:
        """Switch unconditionally (manual override). None without a profile."""
        profile = self.profile_store.get()
        if profile is None:
            return None

        event = AdaptationEvent(
            timestamp=self._clock(),
            from_strategy=profile.behavior_tracking.current_strategy,
            to_strategy=StrategyType(strategy),
            reason=f"Manual override: {reason}",
            confidence=1.0,
        )
        if not self.profile_store.apply(SwitchStrategy(event=event)):
            return None
        logger.info("strategy_forced", from_strategy=event.from_strategy.value, to_strategy=event.to_strategy.value)
        return event

    def current_effectiveness(self) -> dict[StrategyType, float]:
        return {s: calculate_score(h) for s, h in self.tracker.histories_by_strategy().items()}

    def is_ready_for_adaptation(self) -> bool:
        if self.profile_store.get() is None:
            return False
        return len(self.tracker.history()) >= self.config.ready_history_size

    def days_since_last_adaptation(self) -> int:
        profile = self.profile_store.get()
        if profile is None:
            return 0
        elapsed = self._clock() - profile.behavior_tracking.last_adapted
        return max(0, elapsed.days)


def main():
    from refocus.config import load_config
    from refocus.state.profile_store import JsonProfileStore

    parser = argparse.ArgumentParser(description="Adaptive strategy learning")
    parser.add_argument("--action", required=True, choices=["check", "status", "force"])
    parser.add_argument("--strategy", choices=[s.value for s in StrategyType])
    parser.add_argument("--reason", default="manual")
    args = parser.parse_args()

    config = load_config()
    store = JsonProfileStore(config.storage.resolve(config.storage.profile_path))
    tracker = BehaviorTracker(store)
    learner = AdaptiveLearner(store, tracker, config.learning)

    if store.get() is None:
        print(json.dumps({"success": False, "error": "No profile found"}))
        sys.exit(1)

    if args.action == "check":
        event = learner.check_and_adapt()
        result = {"success": True, "adapted": event is not None, "event": event.to_dict() if event else None}
    elif args.action == "status":
        result = {
            "success": True,
            "effectiveness": {s.value: round(v, 3) for s, v in learner.current_effectiveness().items()},
            "ready_for_adaptation": learner.is_ready_for_adaptation(),
            "days_since_last_adaptation": learner.days_since_last_adaptation(),
        }
    else:
        if not args.strategy:
            print(json.dumps({"success": False, "error": "--strategy is required"}))
            sys.exit(1)
        event = learner.force_adapt(StrategyType(args.strategy), args.reason)
        result = {"success": event is not None, "event": event.to_dict() if event else None}

    print(json.dumps(result, indent=2))


if __name__ == "__main__":
    main()
