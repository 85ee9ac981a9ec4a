"""
Tool: Behavior Tracker
Purpose: Append-only log of intervention outcomes, with query helpers

Outcomes are written through the ProfileStore as RecordOutcome requests;
reads work on profile snapshots. When no profile exists, recording is a
no-op that returns None and every query returns its empty default.

Usage:
    python -m refocus.learning.behavior_tracker --action summary
    python -m refocus.learning.behavior_tracker --action strategy --strategy micro_task
    python -m refocus.learning.behavior_tracker --action triggers --days 7

Dependencies:
    - refocus.learning.effectiveness (per-strategy score refresh)

Output:
    JSON result with success status and data
"""

import argparse
import json
from collections import Counter
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

from refocus.learning.effectiveness import calculate_score
from refocus.logging_config import get_logger
from refocus.models import (
    InterventionRecord,
    StrategyType,
    Trigger,
    UserResponseType,
)
from refocus.state.profile_store import ProfileStore, RecordOutcome

logger = get_logger(__name__)


class BehaviorTracker:
    def __init__(self, profile_store: ProfileStore, clock: Callable[[], datetime] = datetime.now):
        self.profile_store = profile_store
        self._clock = clock

    # ─────────────────────────────────────────────────────────────────────────
    # Writes
    # ─────────────────────────────────────────────────────────────────────────

    def record(self, record: InterventionRecord) -> InterventionRecord | None:
        """Append one outcome and refresh its strategy's score. None without a profile."""
        profile = self.profile_store.get()
        if profile is None:
            logger.debug("outcome_not_recorded_no_profile", strategy=record.style_used.value)
            return None

        strategy_history = [
            r for r in profile.behavior_tracking.intervention_history
            if r.style_used == record.style_used
        ]
        strategy_history.append(record)
        score = calculate_score(strategy_history)

        if not self.profile_store.apply(RecordOutcome(record=record, strategy_score=score)):
            return None
        return record

    def record_intervention(
        self,
        trigger: Trigger,
        strategy: StrategyType,
        user_response: UserResponseType,
        time_to_refocus: float,
    ) -> InterventionRecord | None:
        return self.record(
            InterventionRecord(
                timestamp=self._clock(),
                trigger=Trigger(trigger),
                style_used=StrategyType(strategy),
                user_response=UserResponseType(user_response),
                time_to_refocus=time_to_refocus,
            )
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Views
    # ─────────────────────────────────────────────────────────────────────────

    def history(self) -> list[InterventionRecord]:
        profile = self.profile_store.get()
        if profile is None:
            return []
        return profile.behavior_tracking.intervention_history

    def get_recent_history(self, limit: int = 20) -> list[InterventionRecord]:
        return self.history()[-limit:] if limit > 0 else []

    def get_history_for_strategy(self, strategy: StrategyType) -> list[InterventionRecord]:
        return [r for r in self.history() if r.style_used == strategy]

    def get_history_for_trigger(self, trigger: Trigger) -> list[InterventionRecord]:
        return [r for r in self.history() if r.trigger == trigger]

    def histories_by_strategy(self) -> dict[StrategyType, list[InterventionRecord]]:
        grouped: dict[StrategyType, list[InterventionRecord]] = {s: [] for s in StrategyType}
        for record in self.history():
            grouped[record.style_used].append(record)
        return grouped

    def _last(self, strategy: StrategyType, count: int) -> list[InterventionRecord]:
        history = self.get_history_for_strategy(strategy)
        return history[-count:] if count > 0 else []

    def get_compliance_rate(self, strategy: StrategyType, recent_count: int = 10) -> float:
        history = self._last(strategy, recent_count)
        if not history:
            return 0.0
        complied = sum(1 for r in history if r.user_response == UserResponseType.COMPLIED)
        return complied / len(history)

    def get_average_refocus_time(self, strategy: StrategyType, recent_count: int = 10) -> float:
        history = self._last(strategy, recent_count)
        if not history:
            return 0.0
        return sum(r.time_to_refocus for r in history) / len(history)

    def get_response_pattern(
        self, strategy: StrategyType, recent_count: int = 20
    ) -> dict[UserResponseType, int]:
        pattern = {response: 0 for response in UserResponseType}
        for record in self._last(strategy, recent_count):
            pattern[record.user_response] += 1
        return pattern

    def is_strategy_being_rejected(self, strategy: StrategyType, threshold: float = 0.7) -> bool:
        """Overrode+ignored share of the last 10 records; needs at least 5 samples."""
        pattern = self.get_response_pattern(strategy, 10)
        total = sum(pattern.values())
        if total < 5:
            return False
        rejected = pattern[UserResponseType.OVERRODE] + pattern[UserResponseType.IGNORED]
        return rejected / total >= threshold

    def get_trigger_frequency(self, days_back: int = 7) -> dict[Trigger, int]:
        cutoff = self._clock() - timedelta(days=days_back)
        frequency = {trigger: 0 for trigger in Trigger}
        for record in self.history():
            if record.timestamp >= cutoff:
                frequency[record.trigger] += 1
        return frequency

    def get_summary_stats(self) -> dict[str, Any]:
        history = self.history()
        total = len(history)
        complied = sum(1 for r in history if r.user_response == UserResponseType.COMPLIED)
        triggers = Counter(r.trigger for r in history)
        strategies = Counter(r.style_used for r in history)

        return {
            "total_interventions": total,
            "overall_compliance_rate": complied / total if total else 0.0,
            "average_refocus_time": (
                sum(r.time_to_refocus for r in history) / total if total else 0.0
            ),
            "most_common_trigger": triggers.most_common(1)[0][0].value if triggers else "none",
            "strategies_used": {s.value: strategies.get(s, 0) for s in StrategyType},
        }


def main():
    from refocus.config import load_config
    from refocus.state.profile_store import JsonProfileStore

    parser = argparse.ArgumentParser(description="Inspect intervention outcomes")
    parser.add_argument("--action", required=True, choices=["summary", "strategy", "triggers", "recent"])
    parser.add_argument("--strategy", choices=[s.value for s in StrategyType])
    parser.add_argument("--days", type=int, default=7)
    parser.add_argument("--limit", type=int, default=20)
    args = parser.parse_args()

    config = load_config()
    tracker = BehaviorTracker(JsonProfileStore(config.storage.resolve(config.storage.profile_path)))

    if args.action == "summary":
        result = {"success": True, **tracker.get_summary_stats()}
    elif args.action == "strategy":
        if not args.strategy:
            result = {"success": False, "error": "--strategy is required"}
        else:
            strategy = StrategyType(args.strategy)
            result = {
                "success": True,
                "strategy": strategy.value,
                "compliance_rate": tracker.get_compliance_rate(strategy),
                "average_refocus_time": tracker.get_average_refocus_time(strategy),
                "responses": {k.value: v for k, v in tracker.get_response_pattern(strategy).items()},
                "rejected": tracker.is_strategy_being_rejected(
                    strategy, config.learning.rejection_threshold
                ),
            }
    elif args.action == "triggers":
        result = {
            "success": True,
            "days": args.days,
            "frequency": {k.value: v for k, v in tracker.get_trigger_frequency(args.days).items()},
        }
    else:
        result = {
            "success": True,
            "records": [r.to_dict() for r in tracker.get_recent_history(args.limit)],
        }

    print(json.dumps(result, indent=2))


if __name__ == "__main__":
    main()
