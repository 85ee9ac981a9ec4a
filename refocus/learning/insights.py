"""
Tool: Weekly Insights
Purpose: Summarize the week's interventions into patterns and recommendations

Reads the outcome history and the profile's adaptation log; never writes.
Weeks start Monday 00:00 local time.

Usage:
    python -m refocus.learning.insights --action weekly
    python -m refocus.learning.insights --action weekly --format markdown

Dependencies:
    - refocus.learning.behavior_tracker
    - refocus.learning.effectiveness
    - refocus.learning.strategy_selector (per-trigger suggestions)

Output:
    JSON result with success status and data, or a markdown report
"""

import argparse
import json
from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from refocus.learning.behavior_tracker import BehaviorTracker
from refocus.learning.effectiveness import calculate_metrics
from refocus.learning.strategy_selector import select_for_trigger
from refocus.models import (
    InterventionRecord,
    StrategyType,
    Trend,
    Trigger,
    UserResponseType,
)
from refocus.state.profile_store import ProfileStore

WEEK_HISTORY_LIMIT = 200
MIN_RECOMMENDATION_HISTORY = 5

TRIGGER_DESCRIPTIONS = {
    Trigger.SHINY_OBJECT: "getting pulled into shiny new things",
    Trigger.PLANNING_PROCRASTINATION: "planning instead of doing",
    Trigger.CONTEXT_SWITCH: "context switching",
    Trigger.RESEARCH_RABBIT_HOLE: "research rabbit holes",
}

TRIGGER_TIPS = {
    Trigger.SHINY_OBJECT: 'Keep a "later" list to capture ideas without derailing focus',
    Trigger.PLANNING_PROCRASTINATION: 'Try the "2-minute rule" - if you can start in 2 min, do it now',
    Trigger.CONTEXT_SWITCH: "Use focus blocks with specific commitments per block",
    Trigger.RESEARCH_RABBIT_HOLE: "Set strict time limits before researching",
}

WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def week_start(now: datetime) -> datetime:
    monday = now - timedelta(days=now.weekday())
    return monday.replace(hour=0, minute=0, second=0, microsecond=0)


def _time_of_day(hour: int) -> str:
    if hour < 12:
        return "morning"
    if hour < 17:
        return "afternoon"
    return "evening"


@dataclass
class WeeklyInsight:
    week: datetime
    generated_at: datetime
    summary: dict[str, Any]
    patterns: list[str] = field(default_factory=list)
    adaptations: list[dict[str, str]] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "week": self.week.isoformat(),
            "generated_at": self.generated_at.isoformat(),
            "summary": self.summary,
            "patterns": self.patterns,
            "adaptations": self.adaptations,
            "recommendations": self.recommendations,
        }

    def to_markdown(self) -> str:
        lines = [
            "# Weekly Insight",
            "",
            f"Week of {self.week.date().isoformat()}",
            "",
            "## Summary",
            f"- Interventions: {self.summary['total_interventions']}",
            f"- Compliance rate: {round(self.summary['overall_compliance'] * 100)}%",
            f"- Most common trigger: {self.summary['most_common_trigger']}",
            f"- Current strategy: {self.summary['current_strategy']}",
            "",
        ]
        sections = [
            ("## Patterns Detected", self.patterns),
            (
                "## Strategy Adaptations",
                [f"{a['from']} -> {a['to']}: {a['reason']}" for a in self.adaptations],
            ),
            ("## Recommendations", self.recommendations),
        ]
        for heading, items in sections:
            if items:
                lines.append(heading)
                lines.extend(f"- {item}" for item in items)
                lines.append("")
        return "\n".join(lines).rstrip() + "\n"


class InsightGenerator:
    def __init__(
        self,
        profile_store: ProfileStore,
        tracker: BehaviorTracker,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.profile_store = profile_store
        self.tracker = tracker
        self._clock = clock

    def generate_weekly_insight(self) -> WeeklyInsight:
        now = self._clock()
        start = week_start(now)
        history = [
            r for r in self.tracker.get_recent_history(WEEK_HISTORY_LIMIT) if r.timestamp >= start
        ]
        return WeeklyInsight(
            week=start,
            generated_at=now,
            summary=self.summarize(history),
            patterns=self.detect_patterns(history),
            adaptations=self.week_adaptations(start),
            recommendations=self.recommendations(history),
        )

    def summarize(self, history: list[InterventionRecord]) -> dict[str, Any]:
        profile = self.profile_store.get()
        current = (
            profile.behavior_tracking.current_strategy if profile else StrategyType.ACCOUNTABILITY
        )
        triggers = Counter(r.trigger for r in history)
        complied = sum(1 for r in history if r.user_response == UserResponseType.COMPLIED)

        return {
            "total_interventions": len(history),
            "most_common_trigger": triggers.most_common(1)[0][0].value if triggers else "none",
            "overall_compliance": complied / len(history) if history else 0.0,
            "current_strategy": current.value,
        }

    def detect_patterns(self, history: list[InterventionRecord]) -> list[str]:
        if not history:
            return ["No data yet - still learning your patterns"]

        patterns = []
        total = len(history)

        peak_hour, hour_count = Counter(r.timestamp.hour for r in history).most_common(1)[0]
        if hour_count >= total * 0.3:
            patterns.append(
                f"Most distractions happen in the {_time_of_day(peak_hour)} (around {peak_hour}:00)"
            )

        trigger, trigger_count = Counter(r.trigger for r in history).most_common(1)[0]
        if trigger_count >= total * 0.4:
            patterns.append(f"Primary distraction pattern: {TRIGGER_DESCRIPTIONS[trigger]}")

        metrics = calculate_metrics(history)
        if metrics.override_rate > 0.3:
            patterns.append("You often override interventions - considering gentler approaches")
        elif metrics.override_rate < 0.1:
            patterns.append("Interventions are working well - you're responsive to reminders")

        if metrics.average_refocus_time < 60:
            patterns.append("You refocus quickly when reminded (usually < 1 minute)")
        elif metrics.average_refocus_time > 300:
            patterns.append("Refocusing takes time - might need stronger interventions")

        # Only weekdays that actually saw interventions are compared.
        days = Counter(r.timestamp.weekday() for r in history)
        if max(days.values()) > min(days.values()) * 2:
            patterns.append(f"{WEEKDAYS[days.most_common(1)[0][0]]} is your highest-distraction day")

        return patterns

    def week_adaptations(self, start: datetime) -> list[dict[str, str]]:
        profile = self.profile_store.get()
        if profile is None:
            return []

        tracking = profile.behavior_tracking
        events = [e for e in tracking.adaptations if e.timestamp >= start]
        if events:
            return [
                {"from": e.from_strategy.value, "to": e.to_strategy.value, "reason": e.reason}
                for e in events
            ]

        if tracking.last_adapted >= start and tracking.current_strategy != profile.intervention_style.primary:
            return [
                {
                    "from": profile.intervention_style.primary.value,
                    "to": tracking.current_strategy.value,
                    "reason": "Adapted to improve effectiveness",
                }
            ]
        return []

    def recommendations(self, history: list[InterventionRecord]) -> list[str]:
        if len(history) < MIN_RECOMMENDATION_HISTORY:
            return ["Keep going - more data is needed to personalize recommendations"]

        recommendations = []
        metrics = calculate_metrics(history)

        if metrics.compliance_rate < 0.5:
            recommendations.append(
                "Consider adjusting your intervention style - the current approach may be too harsh or too gentle"
            )
        if metrics.override_rate > 0.4:
            recommendations.append(
                "You frequently override interventions - try a gentler communication style"
            )
        if metrics.average_refocus_time > 300:
            recommendations.append(
                "Refocusing takes a while - consider stronger interventions or shorter time-boxes"
            )

        frequency = self.tracker.get_trigger_frequency(7)
        dominant, count = max(frequency.items(), key=lambda item: item[1])
        if count > 0:
            recommendations.append(TRIGGER_TIPS[dominant])
            suggestion = select_for_trigger(dominant, self.tracker.histories_by_strategy())
            recommendations.append(
                f"For {dominant.value}, {suggestion.strategy.value} looks like the best fit ({suggestion.reason})"
            )

        if metrics.recent_trend == Trend.DECLINING:
            recommendations.append("Effectiveness is declining - considering strategy adjustment")
        elif metrics.recent_trend == Trend.IMPROVING:
            recommendations.append("Great progress! You're building better focus habits")

        return recommendations


def main():
    from refocus.config import load_config
    from refocus.state.profile_store import JsonProfileStore

    parser = argparse.ArgumentParser(description="Weekly focus insights")
    parser.add_argument("--action", required=True, choices=["weekly"])
    parser.add_argument("--format", choices=["json", "markdown"], default="json")
    args = parser.parse_args()

    config = load_config()
    store = JsonProfileStore(config.storage.resolve(config.storage.profile_path))
    insight = InsightGenerator(store, BehaviorTracker(store)).generate_weekly_insight()

    if args.format == "markdown":
        print(insight.to_markdown())
    else:
        print(json.dumps({"success": True, **insight.to_dict()}, indent=2))


if __name__ == "__main__":
    main()
