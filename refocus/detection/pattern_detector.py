"""
Tool: Pattern Detector
Purpose: Detect distraction patterns over a bounded window of activity records

Patterns are checked in a fixed priority order and the first match wins:
    1. Planning loop: repeated planning that stands in for doing
    2. Research rabbit hole: one long uninterrupted research session
    3. Context switching: many short hops between many apps

The order is a product decision, not a confidence contest. A planning loop
is reported even when a stronger rabbit hole is present in the same window.

Research sessions are measured on record spans rather than start-to-start:
the gap runs from the end of one record to the start of the next, and a
session lasts from its first start to its latest end. A single 65-minute
research record therefore already counts as a deep rabbit hole.

Usage:
    python -m refocus.detection.pattern_detector --hours 2

Dependencies:
    - refocus.config (thresholds)

Output:
    JSON result with success status and the detected pattern
"""

import argparse
import json
from collections import defaultdict
from collections.abc import Sequence
from datetime import datetime, timedelta

from refocus.config import DetectionConfig
from refocus.logging_config import get_logger
from refocus.models import (
    ActivityCategory,
    ActivityRecord,
    Alignment,
    PatternDetectionResult,
    PatternEvidence,
    PatternOrigin,
    PatternType,
)

logger = get_logger(__name__)

PLANNING_LOOP_MESSAGE = "You've been planning for a while. Ready to execute?"
RABBIT_HOLE_MESSAGE = "Research session running long. Found what you need?"
CONTEXT_SWITCH_MESSAGE = "Lots of switching. Try focusing on one thing?"

EVIDENCE_SAMPLE_SIZE = 5
SWITCH_EVIDENCE_SAMPLE_SIZE = 10


def _within(records: Sequence[ActivityRecord], now: datetime, minutes: float) -> list[ActivityRecord]:
    cutoff = now - timedelta(minutes=minutes)
    return [r for r in records if cutoff <= r.timestamp <= now]


def _end(record: ActivityRecord) -> datetime:
    return record.timestamp + timedelta(seconds=record.duration)


def find_research_sessions(
    records: Sequence[ActivityRecord], max_gap_seconds: float
) -> list[list[ActivityRecord]]:
    """
    Group research records into contiguous sessions.

    A record continues the current session when it starts less than
    max_gap_seconds after the previous record ended. Overlaps count as gap 0.
    """
    research = sorted(
        (r for r in records if r.category == ActivityCategory.RESEARCH),
        key=lambda r: r.timestamp,
    )
    sessions: list[list[ActivityRecord]] = []
    for record in research:
        if sessions:
            previous = sessions[-1][-1]
            gap = max(0.0, (record.timestamp - _end(previous)).total_seconds())
            if gap < max_gap_seconds:
                sessions[-1].append(record)
                continue
        sessions.append([record])
    return sessions


def session_duration(session: Sequence[ActivityRecord]) -> float:
    """Wall-clock span of a session: first start to latest end."""
    if not session:
        return 0.0
    latest_end = max(_end(r) for r in session)
    return (latest_end - session[0].timestamp).total_seconds()


class PatternDetector:
    """Stateless detector; every threshold comes from DetectionConfig."""

    def __init__(self, config: DetectionConfig | None = None):
        self.config = config or DetectionConfig()

    def analyze_activity(
        self, window: Sequence[ActivityRecord], now: datetime | None = None
    ) -> PatternDetectionResult:
        """Return the first pattern found in priority order, or `none`."""
        now = now or datetime.now()

        for detect in (
            self.detect_planning_loop,
            self.detect_research_rabbit_hole,
            self.detect_context_switching,
        ):
            result = detect(window, now)
            if result.detected:
                logger.debug(
                    "pattern_detected",
                    pattern=result.pattern_type.value,
                    confidence=round(result.confidence, 2),
                )
                return result

        return PatternDetectionResult.none()

    # ─────────────────────────────────────────────────────────────────────────
    # Individual detectors
    # ─────────────────────────────────────────────────────────────────────────

    def detect_planning_loop(
        self, window: Sequence[ActivityRecord], now: datetime | None = None
    ) -> PatternDetectionResult:
        cfg = self.config.planning_loop
        now = now or datetime.now()

        planning = [
            r
            for r in _within(window, now, cfg.window_minutes)
            if r.category == ActivityCategory.PLANNING
            and r.alignment == Alignment.PRODUCTIVE_PROCRASTINATION
        ]
        occurrences = len(planning)
        total_duration = sum(r.duration for r in planning)

        if occurrences >= cfg.min_occurrences and total_duration >= cfg.min_duration_seconds:
            return PatternDetectionResult(
                pattern_type=PatternType.PLANNING_LOOP,
                confidence=min(occurrences / 10, 1.0),
                evidence=PatternEvidence(
                    duration=total_duration,
                    frequency=occurrences,
                    recent_activities=[r.to_snapshot() for r in planning[:EVIDENCE_SAMPLE_SIZE]],
                ),
                recommendation=PLANNING_LOOP_MESSAGE,
            )

        return PatternDetectionResult.none()

    def detect_research_rabbit_hole(
        self, window: Sequence[ActivityRecord], now: datetime | None = None
    ) -> PatternDetectionResult:
        cfg = self.config.research_rabbit_hole

        sessions = find_research_sessions(window, cfg.max_gap_seconds)
        if not sessions:
            return PatternDetectionResult.none()

        session = max(sessions, key=session_duration)
        duration = session_duration(session)
        urls = {r.url for r in session if r.url}

        confidence = 0.0
        if duration > cfg.moderate_duration_seconds:
            confidence += 0.3
        if duration > cfg.deep_duration_seconds:
            confidence += 0.4
        if len(urls) > cfg.tab_explosion_threshold:
            confidence += 0.3
        confidence = min(confidence, 1.0)

        if confidence > cfg.min_confidence:
            return PatternDetectionResult(
                pattern_type=PatternType.RESEARCH_RABBIT_HOLE,
                confidence=confidence,
                evidence=PatternEvidence(
                    duration=duration,
                    frequency=len(session),
                    recent_activities=[r.to_snapshot() for r in session[:EVIDENCE_SAMPLE_SIZE]],
                ),
                recommendation=RABBIT_HOLE_MESSAGE,
            )

        return PatternDetectionResult.none()

    def detect_context_switching(
        self, window: Sequence[ActivityRecord], now: datetime | None = None
    ) -> PatternDetectionResult:
        cfg = self.config.context_switching
        now = now or datetime.now()

        recent = _within(window, now, cfg.window_minutes)
        if not recent:
            return PatternDetectionResult.none()

        per_app: dict[str, float] = defaultdict(float)
        for record in recent:
            per_app[record.app] += record.duration
        switches = len(recent)
        avg_duration_per_app = sum(per_app.values()) / len(per_app)

        confidence = 0.0
        if switches > cfg.high_switch_count:
            confidence += 0.5
        if avg_duration_per_app < cfg.low_avg_duration_seconds:
            confidence += 0.3
        if len(per_app) > cfg.many_apps:
            confidence += 0.2
        confidence = min(confidence, 1.0)

        if confidence > cfg.min_confidence:
            return PatternDetectionResult(
                pattern_type=PatternType.CONTEXT_SWITCHING,
                confidence=confidence,
                evidence=PatternEvidence(
                    duration=avg_duration_per_app,
                    frequency=switches,
                    recent_activities=[
                        r.to_snapshot() for r in recent[-SWITCH_EVIDENCE_SAMPLE_SIZE:]
                    ],
                ),
                recommendation=CONTEXT_SWITCH_MESSAGE,
            )

        return PatternDetectionResult.none()

    # ─────────────────────────────────────────────────────────────────────────
    # Threshold re-check (used by the intervention gate)
    # ─────────────────────────────────────────────────────────────────────────

    def meets_threshold(self, result: PatternDetectionResult) -> bool:
        """Re-apply this detector's own firing test to a result it produced."""
        if result.origin != PatternOrigin.ACTIVITY_PATTERN:
            return False

        if result.pattern_type == PatternType.PLANNING_LOOP:
            cfg = self.config.planning_loop
            return (
                (result.evidence.frequency or 0) >= cfg.min_occurrences
                and (result.evidence.duration or 0) >= cfg.min_duration_seconds
            )
        if result.pattern_type == PatternType.RESEARCH_RABBIT_HOLE:
            return result.confidence > self.config.research_rabbit_hole.min_confidence
        if result.pattern_type == PatternType.CONTEXT_SWITCHING:
            return result.confidence > self.config.context_switching.min_confidence
        return False


def main():
    from refocus.config import load_config
    from refocus.state.activity_store import ActivityStore

    parser = argparse.ArgumentParser(description="Run pattern detection over the activity log")
    parser.add_argument("--hours", type=float, help="Lookback window (default from config)")
    args = parser.parse_args()

    config = load_config()
    store = ActivityStore(config.storage.resolve(config.storage.activity_db))
    hours = args.hours or config.detection.lookback_hours

    window = store.get_recent_activity(hours)
    result = PatternDetector(config.detection).analyze_activity(window)
    print(json.dumps({"success": True, "window_size": len(window), "pattern": result.to_dict()}, indent=2))


if __name__ == "__main__":
    main()
