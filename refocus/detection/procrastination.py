"""
Productive procrastination: work that feels useful but is not the commitment.

Flags sustained coding, planning or research that the alignment classifier
marked as productive_procrastination, and labels it by the dominant category
so the rest of the pipeline can treat it like the matching activity pattern.
"""

from collections import Counter
from collections.abc import Sequence
from datetime import datetime, timedelta

from refocus.config import ProductiveProcrastinationConfig
from refocus.models import (
    ActivityCategory,
    ActivityRecord,
    Alignment,
    PatternDetectionResult,
    PatternEvidence,
    PatternOrigin,
    PatternType,
)

PRODUCTIVE_CATEGORIES = {
    ActivityCategory.CODING,
    ActivityCategory.PLANNING,
    ActivityCategory.RESEARCH,
}

# dominant category -> (reported pattern, recommendation)
CATEGORY_LABELS = {
    ActivityCategory.PLANNING: (PatternType.PLANNING_LOOP, "Lots of planning. Ready to build?"),
    ActivityCategory.RESEARCH: (
        PatternType.RESEARCH_RABBIT_HOLE,
        "Research is helpful, but have you started coding?",
    ),
    # yak shaving
    ActivityCategory.CODING: (
        PatternType.CONTEXT_SWITCHING,
        "This refactoring is nice, but does it help with your main task?",
    ),
}
DEFAULT_LABEL = (PatternType.PLANNING_LOOP, "This feels productive, but is it your main focus?")

PROCRASTINATION_TYPES = {
    ActivityCategory.PLANNING: "planning_instead_of_doing",
    ActivityCategory.RESEARCH: "research_instead_of_doing",
    ActivityCategory.CODING: "yak_shaving",
}


def dominant_category(records: Sequence[ActivityRecord]) -> ActivityCategory | None:
    """Most frequent category; ties go to whichever appeared first."""
    counts = Counter(r.category for r in records)
    if not counts:
        return None
    return counts.most_common(1)[0][0]


def identify_procrastination_type(records: Sequence[ActivityRecord]) -> str:
    return PROCRASTINATION_TYPES.get(dominant_category(records), "productive_procrastination")


class ProductiveProcrastinationDetector:
    def __init__(self, config: ProductiveProcrastinationConfig | None = None):
        self.config = config or ProductiveProcrastinationConfig()

    def detect(
        self, window: Sequence[ActivityRecord], now: datetime | None = None
    ) -> PatternDetectionResult:
        now = now or datetime.now()
        cutoff = now - timedelta(minutes=self.config.window_minutes)

        flagged = [
            r
            for r in window
            if cutoff <= r.timestamp <= now
            and r.category in PRODUCTIVE_CATEGORIES
            and r.alignment == Alignment.PRODUCTIVE_PROCRASTINATION
        ]
        total_duration = sum(r.duration for r in flagged)

        if total_duration < self.config.min_duration_seconds or not flagged:
            return PatternDetectionResult.none(origin=PatternOrigin.PRODUCTIVE_PROCRASTINATION)

        pattern_type, recommendation = CATEGORY_LABELS.get(dominant_category(flagged), DEFAULT_LABEL)
        return PatternDetectionResult(
            pattern_type=pattern_type,
            confidence=min(total_duration / self.config.full_confidence_seconds, 1.0),
            evidence=PatternEvidence(
                duration=total_duration,
                frequency=len(flagged),
                recent_activities=[r.to_snapshot() for r in flagged[:5]],
            ),
            recommendation=recommendation,
            origin=PatternOrigin.PRODUCTIVE_PROCRASTINATION,
        )

    def meets_threshold(self, result: PatternDetectionResult) -> bool:
        if result.origin != PatternOrigin.PRODUCTIVE_PROCRASTINATION or not result.detected:
            return False
        return (result.evidence.duration or 0) >= self.config.min_duration_seconds
