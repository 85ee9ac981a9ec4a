"""Detection - noticing drift before it becomes the afternoon

Philosophy:
    Distraction rarely looks like distraction. It looks like planning,
    research, or one more small refactor. Detect the shape, not the app.

Components:
    pattern_detector.py: Fixed-priority pattern detection over a window
        - Planning loop (planning marked as productive procrastination)
        - Research rabbit hole (one long contiguous research session)
        - Context switching (many short hops across many apps)

    procrastination.py: Companion detector for sustained productive procrastination
        - Labels by dominant category (planning, research, yak shaving)

    alignment.py: Commitment alignment
        - Rule-based activity categorization
        - Pluggable classifier with TTL cache and keyword fallback

Configuration: args/refocus.yaml (detection, alignment)
"""

from refocus.detection.alignment import (
    AlignmentClassifier,
    CommitmentMatcher,
    KeywordAlignmentClassifier,
    categorize_activity,
    describe_activity,
)
from refocus.detection.pattern_detector import PatternDetector
from refocus.detection.procrastination import (
    ProductiveProcrastinationDetector,
    identify_procrastination_type,
)

__all__ = [
    "AlignmentClassifier",
    "CommitmentMatcher",
    "KeywordAlignmentClassifier",
    "PatternDetector",
    "ProductiveProcrastinationDetector",
    "categorize_activity",
    "describe_activity",
    "identify_procrastination_type",
]
