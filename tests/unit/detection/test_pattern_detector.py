"""Tests for refocus/detection/pattern_detector.py and refocus/detection/procrastination.py

Key behaviors:
- Planning loop fires iff >= 3 productive-procrastination planning records
  totalling >= 15 minutes fall in the last 30 minutes
- Research sessions are contiguous research records; the longest one is scored
- Context switching needs confidence above 0.5
- Fixed priority order: planning, research, switching
- Productive procrastination fires at >= 15 minutes of flagged productive work
"""

import pytest

from refocus.config import DetectionConfig
from refocus.detection.pattern_detector import (
    PatternDetector,
    find_research_sessions,
    session_duration,
)
from refocus.detection.procrastination import (
    ProductiveProcrastinationDetector,
    dominant_category,
    identify_procrastination_type,
)
from refocus.models import (
    ActivityCategory,
    Alignment,
    PatternDetectionResult,
    PatternEvidence,
    PatternOrigin,
    PatternType,
)


@pytest.fixture
def detector() -> PatternDetector:
    return PatternDetector(DetectionConfig())


def _planning(make_activity, minutes_ago, duration):
    return make_activity(
        "Notion",
        minutes_ago=minutes_ago,
        duration=duration,
        category=ActivityCategory.PLANNING,
        alignment=Alignment.PRODUCTIVE_PROCRASTINATION,
        title="Q3 roadmap",
    )


def _research(
    make_activity, minutes_ago, duration, url="https://docs.python.org", alignment=Alignment.ON_TRACK
):
    return make_activity(
        "Chrome",
        minutes_ago=minutes_ago,
        duration=duration,
        category=ActivityCategory.RESEARCH,
        alignment=alignment,
        title="Documentation",
        url=url,
    )


# ─────────────────────────────────────────────────────────────────────────────
# Planning Loop
# ─────────────────────────────────────────────────────────────────────────────


class TestPlanningLoop:
    """Tests for planning-loop detection."""

    def test_fires_at_threshold(self, detector, make_activity, now):
        """Should fire with exactly 3 records totalling 15 minutes."""
        window = [_planning(make_activity, m, 300) for m in (25, 15, 5)]

        result = detector.detect_planning_loop(window, now)

        assert result.pattern_type == PatternType.PLANNING_LOOP
        assert result.confidence == pytest.approx(0.3)
        assert result.evidence.frequency == 3
        assert result.evidence.duration == 900
        assert result.recommendation == "You've been planning for a while. Ready to execute?"

    def test_needs_enough_occurrences(self, detector, make_activity, now):
        """Should not fire with only two records, however long."""
        window = [_planning(make_activity, m, 1200) for m in (20, 10)]

        assert not detector.detect_planning_loop(window, now).detected

    def test_needs_enough_duration(self, detector, make_activity, now):
        """Should not fire when the records total under 15 minutes."""
        window = [_planning(make_activity, m, 299) for m in (25, 15, 5)]

        assert not detector.detect_planning_loop(window, now).detected

    def test_ignores_on_track_planning(self, detector, make_activity, now):
        """Should only count planning the classifier flagged as procrastination."""
        window = [
            make_activity("Notion", minutes_ago=m, duration=600, category=ActivityCategory.PLANNING)
            for m in (25, 15, 5)
        ]

        assert not detector.detect_planning_loop(window, now).detected

    def test_ignores_records_outside_window(self, detector, make_activity, now):
        """Should only look at the last 30 minutes."""
        window = [_planning(make_activity, m, 600) for m in (45, 40, 5)]

        assert not detector.detect_planning_loop(window, now).detected

    def test_confidence_caps_at_one(self, detector, make_activity, now):
        """Should cap confidence at 1.0 and keep five evidence samples."""
        window = [_planning(make_activity, m, 120) for m in range(24, 0, -2)]

        result = detector.detect_planning_loop(window, now)

        assert result.confidence == 1.0
        assert len(result.evidence.recent_activities) == 5


# ─────────────────────────────────────────────────────────────────────────────
# Research Rabbit Hole
# ─────────────────────────────────────────────────────────────────────────────


class TestResearchRabbitHole:
    """Tests for research-session detection."""

    def test_sessions_split_on_gap(self, make_activity):
        """Should start a new session after a 5-minute gap."""
        records = [
            _research(make_activity, 60, 600),  # ends 50 min ago
            _research(make_activity, 47, 600),  # gap 3 min, same session; ends 37 min ago
            _research(make_activity, 32, 60),  # gap exactly 5 min, new session
        ]

        sessions = find_research_sessions(records, max_gap_seconds=300)

        assert [len(s) for s in sessions] == [2, 1]
        assert session_duration(sessions[0]) == 23 * 60

    def test_fires_on_deep_session(self, detector, make_activity, now):
        """Should report a session over an hour with confidence 0.7."""
        window = [_research(make_activity, 90, 2000), _research(make_activity, 56, 2000)]

        result = detector.detect_research_rabbit_hole(window, now)

        assert result.pattern_type == PatternType.RESEARCH_RABBIT_HOLE
        assert result.confidence == pytest.approx(0.7)
        assert result.evidence.frequency == 2

    def test_single_long_record_is_deep_session(self, detector, make_activity, now):
        """Should measure a session by its span, so one 65-minute record is deep."""
        window = [_research(make_activity, 70, 65 * 60)]

        result = detector.detect_research_rabbit_hole(window, now)

        assert result.pattern_type == PatternType.RESEARCH_RABBIT_HOLE
        assert result.confidence == pytest.approx(0.7)
        assert result.evidence.duration == 65 * 60

    def test_moderate_session_alone_is_not_enough(self, detector, make_activity, now):
        """Should not fire on 30-60 minutes without a tab explosion."""
        window = [_research(make_activity, 45, 2400)]

        assert not detector.detect_research_rabbit_hole(window, now).detected

    def test_tab_explosion_tips_moderate_session(self, detector, make_activity, now):
        """Should fire when a moderate session spans more than 10 distinct URLs."""
        window = [
            _research(make_activity, 44 - i * 3, 180, url=f"https://docs.example.com/{i}")
            for i in range(11)
        ]

        result = detector.detect_research_rabbit_hole(window, now)

        assert result.pattern_type == PatternType.RESEARCH_RABBIT_HOLE
        assert result.confidence == pytest.approx(0.6)

    def test_no_research(self, detector, make_activity, now):
        """Should report none without research records."""
        assert not detector.detect_research_rabbit_hole([make_activity()], now).detected


# ─────────────────────────────────────────────────────────────────────────────
# Context Switching
# ─────────────────────────────────────────────────────────────────────────────


class TestContextSwitching:
    """Tests for context-switch detection."""

    def test_fires_on_many_short_hops(self, detector, make_activity, now):
        """Should fire with >20 short records across many apps."""
        window = [
            make_activity(f"App{i % 10}", minutes_ago=50 - i * 2, duration=30) for i in range(22)
        ]

        result = detector.detect_context_switching(window, now)

        assert result.pattern_type == PatternType.CONTEXT_SWITCHING
        assert result.confidence == pytest.approx(1.0)
        assert result.evidence.frequency == 22
        assert len(result.evidence.recent_activities) == 10

    def test_switch_count_alone_is_not_enough(self, detector, make_activity, now):
        """Should require more than just a high switch count."""
        window = [
            make_activity(f"App{i % 2}", minutes_ago=50 - i * 2, duration=600) for i in range(22)
        ]

        assert not detector.detect_context_switching(window, now).detected

    def test_empty_window(self, detector, now):
        """Should report none on an empty window."""
        assert detector.detect_context_switching([], now) == PatternDetectionResult.none()


# ─────────────────────────────────────────────────────────────────────────────
# Priority and Thresholds
# ─────────────────────────────────────────────────────────────────────────────


class TestAnalyzeActivity:
    """Tests for the fixed priority order."""

    def test_planning_beats_stronger_rabbit_hole(self, detector, make_activity, now):
        """Should report the planning loop even when research scores higher."""
        window = [
            _research(make_activity, 110, 3000),
            _research(make_activity, 60, 1500),
            *[_planning(make_activity, m, 400) for m in (20, 12, 4)],
        ]

        result = detector.analyze_activity(window, now)

        assert result.pattern_type == PatternType.PLANNING_LOOP
        assert detector.detect_research_rabbit_hole(window, now).confidence > result.confidence

    def test_nothing_detected(self, detector, make_activity, now):
        """Should return none for calm, focused work."""
        window = [make_activity(minutes_ago=m, duration=600) for m in (30, 20, 10)]

        assert detector.analyze_activity(window, now).pattern_type == PatternType.NONE

    def test_meets_threshold_matches_detector(self, detector, make_activity, now):
        """Should accept what the detector produced and reject weaker results."""
        result = detector.detect_planning_loop(
            [_planning(make_activity, m, 300) for m in (25, 15, 5)], now
        )
        weak = PatternDetectionResult(
            pattern_type=PatternType.PLANNING_LOOP,
            confidence=0.9,
            evidence=PatternEvidence(duration=600, frequency=5),
        )

        assert detector.meets_threshold(result)
        assert not detector.meets_threshold(weak)
        assert not detector.meets_threshold(PatternDetectionResult.none())


# ─────────────────────────────────────────────────────────────────────────────
# Productive Procrastination
# ─────────────────────────────────────────────────────────────────────────────


class TestProductiveProcrastination:
    """Tests for the companion detector."""

    def test_fires_at_fifteen_minutes(self, make_activity, now):
        """Should fire once flagged productive work reaches 15 minutes."""
        window = [
            make_activity(
                "VS Code",
                minutes_ago=m,
                duration=450,
                alignment=Alignment.PRODUCTIVE_PROCRASTINATION,
            )
            for m in (20, 10)
        ]

        result = ProductiveProcrastinationDetector().detect(window, now)

        assert result.origin == PatternOrigin.PRODUCTIVE_PROCRASTINATION
        assert result.pattern_type == PatternType.CONTEXT_SWITCHING
        assert result.confidence == pytest.approx(0.5)
        assert result.recommendation.startswith("This refactoring is nice")

    def test_below_threshold(self, make_activity, now):
        """Should report none under 15 minutes, tagged with its origin."""
        window = [
            make_activity(duration=899, alignment=Alignment.PRODUCTIVE_PROCRASTINATION)
        ]

        result = ProductiveProcrastinationDetector().detect(window, now)

        assert not result.detected
        assert result.origin == PatternOrigin.PRODUCTIVE_PROCRASTINATION

    def test_ignores_non_productive_categories(self, make_activity, now):
        """Should not count communication time."""
        window = [
            make_activity(
                "Slack",
                duration=3600,
                category=ActivityCategory.COMMUNICATION,
                alignment=Alignment.PRODUCTIVE_PROCRASTINATION,
            )
        ]

        assert not ProductiveProcrastinationDetector().detect(window, now).detected

    def test_labels_by_dominant_category(self, make_activity, now):
        """Should label research-heavy procrastination as a rabbit hole."""
        window = [
            _research(make_activity, m, 600, alignment=Alignment.PRODUCTIVE_PROCRASTINATION)
            for m in (25, 15)
        ]

        result = ProductiveProcrastinationDetector().detect(window, now)

        assert result.pattern_type == PatternType.RESEARCH_RABBIT_HOLE
        assert result.confidence == pytest.approx(2 / 3)
        assert identify_procrastination_type(window) == "research_instead_of_doing"

    def test_meets_threshold_only_for_own_results(self, make_activity, now):
        """Should reject results from the activity-pattern detector."""
        detector = ProductiveProcrastinationDetector()
        activity_result = PatternDetectionResult(
            pattern_type=PatternType.PLANNING_LOOP,
            evidence=PatternEvidence(duration=5000, frequency=5),
        )

        assert not detector.meets_threshold(activity_result)

    def test_dominant_category_empty(self):
        """Should have no dominant category without records."""
        assert dominant_category([]) is None
