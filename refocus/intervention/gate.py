"""
Intervention Gate

Decides whether a detected pattern deserves an interruption right now, and if
so runs one intervention end to end: strategy selection, presentation,
outcome logging, cooldown refresh.

Cooldowns live in a process-local KeyedTTLStore, keyed by pattern type (or
`productive_procrastination` for results from the companion detector). An
off-track verdict additionally honours the `off_track` cooldown. Cooldowns
reset when the process restarts.
"""

from collections.abc import Callable
from datetime import datetime

from refocus.config import GateConfig
from refocus.detection.pattern_detector import PatternDetector
from refocus.detection.procrastination import ProductiveProcrastinationDetector
from refocus.intervention.engine import StrategyEngine
from refocus.intervention.notifier import InterventionPresenter
from refocus.learning.behavior_tracker import BehaviorTracker
from refocus.logging_config import get_logger
from refocus.models import (
    Alignment,
    AlignmentResult,
    InterventionRecord,
    PatternDetectionResult,
    PatternOrigin,
    PatternType,
    Trigger,
    UserProfile,
)
from refocus.state.activity_store import ActivityStore
from refocus.state.commitment_store import CommitmentStore
from refocus.state.keyed_store import KeyedTTLStore

logger = get_logger(__name__)

OFF_TRACK_KEY = "off_track"
PRODUCTIVE_PROCRASTINATION_KEY = "productive_procrastination"

PATTERN_TRIGGERS = {
    PatternType.PLANNING_LOOP: Trigger.PLANNING_PROCRASTINATION,
    PatternType.RESEARCH_RABBIT_HOLE: Trigger.RESEARCH_RABBIT_HOLE,
    PatternType.CONTEXT_SWITCHING: Trigger.CONTEXT_SWITCH,
}


def pattern_to_trigger(pattern_type: PatternType) -> Trigger:
    return PATTERN_TRIGGERS.get(pattern_type, Trigger.SHINY_OBJECT)


def cooldown_key(pattern: PatternDetectionResult) -> str:
    if pattern.origin == PatternOrigin.PRODUCTIVE_PROCRASTINATION:
        return PRODUCTIVE_PROCRASTINATION_KEY
    return pattern.pattern_type.value


class InterventionGate:
    def __init__(
        self,
        engine: StrategyEngine,
        presenter: InterventionPresenter,
        tracker: BehaviorTracker,
        pattern_detector: PatternDetector,
        procrastination_detector: ProductiveProcrastinationDetector,
        config: GateConfig | None = None,
        activity_store: ActivityStore | None = None,
        commitment_store: CommitmentStore | None = None,
        cooldowns: KeyedTTLStore | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.engine = engine
        self.presenter = presenter
        self.tracker = tracker
        self.pattern_detector = pattern_detector
        self.procrastination_detector = procrastination_detector
        self.config = config or GateConfig()
        self.activity_store = activity_store
        self.commitment_store = commitment_store
        self._clock = clock
        self.cooldowns = cooldowns if cooldowns is not None else KeyedTTLStore(clock)

    def cooldown_seconds(self, key: str) -> float:
        minutes = self.config.cooldown_minutes.minutes_for(key)
        if minutes is None:
            minutes = self.config.default_cooldown_minutes
        return minutes * 60

    def in_cooldown(self, key: str, now: datetime | None = None) -> bool:
        return self.cooldowns.contains(key, now or self._clock())

    def meets_threshold(self, pattern: PatternDetectionResult) -> bool:
        """Delegate to the detector that produced the result."""
        if pattern.origin == PatternOrigin.PRODUCTIVE_PROCRASTINATION:
            return self.procrastination_detector.meets_threshold(pattern)
        return self.pattern_detector.meets_threshold(pattern)

    def should_intervene(
        self,
        pattern: PatternDetectionResult,
        alignment: AlignmentResult,
        now: datetime | None = None,
    ) -> bool:
        if not pattern.detected:
            return False

        now = now or self._clock()
        if self.in_cooldown(cooldown_key(pattern), now):
            return False
        if alignment.alignment == Alignment.OFF_TRACK and self.in_cooldown(OFF_TRACK_KEY, now):
            return False

        return self.meets_threshold(pattern)

    async def trigger_intervention(
        self,
        profile: UserProfile,
        pattern: PatternDetectionResult,
        alignment: AlignmentResult,
        current_activity: str,
        commitment: str,
        activity_id: int | None = None,
    ) -> InterventionRecord | None:
        """
        Select, present and record one intervention.

        Returns the logged InterventionRecord, or None when the prompt was
        suppressed because another one is still open.
        """
        trigger = pattern_to_trigger(pattern.pattern_type)
        result = self.engine.select(profile, trigger, current_activity, commitment, self._clock())

        outcome = await self.presenter.present(result, commitment)
        if outcome is None:
            return None

        record = InterventionRecord(
            timestamp=outcome.shown_at,
            trigger=trigger,
            style_used=result.type,
            user_response=outcome.response.type,
            time_to_refocus=outcome.time_to_refocus,
        )
        self.tracker.record(record)

        if self.activity_store is not None:
            self.activity_store.insert_intervention(
                timestamp=record.timestamp,
                trigger=record.trigger,
                strategy=record.style_used,
                user_response=record.user_response,
                time_to_refocus=record.time_to_refocus,
                activity_id=activity_id,
            )

        if outcome.response.capture_as_footnote and self.commitment_store is not None:
            self.commitment_store.add_footnote(current_activity)

        self._refresh_cooldowns(pattern, alignment)

        logger.info(
            "intervention_recorded",
            pattern=pattern.pattern_type.value,
            trigger=trigger.value,
            strategy=result.type.value,
            response=record.user_response.value,
            time_to_refocus=round(record.time_to_refocus, 1),
        )
        return record

    def _refresh_cooldowns(self, pattern: PatternDetectionResult, alignment: AlignmentResult) -> None:
        now = self._clock()
        key = cooldown_key(pattern)
        self.cooldowns.set(key, now, self.cooldown_seconds(key), now=now)
        if alignment.alignment == Alignment.OFF_TRACK:
            self.cooldowns.set(OFF_TRACK_KEY, now, self.cooldown_seconds(OFF_TRACK_KEY), now=now)
