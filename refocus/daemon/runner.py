"""
Tool: Focus Loop (Daemon)
Purpose: Observe activity, detect drift, intervene, and learn, one tick at a time

Per tick:
    1. read the current snapshot from the ActivitySource (failures skip the tick)
    2. categorize it and check alignment with today's commitment
    3. log it (consecutive identical snapshots extend one record)
    4. run pattern detection over the lookback window, falling back to the
       productive procrastination detector when nothing else fires
    5. ask the gate whether to intervene, and if so start the prompt as a
       background task so observation continues while it is open
    6. once the prompt resolves, record the outcome and give the adaptive
       learner a chance to switch

Maintenance (retention cleanup, TTL eviction) runs on its own interval.

Usage:
    python -m refocus.daemon.runner --action run --replay day.jsonl --poll 0
    python -m refocus.daemon.runner --action run --replay day.jsonl --log-file data/refocus.log
    python -m refocus.daemon.runner --action maintenance

Dependencies:
    - refocus.detection, refocus.intervention, refocus.learning, refocus.state

Output:
    Structured logs; JSON summary on exit
"""

import argparse
import asyncio
import json
import signal
import sys
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

from refocus.config import RefocusConfig
from refocus.daemon.sources import ActivitySource
from refocus.detection.alignment import AlignmentClassifier, CommitmentMatcher
from refocus.detection.pattern_detector import PatternDetector
from refocus.detection.procrastination import ProductiveProcrastinationDetector
from refocus.errors import ActivitySourceError
from refocus.intervention.engine import StrategyEngine
from refocus.intervention.gate import InterventionGate
from refocus.intervention.notifier import InterventionPresenter, LogNotifier, Notifier
from refocus.learning.adaptive_learner import AdaptiveLearner
from refocus.learning.behavior_tracker import BehaviorTracker
from refocus.logging_config import get_logger, tick_context
from refocus.models import (
    ActivitySnapshot,
    AdaptationEvent,
    AlignmentResult,
    InterventionRecord,
    PatternDetectionResult,
)
from refocus.state.activity_logger import ActivityLogger
from refocus.state.activity_store import ActivityStore
from refocus.state.commitment_store import CommitmentStore
from refocus.state.keyed_store import KeyedTTLStore
from refocus.state.profile_store import ProfileStore, PruneHistory, default_profile

logger = get_logger(__name__)


@dataclass
class TickResult:
    """
    What one tick observed.

    `prompt` is the background task presenting an intervention, if the gate
    let one through. `record` and `adaptation` are filled in when it finishes.
    """

    snapshot: ActivitySnapshot
    activity_id: int
    alignment: AlignmentResult
    pattern: PatternDetectionResult
    prompt: asyncio.Task | None = None
    record: InterventionRecord | None = None
    adaptation: AdaptationEvent | None = None

    @property
    def intervened(self) -> bool:
        return self.record is not None


class FocusLoop:
    """Wires detection, intervention and learning around one ActivitySource.

    Args:
        config: Validated configuration.
        source: Where snapshots come from.
        activity_store: SQLite activity and intervention log.
        profile_store: Owner of the user profile.
        commitment_store: Today's commitment.
        notifier: Delivery backend; logs only by default.
        classifier: Alignment classifier; keyword matching by default.
        clock: Current time source shared by every component.
    """

    def __init__(
        self,
        config: RefocusConfig,
        source: ActivitySource,
        activity_store: ActivityStore,
        profile_store: ProfileStore,
        commitment_store: CommitmentStore,
        notifier: Notifier | None = None,
        classifier: AlignmentClassifier | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.config = config
        self.source = source
        self.activity_store = activity_store
        self.profile_store = profile_store
        self.commitment_store = commitment_store
        self._clock = clock

        self.activity_logger = ActivityLogger(activity_store)
        self.matcher = CommitmentMatcher(classifier, config.alignment, KeyedTTLStore(clock))
        self.pattern_detector = PatternDetector(config.detection)
        self.procrastination_detector = ProductiveProcrastinationDetector(
            config.detection.productive_procrastination
        )
        self.tracker = BehaviorTracker(profile_store, clock)
        self.learner = AdaptiveLearner(profile_store, self.tracker, config.learning, clock)
        self.presenter = InterventionPresenter(
            notifier or LogNotifier(),
            timeout_seconds=config.gate.prompt_timeout_seconds,
            unresolved_refocus_seconds=config.gate.unresolved_refocus_seconds,
            clock=clock,
        )
        self.gate = InterventionGate(
            engine=StrategyEngine(),
            presenter=self.presenter,
            tracker=self.tracker,
            pattern_detector=self.pattern_detector,
            procrastination_detector=self.procrastination_detector,
            config=config.gate,
            activity_store=activity_store,
            commitment_store=commitment_store,
            clock=clock,
        )

        self.running = False
        self.tasks: list[asyncio.Task] = []
        self.stats = {"ticks": 0, "skipped": 0, "interventions": 0, "adaptations": 0, "errors": 0}
        self._last_maintenance: datetime | None = None

    @classmethod
    def from_config(
        cls,
        config: RefocusConfig,
        source: ActivitySource,
        notifier: Notifier | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> "FocusLoop":
        """Build a loop over the file-backed stores named in `config.storage`."""
        from refocus.state.commitment_store import JsonCommitmentStore
        from refocus.state.profile_store import JsonProfileStore

        storage = config.storage
        return cls(
            config=config,
            source=source,
            activity_store=ActivityStore(storage.resolve(storage.activity_db)),
            profile_store=JsonProfileStore(storage.resolve(storage.profile_path)),
            commitment_store=JsonCommitmentStore(storage.resolve(storage.commitments_path), clock),
            notifier=notifier,
            clock=clock,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # One observation
    # ─────────────────────────────────────────────────────────────────────────

    async def tick(self, now: datetime | None = None) -> TickResult | None:
        """Process one observation. None when the tick was skipped."""
        try:
            snapshot = await self.source.get_current_activity()
        except ActivitySourceError as e:
            logger.warning("activity_source_failed", error=str(e))
            self.stats["skipped"] += 1
            return None

        if snapshot is None:
            self.stats["skipped"] += 1
            return None

        self.stats["ticks"] += 1
        now = now or snapshot.timestamp
        commitment = self.commitment_store.current_text()

        category = self.matcher.categorize(snapshot)
        alignment = await self.matcher.check_alignment(snapshot, commitment)
        activity_id = self.activity_logger.log_activity(
            snapshot, category, alignment.alignment, commitment
        )

        window = self.activity_store.get_recent_activity(
            hours=self.config.detection.lookback_hours, now=now
        )
        pattern = self.pattern_detector.analyze_activity(window, now)
        if not pattern.detected:
            pattern = self.procrastination_detector.detect(window, now)

        result = TickResult(
            snapshot=snapshot, activity_id=activity_id, alignment=alignment, pattern=pattern
        )

        if not self.config.loop.intervention_enabled:
            return result
        if not self.gate.should_intervene(pattern, alignment, now):
            return result

        # The prompt runs beside the loop; the presenter suppresses overlaps.
        result.prompt = asyncio.create_task(self._intervene(result, commitment))
        self.tasks.append(result.prompt)
        result.prompt.add_done_callback(self.tasks.remove)
        # Let the prompt claim the presenter before the next tick
        await asyncio.sleep(0)
        return result

    async def _intervene(self, result: TickResult, commitment: str) -> InterventionRecord | None:
        """Present one intervention, then record it and let the learner react."""
        try:
            profile = self.profile_store.get() or default_profile()
            result.record = await self.gate.trigger_intervention(
                profile,
                result.pattern,
                result.alignment,
                current_activity=result.snapshot.describe(),
                commitment=commitment,
                activity_id=result.activity_id,
            )
            if result.record is None:
                return None

            self.stats["interventions"] += 1
            result.adaptation = self.learner.check_and_adapt()
            if result.adaptation is not None:
                self.stats["adaptations"] += 1
        except Exception as e:
            logger.error("intervention_failed", error=str(e), exc_info=True)
            self.stats["errors"] += 1
        return result.record

    async def wait_for_prompts(self) -> None:
        """Wait until every open prompt has been answered or timed out."""
        while self.tasks:
            await asyncio.gather(*self.tasks, return_exceptions=True)

    # ─────────────────────────────────────────────────────────────────────────
    # Maintenance
    # ─────────────────────────────────────────────────────────────────────────

    def run_maintenance(self, now: datetime | None = None) -> dict[str, Any]:
        """Apply retention to both logs and evict expired cooldowns and cache entries."""
        now = now or self._clock()
        retention_days = self.config.loop.retention_days

        counts = self.activity_store.cleanup(retention_days, now)
        pruned = self.profile_store.apply(PruneHistory(before=now - timedelta(days=retention_days)))
        summary = {
            **counts,
            "profile_pruned": pruned,
            "cooldowns_evicted": self.gate.cooldowns.evict_expired(now),
            "cache_evicted": self.matcher.cache.evict_expired(now),
        }
        self._last_maintenance = now
        logger.info("maintenance_complete", **summary)
        return summary

    def _maintenance_due(self, now: datetime) -> bool:
        if self._last_maintenance is None:
            return True
        interval = timedelta(hours=self.config.loop.maintenance_interval_hours)
        return now - self._last_maintenance >= interval

    # ─────────────────────────────────────────────────────────────────────────
    # Loop
    # ─────────────────────────────────────────────────────────────────────────

    async def run(
        self, max_ticks: int | None = None, poll_interval: float | None = None
    ) -> dict[str, int]:
        """Tick until stopped, the source runs dry, or max_ticks is reached."""
        if not await self.source.check_permissions():
            logger.error("activity_source_unavailable", source=type(self.source).__name__)
            return dict(self.stats)

        interval = self.config.loop.poll_interval_seconds if poll_interval is None else poll_interval
        self.running = True
        logger.info("focus_loop_started", poll_interval=interval)

        while self.running:
            try:
                with tick_context(tick=self.stats["ticks"] + self.stats["skipped"] + 1):
                    await self.tick()
                now = self._clock()
                if self._maintenance_due(now):
                    self.run_maintenance(now)
            except Exception as e:
                logger.error("tick_failed", error=str(e), exc_info=True)
                self.stats["errors"] += 1

            if self.source.exhausted:
                break
            if max_ticks is not None and self.stats["ticks"] + self.stats["skipped"] >= max_ticks:
                break
            await asyncio.sleep(interval)

        self.running = False
        await self.wait_for_prompts()
        self.activity_logger.finalize(self._clock())
        logger.info("focus_loop_stopped", **self.stats)
        return dict(self.stats)

    def stop(self) -> None:
        self.running = False

    def setup_signal_handlers(self) -> None:
        """Stop gracefully on SIGTERM/SIGINT."""

        def signal_handler(signum, frame):
            logger.info("signal_received", signum=signum)
            self.stop()

        signal.signal(signal.SIGTERM, signal_handler)
        signal.signal(signal.SIGINT, signal_handler)


def main():
    from refocus.config import load_config
    from refocus.daemon.sources import ReplayActivitySource
    from refocus.logging_config import setup_logging

    parser = argparse.ArgumentParser(description="Refocus focus loop")
    parser.add_argument("--action", required=True, choices=["run", "maintenance"])
    parser.add_argument("--replay", type=Path, help="JSONL file of recorded snapshots")
    parser.add_argument("--poll", type=float, help="Override the poll interval (seconds)")
    parser.add_argument("--max-ticks", type=int)
    parser.add_argument("--log-file", type=Path, help="Also append JSON log lines to this file")
    args = parser.parse_args()

    setup_logging(log_file=args.log_file)
    config = load_config()

    if args.action == "maintenance":
        # A fresh process has no cooldowns or cached verdicts; only the logs need retention.
        from refocus.state.profile_store import JsonProfileStore

        storage = config.storage
        retention_days = config.loop.retention_days
        now = datetime.now()
        counts = ActivityStore(storage.resolve(storage.activity_db)).cleanup(retention_days, now)
        pruned = JsonProfileStore(storage.resolve(storage.profile_path)).apply(
            PruneHistory(before=now - timedelta(days=retention_days))
        )
        print(json.dumps({"success": True, **counts, "profile_pruned": pruned}, indent=2))
        return

    if args.replay is None:
        print(json.dumps({"success": False, "error": "--replay is required for --action run"}))
        sys.exit(1)

    source = ReplayActivitySource(args.replay)
    loop = FocusLoop.from_config(config, source, clock=source.clock)
    loop.setup_signal_handlers()
    stats = asyncio.run(loop.run(max_ticks=args.max_ticks, poll_interval=args.poll))
    print(json.dumps({"success": True, "stats": stats}, indent=2))


if __name__ == "__main__":
    main()
