"""
Activity Logger

Turns a stream of ActivitySnapshots into ActivityRecords:
    - consecutive identical snapshots extend the open record instead of duplicating it
    - a transition back-fills the duration of the record it closes
    - finalize() closes the open record on shutdown

Durations are measured between snapshot timestamps so replays are
deterministic.
"""

from datetime import datetime

from refocus.logging_config import get_logger
from refocus.models import ActivityCategory, ActivityRecord, ActivitySnapshot, Alignment
from refocus.state.activity_store import ActivityStore

logger = get_logger(__name__)


class ActivityLogger:
    def __init__(self, store: ActivityStore):
        self.store = store
        self._last_snapshot: ActivitySnapshot | None = None
        self._last_id: int | None = None
        self._started_at: datetime | None = None

    @property
    def current_id(self) -> int | None:
        return self._last_id

    def _elapsed(self, now: datetime) -> float:
        if self._started_at is None:
            return 0.0
        return max(0.0, (now - self._started_at).total_seconds())

    def log_activity(
        self,
        snapshot: ActivitySnapshot,
        category: ActivityCategory,
        alignment: Alignment,
        commitment: str,
    ) -> int:
        """Record a snapshot and return the id of the record it belongs to."""
        now = snapshot.timestamp

        if self._last_id is not None and snapshot.same_activity(self._last_snapshot):
            self.store.update_activity_duration(self._last_id, self._elapsed(now))
            return self._last_id

        if self._last_id is not None:
            self.store.update_activity_duration(self._last_id, self._elapsed(now))

        record = ActivityRecord(
            timestamp=snapshot.timestamp,
            app=snapshot.app,
            window_title=snapshot.window_title,
            url=snapshot.url,
            duration=0,
            category=category,
            alignment=alignment,
            commitment=commitment,
        )
        activity_id = self.store.insert_activity(record)

        self._last_snapshot = snapshot
        self._last_id = activity_id
        self._started_at = now
        logger.debug(
            "activity_logged",
            activity_id=activity_id,
            app=snapshot.app,
            category=category.value,
            alignment=alignment.value,
        )
        return activity_id

    def finalize(self, now: datetime | None = None) -> None:
        """Close the open record, back-filling its duration."""
        if self._last_id is None:
            return
        self.store.update_activity_duration(self._last_id, self._elapsed(now or datetime.now()))
        self._last_snapshot = None
        self._last_id = None
        self._started_at = None
