"""
Activity sources.

An ActivitySource reports the foreground activity once per poll. Platform
watchers (window-title polling, browser extensions) plug in here; the
replay source reads recorded snapshots from a JSONL file, one
ActivitySnapshot.to_dict() object per line, so a day can be re-run offline.
"""

import json
import os
from abc import ABC, abstractmethod
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path

from refocus.errors import ActivitySourceError
from refocus.logging_config import get_logger
from refocus.models import ActivitySnapshot

logger = get_logger(__name__)


class ActivitySource(ABC):
    @abstractmethod
    async def get_current_activity(self) -> ActivitySnapshot | None:
        """Current foreground activity, or None when nothing is observable.

        Raises:
            ActivitySourceError: the source cannot be read.
        """

    @abstractmethod
    async def check_permissions(self) -> bool:
        """Whether the source can observe activity at all."""

    @property
    def exhausted(self) -> bool:
        """Finite sources report True once they have nothing left."""
        return False


class ReplayActivitySource(ActivitySource):
    """Replays snapshots from a JSONL file, one per call."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lines: Iterator[str] | None = None
        self._line_no = 0
        self._exhausted = False
        self._last_timestamp: datetime | None = None

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    def clock(self) -> datetime:
        """Timestamp of the latest replayed snapshot; drives time during a replay."""
        return self._last_timestamp or datetime.now()

    async def check_permissions(self) -> bool:
        return self.path.is_file() and os.access(self.path, os.R_OK)

    async def get_current_activity(self) -> ActivitySnapshot | None:
        if self._lines is None:
            try:
                self._lines = iter(self.path.read_text().splitlines())
            except OSError as e:
                raise ActivitySourceError(f"Cannot read replay file {self.path}: {e}") from e

        for line in self._lines:
            self._line_no += 1
            if not line.strip():
                continue
            try:
                snapshot = ActivitySnapshot.from_dict(json.loads(line))
            except (KeyError, TypeError, ValueError) as e:
                raise ActivitySourceError(
                    f"{self.path}:{self._line_no}: invalid snapshot ({e})"
                ) from e
            self._last_timestamp = snapshot.timestamp
            return snapshot

        if not self._exhausted:
            logger.info("replay_exhausted", path=str(self.path), lines=self._line_no)
        self._exhausted = True
        return None
