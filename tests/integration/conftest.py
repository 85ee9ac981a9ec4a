"""
Integration test fixtures for Refocus.

Provides fixtures specific to integration testing:
- Replay files of recorded snapshots
- A fully wired FocusLoop over in-memory profile/commitment stores
  and a throwaway SQLite activity log
"""

import json
from collections.abc import Callable
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from refocus.config import RefocusConfig
from refocus.daemon.runner import FocusLoop
from refocus.daemon.sources import ReplayActivitySource


# ─────────────────────────────────────────────────────────────────────────────
# Replay Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def write_replay(tmp_path: Path) -> Callable[..., Path]:
    """Write snapshots to a JSONL replay file.

    Returns:
        factory(rows, name="replay.jsonl") where each row is a dict or a raw string
    """

    def factory(rows: list, name: str = "replay.jsonl") -> Path:
        path = tmp_path / name
        lines = [row if isinstance(row, str) else json.dumps(row) for row in rows]
        path.write_text("\n".join(lines) + "\n")
        return path

    return factory


@pytest.fixture
def planning_session(now: datetime) -> list[dict]:
    """Four Notion pages, six minutes apart, touching the commitment only loosely."""
    start = now - timedelta(minutes=30)
    titles = ["billing roadmap", "billing milestones", "billing estimates", "billing roadmap v2"]
    return [
        {
            "timestamp": (start + timedelta(minutes=6 * i)).isoformat(),
            "app": "Notion",
            "window_title": title,
        }
        for i, title in enumerate(titles)
    ]


# ─────────────────────────────────────────────────────────────────────────────
# Loop Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def make_loop(activity_store, profile_store, commitment_store, clock) -> Callable[..., FocusLoop]:
    """Build a FocusLoop over a replay file with the shared test stores."""

    def factory(path: Path, config: RefocusConfig | None = None, notifier=None) -> FocusLoop:
        return FocusLoop(
            config=config or RefocusConfig(),
            source=ReplayActivitySource(path),
            activity_store=activity_store,
            profile_store=profile_store,
            commitment_store=commitment_store,
            notifier=notifier,
            clock=clock,
        )

    return factory
