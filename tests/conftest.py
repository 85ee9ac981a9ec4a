"""Shared test fixtures for Refocus tests.

This module provides common fixtures used across all test modules:
- Database isolation with temporary files
- A controllable clock so time-dependent behavior is deterministic
- Standard profile, activity and intervention-record factories

Usage:
    def test_something(activity_store, make_activity):
        activity_store.insert_activity(make_activity("VS Code", minutes_ago=5))
"""

import os
import tempfile
from collections.abc import Callable, Generator
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from refocus.models import (
    ActivityCategory,
    ActivityRecord,
    Alignment,
    InterventionRecord,
    StrategyType,
    Trigger,
    UserProfile,
    UserResponseType,
)
from refocus.state.activity_store import ActivityStore
from refocus.state.commitment_store import InMemoryCommitmentStore
from refocus.state.profile_store import InMemoryProfileStore


# ─────────────────────────────────────────────────────────────────────────────
# Time
# ─────────────────────────────────────────────────────────────────────────────

# A Wednesday, mid-morning.
NOW = datetime(2026, 3, 11, 10, 30, 0)


class FakeClock:
    """Callable clock that only moves when a test moves it."""

    def __init__(self, start: datetime = NOW):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def now() -> datetime:
    """Fixed reference time shared by factories and clocks."""
    return NOW


@pytest.fixture
def clock() -> FakeClock:
    """Controllable clock starting at NOW."""
    return FakeClock()


# ─────────────────────────────────────────────────────────────────────────────
# Database Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def temp_db() -> Generator[Path, None, None]:
    """Create a temporary database file for testing.

    The database file is automatically deleted after the test completes.

    Yields:
        Path to the temporary database file
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    yield db_path

    # Cleanup (WAL mode leaves -wal/-shm siblings)
    for path in (db_path, Path(f"{db_path}-wal"), Path(f"{db_path}-shm")):
        if path.exists():
            os.unlink(path)


@pytest.fixture
def temp_data_dir(tmp_path: Path) -> Path:
    """Create a temporary data directory structure.

    Returns:
        Path to temporary data directory
    """
    data_dir = tmp_path / "data"
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


@pytest.fixture
def activity_store(temp_db: Path) -> ActivityStore:
    """SQLite activity store on a throwaway file."""
    return ActivityStore(temp_db)


# ─────────────────────────────────────────────────────────────────────────────
# Profile / Commitment Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def profile(now: datetime) -> UserProfile:
    """Default profile: accountability first, micro_task fallback, gentle friend."""
    p = UserProfile.create_default(name="sam", role="developer")
    p.behavior_tracking.last_adapted = now - timedelta(days=30)
    return p


@pytest.fixture
def profile_store(profile: UserProfile) -> InMemoryProfileStore:
    return InMemoryProfileStore(profile)


@pytest.fixture
def commitment_store(clock: FakeClock) -> InMemoryCommitmentStore:
    store = InMemoryCommitmentStore(clock)
    store.set_today("Ship the billing API")
    return store


# ─────────────────────────────────────────────────────────────────────────────
# Record Factories
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def make_activity(now: datetime) -> Callable[..., ActivityRecord]:
    """Build ActivityRecords positioned relative to NOW.

    Returns:
        factory(app, minutes_ago=0, duration=60, category=..., alignment=..., title=...)
    """

    def factory(
        app: str = "VS Code",
        minutes_ago: float = 0,
        duration: float = 60,
        category: ActivityCategory = ActivityCategory.CODING,
        alignment: Alignment = Alignment.ON_TRACK,
        title: str = "billing.py",
        url: str | None = None,
    ) -> ActivityRecord:
        return ActivityRecord(
            timestamp=now - timedelta(minutes=minutes_ago),
            app=app,
            window_title=title,
            url=url,
            duration=duration,
            category=category,
            alignment=alignment,
            commitment="Ship the billing API",
        )

    return factory


@pytest.fixture
def make_record(now: datetime) -> Callable[..., InterventionRecord]:
    """Build InterventionRecords.

    Returns:
        factory(response, time_to_refocus=30, strategy=..., trigger=..., minutes_ago=0)
    """

    def factory(
        response: UserResponseType = UserResponseType.COMPLIED,
        time_to_refocus: float = 30,
        strategy: StrategyType = StrategyType.ACCOUNTABILITY,
        trigger: Trigger = Trigger.CONTEXT_SWITCH,
        minutes_ago: float = 0,
    ) -> InterventionRecord:
        return InterventionRecord(
            timestamp=now - timedelta(minutes=minutes_ago),
            trigger=trigger,
            style_used=strategy,
            user_response=response,
            time_to_refocus=time_to_refocus,
        )

    return factory
