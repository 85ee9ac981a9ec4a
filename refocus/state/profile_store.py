"""
Tool: Profile Store
Purpose: Own the single mutable UserProfile and apply explicit update requests

Everything outside the store works on deep-copy snapshots. Changes come back
as ProfileUpdate requests (RecordOutcome, SwitchStrategy, PruneHistory) so
the tracker, learner and maintenance jobs never write through a shared
reference.

Usage:
    python -m refocus.state.profile_store --action show
    python -m refocus.state.profile_store --action init --name alice --tone direct
    python -m refocus.state.profile_store --action reset

Dependencies:
    - json (stdlib)
    - structlog (via refocus.logging_config)

Output:
    JSON result with success status and data
"""

import argparse
import json
import os
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from refocus.logging_config import get_logger
from refocus.models import (
    AdaptationEvent,
    Formality,
    InterventionRecord,
    StrategyType,
    Tone,
    UserProfile,
)

logger = get_logger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Update requests
# ─────────────────────────────────────────────────────────────────────────────


class ProfileUpdate(ABC):
    """A change request the store applies to its owned profile."""

    @abstractmethod
    def apply_to(self, profile: UserProfile) -> None:
        ...


@dataclass(frozen=True)
class RecordOutcome(ProfileUpdate):
    """Append one outcome and refresh that strategy's effectiveness score."""

    record: InterventionRecord
    strategy_score: float

    def apply_to(self, profile: UserProfile) -> None:
        tracking = profile.behavior_tracking
        tracking.intervention_history.append(self.record)
        tracking.effectiveness_scores[self.record.style_used] = self.strategy_score


@dataclass(frozen=True)
class SwitchStrategy(ProfileUpdate):
    """Make event.to_strategy current and log the adaptation."""

    event: AdaptationEvent

    def apply_to(self, profile: UserProfile) -> None:
        tracking = profile.behavior_tracking
        tracking.current_strategy = self.event.to_strategy
        tracking.last_adapted = self.event.timestamp
        tracking.adaptations.append(self.event)


@dataclass(frozen=True)
class PruneHistory(ProfileUpdate):
    """Drop intervention records older than `before` (retention cleanup)."""

    before: datetime

    def apply_to(self, profile: UserProfile) -> None:
        tracking = profile.behavior_tracking
        tracking.intervention_history = [
            r for r in tracking.intervention_history if r.timestamp >= self.before
        ]


# ─────────────────────────────────────────────────────────────────────────────
# Stores
# ─────────────────────────────────────────────────────────────────────────────


class ProfileStore(ABC):
    """Owner of the user profile."""

    @abstractmethod
    def get(self) -> UserProfile | None:
        """Return a snapshot of the profile, or None if none exists."""

    @abstractmethod
    def set(self, profile: UserProfile) -> None:
        """Replace the owned profile."""

    def apply(self, update: ProfileUpdate) -> bool:
        """Apply an update request. Returns False when there is no profile."""
        profile = self._load()
        if profile is None:
            logger.debug("profile_update_skipped", update=type(update).__name__)
            return False
        update.apply_to(profile)
        self._save(profile)
        return True

    @abstractmethod
    def _load(self) -> UserProfile | None:
        """Return the owned profile itself (not a copy)."""

    @abstractmethod
    def _save(self, profile: UserProfile) -> None:
        ...


class InMemoryProfileStore(ProfileStore):
    def __init__(self, profile: UserProfile | None = None):
        self._profile = profile.snapshot() if profile else None

    def get(self) -> UserProfile | None:
        return self._profile.snapshot() if self._profile else None

    def set(self, profile: UserProfile) -> None:
        self._profile = profile.snapshot()

    def _load(self) -> UserProfile | None:
        return self._profile

    def _save(self, profile: UserProfile) -> None:
        self._profile = profile


class JsonProfileStore(ProfileStore):
    """Profile persisted as a JSON document, cached in memory after first read."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._cached: UserProfile | None = None

    def get(self) -> UserProfile | None:
        profile = self._load()
        return profile.snapshot() if profile else None

    def set(self, profile: UserProfile) -> None:
        self._save(profile.snapshot())

    def _load(self) -> UserProfile | None:
        if self._cached is not None:
            return self._cached
        if not self.path.exists():
            return None
        with open(self.path) as f:
            self._cached = UserProfile.from_dict(json.load(f))
        return self._cached

    def _save(self, profile: UserProfile) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w") as f:
            json.dump(profile.to_dict(), f, indent=2)
        os.replace(tmp_path, self.path)
        self._cached = profile

    def delete(self) -> bool:
        self._cached = None
        if self.path.exists():
            self.path.unlink()
            return True
        return False


def default_profile(name: str = "me", role: str = "developer") -> UserProfile:
    """Profile used before onboarding: accountability first, gentle friend tone."""
    return UserProfile.create_default(name=name, role=role)


__all__ = [
    "InMemoryProfileStore",
    "JsonProfileStore",
    "ProfileStore",
    "ProfileUpdate",
    "PruneHistory",
    "RecordOutcome",
    "SwitchStrategy",
    "default_profile",
]


# ─────────────────────────────────────────────────────────────────────────────
# CLI
# ─────────────────────────────────────────────────────────────────────────────


def main():
    from refocus.config import load_config

    parser = argparse.ArgumentParser(description="Refocus profile store")
    parser.add_argument("--action", required=True, choices=["show", "init", "reset"])
    parser.add_argument("--name", default="me")
    parser.add_argument("--role", default="developer")
    parser.add_argument("--strategy", choices=[s.value for s in StrategyType])
    parser.add_argument("--tone", choices=[t.value for t in Tone])
    parser.add_argument("--formality", choices=[f.value for f in Formality])
    args = parser.parse_args()

    config = load_config()
    store = JsonProfileStore(config.storage.resolve(config.storage.profile_path))
    result: dict[str, Any]

    if args.action == "show":
        profile = store.get()
        if profile is None:
            result = {"success": False, "error": "No profile. Run --action init first."}
        else:
            result = {"success": True, "profile": profile.to_dict()}

    elif args.action == "init":
        profile = default_profile(args.name, args.role)
        if args.strategy:
            profile.intervention_style.primary = StrategyType(args.strategy)
            profile.behavior_tracking.current_strategy = StrategyType(args.strategy)
        if args.tone:
            profile.communication.tone = Tone(args.tone)
        if args.formality:
            profile.communication.formality = Formality(args.formality)
        store.set(profile)
        result = {"success": True, "profile": profile.to_dict()}

    else:
        result = {"success": True, "deleted": store.delete()}

    print(json.dumps(result, indent=2))
    if not result.get("success"):
        sys.exit(1)


if __name__ == "__main__":
    main()

