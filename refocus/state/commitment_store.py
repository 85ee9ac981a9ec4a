"""
Tool: Commitment Store
Purpose: Hold the user's single daily commitment ("main thought") and its footnotes

A footnote is a distracting thought the user parked instead of chasing it.
Commitments are keyed by local date; only today's is "current".

Usage:
    python -m refocus.state.commitment_store --action set --text "Ship the billing export"
    python -m refocus.state.commitment_store --action current
    python -m refocus.state.commitment_store --action footnote --text "look into the new linter"
    python -m refocus.state.commitment_store --action complete

Dependencies:
    - json (stdlib)

Output:
    JSON result with success status and data
"""

import argparse
import json
import os
import sys
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import date, datetime
from pathlib import Path

from refocus.logging_config import get_logger
from refocus.models import DailyCommitment

logger = get_logger(__name__)


class CommitmentStore(ABC):
    """Source of the current daily commitment."""

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self._clock = clock

    def _today(self) -> str:
        return self._clock().date().isoformat()

    @abstractmethod
    def _read_all(self) -> dict[str, DailyCommitment]:
        ...

    @abstractmethod
    def _write_all(self, commitments: dict[str, DailyCommitment]) -> None:
        ...

    def get_current(self) -> DailyCommitment | None:
        return self._read_all().get(self._today())

    def get_for_date(self, day: date | str) -> DailyCommitment | None:
        key = day if isinstance(day, str) else day.isoformat()
        return self._read_all().get(key)

    def set_today(self, main_thought: str) -> DailyCommitment:
        """Declare today's commitment, keeping any footnotes already parked."""
        commitments = self._read_all()
        today = self._today()
        existing = commitments.get(today)
        commitment = DailyCommitment(
            date=today,
            main_thought=main_thought.strip(),
            footnotes=existing.footnotes if existing else [],
            created_at=self._clock(),
        )
        commitments[today] = commitment
        self._write_all(commitments)
        logger.info("commitment_set", date=today)
        return commitment

    def add_footnote(self, text: str) -> bool:
        """Park a distracting thought on today's commitment. False if none is set."""
        commitments = self._read_all()
        current = commitments.get(self._today())
        if current is None or not text.strip():
            return False
        current.footnotes.append(text.strip())
        self._write_all(commitments)
        return True

    def complete(self) -> bool:
        commitments = self._read_all()
        current = commitments.get(self._today())
        if current is None:
            return False
        current.completed_at = self._clock()
        self._write_all(commitments)
        return True

    def current_text(self) -> str:
        """Today's commitment text, or "" when none is declared."""
        current = self.get_current()
        return current.main_thought if current else ""


class InMemoryCommitmentStore(CommitmentStore):
    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        super().__init__(clock)
        self._commitments: dict[str, DailyCommitment] = {}

    def _read_all(self) -> dict[str, DailyCommitment]:
        return self._commitments

    def _write_all(self, commitments: dict[str, DailyCommitment]) -> None:
        self._commitments = commitments


class JsonCommitmentStore(CommitmentStore):
    def __init__(self, path: Path, clock: Callable[[], datetime] = datetime.now):
        super().__init__(clock)
        self.path = Path(path)

    def _read_all(self) -> dict[str, DailyCommitment]:
        if not self.path.exists():
            return {}
        with open(self.path) as f:
            raw = json.load(f)
        return {day: DailyCommitment.from_dict(data) for day, data in raw.items()}

    def _write_all(self, commitments: dict[str, DailyCommitment]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w") as f:
            json.dump({day: c.to_dict() for day, c in commitments.items()}, f, indent=2)
        os.replace(tmp_path, self.path)


__all__ = ["CommitmentStore", "InMemoryCommitmentStore", "JsonCommitmentStore"]


def main():
    from refocus.config import load_config

    parser = argparse.ArgumentParser(description="Refocus daily commitment")
    parser.add_argument(
        "--action", required=True, choices=["set", "current", "footnote", "complete"]
    )
    parser.add_argument("--text", help="Commitment or footnote text")
    args = parser.parse_args()

    config = load_config()
    store = JsonCommitmentStore(config.storage.resolve(config.storage.commitments_path))

    if args.action == "set":
        if not args.text:
            result = {"success": False, "error": "--text is required"}
        else:
            result = {"success": True, "commitment": store.set_today(args.text).to_dict()}
    elif args.action == "current":
        current = store.get_current()
        result = {"success": True, "commitment": current.to_dict() if current else None}
    elif args.action == "footnote":
        added = store.add_footnote(args.text or "")
        result = {"success": added}
        if not added:
            result["error"] = "No commitment set for today (or empty footnote)"
    else:
        done = store.complete()
        result = {"success": done}
        if not done:
            result["error"] = "No commitment set for today"

    print(json.dumps(result, indent=2))
    if not result.get("success"):
        sys.exit(1)


if __name__ == "__main__":
    main()
