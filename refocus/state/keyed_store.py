"""
Keyed TTL Store

Process-local key/value store whose entries expire after a per-entry TTL.
Backs the intervention cooldowns and the alignment cache.

Usage:
    from refocus.state.keyed_store import KeyedTTLStore

    cooldowns = KeyedTTLStore()
    cooldowns.set("planning_loop", now, ttl_seconds=20 * 60)
    if cooldowns.get("planning_loop") is None:
        ...  # cooldown elapsed

Entries are lost when the process exits.

Dependencies:
    - stdlib only
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any


@dataclass
class _Entry:
    value: Any
    expires_at: datetime


class KeyedTTLStore:
    """Dict-like store with per-key expiry.

    Args:
        clock: Returns the current time. Injected so tests control expiry.
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self._clock = clock
        self._entries: dict[str, _Entry] = {}

    def set(self, key: str, value: Any, ttl_seconds: float, now: datetime | None = None) -> None:
        now = now or self._clock()
        self._entries[key] = _Entry(value=value, expires_at=now + timedelta(seconds=ttl_seconds))

    def get(self, key: str, now: datetime | None = None) -> Any:
        """Return the live value for key, or None if absent or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        now = now or self._clock()
        if now >= entry.expires_at:
            del self._entries[key]
            return None
        return entry.value

    def contains(self, key: str, now: datetime | None = None) -> bool:
        return self.get(key, now) is not None

    def remaining_seconds(self, key: str, now: datetime | None = None) -> float:
        """Seconds until key expires; 0 when absent or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return 0.0
        now = now or self._clock()
        return max(0.0, (entry.expires_at - now).total_seconds())

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def evict_expired(self, now: datetime | None = None) -> int:
        """Drop expired entries. Returns how many were removed."""
        now = now or self._clock()
        expired = [k for k, e in self._entries.items() if now >= e.expires_at]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["KeyedTTLStore"]
