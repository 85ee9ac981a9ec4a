"""State - persistence seams for Refocus

Components:
    keyed_store.py: Process-local TTL store (cooldowns, alignment cache)
    profile_store.py: Owner of the UserProfile; applies explicit update requests
    commitment_store.py: Today's commitment and parked footnotes
    activity_store.py: SQLite activity and intervention log
    activity_logger.py: Snapshot stream -> de-duplicated activity records

Single writer: the daemon process. No cross-process locking.
"""

from refocus.state.activity_logger import ActivityLogger
from refocus.state.activity_store import ActivityStore
from refocus.state.commitment_store import (
    CommitmentStore,
    InMemoryCommitmentStore,
    JsonCommitmentStore,
)
from refocus.state.keyed_store import KeyedTTLStore
from refocus.state.profile_store import (
    InMemoryProfileStore,
    JsonProfileStore,
    ProfileStore,
    ProfileUpdate,
    PruneHistory,
    RecordOutcome,
    SwitchStrategy,
    default_profile,
)

__all__ = [
    "ActivityLogger",
    "ActivityStore",
    "CommitmentStore",
    "InMemoryCommitmentStore",
    "InMemoryProfileStore",
    "JsonCommitmentStore",
    "JsonProfileStore",
    "KeyedTTLStore",
    "ProfileStore",
    "ProfileUpdate",
    "PruneHistory",
    "RecordOutcome",
    "SwitchStrategy",
    "default_profile",
]
