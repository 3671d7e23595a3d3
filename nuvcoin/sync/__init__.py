"""
Synchronization package for nuvcoin.

Re-exports the local-first cache, its per-write lifecycle states and the
change bus so callers can import from `nuvcoin.sync` directly.
"""

from nuvcoin.sync.cache import (
    ConfirmedRemote,
    PendingLocal,
    PermanentLocal,
    Snapshot,
    SyncCache,
    WriteState,
)
from nuvcoin.sync.events import ChangeBus, ChangeEvent, ChangeSource

__all__ = [
    "ChangeBus",
    "ChangeEvent",
    "ChangeSource",
    "ConfirmedRemote",
    "PendingLocal",
    "PermanentLocal",
    "Snapshot",
    "SyncCache",
    "WriteState",
]
