"""Durable record of whether local data is ahead of the remote row."""

import logging
from datetime import datetime

from ..models.sync_state import SyncState
from ..models.timestamps import utcnow
from .kv import KeyValueStore

logger = logging.getLogger(__name__)

SYNC_STATE_KEY = "localSyncState"


class SyncStateStore:
    """Load and save the sync state blob.

    The dirty flag is committed before any push starts and cleared only
    after the remote write is confirmed, so a crash in between leaves it
    set and the next start retries the push.
    """

    def __init__(self, kv: KeyValueStore):
        self.kv = kv

    def load(self) -> SyncState:
        data = self.kv.get(SYNC_STATE_KEY)
        if not isinstance(data, dict):
            return SyncState()
        try:
            return SyncState.from_dict(data)
        except (TypeError, ValueError):
            logger.warning("sync_state_unreadable falling back to clean state")
            return SyncState()

    def save(self, state: SyncState) -> None:
        self.kv.set(SYNC_STATE_KEY, state.to_dict())

    def reset(self) -> None:
        self.kv.delete(SYNC_STATE_KEY)

    def mark_dirty(self) -> SyncState:
        """Set the dirty flag, returning the saved state."""
        state = self.load()
        if not state.is_dirty:
            logger.info("mark_dirty is_dirty=true")
        state.is_dirty = True
        self.save(state)
        return state

    def mark_synced(self, at: datetime | None = None) -> SyncState:
        """Clear the dirty flag after a confirmed push."""
        state = self.load()
        state.is_dirty = False
        state.last_successful_sync_at = at or utcnow()
        self.save(state)
        return state

    def record_sync(self, at: datetime | None = None) -> SyncState:
        """Record a successful sync without touching the dirty flag."""
        state = self.load()
        state.last_successful_sync_at = at or utcnow()
        self.save(state)
        return state
