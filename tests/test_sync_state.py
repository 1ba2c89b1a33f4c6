"""Tests for the durable sync state."""

from datetime import datetime, timezone

from fit_sync.store import KeyValueStore, SyncStateStore
from fit_sync.store.sync_state import SYNC_STATE_KEY


def test_fresh_state_is_clean(sync_state):
    state = sync_state.load()
    assert not state.is_dirty
    assert state.last_successful_sync_at is None


def test_dirty_flag_survives_restart(kv, sync_state):
    sync_state.mark_dirty()

    reopened = SyncStateStore(KeyValueStore(kv.db_path))

    assert reopened.load().is_dirty


def test_mark_synced_clears_dirty(sync_state):
    at = datetime(2025, 9, 1, 12, tzinfo=timezone.utc)
    sync_state.mark_dirty()
    sync_state.mark_synced(at)

    state = sync_state.load()
    assert not state.is_dirty
    assert state.last_successful_sync_at == at


def test_record_sync_keeps_dirty_flag(sync_state):
    sync_state.mark_dirty()
    sync_state.record_sync()
    state = sync_state.load()
    assert state.is_dirty
    assert state.last_successful_sync_at is not None


def test_reset(sync_state):
    sync_state.mark_dirty()
    sync_state.reset()
    assert not sync_state.load().is_dirty


def test_unreadable_blob_is_clean(kv, sync_state):
    kv.set(SYNC_STATE_KEY, "not a dict")
    assert not sync_state.load().is_dirty


def test_database_corrupted_while_running(kv, sync_state):
    sync_state.mark_dirty()
    kv.db_path.write_bytes(b"this is not a sqlite database\n" * 200)

    assert not sync_state.load().is_dirty

    sync_state.mark_dirty()
    assert SyncStateStore(KeyValueStore(kv.db_path)).load().is_dirty
