"""Local persistence layer for fit-sync."""

from .engine import get_data_dir, get_db_path, init_db
from .kv import KeyValueStore
from .local_store import ChangeKind, ChangeOrigin, LocalStore, StoreChange
from .sync_state import SyncStateStore

__all__ = [
    "ChangeKind",
    "ChangeOrigin",
    "KeyValueStore",
    "LocalStore",
    "StoreChange",
    "SyncStateStore",
    "get_data_dir",
    "get_db_path",
    "init_db",
]
