"""Service layer for fit-sync."""

from .account import AccountService
from .sync_manager import SyncManager, SyncPhase

__all__ = ["AccountService", "SyncManager", "SyncPhase"]
