"""Local sync state model."""

from dataclasses import dataclass
from datetime import datetime

from .timestamps import format_timestamp, parse_timestamp


@dataclass
class SyncState:
    """Whether local data owes the server a push.

    ``is_dirty`` stays true from the first unsynced local mutation until a
    push is confirmed. ``last_successful_sync_at`` is informational.
    """

    is_dirty: bool = False
    last_successful_sync_at: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "isDirty": self.is_dirty,
            "lastSuccessfulSyncAt": (
                format_timestamp(self.last_successful_sync_at)
                if self.last_successful_sync_at
                else None
            ),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SyncState":
        last_sync = data.get("lastSuccessfulSyncAt")
        return cls(
            is_dirty=bool(data.get("isDirty", False)),
            last_successful_sync_at=parse_timestamp(last_sync) if last_sync else None,
        )
