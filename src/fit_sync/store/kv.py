"""Small persistent key-value store backed by SQLite."""

import json
import logging
import os
import sqlite3
from pathlib import Path
from typing import Any

from .engine import get_db_path, init_db

logger = logging.getLogger(__name__)

CORRUPT_SUFFIX = ".corrupt"


class KeyValueStore:
    """Durable JSON values keyed by name.

    Every write commits before returning, so a value that was saved
    survives a process crash. A database file that SQLite cannot read is
    moved aside and replaced by an empty one; lookups then return their
    defaults.
    """

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()
        try:
            init_db(self.db_path)
        except sqlite3.OperationalError:
            # Locked or unwritable: not corruption, let the caller see it.
            raise
        except sqlite3.DatabaseError as e:
            self._recover(e)

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path)

    def _recover(self, error: sqlite3.DatabaseError) -> None:
        """Move an unreadable database aside and start from an empty one."""
        corrupt_path = self.db_path.with_name(self.db_path.name + CORRUPT_SUFFIX)
        logger.error(
            "kv_database_corrupt path=%s moved_to=%s error=%s",
            self.db_path.name,
            corrupt_path.name,
            error,
        )
        os.replace(self.db_path, corrupt_path)
        init_db(self.db_path)

    def get(self, key: str, default: Any = None) -> Any:
        """Get the decoded value for ``key``.

        A value that no longer decodes is reported and treated as absent.
        """
        try:
            row = self._select(key)
        except sqlite3.OperationalError:
            raise
        except sqlite3.DatabaseError as e:
            self._recover(e)
            return default

        if row is None:
            return default
        try:
            return json.loads(row[0])
        except json.JSONDecodeError:
            logger.warning("kv_decode_failed key=%s", key)
            return default

    def _select(self, key: str) -> tuple | None:
        conn = self._connect()
        try:
            return conn.execute(
                "SELECT value FROM kv_store WHERE key = ?", (key,)
            ).fetchone()
        finally:
            conn.close()

    def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        try:
            self._upsert(key, value)
        except sqlite3.OperationalError:
            raise
        except sqlite3.DatabaseError as e:
            self._recover(e)
            self._upsert(key, value)

    def _upsert(self, key: str, value: Any) -> None:
        conn = self._connect()
        try:
            conn.execute(
                """
                INSERT INTO kv_store (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (key, json.dumps(value)),
            )
            conn.commit()
        finally:
            conn.close()

    def delete(self, key: str) -> None:
        try:
            self._delete(key)
        except sqlite3.OperationalError:
            raise
        except sqlite3.DatabaseError as e:
            # The recreated database holds no keys at all.
            self._recover(e)

    def _delete(self, key: str) -> None:
        conn = self._connect()
        try:
            conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            conn.commit()
        finally:
            conn.close()
