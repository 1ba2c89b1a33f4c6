"""Local storage paths, schema setup and file helpers."""

import json
import os
import sqlite3
import tempfile
from pathlib import Path
from typing import Any

from ..config import DEFAULT_DATA_DIR

TRAININGS_FILE = "trainings.json"
BODYWEIGHT_FILE = "bodyweight.json"
DB_FILE = "fit_sync.db"


def get_data_dir(data_dir: Path | None = None) -> Path:
    """Get the data directory, creating it if needed."""
    if data_dir is None:
        data_dir = DEFAULT_DATA_DIR
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


def get_db_path(data_dir: Path | None = None) -> Path:
    """Get the key-value database file path."""
    return get_data_dir(data_dir) / DB_FILE


def init_db(db_path: Path | None = None) -> None:
    """Initialize the key-value database schema."""
    if db_path is None:
        db_path = get_db_path()

    conn = sqlite3.connect(db_path)
    try:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        conn.commit()
    finally:
        conn.close()


def write_json_atomic(path: Path, payload: Any) -> None:
    """Write JSON to ``path`` so readers never observe a partial file.

    The payload goes to a temporary file in the same directory which then
    replaces the target.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


def read_json(path: Path) -> Any:
    """Read a JSON file, returning None when it does not exist."""
    if not path.exists():
        return None
    with open(path, encoding="utf-8") as f:
        return json.load(f)
