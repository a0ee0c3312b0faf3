"""SQLite key-value table holding serialized documents."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

logger = logging.getLogger(__name__)

# Stored in PRAGMA user_version.
SCHEMA_VERSION = 1

_KV_TABLE = """
CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT (datetime('now', 'localtime'))
)
"""


def open_database(db_path: str | Path) -> sqlite3.Connection:
    """Open (or create) the item database with the key-value table in place.

    Raises:
        sqlite3.DatabaseError: If the file exists but is not a usable database.
    """
    path = Path(db_path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    try:
        conn.execute("PRAGMA journal_mode=WAL")
        (version,) = conn.execute("PRAGMA user_version").fetchone()
        if version < SCHEMA_VERSION:
            with conn:
                conn.execute(_KV_TABLE)
                conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")
    except sqlite3.DatabaseError:
        conn.close()
        raise
    return conn


def quarantine(db_path: str | Path) -> Path | None:
    """Move an unreadable database file aside so a fresh one can be created.

    Returns the new location of the old file, or None if there was none.
    """
    path = Path(db_path).expanduser()
    if not path.exists():
        return None
    target = path.with_name(path.name + ".corrupt")
    n = 1
    while target.exists():
        target = path.with_name(f"{path.name}.corrupt{n}")
        n += 1
    path.rename(target)
    for suffix in ("-wal", "-shm"):
        side = path.with_name(path.name + suffix)
        if side.exists():
            side.unlink()
    logger.warning("Moved unreadable database %s to %s", path, target)
    return target


def read_value(conn: sqlite3.Connection, key: str) -> str | None:
    row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
    return row["value"] if row else None


def write_value(conn: sqlite3.Connection, key: str, value: str) -> None:
    """Replace the whole value stored under ``key``."""
    with conn:
        conn.execute(
            """INSERT OR REPLACE INTO kv_store (key, value, updated_at)
               VALUES (?, ?, datetime('now', 'localtime'))""",
            (key, value),
        )
