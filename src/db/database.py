"""SQLite database setup and table creation."""

import aiosqlite
import os
from typing import Optional

DB_PATH = os.environ.get("APPID_TRACKER_DB", "appid_tracker.db")


async def get_db(path: Optional[str] = None) -> aiosqlite.Connection:
    db = await aiosqlite.connect(path or DB_PATH)
    db.row_factory = aiosqlite.Row
    await db.execute("PRAGMA journal_mode=WAL")
    return db


async def init_db(path: Optional[str] = None):
    """Create tables on startup if they don't exist."""
    db = await get_db(path)
    try:
        await db.executescript("""
            CREATE TABLE IF NOT EXISTS app_snapshots (
                key TEXT PRIMARY KEY,
                payload TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );
        """)
        await db.commit()
    finally:
        await db.close()
