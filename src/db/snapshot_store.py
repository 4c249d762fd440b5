"""Singleton snapshot persistence.

Exactly one snapshot row exists per installation, keyed by SNAPSHOT_KEY.
``save`` replaces the whole row in a single transaction, so a failed write
leaves the previous snapshot in place; there is no partial-field update.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

import aiosqlite
from pydantic import ValidationError

from src.api.schemas import Snapshot
from src.db.database import get_db, init_db
from src.errors import StoreError

logger = logging.getLogger(__name__)

SNAPSHOT_KEY = "main"


def empty_snapshot() -> Snapshot:
    """The snapshot seen before the first successful sync."""
    return Snapshot()


class SnapshotStore:
    """Load/replace access to the singleton snapshot row."""

    def __init__(self, db_path: Optional[str] = None, key: str = SNAPSHOT_KEY):
        self.db_path = db_path
        self.key = key
        self._schema_ready = False

    async def _ensure_schema(self):
        if not self._schema_ready:
            await init_db(self.db_path)
            self._schema_ready = True

    async def get_raw(self) -> Optional[str]:
        """Return the stored payload exactly as persisted, or None if absent."""
        try:
            await self._ensure_schema()
            db = await get_db(self.db_path)
            try:
                cursor = await db.execute(
                    "SELECT payload FROM app_snapshots WHERE key = ?", (self.key,)
                )
                row = await cursor.fetchone()
            finally:
                await db.close()
        except (aiosqlite.Error, OSError) as e:
            raise StoreError(f"Could not read snapshot: {e}", {"key": self.key}, e) from e

        return row[0] if row else None

    async def load(self) -> Snapshot:
        """Load the stored snapshot, or an empty one if none was saved yet."""
        payload = await self.get_raw()
        if payload is None:
            return empty_snapshot()

        try:
            return Snapshot.model_validate_json(payload)
        except ValidationError as e:
            raise StoreError("Stored snapshot is unreadable", {"key": self.key}, e) from e

    async def save(self, snapshot: Snapshot):
        """Replace the stored snapshot with ``snapshot``."""
        payload = snapshot.model_dump_json()
        now = datetime.now(timezone.utc).isoformat()

        try:
            await self._ensure_schema()
            db = await get_db(self.db_path)
            try:
                await db.execute(
                    """INSERT INTO app_snapshots (key, payload, updated_at)
                       VALUES (?, ?, ?)
                       ON CONFLICT(key) DO UPDATE SET
                        payload=excluded.payload, updated_at=excluded.updated_at""",
                    (self.key, payload, now),
                )
                await db.commit()
            except BaseException:
                await db.rollback()
                raise
            finally:
                await db.close()
        except (aiosqlite.Error, OSError) as e:
            raise StoreError(f"Could not save snapshot: {e}", {"key": self.key}, e) from e

        logger.info(
            "Saved snapshot '%s' (%d apps, %d bytes)",
            self.key, len(snapshot.current_list), len(payload),
        )
