"""Failure notices for refreshes that did not complete.

A failed refresh never discards the last good snapshot: it keeps being
served. The notice tells the user which situation they are in: no data
yet (first run), stale data retained (update failed), data fetched but
not saved (storage failed on write), or stored data unreadable (storage
failed on read, so nothing was fetched).
"""

from typing import Optional

from src.api.schemas import Snapshot
from src.errors import STAGE_LOAD, SyncError

REASON_NO_DATA = "no_data"
REASON_STALE = "stale"
REASON_NOT_SAVED = "not_saved"
REASON_UNREADABLE = "unreadable"


def build_failure_notice(error: SyncError, snapshot: Optional[Snapshot]) -> dict:
    """Describe a failed refresh for display, given the snapshot still stored.

    ``snapshot`` is None when the stored state itself could not be read.
    """
    has_data = snapshot is not None and snapshot.has_data

    if error.stage == STAGE_LOAD:
        return {
            "reason": REASON_UNREADABLE,
            "stale": has_data,
            "message": "Stored data could not be read, so no update was attempted. "
                       "Check the database and try again.",
            "error": error.cause.message,
        }

    if error.is_store_failure:
        return {
            "reason": REASON_NOT_SAVED,
            "stale": has_data,
            "message": "The app list was fetched but could not be saved. "
                       "The data shown is not current; try updating again.",
            "error": error.cause.message,
        }

    if not has_data:
        return {
            "reason": REASON_NO_DATA,
            "stale": False,
            "message": "No data yet: the app list could not be fetched.",
            "error": error.cause.message,
        }

    return {
        "reason": REASON_STALE,
        "stale": True,
        "message": f"Update failed. Showing data from {snapshot.last_updated.isoformat()}.",
        "last_updated": snapshot.last_updated.isoformat(),
        "error": error.cause.message,
    }
