"""Tests for refresh failure notices."""

from datetime import datetime, timezone

from src.api.schemas import Snapshot
from src.errors import STAGE_LOAD, FetchError, FetchReason, StoreError, SyncError
from src.resilience.fallback import (
    REASON_NO_DATA, REASON_NOT_SAVED, REASON_STALE, REASON_UNREADABLE, build_failure_notice,
)
from tests.helpers import apps

STORED = Snapshot(current_list=apps((1, "A")), last_updated=datetime(2024, 3, 1, tzinfo=timezone.utc))


def fetch_failure():
    return SyncError(FetchError("HTTP 502", FetchReason.STATUS, status_code=502))


class TestFailureNotice:
    def test_first_run(self):
        notice = build_failure_notice(fetch_failure(), Snapshot())
        assert notice["reason"] == REASON_NO_DATA
        assert notice["stale"] is False
        assert "No data yet" in notice["message"]

    def test_unknown_stored_state(self):
        assert build_failure_notice(fetch_failure(), None)["reason"] == REASON_NO_DATA

    def test_stale_data_retained(self):
        notice = build_failure_notice(fetch_failure(), STORED)
        assert notice["reason"] == REASON_STALE
        assert notice["stale"] is True
        assert "2024-03-01" in notice["message"]
        assert notice["error"] == "HTTP 502"

    def test_fetched_but_not_saved(self):
        notice = build_failure_notice(SyncError(StoreError("disk full")), STORED)
        assert notice["reason"] == REASON_NOT_SAVED
        assert "could not be saved" in notice["message"]

    def test_unreadable_store_is_not_reported_as_fetched(self):
        notice = build_failure_notice(SyncError(StoreError("database is locked"), STAGE_LOAD), None)
        assert notice["reason"] == REASON_UNREADABLE
        assert notice["stale"] is False
        assert "could not be read" in notice["message"]
        assert "fetched" not in notice["message"]
        assert notice["error"] == "database is locked"

    def test_notice_has_no_status_key(self):
        # Callers merge the notice into {"status": "failed", ...}
        for notice in (
            build_failure_notice(fetch_failure(), Snapshot()),
            build_failure_notice(fetch_failure(), STORED),
            build_failure_notice(SyncError(StoreError("disk full")), STORED),
            build_failure_notice(SyncError(StoreError("locked"), STAGE_LOAD), None),
        ):
            assert "status" not in notice
