"""Sync orchestrator: load -> fetch -> diff -> save as one refresh cycle.

At most one cycle is in flight. A refresh requested while a cycle runs
joins it and receives the same outcome, so concurrent requests produce a
single fetch at the transport. Cancelling a caller is honored only during
the fetch phase, and only when no other caller is waiting on the cycle;
once the save has started the cycle always runs to completion.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from src.api.schemas import DiffResult, RefreshReport, Snapshot
from src.catalog.base_fetcher import BaseCatalogFetcher
from src.db.snapshot_store import SnapshotStore
from src.errors import STAGE_LOAD, STAGE_SAVE, FetchError, StoreError, SyncError
from src.pipeline.change_detector import build_change_summary, diff_app_lists
from src.pipeline.normalizer import dedupe_records
from src.pipeline.validator import check_fetch, is_empty_fetch

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SyncOrchestrator:
    """Coordinates catalog refreshes against the singleton snapshot."""

    def __init__(
        self,
        fetcher: BaseCatalogFetcher,
        store: SnapshotStore,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.fetcher = fetcher
        self.store = store
        self._clock = clock or _utcnow
        self._inflight: Optional[asyncio.Task] = None
        self._waiters = 0
        self._persisting = False

    @property
    def is_refreshing(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    async def get_current_snapshot(self) -> Snapshot:
        """Return the last persisted snapshot without waiting on a refresh."""
        return await self.store.load()

    async def refresh(self) -> Snapshot:
        """Run (or join) a refresh cycle and return the new snapshot.

        Raises:
            SyncError: wrapping the FetchError or StoreError that stopped
                the cycle. On a fetch failure the stored snapshot is untouched.
        """
        report = await self.refresh_with_report()
        return report.snapshot

    async def refresh_with_report(self) -> RefreshReport:
        """Like refresh(), but also return the first-sync/empty-fetch flags."""
        task = self._inflight
        if task is None or task.done():
            task = asyncio.create_task(self._run_cycle())
            task.add_done_callback(self._clear_inflight)
            self._inflight = task
        else:
            logger.info("Refresh already in progress, joining it")

        self._waiters += 1
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            if self._waiters == 1 and not self._persisting and not task.done():
                logger.info("Refresh abandoned before save, cancelling fetch")
                task.cancel()
                # Later callers start a fresh cycle instead of joining this one
                self._clear_inflight(task)
            raise
        finally:
            self._waiters -= 1

    def _clear_inflight(self, task: asyncio.Task):
        if self._inflight is task:
            self._inflight = None
        if task.done() and not task.cancelled():
            # Mark the outcome retrieved even when every caller has gone away
            task.exception()

    async def _run_cycle(self) -> RefreshReport:
        try:
            current = await self.store.load()
        except StoreError as e:
            logger.error("Refresh aborted, could not load snapshot: %s", e)
            raise SyncError(e, STAGE_LOAD) from e
        previous = current.current_list

        try:
            fetched = dedupe_records(await self.fetcher.fetch())
        except FetchError as e:
            logger.warning("Refresh aborted, fetch failed (%s): %s", e.reason.value, e)
            raise SyncError(e) from e

        # No diff against an empty baseline, or the whole catalog reads as "added"
        first_sync = not previous
        diff = DiffResult() if first_sync else diff_app_lists(previous, fetched)

        issues = check_fetch(previous, fetched)
        for issue in issues:
            logger.warning("Fetch check: %s", issue)

        snapshot = Snapshot(
            current_list=fetched,
            previous_list=previous,
            last_updated=self._clock(),
            diff=diff,
        )

        self._persisting = True
        try:
            await self.store.save(snapshot)
        except StoreError as e:
            logger.error("Fetched %d apps but could not save them: %s", len(fetched), e)
            raise SyncError(e, STAGE_SAVE) from e
        finally:
            self._persisting = False

        summary = build_change_summary(diff, fetched)
        logger.info(
            "Refresh complete: %d apps, %d added, %d removed%s",
            summary["total_count"], summary["added_count"], summary["removed_count"],
            " (first sync)" if first_sync else "",
        )

        return RefreshReport(
            snapshot=snapshot,
            first_sync=first_sync,
            empty_fetch=is_empty_fetch(fetched),
            issues=issues,
        )
