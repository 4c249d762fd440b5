"""Standalone refresh script for cron or CI schedulers.

Runs one full refresh cycle (load → fetch → diff → save), logs the
outcome, optionally writes the added/removed apps to export files, then
exits. Exits non-zero when the refresh fails.
"""

import argparse
import asyncio
import logging
import os
import sys
import time

from dotenv import load_dotenv

load_dotenv()

from src.catalog.fetcher_factory import create_fetcher
from src.db.snapshot_store import SnapshotStore
from src.errors import StoreError, SyncError
from src.export.formatters import EXPORTERS, export_apps, export_filename
from src.resilience.fallback import build_failure_notice
from src.sync.orchestrator import SyncOrchestrator

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("refresh_catalog")


def write_exports(snapshot, out_dir: str, fmt: str):
    os.makedirs(out_dir, exist_ok=True)
    stamp = int(time.time() * 1000)
    for dataset, apps in (("added", snapshot.diff.added), ("removed", snapshot.diff.removed)):
        path = os.path.join(out_dir, export_filename(dataset, fmt, stamp))
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(export_apps(apps, fmt))
        logger.info("Wrote %d %s apps to %s", len(apps), dataset, path)


async def run_refresh(db_path=None):
    orchestrator = SyncOrchestrator(create_fetcher("steam"), SnapshotStore(db_path))
    try:
        return await orchestrator.refresh_with_report()
    except SyncError as e:
        try:
            stored = await orchestrator.get_current_snapshot()
        except StoreError:
            stored = None
        notice = build_failure_notice(e, stored)
        logger.error("%s (%s)", notice["message"], notice["error"])
        return None


def main(argv=None):
    parser = argparse.ArgumentParser(description="Refresh the Steam app list snapshot.")
    parser.add_argument("--db", help="SQLite database path (default: $APPID_TRACKER_DB)")
    parser.add_argument("--export-dir", help="Write added/removed apps to this directory")
    parser.add_argument("--format", choices=sorted(EXPORTERS), default="json", help="Export format")
    args = parser.parse_args(argv)

    logger.info("Starting catalog refresh")
    report = asyncio.run(run_refresh(args.db))
    if report is None:
        sys.exit(1)

    snapshot = report.snapshot
    logger.info(
        "Refresh complete: %d apps, %d added, %d removed",
        len(snapshot.current_list), len(snapshot.diff.added), len(snapshot.diff.removed),
    )
    if report.empty_fetch:
        logger.warning("The catalog came back empty; check the upstream service")

    if args.export_dir:
        write_exports(snapshot, args.export_dir, args.format)


if __name__ == "__main__":
    main()
