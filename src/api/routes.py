"""API routes for the AppID tracker.

Provides endpoints for triggering refreshes, polling their results,
browsing the current app list and its changes, and exporting them.
"""

import logging
import time
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response

from src.api.schemas import AppPage, ChangesResponse, SnapshotSummary
from src.analytics import insights
from src.errors import StoreError, SyncError
from src.export.formatters import MEDIA_TYPES, export_apps, export_filename
from src.jobs.queue import JobQueue
from src.pipeline.change_detector import build_change_summary
from src.resilience.fallback import build_failure_notice
from src.sync.orchestrator import SyncOrchestrator

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api")

EXPORT_DATASETS = ("apps", "added", "removed")


def get_orchestrator(request: Request) -> SyncOrchestrator:
    return request.app.state.orchestrator


def get_job_queue(request: Request) -> JobQueue:
    return request.app.state.jobs


async def _run_refresh(orchestrator: SyncOrchestrator) -> dict:
    """Run one refresh and turn its outcome into a job result."""
    try:
        report = await orchestrator.refresh_with_report()
    except SyncError as e:
        try:
            stored = await orchestrator.get_current_snapshot()
        except StoreError:
            stored = None
        notice = build_failure_notice(e, stored)
        logger.warning("Refresh failed: %s", notice["message"])
        return {"status": "failed", **notice}

    snapshot = report.snapshot
    summary = build_change_summary(snapshot.diff, snapshot.current_list)
    return {
        "status": "completed",
        "first_sync": report.first_sync,
        "empty_fetch": report.empty_fetch,
        "issues": report.issues,
        "last_updated": snapshot.last_updated.isoformat(),
        "total": summary["total_count"],
        "added": summary["added_count"],
        "removed": summary["removed_count"],
    }


async def _load_snapshot(orchestrator: SyncOrchestrator):
    try:
        return await orchestrator.get_current_snapshot()
    except StoreError as e:
        logger.error("Could not load snapshot: %s", e)
        raise HTTPException(status_code=503, detail=e.message)


@router.post("/refresh")
async def start_refresh(
    orchestrator: SyncOrchestrator = Depends(get_orchestrator),
    jobs: JobQueue = Depends(get_job_queue),
):
    """Start a background refresh. Returns job_id for polling."""
    job_id = jobs.submit(lambda: _run_refresh(orchestrator))
    return {
        "job_id": job_id,
        "status": "queued",
        "poll_url": f"/api/refresh/{job_id}",
    }


@router.get("/refresh/{job_id}")
async def get_refresh_status(job_id: str, jobs: JobQueue = Depends(get_job_queue)):
    """Poll refresh job status."""
    status = jobs.get(job_id)
    if not status:
        raise HTTPException(status_code=404, detail="Job not found")
    return status


@router.get("/snapshot", response_model=SnapshotSummary)
async def get_snapshot_summary(orchestrator: SyncOrchestrator = Depends(get_orchestrator)):
    """Dashboard statistics for the last persisted snapshot."""
    snapshot = await _load_snapshot(orchestrator)
    return insights.get_summary(snapshot)


@router.get("/apps", response_model=AppPage)
async def list_apps(
    search: Optional[str] = None,
    sort_by: str = Query("name", pattern="^(name|appid)$"),
    order: str = Query("asc", pattern="^(asc|desc)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    orchestrator: SyncOrchestrator = Depends(get_orchestrator),
):
    """Browse the current app list with search and sorting."""
    snapshot = await _load_snapshot(orchestrator)
    matched = insights.search_apps(snapshot.current_list, search or "")
    ordered = insights.sort_apps(matched, sort_by, order)
    return AppPage(
        total=len(ordered),
        page=page,
        limit=limit,
        apps=insights.paginate(ordered, page, limit),
    )


@router.get("/changes", response_model=ChangesResponse)
async def list_changes(
    kind: str = Query("added", pattern="^(added|removed)$"),
    search: Optional[str] = None,
    orchestrator: SyncOrchestrator = Depends(get_orchestrator),
):
    """Apps added or removed by the last refresh."""
    snapshot = await _load_snapshot(orchestrator)
    apps = insights.search_apps(insights.get_changes(snapshot, kind), search or "")
    return ChangesResponse(kind=kind, total=len(apps), apps=apps)


@router.get("/export/{dataset}")
async def export_dataset(
    dataset: str,
    format: str = Query("json", pattern="^(json|csv|txt)$"),
    search: Optional[str] = None,
    orchestrator: SyncOrchestrator = Depends(get_orchestrator),
):
    """Download the current list, or one side of the diff, as a file."""
    if dataset not in EXPORT_DATASETS:
        raise HTTPException(status_code=404, detail=f"Unknown dataset '{dataset}'")

    snapshot = await _load_snapshot(orchestrator)
    apps = snapshot.current_list if dataset == "apps" else insights.get_changes(snapshot, dataset)
    apps = insights.search_apps(apps, search or "")

    filename = export_filename(dataset, format, int(time.time() * 1000))
    logger.info("Exporting %d apps to %s", len(apps), filename)
    return Response(
        content=export_apps(apps, format),
        media_type=MEDIA_TYPES[format],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/health")
async def health(
    orchestrator: SyncOrchestrator = Depends(get_orchestrator),
    jobs: JobQueue = Depends(get_job_queue),
):
    return {
        "ok": True,
        "refreshing": orchestrator.is_refreshing,
        "active_jobs": jobs.active_count(),
    }
