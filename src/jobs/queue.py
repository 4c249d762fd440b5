"""In-memory queue for background refresh jobs.

POST /api/refresh submits a job and returns its id at once; the client
polls for the outcome. Jobs move through queued → running →
completed/failed. Several jobs may be live at the same time, but they all
share the orchestrator's single in-flight refresh cycle.
"""

import asyncio
import uuid
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Optional

logger = logging.getLogger(__name__)

QUEUED = "queued"
RUNNING = "running"
COMPLETED = "completed"
FAILED = "failed"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class JobQueue:
    """Tracks background jobs and their results by job_id."""

    def __init__(self):
        self._jobs: Dict[str, Dict[str, Any]] = {}
        self._tasks: Dict[str, asyncio.Task] = {}

    def submit(self, job_factory: Callable[[], Awaitable[dict]]) -> str:
        """Start ``job_factory()`` in the background. Returns the job_id.

        A result dict whose ``status`` is "failed" marks the job failed.
        """
        job_id = uuid.uuid4().hex
        self._jobs[job_id] = {
            "job_id": job_id,
            "status": QUEUED,
            "created_at": _now(),
            "started_at": None,
            "completed_at": None,
            "error": None,
            "result": None,
        }
        task = asyncio.create_task(self._execute(job_id, job_factory))
        self._tasks[job_id] = task
        task.add_done_callback(lambda _: self._tasks.pop(job_id, None))
        logger.info("Job %s queued", job_id)
        return job_id

    async def _execute(self, job_id: str, job_factory: Callable[[], Awaitable[dict]]):
        job = self._jobs[job_id]
        job["status"] = RUNNING
        job["started_at"] = _now()

        try:
            result = await job_factory()
            job["result"] = result
            if isinstance(result, dict) and result.get("status") == FAILED:
                job["status"] = FAILED
                job["error"] = result.get("message")
                logger.warning("Job %s failed: %s", job_id, job["error"])
            else:
                job["status"] = COMPLETED
                logger.info("Job %s completed", job_id)
        except asyncio.CancelledError:
            job["status"] = FAILED
            job["error"] = "cancelled"
            logger.warning("Job %s cancelled", job_id)
            raise
        except Exception as e:
            job["status"] = FAILED
            job["error"] = str(e)
            logger.error("Job %s failed: %s", job_id, e, exc_info=True)
        finally:
            job["completed_at"] = _now()

    def get(self, job_id: str) -> Optional[dict]:
        return self._jobs.get(job_id)

    def active_count(self) -> int:
        return sum(1 for j in self._jobs.values() if j["status"] in (QUEUED, RUNNING))

    async def wait(self, job_id: str):
        """Block until the job has finished. Returns at once if it already has."""
        task = self._tasks.get(job_id)
        if task is not None:
            await asyncio.wait({task})
