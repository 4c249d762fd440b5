"""AppID Tracker — Steam app catalog snapshots with add/remove diffs.

FastAPI application entry point. Wires the catalog fetcher, snapshot
store and sync orchestrator together and serves the API.
"""

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI

load_dotenv()

from src.api.routes import router
from src.catalog.fetcher_factory import create_fetcher
from src.db.database import init_db
from src.db.snapshot_store import SnapshotStore
from src.jobs.queue import JobQueue
from src.sync.orchestrator import SyncOrchestrator

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    logging.getLogger(__name__).info("Database initialized")
    app.state.orchestrator = SyncOrchestrator(create_fetcher("steam"), SnapshotStore())
    app.state.jobs = JobQueue()
    yield


app = FastAPI(
    title="AppID Tracker",
    description="Tracks the Steam app catalog and reports apps added or removed between refreshes",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(router)
