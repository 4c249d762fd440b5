"""Pydantic models for catalog records, snapshots and API responses."""

from pydantic import BaseModel, ConfigDict, StrictInt, StrictStr
from typing import Optional, List
from datetime import datetime


class AppRecord(BaseModel):
    """A single catalog entry. Identity is ``appid`` alone."""
    model_config = ConfigDict(frozen=True)

    appid: int
    name: str = ""


class DiffResult(BaseModel):
    """Entries added and removed between two catalog lists, matched by appid."""
    added: List[AppRecord] = []
    removed: List[AppRecord] = []

    @property
    def is_empty(self) -> bool:
        return not self.added and not self.removed


class Snapshot(BaseModel):
    """The singleton persisted state: two most recent lists and their diff."""
    current_list: List[AppRecord] = []
    previous_list: List[AppRecord] = []
    last_updated: Optional[datetime] = None
    diff: DiffResult = DiffResult()

    @property
    def has_data(self) -> bool:
        return self.last_updated is not None


class RefreshReport(BaseModel):
    """Outcome of one successful refresh cycle."""
    snapshot: Snapshot
    first_sync: bool = False
    empty_fetch: bool = False
    issues: List[str] = []


# Wire format of the remote catalog: {"applist": {"apps": [...]}}
# No coercion: "10", true and 10.0 are not appids.

class RawAppEntry(BaseModel):
    appid: StrictInt
    name: StrictStr


class RawAppList(BaseModel):
    apps: List[RawAppEntry]


class AppListResponse(BaseModel):
    applist: RawAppList


class SnapshotSummary(BaseModel):
    """Dashboard statistics for the current snapshot."""
    has_data: bool
    total_apps: int = 0
    added_count: int = 0
    removed_count: int = 0
    last_updated: Optional[datetime] = None


class AppPage(BaseModel):
    """One page of the app browser."""
    total: int
    page: int
    limit: int
    apps: List[AppRecord] = []


class ChangesResponse(BaseModel):
    kind: str  # added, removed
    total: int
    apps: List[AppRecord] = []

